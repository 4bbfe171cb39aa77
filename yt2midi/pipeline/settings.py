"""Conversion settings shared by every item of a batch."""

import json
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from ..core import InvalidConfigurationError
from ..core.constants import DEFAULT_ARCHIVE_NAME


@dataclass
class ConversionSettings:
    """Options for one conversion run.

    Attributes:
        start_time: Trim start in seconds (default: 0)
        end_time: Trim end in seconds, 0 = to the end (default: 0)
        max_note_duration: Longest note kept in seconds, None = no limit
        enable_duration_filter: Apply max_note_duration (default: True)
        archive_output: Bundle several outputs into one zip (default: False)
        archive_name: Name of the zip (default: "midi_files")
        keep_original_audio: Retain source bytes with each result (default: False)
        include_original_in_archive: Store retained audio in the zip (default: False)
        custom_title: Output name override, None = use the source names
        normalize_audio: Peak-normalize samples before transcription (default: False)
    """

    start_time: float = 0.0
    end_time: float = 0.0
    max_note_duration: Optional[float] = None
    enable_duration_filter: bool = True
    archive_output: bool = False
    archive_name: str = DEFAULT_ARCHIVE_NAME
    keep_original_audio: bool = False
    include_original_in_archive: bool = False
    custom_title: Optional[str] = None
    normalize_audio: bool = False

    @property
    def trim_range(self) -> Optional[Tuple[float, float]]:
        """(start, end) when trimming is requested, else None."""
        if self.start_time > 0 or self.end_time > 0:
            return (self.start_time, self.end_time)
        return None

    def validate(self) -> "ConversionSettings":
        """
        Check option consistency.

        Raises:
            InvalidConfigurationError: On the first invalid option
        """
        if self.start_time < 0:
            raise InvalidConfigurationError(
                f"start_time must be >= 0, got {self.start_time}"
            )
        if self.end_time < 0:
            raise InvalidConfigurationError(
                f"end_time must be >= 0 (0 = to end), got {self.end_time}"
            )
        if self.end_time > 0 and self.end_time <= self.start_time:
            raise InvalidConfigurationError(
                f"end_time ({self.end_time}) must be after start_time ({self.start_time})"
            )
        if self.max_note_duration is not None and self.max_note_duration <= 0:
            raise InvalidConfigurationError(
                f"max_note_duration must be positive, got {self.max_note_duration}"
            )
        if self.include_original_in_archive and not self.keep_original_audio:
            raise InvalidConfigurationError(
                "Including original audio in the archive requires keep_original_audio"
            )
        if self.custom_title is not None and not self.custom_title.strip():
            self.custom_title = None
        return self

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConversionSettings":
        """Build settings from a mapping, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise InvalidConfigurationError(
                f"Unknown settings: {', '.join(sorted(unknown))}"
            )
        return cls(**data)

    @classmethod
    def from_json_file(cls, path: Path) -> "ConversionSettings":
        """Load settings from a JSON object on disk."""
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise InvalidConfigurationError(f"Cannot read settings file {path}: {e}") from e
        if not isinstance(data, dict):
            raise InvalidConfigurationError(f"Settings file {path} must hold a JSON object")
        return cls.from_dict(data)
