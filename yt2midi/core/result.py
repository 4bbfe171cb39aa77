"""Per-item outcomes of a conversion batch."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ConversionResult:
    """One successfully converted source."""

    output_name: str  # Sanitized, .mid suffixed
    midi_bytes: bytes
    note_count: int
    duration: float = 0.0  # End of the last note, seconds
    source_name: str = ""
    source_bytes: Optional[bytes] = None  # Only kept when original audio is retained


@dataclass(frozen=True)
class ItemError:
    """One source that failed somewhere in the pipeline."""

    source_name: str
    error_kind: str
    message: str

    def __str__(self) -> str:
        return f"{self.source_name}: {self.message} ({self.error_kind})"
