"""Packaging of conversion results for delivery."""

import io
import logging
import zipfile
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Sequence, Set, Tuple

from ..core import ConversionResult
from ..core.constants import DEFAULT_ARCHIVE_NAME
from .naming import companion_audio_name, sanitize_filename, unique_name

logger = logging.getLogger(__name__)

NamedBlob = Tuple[str, bytes]


class DeliveryKind(Enum):
    """How results are handed to the user."""

    EMPTY = "empty"
    SINGLE = "single"
    INDIVIDUAL = "individual"
    ARCHIVE = "archive"


@dataclass
class Delivery:
    """Named files ready to be saved."""

    kind: DeliveryKind
    files: List[NamedBlob] = field(default_factory=list)

    @property
    def names(self) -> List[str]:
        return [name for name, _ in self.files]

    def write_to(self, directory: Path) -> List[Path]:
        """Write every file into directory, creating it if needed."""
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        written = []
        for name, data in self.files:
            path = directory / name
            path.write_bytes(data)
            written.append(path)
        return written


def archive_filename(name: Optional[str]) -> str:
    """Sanitized .zip name, falling back to the default."""
    return sanitize_filename(name or DEFAULT_ARCHIVE_NAME, suffix=".zip")


def build_archive(entries: Sequence[NamedBlob]) -> bytes:
    """Zip named blobs into one deflate-compressed archive."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for name, data in entries:
            archive.writestr(name, data)
    return buffer.getvalue()


def build_delivery(
    results: Sequence[ConversionResult],
    archive_output: bool = False,
    archive_name: Optional[str] = None,
    include_original: bool = False,
) -> Delivery:
    """
    Decide how to deliver a batch's results.

    Args:
        results: Successful conversions in batch order
        archive_output: Bundle several results into one zip
        archive_name: Name for the zip (sanitized, .zip suffixed)
        include_original: Also store each retained source audio in the zip

    Returns:
        A single file, every file individually, or one archive
    """
    if not results:
        return Delivery(kind=DeliveryKind.EMPTY)

    if len(results) == 1:
        result = results[0]
        return Delivery(
            kind=DeliveryKind.SINGLE,
            files=[(result.output_name, result.midi_bytes)],
        )

    # Names are unique within one delivery
    taken: Set[str] = set()
    midi_files = [(unique_name(r.output_name, taken), r.midi_bytes) for r in results]
    if not archive_output:
        return Delivery(kind=DeliveryKind.INDIVIDUAL, files=midi_files)

    entries = list(midi_files)
    if include_original:
        for result, (midi_name, _) in zip(results, midi_files):
            if result.source_bytes is None:
                logger.warning("No original audio retained for %s", midi_name)
                continue
            audio_name = unique_name(companion_audio_name(midi_name), taken)
            entries.append((audio_name, result.source_bytes))

    name = archive_filename(archive_name)
    logger.info("Packaged %d file(s) into %s", len(entries), name)
    return Delivery(kind=DeliveryKind.ARCHIVE, files=[(name, build_archive(entries))])
