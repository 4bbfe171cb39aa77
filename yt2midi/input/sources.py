"""Local upload handling."""

import logging
import mimetypes
from pathlib import Path
from typing import Iterable, List, Optional, Union

from ..core import AudioSource, NoAudioFilesError, SourceOrigin
from ..core.constants import AUDIO_EXTENSIONS, AUDIO_MEDIA_TYPES

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def is_audio_file(name: str, media_type: Optional[str] = None) -> bool:
    """
    Check if a file is a supported audio format.

    The declared media type wins; the file extension is the fallback.
    """
    if media_type is None:
        media_type, _ = mimetypes.guess_type(name)
    if media_type and media_type.lower() in AUDIO_MEDIA_TYPES:
        return True
    extension = Path(name).suffix.lower().lstrip(".")
    return extension in AUDIO_EXTENSIONS


def filter_audio_files(paths: Iterable[PathLike]) -> List[Path]:
    """
    Keep only recognised audio files.

    Non-audio entries are dropped with a single count-based warning.

    Raises:
        NoAudioFilesError: If nothing recognisable is left
    """
    paths = [Path(p) for p in paths]
    audio_files = [p for p in paths if is_audio_file(p.name)]

    if not audio_files:
        raise NoAudioFilesError(
            "Please select valid audio files (MP3, WAV, FLAC, M4A, OGG, etc.)"
        )

    skipped = len(paths) - len(audio_files)
    if skipped:
        logger.warning("Skipped %d non-audio file(s)", skipped)

    return audio_files


def load_local_file(path: PathLike) -> AudioSource:
    """
    Read a local file into an AudioSource.

    Raises:
        FileNotFoundError: If the file doesn't exist
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Audio file not found: {path}")
    return AudioSource(
        origin=SourceOrigin.LOCAL_UPLOAD,
        raw_bytes=path.read_bytes(),
        suggested_name=path.name,
        location=str(path),
    )
