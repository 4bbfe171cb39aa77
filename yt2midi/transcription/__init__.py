"""Transcription layer - Note-level detection from audio.

The model is treated as an opaque capability (``Transcriber``) so the
pipeline can run against the neural piano model or a deterministic fake.
"""

from .base import Transcriber
from .piano import PianoTranscriber, default_device, get_default_transcriber

__all__ = [
    "Transcriber",
    "PianoTranscriber",
    "default_device",
    "get_default_transcriber",
]
