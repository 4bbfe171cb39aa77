"""Core types and constants for yt2midi."""

from .note import NoteEvent
from .audio import AudioSource, PcmBuffer, SourceOrigin
from .result import ConversionResult, ItemError
from .constants import (
    PITCH_NAMES,
    MODEL_SR,
    DEFAULT_TEMPO,
    DEFAULT_VELOCITY,
)
from .errors import (
    ConversionError,
    DecodeError,
    InvalidTrimRangeError,
    TranscriptionError,
    NetworkError,
    ModelInitError,
    InvalidConfigurationError,
    NoAudioFilesError,
)

__all__ = [
    "NoteEvent",
    "AudioSource",
    "PcmBuffer",
    "SourceOrigin",
    "ConversionResult",
    "ItemError",
    "PITCH_NAMES",
    "MODEL_SR",
    "DEFAULT_TEMPO",
    "DEFAULT_VELOCITY",
    "ConversionError",
    "DecodeError",
    "InvalidTrimRangeError",
    "TranscriptionError",
    "NetworkError",
    "ModelInitError",
    "InvalidConfigurationError",
    "NoAudioFilesError",
]
