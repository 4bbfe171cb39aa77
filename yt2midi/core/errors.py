"""Error taxonomy for the conversion pipeline.

Per-item errors (recorded, batch continues):
    DecodeError, InvalidTrimRangeError, TranscriptionError, NetworkError

Batch-level errors (abort the whole batch):
    ModelInitError, InvalidConfigurationError
"""

from typing import Optional


class ConversionError(Exception):
    """Base class for every error raised by the pipeline."""

    kind = "ConversionError"
    batch_fatal = False

    def __init__(self, message: str, source_name: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.source_name = source_name

    def __str__(self) -> str:
        if self.source_name:
            return f"{self.source_name}: {self.message}"
        return self.message


class DecodeError(ConversionError):
    """No decoding strategy could read the audio container."""

    kind = "DecodeError"


class InvalidTrimRangeError(ConversionError):
    """Trim range selects no samples."""

    kind = "InvalidTrimRangeError"


class TranscriptionError(ConversionError):
    """The model failed while running inference."""

    kind = "TranscriptionError"


class NetworkError(ConversionError):
    """A remote source could not be acquired."""

    kind = "NetworkError"


class ModelInitError(ConversionError):
    """The transcription model could not be loaded."""

    kind = "ModelInitError"
    batch_fatal = True


class InvalidConfigurationError(ConversionError):
    """Settings or inputs rejected before any item runs."""

    kind = "InvalidConfigurationError"
    batch_fatal = True


class NoAudioFilesError(InvalidConfigurationError):
    """None of the supplied uploads is a recognised audio file."""

    kind = "NoAudioFilesError"
