"""Base classes for transcription."""

from abc import ABC, abstractmethod
from typing import List

import numpy as np

from ..core import NoteEvent


class Transcriber(ABC):
    """Capability interface over a note transcription model.

    Implementations load their model lazily in ``ensure_ready`` and must
    never run two inferences at once on the same instance.
    """

    @property
    @abstractmethod
    def sample_rate(self) -> int:
        """Sample rate the model expects."""

    @property
    @abstractmethod
    def is_ready(self) -> bool:
        """Whether the model is loaded."""

    @abstractmethod
    def ensure_ready(self) -> None:
        """
        Load the model once; later calls are no-ops.

        Raises:
            ModelInitError: If loading fails
        """

    @abstractmethod
    def transcribe(self, samples: np.ndarray) -> List[NoteEvent]:
        """
        Transcribe mono samples to notes.

        Args:
            samples: Mono float samples at ``sample_rate``

        Returns:
            Detected notes, not necessarily time-sorted

        Raises:
            ModelInitError: If the model cannot be loaded
            TranscriptionError: If inference fails
        """

    def dispose(self) -> None:
        """Free the loaded model. The next ensure_ready() reloads it."""
