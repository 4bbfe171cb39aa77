"""Piano transcription using piano_transcription_inference (Onsets and Frames)."""

import contextlib
import io
import logging
import tempfile
import threading
from pathlib import Path
from typing import Any, List, Optional

import numpy as np

from .base import Transcriber
from ..core import ModelInitError, NoteEvent, TranscriptionError
from ..core.constants import MIDI_MAX, MIDI_MIN, MODEL_SR

logger = logging.getLogger(__name__)


def default_device() -> str:
    """Pick CUDA when available, otherwise CPU."""
    import torch

    return "cuda" if torch.cuda.is_available() else "cpu"


class PianoTranscriber(Transcriber):
    """
    Neural piano transcriber.

    Wraps ``piano_transcription_inference.PianoTranscription``. The model
    (and its checkpoint download on first use) is loaded lazily, exactly
    once, and reused for every later call until ``dispose()``.
    """

    def __init__(
        self,
        device: Optional[str] = None,
        checkpoint_path: Optional[str] = None,
        min_note_duration: float = 0.0,
    ):
        """
        Initialize PianoTranscriber.

        Args:
            device: Device for inference ('cpu', 'cuda'); None = auto-detect
            checkpoint_path: Local checkpoint; None downloads the default one
            min_note_duration: Drop events shorter than this (seconds)
        """
        self.device = device
        self.checkpoint_path = checkpoint_path
        self.min_note_duration = min_note_duration
        self._transcriptor = None
        self._lock = threading.RLock()

    @property
    def sample_rate(self) -> int:
        return MODEL_SR

    @property
    def is_ready(self) -> bool:
        return self._transcriptor is not None

    def ensure_ready(self) -> None:
        with self._lock:
            if self._transcriptor is not None:
                return

            try:
                if self.device is None:
                    self.device = default_device()
                logger.info("Loading piano transcription model on %s", self.device)
                from piano_transcription_inference import PianoTranscription

                # The library prints progress; keep stdout clean
                with contextlib.redirect_stdout(io.StringIO()):
                    self._transcriptor = PianoTranscription(
                        device=self.device,
                        checkpoint_path=self.checkpoint_path,
                    )
            except Exception as e:
                raise ModelInitError(f"Model initialization failed: {e}") from e
            logger.info("Piano transcription model loaded")

    def transcribe(self, samples: np.ndarray) -> List[NoteEvent]:
        """
        Transcribe 16kHz mono samples to notes.

        Args:
            samples: Mono float samples at 16kHz

        Returns:
            Notes sorted by start time
        """
        with self._lock:
            self.ensure_ready()

            audio = np.asarray(samples, dtype=np.float32)
            try:
                with tempfile.TemporaryDirectory(prefix="yt2midi_") as tmp:
                    midi_path = str(Path(tmp) / "transcription.mid")
                    with contextlib.redirect_stdout(io.StringIO()):
                        transcribed = self._transcriptor.transcribe(audio, midi_path)
            except Exception as e:
                raise TranscriptionError(f"Transcription failed: {e}") from e

        notes = []
        for event in transcribed.get("est_note_events", []):
            note = self._event_to_note(event)
            if note is not None:
                notes.append(note)

        notes.sort(key=lambda n: (n.start_time, n.pitch))
        logger.info("Transcription complete, found %d notes", len(notes))
        return notes

    def _event_to_note(self, event: Any) -> Optional[NoteEvent]:
        """Convert one model event (dict or tuple) to a NoteEvent."""
        if isinstance(event, dict):
            onset = event["onset_time"]
            offset = event["offset_time"]
            pitch = event["midi_note"]
            velocity = event.get("velocity")
        else:
            onset, offset, pitch, velocity = event

        onset, offset = float(onset), float(offset)
        if offset - onset <= max(self.min_note_duration, 0.0):
            return None

        pitch = int(pitch)
        if not MIDI_MIN <= pitch <= MIDI_MAX:
            return None

        if velocity is not None:
            velocity = int(np.clip(velocity, MIDI_MIN, MIDI_MAX))

        return NoteEvent(pitch=pitch, start_time=onset, end_time=offset, velocity=velocity)

    def dispose(self) -> None:
        with self._lock:
            if self._transcriptor is None:
                return
            self._transcriptor = None
            import torch

            if torch.cuda.is_available():
                torch.cuda.empty_cache()
            logger.info("Piano transcription model disposed")


_default_transcriber: Optional[PianoTranscriber] = None
_default_lock = threading.Lock()


def get_default_transcriber(device: Optional[str] = None) -> PianoTranscriber:
    """Process-wide shared transcriber, created on first use."""
    global _default_transcriber
    with _default_lock:
        if _default_transcriber is None:
            _default_transcriber = PianoTranscriber(device=device)
        return _default_transcriber
