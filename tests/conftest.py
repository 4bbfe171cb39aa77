"""Shared fixtures for the yt2midi test suite."""

import io
from typing import List, Optional, Set

import numpy as np
import pytest
import soundfile as sf

from yt2midi.core import (
    AudioSource,
    ModelInitError,
    NoteEvent,
    SourceOrigin,
    TranscriptionError,
)
from yt2midi.input import AudioLoader
from yt2midi.transcription import Transcriber


def make_tone(
    duration: float = 1.0,
    sr: int = 16000,
    freq: float = 440.0,
    channels: int = 1,
) -> np.ndarray:
    """Sine tone shaped (frames,) or (frames, channels) like soundfile."""
    t = np.arange(int(duration * sr)) / sr
    tone = (0.5 * np.sin(2 * np.pi * freq * t)).astype(np.float32)
    if channels == 1:
        return tone
    return np.stack([tone * (c + 1) / channels for c in range(channels)], axis=1)


def wav_bytes(data: np.ndarray, sr: int = 16000) -> bytes:
    """Encode samples as an in-memory 16-bit WAV."""
    buffer = io.BytesIO()
    sf.write(buffer, data, sr, format="WAV", subtype="PCM_16")
    return buffer.getvalue()


def make_source(name: str, raw: Optional[bytes] = None) -> AudioSource:
    return AudioSource(
        origin=SourceOrigin.LOCAL_UPLOAD,
        raw_bytes=raw if raw is not None else wav_bytes(make_tone()),
        suggested_name=name,
    )


class FakeTranscriber(Transcriber):
    """Deterministic stand-in for the neural model."""

    def __init__(
        self,
        notes: Optional[List[NoteEvent]] = None,
        fail_calls: Optional[Set[int]] = None,
        init_error: bool = False,
    ):
        self.notes = notes if notes is not None else [
            NoteEvent(pitch=60, start_time=0.0, end_time=0.5, velocity=80),
            NoteEvent(pitch=64, start_time=0.5, end_time=1.0),
        ]
        self.fail_calls = fail_calls or set()
        self.init_error = init_error
        self.load_count = 0
        self.calls = 0
        self.received: List[np.ndarray] = []
        self._ready = False

    @property
    def sample_rate(self) -> int:
        return 16000

    @property
    def is_ready(self) -> bool:
        return self._ready

    def ensure_ready(self) -> None:
        if self._ready:
            return
        if self.init_error:
            raise ModelInitError("checkpoint unavailable")
        self.load_count += 1
        self._ready = True

    def transcribe(self, samples):
        self.ensure_ready()
        call = self.calls
        self.calls += 1
        self.received.append(samples)
        if call in self.fail_calls:
            raise TranscriptionError("inference blew up")
        return list(self.notes)

    def dispose(self) -> None:
        self._ready = False


@pytest.fixture
def fake_transcriber():
    return FakeTranscriber()


@pytest.fixture
def loader():
    # A missing ffmpeg makes undecodable input fail fast and deterministically
    return AudioLoader(ffmpeg_path="/nonexistent/ffmpeg")


@pytest.fixture
def tone_wav():
    return wav_bytes(make_tone())
