"""Audio containers passed between pipeline stages."""

from dataclasses import dataclass
from enum import Enum
from pathlib import PurePath
from typing import Optional

import numpy as np


class SourceOrigin(Enum):
    """Where an audio source came from."""

    REMOTE_URL = "remote_url"
    LOCAL_UPLOAD = "local_upload"


@dataclass(frozen=True)
class AudioSource:
    """Undecoded audio plus the name used for its outputs."""

    origin: SourceOrigin
    raw_bytes: bytes
    suggested_name: str
    location: Optional[str] = None  # URL or file path

    @property
    def base_name(self) -> str:
        """Suggested name without its extension."""
        stem = PurePath(self.suggested_name).stem
        return stem or self.suggested_name

    @property
    def size(self) -> int:
        return len(self.raw_bytes)


@dataclass(frozen=True)
class PcmBuffer:
    """Decoded float samples, shaped (channels, frames)."""

    samples: np.ndarray
    sample_rate: int

    def __post_init__(self):
        if self.samples.ndim != 2 or self.samples.shape[0] < 1:
            raise ValueError(
                f"Samples must be shaped (channels, frames), got {self.samples.shape}"
            )
        if self.sample_rate <= 0:
            raise ValueError(f"Invalid sample rate: {self.sample_rate}")

    @classmethod
    def from_frames(cls, data: np.ndarray, sample_rate: int) -> "PcmBuffer":
        """Build from soundfile's (frames,) or (frames, channels) layout."""
        data = np.asarray(data, dtype=np.float32)
        if data.ndim == 1:
            samples = data[np.newaxis, :]
        else:
            samples = data.T
        return cls(samples=np.ascontiguousarray(samples), sample_rate=int(sample_rate))

    @property
    def channel_count(self) -> int:
        return int(self.samples.shape[0])

    @property
    def frame_count(self) -> int:
        return int(self.samples.shape[1])

    @property
    def duration(self) -> float:
        """Duration in seconds."""
        return self.frame_count / self.sample_rate

    @property
    def is_mono(self) -> bool:
        return self.channel_count == 1
