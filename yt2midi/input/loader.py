"""Audio decoding and preprocessing utilities."""

import io
import logging
import math
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Optional, Tuple

import librosa
import numpy as np
import soundfile as sf

from ..core import PcmBuffer, DecodeError, InvalidTrimRangeError
from ..core.constants import INTERMEDIATE_SR, MODEL_SR

logger = logging.getLogger(__name__)

TrimRange = Tuple[Optional[float], Optional[float]]


def find_ffmpeg() -> Optional[str]:
    """Locate an ffmpeg binary (imageio-ffmpeg first, then PATH)."""
    try:
        import imageio_ffmpeg

        return imageio_ffmpeg.get_ffmpeg_exe()
    except (ImportError, RuntimeError):
        return shutil.which("ffmpeg")


class AudioLoader:
    """Turns raw container bytes into model-ready PCM.

    Stages run in a fixed order: decode -> trim -> mono -> resample.
    Trim indices are computed at the source sample rate, so trimming
    always happens before resampling.
    """

    def __init__(
        self,
        target_sr: int = MODEL_SR,
        normalize_peaks: bool = False,
        ffmpeg_path: Optional[str] = None,
        resample_type: str = "soxr_hq",
    ):
        """
        Initialize AudioLoader.

        Args:
            target_sr: Sample rate the transcription model expects
            normalize_peaks: Peak-normalize the final samples if True
            ffmpeg_path: Explicit ffmpeg binary for the transcoding fallback
            resample_type: librosa resampler (band-limited)
        """
        self.target_sr = target_sr
        self.normalize_peaks = normalize_peaks
        self.ffmpeg_path = ffmpeg_path
        self.resample_type = resample_type

    def normalize(
        self,
        raw: bytes,
        target_sr: Optional[int] = None,
        trim_range: Optional[TrimRange] = None,
    ) -> PcmBuffer:
        """
        Decode, trim, fold to mono and resample raw audio.

        Args:
            raw: Undecoded container bytes
            target_sr: Output sample rate (defaults to self.target_sr)
            trim_range: Optional (start, end) in seconds; end <= 0 means "to end"

        Returns:
            Mono PcmBuffer at the target rate

        Raises:
            DecodeError: If no decoding strategy can read the data
            InvalidTrimRangeError: If the trim range selects no samples
        """
        target_sr = target_sr or self.target_sr
        buffer = self.decode(raw)
        logger.debug(
            "Decoded %.2fs, %d channel(s) at %dHz",
            buffer.duration,
            buffer.channel_count,
            buffer.sample_rate,
        )

        if trim_range is not None:
            start, end = trim_range
            if (start or 0) > 0 or (end or 0) > 0:
                buffer = self.trim(buffer, start, end)

        buffer = self.to_mono(buffer)
        buffer = self.resample(buffer, target_sr)

        if self.normalize_peaks:
            buffer = self.peak_normalize(buffer)

        return buffer

    def decode(self, raw: bytes) -> PcmBuffer:
        """Decode natively, falling back to an ffmpeg transcode."""
        try:
            return self._decode_native(raw)
        except DecodeError as native_error:
            logger.info("Direct decode failed (%s), trying ffmpeg", native_error.message)
            return self.transcode(raw)

    def _decode_native(self, raw: bytes) -> PcmBuffer:
        if not raw:
            raise DecodeError("Audio data is empty")
        try:
            data, sr = sf.read(io.BytesIO(raw), dtype="float32", always_2d=True)
        except (sf.SoundFileError, RuntimeError, TypeError) as e:
            raise DecodeError(f"Unsupported audio container: {e}") from e
        if data.shape[0] == 0:
            raise DecodeError("Audio contains no frames")
        return PcmBuffer.from_frames(data, sr)

    def transcode(self, raw: bytes) -> PcmBuffer:
        """
        Convert raw audio to mono 16-bit WAV with ffmpeg and decode that.

        Raises:
            DecodeError: If ffmpeg is missing, fails, or produces unreadable output
        """
        ffmpeg = self.ffmpeg_path or find_ffmpeg()
        if ffmpeg is None:
            raise DecodeError("Unsupported audio container and ffmpeg is not available")

        with tempfile.TemporaryDirectory(prefix="yt2midi_") as tmp:
            input_path = Path(tmp) / "input"
            output_path = Path(tmp) / "output.wav"
            input_path.write_bytes(raw)

            try:
                subprocess.run(
                    [
                        ffmpeg,
                        "-i", str(input_path),
                        "-acodec", "pcm_s16le",
                        "-ar", str(INTERMEDIATE_SR),
                        "-ac", "1",
                        "-y",
                        str(output_path),
                    ],
                    capture_output=True,
                    check=True,
                )
            except subprocess.CalledProcessError as e:
                detail = e.stderr.decode("utf-8", "replace").strip().splitlines()
                raise DecodeError(
                    f"ffmpeg could not convert audio: {detail[-1] if detail else e}"
                ) from e
            except OSError as e:
                raise DecodeError(f"Failed to run ffmpeg: {e}") from e

            try:
                return self._decode_native(output_path.read_bytes())
            except OSError as e:
                raise DecodeError(f"ffmpeg produced no output: {e}") from e

    def trim(
        self,
        buffer: PcmBuffer,
        start: Optional[float] = 0.0,
        end: Optional[float] = 0.0,
    ) -> PcmBuffer:
        """
        Copy the half-open interval [start, end) of every channel.

        Args:
            buffer: Source buffer
            start: Start time in seconds (missing or negative = 0)
            end: End time in seconds (missing or <= 0 = end of audio)

        Raises:
            InvalidTrimRangeError: If the range is empty after clamping
        """
        sr = buffer.sample_rate
        start = start if start is not None and start > 0 else 0.0
        start_sample = int(math.floor(start * sr))
        if end is not None and end > 0:
            end_sample = min(int(math.floor(end * sr)), buffer.frame_count)
        else:
            end_sample = buffer.frame_count

        if start_sample >= end_sample:
            end_label = f"{end:g}s" if end is not None and end > 0 else "end"
            raise InvalidTrimRangeError(
                f"Trim range {start:g}s to {end_label} selects no audio "
                f"({buffer.duration:.2f}s available)"
            )

        trimmed = buffer.samples[:, start_sample:end_sample].copy()
        return PcmBuffer(samples=trimmed, sample_rate=sr)

    def to_mono(self, buffer: PcmBuffer) -> PcmBuffer:
        """Average all channels into one."""
        if buffer.is_mono:
            return buffer
        mono = buffer.samples.mean(axis=0, keepdims=True).astype(np.float32)
        return PcmBuffer(samples=mono, sample_rate=buffer.sample_rate)

    def resample(self, buffer: PcmBuffer, target_sr: int) -> PcmBuffer:
        """Band-limited resample to exactly floor(duration * target_sr) frames."""
        if buffer.sample_rate == target_sr:
            return buffer

        frames = buffer.frame_count * target_sr // buffer.sample_rate
        resampled = librosa.resample(
            buffer.samples,
            orig_sr=buffer.sample_rate,
            target_sr=target_sr,
            res_type=self.resample_type,
        )
        resampled = librosa.util.fix_length(resampled, size=frames, axis=-1)
        return PcmBuffer(
            samples=np.ascontiguousarray(resampled, dtype=np.float32),
            sample_rate=target_sr,
        )

    def peak_normalize(self, buffer: PcmBuffer) -> PcmBuffer:
        """Normalize audio to [-1, 1] range using peak normalization."""
        peak = np.abs(buffer.samples).max() if buffer.frame_count else 0.0
        if peak > 0:
            return PcmBuffer(samples=buffer.samples / peak, sample_rate=buffer.sample_rate)
        return buffer

    def get_samples(self, buffer: PcmBuffer) -> np.ndarray:
        """Mono 1-D samples for the transcriber."""
        return self.to_mono(buffer).samples[0]

    @staticmethod
    def get_duration(buffer: PcmBuffer) -> float:
        """Get duration in seconds."""
        return buffer.duration
