"""Tests for core types and errors."""

import numpy as np
import pytest

from yt2midi.core import (
    AudioSource,
    DecodeError,
    InvalidConfigurationError,
    ModelInitError,
    NoAudioFilesError,
    NoteEvent,
    PcmBuffer,
    SourceOrigin,
    TranscriptionError,
)


class TestNoteEvent:
    """Tests for NoteEvent dataclass."""

    def test_note_creation(self):
        note = NoteEvent(pitch=60, start_time=0.0, end_time=1.0, velocity=80)
        assert note.pitch == 60
        assert note.start_time == 0.0
        assert note.end_time == 1.0
        assert note.velocity == 80

    def test_note_duration(self):
        note = NoteEvent(pitch=60, start_time=0.5, end_time=1.5)
        assert note.duration == 1.0

    def test_default_velocity(self):
        note = NoteEvent(pitch=60, start_time=0.0, end_time=1.0)
        assert note.velocity is None
        assert note.midi_velocity == 64
        assert note.velocity_fraction == pytest.approx(64 / 127)

    def test_pitch_name(self):
        assert NoteEvent(pitch=60, start_time=0, end_time=1).pitch_name == "C4"
        assert NoteEvent(pitch=69, start_time=0, end_time=1).pitch_name == "A4"
        assert NoteEvent(pitch=61, start_time=0, end_time=1).pitch_name == "C#4"

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"pitch": 128, "start_time": 0.0, "end_time": 1.0},
            {"pitch": -1, "start_time": 0.0, "end_time": 1.0},
            {"pitch": 60, "start_time": 1.0, "end_time": 1.0},
            {"pitch": 60, "start_time": 0.0, "end_time": 1.0, "velocity": 200},
        ],
    )
    def test_invalid_notes_rejected(self, kwargs):
        with pytest.raises(ValueError):
            NoteEvent(**kwargs)


class TestPcmBuffer:
    def test_from_mono_frames(self):
        buffer = PcmBuffer.from_frames(np.zeros(100), 1000)
        assert buffer.channel_count == 1
        assert buffer.frame_count == 100
        assert buffer.duration == pytest.approx(0.1)
        assert buffer.samples.dtype == np.float32

    def test_from_stereo_frames(self):
        data = np.zeros((50, 2))
        data[:, 1] = 1.0
        buffer = PcmBuffer.from_frames(data, 100)
        assert buffer.channel_count == 2
        assert buffer.frame_count == 50
        assert np.all(buffer.samples[1] == 1.0)

    def test_rejects_flat_samples(self):
        with pytest.raises(ValueError):
            PcmBuffer(samples=np.zeros(10, dtype=np.float32), sample_rate=100)


class TestAudioSource:
    def test_base_name_strips_extension(self):
        source = AudioSource(SourceOrigin.LOCAL_UPLOAD, b"x", "My Song.final.mp3")
        assert source.base_name == "My Song.final"
        assert source.size == 1

    def test_base_name_without_extension(self):
        source = AudioSource(SourceOrigin.REMOTE_URL, b"", "track")
        assert source.base_name == "track"


class TestErrors:
    def test_batch_fatal_flags(self):
        assert ModelInitError("x").batch_fatal
        assert InvalidConfigurationError("x").batch_fatal
        assert NoAudioFilesError("x").batch_fatal
        assert not DecodeError("x").batch_fatal
        assert not TranscriptionError("x").batch_fatal

    def test_message_includes_source(self):
        error = DecodeError("bad container", source_name="song")
        assert str(error) == "song: bad container"
        assert error.kind == "DecodeError"
