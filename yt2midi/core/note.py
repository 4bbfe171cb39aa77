"""NoteEvent data class - the unit produced by transcription."""

from dataclasses import dataclass
from typing import Optional

from .constants import DEFAULT_VELOCITY, MIDI_MAX, MIDI_MIN, PITCH_NAMES


@dataclass(frozen=True)
class NoteEvent:
    """A single transcribed note."""

    pitch: int  # MIDI pitch (0-127)
    start_time: float  # Seconds
    end_time: float  # Seconds, strictly after start_time
    velocity: Optional[int] = None  # MIDI velocity (0-127), None = default

    def __post_init__(self):
        if not MIDI_MIN <= self.pitch <= MIDI_MAX:
            raise ValueError(f"Pitch out of range: {self.pitch}")
        if self.end_time <= self.start_time:
            raise ValueError(
                f"Note must end after it starts: {self.start_time} -> {self.end_time}"
            )
        if self.velocity is not None and not MIDI_MIN <= self.velocity <= MIDI_MAX:
            raise ValueError(f"Velocity out of range: {self.velocity}")

    @property
    def duration(self) -> float:
        """Note duration in seconds."""
        return self.end_time - self.start_time

    @property
    def midi_velocity(self) -> int:
        """Velocity with the default applied."""
        return DEFAULT_VELOCITY if self.velocity is None else self.velocity

    @property
    def velocity_fraction(self) -> float:
        """Velocity scaled to 0.0-1.0."""
        return self.midi_velocity / 127

    @property
    def pitch_name(self) -> str:
        """Get note name (e.g., 'C4', 'A#3')."""
        octave = (self.pitch // 12) - 1
        return f"{PITCH_NAMES[self.pitch % 12]}{octave}"
