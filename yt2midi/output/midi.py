"""MIDI encoding of transcribed notes."""

import io
from pathlib import Path
from typing import List, Optional, Sequence

import pretty_midi

from ..core import NoteEvent
from ..core.constants import DEFAULT_TEMPO, DEFAULT_TIME_SIGNATURE


class MIDIEncoder:
    """Encode notes to a single-track Standard MIDI File."""

    def __init__(
        self,
        tempo: float = DEFAULT_TEMPO,
        instrument_name: str = "Acoustic Grand Piano",
        instrument_program: int = 0,
    ):
        """
        Initialize MIDIEncoder.

        Args:
            tempo: Tempo in BPM
            instrument_name: MIDI instrument name
            instrument_program: MIDI program number (0-127)
        """
        self.tempo = tempo
        self.instrument_name = instrument_name
        self.instrument_program = instrument_program

    def encode(
        self,
        notes: Sequence[NoteEvent],
        max_duration: Optional[float] = None,
        enable_filter: bool = True,
    ) -> bytes:
        """
        Encode notes to MIDI bytes.

        Args:
            notes: Notes in any order
            max_duration: Drop notes longer than this (seconds)
            enable_filter: Apply max_duration when it is set

        Returns:
            Standard MIDI File bytes
        """
        if enable_filter and max_duration is not None:
            notes = self.filter_by_duration(notes, max_duration)

        midi = self.to_pretty_midi(notes)
        buffer = io.BytesIO()
        midi.write(buffer)
        return buffer.getvalue()

    def export(
        self,
        notes: Sequence[NoteEvent],
        output_path: str,
        max_duration: Optional[float] = None,
        enable_filter: bool = True,
    ) -> None:
        """Encode notes and write them to a MIDI file."""
        data = self.encode(notes, max_duration=max_duration, enable_filter=enable_filter)

        # Ensure output directory exists
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)
        Path(output_path).write_bytes(data)

    def to_pretty_midi(self, notes: Sequence[NoteEvent]) -> pretty_midi.PrettyMIDI:
        """Convert notes to PrettyMIDI object without encoding.

        Overlapping notes of the same pitch are passed through unchanged.
        """
        midi = pretty_midi.PrettyMIDI(initial_tempo=self.tempo)
        numerator, denominator = DEFAULT_TIME_SIGNATURE
        midi.time_signature_changes.append(
            pretty_midi.TimeSignature(numerator, denominator, 0.0)
        )

        instrument = pretty_midi.Instrument(
            program=self.instrument_program,
            name=self.instrument_name,
        )

        for note in notes:
            instrument.notes.append(
                pretty_midi.Note(
                    # velocity 0 would read back as a note-off
                    velocity=max(1, note.midi_velocity),
                    pitch=note.pitch,
                    start=note.start_time,
                    end=note.end_time,
                )
            )

        midi.instruments.append(instrument)
        return midi

    @staticmethod
    def filter_by_duration(
        notes: Sequence[NoteEvent], max_duration: float
    ) -> List[NoteEvent]:
        """Keep notes lasting at most max_duration seconds."""
        return [n for n in notes if n.duration <= max_duration]

    @staticmethod
    def get_note_count(notes: Sequence[NoteEvent]) -> int:
        return len(notes)

    @staticmethod
    def get_duration(notes: Sequence[NoteEvent]) -> float:
        """End time of the last note (0 if there are none)."""
        return max((n.end_time for n in notes), default=0.0)
