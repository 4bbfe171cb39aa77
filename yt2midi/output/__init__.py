"""Output layer - MIDI encoding, naming and delivery packaging."""

from .midi import MIDIEncoder
from .naming import (
    companion_audio_name,
    output_name_for,
    sanitize_filename,
    unique_name,
)
from .package import (
    Delivery,
    DeliveryKind,
    archive_filename,
    build_archive,
    build_delivery,
)

__all__ = [
    "MIDIEncoder",
    "sanitize_filename",
    "output_name_for",
    "companion_audio_name",
    "unique_name",
    "Delivery",
    "DeliveryKind",
    "archive_filename",
    "build_archive",
    "build_delivery",
]
