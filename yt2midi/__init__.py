"""yt2midi - Audio and YouTube to MIDI batch converter.

Architecture Layers:
    1. core/          - Shared types (NoteEvent, PcmBuffer, AudioSource) and errors
    2. input/         - Source acquisition (uploads, YouTube) and audio normalization
    3. transcription/ - Neural piano transcription behind a Transcriber interface
    4. output/        - MIDI encoding, output naming, delivery packaging
    5. pipeline/      - Batch orchestration, settings, progress events
"""

__version__ = "0.1.0"

# Core types
from .core import (
    NoteEvent,
    AudioSource,
    PcmBuffer,
    SourceOrigin,
    ConversionResult,
    ItemError,
)

# Input layer
from .input import AudioLoader, YouTubeDownloader

# Transcription layer
from .transcription import Transcriber, PianoTranscriber

# Output layer
from .output import MIDIEncoder, build_delivery, sanitize_filename

# Pipeline layer
from .pipeline import (
    BatchJob,
    BatchOrchestrator,
    BatchState,
    ConversionSettings,
    EventBus,
    collect_sources,
)

__all__ = [
    # Core
    "NoteEvent",
    "AudioSource",
    "PcmBuffer",
    "SourceOrigin",
    "ConversionResult",
    "ItemError",
    # Input
    "AudioLoader",
    "YouTubeDownloader",
    # Transcription
    "Transcriber",
    "PianoTranscriber",
    # Output
    "MIDIEncoder",
    "build_delivery",
    "sanitize_filename",
    # Pipeline
    "BatchJob",
    "BatchOrchestrator",
    "BatchState",
    "ConversionSettings",
    "EventBus",
    "collect_sources",
]
