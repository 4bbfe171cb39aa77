"""Global constants for yt2midi."""

# Pitch names
PITCH_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]

# Audio processing defaults
MODEL_SR = 16000  # piano_transcription_inference works at 16kHz
INTERMEDIATE_SR = 44100  # ffmpeg fallback transcodes to this rate

# Musical defaults
DEFAULT_TEMPO = 120.0
DEFAULT_TIME_SIGNATURE = (4, 4)
DEFAULT_VELOCITY = 64

# MIDI ranges
MIDI_MIN = 0
MIDI_MAX = 127

# Output naming
MAX_FILENAME_LENGTH = 200
DEFAULT_ARCHIVE_NAME = "midi_files"
DEFAULT_DOWNLOAD_NAME = "download.mp3"

# Upload recognition
AUDIO_MEDIA_TYPES = frozenset(
    {
        "audio/mpeg",
        "audio/wav",
        "audio/x-wav",
        "audio/flac",
        "audio/x-flac",
        "audio/m4a",
        "audio/mp4",
        "audio/ogg",
        "audio/webm",
        "audio/aac",
    }
)
AUDIO_EXTENSIONS = frozenset({"mp3", "wav", "flac", "m4a", "ogg", "webm", "aac", "opus"})
