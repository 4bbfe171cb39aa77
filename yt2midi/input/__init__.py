"""Input layer - Source acquisition and audio preprocessing."""

from .loader import AudioLoader, find_ffmpeg
from .sources import filter_audio_files, is_audio_file, load_local_file
from .youtube import YouTubeDownloader, filename_from_content_disposition

__all__ = [
    "AudioLoader",
    "find_ffmpeg",
    "filter_audio_files",
    "is_audio_file",
    "load_local_file",
    "YouTubeDownloader",
    "filename_from_content_disposition",
]
