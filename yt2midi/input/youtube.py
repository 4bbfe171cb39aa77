"""YouTube audio downloader utilities."""

import logging
import re
import tempfile
from pathlib import Path
from typing import List, Optional

import yt_dlp
from yt_dlp.utils import DownloadError, ExtractorError

from ..core import AudioSource, NetworkError, SourceOrigin
from ..core.constants import DEFAULT_DOWNLOAD_NAME
from ..output.naming import sanitize_filename

logger = logging.getLogger(__name__)

AUDIO_SUFFIXES = {".wav", ".mp3", ".m4a", ".webm", ".ogg", ".opus", ".aac", ".flac"}

_CONTENT_DISPOSITION_FILENAME = re.compile(r'filename="(.+)"')


def filename_from_content_disposition(header: Optional[str]) -> str:
    """Extract the quoted filename from a Content-Disposition header."""
    if header:
        match = _CONTENT_DISPOSITION_FILENAME.search(header)
        if match:
            return match.group(1)
    return DEFAULT_DOWNLOAD_NAME


class YouTubeDownloader:
    """Handles downloading audio from YouTube URLs."""

    # Accepted URL forms; anything else is rejected before any network call
    YOUTUBE_PATTERN = re.compile(
        r"^(https?://)?(www\.)?(youtube\.com/watch\?v=|youtu\.be/).+"
    )
    VIDEO_ID_PATTERN = re.compile(r"(?:youtube\.com/watch\?v=|youtu\.be/)([a-zA-Z0-9_-]+)")

    def __init__(
        self,
        audio_format: str = "bestaudio[ext=m4a]/bestaudio[ext=webm]/bestaudio/best",
        quiet: bool = True,
    ):
        """
        Initialize YouTubeDownloader.

        Args:
            audio_format: yt-dlp format selector
            quiet: Silence yt-dlp's own console output
        """
        self.audio_format = audio_format
        self.quiet = quiet

    @classmethod
    def is_valid_url(cls, url: str) -> bool:
        """Check if a string is a YouTube video URL."""
        return bool(cls.YOUTUBE_PATTERN.match(url.strip()))

    @classmethod
    def extract_video_id(cls, url: str) -> Optional[str]:
        match = cls.VIDEO_ID_PATTERN.search(url)
        return match.group(1) if match else None

    @classmethod
    def parse_urls(cls, text: str) -> List[str]:
        """Valid YouTube URLs from text with one URL per line."""
        urls = []
        for line in text.splitlines():
            line = line.strip()
            if not line:
                continue
            if cls.is_valid_url(line):
                urls.append(line)
            else:
                logger.warning("Ignoring invalid YouTube URL: %s", line)
        return urls

    def download(self, url: str) -> AudioSource:
        """
        Download audio from a YouTube URL.

        Args:
            url: YouTube URL

        Returns:
            AudioSource holding the downloaded bytes

        Raises:
            NetworkError: If the URL is malformed or the download fails
        """
        url = url.strip()
        if not self.is_valid_url(url):
            raise NetworkError(f"Invalid YouTube URL: {url}", source_name=url)

        with tempfile.TemporaryDirectory(prefix="yt2midi_") as tmp:
            output_dir = Path(tmp)
            ydl_opts = {
                "format": self.audio_format,
                "outtmpl": str(output_dir / "%(id)s.%(ext)s"),
                "quiet": self.quiet,
                "no_warnings": self.quiet,
                "noplaylist": True,
            }

            logger.info("Downloading from YouTube: %s", url[:50])
            try:
                with yt_dlp.YoutubeDL(ydl_opts) as ydl:
                    info = ydl.extract_info(url, download=True)
            except (DownloadError, ExtractorError) as e:
                raise NetworkError(
                    f"Failed to download from YouTube: {e}", source_name=url
                ) from e

            audio_files = [
                f for f in output_dir.iterdir() if f.suffix.lower() in AUDIO_SUFFIXES
            ]
            if not audio_files:
                raise NetworkError(
                    "Download finished but no audio file was produced", source_name=url
                )

            downloaded = audio_files[0]
            try:
                raw = downloaded.read_bytes()
            except OSError as e:
                raise NetworkError(f"Failed to read downloaded audio: {e}", source_name=url) from e

        title = (info or {}).get("title")
        if title:
            suggested = sanitize_filename(title, suffix=downloaded.suffix.lower())
        else:
            suggested = DEFAULT_DOWNLOAD_NAME
        logger.info("Downloaded: %s (%d bytes)", suggested, len(raw))

        return AudioSource(
            origin=SourceOrigin.REMOTE_URL,
            raw_bytes=raw,
            suggested_name=suggested,
            location=url,
        )
