"""Turning user inputs into batch sources.

Sources are materialized lazily, one at a time, when the orchestrator
reaches them. A failed download or unreadable file therefore becomes a
per-item error of that batch instead of aborting the whole run.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence, Union

from ..core import (
    AudioSource,
    DecodeError,
    NoAudioFilesError,
    SourceOrigin,
)
from ..input import YouTubeDownloader, filter_audio_files, load_local_file

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PendingSource:
    """A source that is fetched only when its turn comes."""

    name: str
    origin: SourceOrigin
    fetch: Callable[[], AudioSource]

    def materialize(self) -> AudioSource:
        return self.fetch()


BatchSource = Union[AudioSource, PendingSource]


def source_name(source: BatchSource) -> str:
    """Name used when reporting on a source."""
    if isinstance(source, PendingSource):
        return source.name
    return source.base_name


def materialize(source: BatchSource) -> AudioSource:
    if isinstance(source, PendingSource):
        return source.materialize()
    return source


def remote_source(url: str, downloader: YouTubeDownloader) -> PendingSource:
    return PendingSource(
        name=url,
        origin=SourceOrigin.REMOTE_URL,
        fetch=lambda: downloader.download(url),
    )


def local_source(path: Path) -> PendingSource:
    path = Path(path)

    def fetch() -> AudioSource:
        try:
            return load_local_file(path)
        except OSError as e:
            raise DecodeError(f"Failed to read file: {e}", source_name=path.name) from e

    return PendingSource(name=path.stem, origin=SourceOrigin.LOCAL_UPLOAD, fetch=fetch)


def collect_sources(
    paths: Iterable[Union[str, Path]] = (),
    urls: Sequence[str] = (),
    downloader: Optional[YouTubeDownloader] = None,
) -> List[PendingSource]:
    """
    Build the ordered source list for a batch: URLs first, then local files.

    Malformed URLs are dropped with a warning; non-audio files are dropped
    with a count-based warning.

    Raises:
        NoAudioFilesError: If files were given, none is audio, and no URL remains
    """
    downloader = downloader or YouTubeDownloader()

    valid_urls = []
    for url in urls:
        url = url.strip()
        if not url:
            continue
        if downloader.is_valid_url(url):
            valid_urls.append(url)
        else:
            logger.warning("Ignoring invalid YouTube URL: %s", url)
    if valid_urls:
        logger.info("Found %d YouTube URL(s)", len(valid_urls))

    paths = list(paths)
    audio_paths: List[Path] = []
    if paths:
        try:
            audio_paths = filter_audio_files(paths)
        except NoAudioFilesError:
            if not valid_urls:
                raise
            logger.warning("None of the %d local file(s) is audio", len(paths))
        else:
            logger.info("Found %d local file(s)", len(audio_paths))

    sources = [remote_source(url, downloader) for url in valid_urls]
    sources.extend(local_source(path) for path in audio_paths)
    return sources
