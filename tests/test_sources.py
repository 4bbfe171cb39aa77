"""Tests for source recognition, YouTube handling and batch source collection."""

from pathlib import Path

import pytest
from yt_dlp.utils import DownloadError

from yt2midi.core import (
    DecodeError,
    NetworkError,
    NoAudioFilesError,
    SourceOrigin,
)
from yt2midi.input import (
    YouTubeDownloader,
    filename_from_content_disposition,
    filter_audio_files,
    is_audio_file,
    load_local_file,
)
from yt2midi.input import youtube
from yt2midi.pipeline import collect_sources, materialize, source_name

VIDEO_URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"
SHORT_URL = "https://youtu.be/dQw4w9WgXcQ"


class FakeYoutubeDL:
    """Writes a fake audio file where yt-dlp would."""

    instances = []

    def __init__(self, opts):
        self.opts = opts
        self.fail = False
        FakeYoutubeDL.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def extract_info(self, url, download=True):
        target_dir = Path(self.opts["outtmpl"]).parent
        (target_dir / "dQw4w9WgXcQ.m4a").write_bytes(b"fake-m4a")
        return {"id": "dQw4w9WgXcQ", "title": "My Video: Part 1"}


class FailingYoutubeDL(FakeYoutubeDL):
    def extract_info(self, url, download=True):
        raise DownloadError("Video unavailable")


@pytest.fixture(autouse=True)
def reset_fake():
    FakeYoutubeDL.instances = []


class TestAudioRecognition:
    @pytest.mark.parametrize(
        "name", ["a.mp3", "b.WAV", "c.flac", "d.m4a", "e.ogg", "f.webm", "g.opus"]
    )
    def test_audio_extensions(self, name):
        assert is_audio_file(name)

    @pytest.mark.parametrize("name", ["notes.txt", "cover.png", "song", "clip.mp4v"])
    def test_non_audio(self, name):
        assert not is_audio_file(name)

    def test_declared_media_type_wins(self):
        assert is_audio_file("upload.bin", media_type="audio/mpeg")
        assert is_audio_file("upload", media_type="audio/x-wav")

    def test_unknown_media_type_falls_back_to_extension(self):
        assert is_audio_file("upload.mp3", media_type="application/octet-stream")
        assert not is_audio_file("upload.bin", media_type="application/octet-stream")


class TestFilterAudioFiles:
    def test_keeps_order_and_drops_non_audio(self, caplog):
        kept = filter_audio_files(["b.wav", "readme.txt", "a.mp3"])
        assert kept == [Path("b.wav"), Path("a.mp3")]
        assert "Skipped 1 non-audio file(s)" in caplog.text

    def test_nothing_left_raises(self):
        with pytest.raises(NoAudioFilesError):
            filter_audio_files(["readme.txt", "image.png"])

    def test_empty_input_raises(self):
        with pytest.raises(NoAudioFilesError):
            filter_audio_files([])


class TestLoadLocalFile:
    def test_reads_bytes(self, tmp_path):
        path = tmp_path / "Take 2.wav"
        path.write_bytes(b"RIFF....")
        source = load_local_file(path)
        assert source.origin is SourceOrigin.LOCAL_UPLOAD
        assert source.raw_bytes == b"RIFF...."
        assert source.suggested_name == "Take 2.wav"
        assert source.base_name == "Take 2"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_local_file(tmp_path / "missing.wav")


class TestYouTubeUrls:
    @pytest.mark.parametrize(
        "url",
        [
            VIDEO_URL,
            SHORT_URL,
            "youtube.com/watch?v=abc",
            "http://youtu.be/abc",
            "  https://www.youtube.com/watch?v=abc  ",
        ],
    )
    def test_valid(self, url):
        assert YouTubeDownloader.is_valid_url(url)

    @pytest.mark.parametrize(
        "url",
        [
            "https://vimeo.com/123",
            "https://www.youtube.com/",
            "https://www.youtube.com/playlist?list=abc",
            "not a url",
            "",
        ],
    )
    def test_invalid(self, url):
        assert not YouTubeDownloader.is_valid_url(url)

    def test_extract_video_id(self):
        assert YouTubeDownloader.extract_video_id(VIDEO_URL) == "dQw4w9WgXcQ"
        assert YouTubeDownloader.extract_video_id(SHORT_URL) == "dQw4w9WgXcQ"
        assert YouTubeDownloader.extract_video_id("https://vimeo.com/1") is None

    def test_parse_urls_skips_blank_and_invalid(self, caplog):
        text = f"{VIDEO_URL}\n\n  nonsense  \n{SHORT_URL}\n"
        assert YouTubeDownloader.parse_urls(text) == [VIDEO_URL, SHORT_URL]
        assert "nonsense" in caplog.text


class TestContentDisposition:
    def test_quoted_filename(self):
        header = 'attachment; filename="Great Song.m4a"'
        assert filename_from_content_disposition(header) == "Great Song.m4a"

    def test_missing_header(self):
        assert filename_from_content_disposition(None) == "download.mp3"
        assert filename_from_content_disposition("attachment") == "download.mp3"


class TestDownload:
    def test_invalid_url_never_reaches_network(self, monkeypatch):
        monkeypatch.setattr(youtube.yt_dlp, "YoutubeDL", FakeYoutubeDL)
        with pytest.raises(NetworkError):
            YouTubeDownloader().download("https://example.com/video")
        assert FakeYoutubeDL.instances == []

    def test_successful_download(self, monkeypatch):
        monkeypatch.setattr(youtube.yt_dlp, "YoutubeDL", FakeYoutubeDL)
        source = YouTubeDownloader().download(VIDEO_URL)

        assert source.origin is SourceOrigin.REMOTE_URL
        assert source.raw_bytes == b"fake-m4a"
        assert source.suggested_name == "My_Video_Part_1.m4a"
        assert source.base_name == "My_Video_Part_1"
        assert source.location == VIDEO_URL
        assert FakeYoutubeDL.instances[0].opts["noplaylist"] is True

    def test_download_failure_becomes_network_error(self, monkeypatch):
        monkeypatch.setattr(youtube.yt_dlp, "YoutubeDL", FailingYoutubeDL)
        with pytest.raises(NetworkError) as excinfo:
            YouTubeDownloader().download(VIDEO_URL)
        assert excinfo.value.source_name == VIDEO_URL


class TestCollectSources:
    def test_urls_come_before_files(self, tmp_path):
        song = tmp_path / "song.wav"
        song.write_bytes(b"RIFF")
        sources = collect_sources(paths=[song], urls=[VIDEO_URL])
        assert [s.origin for s in sources] == [
            SourceOrigin.REMOTE_URL,
            SourceOrigin.LOCAL_UPLOAD,
        ]
        assert [source_name(s) for s in sources] == [VIDEO_URL, "song"]

    def test_invalid_urls_dropped(self, caplog):
        sources = collect_sources(urls=["https://vimeo.com/1", SHORT_URL, "  "])
        assert [s.name for s in sources] == [SHORT_URL]
        assert "vimeo" in caplog.text

    def test_only_non_audio_files_raises(self, tmp_path):
        with pytest.raises(NoAudioFilesError):
            collect_sources(paths=[tmp_path / "notes.txt"])

    def test_non_audio_files_tolerated_when_urls_given(self, tmp_path):
        sources = collect_sources(paths=[tmp_path / "notes.txt"], urls=[VIDEO_URL])
        assert len(sources) == 1

    def test_nothing_given(self):
        assert collect_sources() == []

    def test_sources_are_fetched_lazily(self, tmp_path):
        missing = tmp_path / "gone.mp3"
        sources = collect_sources(paths=[missing])
        assert len(sources) == 1
        with pytest.raises(DecodeError):
            materialize(sources[0])

    def test_materialize_local(self, tmp_path):
        path = tmp_path / "clip.flac"
        path.write_bytes(b"fLaC")
        source = materialize(collect_sources(paths=[path])[0])
        assert source.raw_bytes == b"fLaC"

    def test_remote_uses_downloader(self, monkeypatch):
        monkeypatch.setattr(youtube.yt_dlp, "YoutubeDL", FakeYoutubeDL)
        source = materialize(collect_sources(urls=[VIDEO_URL])[0])
        assert source.origin is SourceOrigin.REMOTE_URL
