"""Filesystem-safe output names."""

import re
from typing import Optional, Set

from ..core.constants import MAX_FILENAME_LENGTH

_INVALID_CHARS = re.compile(r"[^A-Za-z0-9_\- \t\n\r\f\v]")
_SEPARATOR_RUNS = re.compile(r"[-\s]+")


def sanitize_filename(name: str, suffix: str = ".mid") -> str:
    """
    Strip unsafe characters and force a suffix.

    Everything outside letters, digits, underscore, hyphen and whitespace is
    removed, runs of hyphens/whitespace become a single underscore, and the
    result is cut to 200 characters before the suffix is appended.

    >>> sanitize_filename("My Song! (Live).mp3")
    'My_Song_Livemp3.mid'
    """
    if suffix and name.endswith(suffix):
        name = name[: -len(suffix)]
    cleaned = _INVALID_CHARS.sub("", name)
    cleaned = _SEPARATOR_RUNS.sub("_", cleaned)
    cleaned = cleaned[:MAX_FILENAME_LENGTH]
    if not cleaned:
        cleaned = "untitled"
    return f"{cleaned}{suffix}" if suffix else cleaned


def output_name_for(
    index: int,
    base_name: str,
    total: int,
    custom_title: Optional[str] = None,
) -> str:
    """
    Pick the MIDI name for the item at ``index`` (0-based) of ``total``.

    A custom title names a single output verbatim; with several outputs it
    becomes ``{title}_{n}`` with n counted from 1. Without a title the
    source's own base name is used.
    """
    if custom_title and total == 1:
        name = custom_title
    elif custom_title:
        name = f"{custom_title}_{index + 1}"
    else:
        name = base_name
    return sanitize_filename(name)


def unique_name(name: str, taken: Set[str]) -> str:
    """
    Make name distinct from everything in taken and record it there.

    Later duplicates get ``_2``, ``_3``, ... inserted before the extension.

    >>> taken = {"song.mid"}
    >>> unique_name("song.mid", taken)
    'song_2.mid'
    """
    candidate = name
    stem, dot, extension = name.rpartition(".")
    if not dot:
        stem, extension = name, ""
    counter = 2
    while candidate in taken:
        candidate = f"{stem}_{counter}{dot}{extension}"
        counter += 1
    taken.add(candidate)
    return candidate


def companion_audio_name(midi_name: str, extension: str = ".mp3") -> str:
    """Archive name for the original audio stored next to a MIDI file."""
    if midi_name.endswith(".mid"):
        return midi_name[: -len(".mid")] + extension
    return midi_name + extension
