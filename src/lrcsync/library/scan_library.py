# library/scan_library.py
from __future__ import annotations

import fnmatch
import logging
import os
from typing import Iterator

from mutagen import File as MutagenFile

from lrcsync.core.models import AudioTrack, lrc_path_for

logger = logging.getLogger(__name__)

AUDIO_EXTS = {".mp3", ".m4a", ".flac", ".ogg", ".oga", ".opus", ".wav", ".aac", ".wma", ".aiff", ".ape", ".wv"}
IGNORE_FILENAME = ".lrcsyncignore"


def _is_hidden(name: str) -> bool:
    return name.startswith(".")


def _read_ignore_file(dirpath: str) -> list[str]:
    path = os.path.join(dirpath, IGNORE_FILENAME)
    if not os.path.isfile(path):
        return []
    patterns: list[str] = []
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#"):
                patterns.append(line.rstrip("/"))
    return patterns


def _is_ignored(name: str, patterns: list[str]) -> bool:
    return any(fnmatch.fnmatch(name, p) for p in patterns)


def iter_audio_paths(root: str, include_hidden: bool = False) -> Iterator[str]:
    """
    Walk `root` and yield audio file paths in a stable order.

    Dotfiles and dot-directories are skipped unless include_hidden. A .lrcsyncignore file
    holds glob patterns (one per line) matched against file and directory names in its
    own directory and everything below it.
    """
    if not root or not os.path.isdir(root):
        logger.warning("Not a directory: %s", root)
        return

    inherited: dict[str, list[str]] = {}
    for dirpath, dirnames, filenames in os.walk(root):
        patterns = inherited.pop(dirpath, []) + _read_ignore_file(dirpath)

        dirnames[:] = sorted(
            d for d in dirnames
            if (include_hidden or not _is_hidden(d)) and not _is_ignored(d, patterns)
        )
        for d in dirnames:
            inherited[os.path.join(dirpath, d)] = patterns

        for fn in sorted(filenames):
            if not include_hidden and _is_hidden(fn):
                continue
            if _is_ignored(fn, patterns):
                continue
            ext = os.path.splitext(fn)[1].lower()
            if ext in AUDIO_EXTS:
                yield os.path.join(dirpath, fn)


def _first(easy, key: str) -> str | None:
    v = easy.get(key)
    if not v:
        return None
    if isinstance(v, list):
        return (str(v[0]).strip() if v else None) or None
    s = str(v).strip()
    return s or None


def _artists(easy) -> str | None:
    v = easy.get("artist")
    if not v:
        return None
    if not isinstance(v, list):
        v = [v]
    names = [str(a).strip() for a in v if str(a).strip()]
    return ", ".join(names) or None


def read_audio_track(path: str) -> AudioTrack:
    """
    Read tags and duration for one file.
    Raises mutagen.MutagenError / OSError when the file cannot be parsed; a file mutagen
    does not recognise at all comes back with no metadata.
    """
    has_lrc = os.path.exists(lrc_path_for(path))

    audio = MutagenFile(path, easy=True)
    if audio is None:
        return AudioTrack(file_path=path, has_lrc=has_lrc)

    duration = None
    info = getattr(audio, "info", None)
    length = getattr(info, "length", None) if info else None
    if length and length > 0:
        duration = float(length)

    return AudioTrack(
        file_path=path,
        title=_first(audio, "title"),
        artist=_artists(audio),
        album=_first(audio, "album"),
        duration=duration,
        has_lrc=has_lrc,
    )
