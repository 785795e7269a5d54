# library/sidecar.py
from __future__ import annotations

import enum
import logging
import os
import stat
import tempfile
import threading

from lrcsync.core.models import AudioTrack, LyricsRecord

logger = logging.getLogger(__name__)


class SidecarWriteError(Exception):
    def __init__(self, path: str, cause: OSError):
        super().__init__(f"writing {path} failed: {cause}")
        self.path = path
        self.cause = cause


class WriteResult(enum.Enum):
    WRITTEN = "written"
    NO_TEXT = "no_text"   # matched, but nothing to write (instrumental)
    EXISTS = "exists"     # sidecar appeared since discovery and force is off


_umask_lock = threading.Lock()


def _current_umask() -> int:
    # os.umask can only be read by setting it; the lock keeps workers from interleaving.
    with _umask_lock:
        mask = os.umask(0o022)
        os.umask(mask)
    return mask


def _sidecar_mode(path: str) -> int:
    """Mode for the new file: keep an existing sidecar's bits, else what open() would give."""
    try:
        return stat.S_IMODE(os.stat(path).st_mode)
    except FileNotFoundError:
        return 0o666 & ~_current_umask()


def _atomic_write_text(path: str, text: str) -> None:
    directory = os.path.dirname(os.path.abspath(path))
    mode = _sidecar_mode(path)
    fd, tmp_path = tempfile.mkstemp(prefix=".lrcsync-", suffix=".tmp", dir=directory)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(text)
        os.chmod(tmp_path, mode)
        os.replace(tmp_path, path)
    except BaseException:
        try:
            os.unlink(tmp_path)
        except FileNotFoundError:
            pass
        raise


def write_sidecar(track: AudioTrack, record: LyricsRecord, force: bool = False) -> WriteResult:
    """
    Write the record's lyrics next to the audio file (song.mp3 -> song.lrc).
    Synced lyrics are preferred over plain ones.
    """
    text = record.lyrics_text
    if text is None:
        return WriteResult.NO_TEXT

    lrc_path = track.lrc_path
    if not force and os.path.exists(lrc_path):
        return WriteResult.EXISTS

    if not text.endswith("\n"):
        text += "\n"

    try:
        _atomic_write_text(lrc_path, text)
    except OSError as e:
        raise SidecarWriteError(lrc_path, e) from e

    kind = "synced" if record.synced_lyrics else "plain"
    logger.info("Wrote %s lrc to %s", kind, lrc_path)
    return WriteResult.WRITTEN
