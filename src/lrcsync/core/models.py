# core/models.py
from __future__ import annotations

import enum
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

LRC_SUFFIX = ".lrc"
INSTRUMENTAL_MARKER = "[au: instrumental]"


def _norm(s: Optional[str]) -> Optional[str]:
    """Normalize optional strings (strip + convert empty to None)."""
    if s is None:
        return None
    s = str(s).strip()
    return s or None


def lrc_path_for(audio_path: str) -> str:
    return str(Path(audio_path).with_suffix(LRC_SUFFIX))


@dataclass(frozen=True)
class AudioTrack:
    file_path: str
    title: Optional[str] = None
    artist: Optional[str] = None
    album: Optional[str] = None
    duration: Optional[float] = None
    has_lrc: bool = False

    @property
    def file_name(self) -> str:
        return os.path.basename(self.file_path)

    @property
    def lrc_path(self) -> str:
        return lrc_path_for(self.file_path)

    @property
    def has_metadata(self) -> bool:
        return any(v is not None for v in (self.title, self.artist, self.album, self.duration))


@dataclass(frozen=True)
class LyricsRecord:
    id: int
    track_name: str
    artist_name: str
    album_name: str
    duration: float
    instrumental: bool = False
    plain_lyrics: Optional[str] = None
    synced_lyrics: Optional[str] = None

    @staticmethod
    def from_json(data: dict[str, Any]) -> "LyricsRecord":
        # KeyError/TypeError/ValueError on a malformed payload; the client wraps them.
        synced = _norm(data.get("syncedLyrics"))
        instrumental = bool(data.get("instrumental", False)) or synced == INSTRUMENTAL_MARKER
        if synced == INSTRUMENTAL_MARKER:
            synced = None
        return LyricsRecord(
            id=int(data["id"]),
            track_name=str(data["trackName"] or ""),
            artist_name=str(data["artistName"] or ""),
            album_name=str(data.get("albumName") or ""),
            duration=float(data["duration"]),
            instrumental=instrumental,
            plain_lyrics=_norm(data.get("plainLyrics")),
            synced_lyrics=synced,
        )

    @property
    def lyrics_text(self) -> Optional[str]:
        return self.synced_lyrics or self.plain_lyrics


class IgnoreField(enum.Flag):
    NONE = 0
    TITLE = enum.auto()
    ARTIST = enum.auto()
    ALBUM = enum.auto()
    DURATION = enum.auto()


IGNORE_ALIASES = {
    "title": IgnoreField.TITLE,
    "track": IgnoreField.TITLE,
    "track_name": IgnoreField.TITLE,
    "artist": IgnoreField.ARTIST,
    "artist_name": IgnoreField.ARTIST,
    "album": IgnoreField.ALBUM,
    "album_name": IgnoreField.ALBUM,
    "duration": IgnoreField.DURATION,
}


class SkipReason(enum.Enum):
    NO_METADATA = "no-metadata"
    LRC_EXISTS_NO_FORCE = "lrc-exists-no-force"
    LOOKUP_ERROR = "lookup-error"


class MatchSource(enum.Enum):
    GET = "get"
    SEARCH = "search"


class MatchOutcome:
    """Result of resolving one AudioTrack: Matched, NoMatch or Skipped."""


@dataclass(frozen=True)
class Matched(MatchOutcome):
    record: LyricsRecord
    source: MatchSource = MatchSource.GET


@dataclass(frozen=True)
class NoMatch(MatchOutcome):
    pass


@dataclass(frozen=True)
class Skipped(MatchOutcome):
    reason: SkipReason
    detail: str = ""
