"""Shared fixtures and fakes for the lrcsync tests."""

from __future__ import annotations

from typing import Optional

import pytest

from lrcsync.core.config import Config
from lrcsync.core.lrclib_client import ProviderError
from lrcsync.core.models import AudioTrack, IgnoreField, LyricsRecord


def make_record(duration: float = 180.0, record_id: int = 1, **overrides) -> LyricsRecord:
    data = dict(
        id=record_id,
        track_name="Song",
        artist_name="Band",
        album_name="Album",
        duration=duration,
        instrumental=False,
        plain_lyrics="la la la",
        synced_lyrics="[00:01.00] la la la",
    )
    data.update(overrides)
    return LyricsRecord(**data)


class StubProvider:
    """In-memory LyricsProvider that records every call."""

    def __init__(
        self,
        exact: Optional[LyricsRecord] = None,
        candidates: Optional[list[LyricsRecord]] = None,
        get_error: Optional[Exception] = None,
        search_error: Optional[Exception] = None,
    ):
        self.exact = exact
        self.candidates = list(candidates or [])
        self.get_error = get_error
        self.search_error = search_error
        self.get_calls: list[AudioTrack] = []
        self.search_calls: list[tuple[AudioTrack, IgnoreField]] = []

    @property
    def calls(self) -> int:
        return len(self.get_calls) + len(self.search_calls)

    def get(self, track):
        self.get_calls.append(track)
        if self.get_error:
            raise self.get_error
        return self.exact

    def search(self, track, ignore=IgnoreField.NONE):
        self.search_calls.append((track, ignore))
        if self.search_error:
            raise self.search_error
        return list(self.candidates)


@pytest.fixture
def track() -> AudioTrack:
    return AudioTrack(file_path="/music/Band - Song.mp3", title="Song", artist="Band", album="Album", duration=180.0)


@pytest.fixture
def config() -> Config:
    return Config()


@pytest.fixture
def search_config() -> Config:
    return Config(search=True)


@pytest.fixture
def provider_error() -> ProviderError:
    return ProviderError("lrclib returned status 500 for get")
