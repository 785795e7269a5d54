from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

import requests

from lrcsync import __version__
from lrcsync.core.models import AudioTrack, IgnoreField, LyricsRecord
from lrcsync.core.utils import query_text

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = f"lrcsync/{__version__}"


class ProviderError(Exception):
    """Any transport, status or parse failure talking to LRCLIB."""


class LyricsProvider(Protocol):
    def get(self, track: AudioTrack) -> Optional[LyricsRecord]:
        ...

    def search(self, track: AudioTrack, ignore: IgnoreField = IgnoreField.NONE) -> list[LyricsRecord]:
        ...


def _duration_param(duration_s: float | None) -> int | None:
    # LRCLIB matches on whole seconds
    if duration_s is None or duration_s <= 0:
        return None
    return int(round(duration_s))


def build_get_params(track: AudioTrack) -> dict[str, str | int]:
    # GET /api/get?track_name=&artist_name=&album_name=&duration=
    params: dict[str, str | int] = {}
    if track.title:
        params["track_name"] = track.title
    if track.artist:
        params["artist_name"] = track.artist
    if track.album:
        params["album_name"] = track.album
    duration = _duration_param(track.duration)
    if duration is not None:
        params["duration"] = duration
    return params


def build_search_params(track: AudioTrack, ignore: IgnoreField = IgnoreField.NONE) -> dict[str, str | int]:
    # GET /api/search?q=&track_name=&artist_name=&album_name=
    title = None if IgnoreField.TITLE in ignore else track.title
    artist = None if IgnoreField.ARTIST in ignore else track.artist
    album = None if IgnoreField.ALBUM in ignore else track.album
    duration = None if IgnoreField.DURATION in ignore else _duration_param(track.duration)

    params: dict[str, str | int] = {}
    q = query_text(artist, title, album)
    if q:
        params["q"] = q
    if title:
        params["track_name"] = title
    if artist:
        params["artist_name"] = artist
    if album:
        params["album_name"] = album
    if duration is not None:
        params["duration"] = duration
    return params


class LrcLibClient:
    def __init__(
        self,
        base_url: str = "https://lrclib.net",
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = 15.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": user_agent, "Lrclib-Client": user_agent})

    def close(self) -> None:
        self.session.close()

    def _get_json(self, endpoint: str, params: dict[str, Any]) -> Optional[Any]:
        """Return the decoded JSON body, or None on 404."""
        url = f"{self.base_url}/api/{endpoint}"
        try:
            r = self.session.get(url, params=params, timeout=self.timeout)
        except requests.Timeout as exc:
            raise ProviderError(f"lrclib request timed out after {self.timeout}s: {url}") from exc
        except requests.RequestException as exc:
            raise ProviderError(f"lrclib request failed: {exc}") from exc

        if r.status_code == 404:
            return None
        if not 200 <= r.status_code < 300:
            raise ProviderError(f"lrclib returned status {r.status_code} for {endpoint}")

        try:
            return r.json()
        except ValueError as exc:
            raise ProviderError(f"invalid JSON from lrclib {endpoint}: {exc}") from exc

    def get(self, track: AudioTrack) -> Optional[LyricsRecord]:
        params = build_get_params(track)
        logger.debug("lrclib get %s", params)
        data = self._get_json("get", params)
        if data is None:
            return None
        return _parse_record(data)

    def search(self, track: AudioTrack, ignore: IgnoreField = IgnoreField.NONE) -> list[LyricsRecord]:
        params = build_search_params(track, ignore)
        logger.debug("lrclib search %s", params)
        data = self._get_json("search", params)
        if data is None:
            return []
        if not isinstance(data, list):
            raise ProviderError("error parsing lrclib search response (did the api schema change?): expected a list")
        return [_parse_record(item) for item in data]


def _parse_record(data: Any) -> LyricsRecord:
    if not isinstance(data, dict):
        raise ProviderError("error parsing lrclib response (did the api schema change?): expected an object")
    try:
        return LyricsRecord.from_json(data)
    except (KeyError, TypeError, ValueError) as exc:
        raise ProviderError(f"error parsing lrclib response (did the api schema change?): {exc!r}") from exc
