# core/config.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable
from urllib.parse import urlparse

from lrcsync.core.models import IGNORE_ALIASES, IgnoreField

DEFAULT_LRCLIB_URL = "https://lrclib.net"
DEFAULT_TOLERANCE = 5.0
DEFAULT_JOBS = 4
DEFAULT_TIMEOUT = 15.0


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class Config:
    lrclib_url: str = DEFAULT_LRCLIB_URL
    root: str = "."
    hidden: bool = False
    force: bool = False
    search: bool = False
    ignore: IgnoreField = IgnoreField.NONE
    tolerance: float = DEFAULT_TOLERANCE
    jobs: int = DEFAULT_JOBS
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self):
        if self.tolerance < 0:
            raise ConfigError(f"tolerance must be non-negative, got {self.tolerance}")
        if self.jobs < 1:
            raise ConfigError(f"jobs must be at least 1, got {self.jobs}")
        if self.timeout <= 0:
            raise ConfigError(f"timeout must be positive, got {self.timeout}")
        object.__setattr__(self, "lrclib_url", normalize_base_url(self.lrclib_url))


def normalize_base_url(url: str) -> str:
    url = (url or "").strip().rstrip("/")
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigError(f"invalid lrclib url: {url!r} (expected http(s)://host)")
    return url


def parse_ignore(values: Iterable[str] | str | None) -> IgnoreField:
    """
    Parse ignore field names into an IgnoreField set.
    Accepts a comma-separated string or an iterable of them, e.g. ["album,duration", "artist"].
    """
    if values is None:
        return IgnoreField.NONE
    if isinstance(values, str):
        values = [values]

    result = IgnoreField.NONE
    for chunk in values:
        for name in chunk.split(","):
            name = name.strip().lower()
            if not name:
                continue
            field = IGNORE_ALIASES.get(name)
            if field is None:
                allowed = ", ".join(sorted(IGNORE_ALIASES))
                raise ConfigError(f"unknown ignore field {name!r} (allowed: {allowed})")
            result |= field
    return result
