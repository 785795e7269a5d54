import re
from typing import Optional


def collapse(s: str) -> str:
    """
    Combine runs of whitespace into a single space and trim both ends.
    """
    return re.sub(r'\s+', ' ', s).strip()


def query_text(*parts: Optional[str]) -> Optional[str]:
    """
    Build free-text search input from whatever parts are present.
    Returns None when nothing is left, so callers can omit the field entirely.
    """
    text = collapse(" ".join(p for p in parts if p))
    return text or None


def format_duration(seconds: Optional[float]) -> str:
    if seconds is None:
        return "?"
    return f"{seconds:.1f}s"
