# core/resolver.py
from __future__ import annotations

import logging
from typing import Optional, Sequence

from lrcsync.core.config import Config
from lrcsync.core.lrclib_client import LyricsProvider, ProviderError
from lrcsync.core.models import (
    AudioTrack,
    LyricsRecord,
    Matched,
    MatchOutcome,
    MatchSource,
    NoMatch,
    SkipReason,
    Skipped,
)
from lrcsync.core.utils import format_duration

logger = logging.getLogger(__name__)


def select_candidate(
    candidates: Sequence[LyricsRecord],
    duration_s: Optional[float],
    tolerance: float,
) -> Optional[LyricsRecord]:
    """
    Pick the search result closest in duration to the local file.

    Without a local duration there is nothing to compare against, so the provider's
    first result wins. Otherwise candidates further than `tolerance` seconds away are
    dropped (the boundary itself is kept) and the smallest delta wins; on ties the
    earlier candidate is kept, preserving the provider's ranking.
    """
    if not candidates:
        return None
    if duration_s is None:
        return candidates[0]

    best: Optional[LyricsRecord] = None
    best_delta = 0.0
    for candidate in candidates:
        delta = abs(candidate.duration - duration_s)
        if delta > tolerance:
            continue
        if best is None or delta < best_delta:
            best, best_delta = candidate, delta
    return best


def resolve(track: AudioTrack, config: Config, provider: LyricsProvider) -> MatchOutcome:
    if track.has_lrc and not config.force:
        return Skipped(SkipReason.LRC_EXISTS_NO_FORCE)
    if not track.has_metadata:
        return Skipped(SkipReason.NO_METADATA)

    # 1) exact lookup, every known field is sent
    try:
        record = provider.get(track)
    except ProviderError as e:
        logger.warning("Error finding lrc for %s: %s", track.file_path, e)
        return Skipped(SkipReason.LOOKUP_ERROR, str(e))

    if record is not None:
        logger.debug("Exact match #%s for %s", record.id, track.file_path)
        return Matched(record, MatchSource.GET)

    if not config.search:
        return NoMatch()

    # 2) fuzzy search with the ignored fields left out
    logger.info("Searching lrc for %s", track.file_path)
    try:
        candidates = provider.search(track, config.ignore)
    except ProviderError as e:
        logger.warning("Error searching lrc for %s: %s", track.file_path, e)
        return Skipped(SkipReason.LOOKUP_ERROR, str(e))

    best = select_candidate(candidates, track.duration, config.tolerance)
    if best is None:
        logger.debug(
            "No search result within %.1fs of %s out of %d for %s",
            config.tolerance, format_duration(track.duration), len(candidates), track.file_path,
        )
        return NoMatch()

    logger.info(
        "Searched lrc (found %s vs actual %s out of %d results) for %s",
        format_duration(best.duration), format_duration(track.duration), len(candidates), track.file_path,
    )
    return Matched(best, MatchSource.SEARCH)
