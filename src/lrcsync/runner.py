# runner.py
from __future__ import annotations

import logging
import os
import threading
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Callable, Iterable, Optional

from mutagen import MutagenError

from lrcsync.core.config import Config
from lrcsync.core.lrclib_client import LrcLibClient, LyricsProvider
from lrcsync.core.models import AudioTrack, Matched, NoMatch, SkipReason, Skipped, lrc_path_for
from lrcsync.core.resolver import resolve
from lrcsync.core.state import FileResult, FileStatus, RunReport
from lrcsync.library.scan_library import iter_audio_paths, read_audio_track
from lrcsync.library.sidecar import SidecarWriteError, WriteResult, write_sidecar

logger = logging.getLogger(__name__)

SKIP_STATUS = {
    SkipReason.NO_METADATA: FileStatus.SKIPPED_NO_METADATA,
    SkipReason.LRC_EXISTS_NO_FORCE: FileStatus.SKIPPED_EXISTING,
    SkipReason.LOOKUP_ERROR: FileStatus.LOOKUP_ERROR,
}

WRITE_STATUS = {
    WriteResult.WRITTEN: FileStatus.WRITTEN,
    WriteResult.NO_TEXT: FileStatus.NO_TEXT,
    WriteResult.EXISTS: FileStatus.EXISTS,
}


def load_track(path: str, force: bool) -> AudioTrack:
    # Skip reading tags for files the resolver will skip anyway.
    if not force and os.path.exists(lrc_path_for(path)):
        return AudioTrack(file_path=path, has_lrc=True)
    return read_audio_track(path)


def process_file(path: str, config: Config, provider: LyricsProvider) -> FileResult:
    try:
        track = load_track(path, config.force)
    except (MutagenError, OSError) as e:
        logger.warning("Error reading file metadata %s: %s", path, e)
        return FileResult(path, FileStatus.READ_ERROR, str(e))

    outcome = resolve(track, config, provider)

    if isinstance(outcome, Skipped):
        if outcome.reason is SkipReason.LRC_EXISTS_NO_FORCE:
            logger.info("Skipping %s: lrc file already exists", path)
        elif outcome.reason is SkipReason.NO_METADATA:
            logger.info("Skipping %s: no usable metadata", path)
        return FileResult(path, SKIP_STATUS[outcome.reason], outcome.detail)

    if isinstance(outcome, NoMatch):
        logger.info("Did not find lrc for %s", path)
        return FileResult(path, FileStatus.NO_MATCH)

    if isinstance(outcome, Matched):
        try:
            written = write_sidecar(track, outcome.record, force=config.force)
        except SidecarWriteError as e:
            logger.error("Error in saving lrc %s: %s", path, e)
            return FileResult(path, FileStatus.WRITE_ERROR, str(e))

        if written is WriteResult.NO_TEXT:
            logger.info("Matched %s but the record has no lyrics (instrumental=%s)", path, outcome.record.instrumental)
        elif written is WriteResult.EXISTS:
            logger.info("Not overwriting %s: lrc file appeared during the run", path)
        return FileResult(path, WRITE_STATUS[written])

    raise TypeError(f"unexpected match outcome {outcome!r}")


def run(
    config: Config,
    provider: Optional[LyricsProvider] = None,
    cancel: Optional[threading.Event] = None,
    paths: Optional[Iterable[str]] = None,
    on_result: Optional[Callable[[FileResult], None]] = None,
) -> RunReport:
    """
    Resolve every audio file under config.root and write sidecars for matches.

    At most config.jobs files are in flight at once. Setting `cancel` stops new files
    from being dispatched; files already in flight are allowed to finish. A second
    interrupt while waiting on them returns without their results. Per-file
    results are folded into the report on the calling thread only.
    """
    cancel = cancel or threading.Event()
    owns_provider = provider is None
    if provider is None:
        provider = LrcLibClient(config.lrclib_url, timeout=config.timeout)

    if paths is None:
        paths = iter_audio_paths(config.root, include_hidden=config.hidden)

    report = RunReport()
    pending: dict[Future, str] = {}
    abandoned = False
    start_time = time.time()

    def collect(done: Iterable[Future]) -> None:
        for future in done:
            path = pending.pop(future)
            try:
                result = future.result()
            except Exception as e:
                logger.exception("Unexpected failure processing %s", path)
                result = FileResult(path, FileStatus.FAILED, str(e))
            report.add(result)
            if on_result is not None:
                on_result(result)

    executor = ThreadPoolExecutor(max_workers=config.jobs, thread_name_prefix="lrcsync")
    try:
        try:
            for path in paths:
                if cancel.is_set():
                    break
                while len(pending) >= config.jobs:
                    done, _ = wait(pending, return_when=FIRST_COMPLETED)
                    collect(done)
                if cancel.is_set():
                    break
                pending[executor.submit(process_file, path, config, provider)] = path
        except KeyboardInterrupt:
            logger.warning("Interrupted, waiting for %d file(s) in flight...", len(pending))
            cancel.set()

        while pending:
            try:
                done, _ = wait(pending)
            except KeyboardInterrupt:
                logger.warning("Interrupted again, not waiting for %d file(s) in flight", len(pending))
                cancel.set()
                abandoned = True
                break
            collect(done)
    finally:
        executor.shutdown(wait=not abandoned, cancel_futures=True)
        if owns_provider and isinstance(provider, LrcLibClient):
            provider.close()

    report.cancelled = cancel.is_set()
    logger.debug("==> Run took: %dms", int((time.time() - start_time) * 1000))
    return report
