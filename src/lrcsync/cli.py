# cli.py
from __future__ import annotations

import logging
import sys
import threading

import click

from lrcsync import __version__
from lrcsync.core.config import (
    DEFAULT_JOBS,
    DEFAULT_LRCLIB_URL,
    DEFAULT_TIMEOUT,
    DEFAULT_TOLERANCE,
    Config,
    ConfigError,
    normalize_base_url,
    parse_ignore,
)
from lrcsync.runner import run

logger = logging.getLogger("lrcsync")


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s" if verbose else "%(message)s",
        stream=sys.stderr,
    )
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def _validate_url(ctx, param, value: str) -> str:
    try:
        return normalize_base_url(value)
    except ConfigError as e:
        raise click.BadParameter(str(e)) from e


def _validate_ignore(ctx, param, value):
    try:
        return parse_ignore(value)
    except ConfigError as e:
        raise click.BadParameter(str(e)) from e


@click.command(
    context_settings={"help_option_names": ["-h", "--help"]},
    help="Pulls lrc files for songs in DIRECTORY (default: the current directory). Try it on your music collection.",
)
@click.argument("directory", default=".", type=click.Path(exists=True, file_okay=False, dir_okay=True))
@click.option("-u", "--lrclib-url", default=DEFAULT_LRCLIB_URL, show_default=True,
              callback=_validate_url, help="Base URL of the LRCLIB instance.")
@click.option("-a", "--hidden", is_flag=True, help="Include hidden files and directories.")
@click.option("-f", "--force", is_flag=True, help="Overwrite existing lrc files.")
@click.option("-i", "--ignore", multiple=True, callback=_validate_ignore, metavar="FIELDS",
              help="Comma-separated fields (title,artist,album,duration) left out of fallback searches.")
@click.option("-s", "--search", is_flag=True, help="Use searching on lrclib as a fallback.")
@click.option("-t", "--tolerance", default=DEFAULT_TOLERANCE, show_default=True, type=click.FloatRange(min=0),
              help="Tolerance in seconds between local and searched durations.")
@click.option("-j", "--jobs", default=DEFAULT_JOBS, show_default=True, type=click.IntRange(min=1),
              help="Number of files processed concurrently.")
@click.option("--timeout", default=DEFAULT_TIMEOUT, show_default=True, type=click.FloatRange(min=0, min_open=True),
              help="Per-request timeout in seconds.")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.version_option(__version__, "-V", "--version", prog_name="lrcsync")
def main(directory, lrclib_url, hidden, force, ignore, search, tolerance, jobs, timeout, verbose):
    setup_logging(verbose)

    config = Config(
        lrclib_url=lrclib_url,
        root=directory,
        hidden=hidden,
        force=force,
        search=search,
        ignore=ignore,
        tolerance=tolerance,
        jobs=jobs,
        timeout=timeout,
    )
    logger.debug("Config: %s", config)

    report = run(config, cancel=threading.Event())

    for line in report.summary_lines():
        click.echo(line)
    for failure in report.errors:
        click.echo(f"  {failure.status.value}: {failure.file_path}: {failure.message}", err=True)

    if report.cancelled:
        sys.exit(1)
