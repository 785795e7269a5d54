from __future__ import annotations

import pytest
from click.testing import CliRunner

from lrcsync import __version__, cli
from lrcsync.core.config import Config, ConfigError, parse_ignore
from lrcsync.core.models import IgnoreField
from lrcsync.core.state import FileResult, FileStatus, RunReport


@pytest.fixture
def fake_run(mocker):
    report = RunReport()
    report.add(FileResult("/m/a.mp3", FileStatus.WRITTEN))
    report.add(FileResult("/m/b.mp3", FileStatus.LOOKUP_ERROR, "lrclib returned status 500 for get"))
    return mocker.patch.object(cli, "run", return_value=report)


def test_defaults_build_config(fake_run, tmp_path):
    result = CliRunner().invoke(cli.main, [str(tmp_path)])

    assert result.exit_code == 0, result.output
    config = fake_run.call_args.args[0]
    assert config == Config(root=str(tmp_path))
    assert "1 matched" in result.output
    assert "1 errored" in result.output


def test_flags_map_onto_config(fake_run, tmp_path):
    args = [
        str(tmp_path), "-u", "http://localhost:3000/", "-a", "-f", "-s",
        "-i", "artist,album", "-i", "duration", "-t", "2.5", "-j", "8", "--timeout", "4",
    ]
    result = CliRunner().invoke(cli.main, args)

    assert result.exit_code == 0, result.output
    config = fake_run.call_args.args[0]
    assert config.lrclib_url == "http://localhost:3000"
    assert config.hidden and config.force and config.search
    assert config.ignore == IgnoreField.ARTIST | IgnoreField.ALBUM | IgnoreField.DURATION
    assert config.tolerance == 2.5
    assert config.jobs == 8
    assert config.timeout == 4.0


@pytest.mark.parametrize(
    "args",
    [
        ["-u", "lrclib.net"],
        ["-u", "ftp://lrclib.net"],
        ["-i", "genre"],
        ["-t", "-1"],
        ["-j", "0"],
        ["--timeout", "0"],
    ],
)
def test_bad_configuration_fails_before_running(fake_run, tmp_path, args):
    result = CliRunner().invoke(cli.main, [str(tmp_path), *args])

    assert result.exit_code == 2
    fake_run.assert_not_called()


def test_interrupted_run_exits_nonzero(mocker, tmp_path):
    report = RunReport(cancelled=True)
    mocker.patch.object(cli, "run", return_value=report)

    result = CliRunner().invoke(cli.main, [str(tmp_path)])

    assert result.exit_code == 1
    assert "interrupted" in result.output


def test_version():
    result = CliRunner().invoke(cli.main, ["-V"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_parse_ignore_accepts_original_aliases():
    assert parse_ignore(["album_name, artist_name", "track"]) == IgnoreField.ALBUM | IgnoreField.ARTIST | IgnoreField.TITLE
    assert parse_ignore(None) == IgnoreField.NONE
    assert parse_ignore("") == IgnoreField.NONE


def test_config_rejects_negative_tolerance():
    with pytest.raises(ConfigError):
        Config(tolerance=-0.1)
