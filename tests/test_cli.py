"""Tests for the fdtrace command line."""

import logging

import pytest

from fdtrace import cli

TRACE = """\
openat(AT_FDCWD, "/a/b/c.txt", O_WRONLY|O_CREAT, 0644) = 3
openat(AT_FDCWD, "/a/b/d.txt", O_RDONLY) = 4
close(7) = 0
"""


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def trace_file(tmp_path):
    path = tmp_path / "build.trace"
    path.write_text(TRACE)
    return path


def test_prints_tree(trace_file, capsys):
    assert cli.main([str(trace_file)]) == 0
    out = capsys.readouterr().out
    assert "c.txt" in out
    assert "d.txt" in out
    assert "(2 files)" in out


def test_max_depth(trace_file, capsys):
    assert cli.main(["--max-depth", "1", str(trace_file)]) == 0
    out = capsys.readouterr().out
    assert "(2 files)" in out
    assert "c.txt" not in out


def test_show_errors(trace_file, capsys):
    assert cli.main(["--show-errors", str(trace_file)]) == 0
    out = capsys.readouterr().out
    assert "UnknownDescriptorError" in out


def test_info_logging_shows_observations(trace_file, capsys):
    assert cli.main(["--log", "info", str(trace_file)]) == 0
    err = capsys.readouterr().err
    assert "OPEN  /a/b/c.txt" in err


def test_log_file(trace_file, tmp_path):
    log_path = tmp_path / "fdtrace.log"
    assert cli.main(["--log", "DEBUG", "--log-file", str(log_path), str(trace_file)]) == 0
    for handler in logging.getLogger().handlers:
        handler.flush()
    assert "OPEN  /a/b/d.txt" in log_path.read_text()


def test_missing_file(tmp_path):
    assert cli.main([str(tmp_path / "nope.trace")]) == 1


def test_unsupported_trace(tmp_path):
    path = tmp_path / "at.trace"
    path.write_text('openat(5, "x", O_RDONLY) = 3\n')
    assert cli.main([str(path)]) == 2


def test_bad_max_depth(trace_file):
    with pytest.raises(SystemExit):
        cli.main(["--max-depth", "0", str(trace_file)])


def test_loglevel_environment_default(monkeypatch):
    monkeypatch.setenv("LOGLEVEL", "debug")
    assert cli.parse_arguments(["x.trace"]).log == "DEBUG"
    monkeypatch.setenv("LOGLEVEL", "chatty")
    assert cli.parse_arguments(["x.trace"]).log == "WARNING"
