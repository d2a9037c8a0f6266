"""Tests for decoding raw strace fields."""

import pytest

from fdtrace.errors import MalformedFieldError
from fdtrace.trace import helpers


@pytest.mark.parametrize(
    "text, expected",
    [
        ("3", 3),
        ("-1", -1),
        (" 42 ", 42),
        ("0x10", 16),
        ("3</etc/passwd>", 3),
        ("4<pipe:[1234]>", 4),
    ],
)
def test_parse_int(text, expected):
    assert helpers.parse_int(text) == expected


@pytest.mark.parametrize("text", ["?", "", "abc", "3.5", "1_0", "+3", "0x", "- 1", "3 4"])
def test_parse_int_malformed(text):
    with pytest.raises(MalformedFieldError, match="return value"):
        helpers.parse_int(text, "return value")


def test_is_at_fdcwd():
    assert helpers.is_at_fdcwd("AT_FDCWD")
    assert helpers.is_at_fdcwd(" -100")
    assert not helpers.is_at_fdcwd("3")
    assert not helpers.is_at_fdcwd("AT_FDCWDX")


def test_canonical_path_absolute():
    assert helpers.canonical_path('"/etc/hosts"', "/home/user") == "/etc/hosts"


def test_canonical_path_relative():
    assert helpers.canonical_path('"src/main.c"', "/home/user") == "/home/user/src/main.c"
    assert helpers.canonical_path('"../x"', "/home/user") == "/home/x"


def test_canonical_path_normalizes():
    assert helpers.canonical_path('"/usr/./lib/../bin//ls"', "/") == "/usr/bin/ls"
    assert helpers.canonical_path('"//etc/hosts"', "/") == "/etc/hosts"


def test_canonical_path_escapes():
    raw = '"\\x2f\\x74\\x6d\\x70\\x2f\\x61"'
    assert helpers.canonical_path(raw, "/") == "/tmp/a"


def test_canonical_path_truncated(caplog):
    with caplog.at_level("WARNING"):
        assert helpers.canonical_path('"/very/long/na"...', "/") == "/very/long/na"
    assert "truncated" in caplog.text


def test_canonical_path_bad_escape():
    with pytest.raises(MalformedFieldError):
        helpers.canonical_path('"/tmp/\\x4"', "/")


def test_canonical_path_empty():
    with pytest.raises(MalformedFieldError):
        helpers.canonical_path('""', "/")


def test_parse_int_negative_hex():
    assert helpers.parse_int("-0x10") == -16


def test_canonical_path_keeps_undecodable_bytes():
    """A trace read with surrogateescape keeps non-UTF-8 bytes in the path."""
    assert helpers.canonical_path('"/tmp/caf\udce9"', "/") == "/tmp/caf\udce9"
