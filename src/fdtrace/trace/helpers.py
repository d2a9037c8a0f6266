# Filename: src/fdtrace/trace/helpers.py
"""Helpers for decoding raw strace fields: integers, dirfds and paths."""

import logging
import os
import re

from fdtrace.errors import MalformedFieldError
from fdtrace.util.string import c_str_to_bytes

log = logging.getLogger(__name__)

DIRFD_RE = re.compile(r"^(?:AT_FDCWD|-100)$")
INT_RE = re.compile(r"-?(?:0x[0-9a-fA-F]+|\d+)")

TRUNCATED_SUFFIX = "..."


def is_at_fdcwd(dirfd_arg: str) -> bool:
    """True if a *at syscall's dirfd argument means "relative to the CWD"."""
    return bool(DIRFD_RE.match(dirfd_arg.strip()))


def parse_int(text: str, field: str = "field") -> int:
    """
    Parses an fd or return value into an integer, handling hex and decimal.

    strace -y annotations ("3</etc/passwd>") are dropped before parsing.

    Raises:
        MalformedFieldError: If the text is not an integer (including "?")
    """
    value = text.strip().split("<", 1)[0]
    if not INT_RE.fullmatch(value):
        raise MalformedFieldError(f"{field} is not an integer: {text!r}")
    return int(value, 16 if "x" in value else 10)


def canonical_path(raw: str, cwd: str) -> str:
    """
    Turns a raw quoted path argument into an absolute, normalized path.

    Strips the quotes, interprets C escapes, resolves relative paths against
    cwd and normalizes "." and ".." components. Never touches the file system,
    so symlinks are left as they are.

    Args:
        raw: The argument text as strace printed it, e.g. '"../etc/hosts"'
        cwd: The traced process's working directory

    Returns:
        The absolute path as str.

    Raises:
        MalformedFieldError: If the string has a bad escape or is empty.
    """
    text = raw.strip()
    if text.endswith(TRUNCATED_SUFFIX) and not text.endswith('"'):
        log.warning(f"Path {text!r} was truncated by strace, use a larger -s")
        text = text[: -len(TRUNCATED_SUFFIX)]

    if len(text) >= 2 and text.startswith('"') and text.endswith('"'):
        text = text[1:-1]

    try:
        path = os.fsdecode(c_str_to_bytes(text))
    except ValueError as e:
        raise MalformedFieldError(f"Bad escape in path {raw!r}: {e}") from e

    if not path:
        raise MalformedFieldError("Path is empty")

    if not os.path.isabs(path):
        path = os.path.join(cwd, path)

    path = os.path.normpath(path)
    # POSIX normpath keeps a leading "//"
    if path.startswith("//"):
        path = "/" + path.lstrip("/")
    return path
