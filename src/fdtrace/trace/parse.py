# Filename: src/fdtrace/trace/parse.py
"""Turns strace output lines into Event records."""

import logging
import re
from collections.abc import Iterable, Iterator

import pyparsing as pp

from .event import Event
from .parser_defs import parse_line

log = logging.getLogger(__name__)

# --- Regular Expressions ---
# Process start/exit banners and signal deliveries, optionally after a pid
BANNER_RE = re.compile(r"^(?:\[pid\s+\d+\]\s*|\d+\s+)?(?:\+\+\+|---)")

# Matches lines indicating syscall was unfinished
UNFINISHED_RE = re.compile(r"<unfinished \.\.\.>\s*$")

# Matches lines indicating syscall resumption
RESUMED_RE = re.compile(r"<\.\.\. (?P<syscall>\w+) resumed>")


def parse_event(line: str, line_no: int = 0) -> Event:
    """
    Parses one complete syscall line into an Event.

    Raises:
        pp.ParseException: If the line is not a complete syscall line
    """
    parsed = parse_line(line)
    error_part = parsed.get("error_part")
    if error_part:
        log.debug(f"line {line_no}: {parsed['syscall']} failed with {error_part[0]}")

    return Event(
        syscall=parsed["syscall"],
        args=tuple(arg.strip() for arg in parsed["args"]),
        result=parsed["result"],
        line_no=line_no,
        pid=parsed.get("pid"),
    )


def parse_trace(lines: Iterable[str]) -> Iterator[Event]:
    """
    Parses strace output lines into Events, in order.

    Blank lines, +++/--- banners and unfinished/resumed fragments are
    skipped. Lines that don't parse are logged and skipped too; line
    numbers keep counting so later reports still point at the right line.
    """
    line_count = 0
    parsed_count = 0
    skipped_count = 0

    for line_no, line in enumerate(lines, start=1):
        line_count = line_no
        line = line.strip()

        if not line or BANNER_RE.match(line):
            continue

        if UNFINISHED_RE.search(line) or RESUMED_RE.search(line):
            log.debug(f"line {line_no}: skipping split syscall: {line!r}")
            skipped_count += 1
            continue

        try:
            event = parse_event(line, line_no)
        except pp.ParseException as e:
            log.warning(f"line {line_no}: could not parse {line!r}: {e}")
            skipped_count += 1
            continue

        parsed_count += 1
        yield event

    log.info(
        f"Parsed {line_count} lines, yielded {parsed_count} events, "
        f"skipped {skipped_count}."
    )
