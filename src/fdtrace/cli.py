#!/usr/bin/env python3
# Filename: src/fdtrace/cli.py
import argparse
import contextlib
import logging
import os
import sys
from collections.abc import Iterator
from typing import TextIO

from rich.console import Console

from fdtrace.errors import UnsupportedTraceError
from fdtrace.log import LEVEL_NAMES, setup_logging
from fdtrace.render import render_errors, render_tree
from fdtrace.replay import replay
from fdtrace.trace.parse import parse_trace
from fdtrace.tracker.observer import LogObserver
from fdtrace.tracker.tracker import DescriptorTracker


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parses command-line arguments for fdtrace."""
    default_level = os.environ.get("LOGLEVEL", "WARNING").upper()
    if default_level not in LEVEL_NAMES:
        default_level = "WARNING"

    parser = argparse.ArgumentParser(
        description="Shows which files a process touched, from its strace log.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="Examples:\n"
        "  strace -o build.trace make\n"
        "  fdtrace build.trace                 # Tree of files read and written\n"
        "  fdtrace --log INFO build.trace      # Also log every OPEN/CLOSE/READ/WRITE\n"
        "  strace make 2>&1 | fdtrace -        # Read the trace from stdin",
    )
    parser.add_argument(
        "trace",
        metavar="TRACE",
        help="strace output file, or - for stdin",
    )
    parser.add_argument(
        "--cwd",
        metavar="DIR",
        default=os.getcwd(),
        help="Directory relative paths in the trace are resolved against "
        "(default: current directory)",
    )
    parser.add_argument(
        "--max-depth",
        metavar="N",
        type=int,
        default=None,
        help="Don't expand directories deeper than N levels",
    )
    parser.add_argument(
        "--show-errors",
        action="store_true",
        help="Print a table of the trace errors after the tree",
    )
    parser.add_argument(
        "--log",
        default=default_level,
        type=str.upper,
        choices=LEVEL_NAMES,
        help=f"Set the logging level (default: {default_level}, from $LOGLEVEL)",
    )
    parser.add_argument(
        "--log-file",
        metavar="PATH",
        type=str,
        default=None,
        help="Write logs to the specified file as well as stderr.",
    )
    args = parser.parse_args(argv)

    if args.max_depth is not None and args.max_depth < 1:
        parser.error("argument --max-depth: must be at least 1")

    return args


@contextlib.contextmanager
def open_trace(path: str) -> Iterator[TextIO]:
    """Opens the trace file, or yields stdin for '-'."""
    if path == "-":
        yield sys.stdin
        return
    with open(path, encoding="utf-8", errors="surrogateescape") as f:
        yield f


# --- Main Application Logic ---


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point: parses args, sets up logging, replays the trace
    through a DescriptorTracker and prints the resulting file tree.
    """
    args = parse_arguments(argv)
    setup_logging(args.log, args.log_file)
    log = logging.getLogger("fdtrace.cli")
    log.debug(f"Parsed arguments: {args}")

    console = Console()
    tracker = DescriptorTracker(observer=LogObserver(), cwd=args.cwd)

    try:
        with open_trace(args.trace) as lines:
            result = replay(parse_trace(lines), tracker)
    except OSError as e:
        log.error(f"Could not read trace {args.trace!r}: {e}")
        return 1
    except UnsupportedTraceError as e:
        log.critical(f"Unsupported trace: {e}")
        return 2

    console.print(render_tree(result.tree, max_depth=args.max_depth))
    if args.show_errors and result.errors:
        console.print(render_errors(result.errors))

    return 0


if __name__ == "__main__":
    sys.exit(main())
