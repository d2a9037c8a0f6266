# Filename: src/fdtrace/replay.py
"""Runs a stream of events through a DescriptorTracker and builds the FileTree."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from fdtrace.errors import TraceError
from fdtrace.file_tree import FileTree
from fdtrace.trace.event import Event
from fdtrace.tracker.descriptor import Descriptor
from fdtrace.tracker.tracker import DescriptorTracker

log = logging.getLogger(__name__)


@dataclass
class Replay:
    """Everything a finished replay produced."""

    tree: FileTree
    closed: list[Descriptor]
    errors: list[tuple[int, TraceError]] = field(default_factory=list)
    seen_syscalls: set[str] = field(default_factory=set)
    event_count: int = 0


def replay(events: Iterable[Event], tracker: DescriptorTracker | None = None) -> Replay:
    """
    Feeds every event to the tracker in order, then flushes it and builds
    the tree.

    Recoverable errors are logged with their line number and collected.
    UnsupportedTraceError is left to propagate.
    """
    if tracker is None:
        tracker = DescriptorTracker()

    errors: list[tuple[int, TraceError]] = []
    event_count = 0

    for event in events:
        event_count += 1
        try:
            tracker.process(event)
        except TraceError as e:
            log.warning(f"line {event.line_no}: {e}")
            errors.append((event.line_no, e))

    closed = tracker.close_all()
    tree = FileTree(tracker.files)

    if tracker.seen_syscalls:
        log.info(f"Ignored syscalls: {', '.join(sorted(tracker.seen_syscalls))}")
    log.info(
        f"Replayed {event_count} events: {len(closed)} descriptors, "
        f"{tree.root.contained_files} files, {len(errors)} errors."
    )

    return Replay(
        tree=tree,
        closed=closed,
        errors=errors,
        seen_syscalls=set(tracker.seen_syscalls),
        event_count=event_count,
    )
