# Filename: src/fdtrace/tracker/observer.py
"""
Sinks for the OPEN/CLOSE/READ/WRITE observations the tracker emits.

The tracker gets one of these at construction time instead of writing to a
global; the CLI hands it a LogObserver, tests usually a RecordingObserver.
"""

import enum
import logging
from typing import Protocol

log = logging.getLogger("fdtrace.observe")


class Action(enum.Enum):
    OPEN = "OPEN"
    CLOSE = "CLOSE"
    READ = "READ"
    WRITE = "WRITE"


def format_observation(action: Action, name: str) -> str:
    return f"{action.value:<5} {name}"


class Observer(Protocol):
    def observe(self, action: Action, name: str) -> None: ...


class LogObserver:
    """Writes each observation as one INFO line."""

    def __init__(self, logger: logging.Logger = log):
        self.logger = logger

    def observe(self, action: Action, name: str) -> None:
        self.logger.info(format_observation(action, name))


class RecordingObserver:
    """Keeps (action, name) pairs in order."""

    def __init__(self):
        self.observations: list[tuple[Action, str]] = []

    def observe(self, action: Action, name: str) -> None:
        self.observations.append((action, name))

    @property
    def lines(self) -> list[str]:
        return [format_observation(a, n) for a, n in self.observations]
