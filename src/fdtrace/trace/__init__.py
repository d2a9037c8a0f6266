"""Reading strace output: line grammar, Event records and field decoding."""

from .event import Event
from .parse import parse_event, parse_trace

__all__ = ["Event", "parse_event", "parse_trace"]
