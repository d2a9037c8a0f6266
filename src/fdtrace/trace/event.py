# Filename: src/fdtrace/trace/event.py
"""
The Event dataclass shared by the line parser and the descriptor tracker.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Event:
    """One parsed strace line: syscall name, raw argument strings, raw result."""

    syscall: str
    args: tuple[str, ...] = field(default_factory=tuple)
    result: str = ""
    line_no: int = 0
    pid: int | None = None

    def __repr__(self) -> str:
        """Provide a concise string representation for logging."""
        args_repr = ", ".join(self.args[:2]) + (", ..." if len(self.args) > 2 else "")
        pid_part = f"pid={self.pid}, " if self.pid is not None else ""
        return (
            f"Event({pid_part}line={self.line_no}, "
            f"call={self.syscall}({args_repr}), ret={self.result})"
        )
