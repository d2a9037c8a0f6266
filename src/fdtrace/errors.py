# Filename: src/fdtrace/errors.py
"""
Exceptions raised while replaying a trace.

Everything derived from TraceError is recoverable: the replay loop reports it
with the line number and moves on to the next event. UnsupportedTraceError is
not a TraceError and stops the whole run.
"""


class TraceError(Exception):
    """Base class for per-event errors that do not abort the replay."""

    pass


class MalformedFieldError(TraceError, ValueError):
    """A numeric field (fd, return value) or a path string could not be decoded."""

    pass


class ShapeError(TraceError):
    """The event has fewer arguments than the syscall needs."""

    def __init__(self, syscall: str, expected: int, got: int):
        super().__init__(
            f"{syscall} expects at least {expected} arguments, got {got}"
        )
        self.syscall = syscall
        self.expected = expected
        self.got = got


class ConsistencyError(TraceError):
    """The event contradicts the descriptor table built so far."""

    pass


class UnknownDescriptorError(ConsistencyError):
    """A close or access referenced a descriptor that is not open."""

    def __init__(self, syscall: str, fd: int):
        super().__init__(f"{syscall} on fd {fd}, which is not open")
        self.syscall = syscall
        self.fd = fd


class DescriptorConflictError(ConsistencyError):
    """
    A new descriptor was registered at an id that was still open.

    Usually means the trace missed a close. The new description has already
    replaced the old one by the time this is raised.
    """

    def __init__(self, syscall: str, fds: list[int]):
        fd_list = ", ".join(str(fd) for fd in fds)
        super().__init__(f"{syscall} returned fd {fd_list} which was already open")
        self.syscall = syscall
        self.fds = fds


class UnsupportedTraceError(Exception):
    """The trace uses a form this tool does not understand. Fatal."""

    pass
