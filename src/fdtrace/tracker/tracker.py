# Filename: src/fdtrace/tracker/tracker.py
"""
The descriptor tracker: replays syscall events against a table of open fds.

Handlers receive the tracker and one Event. They raise TraceError subclasses
for problems the caller should report and carry on from, and
UnsupportedTraceError for traces this tool can't follow at all.
"""

import dataclasses
import logging
import os
from collections.abc import Callable

from fdtrace.errors import (
    DescriptorConflictError,
    ShapeError,
    UnknownDescriptorError,
    UnsupportedTraceError,
)
from fdtrace.log import TRACE_LEVEL_NUM
from fdtrace.trace import helpers
from fdtrace.trace.event import Event

from .descriptor import (
    STD_STREAMS,
    Descriptor,
    Other,
    PipeEnd,
    RegularFile,
    Socket,
    display_name,
)
from .observer import Action, LogObserver, Observer

log = logging.getLogger(__name__)

CREAT_FLAGS = "O_CREAT|O_WRONLY|O_TRUNC"
PIPE_READ_FLAGS = "O_RDONLY"
PIPE_WRITE_FLAGS = "O_WRONLY"

# Syscalls that return a new fd we don't classify any further
OPAQUE_FD_SYSCALLS = {
    "eventfd",
    "eventfd2",
    "epoll_create",
    "epoll_create1",
    "memfd_create",
    "timerfd_create",
    "signalfd",
    "signalfd4",
    "inotify_init",
    "inotify_init1",
    "userfaultfd",
    "pidfd_open",
}


class DescriptorTracker:
    """
    Holds the open fd table for one traced process.

    Every description lives either in `open` (keyed by fd) or in `closed`
    (in the order it left the table), never both. fds 0-2 start out as the
    standard streams.
    """

    def __init__(self, observer: Observer | None = None, cwd: str | None = None):
        self.observer = observer if observer is not None else LogObserver()
        self.cwd = cwd if cwd is not None else os.getcwd()
        self.open: dict[int, Descriptor] = dict(STD_STREAMS)
        self.closed: list[Descriptor] = []
        self.seen_syscalls: set[str] = set()

    def process(self, event: Event):
        """Applies one event to the table."""
        handler = SYSCALL_HANDLERS.get(event.syscall)
        if handler is None and event.syscall in OPAQUE_FD_SYSCALLS:
            handler = _handle_opaque_fd
        if handler is None:
            if event.syscall not in self.seen_syscalls:
                log.log(TRACE_LEVEL_NUM, f"Ignoring syscall: {event.syscall}")
            self.seen_syscalls.add(event.syscall)
            return

        handler(self, event)

    def close_all(self) -> list[Descriptor]:
        """Moves everything still open into `closed`, as process exit would."""
        log.debug(f"Flushing {len(self.open)} descriptors still open at exit")
        self.closed.extend(self.open.values())
        self.open.clear()
        return self.closed

    @property
    def files(self) -> list[RegularFile]:
        """Regular files in `closed`, the input for the file tree."""
        return [d for d in self.closed if isinstance(d, RegularFile)]

    def register(self, fd: int, descriptor: Descriptor) -> bool:
        """
        Puts a description at fd. Returns True if that displaced another one,
        which is moved to `closed`.
        """
        previous = self.open.get(fd)
        self.open[fd] = descriptor
        self.observer.observe(Action.OPEN, display_name(descriptor))

        if previous is None:
            return False

        log.debug(f"fd {fd} reused while open, closing {display_name(previous)}")
        self.closed.append(previous)
        return True

    def lookup(self, fd: int, syscall: str) -> Descriptor:
        try:
            return self.open[fd]
        except KeyError:
            raise UnknownDescriptorError(syscall, fd) from None


# --- Helpers ---


def _require_args(event: Event, count: int):
    if len(event.args) < count:
        raise ShapeError(event.syscall, count, len(event.args))


def _register_all(tracker: DescriptorTracker, event: Event, entries):
    """Registers every (fd, descriptor), then reports any conflicts at once."""
    conflicts = [fd for fd, descriptor in entries if tracker.register(fd, descriptor)]
    if conflicts:
        raise DescriptorConflictError(event.syscall, conflicts)


def _open_file(tracker: DescriptorTracker, event: Event, path_arg: str, flags: str):
    fd = helpers.parse_int(event.result, "return value")
    if fd < 0:
        log.debug(f"line {event.line_no}: {event.syscall} of {path_arg} failed")
        return

    path = helpers.canonical_path(path_arg, tracker.cwd)
    _register_all(tracker, event, [(fd, RegularFile(path, flags.strip()))])


# --- Open/Create Syscall Handlers ---


def _handle_open(tracker: DescriptorTracker, event: Event):
    """Handles 'open' syscall: open(path, flags[, mode])."""
    _require_args(event, 2)
    _open_file(tracker, event, event.args[0], event.args[1])


def _handle_openat(tracker: DescriptorTracker, event: Event):
    """Handles 'openat' syscall: openat(dirfd, path, flags[, mode])."""
    _require_args(event, 3)
    dirfd_arg = event.args[0]
    if not helpers.is_at_fdcwd(dirfd_arg):
        raise UnsupportedTraceError(
            f"line {event.line_no}: openat relative to dirfd {dirfd_arg} "
            "is not supported, only AT_FDCWD"
        )
    _open_file(tracker, event, event.args[1], event.args[2])


def _handle_creat(tracker: DescriptorTracker, event: Event):
    """Handles 'creat' syscall, which is open with O_CREAT|O_WRONLY|O_TRUNC."""
    _require_args(event, 2)
    _open_file(tracker, event, event.args[0], CREAT_FLAGS)


# --- Close Syscall Handler ---


def _handle_close(tracker: DescriptorTracker, event: Event):
    """Handles 'close' syscall. Only a 0 return actually closes."""
    _require_args(event, 1)
    fd = helpers.parse_int(event.args[0], "fd")
    tracker.lookup(fd, event.syscall)

    result = helpers.parse_int(event.result, "return value")
    if result != 0:
        log.debug(f"line {event.line_no}: close({fd}) failed, fd stays open")
        return

    descriptor = tracker.open.pop(fd)
    tracker.closed.append(descriptor)
    tracker.observer.observe(Action.CLOSE, display_name(descriptor))


# --- Read/Write Syscall Handlers ---


def _handle_read(tracker: DescriptorTracker, event: Event):
    _handle_read_write_common(tracker, event, Action.READ)


def _handle_write(tracker: DescriptorTracker, event: Event):
    _handle_read_write_common(tracker, event, Action.WRITE)


def _handle_read_write_common(
    tracker: DescriptorTracker, event: Event, action: Action
):
    """
    Common logic for read/write syscalls. Only reports the access; the
    permission a file gets is decided by its open flags.
    """
    _require_args(event, 1)
    fd = helpers.parse_int(event.args[0], "fd")
    descriptor = tracker.lookup(fd, event.syscall)
    tracker.observer.observe(action, display_name(descriptor))


# --- Pipe/Socket Syscall Handlers ---


def _fd_pair(event: Event, index: int = 0) -> tuple[int, int]:
    """Gets two fds from "[3, 4]" or from two "[3", "4]" tokens at args[index]."""
    first = event.args[index].strip() if len(event.args) > index else ""
    if first.startswith("[") and first.endswith("]"):
        tokens = first[1:-1].split(",")
    else:
        tokens = [arg.strip(" []") for arg in event.args[index : index + 2]]

    if len(tokens) < 2:
        raise ShapeError(event.syscall, 2, len(tokens))

    return (
        helpers.parse_int(tokens[0], "first fd"),
        helpers.parse_int(tokens[1], "second fd"),
    )


def _handle_pipe(tracker: DescriptorTracker, event: Event):
    """Handles 'pipe' and 'pipe2' syscalls."""
    _require_args(event, 1)
    result = helpers.parse_int(event.result, "return value")
    if result != 0:
        log.debug(f"line {event.line_no}: {event.syscall} failed")
        return

    read_fd, write_fd = _fd_pair(event)
    _register_all(
        tracker,
        event,
        [(read_fd, PipeEnd(PIPE_READ_FLAGS)), (write_fd, PipeEnd(PIPE_WRITE_FLAGS))],
    )


def _handle_socket(tracker: DescriptorTracker, event: Event):
    """Handles 'socket' syscall: socket(domain, type, protocol)."""
    _require_args(event, 3)
    fd = helpers.parse_int(event.result, "return value")
    if fd < 0:
        return
    _register_all(tracker, event, [(fd, Socket())])


def _handle_socketpair(tracker: DescriptorTracker, event: Event):
    """Handles 'socketpair' syscall: socketpair(domain, type, protocol, [a, b])."""
    _require_args(event, 4)
    result = helpers.parse_int(event.result, "return value")
    if result != 0:
        return
    first, second = _fd_pair(event, 3)
    _register_all(tracker, event, [(first, Socket()), (second, Socket())])


def _handle_accept(tracker: DescriptorTracker, event: Event):
    """Handles 'accept' and 'accept4': the result is a connected socket."""
    _require_args(event, 1)
    listener = helpers.parse_int(event.args[0], "fd")
    tracker.lookup(listener, event.syscall)
    fd = helpers.parse_int(event.result, "return value")
    if fd < 0:
        return
    _register_all(tracker, event, [(fd, Socket())])


# --- Dup Syscall Handler ---


def _handle_dup(tracker: DescriptorTracker, event: Event):
    """
    Handles 'dup', 'dup2' and 'dup3'. The new fd gets its own copy of the
    old fd's description. dup2/dup3 silently close whatever was at the
    target fd first, so that is not a conflict.
    """
    _require_args(event, 1)
    old_fd = helpers.parse_int(event.args[0], "fd")
    descriptor = tracker.lookup(old_fd, event.syscall)

    new_fd = helpers.parse_int(event.result, "return value")
    if new_fd < 0 or new_fd == old_fd:
        return

    if event.syscall != "dup" and new_fd in tracker.open:
        replaced = tracker.open.pop(new_fd)
        tracker.closed.append(replaced)
        tracker.observer.observe(Action.CLOSE, display_name(replaced))

    _register_all(tracker, event, [(new_fd, dataclasses.replace(descriptor))])


def _handle_opaque_fd(tracker: DescriptorTracker, event: Event):
    """Handles syscalls that return an fd of a kind we don't look into."""
    fd = helpers.parse_int(event.result, "return value")
    if fd < 0:
        return
    _register_all(tracker, event, [(fd, Other(event.syscall))])


SyscallHandler = Callable[[DescriptorTracker, Event], None]

# --- SYSCALL_HANDLERS dictionary ---
SYSCALL_HANDLERS: dict[str, SyscallHandler] = {
    # Open/Create handlers
    "open": _handle_open,
    "openat": _handle_openat,
    "creat": _handle_creat,
    # Close handler
    "close": _handle_close,
    # Read/Write handlers
    "read": _handle_read,
    "readv": _handle_read,
    "pread64": _handle_read,
    "preadv": _handle_read,
    "preadv2": _handle_read,
    "write": _handle_write,
    "writev": _handle_write,
    "pwrite64": _handle_write,
    "pwritev": _handle_write,
    "pwritev2": _handle_write,
    # Pipe/Socket handlers
    "pipe": _handle_pipe,
    "pipe2": _handle_pipe,
    "socket": _handle_socket,
    "socketpair": _handle_socketpair,
    "accept": _handle_accept,
    "accept4": _handle_accept,
    # Dup handlers
    "dup": _handle_dup,
    "dup2": _handle_dup,
    "dup3": _handle_dup,
}
