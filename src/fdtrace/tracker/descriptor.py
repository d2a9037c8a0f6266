# Filename: src/fdtrace/tracker/descriptor.py
"""
What an open file descriptor refers to.

A Descriptor is one of a fixed set of frozen dataclasses. Consumers dispatch
on the concrete type; nothing here is meant to be subclassed.
"""

import enum
from dataclasses import dataclass
from typing import Union

WRITE_FLAGS = {"O_WRONLY", "O_RDWR"}

# Constants for standard streams
STDIN_NAME = "<STDIN>"
STDOUT_NAME = "<STDOUT>"
STDERR_NAME = "<STDERR>"
PIPE_NAME = "<PIPE>"
SOCKET_NAME = "<SOCKET>"
UNKNOWN_NAME = "<UNKNOWN>"


class Perms(enum.Enum):
    READ = "R"
    WRITE = "W"

    @classmethod
    def from_flags(cls, flags: str) -> "Perms":
        """O_WRONLY or O_RDWR anywhere in an open flags string means WRITE."""
        for flag in flags.split("|"):
            if flag.strip() in WRITE_FLAGS:
                return cls.WRITE
        return cls.READ


class Stream(enum.Enum):
    STDIN = 0
    STDOUT = 1
    STDERR = 2


@dataclass(frozen=True)
class RegularFile:
    path: str
    flags: str

    @property
    def perms(self) -> Perms:
        return Perms.from_flags(self.flags)


@dataclass(frozen=True)
class StandardStream:
    stream: Stream


@dataclass(frozen=True)
class PipeEnd:
    flags: str

    @property
    def perms(self) -> Perms:
        return Perms.from_flags(self.flags)


@dataclass(frozen=True)
class Socket:
    pass


@dataclass(frozen=True)
class Other:
    """An fd from a syscall we only recognize well enough to track."""

    syscall: str


Descriptor = Union[RegularFile, StandardStream, PipeEnd, Socket, Other]

STD_STREAMS: dict[int, StandardStream] = {
    stream.value: StandardStream(stream) for stream in Stream
}
_STREAM_NAMES = {
    Stream.STDIN: STDIN_NAME,
    Stream.STDOUT: STDOUT_NAME,
    Stream.STDERR: STDERR_NAME,
}


def display_name(descriptor: Descriptor) -> str:
    """The path for regular files, a fixed placeholder for everything else."""
    if isinstance(descriptor, RegularFile):
        return descriptor.path
    if isinstance(descriptor, StandardStream):
        return _STREAM_NAMES[descriptor.stream]
    if isinstance(descriptor, PipeEnd):
        return PIPE_NAME
    if isinstance(descriptor, Socket):
        return SOCKET_NAME
    if isinstance(descriptor, Other):
        return UNKNOWN_NAME
    raise TypeError(f"Not a descriptor: {descriptor!r}")
