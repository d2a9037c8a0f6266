"""Reconstruct file descriptor lifecycles from strace logs and show the files touched."""

__version__ = "0.1.0"
