"""The file descriptor table and what its entries point at."""

from .descriptor import Descriptor, Perms, RegularFile
from .observer import Action, LogObserver, RecordingObserver
from .tracker import DescriptorTracker

__all__ = [
    "Action",
    "Descriptor",
    "DescriptorTracker",
    "LogObserver",
    "Perms",
    "RecordingObserver",
    "RegularFile",
]
