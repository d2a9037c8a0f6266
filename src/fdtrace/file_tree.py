# Filename: src/fdtrace/file_tree.py
"""
Folds the files a trace touched into a directory tree.

Each Directory knows how many files live anywhere beneath it and whether any
of them was opened for writing, so a renderer can show both without walking
the subtree again.
"""

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Union

from fdtrace.tracker.descriptor import Descriptor, Perms, RegularFile

log = logging.getLogger(__name__)

# Name of the entry that keeps a file's permission when the same name
# later turns out to be a directory
SELF_ENTRY = "."


@dataclass
class File:
    perms: Perms


@dataclass
class Directory:
    items: dict[str, "Node"] = field(default_factory=dict)
    taint: Perms = Perms.READ
    contained_files: int = 0

    @property
    def tainted(self) -> bool:
        return self.taint is Perms.WRITE

    def __iter__(self) -> Iterator[tuple[str, "Node"]]:
        """Children ordered by name."""
        for name in sorted(self.items):
            yield name, self.items[name]

    def __len__(self) -> int:
        return len(self.items)

    def __getitem__(self, name: str) -> "Node":
        return self.items[name]

    def _credit(self, perms: Perms):
        self.contained_files += 1
        if perms is Perms.WRITE:
            self.taint = Perms.WRITE

    def _recompute_taint(self):
        for node in self.items.values():
            if isinstance(node, File) and node.perms is Perms.WRITE:
                self.taint = Perms.WRITE
                return
            if isinstance(node, Directory) and node.tainted:
                self.taint = Perms.WRITE
                return
        self.taint = Perms.READ


Node = Union[File, Directory]


def _as_directory(node: File) -> Directory:
    """A file whose name is also a directory keeps its permission as '.'."""
    return Directory(
        items={SELF_ENTRY: File(node.perms)},
        taint=node.perms,
        contained_files=1,
    )


class FileTree:
    """
    Directory tree of the regular files in a list of closed descriptors.

    Built once; reading it afterwards doesn't change anything.
    """

    def __init__(self, files: Iterable[Descriptor] = ()):
        self.root = Directory()
        for descriptor in files:
            if isinstance(descriptor, RegularFile):
                self.insert(descriptor.path, descriptor.perms)

    def __iter__(self) -> Iterator[tuple[str, Node]]:
        return iter(self.root)

    def insert(self, path: str, perms: Perms):
        """
        Adds one file, crediting every directory above it.

        A name seen as a file and later used as a directory (or the other way
        round) keeps the file as a '.' entry of the directory. The same path
        seen twice keeps the last permission and is only counted once.
        """
        parts = [p for p in path.split("/") if p and p != "."]
        if not parts:
            log.warning(f"Not adding {path!r} to the tree, it has no file name")
            return

        *dirs, filename = parts

        chain = [self.root]
        cwd = self.root
        for name in dirs:
            child = cwd.items.get(name)
            if child is None:
                child = cwd.items[name] = Directory()
            elif isinstance(child, File):
                log.debug(f"{name!r} under {path!r} was a file, now a directory")
                child = cwd.items[name] = _as_directory(child)
            cwd = child
            chain.append(cwd)

        existing = cwd.items.get(filename)
        if isinstance(existing, Directory):
            log.debug(f"{path!r} is already a directory, keeping file as '.'")
            cwd = existing
            chain.append(cwd)
            filename = SELF_ENTRY
            existing = cwd.items.get(filename)

        if isinstance(existing, File):
            # same path again: last one wins, nothing new to count
            existing.perms = perms
            for directory in reversed(chain):
                directory._recompute_taint()
            return

        cwd.items[filename] = File(perms)
        for directory in chain:
            directory._credit(perms)

    def walk(self) -> Iterator[tuple[str, Node]]:
        """Every node with its absolute path, parents before children."""
        yield "/", self.root
        yield from _walk(self.root, "")


def _walk(directory: Directory, prefix: str) -> Iterator[tuple[str, Node]]:
    for name, node in directory:
        path = f"{prefix}/{name}"
        yield path, node
        if isinstance(node, Directory):
            yield from _walk(node, path)
