# Filename: src/fdtrace/render.py
"""Rich renderables for a FileTree and the errors of a replay."""

import logging

from rich.markup import escape
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from fdtrace.errors import TraceError
from fdtrace.file_tree import Directory, File, FileTree
from fdtrace.tracker.descriptor import Perms

log = logging.getLogger(__name__)

WRITE_STYLE = "bold red"
READ_STYLE = "green"
DIR_STYLE = "bold blue"


# --- Formatting Helpers ---
def _display_name(name: str) -> str:
    """Shows bytes that aren't UTF-8 as \\xNN instead of lone surrogates."""
    return name.encode("utf-8", "surrogateescape").decode("utf-8", "backslashreplace")


def _perms_text(perms: Perms) -> Text:
    style = WRITE_STYLE if perms is Perms.WRITE else READ_STYLE
    return Text(perms.value, style=style)


def _file_label(name: str, node: File) -> Text:
    return Text.assemble(_perms_text(node.perms), " ", _display_name(name))


def _dir_label(name: str, node: Directory) -> Text:
    style = WRITE_STYLE if node.tainted else DIR_STYLE
    count = f" ({node.contained_files} file{'s' if node.contained_files != 1 else ''})"
    return Text.assemble((_display_name(name), style), (count, "dim"))


# --- End Formatting Helpers ---


def render_tree(tree: FileTree, max_depth: int | None = None) -> Tree:
    """
    Builds a rich Tree of the files, children in name order.

    Directories deeper than max_depth are shown with their counts but not
    expanded.
    """
    root = Tree(_dir_label("/", tree.root), guide_style="dim")
    _add_children(root, tree.root, depth=1, max_depth=max_depth)
    return root


def _add_children(branch: Tree, directory: Directory, depth: int, max_depth: int | None):
    for name, node in directory:
        if isinstance(node, File):
            branch.add(_file_label(name, node))
            continue

        sub_branch = branch.add(_dir_label(name, node))
        if max_depth is not None and depth >= max_depth:
            if len(node):
                sub_branch.add(Text("...", style="dim"))
            continue
        _add_children(sub_branch, node, depth + 1, max_depth)


def render_errors(errors: list[tuple[int, TraceError]]) -> Table:
    """A table of the recoverable errors, one row per event."""
    table = Table(title="Trace errors", title_justify="left")
    table.add_column("Line", justify="right", style="cyan")
    table.add_column("Kind", style="yellow")
    table.add_column("Message")
    for line_no, error in errors:
        table.add_row(str(line_no), type(error).__name__, escape(str(error)))
    return table
