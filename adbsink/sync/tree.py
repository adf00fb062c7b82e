"""In-memory tree snapshots of one side of a sync."""

import logging
from collections.abc import Iterator
from typing import Callable, Optional

from ..backends.base import StorageBackend
from ..exceptions import SinkUnsupportedEntryError
from ..models import Entry

logger = logging.getLogger(__name__)


def check_supported(entry: Entry) -> None:
    """Reject entries that cannot be synchronized.

    Raises:
        SinkUnsupportedEntryError: If entry is a symlink or a special file
    """
    if entry.is_symlink:
        raise SinkUnsupportedEntryError(entry.path)
    if entry.is_special:
        raise SinkUnsupportedEntryError(entry.path, kind="special file")


class Node:
    """One vertex of a tree snapshot.

    Two nodes are equal, and hash alike, when their relative paths are
    equal. Size and mtime take no part in identity, so set operations
    answer "does this path exist on the other side" only.
    """

    __slots__ = ("entry", "relative_path", "children")

    def __init__(self, entry: Entry, prefix: str):
        """Wrap an entry.

        Args:
            entry: Backend entry
            prefix: Root path of the snapshot, stripped from entry.path
        """
        self.entry = entry
        self.relative_path = entry.relative_to(prefix)
        self.children: dict[str, Node] = {}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Node):
            return NotImplemented
        return self.relative_path == other.relative_path

    def __hash__(self) -> int:
        return hash(self.relative_path)

    def __repr__(self) -> str:
        return f"Node({self.relative_path!r}, {self.entry.kind.value})"

    @property
    def is_dir(self) -> bool:
        return self.entry.is_dir

    def add(self, child: "Node") -> None:
        self.children[child.relative_path] = child

    def sorted_children(self) -> list["Node"]:
        return [self.children[key] for key in sorted(self.children)]

    def walk(self) -> Iterator["Node"]:
        """Yield this node's descendants in pre-order (sorted by path)."""
        for child in self.sorted_children():
            yield child
            yield from child.walk()

    def walk_post_order(self) -> Iterator["Node"]:
        """Yield descendants children-first, then this node."""
        for child in self.sorted_children():
            yield from child.walk_post_order()
        yield self

    def format_tree(self) -> str:
        """Render the subtree as indented relative paths (for debugging)."""
        lines = []

        def _render(node: "Node", depth: int) -> None:
            for child in node.sorted_children():
                lines.append("  " * depth + child.relative_path)
                _render(child, depth + 1)

        _render(self, 0)
        return "\n".join(lines)


class TreeBuilder:
    """Materializes a backend directory hierarchy as a Node tree.

    Lists each directory exactly once, so the number of backend
    round-trips equals the number of directories.

    Examples:
        >>> builder = TreeBuilder(backend, should_ignore=pair.is_ignored)
        >>> root = builder.build(backend.stat("/sdcard/DCIM"), "/sdcard/DCIM")
    """

    def __init__(
        self,
        backend: StorageBackend,
        should_ignore: Optional[Callable[[str], bool]] = None,
    ):
        """Initialize tree builder.

        Args:
            backend: Backend to list
            should_ignore: Predicate on relative paths; matching entries and
                their subtrees are neither inserted nor listed
        """
        self.backend = backend
        self.should_ignore = should_ignore
        self.listings = 0

    def build(self, root_entry: Entry, prefix: str) -> Node:
        """Build the snapshot rooted at root_entry.

        Args:
            root_entry: Entry for the root directory
            prefix: Path prefix stripped to form relative paths

        Returns:
            Root node

        Raises:
            SinkUnsupportedEntryError: If a symlink or special file is found
        """
        check_supported(root_entry)
        root = Node(root_entry, prefix)
        if root_entry.is_dir:
            self._fill(root, prefix)
        return root

    def _fill(self, parent: Node, prefix: str) -> None:
        self.listings += 1
        for entry in self.backend.list_children(parent.entry.path):
            node = Node(entry, prefix)
            if self.should_ignore is not None and self.should_ignore(
                node.relative_path
            ):
                logger.debug(f"Ignoring: {node.relative_path}")
                continue
            check_supported(entry)
            if entry.is_dir:
                self._fill(node, prefix)
            parent.add(node)


def build_tree(
    backend: StorageBackend,
    root_entry: Entry,
    prefix: str,
    should_ignore: Optional[Callable[[str], bool]] = None,
) -> Node:
    """Build a tree snapshot (see TreeBuilder.build)."""
    return TreeBuilder(backend, should_ignore).build(root_entry, prefix)
