"""Structural comparison of two tree snapshots."""

from typing import NamedTuple

from ..models import Entry
from .tree import Node, check_supported


class TreeDiff(NamedTuple):
    """Result of comparing tree A with tree B.

    A directory present on one side only appears once, as a single node
    carrying its whole subtree; its contents are not listed separately.
    """

    only_in_a: list[Node]
    """Nodes under A whose relative path does not exist under B"""

    only_in_b: list[Node]
    """Nodes under B whose relative path does not exist under A"""

    paired_files: list[tuple[Entry, Entry]]
    """(entry in A, entry in B) for files present on both sides"""

    kind_conflicts: list[tuple[Node, Node]]
    """(node in A, node in B) sharing a path but not a kind"""


def diff_trees(a: Node, b: Node) -> TreeDiff:
    """Compare two snapshots by relative path.

    Recurses only into directories present on both sides. Neither tree is
    modified. Results are produced depth-first in relative-path order.

    Args:
        a: Root of the first snapshot
        b: Root of the second snapshot

    Returns:
        TreeDiff with the four partitions
    """
    result = TreeDiff([], [], [], [])
    _diff_level(a, b, result)
    return result


def _diff_level(a: Node, b: Node, result: TreeDiff) -> None:
    a_keys = a.children.keys()
    b_keys = b.children.keys()

    result.only_in_a.extend(a.children[key] for key in sorted(a_keys - b_keys))
    result.only_in_b.extend(b.children[key] for key in sorted(b_keys - a_keys))

    for key in sorted(a_keys & b_keys):
        node_a = a.children[key]
        node_b = b.children[key]
        check_supported(node_a.entry)
        check_supported(node_b.entry)

        if node_a.entry.kind != node_b.entry.kind:
            result.kind_conflicts.append((node_a, node_b))
        elif node_a.is_dir:
            _diff_level(node_a, node_b, result)
        else:
            result.paired_files.append((node_a.entry, node_b.entry))
