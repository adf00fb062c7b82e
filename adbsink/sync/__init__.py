"""Sync engine for adbsink - one-way directory mirroring."""

from .comparator import FileComparator, SyncAction, SyncDecision, SyncReason
from .differ import TreeDiff, diff_trees
from .engine import SyncEngine
from .operations import SyncOperations
from .pair import SyncPair, normalize_ignore_prefix
from .tree import Node, TreeBuilder, build_tree

__all__ = [
    "SyncEngine",
    "SyncPair",
    "SyncOperations",
    "FileComparator",
    "SyncAction",
    "SyncDecision",
    "SyncReason",
    "Node",
    "TreeBuilder",
    "TreeDiff",
    "build_tree",
    "diff_trees",
    "normalize_ignore_prefix",
]
