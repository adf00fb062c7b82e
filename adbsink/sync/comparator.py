"""Sync actions and the staleness rule for files present on both sides."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..models import Entry


class SyncAction(str, Enum):
    """Actions that can be taken during sync."""

    CREATE_DIRECTORY = "mkdir"
    """Create a directory on the destination"""

    COPY_FILE = "copy"
    """Copy one file from source to destination"""

    COPY_DIRECTORY = "copy_dir"
    """Copy a whole directory subtree in one backend call"""

    DELETE_FILE = "delete"
    """Delete a destination file"""

    DELETE_DIRECTORY = "delete_dir"
    """Delete a destination directory once it is empty"""

    SKIP = "skip"
    """Leave the entry as it is"""

    @property
    def is_mutation(self) -> bool:
        return self != SyncAction.SKIP

    @property
    def is_delete(self) -> bool:
        return self in (SyncAction.DELETE_FILE, SyncAction.DELETE_DIRECTORY)


class SyncReason(str, Enum):
    """Why an action was chosen. Informational only."""

    NEW_ON_DEST = "new"
    """Missing on the destination"""

    SIZE_MISMATCH = "size"
    """Sizes differ"""

    SOURCE_NEWER = "newer"
    """Same size, source modified later"""

    UNCHANGED = "unchanged"
    """Same size, destination not older"""

    REMOVED_FROM_SOURCE = "removed"
    """Present only on the destination"""

    KIND_CONFLICT = "kind-conflict"
    """File on one side, directory on the other"""

    UNSUPPORTED_NAME = "unsupported-name"
    """Name cannot be stored on the destination"""


@dataclass
class SyncDecision:
    """One planned action."""

    action: SyncAction
    """Action to take"""

    reason: SyncReason
    """Why the action was chosen"""

    relative_path: str
    """Path relative to the sync roots"""

    source_path: Optional[str] = None
    """Absolute path on the source backend (copies only)"""

    dest_path: Optional[str] = None
    """Absolute path on the destination backend"""

    preserve_time: Optional[int] = None
    """Source mtime to apply to the copy, if preserving times"""

    def describe(self) -> str:
        """Short human-readable form, e.g. "copy (newer) a/b.txt"."""
        return f"{self.action.value} ({self.reason.value}) {self.relative_path or '.'}"


class FileComparator:
    """Decides whether a destination file is stale.

    A destination file is stale when its size differs from the source, or
    when the sizes match and the source is strictly newer. Equal size and
    equal time never trigger a copy.
    """

    def __init__(self, preserve_times: bool = False):
        """Initialize file comparator.

        Args:
            preserve_times: Carry the source mtime onto copies
        """
        self.preserve_times = preserve_times

    def compare(
        self, relative_path: str, source: Entry, destination: Entry
    ) -> SyncDecision:
        """Compare a file present on both sides.

        Args:
            relative_path: Path relative to the sync roots
            source: Source entry
            destination: Destination entry

        Returns:
            COPY_FILE decision for a stale file, SKIP otherwise
        """
        if source.size != destination.size:
            return self._copy(
                relative_path, source, destination, SyncReason.SIZE_MISMATCH
            )

        if source.modified_at > destination.modified_at:
            return self._copy(
                relative_path, source, destination, SyncReason.SOURCE_NEWER
            )

        return SyncDecision(
            action=SyncAction.SKIP,
            reason=SyncReason.UNCHANGED,
            relative_path=relative_path,
            source_path=source.path,
            dest_path=destination.path,
        )

    def _copy(
        self,
        relative_path: str,
        source: Entry,
        destination: Entry,
        reason: SyncReason,
    ) -> SyncDecision:
        return SyncDecision(
            action=SyncAction.COPY_FILE,
            reason=reason,
            relative_path=relative_path,
            source_path=source.path,
            dest_path=destination.path,
            preserve_time=source.modified_at if self.preserve_times else None,
        )
