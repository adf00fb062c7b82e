"""Storage backend interfaces.

A backend exposes listing and mutation primitives for one storage system.
Copies are modelled separately by ``CopyTarget`` because they always involve
two backends, and not every pairing is supported.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ..models import Entry
from ..utils import normalize_path


class StorageBackend(ABC):
    """Listing and mutation primitives of one storage system.

    All paths are absolute and forward-slash separated. Every method may
    raise ``SinkBackendError``; none of them is transactional.
    """

    name: str = "backend"
    """Short label used in messages"""

    @abstractmethod
    def stat(self, path: str) -> Optional[Entry]:
        """Return metadata for a sync root, or None if it does not exist.

        Unlike list_children, a symlinked root is followed.
        """

    @abstractmethod
    def list_children(self, path: str) -> list[Entry]:
        """List the immediate children of a directory (excluding . and ..)."""

    @abstractmethod
    def create_directory(self, path: str) -> None:
        """Create a directory and missing parents; existing is not an error."""

    @abstractmethod
    def delete_file(self, path: str) -> None:
        """Delete one file."""

    @abstractmethod
    def delete_directory(self, path: str) -> None:
        """Delete a directory and everything beneath it."""

    @abstractmethod
    def set_modified_time(self, path: str, timestamp: int) -> None:
        """Set the modification time of a path (Unix seconds)."""

    def supports_name(self, name: str) -> bool:
        """Whether an entry name is representable on this backend."""
        return True

    def normalize_path(self, raw: str) -> str:
        """Convert a user-supplied path to this backend's path form."""
        return normalize_path(raw)


class CopyTarget(ABC):
    """Receiving side of a cross-backend copy.

    The backend that receives data implements the transfer itself, so the
    sync engine never reads file contents.
    """

    @abstractmethod
    def copy_from(
        self,
        source: StorageBackend,
        from_path: str,
        to_path: str,
        preserve_time: Optional[int] = None,
    ) -> None:
        """Copy one file from source into this backend.

        Args:
            source: Backend holding from_path
            from_path: File path on source
            to_path: Destination path on this backend
            preserve_time: Source mtime to apply, or None to leave it as is

        Raises:
            SinkUnsupportedError: If copies from this kind of source are not
                supported
        """

    def can_copy_directory_from(self, source: StorageBackend) -> bool:
        """Whether copy_directory_from is available for this pairing."""
        return False

    def copy_directory_from(
        self,
        source: StorageBackend,
        from_path: str,
        to_path: str,
        preserve_time: Optional[int] = None,
    ) -> None:
        """Copy a whole directory subtree from source into this backend.

        to_path must not exist yet. Only called when can_copy_directory_from
        returned True.
        """
        raise NotImplementedError(
            f"{type(self).__name__} cannot copy whole directories"
        )


class SyncBackend(StorageBackend, CopyTarget):
    """A backend that can be both end of a sync."""
