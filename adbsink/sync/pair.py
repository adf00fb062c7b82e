"""Sync pair: the roots and policy of one synchronization run."""

from dataclasses import dataclass, field

from ..utils import basename, join_path, normalize_path


def normalize_ignore_prefix(prefix: str) -> str:
    """Normalize an ignored prefix to relative forward-slash form.

    Leading "./" and "/" are removed; a trailing slash is kept because it is
    significant for a string-prefix match ("cache/" does not match "cache2").
    """
    prefix = prefix.replace("\\", "/")
    while prefix.startswith("./"):
        prefix = prefix[2:]
    return prefix.lstrip("/")


@dataclass
class SyncPair:
    """A source root mirrored onto a destination root.

    Examples:
        >>> pair = SyncPair("/sdcard/DCIM", "/home/me/DCIM", mirror_deletions=True)
        >>> pair.is_ignored(".thumbnails/1.jpg")
        False
    """

    source: str
    """Root on the source backend (forward slashes)"""

    destination: str
    """Root on the destination backend that mirrors source"""

    mirror_deletions: bool = False
    """Delete destination entries that no longer exist on the source"""

    preserve_times: bool = False
    """Carry source modification times onto copied files"""

    ignore: list[str] = field(default_factory=list)
    """Relative path prefixes excluded from the sync on both sides"""

    whole_directory_copy: bool = True
    """Copy missing directories in one backend call when possible"""

    def __post_init__(self) -> None:
        self.source = normalize_path(self.source)
        self.destination = normalize_path(self.destination)
        self.ignore = [
            prefix
            for prefix in (normalize_ignore_prefix(p) for p in self.ignore)
            if prefix
        ]

    @classmethod
    def for_transfer(cls, source: str, dest_parent: str, **kwargs) -> "SyncPair":
        """Create a pair that mirrors source into dest_parent/<source name>.

        Args:
            source: Source root
            dest_parent: Directory that will contain the mirrored root
            **kwargs: Policy fields passed through to SyncPair

        Returns:
            SyncPair instance
        """
        name = basename(source)
        if not name:
            raise ValueError(f"Cannot mirror a filesystem root: {source}")
        destination = join_path(normalize_path(dest_parent), name)
        return cls(source=source, destination=destination, **kwargs)

    def is_ignored(self, relative_path: str) -> bool:
        """Whether a relative path matches an ignored prefix."""
        if not relative_path:
            return False
        return any(relative_path.startswith(prefix) for prefix in self.ignore)

    def has_ignored_beneath(self, relative_path: str) -> bool:
        """Whether some ignored prefix may match an entry below relative_path."""
        if not self.ignore:
            return False
        if not relative_path:
            return True
        below = relative_path + "/"
        return any(prefix.startswith(below) for prefix in self.ignore)
