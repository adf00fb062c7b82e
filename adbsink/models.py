"""Entry model: one filesystem object as seen by a storage backend."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .exceptions import SinkInvariantError, SinkMalformedListingError
from .utils import U32_MAX, join_path


class EntryKind(str, Enum):
    """Kind of filesystem object."""

    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"
    SPECIAL = "special"
    """FIFO, socket or device node; only local listings report these"""

    @classmethod
    def from_mode(cls, mode: int) -> "EntryKind":
        """Decode the file type from raw st_mode bits.

        Args:
            mode: Raw mode (e.g., 0o100644 or 0x41f9)

        Returns:
            The decoded kind

        Raises:
            SinkMalformedListingError: If the type bits are not file,
                directory or symlink
        """
        type_bits = mode >> 13
        if type_bits == 0b100:
            return cls.FILE
        if type_bits == 0b010:
            return cls.DIRECTORY
        if type_bits == 0b101:
            return cls.SYMLINK
        raise SinkMalformedListingError(f"Unrecognized file mode: {mode:#o}")


def parse_hex_u32(token: str, field_name: str) -> int:
    """Parse a hex token from a listing into an unsigned 32-bit integer."""
    try:
        value = int(token, 16)
    except ValueError as e:
        raise SinkMalformedListingError(
            f"Invalid {field_name} token in listing: {token!r}"
        ) from e
    if value < 0 or value > U32_MAX:
        raise SinkMalformedListingError(
            f"{field_name} does not fit in 32 bits: {token!r}"
        )
    return value


@dataclass(frozen=True)
class Entry:
    """Metadata for one filesystem object."""

    kind: EntryKind
    """Kind of object"""

    size: int
    """Size in bytes (0 for directories)"""

    modified_at: int
    """Modification time, whole seconds since the Unix epoch"""

    name: str
    """Final path component"""

    path: str
    """Absolute forward-slash path on the owning backend"""

    def __post_init__(self) -> None:
        if not self.name or self.name in (".", ".."):
            raise SinkInvariantError(
                f"Invalid entry name {self.name!r} for {self.path}"
            )
        for field_name in ("size", "modified_at"):
            value = getattr(self, field_name)
            if value < 0 or value > U32_MAX:
                raise SinkMalformedListingError(
                    f"{field_name} out of range for {self.path}: {value}"
                )
        if self.kind == EntryKind.DIRECTORY and self.size != 0:
            object.__setattr__(self, "size", 0)

    @property
    def is_file(self) -> bool:
        return self.kind == EntryKind.FILE

    @property
    def is_dir(self) -> bool:
        return self.kind == EntryKind.DIRECTORY

    @property
    def is_symlink(self) -> bool:
        return self.kind == EntryKind.SYMLINK

    @property
    def is_special(self) -> bool:
        return self.kind == EntryKind.SPECIAL

    def relative_to(self, prefix: str) -> str:
        """Strip a root prefix from this entry's path.

        Args:
            prefix: Root path of the snapshot this entry belongs to

        Returns:
            Path relative to prefix ("" for the root itself)

        Raises:
            SinkInvariantError: If the path is not under prefix
        """
        root = prefix.rstrip("/")
        if self.path.rstrip("/") == root:
            return ""
        if self.path.startswith(root + "/"):
            return self.path[len(root) + 1 :]
        raise SinkInvariantError(f"'{self.path}' is not under '{prefix}'")

    @classmethod
    def from_listing_line(cls, parent: str, line: str) -> Optional["Entry"]:
        """Decode one record of device listing output.

        A record is "<mode> <size> <mtime> <name>" with the first three
        fields in hex, e.g. "000081b0 0000000a 5f5e1000 notes.txt".

        Args:
            parent: Directory that was listed
            line: One output line

        Returns:
            Entry, or None for the "." and ".." records
        """
        parts = line.split(" ", 3)
        if len(parts) != 4 or not parts[3]:
            raise SinkMalformedListingError(f"Unexpected listing line: {line!r}")
        mode_token, size_token, mtime_token, name = parts
        if name in (".", ".."):
            return None
        kind = EntryKind.from_mode(parse_hex_u32(mode_token, "mode"))
        size = parse_hex_u32(size_token, "size")
        modified_at = parse_hex_u32(mtime_token, "mtime")
        return cls(
            kind=kind,
            size=0 if kind == EntryKind.DIRECTORY else size,
            modified_at=modified_at,
            name=name,
            path=join_path(parent, name),
        )
