"""Device backend reached through the adb bridge."""

import logging
import posixpath
from typing import Optional

from ..adb import AdbClient
from ..exceptions import SinkUnsupportedError
from ..models import Entry, EntryKind, parse_hex_u32
from ..utils import DEFAULT_COMPRESSION, basename
from .base import StorageBackend, SyncBackend
from .local import LocalBackend

logger = logging.getLogger(__name__)


class AndroidBackend(SyncBackend):
    """Backend for a device filesystem, driven by adb commands.

    Listings use ``adb ls`` (one hex-encoded record per child), so a tree
    costs one round-trip per directory. Mutations run through ``adb shell``.
    """

    name = "device"

    def __init__(
        self,
        client: AdbClient,
        compression: Optional[str] = DEFAULT_COMPRESSION,
    ):
        """Initialize device backend.

        Args:
            client: adb client bound to the target device
            compression: Algorithm passed to push/pull with -z (None to omit)
        """
        self.client = client
        self.compression = compression

    def _listing(self, path: str) -> list[str]:
        output = self.client.run(["ls", path])
        return [line for line in output.splitlines() if line.strip()]

    def stat(self, path: str) -> Optional[Entry]:
        # A directory listing carries a "." record describing the directory
        for line in self._listing(path):
            parts = line.split(" ", 3)
            if len(parts) == 4 and parts[3] == ".":
                mode = parse_hex_u32(parts[0], "mode")
                if EntryKind.from_mode(mode) == EntryKind.DIRECTORY:
                    return Entry(
                        kind=EntryKind.DIRECTORY,
                        size=0,
                        modified_at=parse_hex_u32(parts[2], "mtime"),
                        name=basename(path) or "/",
                        path=path,
                    )

        parent = posixpath.dirname(path.rstrip("/"))
        name = basename(path)
        if not name or parent == path:
            return None
        for entry in self.list_children(parent):
            if entry.name == name:
                return entry
        return None

    def list_children(self, path: str) -> list[Entry]:
        entries: list[Entry] = []
        for line in self._listing(path):
            entry = Entry.from_listing_line(path, line)
            if entry is not None:
                entries.append(entry)
        return entries

    def create_directory(self, path: str) -> None:
        self.client.shell(["mkdir", "-p", path])

    def delete_file(self, path: str) -> None:
        self.client.shell(["rm", "-f", path])

    def delete_directory(self, path: str) -> None:
        self.client.shell(["rm", "-rf", path])

    def set_modified_time(self, path: str, timestamp: int) -> None:
        self.client.shell(["touch", "-m", "-d", f"@{timestamp}", path])

    def _transfer_args(self, verb: str, preserve_times: bool = False) -> list[str]:
        args = [verb]
        if self.compression:
            args += ["-z", self.compression]
        if preserve_times:
            args.append("-a")
        return args

    def pull(self, from_path: str, to_path: str, preserve_times: bool = False) -> str:
        """Pull a file or directory from the device to a local path.

        Args:
            from_path: Device path
            to_path: Local path (must not exist for directories)
            preserve_times: Keep device timestamps (adb pull -a)

        Returns:
            adb's output
        """
        args = self._transfer_args("pull", preserve_times) + [from_path, to_path]
        return self.client.stream(args)

    def push(self, from_path: str, to_path: str) -> str:
        """Push a local file or directory to the device."""
        return self.client.stream(self._transfer_args("push") + [from_path, to_path])

    def copy_from(
        self,
        source: StorageBackend,
        from_path: str,
        to_path: str,
        preserve_time: Optional[int] = None,
    ) -> None:
        if not isinstance(source, LocalBackend):
            raise SinkUnsupportedError(
                f"Cannot copy from {type(source).__name__} to a device"
            )
        self.push(from_path, to_path)
        if preserve_time is not None:
            self.set_modified_time(to_path, preserve_time)

    def can_copy_directory_from(self, source: StorageBackend) -> bool:
        return isinstance(source, LocalBackend)

    def copy_directory_from(
        self,
        source: StorageBackend,
        from_path: str,
        to_path: str,
        preserve_time: Optional[int] = None,
    ) -> None:
        if not isinstance(source, LocalBackend):
            raise SinkUnsupportedError(
                f"Whole-directory copy from {type(source).__name__} is not supported"
            )
        self.push(from_path, to_path)
