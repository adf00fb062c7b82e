"""Shared fixtures for adbsink tests."""

import posixpath
from typing import Optional
from unittest.mock import Mock

import pytest

from adbsink.backends.base import StorageBackend, SyncBackend
from adbsink.exceptions import SinkBackendError
from adbsink.models import Entry, EntryKind
from adbsink.output import OutputFormatter
from adbsink.utils import basename

COPY_TIME = 5000


class MemoryBackend(SyncBackend):
    """Backend holding a tree in a dict, recording every mutation.

    Copies stamp the destination with COPY_TIME unless a time is preserved,
    mimicking a transfer that does not keep timestamps.
    """

    name = "memory"

    def __init__(self, directory_copy: bool = False, windows_names: bool = False):
        self.entries: dict[str, Entry] = {}
        self.calls: list[tuple] = []
        self.listed: list[str] = []
        self.fail_on: set[tuple[str, str]] = set()
        self.directory_copy = directory_copy
        self.windows_names = windows_names

    # -- test helpers ------------------------------------------------------

    def _put(self, kind: EntryKind, path: str, size: int, mtime: int) -> None:
        self.entries[path] = Entry(
            kind=kind,
            size=size,
            modified_at=mtime,
            name=basename(path) or "/",
            path=path,
        )

    def add_dir(self, path: str, mtime: int = 0) -> "MemoryBackend":
        parent = posixpath.dirname(path)
        if parent != path and parent not in self.entries:
            self.add_dir(parent, mtime)
        self._put(EntryKind.DIRECTORY, path, 0, mtime)
        return self

    def add_file(self, path: str, size: int = 10, mtime: int = 100) -> "MemoryBackend":
        parent = posixpath.dirname(path)
        if parent not in self.entries:
            self.add_dir(parent)
        self._put(EntryKind.FILE, path, size, mtime)
        return self

    def add_symlink(self, path: str) -> "MemoryBackend":
        self._put(EntryKind.SYMLINK, path, 0, 0)
        return self

    def add_special(self, path: str) -> "MemoryBackend":
        self._put(EntryKind.SPECIAL, path, 0, 0)
        return self

    def paths(self) -> list[str]:
        return sorted(self.entries)

    def mutations(self) -> list[tuple]:
        return list(self.calls)

    def _check_fail(self, action: str, path: str) -> None:
        if (action, path) in self.fail_on:
            raise SinkBackendError("injected failure", path=path, action=action)

    # -- StorageBackend ----------------------------------------------------

    def stat(self, path: str) -> Optional[Entry]:
        return self.entries.get(path)

    def list_children(self, path: str) -> list[Entry]:
        self.listed.append(path)
        self._check_fail("list", path)
        entry = self.entries.get(path)
        if entry is None or not entry.is_dir:
            raise SinkBackendError("not a directory", path=path, action="list")
        return [
            e
            for p, e in sorted(self.entries.items())
            if p != path and posixpath.dirname(p) == path
        ]

    def create_directory(self, path: str) -> None:
        self.calls.append(("mkdir", path))
        self._check_fail("mkdir", path)
        self.add_dir(path, COPY_TIME)

    def delete_file(self, path: str) -> None:
        self.calls.append(("delete", path))
        self._check_fail("delete", path)
        del self.entries[path]

    def delete_directory(self, path: str) -> None:
        self.calls.append(("delete_dir", path))
        self._check_fail("delete_dir", path)
        for p in [p for p in self.entries if p == path or p.startswith(path + "/")]:
            del self.entries[p]

    def set_modified_time(self, path: str, timestamp: int) -> None:
        self.calls.append(("touch", path, timestamp))
        entry = self.entries[path]
        self._put(entry.kind, path, entry.size, timestamp)

    def supports_name(self, name: str) -> bool:
        return not (self.windows_names and name.endswith("."))

    # -- CopyTarget --------------------------------------------------------

    def copy_from(
        self,
        source: StorageBackend,
        from_path: str,
        to_path: str,
        preserve_time: Optional[int] = None,
    ) -> None:
        self.calls.append(("copy", from_path, to_path))
        self._check_fail("copy", to_path)
        if posixpath.dirname(to_path) not in self.entries:
            raise SinkBackendError("parent missing", path=to_path, action="copy")
        entry = source.stat(from_path)
        assert entry is not None
        mtime = preserve_time if preserve_time is not None else COPY_TIME
        self._put(EntryKind.FILE, to_path, entry.size, mtime)

    def can_copy_directory_from(self, source: StorageBackend) -> bool:
        return self.directory_copy

    def copy_directory_from(
        self,
        source: StorageBackend,
        from_path: str,
        to_path: str,
        preserve_time: Optional[int] = None,
    ) -> None:
        self.calls.append(("copy_dir", from_path, to_path))
        assert isinstance(source, MemoryBackend)
        for path, entry in sorted(source.entries.items()):
            if path == from_path or path.startswith(from_path + "/"):
                target = to_path + path[len(from_path) :]
                self._put(entry.kind, target, entry.size, COPY_TIME)


@pytest.fixture
def source():
    """Source backend with an empty /src root."""
    return MemoryBackend().add_dir("/src")


@pytest.fixture
def destination():
    """Destination backend with an empty /dst root."""
    return MemoryBackend().add_dir("/dst")


@pytest.fixture
def mock_output():
    """Create a mock output formatter."""
    output = Mock(spec=OutputFormatter)
    output.quiet = True
    output.json_output = False
    return output
