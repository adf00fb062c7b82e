"""Local filesystem backend."""

import logging
import os
import shutil
import stat
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Optional

from ..exceptions import SinkBackendError, SinkUnsupportedError
from ..models import Entry, EntryKind
from ..utils import U32_MAX, basename, join_path, normalize_path
from .base import StorageBackend, SyncBackend

logger = logging.getLogger(__name__)


@contextmanager
def _os_errors(action: str, path: str) -> Iterator[None]:
    """Translate OSError into SinkBackendError with context."""
    try:
        yield
    except OSError as e:
        raise SinkBackendError(e.strerror or str(e), path=path, action=action) from e


def _kind_of(mode: int) -> EntryKind:
    """Map a local st_mode to an entry kind.

    FIFOs, sockets and device nodes become EntryKind.SPECIAL instead of
    failing here, so an ignore rule can still skip them.
    """
    if stat.S_ISREG(mode):
        return EntryKind.FILE
    if stat.S_ISDIR(mode):
        return EntryKind.DIRECTORY
    if stat.S_ISLNK(mode):
        return EntryKind.SYMLINK
    return EntryKind.SPECIAL


class LocalBackend(SyncBackend):
    """Backend using native filesystem calls.

    Paths are accepted in forward-slash form; Python's os functions accept
    that form on every platform.
    """

    name = "local"

    def __init__(self, windows_names: Optional[bool] = None):
        """Initialize local backend.

        Args:
            windows_names: Reject names Windows cannot store (trailing dot).
                Defaults to True when running on Windows.
        """
        if windows_names is None:
            windows_names = os.name == "nt"
        self.windows_names = windows_names

    def _to_entry(
        self, path: str, st: os.stat_result, name: Optional[str] = None
    ) -> Entry:
        kind = _kind_of(st.st_mode)
        return Entry(
            kind=kind,
            size=st.st_size & U32_MAX if kind == EntryKind.FILE else 0,
            modified_at=int(st.st_mtime) & U32_MAX,
            name=name or basename(path) or path,
            path=path,
        )

    def normalize_path(self, raw: str) -> str:
        return normalize_path(os.path.abspath(raw))

    def stat(self, path: str) -> Optional[Entry]:
        try:
            st = os.stat(path)
        except FileNotFoundError:
            return None
        except OSError as e:
            raise SinkBackendError(str(e), path=path, action="stat") from e
        return self._to_entry(path, st)

    def list_children(self, path: str) -> list[Entry]:
        entries: list[Entry] = []
        with _os_errors("list", path), os.scandir(path) as it:
            for item in it:
                child_path = join_path(path, item.name)
                st = item.stat(follow_symlinks=False)
                entries.append(self._to_entry(child_path, st, item.name))
        return entries

    def create_directory(self, path: str) -> None:
        with _os_errors("mkdir", path):
            os.makedirs(path, exist_ok=True)

    def delete_file(self, path: str) -> None:
        with _os_errors("delete file", path):
            os.remove(path)

    def delete_directory(self, path: str) -> None:
        with _os_errors("delete directory", path):
            shutil.rmtree(path)

    def set_modified_time(self, path: str, timestamp: int) -> None:
        with _os_errors("set mtime", path):
            st = os.stat(path)
            os.utime(path, (st.st_atime, timestamp))

    def supports_name(self, name: str) -> bool:
        return not (self.windows_names and name.endswith("."))

    def copy_from(
        self,
        source: StorageBackend,
        from_path: str,
        to_path: str,
        preserve_time: Optional[int] = None,
    ) -> None:
        from .android import AndroidBackend

        if isinstance(source, LocalBackend):
            with _os_errors("copy", from_path):
                shutil.copyfile(from_path, to_path)
            if preserve_time is not None:
                self.set_modified_time(to_path, preserve_time)
        elif isinstance(source, AndroidBackend):
            source.pull(from_path, to_path, preserve_times=preserve_time is not None)
        else:
            raise SinkUnsupportedError(
                f"Cannot copy from {type(source).__name__} to local filesystem"
            )

    def can_copy_directory_from(self, source: StorageBackend) -> bool:
        from .android import AndroidBackend

        return isinstance(source, AndroidBackend)

    def copy_directory_from(
        self,
        source: StorageBackend,
        from_path: str,
        to_path: str,
        preserve_time: Optional[int] = None,
    ) -> None:
        from .android import AndroidBackend

        if not isinstance(source, AndroidBackend):
            raise SinkUnsupportedError(
                f"Whole-directory copy from {type(source).__name__} is not supported"
            )
        source.pull(from_path, to_path, preserve_times=preserve_time is not None)
