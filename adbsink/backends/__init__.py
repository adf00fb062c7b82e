"""Storage backends: local filesystem and adb-reached device."""

from .android import AndroidBackend
from .base import CopyTarget, StorageBackend, SyncBackend
from .local import LocalBackend

__all__ = [
    "AndroidBackend",
    "CopyTarget",
    "LocalBackend",
    "StorageBackend",
    "SyncBackend",
]
