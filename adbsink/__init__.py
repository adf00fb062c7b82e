"""adbsink - mirror directory trees to and from Android devices over adb."""

from .adb import AdbClient
from .exceptions import (
    SinkAdbError,
    SinkAdbNotFoundError,
    SinkBackendError,
    SinkConfigError,
    SinkDeviceError,
    SinkError,
    SinkInvariantError,
    SinkMalformedListingError,
    SinkUnsupportedEntryError,
    SinkUnsupportedError,
)
from .models import Entry, EntryKind

__all__ = [
    "AdbClient",
    "Entry",
    "EntryKind",
    "SinkAdbError",
    "SinkAdbNotFoundError",
    "SinkBackendError",
    "SinkConfigError",
    "SinkDeviceError",
    "SinkError",
    "SinkInvariantError",
    "SinkMalformedListingError",
    "SinkUnsupportedEntryError",
    "SinkUnsupportedError",
]
