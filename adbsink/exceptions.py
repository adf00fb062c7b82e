"""Exceptions raised by adbsink."""

from typing import Optional


class SinkError(Exception):
    """Base exception for all adbsink errors."""


class SinkBackendError(SinkError):
    """A storage backend operation failed.

    Carries the attempted action and path so a failure can be diagnosed
    without re-running verbosely.
    """

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        action: Optional[str] = None,
    ):
        self.path = path
        self.action = action
        if action and path:
            message = f"{action} '{path}': {message}"
        elif path:
            message = f"'{path}': {message}"
        super().__init__(message)


class SinkAdbError(SinkBackendError):
    """adb exited with an error or reported one on its output."""


class SinkAdbNotFoundError(SinkError):
    """The adb binary could not be located."""

    def __init__(self, adb_path: str = "adb"):
        self.adb_path = adb_path
        super().__init__(
            f"adb binary not found: {adb_path}. "
            "Install Android platform-tools or set ADBSINK_ADB_PATH."
        )


class SinkDeviceError(SinkError):
    """No usable device, or more than one device without a serial."""


class SinkMalformedListingError(SinkError):
    """Backend listing output did not match the expected record shape."""


class SinkInvariantError(SinkError):
    """An internal invariant was violated (indicates a defect)."""


class SinkUnsupportedEntryError(SinkInvariantError):
    """An entry of an unsupported kind (symlink, special file) was found."""

    def __init__(self, path: str, kind: str = "symlink"):
        self.path = path
        super().__init__(f"{kind}s are not supported: '{path}'")


class SinkUnsupportedError(SinkError):
    """The requested backend combination is not supported."""


class SinkConfigError(SinkError):
    """Configuration file contains invalid values."""
