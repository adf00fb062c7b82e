"""Utility functions for adbsink."""

import posixpath

# =============================================================================
# Constants
# =============================================================================

# Entry sizes and timestamps are unsigned 32-bit values on the device side
U32_MAX: int = 0xFFFFFFFF

# Compression algorithm passed to adb push/pull with -z
DEFAULT_COMPRESSION: str = "any"

# Timeout for a single adb invocation (seconds)
DEFAULT_ADB_TIMEOUT: float = 3600.0


# =============================================================================
# Path utilities
# =============================================================================


def normalize_path(path: str) -> str:
    """Normalize a path to forward-slash form without a trailing slash.

    Args:
        path: Path using either separator

    Returns:
        Normalized path (e.g., "/sdcard//DCIM/" -> "/sdcard/DCIM")
    """
    path = path.replace("\\", "/")
    if not path:
        return path
    normalized = posixpath.normpath(path)
    # posixpath keeps a leading double slash, collapse it
    if normalized.startswith("//"):
        normalized = "/" + normalized.lstrip("/")
    return normalized


def join_path(base: str, *parts: str) -> str:
    """Join forward-slash path components, ignoring empty parts.

    Args:
        base: Base path
        *parts: Components to append

    Returns:
        Joined path
    """
    result = base
    for part in parts:
        if not part:
            continue
        if not result:
            result = part
        elif result.endswith("/"):
            result = result + part
        else:
            result = f"{result}/{part}"
    return result


def basename(path: str) -> str:
    """Final component of a forward-slash path ("" for the root)."""
    return posixpath.basename(normalize_path(path).rstrip("/"))
