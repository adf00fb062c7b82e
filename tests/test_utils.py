"""Unit tests for utility functions."""

import pytest

from adbsink.utils import basename, join_path, normalize_path


class TestNormalizePath:
    """Tests for normalize_path function."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("/sdcard//DCIM/", "/sdcard/DCIM"),
            ("//sdcard", "/sdcard"),
            ("/sdcard/./a/../b", "/sdcard/b"),
            ("C:\\Users\\me", "C:/Users/me"),
            ("/", "/"),
            ("", ""),
            ("relative/dir/", "relative/dir"),
        ],
    )
    def test_normalize(self, raw, expected):
        """Test path normalization."""
        assert normalize_path(raw) == expected


class TestJoinPath:
    """Tests for join_path function."""

    def test_join(self):
        """Test joining components."""
        assert join_path("/sdcard", "a", "b.txt") == "/sdcard/a/b.txt"

    def test_join_root(self):
        """Test joining onto the root."""
        assert join_path("/", "sdcard") == "/sdcard"

    def test_empty_parts_skipped(self):
        """Test that empty components do not add slashes."""
        assert join_path("/sdcard", "", "a") == "/sdcard/a"
        assert join_path("/sdcard", "") == "/sdcard"

    def test_empty_base(self):
        """Test joining onto an empty base."""
        assert join_path("", "a") == "a"


class TestBasename:
    """Tests for basename function."""

    def test_basename(self):
        """Test the final component of a path."""
        assert basename("/sdcard/DCIM") == "DCIM"
        assert basename("/sdcard/DCIM/") == "DCIM"

    def test_root(self):
        """Test that the root has no name."""
        assert basename("/") == ""
