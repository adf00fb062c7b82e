"""Unit tests for the adbsink CLI commands."""

from unittest.mock import Mock, patch

import pytest
from click.testing import CliRunner

from adbsink.cli import main
from adbsink.exceptions import SinkAdbError, SinkDeviceError

STATS = {
    "directories_created": 1,
    "copies": 2,
    "directory_copies": 0,
    "deletes": 0,
    "directory_deletes": 0,
    "skips": 0,
    "warnings": 0,
}


@pytest.fixture
def runner():
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def mock_config():
    """Mock the config module."""
    with patch("adbsink.cli.config") as mock:
        mock.adb_path = "adb"
        mock.serial = None
        mock.timeout = 60.0
        mock.compression = "any"
        yield mock


@pytest.fixture
def mock_client(mock_config):
    """Mock the adb client class."""
    with patch("adbsink.cli.AdbClient") as mock_cls:
        client = mock_cls.return_value
        client.ensure_device.return_value = "ABC123"
        yield mock_cls


@pytest.fixture
def mock_engine():
    """Mock the sync engine class."""
    with patch("adbsink.cli.SyncEngine") as mock_cls:
        mock_cls.return_value.sync_pair.return_value = dict(STATS)
        yield mock_cls


class TestMainGroup:
    """Tests for the main CLI group."""

    def test_main_help(self, runner):
        """Test main help shows all commands."""
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "adbsink" in result.output
        assert "--serial" in result.output
        assert "pull" in result.output
        assert "push" in result.output

    def test_pull_help(self, runner):
        """Test pull help lists its options."""
        result = runner.invoke(main, ["pull", "--help"])
        assert result.exit_code == 0
        assert "--delete-if-dne" in result.output
        assert "--set-times" in result.output
        assert "--ignore-dir" in result.output


class TestPullCommand:
    """Tests for the pull command."""

    def test_pull_builds_pair(self, runner, mock_client, mock_engine, tmp_path):
        """Test that pull mirrors SOURCE into DEST/<name>."""
        result = runner.invoke(
            main,
            ["pull", "/sdcard/DCIM", str(tmp_path), "-d", "-t", "-i", ".thumbnails"],
        )

        assert result.exit_code == 0, result.output
        mock_client.return_value.start_server.assert_called_once()
        mock_client.return_value.ensure_device.assert_called_once()

        engine_cls = mock_engine
        source, destination = engine_cls.call_args.args[:2]
        assert source.name == "device"
        assert destination.name == "local"

        pair = engine_cls.return_value.sync_pair.call_args.args[0]
        assert pair.source == "/sdcard/DCIM"
        assert pair.destination.endswith("/DCIM")
        assert pair.mirror_deletions is True
        assert pair.preserve_times is True
        assert pair.ignore == [".thumbnails"]
        assert engine_cls.return_value.sync_pair.call_args.kwargs["dry_run"] is False

    def test_pull_dry_run_and_no_dir_copy(
        self, runner, mock_client, mock_engine, tmp_path
    ):
        """Test forwarding of --dry-run and --no-dir-copy."""
        result = runner.invoke(
            main, ["pull", "/sdcard/DCIM", str(tmp_path), "-n", "--no-dir-copy"]
        )

        assert result.exit_code == 0, result.output
        call = mock_engine.return_value.sync_pair.call_args
        assert call.kwargs["dry_run"] is True
        assert call.args[0].whole_directory_copy is False

    def test_serial_option(self, runner, mock_client, mock_engine, tmp_path):
        """Test that --serial is passed to the adb client."""
        result = runner.invoke(
            main, ["--serial", "XYZ", "pull", "/sdcard/DCIM", str(tmp_path)]
        )

        assert result.exit_code == 0, result.output
        assert mock_client.call_args.kwargs["serial"] == "XYZ"

    def test_json_output(self, runner, mock_client, mock_engine, tmp_path):
        """Test that --json prints the statistics."""
        result = runner.invoke(main, ["--json", "pull", "/sdcard/DCIM", str(tmp_path)])

        assert result.exit_code == 0, result.output
        assert '"copies": 2' in result.output

    def test_no_device(self, runner, mock_client, mock_engine, tmp_path):
        """Test that a device selection error exits with 1."""
        mock_client.return_value.ensure_device.side_effect = SinkDeviceError(
            "No device connected"
        )

        result = runner.invoke(main, ["pull", "/sdcard/DCIM", str(tmp_path)])

        assert result.exit_code == 1
        mock_engine.assert_not_called()

    def test_sync_failure(self, runner, mock_client, mock_engine, tmp_path):
        """Test that a failure during sync exits with 1."""
        mock_engine.return_value.sync_pair.side_effect = SinkAdbError(
            "device offline"
        )

        result = runner.invoke(main, ["pull", "/sdcard/DCIM", str(tmp_path)])

        assert result.exit_code == 1

    def test_pull_root_rejected(self, runner, mock_client, mock_engine, tmp_path):
        """Test that the device root cannot be pulled by name."""
        result = runner.invoke(main, ["pull", "/", str(tmp_path)])
        assert result.exit_code == 1


class TestPushCommand:
    """Tests for the push command."""

    def test_push_builds_pair(self, runner, mock_client, mock_engine, tmp_path):
        """Test that push mirrors a local directory onto the device."""
        music = tmp_path / "Music"
        music.mkdir()

        result = runner.invoke(main, ["push", str(music), "/sdcard/", "-d"])

        assert result.exit_code == 0, result.output
        source, destination = mock_engine.call_args.args[:2]
        assert source.name == "local"
        assert destination.name == "device"
        pair = mock_engine.return_value.sync_pair.call_args.args[0]
        assert pair.destination == "/sdcard/Music"
        assert pair.mirror_deletions is True
        assert pair.preserve_times is False

    def test_push_missing_source(self, runner, mock_client, mock_engine, tmp_path):
        """Test that a missing local source is a usage error."""
        result = runner.invoke(main, ["push", str(tmp_path / "nope"), "/sdcard"])
        assert result.exit_code == 2
        mock_engine.assert_not_called()

    def test_push_requires_dest(self, runner, tmp_path):
        """Test that DEST is required for push."""
        result = runner.invoke(main, ["push", str(tmp_path)])
        assert result.exit_code == 2


class TestEndToEndWithoutDevice:
    """Run a real engine against a mocked adb client."""

    def test_pull_into_empty_directory(self, runner, mock_config, tmp_path):
        """Test a full pull of a one-file directory."""
        listings = {
            "/sdcard/Docs": (
                "000041f9 00001000 00000010 .\n"
                "000041f9 00001000 00000010 ..\n"
                "000081b0 00000003 00000064 a.txt\n"
            ),
        }
        client = Mock()
        client.ensure_device.return_value = "ABC123"
        client.run.side_effect = lambda args: listings.get(args[1], "")

        def fake_pull(args):
            (tmp_path / "Docs" / "a.txt").write_text("abc")
            return ""

        client.stream.side_effect = fake_pull

        with patch("adbsink.cli.AdbClient", return_value=client):
            result = runner.invoke(main, ["-q", "pull", "/sdcard/Docs", str(tmp_path)])

        assert result.exit_code == 0, result.output
        assert (tmp_path / "Docs").is_dir()
        assert (tmp_path / "Docs" / "a.txt").read_text() == "abc"
        pull_args = client.stream.call_args.args[0]
        assert pull_args[:3] == ["pull", "-z", "any"]
        assert pull_args[-2:] == [
            "/sdcard/Docs/a.txt",
            f"{tmp_path.as_posix()}/Docs/a.txt",
        ]
