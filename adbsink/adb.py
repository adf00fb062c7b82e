"""Thin wrapper around the adb command-line bridge."""

import logging
import shlex
import subprocess
from concurrent.futures import ThreadPoolExecutor
from typing import IO, Optional

from .exceptions import SinkAdbError, SinkAdbNotFoundError, SinkDeviceError
from .utils import DEFAULT_ADB_TIMEOUT

logger = logging.getLogger(__name__)

ADB_ERROR_PREFIX = "adb: error:"


class AdbClient:
    """Runs adb commands and turns failures into exceptions."""

    def __init__(
        self,
        adb_path: str = "adb",
        serial: Optional[str] = None,
        timeout: float = DEFAULT_ADB_TIMEOUT,
        verbose: bool = False,
    ):
        """Initialize adb client.

        Args:
            adb_path: Path to the adb binary
            serial: Device serial passed with -s (None for the only device)
            timeout: Timeout for a single invocation in seconds
            verbose: Log every command, including directory listings
        """
        self.adb_path = adb_path
        self.serial = serial
        self.timeout = timeout
        self.verbose = verbose

    def _command(self, args: list[str], select_device: bool = True) -> list[str]:
        cmd = [self.adb_path]
        if select_device and self.serial:
            cmd += ["-s", self.serial]
        return cmd + list(args)

    def _log_command(self, cmd: list[str], always: bool) -> None:
        if always or self.verbose:
            logger.info("[ADB] %s", shlex.join(cmd))
        else:
            logger.debug("[ADB] %s", shlex.join(cmd))

    def _check(
        self, cmd: list[str], returncode: int, stdout: str, stderr: str
    ) -> str:
        if returncode != 0 or stdout.startswith(ADB_ERROR_PREFIX):
            detail = (stderr.strip() or stdout.strip()) or f"exit code {returncode}"
            raise SinkAdbError(detail, action=shlex.join(cmd[1:]))
        if stderr.strip():
            logger.debug("adb stderr: %s", stderr.strip())
        return stdout

    def run(
        self, args: list[str], always_log: bool = False, select_device: bool = True
    ) -> str:
        """Run an adb command and return its stdout.

        Args:
            args: Arguments after "adb" (and the serial selector)
            always_log: Log the command at INFO even when not verbose
            select_device: Pass the configured serial with -s

        Returns:
            Captured stdout

        Raises:
            SinkAdbNotFoundError: If the adb binary does not exist
            SinkAdbError: If adb fails or times out
        """
        cmd = self._command(args, select_device)
        self._log_command(cmd, always_log)
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise SinkAdbNotFoundError(self.adb_path) from e
        except subprocess.TimeoutExpired as e:
            raise SinkAdbError(
                f"timed out after {self.timeout:.0f}s", action=shlex.join(args)
            ) from e
        return self._check(cmd, result.returncode, result.stdout, result.stderr)

    def stream(self, args: list[str]) -> str:
        """Run a long adb command, logging its output while it runs.

        stdout and stderr are drained on two worker threads so a chatty
        transfer never blocks on a full pipe.

        Returns:
            Captured stdout
        """
        cmd = self._command(args)
        self._log_command(cmd, always=True)
        try:
            proc = subprocess.Popen(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except FileNotFoundError as e:
            raise SinkAdbNotFoundError(self.adb_path) from e

        with proc, ThreadPoolExecutor(max_workers=2) as pool:
            stdout_future = pool.submit(_drain, proc.stdout, logging.DEBUG)
            stderr_future = pool.submit(_drain, proc.stderr, logging.DEBUG)
            try:
                returncode = proc.wait(timeout=self.timeout)
            except subprocess.TimeoutExpired as e:
                proc.kill()
                proc.wait()
                raise SinkAdbError(
                    f"timed out after {self.timeout:.0f}s", action=shlex.join(args)
                ) from e
            stdout = stdout_future.result()
            stderr = stderr_future.result()
        return self._check(cmd, returncode, stdout, stderr)

    def shell(self, args: list[str]) -> str:
        """Run a command in the device shell with each argument quoted."""
        return self.run(["shell", shlex.join(args)])

    def start_server(self) -> None:
        """Start the adb server if it is not running."""
        self.run(["start-server"])

    def devices(self) -> list[tuple[str, str]]:
        """List attached devices as (serial, state) tuples."""
        output = self.run(["devices"], select_device=False)
        devices: list[tuple[str, str]] = []
        for line in output.splitlines():
            line = line.strip()
            if not line or line.startswith("List of devices") or line.startswith("*"):
                continue
            parts = line.split()
            if len(parts) >= 2:
                devices.append((parts[0], parts[1]))
        return devices

    def ensure_device(self) -> str:
        """Check that exactly one usable device is selected.

        Returns:
            Serial of the selected device

        Raises:
            SinkDeviceError: If no device, or several devices and no serial
        """
        ready = [serial for serial, state in self.devices() if state == "device"]
        if self.serial:
            if self.serial not in ready:
                raise SinkDeviceError(f"Device {self.serial} is not connected")
            return self.serial
        if not ready:
            raise SinkDeviceError("No device connected")
        if len(ready) > 1:
            raise SinkDeviceError(
                f"More than one device connected ({', '.join(ready)}); "
                "select one with --serial or ANDROID_SERIAL"
            )
        logger.info("Using device %s", ready[0])
        return ready[0]


def _drain(stream: Optional[IO[str]], level: int) -> str:
    """Read a pipe to EOF, logging each line."""
    if stream is None:
        return ""
    lines = []
    for line in stream:
        lines.append(line)
        logger.log(level, "adb: %s", line.rstrip())
    return "".join(lines)
