"""Console output formatting for the adbsink CLI."""

import json
from typing import Any

from rich.console import Console


class OutputFormatter:
    """Formats user-facing output with rich.

    Informational output is suppressed in quiet mode; warnings and errors
    always go to stderr.
    """

    def __init__(self, json_output: bool = False, quiet: bool = False):
        """Initialize output formatter.

        Args:
            json_output: Emit machine-readable JSON for results
            quiet: Suppress non-essential output
        """
        self.json_output = json_output
        self.quiet = quiet
        self.console = Console(highlight=False)
        self.err_console = Console(stderr=True, highlight=False)

    def print(self, message: str = "") -> None:
        """Print a plain line."""
        if self.quiet or self.json_output:
            return
        self.console.print(message, markup=False)

    def info(self, message: str) -> None:
        """Print an informational message."""
        if self.quiet or self.json_output:
            return
        self.console.print(message, markup=False)

    def success(self, message: str) -> None:
        """Print a success message."""
        if self.quiet or self.json_output:
            return
        self.console.print(message, style="green", markup=False)

    def warning(self, message: str) -> None:
        """Print a warning message to stderr."""
        self.err_console.print(f"Warning: {message}", style="yellow", markup=False)

    def error(self, message: str) -> None:
        """Print an error message to stderr."""
        self.err_console.print(f"Error: {message}", style="bold red", markup=False)

    def output_json(self, data: Any) -> None:
        """Print data as JSON."""
        self.console.print_json(json.dumps(data))
