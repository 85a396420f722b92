"""
Console output formatting module.

This module handles all user-facing console output for the configcache command.
"""

from datetime import timedelta
from typing import Any, Dict


def format_value(value: Any) -> str:
    """Format a configuration value for display."""
    if value is None:
        return '<unset>'
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, timedelta):
        return f"{value.total_seconds():g}s"
    if isinstance(value, list):
        return '[' + ', '.join(format_value(item) for item in value) + ']'
    return str(value)


class ConsoleOutput:
    """
    Handles all console output formatting for the configcache command.
    """

    def __init__(self, verbose: bool = False):
        """
        Initialize console output handler.

        Args:
            verbose: If True, enable verbose output mode
        """
        self.verbose = verbose

    def print_value(self, value: Any):
        """Print a single value."""
        print(format_value(value))

    def print_values(self, values: Dict[str, Any]):
        """Print key/value pairs, one per line."""
        width = max(len(key) for key in values) if values else 0
        for key, value in values.items():
            print(f"{key.ljust(width)} = {format_value(value)}")

    def print_watch_banner(self, config_file, interval: float):
        """Print the header shown when watching starts."""
        print(f"Watching {config_file} (refresh every {interval:g}s, Ctrl+C to stop)")
        print("=" * 60)

    def print_separator(self):
        print("-" * 60)
