"""Console output formatting utilities for parabuild."""

from __future__ import annotations

import json
import sys
from typing import List, Optional


def format_duration(seconds: float) -> str:
    return f"{seconds:.2f}s"


class Console:
    """Centralized console output formatting."""

    def __init__(self, debug: bool = False):
        """
        Initialize console formatter.

        Args:
            debug: If True, show detailed output including stack traces
        """
        self.debug = debug

    def print_build_flow(self, waves: List[int]) -> None:
        """Print the planned number of units per wave, e.g. build flow: [1, 2, 1]."""
        print(f"build flow: {json.dumps(waves)}")

    def print_waves(self, waves: List[List[str]]) -> None:
        """Print every planned wave with its units."""
        for idx, wave in enumerate(waves):
            print(f"=== Wave {idx + 1} ({len(wave)}) ===")
            for key in wave:
                print(f"  {key}")

    def print_unit_started(self, key: str) -> None:
        print(f"Running build for {key}...")

    def print_unit_built(self, key: str, duration: float) -> None:
        print(f"  {key} is built successfully in {format_duration(duration)}")

    def print_summary(self, unit_count: int, elapsed: float) -> None:
        print(f"{unit_count} units built successfully in {format_duration(elapsed)}")

    def print_error(
        self,
        title: str,
        message: str,
        details: Optional[list[str]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        """
        Print structured error message.

        Args:
            title: Error title
            message: Main error message
            details: Optional list of detail lines
            suggestion: Optional suggestion for user
        """
        print(f"\nERROR: {title}", file=sys.stderr)
        print(f"{message}", file=sys.stderr)
        if details:
            for detail in details:
                print(f"  {detail}", file=sys.stderr)
        if suggestion:
            print(f"\n{suggestion}", file=sys.stderr)

    def print_exception(self, exc: BaseException) -> None:
        """Print exception, with full traceback only in debug mode."""
        if self.debug:
            import traceback
            traceback.print_exception(type(exc), exc, exc.__traceback__)
        else:
            print(f"Error: {exc}", file=sys.stderr)

    def print_info(self, message: str) -> None:
        """Print informational message."""
        print(message)

    def print_debug(self, message: str) -> None:
        """Print debug message (only if debug mode enabled)."""
        if self.debug:
            print(f"[DEBUG] {message}", file=sys.stderr)


# Global console instance (will be initialized by CLI)
_console: Optional[Console] = None


def get_console() -> Console:
    """Get the global console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_console(console: Console) -> None:
    """Set the global console instance."""
    global _console
    _console = console
