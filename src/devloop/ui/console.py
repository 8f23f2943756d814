"""Console output formatting utilities for devloop."""

from __future__ import annotations

import sys
from typing import Optional

import click


class Console:
    """Centralized console output formatting.

    Tools invoked by the loop write to the terminal themselves; this only
    covers what the loop prints on its own.
    """

    def __init__(self, debug: bool = False):
        """
        Initialize console formatter.

        Args:
            debug: If True, show detailed output including stack traces
        """
        self.debug = debug

    def clear(self) -> None:
        """Clear the terminal (no-op when stdout is not a terminal)."""
        click.clear()

    def print_separator(self, line: str) -> None:
        """Print the end-of-iteration separator."""
        print(line, flush=True)

    def print_skipped(self, name: str) -> None:
        """Print gated-step skip message."""
        print(f"SKIPPED: {name} (previous step failed)", flush=True)

    def print_tool_missing(
        self, name: str, tool: str, hint: str, reason: str = "Tool not found"
    ) -> None:
        """Print a launch failure for a step whose tool could not be started."""
        print(f"STEP FAILED: {name}", file=sys.stderr)
        print(f"{reason}: {tool}", file=sys.stderr)
        print(f"Hint: {hint}", file=sys.stderr, flush=True)

    def print_plan(self, steps, watched: list[str], restart: str) -> None:
        """Print configured steps and watched paths."""
        print("STEPS")
        for i, step in enumerate(steps, start=1):
            mode = "gated" if step.gated else "best-effort"
            print(f"  {i}. {step.name} ({mode}): {step.display}")
        print("WATCH")
        for path in watched:
            print(f"  {path}")
        print(f"RESTART: {restart}")

    def print_results(self, results: dict[str, str]) -> None:
        """Print a one-shot run summary."""
        print("RESULTS")
        for name, status in results.items():
            status_display = status.upper() if status != "ok" else "SUCCESS"
            print(f"  {name}: {status_display}")

    def print_change(self, path: str) -> None:
        """Print the path that woke the loop (debug only)."""
        self.print_debug(f"change detected: {path}")

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

    def print_exception(self, exc: Exception) -> None:
        """Print exception, with full traceback only in debug mode."""
        if self.debug:
            import traceback
            traceback.print_exc()
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
