"""Console output formatting utilities for reciperun."""

from __future__ import annotations

import shlex
import sys
from typing import Iterable, Optional, Sequence


class Console:
    """Centralized console output formatting."""

    def __init__(self, debug: bool = False):
        """
        Initialize console formatter.

        Args:
            debug: If True, show detailed output including stack traces
        """
        self.debug = debug

    def print_run_started(self, source: str, target: str, plan: Sequence[str]) -> None:
        """Print run start information."""
        print("\nRUN STARTED")
        print(f"Recipes: {source}")
        print(f"Target: {target}")
        print(f"Plan: {' -> '.join(plan)}")
        print()

    def print_recipe_start(self, name: str) -> None:
        """Print recipe start message."""
        print(f"\nRECIPE: {name}")

    def print_command(self, argv: Sequence[str], cwd: Optional[str] = None) -> None:
        """Echo a command before it runs (stderr, like a shell trace)."""
        line = shlex.join(argv)
        if cwd:
            line = f"({cwd}) {line}"
        print(line, file=sys.stderr, flush=True)

    def print_failure(self, name: str, reason: str, exit_code: Optional[int] = None) -> None:
        """
        Print failure message.

        Args:
            name: Recipe name
            reason: Failure reason/error message
            exit_code: Optional exit code
        """
        print(f"RECIPE FAILED: {name}", file=sys.stderr)
        if exit_code is not None:
            print(f"Exit code: {exit_code}", file=sys.stderr)
        if self.debug:
            print(f"Error details: {reason}", file=sys.stderr)

    def print_recipe_list(self, rows: Iterable[tuple[str, list[str], Optional[str]]]) -> None:
        """Print available recipes with aliases and docs."""
        print("Available recipes:")
        for name, aliases, doc in rows:
            label = name
            if aliases:
                label += f" [{', '.join(aliases)}]"
            if doc:
                print(f"    {label:<24} # {doc}")
            else:
                print(f"    {label}")

    def print_plan(self, steps: Iterable[tuple[str, list[str]]]) -> None:
        """Print an execution plan with its rendered commands."""
        for idx, (name, lines) in enumerate(steps, start=1):
            print(f"{idx}. {name}")
            for line in lines:
                print(f"     {line}")

    def print_results(self, results: dict[str, str]) -> None:
        """Print final results summary."""
        print("\n" + "=" * 40)
        print("RESULTS")
        print("=" * 40)
        for name, status in results.items():
            status_display = status.upper() if status != "ok" else "SUCCESS"
            print(f"  {name}: {status_display}")

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
