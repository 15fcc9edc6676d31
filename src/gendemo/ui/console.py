"""Console output formatting utilities for gendemo."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Sequence

import click

if TYPE_CHECKING:
    from gendemo.errors import StepFailure
    from gendemo.model import SequenceResult


class Console:
    """Centralized console output formatting."""

    def __init__(self, debug: bool = False, color: bool = True):
        """
        Initialize console formatter.

        Args:
            debug: If True, show detailed output including stack traces
            color: If False, print plain text (no ANSI styling)
        """
        self.debug = debug
        self.color = color

    def _style(self, text: str, fg: str) -> str:
        if not self.color:
            return text
        return click.style(text, fg=fg)

    def _out(self, text: str = "") -> None:
        click.echo(text)

    def _err(self, text: str = "") -> None:
        click.echo(text, err=True)

    def print_run_started(self, sequence: str, step_count: int) -> None:
        """Print run start information."""
        self._out(self._style("✅ All required environment variables are set. Starting the demo.", "green"))
        self._out(f"Sequence: {sequence}")
        self._out(f"Steps: {step_count}")

    def print_banner(
        self,
        name: str,
        description: Optional[str] = None,
        index: Optional[int] = None,
        total: Optional[int] = None,
    ) -> None:
        """Print the banner shown before each step."""
        counter = f"[{index}/{total}] " if index is not None and total is not None else ""
        self._out()
        self._out(self._style(f"--- {counter}{name} ---", "blue"))
        if description:
            self._out(description)

    def print_command(self, command: str) -> None:
        """Print a command line (dry runs)."""
        self._out(f"$ {command}")

    def print_output(self, text: str) -> None:
        """Echo captured tool output."""
        text = (text or "").rstrip()
        if text:
            self._out(text)

    def print_step_failure(self, failure: StepFailure) -> None:
        """
        Print a failed step.

        The step label and the tool name are always shown; captured output
        only when there is some.
        """
        self._err(self._style(f"STEP FAILED: {failure.step}", "red"))
        self._err(f"Tool: {failure.tool}")
        self._err(f"Exit code: {failure.exit_code}")
        self._err(f"Command: {failure.command}")
        if failure.hint:
            self._err(f"Hint: {failure.hint}")
        for k, v in (failure.details or {}).items():
            self._err(f"{k}: {v}")
        if failure.stdout.strip() and self.debug:
            self._err("stdout:")
            self._err(failure.stdout.rstrip())
        if failure.stderr.strip():
            self._err("stderr:")
            self._err(failure.stderr.rstrip())

    def print_missing_variables(self, missing: Sequence[str]) -> None:
        """Print one line per missing variable, then the summary line."""
        for name in missing:
            self._err(self._style(f"ERROR: No {name} variable set. Please set it.", "red"))
        self._err(self._style(
            "ERROR: One or more required environment variables are missing. Exiting.", "red"
        ))

    def print_complete(self, dry_run: bool = False) -> None:
        """Print the final success message."""
        self._out()
        if dry_run:
            self._out(self._style("Dry run finished, nothing was executed.", "green"))
        else:
            self._out(self._style("🎉 Demo script finished.", "green"))

    def print_summary(self, step_names: Sequence[str], result: SequenceResult) -> None:
        """
        One line per declared step, in order. Steps after a failure show as
        `not run`, so the summary always accounts for the whole sequence.
        """
        by_name = {r.step: r for r in result.results}
        width = max((len(n) for n in step_names), default=0)
        self._out()
        self._out(f"Summary ({len(result.results)}/{len(step_names)} steps started)")
        for index, name in enumerate(step_names, start=1):
            run = by_name.get(name)
            if run is None:
                status = "not run"
            elif result.dry_run:
                status = "dry run"
            elif run.ok:
                status = self._style(f"ok ({run.duration:.1f}s)", "green")
            else:
                status = self._style(f"FAILED (exit {run.exit_code}, {run.tool})", "red")
            self._out(f"  {index}. {name.ljust(width)}  {status}")

    def print_tools(self, tools: dict[str, Optional[str]]) -> None:
        """Print tool availability (check command)."""
        for tool, path in tools.items():
            if path:
                self._out(f"  {tool}: {path}")
            else:
                self._out(self._style(f"  {tool}: not found", "red"))

    def print_error(self, title: str, message: str, suggestion: Optional[str] = None) -> None:
        """Print a problem found before any step ran (bad sequence file, bad option)."""
        self._err(self._style(f"ERROR: {title}", "red"))
        for line in message.splitlines():
            self._err(f"  {line}")
        if suggestion:
            self._err(f"Try: {suggestion}")

    def print_exception(self, exc: Exception) -> None:
        """Unexpected errors: one line, or the traceback under --debug."""
        if self.debug:
            import traceback
            traceback.print_exc()
            return
        self._err(self._style(f"ERROR: {type(exc).__name__}: {exc}", "red"))
        self._err("Re-run with --debug for the full traceback.")

    def print_warning(self, message: str) -> None:
        self._err(self._style(f"WARNING: {message}", "yellow"))

    def print_info(self, message: str) -> None:
        """Print informational message."""
        self._out(message)

    def print_debug(self, message: str) -> None:
        """Print debug message (only if debug mode enabled)."""
        if self.debug:
            self._err(f"[DEBUG] {message}")


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
