# errors.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple


@dataclass
class MissingConfiguration(Exception):
    """One or more required environment variables are absent or empty."""
    missing: Tuple[str, ...]

    def __str__(self) -> str:
        return "missing required environment variables: " + ", ".join(self.missing)


@dataclass
class StepFailure(Exception):
    """
    Structured step error with enough context for:
      - clean CLI output
      - the run report
      - debugging without full tracebacks
    """
    step: str
    tool: str
    command: str
    exit_code: int
    stdout: str = ""
    stderr: str = ""
    hint: str | None = None
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        return f"step '{self.step}' failed (tool={self.tool}, exit={self.exit_code}): {self.command}"
