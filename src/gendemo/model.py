# model.py
from __future__ import annotations

import shlex
from dataclasses import dataclass, field
from typing import Optional, Tuple, Union


DEFAULT_REQUIRED_VARS: Tuple[str, ...] = ("PROJECT_ID", "APIGEE_HOST", "APIGEE_ENV")


@dataclass(frozen=True)
class Capture:
    """An argument whose value is the stdout of a helper command, run right before the step."""
    cmd: Tuple[str, ...]

    @property
    def tool(self) -> str:
        return self.cmd[0]

    def display(self) -> str:
        # captured values are usually credentials, never show them
        return f"<{' '.join(self.cmd)}>"


Arg = Union[str, Capture]


@dataclass(frozen=True)
class Step:
    """A single external-tool invocation inside a sequence."""
    name: str
    tool: str
    args: Tuple[Arg, ...] = ()
    output: str | None = None
    description: str | None = None
    cwd: str | None = None

    @property
    def captures(self) -> list[Capture]:
        return [a for a in self.args if isinstance(a, Capture)]

    def display_command(self) -> str:
        parts = [self.tool]
        for a in self.args:
            parts.append(a.display() if isinstance(a, Capture) else shlex.quote(a))
        return " ".join(parts)


@dataclass
class RunResult:
    """Outcome of one executed step. Consumed for the pass/fail decision, then summarized."""
    step: str
    tool: str
    command: str
    exit_code: int
    stdout: str = ""
    stderr: str = ""
    duration: float = 0.0

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


@dataclass
class SequenceResult:
    """
    Ordered results of a sequence run.

    `results` only holds steps that actually started; a failed run stops at
    the first failure so nothing after it appears here.
    """
    results: list[RunResult] = field(default_factory=list)
    failed_step: Optional[str] = None
    dry_run: bool = False

    @property
    def ok(self) -> bool:
        return self.failed_step is None

    @property
    def executed(self) -> list[str]:
        return [r.step for r in self.results]

    def statuses(self) -> dict[str, str]:
        if self.dry_run:
            return {r.step: "dry-run" for r in self.results}
        return {r.step: ("ok" if r.ok else "failed") for r in self.results}
