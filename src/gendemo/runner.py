# runner.py
from __future__ import annotations

import re
import runpy
import shutil
import subprocess
import time
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence

from .config import DemoConfig
from .errors import MissingConfiguration, StepFailure
from .dsl import sequence as seq_helper
from .model import Capture, RunResult, SequenceResult, Step
from .ui.console import get_console

# validate env ---> render args ---> run tool ---> next step (or stop)


TOOL_HINTS = {
    "apigee-go-gen": "Install apigee-go-gen (https://apigee.github.io/apigee-go-gen/installation/) "
                     "or point --tool-dir at its bin directory.",
    "apigeecli": "Install apigeecli (https://github.com/apigee/apigeecli) or fix PATH.",
    "gcloud": "Install the Google Cloud SDK and run `gcloud auth login`.",
}

# failure diagnostics keep the tail only, tools can be chatty
OUTPUT_TAIL = 4000


def _hint_for(tool: str) -> str:
    return TOOL_HINTS.get(tool, f"Install {tool} or fix PATH.")


def _exec_failure(step: Step, tool: str, command: str, exc: OSError) -> StepFailure:
    """Map an OSError raised while starting a tool onto the exit codes a shell would report."""
    if isinstance(exc, FileNotFoundError):
        return StepFailure(step=step.name, tool=tool, command=command, exit_code=127, hint=_hint_for(tool))
    if isinstance(exc, PermissionError):
        return StepFailure(
            step=step.name,
            tool=tool,
            command=command,
            exit_code=126,
            hint=f"{tool} was found but is not executable (chmod +x it, or fix PATH).",
            details={"reason": str(exc)},
        )
    return StepFailure(step=step.name, tool=tool, command=command, exit_code=126, details={"reason": str(exc)})


# ----------------------------------------------------------------------
# Sequence loading (local file)
# ----------------------------------------------------------------------

def load_sequence(path: str | Path) -> List[Step]:
    """
    Run a sequence file and pick up its steps.

    A sequence file is plain python. It either builds its steps in a
    `sequence()` function (called with no arguments) or assigns them to a
    module-level `STEPS` list. The function wins when both exist.
    """
    seq_path = Path(path).expanduser().resolve()
    if not seq_path.exists():
        raise FileNotFoundError(f"No sequence file at {seq_path}")
    if seq_path.suffix != ".py":
        raise ValueError(f"{seq_path.name}: sequence files are python modules (.py)")

    namespace = runpy.run_path(str(seq_path), run_name=f"gendemo_sequence_{seq_path.stem}")

    builder = namespace.get("sequence")
    if callable(builder):
        if builder is seq_helper:
            # `from gendemo import sequence` without defining one
            raise TypeError(
                f"{seq_path.name} imports the `sequence` helper but never defines sequence(); "
                "import `seq` instead and define `def sequence(): return seq(...)`."
            )
        steps = builder()
        origin = "sequence()"
    else:
        steps = namespace.get("STEPS")
        origin = "STEPS"

    if steps is None:
        raise TypeError(f"{seq_path.name} defines neither sequence() nor STEPS")
    if not isinstance(steps, list):
        raise TypeError(f"{seq_path.name}: {origin} must be a list of steps, got {type(steps).__name__}")
    bad = [s for s in steps if not isinstance(s, Step)]
    if bad:
        raise TypeError(
            f"{seq_path.name}: {origin} contains {len(bad)} item(s) that are not steps "
            f"(first: {bad[0]!r}); build them with tool(...)"
        )

    return steps


# ----------------------------------------------------------------------
# Argument rendering
# ----------------------------------------------------------------------

PLACEHOLDER = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")


def _substitute(value: str, environ: Mapping[str, str]) -> str:
    """Replace ${NAME} placeholders. Any other `$` (bare $NAME, $$, a trailing $) is left as is."""
    missing: List[str] = []

    def _lookup(match: re.Match) -> str:
        name = match.group(1)
        if name not in environ:
            if name not in missing:
                missing.append(name)
            return match.group(0)
        return environ[name]

    rendered = PLACEHOLDER.sub(_lookup, value)
    if missing:
        raise MissingConfiguration(missing=tuple(missing))
    return rendered


def _display_args(step: Step, environ: Mapping[str, str]) -> str:
    rendered = Step(
        name=step.name,
        tool=step.tool,
        args=tuple(a if isinstance(a, Capture) else _substitute(a, environ) for a in step.args),
    )
    return rendered.display_command()


def _run_capture(step: Step, cap: Capture, cwd: Path, env: Dict[str, str]) -> str:
    command = " ".join(cap.cmd)
    try:
        proc = subprocess.run(
            list(cap.cmd),
            cwd=str(cwd),
            env=env,
            text=True,
            capture_output=True,
        )
    except OSError as e:
        raise _exec_failure(step, cap.tool, command, e) from e

    if proc.returncode != 0:
        raise StepFailure(
            step=step.name,
            tool=cap.tool,
            command=command,
            exit_code=proc.returncode,
            stdout=proc.stdout[-OUTPUT_TAIL:],
            stderr=proc.stderr[-OUTPUT_TAIL:],
        )

    value = proc.stdout.strip()
    if not value:
        raise StepFailure(
            step=step.name,
            tool=cap.tool,
            command=command,
            exit_code=1,
            stderr=proc.stderr[-OUTPUT_TAIL:],
            details={"reason": "command printed nothing"},
        )
    return value


def _render_args(step: Step, cwd: Path, config: DemoConfig, env: Dict[str, str]) -> List[str]:
    out: List[str] = []
    for a in step.args:
        if isinstance(a, Capture):
            out.append(_run_capture(step, a, cwd, env))
        else:
            out.append(_substitute(a, config.environ))
    return out


# ----------------------------------------------------------------------
# Execution primitives
# ----------------------------------------------------------------------

def _step_cwd(step: Step, config: DemoConfig) -> Path:
    return (config.workdir / (step.cwd or ".")).resolve()


def run_step(step: Step, config: DemoConfig) -> RunResult:
    """Run one step to completion. Raises StepFailure on a non-zero exit."""
    console = get_console()
    cwd = _step_cwd(step, config)
    if not cwd.exists():
        raise FileNotFoundError(f"step '{step.name}' cwd not found: {cwd}")

    env = config.step_env()
    display = _display_args(step, config.environ)

    if step.output:
        (cwd / step.output).parent.mkdir(parents=True, exist_ok=True)

    args = _render_args(step, cwd, config, env)
    console.print_debug(f"running in {cwd}: {display}")

    started = time.monotonic()
    try:
        proc = subprocess.run(
            [step.tool, *args],
            cwd=str(cwd),
            env=env,
            text=True,
            capture_output=True,   # so we can show output on failure
        )
    except OSError as e:
        raise _exec_failure(step, step.tool, display, e) from e
    duration = time.monotonic() - started

    if proc.returncode != 0:
        raise StepFailure(
            step=step.name,
            tool=step.tool,
            command=display,
            exit_code=proc.returncode,
            stdout=proc.stdout[-OUTPUT_TAIL:],
            stderr=proc.stderr[-OUTPUT_TAIL:],
        )

    if step.output and not (cwd / step.output).exists():
        console.print_warning(f"expected output not found: {step.output}")

    return RunResult(
        step=step.name,
        tool=step.tool,
        command=display,
        exit_code=proc.returncode,
        stdout=proc.stdout,
        stderr=proc.stderr,
        duration=duration,
    )


def _validate(steps: Sequence[Step], config: DemoConfig) -> None:
    seen: set[str] = set()
    for s in steps:
        if s.name in seen:
            raise ValueError(f"Duplicate step name: {s.name}")
        seen.add(s.name)

    # every ${NAME} must resolve before the first tool runs
    missing: List[str] = []
    for s in steps:
        for a in s.args:
            if isinstance(a, Capture):
                continue
            try:
                _substitute(a, config.environ)
            except MissingConfiguration as e:
                missing.extend(m for m in e.missing if m not in missing)
    if missing:
        raise MissingConfiguration(missing=tuple(missing))


def tool_availability(steps: Sequence[Step], config: DemoConfig) -> Dict[str, Optional[str]]:
    """Map every tool the steps need (captures included) to its resolved path, or None."""
    path = config.step_env().get("PATH")
    tools: List[str] = []
    for s in steps:
        for t in [s.tool, *(c.tool for c in s.captures)]:
            if t not in tools:
                tools.append(t)
    return {t: shutil.which(t, path=path) for t in tools}


# ----------------------------------------------------------------------
# Public API
# ----------------------------------------------------------------------

def run_sequence(
    steps: Sequence[Step],
    config: DemoConfig,
    *,
    dry_run: bool = False,
) -> SequenceResult:
    """
    Run steps one at a time in declaration order.

    Stops at the first failing step: later steps never start. The failure is
    recorded in the returned SequenceResult rather than raised, so callers
    decide the exit status.
    """
    console = get_console()
    _validate(steps, config)

    result = SequenceResult(dry_run=dry_run)
    total = len(steps)

    for index, step in enumerate(steps, start=1):
        console.print_banner(step.name, step.description, index=index, total=total)

        if dry_run:
            display = _display_args(step, config.environ)
            console.print_command(display)
            result.results.append(RunResult(step=step.name, tool=step.tool, command=display, exit_code=0))
            continue

        try:
            run = run_step(step, config)
        except StepFailure as e:
            console.print_step_failure(e)
            result.results.append(
                RunResult(
                    step=step.name,
                    tool=e.tool,
                    command=e.command,
                    exit_code=e.exit_code,
                    stdout=e.stdout,
                    stderr=e.stderr,
                )
            )
            result.failed_step = step.name
            return result

        console.print_output(run.stdout)
        result.results.append(run)

    console.print_complete(dry_run=dry_run)
    return result
