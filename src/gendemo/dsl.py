# src/gendemo/dsl.py
from __future__ import annotations

from dataclasses import replace
from typing import List, Optional

from .model import Arg, Capture, Step


# ---------------------------------------------------------------------
# Step helpers
# ---------------------------------------------------------------------

def tool(
    name: str,
    command: str,
    *args: Arg,
    output: str | None = None,
    description: str | None = None,
    cwd: str | None = None,
) -> Step:
    """Create a step that runs an external tool: tool("Label", "apigee-go-gen", "render", ...)."""
    if not command:
        raise ValueError(f"tool({name!r}) needs a command")
    return Step(
        name=name,
        tool=command,
        args=tuple(args),
        output=output,
        description=description,
        cwd=cwd,
    )


def capture(*cmd: str) -> Capture:
    """An argument filled with the trimmed stdout of `cmd`, e.g. capture("gcloud", "auth", "print-access-token")."""
    if not cmd:
        raise ValueError("capture() needs a command")
    return Capture(cmd=tuple(cmd))


def env(name: str) -> str:
    """Placeholder for a configuration value, substituted right before the step runs."""
    return "${" + name + "}"


# ---------------------------------------------------------------------
# Sequences
# ---------------------------------------------------------------------

def seq(*steps: Step, cwd: Optional[str] = None) -> List[Step]:
    """
    Collect steps into a sequence, keeping their order. `cwd` becomes the
    working directory of every step that does not set its own.

    In a sequence file (see load_sequence):

        from gendemo import seq, tool, env

        def sequence():
            return seq(
                tool("Render", "apigee-go-gen", "render", "apiproxy", ...),
                tool("Upload", "apigeecli", "apis", "create", "bundle", "-o", env("PROJECT_ID")),
            )
    """
    out = list(steps)
    if cwd is not None:
        out = [s if s.cwd is not None else replace(s, cwd=cwd) for s in out]
    return out


sequence = seq  # shadowed once a sequence file defines its own sequence()
