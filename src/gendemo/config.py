from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple

from .model import DEFAULT_REQUIRED_VARS

DEFAULT_TOOL_DIR = "~/.apigee-go-gen/bin"
DEFAULT_WORKDIR = "."


@dataclass(frozen=True)
class DemoConfig:
    """
    Everything the gate and the sequencer need, resolved once at startup.

    `environ` is a snapshot: nothing downstream reads os.environ again.
    """
    environ: Dict[str, str] = field(default_factory=dict)
    required: Tuple[str, ...] = DEFAULT_REQUIRED_VARS
    workdir: Path = Path(DEFAULT_WORKDIR)
    tool_dir: Optional[Path] = None

    @classmethod
    def from_environ(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        *,
        required: Optional[Tuple[str, ...]] = None,
        workdir: str | Path | None = None,
        tool_dir: str | Path | None = None,
    ) -> DemoConfig:
        env = dict(os.environ if environ is None else environ)

        workdir = workdir or env.get("GENDEMO_WORKDIR") or DEFAULT_WORKDIR
        tool_dir = tool_dir or env.get("GENDEMO_TOOL_DIR") or DEFAULT_TOOL_DIR

        return cls(
            environ=env,
            required=tuple(required) if required is not None else DEFAULT_REQUIRED_VARS,
            workdir=Path(workdir).expanduser().resolve(),
            tool_dir=Path(tool_dir).expanduser(),
        )

    def step_env(self) -> Dict[str, str]:
        """Environment for child processes: the snapshot plus the tool dir at the end of PATH."""
        env = dict(self.environ)
        if self.tool_dir is not None:
            path = env.get("PATH", "")
            extra = str(self.tool_dir)
            if extra not in path.split(os.pathsep):
                env["PATH"] = f"{path}{os.pathsep}{extra}" if path else extra
        return env

    def with_required(self, *names: str) -> DemoConfig:
        merged = list(self.required)
        for n in names:
            if n not in merged:
                merged.append(n)
        return replace(self, required=tuple(merged))
