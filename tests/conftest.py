from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Dict, List, Optional

import pytest

from gendemo.config import DemoConfig
from gendemo.ui.console import Console, set_console

FULL_ENV = {
    "PROJECT_ID": "demo-project",
    "APIGEE_HOST": "api.example.com",
    "APIGEE_ENV": "dev",
    "PATH": "/usr/bin:/bin",
}


class FakeTools:
    """Stands in for subprocess.run: records every command, fails the ones it is told to."""

    def __init__(self) -> None:
        self.calls: List[List[str]] = []
        self.fail_on: Dict[str, int] = {}
        self.missing: set[str] = set()
        self.not_executable: set[str] = set()
        self.stdout: Dict[str, str] = {"gcloud": "ya29.secret-token\n"}

    def fail(self, marker: str, code: int = 1) -> None:
        self.fail_on[marker] = code

    def tools(self) -> List[str]:
        return [c[0] for c in self.calls]

    def __call__(self, cmd, cwd=None, env=None, text=None, capture_output=None, **kwargs):
        cmd = list(cmd)
        if cmd[0] in self.missing:
            raise FileNotFoundError(2, "No such file or directory", cmd[0])
        if cmd[0] in self.not_executable:
            raise PermissionError(13, "Permission denied", cmd[0])
        self.calls.append(cmd)

        line = " ".join(cmd)
        code = 0
        for marker, rc in self.fail_on.items():
            if marker in line:
                code = rc
        stdout: Optional[str] = self.stdout.get(cmd[0], f"{cmd[0]} ok\n")
        stderr = "boom\n" if code else ""
        return subprocess.CompletedProcess(args=cmd, returncode=code, stdout=stdout, stderr=stderr)


@pytest.fixture(autouse=True)
def plain_console() -> Console:
    console = Console(color=False)
    set_console(console)
    return console


@pytest.fixture
def fake_tools(monkeypatch: pytest.MonkeyPatch) -> FakeTools:
    fake = FakeTools()
    monkeypatch.setattr("gendemo.runner.subprocess.run", fake)
    return fake


@pytest.fixture
def config(tmp_path: Path) -> DemoConfig:
    return DemoConfig.from_environ(FULL_ENV, workdir=tmp_path, tool_dir=tmp_path / "bin")
