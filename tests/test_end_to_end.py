from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest
from click.testing import CliRunner

from gendemo.cli import cli

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="stub tools are POSIX shell scripts")

STUB = """#!/bin/sh
echo "$(basename "$0") $*" >> "$STUB_LOG"
if [ -n "$STUB_FAIL" ]; then
  case "$*" in
    *"$STUB_FAIL"*) echo "stub failure" >&2; exit 1 ;;
  esac
fi
if [ "$(basename "$0")" = "gcloud" ]; then
  echo "stub-token"
fi
exit 0
"""


@pytest.fixture
def stub_bin(tmp_path: Path) -> Path:
    bin_dir = tmp_path / "tools"
    bin_dir.mkdir()
    for name in ("apigee-go-gen", "apigeecli", "gcloud"):
        path = bin_dir / name
        path.write_text(STUB)
        path.chmod(0o755)
    return bin_dir


def _run(tmp_path: Path, stub_bin: Path, **extra):
    log = tmp_path / "calls.log"
    env = {
        "PROJECT_ID": "demo-project",
        "APIGEE_HOST": "api.example.com",
        "APIGEE_ENV": "dev",
        # tools are only reachable through --tool-dir
        "PATH": os.environ.get("PATH", "/usr/bin:/bin"),
        "STUB_LOG": str(log),
        **extra,
    }
    result = CliRunner().invoke(
        cli,
        ["--no-color", "run", "--workdir", str(tmp_path), "--tool-dir", str(stub_bin)],
        env=env,
    )
    calls = log.read_text().splitlines() if log.exists() else []
    return result, calls


def test_stub_tools_all_succeed(tmp_path, stub_bin):
    result, calls = _run(tmp_path, stub_bin)

    assert result.exit_code == 0, result.output
    assert [c.split()[0] for c in calls] == [
        "apigee-go-gen",
        "apigee-go-gen",
        "apigee-go-gen",
        "apigee-go-gen",
        "gcloud",
        "apigeecli",
        "apigee-go-gen",
    ]
    assert "-t stub-token" in calls[5]
    assert "stub-token" not in result.output


def test_stub_render_openapi_failure(tmp_path, stub_bin):
    result, calls = _run(tmp_path, stub_bin, STUB_FAIL="templates/oas3")

    assert result.exit_code == 1
    assert len(calls) == 3
    assert "templates/oas3" in calls[2]
    assert "STEP FAILED: Render OpenAPI" in result.output
    assert "stub failure" in result.output


def test_stub_tool_without_exec_bit(tmp_path, stub_bin):
    (stub_bin / "apigee-go-gen").chmod(0o644)
    report = tmp_path / "r.json"
    log = tmp_path / "calls.log"

    result = CliRunner().invoke(
        cli,
        ["--no-color", "run", "--workdir", str(tmp_path), "--tool-dir", str(stub_bin), "--report", str(report)],
        env={
            "PROJECT_ID": "demo-project",
            "APIGEE_HOST": "api.example.com",
            "APIGEE_ENV": "dev",
            # only the stub dir, so no other apigee-go-gen can be picked up
            "PATH": str(stub_bin),
            "STUB_LOG": str(log),
        },
    )

    assert result.exit_code == 1
    assert "STEP FAILED: API Proxy to YAML" in result.output
    assert report.exists()
    assert not log.exists()
