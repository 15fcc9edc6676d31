from __future__ import annotations

import json
import re

import pytest
from click.testing import CliRunner

from gendemo.cli import cli

from conftest import FULL_ENV


def _invoke(args, env, tmp_path):
    runner = CliRunner()
    env = {**env, "GENDEMO_WORKDIR": str(tmp_path), "GENDEMO_TOOL_DIR": str(tmp_path / "bin")}
    return runner.invoke(cli, ["--no-color", *args], env=env)


def _without(*names):
    env = dict(FULL_ENV)
    for n in names:
        env[n] = None  # CliRunner removes None-valued variables
    return env


def test_missing_env_names_only_the_unset_variable(fake_tools, tmp_path):
    result = _invoke(["run"], _without("APIGEE_ENV"), tmp_path)

    assert result.exit_code == 1
    assert "ERROR: No APIGEE_ENV variable set. Please set it." in result.output
    assert "No PROJECT_ID" not in result.output
    assert "No APIGEE_HOST" not in result.output
    assert "One or more required environment variables are missing" in result.output
    assert fake_tools.calls == []


def test_missing_env_lists_every_name(fake_tools, tmp_path):
    result = _invoke(["run"], _without("PROJECT_ID", "APIGEE_HOST", "APIGEE_ENV"), tmp_path)

    assert result.exit_code == 1
    for name in ("PROJECT_ID", "APIGEE_HOST", "APIGEE_ENV"):
        assert f"No {name} variable set" in result.output
    assert "---" not in result.output
    assert fake_tools.calls == []


def test_extra_required_variable(fake_tools, tmp_path):
    result = _invoke(["run", "--require", "APIGEE_TOKEN"], _without("APIGEE_TOKEN"), tmp_path)

    assert result.exit_code == 1
    assert "No APIGEE_TOKEN variable set" in result.output
    assert fake_tools.calls == []


def test_render_openapi_failure_scenario(fake_tools, tmp_path):
    fake_tools.fail("templates/oas3")

    result = _invoke(["run"], FULL_ENV, tmp_path)

    assert result.exit_code == 1
    out = result.output
    assert out.index("API Proxy to YAML ---") < out.index("YAML to API Proxy ---") < out.index("Render OpenAPI ---")
    assert "STEP FAILED: Render OpenAPI" in out
    assert "Tool: apigee-go-gen" in out
    for later in ("Render MCP", "Deploy MCP Proxy", "Mock"):
        assert f"{later} ---" not in out
        assert re.search(rf"\. {later} +not run", out)
    assert [c[1] for c in fake_tools.calls] == ["transform", "transform", "render"]
    assert re.search(r"3\. Render OpenAPI +FAILED \(exit 1, apigee-go-gen\)", out)
    assert "Summary (3/6 steps started)" in out


def test_full_run_succeeds(fake_tools, tmp_path):
    result = _invoke(["run"], FULL_ENV, tmp_path)

    assert result.exit_code == 0, result.output
    assert "All required environment variables are set" in result.output
    assert "Demo script finished" in result.output
    assert re.search(r"6\. Mock +ok \(", result.output)
    assert len(fake_tools.calls) == 7


def test_report_is_written(fake_tools, tmp_path):
    report = tmp_path / "reports" / "run.json"
    fake_tools.fail("mock oas", code=4)

    result = _invoke(["run", "--report", str(report)], FULL_ENV, tmp_path)

    assert result.exit_code == 1
    data = json.loads(report.read_text())
    assert data["status"] == "failed"
    assert data["failed_step"] == "Mock"
    assert [s["name"] for s in data["steps"]][-1] == "Mock"
    assert data["steps"][-1]["exit_code"] == 4
    assert "ya29" not in report.read_text()


def test_dry_run_runs_nothing(fake_tools, tmp_path):
    result = _invoke(["run", "--dry-run"], FULL_ENV, tmp_path)

    assert result.exit_code == 0, result.output
    assert fake_tools.calls == []
    assert "$ apigee-go-gen mock oas" in result.output


def test_custom_sequence_file(fake_tools, tmp_path):
    path = tmp_path / "two_sequence.py"
    path.write_text(
        "from gendemo import seq, tool, env\n"
        "def sequence():\n"
        "    return seq(tool('hello', 'echo', env('PROJECT_ID')), tool('bye', 'echo', 'bye'))\n"
    )

    result = _invoke(["run", "--sequence", str(path)], FULL_ENV, tmp_path)

    assert result.exit_code == 0, result.output
    assert fake_tools.calls == [["echo", "demo-project"], ["echo", "bye"]]
    assert "Sequence: two_sequence.py" in result.output


def test_unknown_sequence_file(fake_tools, tmp_path):
    result = _invoke(["run", "--sequence", str(tmp_path / "missing")], FULL_ENV, tmp_path)

    assert result.exit_code == 1
    assert "Sequence file not found" in result.output


def test_list_shows_steps_and_masked_capture(tmp_path):
    result = _invoke(["list"], FULL_ENV, tmp_path)

    assert result.exit_code == 0
    assert "1. API Proxy to YAML" in result.output
    assert "6. Mock" in result.output
    assert "<gcloud auth print-access-token>" in result.output


@pytest.mark.parametrize("missing_env, expect", [((), 1), (("APIGEE_HOST",), 1)])
def test_check_reports_env_and_tools(tmp_path, missing_env, expect):
    result = _invoke(["check"], _without(*missing_env), tmp_path)

    # the real tools are not installed here, so check always fails
    assert result.exit_code == expect
    assert "apigeecli: not found" in result.output
    if missing_env:
        assert "No APIGEE_HOST variable set" in result.output
    else:
        assert "Environment: ok" in result.output


def test_interrupt_exits_130(monkeypatch, tmp_path):
    def interrupted(cmd, **kwargs):
        raise KeyboardInterrupt

    monkeypatch.setattr("gendemo.runner.subprocess.run", interrupted)

    result = _invoke(["run"], FULL_ENV, tmp_path)

    assert result.exit_code == 130
    assert "Interrupted by user" in result.output


def test_non_executable_tool_still_writes_report(fake_tools, tmp_path):
    fake_tools.not_executable.add("apigee-go-gen")
    report = tmp_path / "r.json"

    result = _invoke(["run", "--report", str(report)], FULL_ENV, tmp_path)

    assert result.exit_code == 1
    assert "STEP FAILED: API Proxy to YAML" in result.output
    data = json.loads(report.read_text())
    assert data["failed_step"] == "API Proxy to YAML"
    assert data["steps"][0]["exit_code"] == 126
