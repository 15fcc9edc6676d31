# cli.py
from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Tuple

import click

from gendemo.config import DemoConfig
from gendemo.demo import demo_sequence
from gendemo.errors import MissingConfiguration
from gendemo.gate import check_environment
from gendemo.model import Step
from gendemo.report import build_report, write_report
from gendemo.runner import load_sequence, run_sequence, tool_availability
from gendemo.ui.console import Console, get_console, set_console

BUILTIN_SEQUENCE = "apigee-go-gen demo"


def resolve_sequence(sequence_arg: str | None) -> Tuple[List[Step], str]:
    """
    Resolve the steps to run: the built-in demo, or a sequence file.

    Args:
        sequence_arg: Optional --sequence argument from CLI

    Returns:
        (steps, label used in headers and reports)

    Raises:
        SystemExit: If the sequence file cannot be found or loaded
    """
    console = get_console()

    if not sequence_arg:
        return demo_sequence(), BUILTIN_SEQUENCE

    seq_path = Path(sequence_arg)
    if not seq_path.exists() and seq_path.suffix != ".py":
        seq_path = Path(str(seq_path) + ".py")
    if not seq_path.exists():
        console.print_error(
            "Sequence file not found",
            f"Nothing at {sequence_arg} (also tried {seq_path.name}).",
            suggestion="gendemo run   (without --sequence, for the built-in demo)",
        )
        sys.exit(1)

    try:
        steps = load_sequence(seq_path)
    except Exception as e:
        console.print_error("Failed to load sequence", f"{seq_path}\n{type(e).__name__}: {e}")
        sys.exit(1)

    return steps, seq_path.name


def build_config(workdir: str | None, tool_dir: str | None, extra_required: Tuple[str, ...]) -> DemoConfig:
    config = DemoConfig.from_environ(workdir=workdir, tool_dir=tool_dir)
    if extra_required:
        config = config.with_required(*extra_required)
    return config


@click.group()
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.option("--no-color", is_flag=True, default=False, help="Disable colored output")
@click.pass_context
def cli(ctx, debug, no_color):
    """gendemo: walk through apigee-go-gen, apigeecli and gcloud, one guarded step at a time."""
    console = Console(debug=debug, color=not no_color)
    set_console(console)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


@cli.command()
@click.option("--sequence", "sequence_file", default=None, help="Sequence file path (defaults to the built-in demo)")
@click.option("--dry-run", is_flag=True, default=False, help="Print steps and commands without running anything")
@click.option("--workdir", default=None, help="Directory the tools run in [env: GENDEMO_WORKDIR]")
@click.option("--tool-dir", default=None, help="Directory appended to PATH for the tools [env: GENDEMO_TOOL_DIR]")
@click.option("--require", "extra_required", multiple=True, help="Additional required environment variable (repeatable)")
@click.option("--report", "report_path", default=None, help="Write a JSON run report to this path")
@click.pass_context
def run(ctx, sequence_file, dry_run, workdir, tool_dir, extra_required, report_path):
    """Check the environment, then run every step in order, stopping at the first failure."""
    console = get_console()

    config = build_config(workdir, tool_dir, extra_required)

    # Nothing runs until every required variable is present
    gate = check_environment(config.required, config.environ)
    if not gate.ok:
        console.print_missing_variables(gate.missing)
        sys.exit(1)

    steps, label = resolve_sequence(sequence_file)

    try:
        console.print_run_started(sequence=label, step_count=len(steps))

        started_at = datetime.now(timezone.utc)
        result = run_sequence(steps, config, dry_run=dry_run)
        finished_at = datetime.now(timezone.utc)

        if report_path:
            out = write_report(build_report(label, result, started_at, finished_at), report_path)
            console.print_debug(f"report written to {out}")

        console.print_summary([s.name for s in steps], result)

        if not result.ok:
            sys.exit(1)

    except MissingConfiguration as e:
        console.print_missing_variables(e.missing)
        sys.exit(1)
    except KeyboardInterrupt:
        console.print_info("\nInterrupted by user")
        sys.exit(130)
    except Exception as e:
        console.print_exception(e)
        sys.exit(1)


@cli.command()
@click.option("--sequence", "sequence_file", default=None, help="Sequence file path (defaults to the built-in demo)")
@click.option("--tool-dir", default=None, help="Directory appended to PATH for the tools [env: GENDEMO_TOOL_DIR]")
@click.option("--require", "extra_required", multiple=True, help="Additional required environment variable (repeatable)")
@click.pass_context
def check(ctx, sequence_file, tool_dir, extra_required):
    """Check environment variables and tool availability without running any step."""
    console = get_console()
    config = build_config(None, tool_dir, extra_required)
    failed = False

    gate = check_environment(config.required, config.environ)
    if gate.ok:
        console.print_info(f"Environment: ok ({', '.join(gate.required)})")
    else:
        console.print_missing_variables(gate.missing)
        failed = True

    steps, _label = resolve_sequence(sequence_file)
    tools = tool_availability(steps, config)
    console.print_info("Tools:")
    console.print_tools(tools)
    if any(path is None for path in tools.values()):
        failed = True

    if failed:
        sys.exit(1)


@cli.command(name="list")
@click.option("--sequence", "sequence_file", default=None, help="Sequence file path (defaults to the built-in demo)")
def list_steps(sequence_file):
    """Print the steps of a sequence and the command each one runs."""
    console = get_console()
    steps, label = resolve_sequence(sequence_file)
    console.print_info(f"{label}: {len(steps)} step(s)")
    for index, step in enumerate(steps, start=1):
        console.print_info(f"  {index}. {step.name}")
        console.print_info(f"     {step.display_command()}")


if __name__ == "__main__":
    cli()
