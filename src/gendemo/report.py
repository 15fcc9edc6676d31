# report.py
from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from .model import SequenceResult

# -------------------- Schemas --------------------

class StepReport(BaseModel):
    name: str
    tool: str
    command: str          # captured secrets are already masked here
    exit_code: int
    status: str           # ok|failed|dry-run
    duration_s: float = 0.0

class RunReport(BaseModel):
    sequence: str
    status: str           # ok|failed
    started_at: datetime
    finished_at: datetime
    failed_step: Optional[str] = None
    dry_run: bool = False
    steps: list[StepReport] = Field(default_factory=list)


def build_report(
    sequence: str,
    result: SequenceResult,
    started_at: datetime,
    finished_at: datetime,
) -> RunReport:
    statuses = result.statuses()
    return RunReport(
        sequence=sequence,
        status="ok" if result.ok else "failed",
        started_at=started_at,
        finished_at=finished_at,
        failed_step=result.failed_step,
        dry_run=result.dry_run,
        steps=[
            StepReport(
                name=r.step,
                tool=r.tool,
                command=r.command,
                exit_code=r.exit_code,
                status=statuses[r.step],
                duration_s=round(r.duration, 3),
            )
            for r in result.results
        ],
    )


def write_report(report: RunReport, path: str | Path) -> Path:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(report.model_dump_json(indent=2) + "\n", encoding="utf-8")
    return out
