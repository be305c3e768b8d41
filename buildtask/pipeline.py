from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from buildtask.build_log import BuildLog
from buildtask.schemas import StageRecord


@dataclass
class Stage:
    """One named step of the task; the action returns True on success."""

    name: str
    action: Callable[[], bool]


@dataclass
class PipelineResult:
    success: bool
    stages: List[StageRecord] = field(default_factory=list)
    failed_stage: Optional[str] = None


def run_stages(stages: Sequence[Stage], log: BuildLog) -> PipelineResult:
    """Run stages in order; the first failure marks every later stage as skipped."""

    records: List[StageRecord] = []
    failed_stage: Optional[str] = None
    for stage in stages:
        if failed_stage is not None:
            records.append(StageRecord(name=stage.name, status="skipped"))
            continue
        try:
            ok = stage.action()
        except Exception as exc:
            log.error(f"Stage '{stage.name}' raised {exc.__class__.__name__}: {exc}")
            records.append(StageRecord(name=stage.name, status="failed", detail=exc.__class__.__name__))
            failed_stage = stage.name
            continue
        # Anything but an explicit True counts as failure.
        if ok is True:
            records.append(StageRecord(name=stage.name, status="success"))
        else:
            records.append(StageRecord(name=stage.name, status="failed"))
            failed_stage = stage.name
    return PipelineResult(success=failed_stage is None, stages=records, failed_stage=failed_stage)
