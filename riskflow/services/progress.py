"""
진행률 집계 (ProgressAggregator).

- 모수(total)는 항상 필터/페이지 적용 전 전체 레코드 기준 (단계 대상 조건이 있으면 전체 중 대상 건수).
- pct = round-half-up(done / total × 100), total=0 이면 0.
"""
import math
from typing import Callable, Dict, Iterable, Optional, Sequence

from riskflow.models.schemas import ChecklistRecord, DashboardStats, Grade, Stage, StageProgress
from riskflow.services import workflow_gate as gate
from riskflow.services.score_engine import score_view

Predicate = Callable[[ChecklistRecord], bool]


def percent(done: int, total: int) -> int:
    if not total:
        return 0
    return int(math.floor(done * 100 / total + 0.5))


def stage_progress(
    records: Iterable[ChecklistRecord],
    done_predicate: Predicate,
    eligible: Optional[Predicate] = None,
) -> StageProgress:
    base = [r for r in records if eligible is None or eligible(r)]
    total = len(base)
    done = sum(1 for r in base if done_predicate(r))
    return StageProgress(done=done, total=total, pct=percent(done, total))


def progress_for_stage(records: Sequence[ChecklistRecord], stage) -> StageProgress:
    definition = gate.get_stage(stage)
    return stage_progress(records, definition.is_done, definition.eligible)


def all_progress(records: Sequence[ChecklistRecord]) -> Dict[Stage, StageProgress]:
    return {stage: progress_for_stage(records, stage) for stage in gate.STAGES}


def dashboard_stats(records: Sequence[ChecklistRecord], bound: int, threshold: int) -> DashboardStats:
    """Checklist 시트 전체 기준 KPI."""
    progress = all_progress(records)

    grade_counts = {g.value: 0 for g in Grade}
    over_threshold = 0
    for r in records:
        if not gate.eligible_for_treatment(r):
            continue
        view = score_view(r.impact, r.likelihood, bound, threshold)
        if view is None:
            continue
        grade_counts[view.grade.value] += 1
        if not view.acceptable:
            over_threshold += 1

    return DashboardStats(
        total_controls=len(records),
        implementation=progress[Stage.IMPLEMENTATION],
        vulnerability=progress[Stage.VULNERABILITY],
        risk_evaluation=progress[Stage.RISK_EVALUATION],
        treatment=progress[Stage.TREATMENT],
        residual=progress[Stage.RESIDUAL],
        impact_count=sum(1 for r in records if r.impact.strip()),
        vulnerable_count=sum(1 for r in records if gate.is_vulnerable(r)),
        grade_counts=grade_counts,
        over_threshold_count=over_threshold,
        matrix_bound=bound,
        accept_threshold=threshold,
    )
