"""진행률·대시보드 집계 단위 테스트."""
from riskflow.models.schemas import ChecklistRecord, Stage
from riskflow.services.progress import all_progress, dashboard_stats, percent, progress_for_stage
from riskflow.services.workflow_gate import filter_records


def _records():
    records = []
    for i in range(20):
        domain = "접근통제" if i < 5 else "운영관리"
        values = {"code": f"C{i:02d}", "domain": domain}
        if i < 12:
            values["status"] = "운영"
        if i < 8:
            values["result"] = "취약" if i % 2 == 0 else "양호"
        records.append(ChecklistRecord(**values))
    return records


def test_percent_rounds_half_up() -> None:
    assert percent(1, 8) == 13  # 12.5
    assert percent(1, 3) == 33
    assert percent(2, 3) == 67
    assert percent(0, 0) == 0
    assert percent(5, 5) == 100


def test_total_ignores_filters() -> None:
    records = _records()
    visible = filter_records(records, domain="접근통제")
    assert len(visible) == 5

    progress = progress_for_stage(records, Stage.IMPLEMENTATION)
    assert progress.total == 20
    assert progress.done == 12
    assert progress.pct == 60


def test_stage_totals_follow_eligibility() -> None:
    progress = all_progress(_records())
    assert progress[Stage.VULNERABILITY].total == 20
    assert progress[Stage.VULNERABILITY].done == 8
    assert progress[Stage.RISK_EVALUATION].total == 4
    assert progress[Stage.RISK_EVALUATION].done == 0
    assert progress[Stage.TREATMENT].total == 0
    assert progress[Stage.TREATMENT].pct == 0


def test_dashboard_counts_grades() -> None:
    records = [
        ChecklistRecord(code="A", result="취약", impact="5", likelihood="4"),
        ChecklistRecord(code="B", result="취약", impact="2", likelihood="3"),
        ChecklistRecord(code="C", result="취약", impact="4"),
        ChecklistRecord(code="D", result="양호", impact="5", likelihood="5"),
    ]
    stats = dashboard_stats(records, bound=5, threshold=7)
    assert stats.total_controls == 4
    assert stats.vulnerable_count == 3
    assert stats.impact_count == 4
    assert stats.grade_counts == {"Low": 1, "Medium": 0, "High": 0, "VeryHigh": 1}
    assert stats.over_threshold_count == 1
    assert stats.risk_evaluation.total == 3
    assert stats.risk_evaluation.done == 2


def test_treatment_total_ignores_domain_filter() -> None:
    records = [
        ChecklistRecord(code=f"T{i:02d}", domain="접근통제" if i < 5 else "운영관리",
                        result="취약", impact="3", likelihood="3",
                        treatment_status="Done" if i % 4 == 0 else "Planned")
        for i in range(20)
    ]
    assert len(filter_records(records, domain="접근통제")) == 5
    progress = progress_for_stage(records, Stage.TREATMENT)
    assert progress.total == 20
    assert progress.done == 5
    assert progress.pct == 25
