"""단계 대상/완료 판정·검증·필터 단위 테스트."""
import pytest

from riskflow.core.exceptions import ValidationError
from riskflow.models.schemas import ChecklistRecord, Stage, WorkflowState
from riskflow.services import workflow_gate as gate


def rec(**values) -> ChecklistRecord:
    values.setdefault("code", "X")
    return ChecklistRecord(**values)


def test_eligibility_chain() -> None:
    good = rec(result="양호", impact="4", likelihood="4")
    assert not gate.eligible_for_risk_evaluation(good)
    assert not gate.eligible_for_treatment(good)

    vulnerable = rec(result="취약")
    assert gate.eligible_for_risk_evaluation(vulnerable)
    assert not gate.eligible_for_treatment(vulnerable)

    half_scored = rec(result="취약", impact="4")
    assert not gate.eligible_for_treatment(half_scored)

    scored = rec(result="취약", impact="4", likelihood="3")
    assert gate.eligible_for_treatment(scored)
    assert not gate.eligible_for_residual(scored)

    treated = rec(result="취약", impact="4", likelihood="3", treatment_status="Done")
    assert gate.eligible_for_residual(treated)

    in_progress = rec(result="취약", impact="4", likelihood="3", treatment_status="InProgress")
    assert not gate.eligible_for_residual(in_progress)


def test_residual_status_alone_does_not_make_eligible() -> None:
    assert not gate.eligible_for_residual(rec(residual_status="Done", treatment_status="Done"))


@pytest.mark.parametrize("values, state", [
    ({}, WorkflowState.UNASSESSED),
    ({"status": "운영"}, WorkflowState.IMPLEMENTED),
    ({"status": "운영", "result": "양호"}, WorkflowState.GOOD),
    ({"result": "취약"}, WorkflowState.VULNERABLE),
    ({"result": "취약", "impact": "2", "likelihood": "2"}, WorkflowState.RISK_EVALUATED),
    ({"result": "취약", "impact": "2", "likelihood": "2", "treatment_status": "Done"}, WorkflowState.TREATED),
    ({"result": "취약", "impact": "2", "likelihood": "2", "treatment_status": "Done",
      "residual_status": "Done"}, WorkflowState.RESIDUAL_EVALUATED),
])
def test_derive_state(values, state) -> None:
    assert gate.derive_state(rec(**values)) == state


def test_derive_state_accepts_mappings() -> None:
    assert gate.derive_state({"code": "X", "result": "취약"}) == WorkflowState.VULNERABLE


def test_accept_requires_reason() -> None:
    with pytest.raises(ValidationError) as exc:
        gate.validate_accept_reason({"treatment_strategy": "Accept", "accept_reason": "  "})
    assert exc.value.field == "accept_reason"
    gate.validate_accept_reason({"treatment_strategy": "Accept", "accept_reason": "비용 대비 효과 낮음"})
    gate.validate_accept_reason({"treatment_strategy": "Mitigate"})


def test_validate_fields() -> None:
    gate.validate_fields({"impact": "", "likelihood": "3"}, ["impact", "likelihood"], 5)
    with pytest.raises(ValidationError):
        gate.validate_fields({"impact": "4"}, ["impact"], 3)
    with pytest.raises(ValidationError):
        gate.validate_fields({"result": "보통"}, ["result"], 5)
    with pytest.raises(ValidationError):
        gate.validate_fields({"treatment_status": "Finished"}, ["treatment_status"], 5)
    gate.validate_fields({"residual_status": "Not Reduced"}, ["residual_status"], 5)


def test_residual_stage_requires_levels() -> None:
    residual = gate.get_stage(Stage.RESIDUAL)
    with pytest.raises(ValidationError) as exc:
        residual.validate({"residual_impact": "2", "residual_likelihood": ""}, 5)
    assert exc.value.field == "residual_likelihood"
    residual.validate({"residual_impact": "2", "residual_likelihood": "1"}, 5)


def test_stage_definitions() -> None:
    assert gate.get_stage("treatment").completion == {"treatment_status": "Done"}
    assert gate.get_stage(Stage.RESIDUAL).completion == {"residual_status": "Done"}
    assert gate.get_stage("risk_evaluation").editable_fields == ("impact", "likelihood")
    with pytest.raises(ValueError):
        gate.get_stage("approval")


def test_filter_and_group() -> None:
    records = [
        rec(code="1", domain="A", itemCode="계정 관리"),
        rec(code="2", domain="B", itemCode="로그 관리"),
        rec(code="3", domain="", itemCode="백업"),
        rec(code="4", domain="A", itemCode="접근 통제"),
    ]
    assert [r.code for r in gate.filter_records(records, domain="A")] == ["1", "4"]
    assert [r.code for r in gate.filter_records(records, query="로그")] == ["2"]
    assert gate.list_domains(records) == ["A", "B"]
    groups = gate.group_by_domain(records, lambda r: r.domain)
    assert [d for d, _ in groups] == ["A", "B", "미분류"]
    assert [r.code for r in groups[0][1]] == ["1", "4"]


def test_paginate_clamps_page() -> None:
    items = list(range(45))
    page, current, count = gate.paginate(items, 3, 20)
    assert page == list(range(40, 45)) and current == 3 and count == 3
    _, current, _ = gate.paginate(items, 99, 20)
    assert current == 3
    assert gate.paginate([], 1, 20) == ([], 1, 1)
