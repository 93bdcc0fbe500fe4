"""
WorkflowGate: 레코드 필드값만으로 단계 대상 여부·완료 여부·상태를 계산.

- 별도의 "현재 상태" 컬럼 없음. 항상 데이터로부터 재계산 (순서가 뒤바뀐 입력에도 멱등).
- 단계 화면은 StageDefinition 하나로 파라미터화:
  대상 조건(eligible), 완료 조건(is_done), 편집 컬럼, 저장 시 완료 표시(completion), 검증(validate).
"""
import math
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, TypeVar

from riskflow.constants.checklist_fields import (
    IMPLEMENTATION_FIELDS,
    RESIDUAL_FIELDS,
    RESULT_GOOD,
    RESULT_VULNERABLE,
    RISK_EVALUATION_FIELDS,
    SEARCH_FIELDS,
    TREATMENT_FIELDS,
    UNCATEGORIZED_DOMAIN,
    VULNERABILITY_FIELDS,
)
from riskflow.core.exceptions import ValidationError
from riskflow.models.schemas import (
    ChecklistRecord,
    ResidualStatus,
    Stage,
    TreatmentStatus,
    TreatmentStrategy,
    WorkflowState,
)
from riskflow.services.record_mapper import normalize_result
from riskflow.services.score_engine import parse_level

T = TypeVar("T")

# 검증 대상 뷰: 필드명 → 값 (드래프트가 덮어쓰인 값)
FieldView = Mapping[str, str]
Validator = Callable[[FieldView, int], None]


def _val(record, name: str) -> str:
    if isinstance(record, Mapping):
        return str(record.get(name) or "").strip()
    return str(getattr(record, name, "") or "").strip()


# ==================== 대상/완료 조건 ====================

def is_implemented(record) -> bool:
    return _val(record, "status") != ""


def is_vulnerability_assessed(record) -> bool:
    return _val(record, "result") in (RESULT_GOOD, RESULT_VULNERABLE)


def is_vulnerable(record) -> bool:
    return _val(record, "result") == RESULT_VULNERABLE


def is_risk_evaluated(record) -> bool:
    return _val(record, "impact") != "" and _val(record, "likelihood") != ""


def is_treatment_done(record) -> bool:
    return _val(record, "treatment_status") == TreatmentStatus.DONE.value


def is_residual_done(record) -> bool:
    return _val(record, "residual_status") == ResidualStatus.DONE.value


def eligible_for_vulnerability(record) -> bool:
    return True


def eligible_for_risk_evaluation(record) -> bool:
    return is_vulnerable(record)


def eligible_for_treatment(record) -> bool:
    return is_vulnerable(record) and is_risk_evaluated(record)


def eligible_for_residual(record) -> bool:
    return eligible_for_treatment(record) and is_treatment_done(record)


def derive_state(record) -> WorkflowState:
    """가장 멀리 진행된 상태."""
    if eligible_for_residual(record):
        return WorkflowState.RESIDUAL_EVALUATED if is_residual_done(record) else WorkflowState.TREATED
    if eligible_for_treatment(record):
        return WorkflowState.RISK_EVALUATED
    if is_vulnerable(record):
        return WorkflowState.VULNERABLE
    if _val(record, "result") == RESULT_GOOD:
        return WorkflowState.GOOD
    if is_implemented(record):
        return WorkflowState.IMPLEMENTED
    return WorkflowState.UNASSESSED


# ==================== 검증 ====================

def _check_enum(view: FieldView, name: str, enum_cls) -> None:
    value = str(view.get(name) or "").strip()
    if value and value not in {m.value for m in enum_cls}:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(name, f"{name} 값은 다음 중 하나여야 합니다: {allowed}")


def _check_optional_level(view: FieldView, name: str, bound: int) -> None:
    value = str(view.get(name) or "").strip()
    if value:
        parse_level(value, bound, name)


def validate_accept_reason(view: FieldView) -> None:
    """수용(Accept) 전략은 수용 사유 필수."""
    strategy = str(view.get("treatment_strategy") or "").strip()
    if strategy == TreatmentStrategy.ACCEPT.value and not str(view.get("accept_reason") or "").strip():
        raise ValidationError("accept_reason", "수용(Accept) 선택 시 수용 사유(accept_reason)는 필수입니다.")


def validate_fields(view: FieldView, fields: Iterable[str], bound: int) -> None:
    """필드 단위 형식 검증 (단계와 무관하게 항상 적용)."""
    for name in fields:
        if name == "result":
            if normalize_result(view.get(name)) not in ("", RESULT_GOOD, RESULT_VULNERABLE):
                raise ValidationError(name, f"결과는 '{RESULT_GOOD}' 또는 '{RESULT_VULNERABLE}'이어야 합니다.")
        elif name in ("impact", "likelihood", "residual_impact", "residual_likelihood"):
            _check_optional_level(view, name, bound)
        elif name == "treatment_strategy":
            _check_enum(view, name, TreatmentStrategy)
        elif name == "treatment_status":
            _check_enum(view, name, TreatmentStatus)
        elif name == "residual_status":
            _check_enum(view, name, ResidualStatus)


def _validate_residual(view: FieldView, bound: int) -> None:
    for name in ("residual_impact", "residual_likelihood"):
        if not str(view.get(name) or "").strip():
            raise ValidationError(name, "잔여 Impact / 잔여 Likelihood는 필수입니다.")
        parse_level(view.get(name), bound, name)


def _validate_treatment(view: FieldView, bound: int) -> None:
    validate_accept_reason(view)


def _no_extra_rules(view: FieldView, bound: int) -> None:
    return None


# ==================== 단계 정의 ====================

@dataclass(frozen=True)
class StageDefinition:
    stage: Stage
    title: str
    description: str
    eligible: Callable[[object], bool]
    is_done: Callable[[object], bool]
    editable_fields: Tuple[str, ...]
    completion: Dict[str, str] = field(default_factory=dict)
    validate: Validator = _no_extra_rules


STAGES: Dict[Stage, StageDefinition] = {
    Stage.IMPLEMENTATION: StageDefinition(
        stage=Stage.IMPLEMENTATION,
        title="통제 이행 점검",
        description="통제 항목별 운영 현황(status) 기록",
        eligible=lambda r: True,
        is_done=is_implemented,
        editable_fields=tuple(IMPLEMENTATION_FIELDS),
    ),
    Stage.VULNERABILITY: StageDefinition(
        stage=Stage.VULNERABILITY,
        title="취약 도출",
        description="현황을 근거로 결과(양호/취약) 확정",
        eligible=eligible_for_vulnerability,
        is_done=is_vulnerability_assessed,
        editable_fields=tuple(VULNERABILITY_FIELDS),
    ),
    Stage.RISK_EVALUATION: StageDefinition(
        stage=Stage.RISK_EVALUATION,
        title="위험 평가",
        description="취약 항목의 Impact/Likelihood 산정",
        eligible=eligible_for_risk_evaluation,
        is_done=is_risk_evaluated,
        editable_fields=tuple(RISK_EVALUATION_FIELDS),
    ),
    Stage.TREATMENT: StageDefinition(
        stage=Stage.TREATMENT,
        title="위험 처리",
        description="처리 전략 수립 (저장=완료)",
        eligible=eligible_for_treatment,
        is_done=is_treatment_done,
        editable_fields=tuple(TREATMENT_FIELDS),
        completion={"treatment_status": TreatmentStatus.DONE.value},
        validate=_validate_treatment,
    ),
    Stage.RESIDUAL: StageDefinition(
        stage=Stage.RESIDUAL,
        title="잔여 위험 평가",
        description="조치 후 잔여 Impact/Likelihood 기록 (저장=완료)",
        eligible=eligible_for_residual,
        is_done=is_residual_done,
        editable_fields=tuple(RESIDUAL_FIELDS),
        completion={"residual_status": ResidualStatus.DONE.value},
        validate=_validate_residual,
    ),
}


def get_stage(stage) -> StageDefinition:
    """Stage 또는 문자열 → StageDefinition. 없으면 KeyError."""
    return STAGES[Stage(stage)]


def eligible_stages(record) -> List[Stage]:
    return [s.stage for s in STAGES.values() if s.eligible(record)]


# ==================== 화면용 필터/그룹/페이지 ====================

def filter_records(
    records: Iterable[ChecklistRecord],
    domain: Optional[str] = None,
    query: Optional[str] = None,
) -> List[ChecklistRecord]:
    """분야(domain) 일치 + 검색어(유형/영역/분야/코드/항목/현황/결과) 부분 일치."""
    wanted_domain = (domain or "").strip()
    needle = (query or "").strip().lower()
    out = []
    for r in records:
        if wanted_domain and r.domain.strip() != wanted_domain:
            continue
        if needle:
            haystack = " ".join(_val(r, f) for f in SEARCH_FIELDS).lower()
            if needle not in haystack:
                continue
        out.append(r)
    return out


def list_domains(records: Iterable[ChecklistRecord]) -> List[str]:
    seen: List[str] = []
    for r in records:
        d = r.domain.strip()
        if d and d not in seen:
            seen.append(d)
    return seen


def group_by_domain(items: Sequence[T], domain_of: Callable[[T], str]) -> List[Tuple[str, List[T]]]:
    """분야별 그룹 (처음 등장한 순서 유지, 빈 분야는 '미분류')."""
    groups: Dict[str, List[T]] = {}
    for item in items:
        key = (domain_of(item) or "").strip() or UNCATEGORIZED_DOMAIN
        groups.setdefault(key, []).append(item)
    return list(groups.items())


def paginate(items: Sequence[T], page: int, page_size: int) -> Tuple[List[T], int, int]:
    """(현재 페이지 항목, 보정된 page, page_count). page는 [1, page_count]로 clamp."""
    size = max(1, page_size)
    page_count = max(1, math.ceil(len(items) / size))
    current = min(max(1, page), page_count)
    start = (current - 1) * size
    return list(items[start:start + size]), current, page_count
