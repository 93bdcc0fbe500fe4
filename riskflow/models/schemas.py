"""Pydantic models for checklist records, workflow views and API payloads."""
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Dict
from datetime import datetime
from enum import Enum


class VulnResult(str, Enum):
    """취약 도출 결과."""
    GOOD = "양호"
    VULNERABLE = "취약"


class TreatmentStrategy(str, Enum):
    """위험 처리 전략."""
    MITIGATE = "Mitigate"
    TRANSFER = "Transfer"
    AVOID = "Avoid"
    ACCEPT = "Accept"


class TreatmentStatus(str, Enum):
    """위험 처리 상태."""
    PLANNED = "Planned"
    IN_PROGRESS = "InProgress"
    DONE = "Done"
    ON_HOLD = "OnHold"


class ResidualStatus(str, Enum):
    """잔여 위험 평가 상태."""
    PENDING = "Pending"
    REDUCED = "Reduced"
    ACCEPTED = "Accepted"
    NOT_REDUCED = "Not Reduced"
    DONE = "Done"


class Grade(str, Enum):
    """Qualitative risk grade, ordered Low < Medium < High < VeryHigh."""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    VERY_HIGH = "VeryHigh"

    @property
    def code(self) -> str:
        return _GRADE_CODES[self]

    @property
    def label(self) -> str:
        return _GRADE_LABELS[self]

    @property
    def rank(self) -> int:
        return _GRADE_ORDER.index(self)


_GRADE_ORDER = [Grade.LOW, Grade.MEDIUM, Grade.HIGH, Grade.VERY_HIGH]
_GRADE_CODES = {Grade.LOW: "L", Grade.MEDIUM: "M", Grade.HIGH: "H", Grade.VERY_HIGH: "VH"}
_GRADE_LABELS = {Grade.LOW: "Low", Grade.MEDIUM: "Medium", Grade.HIGH: "High", Grade.VERY_HIGH: "Very High"}


class Stage(str, Enum):
    """Editable workflow stages."""
    IMPLEMENTATION = "implementation"
    VULNERABILITY = "vulnerability"
    RISK_EVALUATION = "risk_evaluation"
    TREATMENT = "treatment"
    RESIDUAL = "residual"


class WorkflowState(str, Enum):
    """Derived per-record state. Never persisted."""
    UNASSESSED = "Unassessed"
    IMPLEMENTED = "Implemented"
    GOOD = "Good"
    VULNERABLE = "Vulnerable"
    RISK_EVALUATED = "RiskEvaluated"
    TREATED = "Treated"
    RESIDUAL_EVALUATED = "ResidualEvaluated"


# ==================== Record ====================

class ChecklistRecord(BaseModel):
    """Checklist 시트 1행 (통제 항목). code가 PK."""
    model_config = ConfigDict(frozen=True)

    type: str = ""
    area: str = ""
    domain: str = ""
    code: str
    itemCode: str = ""

    status: str = ""

    result: str = ""
    result_detail: str = ""

    impact: str = ""
    likelihood: str = ""

    treatment_strategy: str = ""
    treatment_plan: str = ""
    treatment_owner: str = ""
    treatment_due_date: str = ""
    treatment_status: str = ""
    accept_reason: str = ""

    residual_impact: str = ""
    residual_likelihood: str = ""
    residual_detail: str = ""
    residual_status: str = ""


# ==================== Scoring ====================

class StageProgress(BaseModel):
    """단계 진행률. total은 항상 전체(필터 전) 대상 건수."""
    done: int = 0
    total: int = 0
    pct: int = 0


class ScoreView(BaseModel):
    """Impact × Likelihood 점수와 등급."""
    impact: int
    likelihood: int
    score: int
    grade: Grade
    grade_code: str
    grade_label: str
    acceptable: bool


class ScorePreview(BaseModel):
    """점수·잔여 위험·권고 전략 미리보기."""
    matrix_bound: int
    accept_threshold: int
    base: ScoreView
    recommended_strategy: TreatmentStrategy
    strategy: TreatmentStrategy
    residual: ScoreView


# ==================== Views ====================

class StepInfo(BaseModel):
    key: str
    title: str
    description: str


class RecordRow(BaseModel):
    """화면용 1행: 드래프트가 덮어쓰인 값 + 파생 정보."""
    record: ChecklistRecord
    draft: Dict[str, str] = Field(default_factory=dict)
    state: WorkflowState
    done: bool = False
    committing: bool = False
    score: Optional[ScoreView] = None
    residual_score: Optional[ScoreView] = None
    recommended_strategy: Optional[TreatmentStrategy] = None


class DomainGroup(BaseModel):
    domain: str
    items: List[RecordRow] = Field(default_factory=list)


class RecordListResponse(BaseModel):
    items: List[RecordRow] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = 20
    page_count: int = 1
    domains: List[str] = Field(default_factory=list)


class StageViewResponse(BaseModel):
    """단계 화면: 필터/페이지 적용된 행 + 전체 기준 진행률."""
    stage: Stage
    title: str
    editable_fields: List[str]
    progress: StageProgress
    groups: List[DomainGroup] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = 20
    page_count: int = 1


class RecordDetail(BaseModel):
    committed: ChecklistRecord
    draft: Dict[str, str] = Field(default_factory=dict)
    view: ChecklistRecord
    state: WorkflowState
    committing: bool = False
    score: Optional[ScoreView] = None
    eligible_stages: List[Stage] = Field(default_factory=list)


class DraftUpdateRequest(BaseModel):
    fields: Dict[str, str] = Field(..., description="수정할 컬럼 → 값", min_length=1)


class DraftView(BaseModel):
    code: str
    draft: Dict[str, str] = Field(default_factory=dict)
    view: ChecklistRecord


class CommitResponse(BaseModel):
    code: str
    stage: Optional[Stage] = None
    committed_fields: Dict[str, str] = Field(default_factory=dict)
    record: ChecklistRecord
    reloaded: bool = False


class ReloadResponse(BaseModel):
    count: int
    source: str
    loaded_at: Optional[datetime] = None


class DashboardStats(BaseModel):
    """대시보드 KPI (Checklist 시트 전체 기준)."""
    total_controls: int = 0
    implementation: StageProgress
    vulnerability: StageProgress
    risk_evaluation: StageProgress
    treatment: StageProgress
    residual: StageProgress
    impact_count: int = 0
    vulnerable_count: int = 0
    grade_counts: Dict[str, int] = Field(default_factory=dict)
    over_threshold_count: int = 0
    matrix_bound: int = 5
    accept_threshold: int = 7


# ==================== Approval ====================

class ApprovalRequest(BaseModel):
    approver: str = Field(..., min_length=1, description="승인자")
    comment: Optional[str] = None


class ApprovalRecord(BaseModel):
    approval_id: str
    approver: str
    comment: Optional[str] = None
    approved_codes: List[str] = Field(default_factory=list)
    approved_at: datetime


class ApprovalSummary(BaseModel):
    eligible: int = 0
    residual_done: int = 0
    ready: bool = False
    pending_codes: List[str] = Field(default_factory=list)
    approvals: List[ApprovalRecord] = Field(default_factory=list)
