"""
Checklist 시트 컬럼 스키마와 위험평가 단계 정의.

- 정규 컬럼명(canonical)과 레거시 별칭을 한 곳에서 매핑 (result ↔ vulnResult 등).
- 결과값(양호/취약) 표기 정규화 규칙.
- 위저드 단계(통제 항목 관리 → … → 승인 및 보고) 제목/설명.
- CSV 내보내기 컬럼.
"""
from typing import Dict, List, Tuple

SHEET_KEY_FIELD = "code"  # PK. 모든 갱신은 code 기준

# 분류(읽기 전용) 컬럼
CLASSIFICATION_FIELDS: List[str] = ["type", "area", "domain", "code", "itemCode"]

# 단계별 편집 컬럼
IMPLEMENTATION_FIELDS: List[str] = ["status"]
VULNERABILITY_FIELDS: List[str] = ["result", "result_detail"]
RISK_EVALUATION_FIELDS: List[str] = ["impact", "likelihood"]
TREATMENT_FIELDS: List[str] = [
    "treatment_strategy",
    "treatment_plan",
    "treatment_owner",
    "treatment_due_date",
    "treatment_status",
    "accept_reason",
]
RESIDUAL_FIELDS: List[str] = [
    "residual_impact",
    "residual_likelihood",
    "residual_detail",
    "residual_status",
]

EDITABLE_FIELDS: List[str] = (
    IMPLEMENTATION_FIELDS
    + VULNERABILITY_FIELDS
    + RISK_EVALUATION_FIELDS
    + TREATMENT_FIELDS
    + RESIDUAL_FIELDS
)

CANONICAL_FIELDS: List[str] = CLASSIFICATION_FIELDS + EDITABLE_FIELDS

# 정규 컬럼 → 레거시 별칭 (정규명 먼저, 비어있지 않은 첫 값 사용)
FIELD_ALIASES: Dict[str, List[str]] = {
    "itemCode": ["item"],
    "result": ["vuln_result", "vulnResult", "finding", "assessment"],
    "result_detail": ["resultDetail", "reason"],
}

# 공백 제거하지 않는 자유 서술 컬럼 (개행·들여쓰기 보존)
UNTRIMMED_FIELDS = frozenset({"treatment_plan", "accept_reason", "residual_detail"})

DEFAULT_FIELD_VALUES: Dict[str, str] = {"type": "ISMS"}

# 결과값 표기 정규화 (소문자 비교)
RESULT_GOOD = "양호"
RESULT_VULNERABLE = "취약"
RESULT_SYNONYMS: Dict[str, str] = {
    "양호": RESULT_GOOD,
    "good": RESULT_GOOD,
    "취약": RESULT_VULNERABLE,
    "vuln": RESULT_VULNERABLE,
    "vulnerable": RESULT_VULNERABLE,
}

UNCATEGORIZED_DOMAIN = "미분류"

# 검색 대상 컬럼
SEARCH_FIELDS: List[str] = ["type", "area", "domain", "code", "itemCode", "status", "result"]

# 위저드 단계 (key, 제목, 설명)
WORKFLOW_STEPS: List[Dict[str, str]] = [
    {"key": "checklist", "title": "통제 항목 관리", "description": "통제 기준 및 항목 정의/관리"},
    {"key": "implementation", "title": "통제 이행 점검", "description": "통제 항목별 운영 현황 기록"},
    {"key": "vulnerability", "title": "취약 도출", "description": "이행 미흡 항목 기반 취약 식별"},
    {"key": "risk_evaluation", "title": "위험 평가", "description": "위험도 산정 및 허용 기준 비교"},
    {"key": "treatment", "title": "위험 처리", "description": "위험 대응 전략 수립 및 조치"},
    {"key": "residual", "title": "잔여 위험 평가", "description": "조치 후 잔여 위험 재평가"},
    {"key": "approval", "title": "승인 및 보고", "description": "최종 승인 및 보고서 출력"},
]

# CSV 내보내기 컬럼 (key, 헤더)
BASIC_EXPORT_COLUMNS: List[Tuple[str, str]] = [
    ("type", "유형"),
    ("area", "영역"),
    ("domain", "분야"),
    ("code", "코드"),
    ("itemCode", "항목"),
]

FULL_EXPORT_COLUMNS: List[Tuple[str, str]] = BASIC_EXPORT_COLUMNS + [
    ("status", "현황"),
    ("result", "결과"),
    ("result_detail", "사유"),
    ("impact", "영향도"),
    ("likelihood", "발생가능성"),
    ("treatment_strategy", "처리 전략"),
    ("treatment_plan", "처리 방안"),
    ("treatment_owner", "책임자"),
    ("treatment_due_date", "목표 완료일"),
    ("treatment_status", "처리 상태"),
    ("accept_reason", "수용 사유"),
    ("residual_impact", "잔여 영향도"),
    ("residual_likelihood", "잔여 발생가능성"),
    ("residual_detail", "잔여 위험 근거"),
    ("residual_status", "잔여 위험 상태"),
]
