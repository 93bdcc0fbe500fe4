"""Risk scoring: score = Impact × Likelihood, 4단계 등급, 처리 전략별 잔여 위험."""
from typing import NamedTuple, Optional, Union

from riskflow.core.exceptions import ValidationError
from riskflow.models.schemas import Grade, ScoreView, TreatmentStrategy

MATRIX_BOUNDS = {"3x3": 3, "5x5": 5}
DEFAULT_BOUND = 5

# 등급 기준은 매트릭스 크기와 무관한 고정값 (3x3은 최대 9점이라 High 이상 불가)
GRADE_THRESHOLDS = [
    (20, Grade.VERY_HIGH),
    (15, Grade.HIGH),
    (8, Grade.MEDIUM),
]

# 처리 전략별 (ΔImpact, ΔLikelihood)
STRATEGY_DELTAS = {
    TreatmentStrategy.MITIGATE: (-1, -1),
    TreatmentStrategy.TRANSFER: (0, -1),
    TreatmentStrategy.AVOID: (-2, 0),
    TreatmentStrategy.ACCEPT: (0, 0),
}

RECOMMEND_MITIGATE_FROM = 9


class RiskLevels(NamedTuple):
    impact: int
    likelihood: int


def matrix_bound(matrix: str) -> int:
    """'3x3' → 3, 그 외 5."""
    return MATRIX_BOUNDS.get(str(matrix or "").strip().lower(), DEFAULT_BOUND)


def compute_score(impact: int, likelihood: int) -> int:
    """Inputs must already be validated to [1, bound]."""
    return impact * likelihood


def grade_from_score(score: int) -> Grade:
    for threshold, grade in GRADE_THRESHOLDS:
        if score >= threshold:
            return grade
    return Grade.LOW


def to_strategy(value: Union[str, TreatmentStrategy, None]) -> Optional[TreatmentStrategy]:
    """문자열 → TreatmentStrategy. 빈 값/미정의 값은 None."""
    if isinstance(value, TreatmentStrategy):
        return value
    try:
        return TreatmentStrategy(str(value or "").strip())
    except ValueError:
        return None


def derive_residual(
    base_impact: int,
    base_likelihood: int,
    strategy: Union[str, TreatmentStrategy, None],
    bound: int = DEFAULT_BOUND,
) -> RiskLevels:
    """처리 전략 적용 후 잔여 Impact/Likelihood. 미정의 전략은 Mitigate로 간주, [1, bound]로 clamp."""
    resolved = to_strategy(strategy) or TreatmentStrategy.MITIGATE
    d_impact, d_likelihood = STRATEGY_DELTAS[resolved]

    def clamp(n: int) -> int:
        return min(bound, max(1, n))

    return RiskLevels(
        impact=clamp(base_impact + d_impact),
        likelihood=clamp(base_likelihood + d_likelihood),
    )


def recommend_strategy(score: int) -> TreatmentStrategy:
    """점수 기반 기본 전략 추천 (사용자가 변경 가능한 초기값)."""
    if score >= RECOMMEND_MITIGATE_FROM:
        return TreatmentStrategy.MITIGATE
    return TreatmentStrategy.ACCEPT


def is_acceptable(score: int, threshold: int) -> bool:
    """허용 기준 비교: 점수 ≤ 기준이면 허용 가능."""
    return score <= threshold


def parse_level(value, bound: int, field: str = "impact") -> int:
    """문자열로 저장된 등급값을 [1, bound] 정수로 변환. 실패 시 ValidationError."""
    text = str(value if value is not None else "").strip()
    try:
        level = int(text)
    except ValueError:
        raise ValidationError(field, f"{field} 값은 1~{bound} 사이의 정수여야 합니다: '{text}'")
    if not 1 <= level <= bound:
        raise ValidationError(field, f"{field} 값은 1~{bound} 범위여야 합니다: {level}")
    return level


def try_parse_level(value, bound: int) -> Optional[int]:
    try:
        return parse_level(value, bound)
    except ValidationError:
        return None


def build_score_view(impact: int, likelihood: int, threshold: int) -> ScoreView:
    score = compute_score(impact, likelihood)
    grade = grade_from_score(score)
    return ScoreView(
        impact=impact,
        likelihood=likelihood,
        score=score,
        grade=grade,
        grade_code=grade.code,
        grade_label=grade.label,
        acceptable=is_acceptable(score, threshold),
    )


def score_view(impact, likelihood, bound: int, threshold: int) -> Optional[ScoreView]:
    """문자열 Impact/Likelihood로 점수 뷰 생성. 둘 중 하나라도 유효하지 않으면 None."""
    i = try_parse_level(impact, bound)
    l = try_parse_level(likelihood, bound)
    if i is None or l is None:
        return None
    return build_score_view(i, l, threshold)
