"""시트 원본 행(dict) → ChecklistRecord 정규화.

컬럼명 폴백(레거시 별칭)은 FIELD_ALIASES 한 곳에서만 시도한다.
"""
import logging
from typing import Any, Dict, Iterable, List, Optional

from riskflow.constants.checklist_fields import (
    CANONICAL_FIELDS,
    DEFAULT_FIELD_VALUES,
    FIELD_ALIASES,
    RESULT_SYNONYMS,
    UNTRIMMED_FIELDS,
)
from riskflow.models.schemas import ChecklistRecord

logger = logging.getLogger(__name__)


def _to_text(value: Any) -> str:
    return "" if value is None else str(value)


def normalize_result(value: Any) -> str:
    """양호/good → 양호, 취약/vuln/vulnerable → 취약. 그 외 값은 공백만 제거해 그대로."""
    text = _to_text(value).strip()
    if not text:
        return ""
    return RESULT_SYNONYMS.get(text.lower(), text)


def resolve_field(raw: Dict[str, Any], field: str) -> str:
    """정규 컬럼명 → 별칭 순으로 비어있지 않은 첫 값."""
    for name in [field, *FIELD_ALIASES.get(field, [])]:
        value = _to_text(raw.get(name))
        if value.strip():
            return value if field in UNTRIMMED_FIELDS else value.strip()
    return DEFAULT_FIELD_VALUES.get(field, "")


def normalize_record(raw: Any) -> Optional[ChecklistRecord]:
    """code 없는 행·dict가 아닌 행은 None."""
    if not isinstance(raw, dict):
        return None
    values = {field: resolve_field(raw, field) for field in CANONICAL_FIELDS}
    if not values["code"]:
        return None
    values["result"] = normalize_result(values["result"])
    return ChecklistRecord(**values)


def normalize_records(rows: Iterable[Any]) -> List[ChecklistRecord]:
    records: List[ChecklistRecord] = []
    seen = set()
    skipped = 0
    for raw in rows or []:
        record = normalize_record(raw)
        if record is None:
            skipped += 1
            continue
        if record.code in seen:
            logger.warning("중복 code 무시 (첫 행 유지): code=%s", record.code)
            continue
        seen.add(record.code)
        records.append(record)
    if skipped:
        logger.debug("code 없는/형식 오류 행 %d건 제외", skipped)
    return records
