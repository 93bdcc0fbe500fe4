"""CSV 내보내기 (엑셀 호환: UTF-8 BOM, 필요한 셀만 따옴표)."""
import csv
import io
from typing import Any, Iterable, List, Sequence, Tuple

from riskflow.constants.checklist_fields import BASIC_EXPORT_COLUMNS, FULL_EXPORT_COLUMNS

BOM = "\ufeff"

EXPORT_VARIANTS = {
    "basic": BASIC_EXPORT_COLUMNS,
    "full": FULL_EXPORT_COLUMNS,
}


def _cell(row: Any, key: str) -> str:
    if isinstance(row, dict):
        value = row.get(key)
    else:
        value = getattr(row, key, "")
    return "" if value is None else str(value)


def to_csv(rows: Iterable[Any], columns: Sequence[Tuple[str, str]]) -> str:
    """rows(dict 또는 레코드) → CSV 문자열.

    - 첫 행은 헤더, 행 구분은 LF, 마지막 개행 없음.
    - 쉼표·따옴표·개행이 들어간 셀만 큰따옴표로 감싸고 내부 따옴표는 두 번 씀.
    """
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n", quoting=csv.QUOTE_MINIMAL)
    writer.writerow([header for _, header in columns])
    for row in rows:
        writer.writerow([_cell(row, key) for key, _ in columns])
    text = buf.getvalue()
    if text.endswith("\n"):
        text = text[:-1]
    return BOM + text


def export_columns(variant: str) -> List[Tuple[str, str]]:
    """'basic' | 'full'. 그 외 값은 KeyError."""
    return list(EXPORT_VARIANTS[variant])
