"""CSV 내보내기 단위 테스트."""
from riskflow.models.schemas import ChecklistRecord
from riskflow.services.csv_export import export_columns, to_csv


def test_basic_layout() -> None:
    text = to_csv([ChecklistRecord(code="1.1.1", type="ISMS", area="관리체계", domain="기반", itemCode="경영진")],
                  export_columns("basic"))
    assert text.startswith("\ufeff")
    assert text == "\ufeff유형,영역,분야,코드,항목\nISMS,관리체계,기반,1.1.1,경영진"
    assert not text.endswith("\n")


def test_quotes_only_when_needed() -> None:
    columns = [("a", "A"), ("b", "B"), ("c", "C")]
    text = to_csv([{"a": "x,y", "b": 'say "hi"', "c": "line1\nline2"}, {"a": "plain", "b": None, "c": 3}], columns)
    lines = text[1:].split("\n", 1)
    assert lines[0] == "A,B,C"
    assert lines[1] == '"x,y","say ""hi""","line1\nline2"\nplain,,3'


def test_full_columns_include_workflow_fields() -> None:
    headers = [h for _, h in export_columns("full")]
    assert headers[:5] == ["유형", "영역", "분야", "코드", "항목"]
    assert "수용 사유" in headers
    assert "잔여 위험 상태" in headers
