"""시트 행 정규화 단위 테스트."""
from riskflow.services.record_mapper import normalize_record, normalize_records, normalize_result


def test_normalize_result_synonyms() -> None:
    assert normalize_result("good") == "양호"
    assert normalize_result(" Vulnerable ") == "취약"
    assert normalize_result("vuln") == "취약"
    assert normalize_result("취약") == "취약"
    assert normalize_result(None) == ""
    assert normalize_result("N/A") == "N/A"


def test_legacy_aliases() -> None:
    record = normalize_record({"code": "1.1.1", "item": "경영진의 참여", "vulnResult": "vuln", "reason": "근거 없음"})
    assert record.itemCode == "경영진의 참여"
    assert record.result == "취약"
    assert record.result_detail == "근거 없음"


def test_canonical_name_wins_over_alias() -> None:
    record = normalize_record({"code": "1.1.1", "result": "양호", "vulnResult": "취약"})
    assert record.result == "양호"


def test_blank_canonical_falls_back_to_alias() -> None:
    record = normalize_record({"code": "1.1.1", "result": "  ", "finding": "취약"})
    assert record.result == "취약"


def test_defaults_and_trimming() -> None:
    record = normalize_record({"code": " 2.1 ", "status": " 운영 ", "treatment_plan": "  1) 패치\n"})
    assert record.code == "2.1"
    assert record.type == "ISMS"
    assert record.status == "운영"
    assert record.treatment_plan == "  1) 패치\n"


def test_numbers_become_text() -> None:
    record = normalize_record({"code": 111, "impact": 4, "likelihood": 3.0})
    assert record.code == "111"
    assert record.impact == "4"


def test_rows_without_code_are_skipped() -> None:
    records = normalize_records([{"code": ""}, "garbage", None, {"code": "A"}, {"code": "A", "status": "dup"}])
    assert [r.code for r in records] == ["A"]
    assert records[0].status == ""
