"""스냅샷 캐시(checklist_cache_v1) 단위 테스트."""
from riskflow.core.cache_helper import clear_snapshot, load_snapshot, save_snapshot
from riskflow.core.redis import get_redis
from riskflow.models.schemas import ChecklistRecord


def test_round_trip() -> None:
    records = [ChecklistRecord(code="1.1.1", result="취약"), ChecklistRecord(code="1.1.2")]
    assert save_snapshot(records)
    assert load_snapshot() == records
    assert get_redis().get("checklist_cache_v1") is not None


def test_missing_cache() -> None:
    assert load_snapshot() is None


def test_corrupt_cache_is_ignored() -> None:
    get_redis().setex("checklist_cache_v1", 60, "{not json")
    assert load_snapshot() is None

    get_redis().setex("checklist_cache_v1", 60, '{"code": "1"}')
    assert load_snapshot() is None

    get_redis().setex("checklist_cache_v1", 60, '[{"result": "취약"}]')
    assert load_snapshot() is None


def test_clear() -> None:
    save_snapshot([ChecklistRecord(code="1")])
    clear_snapshot()
    assert load_snapshot() is None


def test_service_warms_from_cache(store) -> None:
    from riskflow.services.checklist_service import ChecklistService

    save_snapshot([ChecklistRecord(code="cached", result="취약")])
    service = ChecklistService(store)
    assert service.warm_from_cache()
    assert service.source == "cache"
    assert [r.code for r in service.records] == ["cached"]


def test_expired_cache_is_ignored() -> None:
    save_snapshot([ChecklistRecord(code="1")], ttl_seconds=60)
    get_redis().setex("checklist_cache_v1", -1, '[{"code": "1"}]')
    assert load_snapshot() is None
    assert get_redis().delete("checklist_cache_v1") == 0
