"""Health·Root API 단위 테스트."""
from fastapi.testclient import TestClient


def test_root(client: TestClient) -> None:
    """GET / -> 200, name·version·docs 포함."""
    r = client.get("/")
    assert r.status_code == 200
    data = r.json()
    assert "name" in data
    assert "version" in data
    assert "docs" in data
    assert "endpoints" in data


def test_health(client: TestClient) -> None:
    """GET /health -> 200, status·services·metrics 구조."""
    r = client.get("/health")
    assert r.status_code == 200
    data = r.json()
    assert data["status"] in ("healthy", "degraded", "warning")
    assert data["services"]["api"] is True
    assert data["services"]["sheets"] is True
    assert data["metrics"]["records_count"] == 4
    assert data["metrics"]["snapshot_source"] == "remote"
