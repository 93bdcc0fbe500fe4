"""pytest 공통 픽스처: 인메모리 Checklist 시트 + FastAPI TestClient."""
import asyncio
from typing import Any, Dict, List

import pytest
from fastapi.testclient import TestClient

from riskflow.core.redis import RedisClient
from riskflow.main import app
from riskflow.services import approval_service
from riskflow.services.checklist_service import ChecklistService, set_checklist_service
from riskflow.services.sheets_client import InMemoryRecordStore


def make_row(code: str, **values: str) -> Dict[str, Any]:
    row = {"type": "ISMS-P", "area": "1. 관리체계", "domain": "1.1 관리체계 기반 마련",
           "code": code, "itemCode": f"항목 {code}"}
    row.update(values)
    return row


@pytest.fixture(autouse=True)
def memory_redis():
    """Redis 대신 인메모리 폴백 사용."""
    RedisClient.use_memory()
    approval_service.reset_approvals()
    yield
    RedisClient.close()


@pytest.fixture
def checklist_rows() -> List[Dict[str, Any]]:
    return [
        make_row("1.1.1.1"),
        make_row("1.1.1.2", status="운영 중", result="양호"),
        make_row("1.2.1.1", domain="1.2 위험 관리", status="미흡", result="취약",
                 impact="3", likelihood="3"),
        make_row("2.5.1.1", area="2. 보호대책", domain="2.5 인증 및 권한관리",
                 status="미흡", result="취약", impact="5", likelihood="4",
                 treatment_strategy="Mitigate", treatment_status="Done",
                 residual_impact="4", residual_likelihood="3", residual_status="Done"),
    ]


@pytest.fixture
def store(checklist_rows) -> InMemoryRecordStore:
    return InMemoryRecordStore(checklist_rows)


@pytest.fixture
def service(store) -> ChecklistService:
    svc = ChecklistService(store, matrix_bound=5, accept_threshold=7)
    asyncio.run(svc.reload())
    return svc


@pytest.fixture
def client(service) -> TestClient:
    """FastAPI TestClient. 싱글톤 서비스를 인메모리 시트 기반으로 교체 (lifespan 미실행)."""
    set_checklist_service(service)
    yield TestClient(app)
    set_checklist_service(None)
