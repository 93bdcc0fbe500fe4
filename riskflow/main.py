"""Main FastAPI application: Checklist 기반 위험평가 워크플로."""
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from datetime import datetime

from riskflow.core.config import settings
from riskflow.core.redis import RedisClient
from riskflow.core.log_masking import install_log_masking
from riskflow.core.exceptions import FetchError
from riskflow.api.checklist_routes import router as checklist_router
from riskflow.services.checklist_service import get_checklist_service

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    install_log_masking()  # 로그 마스킹: 시트 API 키·배포 ID 등 민감 정보 필터
    print(f"[START] Starting {settings.APP_NAME}")
    print(f"[INFO] Risk matrix: {settings.RISK_MATRIX} (accept threshold ≤ {settings.ACCEPT_THRESHOLD})")
    print(f"[INFO] Sheets backend: {'Apps Script' if settings.SHEETS_API_URL else 'demo (in-memory)'}")

    # Check Redis (미연결 시 인메모리 폴백으로 서버는 정상 기동)
    if RedisClient.ping():
        print("[OK] Redis connection: OK")
    else:
        print("[WARN] Redis unavailable, using in-memory snapshot cache")

    # 캐시로 즉시 표시 → 시트 전체 재조회
    service = get_checklist_service()
    if service.warm_from_cache():
        print(f"[OK] Snapshot cache: {len(service.records)} records")
    try:
        result = await service.reload()
        print(f"[OK] Checklist loaded: {result.count} records")
    except FetchError as e:
        print(f"[WARN] Checklist load failed, serving {service.source} snapshot: {e}")

    yield

    # Shutdown
    print(f"[STOP] Shutting down {settings.APP_NAME}")
    await service.store.close()
    RedisClient.close()


app = FastAPI(
    title=settings.APP_NAME,
    description="""
    # Checklist Risk Assessment

    Google Sheets `Checklist` 시트 하나를 기준(SSOT)으로 하는 위험평가 워크플로.

    - **통제 이행 점검** → **취약 도출** → **위험 평가** → **위험 처리** → **잔여 위험 평가** → **승인 및 보고**
    - 단계 상태는 레코드 필드값으로만 판정 (별도 상태 컬럼 없음)
    - 편집은 로컬 드래프트, 저장 시 code 기준 부분 갱신(updateFields)
    - 위험도 = Impact × Likelihood (3x3 / 5x5), 허용 기준 이하이면 수용 가능
    """,
    version=VERSION,
    lifespan=lifespan
)

# CORS (CORS_ORIGINS 환경 변수: 쉼표 구분. 비우면 config CORS_DEFAULT_ORIGINS 사용)
_cors_origins = (
    [o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()]
    if settings.CORS_ORIGINS
    else settings.CORS_DEFAULT_ORIGINS
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(checklist_router, prefix=settings.API_V1_PREFIX)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": settings.APP_NAME,
        "version": VERSION,
        "docs": "/docs",
        "risk_matrix": settings.RISK_MATRIX,
        "accept_threshold": settings.ACCEPT_THRESHOLD,
        "endpoints": {
            "checklist": f"{settings.API_V1_PREFIX}/checklist",
            "stages": f"{settings.API_V1_PREFIX}/checklist/stages/{{stage}}",
            "dashboard": f"{settings.API_V1_PREFIX}/checklist/dashboard",
            "export": f"{settings.API_V1_PREFIX}/checklist/export",
        },
    }


@app.get("/health")
async def health_check():
    """Health check endpoint. 스냅샷 건수·출처·마지막 재조회 시각 포함."""
    redis_ok = RedisClient.ping()
    service = get_checklist_service()
    sheets_ok = service.source == "remote"

    return {
        "status": "healthy" if (redis_ok and sheets_ok) else "degraded" if sheets_ok else "warning",
        "timestamp": datetime.now().isoformat(),
        "services": {
            "api": True,
            "redis": redis_ok,
            "sheets": sheets_ok,
        },
        "metrics": {
            "records_count": len(service.records),
            "snapshot_source": service.source,
            "last_reload": service.loaded_at.isoformat() if service.loaded_at else None,
        },
    }
