"""Checklist 위험평가 워크플로 API (통제 이행 → 취약 도출 → 위험 평가 → 위험 처리 → 잔여 위험 → 승인)."""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query
from fastapi.responses import PlainTextResponse

from riskflow.constants.checklist_fields import WORKFLOW_STEPS
from riskflow.core.exceptions import (
    CommitInProgressError,
    FetchError,
    RiskflowError,
    UnknownRecordError,
    UpdateError,
    ValidationError,
)
from riskflow.models.schemas import (
    ApprovalRecord,
    ApprovalRequest,
    ApprovalSummary,
    CommitResponse,
    DashboardStats,
    DraftUpdateRequest,
    RecordDetail,
    RecordListResponse,
    ReloadResponse,
    ScorePreview,
    StageProgress,
    StageViewResponse,
    StepInfo,
)
from riskflow.services.checklist_service import ChecklistService, get_checklist_service
from riskflow.services.csv_export import export_columns
from riskflow.services.workflow_gate import get_stage

router = APIRouter(prefix="/checklist", tags=["Checklist"])


def _http_error(e: RiskflowError) -> HTTPException:
    """도메인 예외 → HTTP 상태 코드."""
    if isinstance(e, ValidationError):
        return HTTPException(status_code=422, detail=e.to_dict())
    if isinstance(e, UnknownRecordError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, CommitInProgressError):
        return HTTPException(status_code=409, detail=str(e))
    if isinstance(e, UpdateError):
        return HTTPException(status_code=502, detail=e.to_dict())
    if isinstance(e, FetchError):
        return HTTPException(status_code=502, detail={"error": "FETCH_FAILED", "message": str(e)})
    return HTTPException(status_code=500, detail=str(e))


def _stage_or_404(stage: str) -> str:
    try:
        get_stage(stage)
    except (KeyError, ValueError):
        raise HTTPException(status_code=404, detail=f"알 수 없는 단계입니다: {stage}")
    return stage


@router.get("/steps", response_model=List[StepInfo])
async def api_get_steps():
    """위저드 단계 목록."""
    return [StepInfo(**s) for s in WORKFLOW_STEPS]


@router.get("/records", response_model=RecordListResponse)
async def api_list_records(
    domain: Optional[str] = Query(None, description="분야"),
    q: Optional[str] = Query(None, description="검색어"),
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1, le=500),
    service: ChecklistService = Depends(get_checklist_service),
):
    """통제 항목 목록 (드래프트 반영)."""
    return service.list_records(domain=domain, query=q, page=page, page_size=page_size)


@router.post("/records/reload", response_model=ReloadResponse)
async def api_reload_records(service: ChecklistService = Depends(get_checklist_service)):
    """시트 전체 재조회. 미저장 드래프트는 유지."""
    try:
        return await service.reload()
    except FetchError as e:
        raise _http_error(e)


@router.get("/records/{code}", response_model=RecordDetail)
async def api_get_record(
    code: str = Path(..., description="통제 코드"),
    service: ChecklistService = Depends(get_checklist_service),
):
    try:
        return service.get_record(code)
    except RiskflowError as e:
        raise _http_error(e)


@router.get("/stages/{stage}", response_model=StageViewResponse)
async def api_get_stage_view(
    stage: str,
    domain: Optional[str] = Query(None),
    q: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1, le=500),
    service: ChecklistService = Depends(get_checklist_service),
):
    """단계 화면. 진행률은 필터/페이지와 무관하게 전체 기준."""
    _stage_or_404(stage)
    return service.stage_view(stage, domain=domain, query=q, page=page, page_size=page_size)


@router.get("/stages/{stage}/progress", response_model=StageProgress)
async def api_get_stage_progress(
    stage: str,
    service: ChecklistService = Depends(get_checklist_service),
):
    _stage_or_404(stage)
    return service.progress(stage)


@router.patch("/drafts/{code}", response_model=RecordDetail)
async def api_set_draft(
    body: DraftUpdateRequest,
    code: str = Path(...),
    service: ChecklistService = Depends(get_checklist_service),
):
    """로컬 편집 (시트에는 저장 시에만 반영)."""
    try:
        return service.set_draft(code, body.fields)
    except RiskflowError as e:
        raise _http_error(e)


@router.delete("/drafts/{code}", response_model=RecordDetail)
async def api_discard_draft(
    code: str = Path(...),
    service: ChecklistService = Depends(get_checklist_service),
):
    try:
        return service.discard_draft(code)
    except RiskflowError as e:
        raise _http_error(e)


@router.post("/stages/{stage}/records/{code}/commit", response_model=CommitResponse)
async def api_commit(
    stage: str,
    code: str,
    service: ChecklistService = Depends(get_checklist_service),
):
    """단계 저장. 검증 실패는 422 (시트 호출 없음), 시트 오류는 502 (드래프트 유지)."""
    _stage_or_404(stage)
    try:
        return await service.commit(code, stage)
    except RiskflowError as e:
        raise _http_error(e)


@router.get("/dashboard", response_model=DashboardStats)
async def api_get_dashboard(service: ChecklistService = Depends(get_checklist_service)):
    """대시보드 KPI (Checklist 시트 전체 기준)."""
    return service.dashboard()


@router.get("/score", response_model=ScorePreview)
async def api_score_preview(
    impact: str = Query(..., description="영향도"),
    likelihood: str = Query(..., description="발생가능성"),
    strategy: Optional[str] = Query(None, description="처리 전략 (미지정 시 권고 전략)"),
    service: ChecklistService = Depends(get_checklist_service),
):
    """점수·등급·권고 전략·잔여 위험 미리보기."""
    try:
        return service.score_preview(impact, likelihood, strategy)
    except ValidationError as e:
        raise _http_error(e)


@router.get("/export")
async def api_export_csv(
    columns: str = Query("basic", pattern="^(basic|full)$"),
    service: ChecklistService = Depends(get_checklist_service),
):
    """CSV 내보내기 (basic: 분류 컬럼, full: 전체 워크플로 컬럼)."""
    body = service.export_csv(export_columns(columns))
    return PlainTextResponse(
        body,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename=checklist_{columns}.csv"},
    )


@router.get("/approval", response_model=ApprovalSummary)
async def api_get_approval(service: ChecklistService = Depends(get_checklist_service)):
    return service.approval_summary()


@router.post("/approval", response_model=ApprovalRecord)
async def api_approve(
    body: ApprovalRequest,
    service: ChecklistService = Depends(get_checklist_service),
):
    """최종 승인 (잔여 위험 평가 전체 완료 시)."""
    try:
        return service.approve_all(body.approver, body.comment)
    except ValidationError as e:
        raise _http_error(e)
