"""
Checklist 워크플로 서비스.

- 스냅샷: 마지막 전체 조회 결과 (불변 tuple). 재조회 때마다 통째로 교체.
- 드래프트/저장은 DraftSynchronizer에 위임. 저장 성공 후 스냅샷을 로컬 패치하고 재조회 1회 (실패해도 저장 결과 유지).
- 캐시(checklist_cache_v1): 기동 직후 즉시 표시용. 서버 재조회가 항상 우선.
"""
import logging
from datetime import datetime, timezone
from typing import Dict, Optional, Sequence, Tuple

from riskflow.core.cache_helper import load_snapshot, save_snapshot
from riskflow.core.config import settings
from riskflow.core.exceptions import FetchError, ValidationError
from riskflow.data.demo_data import get_demo_checklist_rows
from riskflow.models.schemas import (
    ApprovalRecord,
    ApprovalSummary,
    ChecklistRecord,
    CommitResponse,
    DashboardStats,
    DomainGroup,
    RecordDetail,
    RecordListResponse,
    RecordRow,
    ReloadResponse,
    ScorePreview,
    Stage,
    StageProgress,
    StageViewResponse,
)
from riskflow.services import approval_service
from riskflow.services import workflow_gate as gate
from riskflow.services.csv_export import to_csv
from riskflow.services.draft_sync import DraftSynchronizer
from riskflow.services.progress import dashboard_stats, progress_for_stage
from riskflow.services.record_mapper import normalize_records
from riskflow.services.score_engine import (
    build_score_view,
    derive_residual,
    parse_level,
    recommend_strategy,
    score_view,
    to_strategy,
)
from riskflow.services.sheets_client import InMemoryRecordStore, RecordStore, SheetsRecordStore

logger = logging.getLogger(__name__)


class ChecklistService:
    """Snapshot + drafts over a single Checklist sheet."""

    def __init__(
        self,
        store: RecordStore,
        sheet_name: str = "Checklist",
        matrix_bound: int = 5,
        accept_threshold: int = 7,
        use_cache: bool = True,
    ):
        self.store = store
        self.sheet_name = sheet_name
        self.matrix_bound = matrix_bound
        self.accept_threshold = accept_threshold
        self.use_cache = use_cache
        self.sync = DraftSynchronizer(store, sheet_name=sheet_name, matrix_bound=matrix_bound)
        self._snapshot: Tuple[ChecklistRecord, ...] = ()
        self.source = "empty"
        self.loaded_at: Optional[datetime] = None

    # ---------- loading ----------

    @property
    def records(self) -> Tuple[ChecklistRecord, ...]:
        return self._snapshot

    def _replace_snapshot(self, records: Sequence[ChecklistRecord], source: str) -> None:
        self._snapshot = tuple(records)
        self.sync.reconcile(self._snapshot)
        self.source = source
        self.loaded_at = datetime.now(timezone.utc)

    def warm_from_cache(self) -> bool:
        """캐시 스냅샷으로 즉시 채움. 이미 서버 값이 있으면 무시."""
        if not self.use_cache or self.source == "remote":
            return False
        cached = load_snapshot()
        if cached is None:
            return False
        self._replace_snapshot(cached, "cache")
        logger.info("snapshot warmed from cache: %d records", len(cached))
        return True

    async def reload(self) -> ReloadResponse:
        """서버 전체 재조회. FetchError 시 기존 스냅샷 유지."""
        try:
            rows = await self.store.fetch_all(self.sheet_name)
        except FetchError as e:
            logger.warning("reload failed, keeping %s snapshot: %s", self.source, e)
            raise
        records = normalize_records(rows)
        self._replace_snapshot(records, "remote")
        if self.use_cache:
            save_snapshot(list(records))
        logger.info("reloaded %d records from %s", len(records), self.sheet_name)
        return ReloadResponse(count=len(records), source=self.source, loaded_at=self.loaded_at)

    # ---------- views ----------

    def _row(self, record: ChecklistRecord, done: bool = False) -> RecordRow:
        view = self.sync.overlay(record)
        score = score_view(view.impact, view.likelihood, self.matrix_bound, self.accept_threshold)
        residual = score_view(
            view.residual_impact, view.residual_likelihood, self.matrix_bound, self.accept_threshold
        )
        return RecordRow(
            record=view,
            draft=self.sync.pending_fields(record.code),
            state=gate.derive_state(record),
            done=done,
            committing=self.sync.is_committing(record.code),
            score=score,
            residual_score=residual,
            recommended_strategy=recommend_strategy(score.score) if score else None,
        )

    def get_record(self, code: str) -> RecordDetail:
        committed = self.sync.committed(code)
        view = self.sync.read_record(code)
        return RecordDetail(
            committed=committed,
            draft=self.sync.pending_fields(code),
            view=view,
            state=gate.derive_state(committed),
            committing=self.sync.is_committing(code),
            score=score_view(view.impact, view.likelihood, self.matrix_bound, self.accept_threshold),
            eligible_stages=gate.eligible_stages(committed),
        )

    def list_records(
        self,
        domain: Optional[str] = None,
        query: Optional[str] = None,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> RecordListResponse:
        size = page_size or settings.PAGE_SIZE
        by_code = {r.code: r for r in self._snapshot}
        views = [self.sync.overlay(r) for r in self._snapshot]
        filtered = gate.filter_records(views, domain, query)
        items, current, page_count = gate.paginate(filtered, page, size)
        return RecordListResponse(
            items=[self._row(by_code[v.code]) for v in items],
            total=len(filtered),
            page=current,
            page_size=size,
            page_count=page_count,
            domains=gate.list_domains(self._snapshot),
        )

    def progress(self, stage) -> StageProgress:
        """필터와 무관하게 스냅샷 전체 기준."""
        return progress_for_stage(self._snapshot, stage)

    def stage_view(
        self,
        stage,
        domain: Optional[str] = None,
        query: Optional[str] = None,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> StageViewResponse:
        definition = gate.get_stage(stage)
        size = page_size or settings.PAGE_SIZE
        eligible = [r for r in self._snapshot if definition.eligible(r)]
        by_code = {r.code: r for r in eligible}
        views = gate.filter_records([self.sync.overlay(r) for r in eligible], domain, query)
        items, current, page_count = gate.paginate(views, page, size)
        rows = [self._row(by_code[v.code], done=definition.is_done(by_code[v.code])) for v in items]
        groups = gate.group_by_domain(rows, lambda row: row.record.domain)
        return StageViewResponse(
            stage=definition.stage,
            title=definition.title,
            editable_fields=list(definition.editable_fields),
            progress=self.progress(stage),
            groups=[DomainGroup(domain=d, items=g) for d, g in groups],
            total=len(views),
            page=current,
            page_size=size,
            page_count=page_count,
        )

    def dashboard(self) -> DashboardStats:
        return dashboard_stats(self._snapshot, self.matrix_bound, self.accept_threshold)

    def score_preview(self, impact, likelihood, strategy: Optional[str] = None) -> ScorePreview:
        """Impact/Likelihood(+전략) → 점수·등급·권고 전략·잔여 위험."""
        i = parse_level(impact, self.matrix_bound, "impact")
        l = parse_level(likelihood, self.matrix_bound, "likelihood")
        base = build_score_view(i, l, self.accept_threshold)
        recommended = recommend_strategy(base.score)
        chosen = recommended
        if strategy:
            chosen = to_strategy(strategy)
            if chosen is None:
                raise ValidationError("strategy", f"알 수 없는 처리 전략입니다: {strategy}")
        residual = derive_residual(i, l, chosen, self.matrix_bound)
        return ScorePreview(
            matrix_bound=self.matrix_bound,
            accept_threshold=self.accept_threshold,
            base=base,
            recommended_strategy=recommended,
            strategy=chosen,
            residual=build_score_view(residual.impact, residual.likelihood, self.accept_threshold),
        )

    # ---------- drafts / commit ----------

    def set_draft(self, code: str, fields: Dict[str, str]) -> RecordDetail:
        self.sync.set_draft_fields(code, fields)
        return self.get_record(code)

    def discard_draft(self, code: str) -> RecordDetail:
        self.sync.discard_draft(code)
        return self.get_record(code)

    async def commit(self, code: str, stage) -> CommitResponse:
        stage = Stage(stage)
        committed_fields = await self.sync.commit(code, stage)
        record = self.sync.committed(code)
        if committed_fields:
            self._snapshot = tuple(record if r.code == code else r for r in self._snapshot)
        reloaded = False
        if committed_fields:
            try:
                await self.reload()
                reloaded = True
            except FetchError as e:
                logger.warning("reload after commit failed (commit kept): code=%s %s", code, e)
            record = self.sync.committed(code)
        return CommitResponse(
            code=code,
            stage=stage,
            committed_fields=committed_fields,
            record=record,
            reloaded=reloaded,
        )

    # ---------- export / approval ----------

    def export_csv(self, columns: Sequence[Tuple[str, str]]) -> str:
        return to_csv(self._snapshot, columns)

    def approval_summary(self) -> ApprovalSummary:
        return approval_service.approval_summary(self._snapshot)

    def approve_all(self, approver: str, comment: Optional[str] = None) -> ApprovalRecord:
        return approval_service.approve_all(self._snapshot, approver, comment)


# ==================== 싱글톤 ====================

_service: Optional[ChecklistService] = None


def get_record_store() -> RecordStore:
    """SHEETS_API_URL 설정 시 Apps Script, 아니면 데모 데이터 인메모리 저장소."""
    if settings.SHEETS_API_URL:
        return SheetsRecordStore(
            settings.SHEETS_API_URL,
            api_key=settings.SHEETS_API_KEY,
            timeout=settings.SHEETS_TIMEOUT_SECONDS,
        )
    logger.info("SHEETS_API_URL not set, using demo in-memory checklist")
    return InMemoryRecordStore(get_demo_checklist_rows(), sheet_name=settings.CHECKLIST_SHEET)


def get_checklist_service() -> ChecklistService:
    """ChecklistService 싱글톤 (FastAPI dependency)."""
    global _service
    if _service is None:
        _service = ChecklistService(
            get_record_store(),
            sheet_name=settings.CHECKLIST_SHEET,
            matrix_bound=settings.matrix_bound,
            accept_threshold=settings.ACCEPT_THRESHOLD,
        )
    return _service


def set_checklist_service(service: Optional[ChecklistService]) -> None:
    """싱글톤 교체 (테스트·스크립트용). None이면 다음 호출 때 새로 생성."""
    global _service
    _service = service
