"""
DraftSynchronizer: 레코드별 로컬 편집 버퍼 (draft) ↔ 서버 확정값 (committed).

- 저장(commit) 전까지 편집값은 시트에 반영되지 않음.
- 전체 재조회(reconcile)는 미저장 드래프트가 있는 code를 덮어쓰지 않음.
- code당 동시에 하나의 commit만 진행. 진행 중에는 추가 commit·편집 거부.
- commit 실패 시 드래프트 유지 (사용자 입력 보존, 재시도 가능). 자동 재시도·롤백 없음.
"""
import logging
from typing import Dict, Iterable, List, Mapping, Optional, Set

from riskflow.constants.checklist_fields import EDITABLE_FIELDS, TREATMENT_FIELDS
from riskflow.core.exceptions import (
    CommitInProgressError,
    UnknownRecordError,
    UpdateError,
    ValidationError,
)
from riskflow.models.schemas import ChecklistRecord
from riskflow.services.record_mapper import normalize_result
from riskflow.services.sheets_client import RecordStore
from riskflow.services.workflow_gate import (
    get_stage,
    validate_accept_reason,
    validate_fields,
)

logger = logging.getLogger(__name__)

_RECORD_FIELDS = frozenset(ChecklistRecord.model_fields)


class DraftSynchronizer:
    """Per-key draft buffer layered over server-confirmed values."""

    def __init__(self, store: RecordStore, sheet_name: str = "Checklist", matrix_bound: int = 5):
        self.store = store
        self.sheet_name = sheet_name
        self.matrix_bound = matrix_bound
        self._committed: Dict[str, ChecklistRecord] = {}
        self._drafts: Dict[str, Dict[str, str]] = {}
        self._in_flight: Set[str] = set()

    # ---------- server values ----------

    def reconcile(self, records: Iterable[ChecklistRecord]) -> None:
        """재조회 결과로 committed 교체. 미저장 드래프트가 있거나 저장 중인 code는 건드리지 않는다."""
        fresh = {r.code: r for r in records}
        merged: Dict[str, ChecklistRecord] = {}
        for code, record in fresh.items():
            if self._is_held(code) and code in self._committed:
                merged[code] = self._committed[code]
            else:
                merged[code] = record
        for code, record in self._committed.items():
            if code not in fresh and self._is_held(code):
                merged[code] = record
        self._committed = merged

    def _is_held(self, key: str) -> bool:
        return self.has_pending(key) or key in self._in_flight

    def committed_records(self) -> List[ChecklistRecord]:
        return list(self._committed.values())

    def committed(self, key: str) -> ChecklistRecord:
        record = self._committed.get(key)
        if record is None:
            raise UnknownRecordError(key)
        return record

    # ---------- reads ----------

    def read_field(self, key: str, field: str) -> str:
        """draft 값이 있으면 draft, 없으면 committed."""
        record = self.committed(key)
        draft = self._drafts.get(key, {})
        if field in draft:
            return draft[field]
        if field not in _RECORD_FIELDS:
            raise ValidationError(field, f"알 수 없는 컬럼입니다: {field}")
        return getattr(record, field)

    def read_record(self, key: str) -> ChecklistRecord:
        record = self.committed(key)
        draft = self._drafts.get(key)
        return record.model_copy(update=draft) if draft else record

    def overlay(self, record: ChecklistRecord) -> ChecklistRecord:
        """스냅샷 레코드 위에 드래프트를 덮어쓴 화면용 값."""
        draft = self._drafts.get(record.code)
        return record.model_copy(update=draft) if draft else record

    def pending_fields(self, key: str) -> Dict[str, str]:
        return dict(self._drafts.get(key, {}))

    def has_pending(self, key: str) -> bool:
        return bool(self._drafts.get(key))

    def is_committing(self, key: str) -> bool:
        return key in self._in_flight

    # ---------- local edits ----------

    def _check_editable(self, key: str, field: str) -> None:
        self.committed(key)
        if key in self._in_flight:
            raise CommitInProgressError(key)
        if field not in EDITABLE_FIELDS:
            raise ValidationError(field, f"편집할 수 없는 컬럼입니다: {field}")

    def set_draft_field(self, key: str, field: str, value) -> None:
        """로컬 편집만. RecordStore 호출 없음. result는 정규 표기(양호/취약)로 저장."""
        self._check_editable(key, field)
        text = "" if value is None else str(value)
        if field == "result":
            text = normalize_result(text)
        self._drafts.setdefault(key, {})[field] = text

    def set_draft_fields(self, key: str, fields: Mapping[str, object]) -> None:
        for field in fields:
            self._check_editable(key, field)
        for field, value in fields.items():
            self.set_draft_field(key, field, value)

    def discard_draft(self, key: str, fields: Optional[Iterable[str]] = None) -> None:
        if key in self._in_flight:
            raise CommitInProgressError(key)
        if fields is None:
            self._drafts.pop(key, None)
            return
        draft = self._drafts.get(key, {})
        for field in fields:
            draft.pop(field, None)
        if not draft:
            self._drafts.pop(key, None)

    # ---------- commit ----------

    def _build_payload(self, key: str, stage) -> Dict[str, str]:
        draft = self._drafts.get(key, {})
        if stage is None:
            return dict(draft)
        definition = get_stage(stage)
        payload = {f: v for f, v in draft.items() if f in definition.editable_fields}
        payload.update(definition.completion)
        return payload

    def _validate(self, key: str, payload: Dict[str, str], stage) -> None:
        committed = self.committed(key)
        view = {**committed.model_dump(), **self._drafts.get(key, {}), **payload}
        if stage is not None:
            definition = get_stage(stage)
            if not definition.eligible(committed):
                raise ValidationError("code", f"'{definition.title}' 단계 대상이 아닙니다: {key}")
            definition.validate(view, self.matrix_bound)
        validate_fields(view, payload.keys(), self.matrix_bound)
        if set(payload) & set(TREATMENT_FIELDS):
            validate_accept_reason(view)

    async def commit(self, key: str, stage=None) -> Dict[str, str]:
        """드래프트를 시트에 반영. 반영된 필드 dict 반환 (반영할 것이 없으면 빈 dict).

        stage 지정 시 해당 단계 편집 컬럼만 반영하고 단계 완료 표시(completion)를 함께 저장한다.
        """
        if key in self._in_flight:
            raise CommitInProgressError(key)
        self.committed(key)

        payload = self._build_payload(key, stage)
        if not payload:
            return {}
        self._validate(key, payload, stage)

        self._in_flight.add(key)
        try:
            await self.store.update_fields(self.sheet_name, key, payload)
        except UpdateError as e:
            logger.warning("commit failed: code=%s kind=%s %s", key, e.kind.value, e.message)
            raise
        finally:
            self._in_flight.discard(key)

        self._committed[key] = self._committed[key].model_copy(update=payload)
        draft = self._drafts.get(key, {})
        for field in payload:
            draft.pop(field, None)
        if not draft:
            self._drafts.pop(key, None)
        logger.info("commit ok: code=%s fields=%s", key, ",".join(payload))
        return payload
