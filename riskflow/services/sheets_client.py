"""
Checklist 시트 저장소 (RecordStore).

- SheetsRecordStore: Google Apps Script 웹앱(JSON envelope {ok, data, error, message})을 httpx로 호출.
- InMemoryRecordStore: 동일 계약의 인메모리 구현 (SHEETS_API_URL 미설정 시 데모, 테스트).

두 구현 모두 자동 재시도 없음 (호출당 최대 1회). updateFields는 전부 반영되거나 전체 실패.
"""
import copy
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional, Tuple

import httpx

from riskflow.constants.checklist_fields import CANONICAL_FIELDS, FIELD_ALIASES, SHEET_KEY_FIELD
from riskflow.core.exceptions import (
    ColumnNotFoundError,
    FetchError,
    UpdateError,
    UpdateErrorKind,
)

logger = logging.getLogger(__name__)

COLUMN_NOT_FOUND_MARKERS = ("COLUMN_NOT_FOUND", "COLUMN NOT FOUND")


def _error_message(payload: Any, operation: str) -> str:
    """error ?? message ?? '<operation> failed'."""
    if isinstance(payload, dict):
        return str(payload.get("error") or payload.get("message") or f"{operation} failed")
    return f"{operation} failed"


def is_column_not_found(message: str) -> bool:
    upper = str(message or "").upper()
    return any(marker in upper for marker in COLUMN_NOT_FOUND_MARKERS)


class RecordStore(ABC):
    """fetch-all / update-fields-by-key 계약."""

    @abstractmethod
    async def fetch_all(self, sheet_name: str) -> List[Dict[str, Any]]:
        """시트 전체 행 반환. 실패 시 FetchError."""

    @abstractmethod
    async def update_fields(self, sheet_name: str, key: str, fields: Dict[str, str]) -> None:
        """key(code) 행의 지정 컬럼만 갱신. 실패 시 UpdateError."""

    async def close(self) -> None:
        return None


class SheetsRecordStore(RecordStore):
    """Apps Script 웹앱 기반 RecordStore."""

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        # Apps Script exec URL은 googleusercontent로 302 리다이렉트
        return httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            transport=self._transport,
        )

    async def fetch_all(self, sheet_name: str) -> List[Dict[str, Any]]:
        params = {"action": "read", "sheet": sheet_name, "key": self.api_key}
        try:
            async with self._client() as client:
                response = await client.get(self.base_url, params=params)
        except httpx.HTTPError as e:
            raise FetchError(f"readSheet failed: {e}") from e
        try:
            payload = response.json()
        except ValueError as e:
            raise FetchError(f"readSheet failed: invalid JSON (HTTP {response.status_code})") from e

        if not isinstance(payload, dict) or payload.get("ok") is not True:
            raise FetchError(_error_message(payload, "readSheet"))

        data = payload.get("data")
        return data if isinstance(data, list) else []

    async def update_fields(self, sheet_name: str, key: str, fields: Dict[str, str]) -> None:
        body = {
            "action": "updateFields",
            "sheet": sheet_name,
            "key": self.api_key,
            "code": key,
            "fields": fields,
        }
        try:
            async with self._client() as client:
                # text/plain: Apps Script doPost가 e.postData.contents로 그대로 읽음
                response = await client.post(
                    self.base_url,
                    content=json.dumps(body, ensure_ascii=False).encode("utf-8"),
                    headers={"Content-Type": "text/plain;charset=utf-8"},
                )
        except httpx.HTTPError as e:
            raise UpdateError(f"updateFields failed: {e}", UpdateErrorKind.TRANSPORT) from e
        try:
            payload = response.json()
        except ValueError as e:
            raise UpdateError(
                f"updateFields failed: invalid JSON (HTTP {response.status_code})",
                UpdateErrorKind.TRANSPORT,
            ) from e

        if not isinstance(payload, dict) or payload.get("ok") is not True:
            message = _error_message(payload, "updateFields")
            if is_column_not_found(message):
                raise ColumnNotFoundError(message)
            raise UpdateError(message, UpdateErrorKind.REMOTE)


class InMemoryRecordStore(RecordStore):
    """인메모리 RecordStore. 시트 컬럼 집합 밖의 필드 갱신은 COLUMN_NOT_FOUND."""

    def __init__(
        self,
        rows: Optional[Iterable[Dict[str, Any]]] = None,
        columns: Optional[Iterable[str]] = None,
        sheet_name: str = "Checklist",
    ):
        self._sheets: Dict[str, List[Dict[str, Any]]] = {
            sheet_name: [dict(r) for r in (rows or [])]
        }
        if columns is None:
            known = set(CANONICAL_FIELDS)
            for aliases in FIELD_ALIASES.values():
                known.update(aliases)
            for row in self._sheets[sheet_name]:
                known.update(row.keys())
            columns = known
        self.columns = set(columns)
        self.fetch_calls = 0
        self.update_calls: List[Tuple[str, str, Dict[str, str]]] = []
        self.fail_next_fetch: Optional[Exception] = None
        self.fail_next_update: Optional[Exception] = None

    async def fetch_all(self, sheet_name: str) -> List[Dict[str, Any]]:
        self.fetch_calls += 1
        if self.fail_next_fetch is not None:
            error, self.fail_next_fetch = self.fail_next_fetch, None
            raise error
        if sheet_name not in self._sheets:
            raise FetchError(f"sheet not found: {sheet_name}")
        return copy.deepcopy(self._sheets[sheet_name])

    async def update_fields(self, sheet_name: str, key: str, fields: Dict[str, str]) -> None:
        self.update_calls.append((sheet_name, key, dict(fields)))
        if self.fail_next_update is not None:
            error, self.fail_next_update = self.fail_next_update, None
            raise error

        rows = self._sheets.get(sheet_name)
        if rows is None:
            raise UpdateError(f"sheet not found: {sheet_name}", UpdateErrorKind.REMOTE)
        unknown = [f for f in fields if f not in self.columns]
        if unknown:
            raise ColumnNotFoundError(f"COLUMN_NOT_FOUND: {', '.join(unknown)}", column=unknown[0])

        row = next((r for r in rows if str(r.get(SHEET_KEY_FIELD, "")).strip() == key), None)
        if row is None:
            raise UpdateError(f"code not found: {key}", UpdateErrorKind.REMOTE)
        row.update(fields)

    def row(self, key: str, sheet_name: str = "Checklist") -> Optional[Dict[str, Any]]:
        for r in self._sheets.get(sheet_name, []):
            if str(r.get(SHEET_KEY_FIELD, "")).strip() == key:
                return dict(r)
        return None

    def replace_row(self, key: str, values: Dict[str, Any], sheet_name: str = "Checklist") -> None:
        """외부(다른 사용자)에 의한 시트 변경을 흉내."""
        for r in self._sheets.get(sheet_name, []):
            if str(r.get(SHEET_KEY_FIELD, "")).strip() == key:
                r.update(values)
                return
        raise KeyError(key)
