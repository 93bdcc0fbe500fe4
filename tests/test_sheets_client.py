"""Apps Script RecordStore 단위 테스트 (httpx.MockTransport)."""
import asyncio
import json

import httpx
import pytest

from riskflow.core.exceptions import ColumnNotFoundError, FetchError, UpdateError, UpdateErrorKind
from riskflow.services.sheets_client import SheetsRecordStore, is_column_not_found

BASE_URL = "https://script.google.com/macros/s/DEPLOYMENT_ID/exec"


def _store(handler) -> SheetsRecordStore:
    return SheetsRecordStore(BASE_URL, api_key="secret", transport=httpx.MockTransport(handler))


def test_fetch_all_sends_read_action() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json={"ok": True, "data": [{"code": "1.1.1"}]})

    rows = asyncio.run(_store(handler).fetch_all("Checklist"))
    assert rows == [{"code": "1.1.1"}]
    assert seen["method"] == "GET"
    assert seen["params"] == {"action": "read", "sheet": "Checklist", "key": "secret"}


def test_fetch_all_non_list_data_is_empty() -> None:
    store = _store(lambda r: httpx.Response(200, json={"ok": True, "data": {"code": "x"}}))
    assert asyncio.run(store.fetch_all("Checklist")) == []


def test_fetch_all_follows_redirect() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "script.google.com":
            return httpx.Response(302, headers={"Location": "https://script.googleusercontent.com/echo"})
        return httpx.Response(200, json={"ok": True, "data": []})

    assert asyncio.run(_store(handler).fetch_all("Checklist")) == []


@pytest.mark.parametrize("payload, message", [
    ({"ok": False, "error": "sheet missing"}, "sheet missing"),
    ({"ok": False, "message": "quota"}, "quota"),
    ({"ok": False}, "readSheet failed"),
])
def test_fetch_all_failure_message(payload, message) -> None:
    store = _store(lambda r: httpx.Response(200, json=payload))
    with pytest.raises(FetchError) as exc:
        asyncio.run(store.fetch_all("Checklist"))
    assert str(exc.value) == message


def test_fetch_all_invalid_json() -> None:
    store = _store(lambda r: httpx.Response(200, text="<html>login</html>"))
    with pytest.raises(FetchError):
        asyncio.run(store.fetch_all("Checklist"))


def test_fetch_all_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    with pytest.raises(FetchError):
        asyncio.run(_store(handler).fetch_all("Checklist"))


def test_update_fields_body() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["body"] = json.loads(request.content.decode("utf-8"))
        return httpx.Response(200, json={"ok": True})

    asyncio.run(_store(handler).update_fields("Checklist", "1.1.1", {"impact": "4"}))
    assert seen["method"] == "POST"
    assert seen["body"] == {
        "action": "updateFields",
        "sheet": "Checklist",
        "key": "secret",
        "code": "1.1.1",
        "fields": {"impact": "4"},
    }


def test_update_fields_column_not_found() -> None:
    store = _store(lambda r: httpx.Response(200, json={"ok": False, "error": "COLUMN_NOT_FOUND: likelihood"}))
    with pytest.raises(ColumnNotFoundError) as exc:
        asyncio.run(store.update_fields("Checklist", "1.1.1", {"likelihood": "4"}))
    assert exc.value.kind == UpdateErrorKind.COLUMN_NOT_FOUND


def test_update_fields_remote_failure() -> None:
    store = _store(lambda r: httpx.Response(200, json={"ok": False}))
    with pytest.raises(UpdateError) as exc:
        asyncio.run(store.update_fields("Checklist", "1.1.1", {"impact": "4"}))
    assert exc.value.kind == UpdateErrorKind.REMOTE
    assert exc.value.message == "updateFields failed"


def test_update_fields_transport_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timeout", request=request)

    with pytest.raises(UpdateError) as exc:
        asyncio.run(_store(handler).update_fields("Checklist", "1.1.1", {"impact": "4"}))
    assert exc.value.kind == UpdateErrorKind.TRANSPORT


def test_is_column_not_found() -> None:
    assert is_column_not_found("Column not found: x")
    assert not is_column_not_found("quota exceeded")
