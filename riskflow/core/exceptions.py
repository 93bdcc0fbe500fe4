"""Error taxonomy for checklist workflow operations.

- ValidationError: 클라이언트 측 규칙 위반. 네트워크 호출 전에 발생.
- FetchError / UpdateError: 시트 백엔드 경계 오류. 드래프트는 보존되고 재시도 가능.
- ColumnNotFoundError: 클라이언트와 시트 스키마의 컬럼명 불일치 (별도 식별).
"""
from enum import Enum
from typing import Optional


class RiskflowError(Exception):
    """Base class for all riskflow errors."""


class ValidationError(RiskflowError):
    """Raised when a draft violates a required-field or range rule."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message

    def to_dict(self) -> dict:
        return {"field": self.field, "message": self.message}


class FetchError(RiskflowError):
    """Raised when reading a whole sheet fails (transport, parse or ok:false)."""


class UpdateErrorKind(str, Enum):
    """Why an updateFields call failed."""
    COLUMN_NOT_FOUND = "COLUMN_NOT_FOUND"
    TRANSPORT = "TRANSPORT"
    REMOTE = "REMOTE"


class UpdateError(RiskflowError):
    """Raised when a keyed partial update fails as a whole."""

    def __init__(self, message: str, kind: UpdateErrorKind = UpdateErrorKind.REMOTE):
        super().__init__(message)
        self.message = message
        self.kind = kind

    def to_dict(self) -> dict:
        return {"error": self.kind.value, "message": self.message}


class ColumnNotFoundError(UpdateError):
    """The remote sheet does not recognise one of the field names."""

    def __init__(self, message: str, column: Optional[str] = None):
        super().__init__(message, UpdateErrorKind.COLUMN_NOT_FOUND)
        self.column = column


class CommitInProgressError(RiskflowError):
    """A commit for this key is already in flight."""

    def __init__(self, key: str):
        super().__init__(f"저장 진행 중인 항목입니다: {key}")
        self.key = key


class UnknownRecordError(RiskflowError):
    """The key is not present in the current snapshot."""

    def __init__(self, key: str):
        super().__init__(f"존재하지 않는 통제 코드입니다: {key}")
        self.key = key
