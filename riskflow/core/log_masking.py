"""
로그 마스킹: 시트 API 키·Apps Script 배포 ID 등 민감 정보가 로그에 출력되지 않도록 필터.
"""
import re
import logging
from typing import Optional

from riskflow.core.config import settings

# 마스킹할 패턴 (정규식)
SECRET_PATTERNS: list[tuple[re.Pattern, str]] = [
    # https://script.google.com/macros/s/<deployment id>/exec
    (re.compile(r'(script\.google\.com/macros/s/)[a-zA-Z0-9\-_]{10,}', re.I), r'\1****'),
    (re.compile(r'redis://[^@\s]+@[^\s]+', re.I), 'redis://****@****'),
]

# 키=값 형태 (값만 마스킹). 시트 API는 key= 쿼리 파라미터로 인증
SECRET_KEY_VALUE_PATTERN = re.compile(
    r'(api[_-]?key|key|password|secret|token)\s*[:=]\s*["\']?([^"\'&\s]{4,})', re.I
)
MASK_CHAR = "*"


def mask_secrets(message: str) -> str:
    """문자열 내 민감 패턴을 마스킹한 복사본 반환."""
    if not message or not isinstance(message, str):
        return message
    out = message
    if settings.SHEETS_API_KEY:
        out = out.replace(settings.SHEETS_API_KEY, "****")
    for pattern, replacement in SECRET_PATTERNS:
        out = pattern.sub(replacement, out)

    def _repl(m: re.Match) -> str:
        prefix = m.group(1)
        val = m.group(2)
        if len(val) <= 8:
            masked = MASK_CHAR * len(val)
        else:
            masked = val[:2] + MASK_CHAR * (len(val) - 4) + val[-2:]
        return f"{prefix}={masked}"

    out = SECRET_KEY_VALUE_PATTERN.sub(_repl, out)
    return out


class SecretMaskingFilter(logging.Filter):
    """logging.Filter: LogRecord.msg와 args 내 문자열을 마스킹."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = mask_secrets(str(record.msg))
        if record.args:
            if isinstance(record.args, dict):
                record.args = {k: mask_secrets(v) if isinstance(v, str) else v for k, v in record.args.items()}
            elif isinstance(record.args, tuple):
                record.args = tuple(mask_secrets(a) if isinstance(a, str) else a for a in record.args)
        return True


def install_log_masking(logger: Optional[logging.Logger] = None) -> None:
    """루트 로거(또는 지정 로거)와 그 핸들러에 SecretMaskingFilter 추가.

    하위 로거에서 전파된 레코드는 로거 필터를 거치지 않으므로 핸들러에도 설치한다.
    """
    target = logger or logging.getLogger()
    for filterer in [target, *target.handlers]:
        if not any(isinstance(f, SecretMaskingFilter) for f in filterer.filters):
            filterer.addFilter(SecretMaskingFilter())
