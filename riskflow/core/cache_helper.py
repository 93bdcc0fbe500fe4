"""Redis 캐시 헬퍼: Checklist 스냅샷(checklist_cache_v1) 저장/조회.

재조회 완료 전 즉시 표시용. 손상된 캐시는 무시하고 None 반환 (로딩 상태로 폴백).
"""
import json
import logging
from typing import List, Optional

from riskflow.core.config import settings
from riskflow.core.redis import get_redis
from riskflow.models.schemas import ChecklistRecord

logger = logging.getLogger(__name__)


def load_snapshot(key: Optional[str] = None) -> Optional[List[ChecklistRecord]]:
    """캐시된 레코드 목록. 없거나 손상되었으면 None."""
    cache_key = key or settings.SNAPSHOT_CACHE_KEY
    try:
        raw = get_redis().get(cache_key)
    except Exception as e:
        logger.warning("snapshot cache read failed: %s", e)
        return None
    if raw is None:
        return None
    try:
        data = json.loads(raw)
        if not isinstance(data, list):
            raise ValueError("snapshot is not a list")
        return [ChecklistRecord(**row) for row in data]
    except (TypeError, ValueError) as e:
        # pydantic.ValidationError도 ValueError 하위 클래스
        logger.warning("snapshot cache corrupt, ignored: %s", e)
        return None


def save_snapshot(records: List[ChecklistRecord], key: Optional[str] = None,
                  ttl_seconds: Optional[int] = None) -> bool:
    """레코드 목록을 JSON 직렬화해 Redis에 저장."""
    cache_key = key or settings.SNAPSHOT_CACHE_KEY
    ttl = ttl_seconds or settings.SNAPSHOT_CACHE_TTL
    try:
        payload = json.dumps([r.model_dump() for r in records], ensure_ascii=False)
        get_redis().setex(cache_key, ttl, payload)
        return True
    except Exception as e:
        logger.warning("snapshot cache write failed: %s", e)
        return False


def clear_snapshot(key: Optional[str] = None) -> None:
    try:
        get_redis().delete(key or settings.SNAPSHOT_CACHE_KEY)
    except Exception as e:
        logger.warning("snapshot cache clear failed: %s", e)
