"""Redis 연결 관리 (Checklist 스냅샷 캐시 전용). Redis가 없으면 인메모리 캐시로 기동."""
import logging
import time
from typing import Dict, Optional, Tuple

import redis
from riskflow.core.config import settings

logger = logging.getLogger(__name__)


class _MemoryRedis:
    """스냅샷 캐시가 쓰는 get/setex/delete만 흉내내는 프로세스 내 캐시."""

    def __init__(self):
        self._entries: Dict[str, Tuple[float, str]] = {}

    def ping(self) -> bool:
        return False  # health: 캐시 미연결

    def get(self, key: str) -> Optional[str]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if time.time() > expires_at:
            self._entries.pop(key, None)
            return None
        return value

    def setex(self, key: str, ttl_seconds: int, value: str) -> bool:
        self._entries[key] = (time.time() + ttl_seconds, value)
        return True

    def delete(self, *keys: str) -> int:
        return sum(1 for k in keys if self._entries.pop(k, None) is not None)

    def close(self) -> None:
        self._entries.clear()


class RedisClient:
    """프로세스 단위 캐시 클라이언트."""

    _client = None

    @classmethod
    def get_client(cls):
        if cls._client is None:
            cls._client = cls._connect()
        return cls._client

    @staticmethod
    def _connect():
        try:
            client = redis.from_url(
                settings.REDIS_URL,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
            )
            client.ping()
            return client
        except (redis.RedisError, ValueError) as e:
            logger.warning("redis unavailable, using in-memory snapshot cache: %s", e)
            return _MemoryRedis()

    @classmethod
    def use_memory(cls):
        """테스트·오프라인 실행용."""
        cls._client = _MemoryRedis()
        return cls._client

    @classmethod
    def ping(cls) -> bool:
        try:
            return bool(cls.get_client().ping())
        except redis.RedisError as e:
            logger.warning("redis ping failed: %s", e)
            return False

    @classmethod
    def close(cls) -> None:
        if cls._client is not None:
            cls._client.close()
            cls._client = None


def get_redis():
    return RedisClient.get_client()
