"""감사 결과 캐시 유틸리티(Audit report cache utilities)."""
from __future__ import annotations

import json
import threading
from typing import Any, Dict, Iterable, Optional

import redis

from .config import get_settings
from .logger import get_logger

logger = get_logger(__name__)
_redis_client: Optional[redis.Redis] = None
_lock = threading.Lock()


def get_redis() -> redis.Redis:
    """Redis 클라이언트 반환(Return the shared redis client)."""

    global _redis_client
    if _redis_client is None:
        with _lock:
            if _redis_client is None:
                settings = get_settings()
                logger.info("Connecting to Redis")
                _redis_client = redis.Redis.from_url(
                    settings.redis_url,
                    encoding="utf-8",
                    decode_responses=True,
                )
    return _redis_client


def close_redis() -> None:
    """Redis 연결 종료(Close redis connection)."""

    global _redis_client
    if _redis_client is not None:
        _redis_client.close()
        _redis_client = None


class ReportCache:
    """프로세스 메모리 + Redis 2단 캐시(In-process cache backed by optional redis).

    The in-process layer is always active so repeated runs in one process do not
    ask the audit service twice for the same package. The redis layer is used
    only when ``DA_ENABLE_CACHE`` is set and is switched off on the first error.
    """

    def __init__(self, namespace: str = "ossindex", ttl_seconds: Optional[int] = None) -> None:
        settings = get_settings()
        resolved_ttl = ttl_seconds if ttl_seconds is not None else settings.cache_ttl_seconds
        if resolved_ttl is not None and resolved_ttl <= 0:
            logger.warning("Invalid cache_ttl_seconds value: %s", resolved_ttl)
            resolved_ttl = None

        self._ttl_seconds = resolved_ttl
        self._namespace = namespace
        self._memory: Dict[str, Any] = {}
        self._redis_disabled = not settings.enable_cache
        if self._redis_disabled:
            logger.debug("Redis cache disabled via configuration; using in-memory cache only")

    def _build_key(self, key: str) -> str:
        return f"{self._namespace}:{key}"

    def get(self, key: str) -> Any:
        """캐시 값 조회(Get cached value if available)."""

        if key in self._memory:
            return self._memory[key]
        if self._redis_disabled:
            return None

        try:
            payload = get_redis().get(self._build_key(key))
        except redis.RedisError as exc:
            logger.info("Redis error during get for %s; disabling redis cache.", key)
            logger.debug("Redis get failure details", exc_info=exc)
            self._redis_disabled = True
            return None

        if payload is None:
            return None

        try:
            value = json.loads(payload)
        except json.JSONDecodeError:
            logger.warning("Failed to decode cache payload for %s", key)
            return None
        self._memory[key] = value
        return value

    def get_many(self, keys: Iterable[str]) -> Dict[str, Any]:
        """여러 키 조회, 적중한 항목만 반환(Return only the keys that hit)."""

        hits: Dict[str, Any] = {}
        for key in keys:
            value = self.get(key)
            if value is not None:
                hits[key] = value
        return hits

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        """캐시에 값 저장(Store value in cache)."""

        self._memory[key] = value
        if self._redis_disabled:
            return

        try:
            payload = json.dumps(value)
        except TypeError:
            logger.warning("Failed to serialize cache payload for %s", key)
            return

        ttl_seconds = ttl if ttl is not None else self._ttl_seconds
        try:
            get_redis().set(self._build_key(key), payload, ex=ttl_seconds)
        except redis.RedisError as exc:
            logger.info("Redis error during set for %s; disabling redis cache.", key)
            logger.debug("Redis set failure details", exc_info=exc)
            self._redis_disabled = True

    def close(self) -> None:
        """캐시 해제(Release in-process entries and the redis connection)."""

        self._memory.clear()
        if not self._redis_disabled:
            close_redis()
            self._redis_disabled = True
