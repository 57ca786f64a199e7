from __future__ import annotations

import json
import logging
from typing import Any, Callable, Iterable, Mapping

import redis
from redis.exceptions import RedisError

from app.config import Settings
from app.errors import CacheError

logger = logging.getLogger(__name__)


def build_redis(settings: Settings) -> redis.Redis:
    return redis.Redis.from_url(settings.redis_url, decode_responses=True)


def _escape_glob(value: str) -> str:
    # SCAN MATCH glob: wrap metacharacters in a one-char class; redis also
    # treats backslash as an escape inside the class
    escaped = []
    for ch in value:
        if ch == "\\":
            escaped.append("[\\\\]")
        elif ch in "*?[":
            escaped.append(f"[{ch}]")
        else:
            escaped.append(ch)
    return "".join(escaped)


def _normalize_ttl(value: Any) -> int:
    try:
        ttl = int(value)
    except (TypeError, ValueError):
        ttl = 0
    return max(ttl, 0)


def _dumps(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def _loads(raw: Any) -> Any:
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except (TypeError, json.JSONDecodeError):
        return None


class RedisCacheStore:
    """
    JSON cache on top of a Redis client.

    ttl_sec=None means "use the store default"; 0 stores the key without expiry.
    """

    def __init__(self, client: Any, default_ttl_sec: int = 5, key_prefix: str = ""):
        self.client = client
        self.default_ttl_sec = _normalize_ttl(default_ttl_sec)
        self.key_prefix = key_prefix or ""

    @classmethod
    def from_settings(cls, client: Any, settings: Settings) -> "RedisCacheStore":
        return cls(client, default_ttl_sec=settings.cache_ttl_sec, key_prefix=settings.cache_key_prefix)

    # --- helpers ---
    def _key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    def _match(self, pattern: str) -> str:
        return f"{_escape_glob(self.key_prefix)}{pattern}"

    def _strip(self, key: str) -> str:
        if self.key_prefix and key.startswith(self.key_prefix):
            return key[len(self.key_prefix):]
        return key

    def _ttl(self, ttl_sec: int | None) -> int:
        if ttl_sec is None:
            return self.default_ttl_sec
        return _normalize_ttl(ttl_sec)

    def _write(self, target: Any, key: str, data: str, ttl: int) -> None:
        if ttl:
            target.setex(self._key(key), ttl, data)
        else:
            target.set(self._key(key), data)

    # --- single keys ---
    def get(self, key: str) -> Any:
        try:
            raw = self.client.get(self._key(key))
        except RedisError as exc:
            raise CacheError(f"cache get failed for {key!r}: {exc}") from exc
        return _loads(raw)

    def set(self, key: str, value: Any, ttl_sec: int | None = None) -> None:
        data = _dumps(value)
        try:
            self._write(self.client, key, data, self._ttl(ttl_sec))
        except RedisError as exc:
            raise CacheError(f"cache set failed for {key!r}: {exc}") from exc

    def delete(self, key: str) -> None:
        try:
            self.client.delete(self._key(key))
        except RedisError as exc:
            raise CacheError(f"cache delete failed for {key!r}: {exc}") from exc

    def ttl(self, key: str) -> int:
        try:
            return int(self.client.ttl(self._key(key)))
        except RedisError as exc:
            raise CacheError(f"cache ttl failed for {key!r}: {exc}") from exc

    # --- batches ---
    def get_many(self, keys: Iterable[str]) -> list[Any]:
        keys = list(keys)
        if not keys:
            return []
        try:
            raws = self.client.mget([self._key(k) for k in keys])
        except RedisError as exc:
            raise CacheError(f"cache mget failed: {exc}") from exc
        return [_loads(raw) for raw in raws]

    def set_many(self, items: Mapping[str, Any], ttl_sec: int | None = None) -> None:
        if not items:
            return
        ttl = self._ttl(ttl_sec)
        try:
            pipe = self.client.pipeline()
            for key, value in items.items():
                self._write(pipe, key, _dumps(value), ttl)
            pipe.execute()
        except RedisError as exc:
            raise CacheError(f"cache mset failed: {exc}") from exc

    def keys(self, pattern: str = "*") -> list[str]:
        try:
            return [self._strip(k) for k in self.client.scan_iter(match=self._match(pattern))]
        except RedisError as exc:
            raise CacheError(f"cache keys failed: {exc}") from exc

    def reset(self) -> None:
        try:
            if not self.key_prefix:
                self.client.flushdb()
                return
            batch = list(self.client.scan_iter(match=self._match("*")))
            if batch:
                self.client.delete(*batch)
        except RedisError as exc:
            raise CacheError(f"cache reset failed: {exc}") from exc

    # --- read-through ---
    def wrap(self, key: str, fn: Callable[[], Any], ttl_sec: int | None = None) -> Any:
        cached = self.get(key)
        if cached is not None:
            return cached
        value = fn()
        if value is not None:
            self.set(key, value, ttl_sec=ttl_sec)
        return value

    def ping(self) -> bool:
        try:
            return self.client.ping() is True
        except RedisError as exc:
            logger.debug("cache ping failed: %s", exc)
            return False
