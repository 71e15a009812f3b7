from __future__ import annotations

import base64
import binascii
import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional, Protocol

import redis
from pydantic import ValidationError

from currencyify.core.config import Settings
from currencyify.core.errors import CacheError
from currencyify.models.rates import RateRecord

"""Rate cache store.

Purpose:
    Keep RateRecords keyed by currency pair for a globally configured TTL so
    repeat lookups skip the remote provider.

Design:
    - CacheStore owns the serialization envelope: RateRecord -> JSON -> base64 text.
    - Backends only move opaque strings (get / set with TTL) and raise CacheError
      when the underlying store cannot be reached.
    - Lookups return a typed CacheLookup (hit / miss / unavailable). Decode
      failures count as a miss; backend failures as unavailable. Neither raises.
    - Writes are best-effort: a failed write is logged and reported as False.
"""

logger = logging.getLogger("currencyify.cache")


class CacheStatus(str, Enum):
    HIT = "hit"
    MISS = "miss"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class CacheLookup:
    status: CacheStatus
    record: Optional[RateRecord] = None

    @property
    def hit(self) -> bool:
        return self.status is CacheStatus.HIT


MISS = CacheLookup(CacheStatus.MISS)
UNAVAILABLE = CacheLookup(CacheStatus.UNAVAILABLE)


def encode_record(record: RateRecord) -> str:
    return base64.b64encode(record.model_dump_json().encode("utf-8")).decode("ascii")


def decode_record(payload: str) -> RateRecord:
    """Inverse of encode_record. Raises ValueError on any malformed envelope."""
    try:
        raw = base64.b64decode(payload.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as e:
        raise ValueError(f"invalid base64 cache payload: {e}") from e
    try:
        return RateRecord.model_validate_json(raw)
    except ValidationError as e:
        raise ValueError(f"invalid cached rate record: {e}") from e


class CacheBackend(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str, ttl_seconds: int) -> None: ...


@dataclass
class _CacheEntry:
    value: str
    expires_at: float


class InMemoryCacheBackend:
    """Per-process dict cache with monotonic-clock expiry."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: Dict[str, _CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() >= entry.expires_at:
                self._entries.pop(key, None)
                return None
            return entry.value

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        with self._lock:
            self._entries[key] = _CacheEntry(
                value=value, expires_at=self._clock() + ttl_seconds
            )

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


class RedisCacheBackend:
    def __init__(self, client: "redis.Redis"):
        self._client = client

    @classmethod
    def from_url(cls, url: str, socket_timeout: float) -> "RedisCacheBackend":
        client = redis.Redis.from_url(
            url,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
            decode_responses=False,
        )
        return cls(client)

    def get(self, key: str) -> Optional[str]:
        try:
            value = self._client.get(key)
        except redis.RedisError as e:
            raise CacheError(f"redis GET {key} failed: {e}") from e
        if isinstance(value, bytes):
            # Raises UnicodeDecodeError (a ValueError) for foreign payloads.
            return value.decode("utf-8")
        return value

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        try:
            ok = self._client.set(key, value, ex=ttl_seconds)
        except redis.RedisError as e:
            raise CacheError(f"redis SET {key} failed: {e}") from e
        if not ok:
            raise CacheError(f"redis SET {key} was not acknowledged")


def make_cache_backend(settings: Settings) -> CacheBackend:
    if settings.cache_backend == "redis":
        return RedisCacheBackend.from_url(
            settings.redis_url, settings.redis_socket_timeout_seconds
        )
    if settings.cache_backend == "memory":
        return InMemoryCacheBackend()
    raise ValueError(f"Unknown cache backend '{settings.cache_backend}'")


class CacheStore:
    """Typed RateRecord cache over an opaque string backend."""

    def __init__(self, backend: CacheBackend, ttl_seconds: int):
        if ttl_seconds <= 0:
            raise ValueError("cache ttl must be positive seconds")
        self._backend = backend
        self._ttl_seconds = ttl_seconds

    @property
    def ttl_seconds(self) -> int:
        return self._ttl_seconds

    def get(self, key: str) -> CacheLookup:
        try:
            payload = self._backend.get(key)
        except CacheError as e:
            logger.warning("cache unavailable for %s: %s", key, e)
            return UNAVAILABLE
        except ValueError as e:
            logger.warning("discarding undecodable cache entry %s: %s", key, e)
            return MISS
        if payload is None:
            logger.debug("cache miss for %s", key)
            return MISS
        try:
            record = decode_record(payload)
        except ValueError as e:
            logger.warning("discarding undecodable cache entry %s: %s", key, e)
            return MISS
        logger.debug("cache hit for %s", key)
        return CacheLookup(CacheStatus.HIT, record)

    def set(self, key: str, record: RateRecord) -> bool:
        try:
            self._backend.set(key, encode_record(record), self._ttl_seconds)
        except CacheError as e:
            logger.warning("failed to store %s in cache: %s", key, e)
            return False
        logger.debug("stored %s in cache (ttl=%ss)", key, self._ttl_seconds)
        return True


def pair_cache_key(base: str, code: str) -> str:
    return f"{base}-{code}"


def usd_cache_key(base: str, code: str) -> str:
    """Bare-code key used by the convert path, where the base is always USD."""
    return code


CacheKeyFn = Callable[[str, str], str]
