"""Redis-backed result cache for compiled CORE queries."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import List, Optional, Protocol, Sequence, Union

import redis
from pydantic import TypeAdapter, ValidationError

from src.coreapi.errors import CacheCorrupt, CacheUnavailable
from src.coreapi.models import Paper

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(hours=24)

_PAPERS = TypeAdapter(List[Paper])

# Store failures we degrade on instead of failing the search.
STORE_ERRORS = (redis.exceptions.RedisError, OSError)


class KeyValueStore(Protocol):
    """The subset of ``redis.Redis`` the cache relies on."""

    def get(self, name: str) -> Optional[bytes]: ...

    def set(self, name: str, value: bytes, ex: Union[int, timedelta, None] = None) -> object: ...


class CacheStatus(enum.Enum):
    HIT = "hit"
    MISS = "miss"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class CacheLookup:
    status: CacheStatus
    papers: List[Paper] = field(default_factory=list)
    error: Optional[Exception] = None

    @property
    def hit(self) -> bool:
        return self.status is CacheStatus.HIT


MISS = CacheLookup(CacheStatus.MISS)


def encode_papers(papers: Sequence[Paper]) -> bytes:
    return _PAPERS.dump_json(list(papers), by_alias=True)


def decode_papers(key: str, payload: Union[bytes, str]) -> List[Paper]:
    try:
        return _PAPERS.validate_json(payload)
    except (ValidationError, ValueError) as exc:
        raise CacheCorrupt(key, str(exc)) from exc


class ResultCache:
    """
    Get/set wrapper over a Redis-like store.

    The store owns expiry; nothing is tracked in process. Lookups never raise:
    corrupt payloads count as a miss and store failures come back as
    ``CacheStatus.UNAVAILABLE`` so the caller can still go upstream.
    """

    def __init__(self, store: KeyValueStore, *, ttl: timedelta = DEFAULT_TTL) -> None:
        self.store = store
        self.ttl = ttl

    def get(self, key: str) -> CacheLookup:
        try:
            payload = self.store.get(key)
        except STORE_ERRORS as exc:
            logger.warning("Cache unavailable on get %s: %s", key, exc)
            return CacheLookup(CacheStatus.UNAVAILABLE, error=CacheUnavailable(str(exc)))

        if payload is None:
            logger.debug("Cache miss %s", key)
            return MISS

        try:
            papers = decode_papers(key, payload)
        except CacheCorrupt as exc:
            logger.warning("%s; refetching", exc)
            return MISS

        logger.debug("Cache hit %s (%d papers)", key, len(papers))
        return CacheLookup(CacheStatus.HIT, papers=papers)

    def set(self, key: str, papers: Sequence[Paper], ttl: Optional[timedelta] = None) -> None:
        """Store ``papers`` under ``key``, replacing any existing entry."""
        expiry = ttl if ttl is not None else self.ttl
        try:
            self.store.set(key, encode_papers(papers), ex=int(expiry.total_seconds()))
        except STORE_ERRORS as exc:
            raise CacheUnavailable(f"Cache set failed for {key!r}: {exc}") from exc


def connect_redis(
    *,
    host: str = "localhost",
    port: int = 6379,
    password: Optional[str] = None,
    db: int = 0,
    socket_timeout_s: float = 2.0,
    verify: bool = True,
) -> redis.Redis:
    """
    Build a pooled Redis client for the result cache.

    With ``verify`` the server is pinged once; an unreachable server is logged
    rather than raised because searches fall back to the upstream API.
    """
    client = redis.Redis(
        host=host,
        port=port,
        password=password,
        db=db,
        socket_timeout=socket_timeout_s,
        socket_connect_timeout=socket_timeout_s,
    )
    if verify:
        try:
            client.ping()
        except STORE_ERRORS as exc:
            logger.warning("Redis at %s:%s/%s is unreachable, searches will bypass the cache: %s", host, port, db, exc)
    return client
