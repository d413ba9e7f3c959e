from .redis_cache import (
    DEFAULT_TTL,
    CacheLookup,
    CacheStatus,
    KeyValueStore,
    ResultCache,
    connect_redis,
    decode_papers,
    encode_papers,
)

__all__ = [
    "DEFAULT_TTL",
    "CacheLookup",
    "CacheStatus",
    "KeyValueStore",
    "ResultCache",
    "connect_redis",
    "decode_papers",
    "encode_papers",
]
