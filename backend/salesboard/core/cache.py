"""Redis caching utilities with in-memory fallback for KPI aggregates."""

import asyncio
import fnmatch
import hashlib
import json
import time
from typing import Any, Dict, Optional, Tuple

import redis.asyncio as redis
from loguru import logger

from salesboard.core.config import settings

KPI_KEY_PREFIX = "kpi"

# Global Redis client (initialized on startup)
_redis_client: Optional[redis.Redis] = None
_redis_available: bool = False
_redis_probed: bool = False

# In-memory cache fallback (when Redis is unavailable)
# Structure: {key: (value, expiry_timestamp)}
_memory_cache: Dict[str, Tuple[Any, float]] = {}
_memory_cache_max_size: int = 1000


async def get_redis_client() -> Optional[redis.Redis]:
    """Get or create the Redis client; ``None`` when Redis is disabled or down."""
    global _redis_client, _redis_available, _redis_probed

    if not settings.REDIS_ENABLED:
        return None

    # Only probe once; an unreachable Redis stays skipped for the process lifetime
    if _redis_client is None and not _redis_probed:
        _redis_probed = True
        client = redis.Redis(
            host=settings.REDIS_HOST,
            port=settings.REDIS_PORT,
            db=settings.REDIS_DB,
            password=settings.REDIS_PASSWORD,
            decode_responses=True,
            socket_connect_timeout=0.5,
            socket_timeout=0.5,
        )
        try:
            await asyncio.wait_for(client.ping(), timeout=0.5)
        except (redis.RedisError, OSError, asyncio.TimeoutError) as exc:
            _redis_available = False
            logger.bind(error=str(exc)).warning("redis_unavailable_using_memory_cache")
            await client.aclose()
        else:
            _redis_client = client
            _redis_available = True
            logger.info("redis_connected")

    return _redis_client if _redis_available else None


async def close_redis_client() -> None:
    """Close Redis client connection."""
    global _redis_client, _redis_available, _redis_probed
    if _redis_client:
        await _redis_client.aclose()
    _redis_client = None
    _redis_available = False
    _redis_probed = False


def generate_cache_key(prefix: str, **kwargs: Any) -> str:
    """Generate a cache key from prefix and keyword arguments."""
    sorted_kwargs = sorted(kwargs.items())
    key_str = f"{prefix}:{json.dumps(sorted_kwargs, sort_keys=True, default=str)}"
    if len(key_str) > 200:
        key_str = f"{prefix}:{hashlib.sha256(key_str.encode()).hexdigest()}"
    return key_str


def _get_memory_cache(key: str) -> Optional[Any]:
    if key not in _memory_cache:
        return None

    value, expiry = _memory_cache[key]
    if expiry > 0 and time.time() > expiry:
        del _memory_cache[key]
        return None
    return value


def _set_memory_cache(key: str, value: Any, ttl: int) -> None:
    expiry = time.time() + ttl if ttl > 0 else 0

    # Evict the oldest 10% when full
    if len(_memory_cache) >= _memory_cache_max_size:
        for k in list(_memory_cache.keys())[: int(_memory_cache_max_size * 0.1)]:
            del _memory_cache[k]

    _memory_cache[key] = (value, expiry)


async def get_cache(key: str) -> Optional[Any]:
    """Get value from cache (Redis or in-memory fallback)."""
    client = await get_redis_client()

    if client:
        try:
            value = await asyncio.wait_for(client.get(key), timeout=0.1)
            if value:
                return json.loads(value)
        except (redis.RedisError, asyncio.TimeoutError) as exc:
            logger.bind(key=key, error=str(exc)).warning("cache_read_failed")

    return _get_memory_cache(key)


async def set_cache(key: str, value: Any, ttl: Optional[int] = None) -> None:
    """Store a JSON-serialisable value; Redis when available, memory always."""
    ttl = settings.KPI_CACHE_TTL_SEC if ttl is None else ttl
    client = await get_redis_client()

    if client:
        try:
            await client.setex(key, ttl, json.dumps(value))
        except (redis.RedisError, asyncio.TimeoutError) as exc:
            logger.bind(key=key, error=str(exc)).warning("cache_write_failed")

    _set_memory_cache(key, value, ttl)


async def clear_cache_pattern(pattern: str) -> int:
    """Clear all cache keys matching a glob pattern (Redis and in-memory)."""
    deleted_count = 0

    client = await get_redis_client()
    if client:
        try:
            keys = [key async for key in client.scan_iter(match=pattern)]
            if keys:
                deleted_count += await client.delete(*keys)
        except (redis.RedisError, asyncio.TimeoutError) as exc:
            logger.bind(pattern=pattern, error=str(exc)).warning("cache_clear_failed")

    for key in [k for k in _memory_cache if fnmatch.fnmatch(k, pattern)]:
        del _memory_cache[key]
        deleted_count += 1

    return deleted_count


def kpi_cache_key(scope: str, **kwargs: Any) -> str:
    return generate_cache_key(f"{KPI_KEY_PREFIX}:{scope}", **kwargs)


async def invalidate_kpis() -> int:
    """Drop every cached KPI aggregate after a revenue-affecting change."""
    cleared = await clear_cache_pattern(f"{KPI_KEY_PREFIX}:*")
    logger.bind(cleared=cleared).info("kpi_cache_invalidated")
    return cleared
