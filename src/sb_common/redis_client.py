"""Redis client factory: balance read cache and post-commit event fan-out.

Redis is never the system of record. Balances are always derivable from
ledger_entries in PostgreSQL, and every Redis call site tolerates failure.
The client is therefore built with short socket timeouts so a stalled Redis
turns into a fast cache miss instead of holding a request open.
"""

import logging

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from config.settings import settings

logger = logging.getLogger(__name__)

_redis_pool: aioredis.Redis | None = None


def _build_client() -> aioredis.Redis:
    return aioredis.from_url(
        settings.REDIS_URL,
        decode_responses=True,
        socket_timeout=settings.REDIS_SOCKET_TIMEOUT_SECONDS,
        socket_connect_timeout=settings.REDIS_SOCKET_TIMEOUT_SECONDS,
        health_check_interval=settings.REDIS_HEALTH_CHECK_INTERVAL_SECONDS,
    )


async def get_redis() -> aioredis.Redis:
    """Get or create the shared Redis client."""
    global _redis_pool  # noqa: PLW0603
    if _redis_pool is None:
        _redis_pool = _build_client()
    return _redis_pool


async def ping_redis() -> bool:
    """True when Redis answers PING. Failures are logged, never raised."""
    try:
        redis = await get_redis()
        return bool(await redis.ping())
    except (RedisError, OSError) as exc:
        logger.warning("Redis ping failed: %s", exc)
        return False


async def close_redis() -> None:
    """Close the shared client; a later get_redis() builds a fresh one."""
    global _redis_pool  # noqa: PLW0603
    if _redis_pool is not None:
        client, _redis_pool = _redis_pool, None
        await client.aclose()
