"""Balance read-through cache.

  - Cache key: f"balance:{user_id}", short TTL (BALANCE_CACHE_TTL_SECONDS)
  - Read: cache-aside (check cache, then DB on miss, then populate cache)
  - Write: DB commit first, then invalidate

Only the display path (GET /wallet/balance) reads through the cache. Balance
checks that gate a debit always read PostgreSQL inside the debiting
transaction. Every Redis failure degrades to a cache miss.

Invalidation bumps a per-user generation counter (f"balance_gen:{user_id}")
and cached values are stored as "<generation>:<balance>". A reader takes the
generation before its DB read and writes it with the value; if a commit
invalidated in between, the stored generation is stale and get() treats the
entry as a miss. A slow reader therefore cannot put a pre-commit balance back.
"""

import logging

from redis.exceptions import RedisError

from config.settings import settings
from src.sb_common.redis_client import get_redis

logger = logging.getLogger(__name__)

# Outlives any cached value by a wide margin; an expired counter reads as 0,
# which still mismatches every value written under a later generation.
_GENERATION_TTL_SECONDS = 3600


def balance_key(user_id: str) -> str:
    return f"balance:{user_id}"


def generation_key(user_id: str) -> str:
    return f"balance_gen:{user_id}"


def _parse_entry(raw: str | None) -> tuple[int, int] | None:
    if raw is None:
        return None
    generation, sep, balance = raw.partition(":")
    if not sep:
        return None
    try:
        return int(generation), int(balance)
    except ValueError:
        return None


class BalanceCache:
    def __init__(self, ttl_seconds: int | None = None) -> None:
        self._ttl = ttl_seconds if ttl_seconds is not None else settings.BALANCE_CACHE_TTL_SECONDS

    async def generation(self, user_id: str) -> int | None:
        """Current generation, or None when Redis is unavailable (skip caching)."""
        try:
            redis = await get_redis()
            raw = await redis.get(generation_key(user_id))
        except (RedisError, OSError) as exc:
            logger.warning("Balance cache generation read failed for %s: %s", user_id, exc)
            return None
        try:
            return int(raw) if raw is not None else 0
        except ValueError:
            return None

    async def get(self, user_id: str) -> int | None:
        try:
            redis = await get_redis()
            raw, current = await redis.mget(balance_key(user_id), generation_key(user_id))
        except (RedisError, OSError) as exc:
            logger.warning("Balance cache read failed for %s: %s", user_id, exc)
            return None
        entry = _parse_entry(raw)
        if entry is None:
            return None
        generation, balance = entry
        try:
            if generation != (int(current) if current is not None else 0):
                return None
        except ValueError:
            return None
        return balance

    async def set(self, user_id: str, balance: int, generation: int) -> None:
        try:
            redis = await get_redis()
            await redis.set(balance_key(user_id), f"{generation}:{balance}", ex=self._ttl)
        except (RedisError, OSError) as exc:
            logger.warning("Balance cache write failed for %s: %s", user_id, exc)

    async def invalidate(self, *user_ids: str) -> None:
        unique = list(dict.fromkeys(user_ids))
        if not unique:
            return
        try:
            redis = await get_redis()
            for user_id in unique:
                key = generation_key(user_id)
                await redis.incr(key)
                await redis.expire(key, _GENERATION_TTL_SECONDS)
            await redis.delete(*[balance_key(u) for u in unique])
        except (RedisError, OSError) as exc:
            logger.warning("Balance cache invalidation failed (%d keys): %s", len(unique), exc)
