"""Shared Redis client: construction, ping and shutdown."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from config.settings import settings
from src.sb_common import redis_client


@pytest.fixture(autouse=True)
def _fresh_client(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(redis_client, "_redis_pool", None)


class TestGetRedis:
    async def test_built_once_with_timeouts(self) -> None:
        with patch("src.sb_common.redis_client.aioredis.from_url", return_value=MagicMock()) as from_url:
            first = await redis_client.get_redis()
            second = await redis_client.get_redis()
        assert first is second
        from_url.assert_called_once()
        kwargs = from_url.call_args.kwargs
        assert kwargs["decode_responses"] is True
        assert kwargs["socket_timeout"] == settings.REDIS_SOCKET_TIMEOUT_SECONDS
        assert kwargs["socket_connect_timeout"] == settings.REDIS_SOCKET_TIMEOUT_SECONDS
        assert kwargs["health_check_interval"] == settings.REDIS_HEALTH_CHECK_INTERVAL_SECONDS


class TestPing:
    async def test_up(self) -> None:
        fake = AsyncMock()
        fake.ping.return_value = True
        with patch("src.sb_common.redis_client.get_redis", return_value=fake):
            assert await redis_client.ping_redis() is True

    async def test_down(self) -> None:
        fake = AsyncMock()
        fake.ping.side_effect = RedisConnectionError("refused")
        with patch("src.sb_common.redis_client.get_redis", return_value=fake):
            assert await redis_client.ping_redis() is False


class TestClose:
    async def test_close_resets(self, monkeypatch: pytest.MonkeyPatch) -> None:
        fake = AsyncMock()
        monkeypatch.setattr(redis_client, "_redis_pool", fake)
        await redis_client.close_redis()
        fake.aclose.assert_awaited_once()
        assert redis_client._redis_pool is None

    async def test_close_without_client(self) -> None:
        await redis_client.close_redis()
        assert redis_client._redis_pool is None
