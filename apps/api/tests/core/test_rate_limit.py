"""
Tests for rate limiting.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from app.core import rate_limit
from app.core.rate_limit import check_rate_limit


@pytest.fixture(autouse=True)
def clear_memory_store():
    rate_limit._memory_store.clear()
    yield
    rate_limit._memory_store.clear()


def _redis_with_count(count):
    redis = MagicMock()
    pipe = MagicMock()
    pipe.execute = AsyncMock(return_value=[0, count, 1, True])
    redis.pipeline.return_value = pipe
    return redis


class TestMemoryFallback:
    @pytest.mark.asyncio
    async def test_allows_up_to_limit(self):
        with patch("app.core.rate_limit.redis_core.get_redis", AsyncMock(return_value=None)):
            results = [await check_rate_limit("register:a", 2, 60) for _ in range(3)]

        assert results == [True, True, False]

    @pytest.mark.asyncio
    async def test_keys_are_independent(self):
        with patch("app.core.rate_limit.redis_core.get_redis", AsyncMock(return_value=None)):
            assert await check_rate_limit("register:a", 1, 60)
            assert await check_rate_limit("register:b", 1, 60)
            assert not await check_rate_limit("register:a", 1, 60)


class TestRedis:
    @pytest.mark.asyncio
    async def test_under_limit(self):
        redis = _redis_with_count(1)
        with patch("app.core.rate_limit.redis_core.get_redis", AsyncMock(return_value=redis)):
            assert await check_rate_limit("admin:release:1", 5, 60)

    @pytest.mark.asyncio
    async def test_over_limit(self):
        redis = _redis_with_count(5)
        with patch("app.core.rate_limit.redis_core.get_redis", AsyncMock(return_value=redis)):
            assert not await check_rate_limit("admin:release:1", 5, 60)

    @pytest.mark.asyncio
    async def test_redis_error_falls_back_to_memory(self):
        redis = MagicMock()
        pipe = MagicMock()
        pipe.execute = AsyncMock(side_effect=RedisConnectionError("down"))
        redis.pipeline.return_value = pipe

        with patch("app.core.rate_limit.redis_core.get_redis", AsyncMock(return_value=redis)):
            assert await check_rate_limit("admin:release:1", 1, 60)
            assert not await check_rate_limit("admin:release:1", 1, 60)
