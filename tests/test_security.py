from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import HTTPException, status
from redis.exceptions import ConnectionError as RedisConnectionError

from src.core.security import client_key, throttle_writes


def _request(headers: dict[str, str] | None = None, host: str | None = "10.0.0.1") -> MagicMock:
    request = MagicMock()
    request.headers = headers or {}
    request.client = MagicMock(host=host) if host else None
    return request


def test_client_key_ignores_forwarded_for_by_default() -> None:
    request = _request({"x-forwarded-for": "203.0.113.5, 10.0.0.2"})
    assert client_key(request) == "10.0.0.1"


def test_client_key_uses_forwarded_for_behind_trusted_proxy() -> None:
    request = _request({"x-forwarded-for": "203.0.113.5, 10.0.0.2"})

    with patch("src.core.security.settings") as mock_settings:
        mock_settings.trust_forwarded_for = True
        assert client_key(request) == "203.0.113.5"


def test_client_key_falls_back_to_peer() -> None:
    assert client_key(_request()) == "10.0.0.1"
    assert client_key(_request(host=None)) == "anonymous"


@pytest.mark.asyncio
async def test_first_write_starts_window() -> None:
    redis = AsyncMock()
    redis.incr.return_value = 1

    result = await throttle_writes(_request(), redis=redis)

    assert result is None
    redis.incr.assert_awaited_once_with("throttle:writes:10.0.0.1")
    redis.expire.assert_awaited_once_with("throttle:writes:10.0.0.1", 60)


@pytest.mark.asyncio
async def test_over_limit_is_rejected() -> None:
    redis = AsyncMock()

    with patch("src.core.security.settings") as mock_settings:
        mock_settings.write_rate_limit = 2
        mock_settings.write_rate_window_seconds = 30
        redis.incr.return_value = 3

        with pytest.raises(HTTPException) as exc_info:
            await throttle_writes(_request(), redis=redis)

    assert exc_info.value.status_code == status.HTTP_429_TOO_MANY_REQUESTS
    assert exc_info.value.headers == {"Retry-After": "30"}
    redis.expire.assert_not_called()


@pytest.mark.asyncio
async def test_redis_outage_allows_request() -> None:
    redis = AsyncMock()
    redis.incr.side_effect = RedisConnectionError("down")

    result = await throttle_writes(_request(), redis=redis)

    assert result is None


@pytest.mark.asyncio
async def test_rotating_forwarded_for_shares_one_bucket() -> None:
    redis = AsyncMock()
    redis.incr.return_value = 1

    for spoofed in ("198.51.100.1", "198.51.100.2"):
        await throttle_writes(_request({"x-forwarded-for": spoofed}), redis=redis)

    keys = {call.args[0] for call in redis.incr.await_args_list}
    assert keys == {"throttle:writes:10.0.0.1"}
