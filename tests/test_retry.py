"""Tests for retry logic."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from hygiene.retry import retry_async


def _status_error(code: int, headers: dict | None = None) -> httpx.HTTPStatusError:
    request = httpx.Request("GET", "https://example.com/feed")
    response = httpx.Response(code, request=request, headers=headers or {})
    return httpx.HTTPStatusError(f"HTTP {code}", request=request, response=response)


@pytest.mark.asyncio
async def test_retry_succeeds_on_first_try():
    """No retries needed when function succeeds."""
    call_count = 0

    async def fn():
        nonlocal call_count
        call_count += 1
        return "ok"

    result = await retry_async(fn)
    assert result == "ok"
    assert call_count == 1


@pytest.mark.asyncio
async def test_retry_succeeds_after_transient_failure():
    """Retries on transient error and eventually succeeds."""
    call_count = 0

    async def fn():
        nonlocal call_count
        call_count += 1
        if call_count < 3:
            raise httpx.ConnectError("transient")
        return "ok"

    result = await retry_async(fn, max_retries=3, base_delay=0.01)
    assert result == "ok"
    assert call_count == 3


@pytest.mark.asyncio
async def test_retry_exhausts_retries():
    """Raises after max retries exhausted."""

    async def fn():
        raise TimeoutError("always fails")

    with pytest.raises(TimeoutError, match="always fails"):
        await retry_async(fn, max_retries=2, base_delay=0.01)


@pytest.mark.asyncio
async def test_retry_does_not_retry_non_transient():
    """Non-retryable exceptions are raised immediately."""
    call_count = 0

    async def fn():
        nonlocal call_count
        call_count += 1
        raise ValueError("bad input")

    with pytest.raises(ValueError, match="bad input"):
        await retry_async(fn, max_retries=3, base_delay=0.01)
    assert call_count == 1


@pytest.mark.asyncio
async def test_retry_does_not_retry_client_errors():
    call_count = 0

    async def fn():
        nonlocal call_count
        call_count += 1
        raise _status_error(404)

    with pytest.raises(httpx.HTTPStatusError):
        await retry_async(fn, max_retries=3, base_delay=0.01)
    assert call_count == 1


@pytest.mark.asyncio
@patch("hygiene.retry.asyncio.sleep", new_callable=AsyncMock)
async def test_retry_honours_retry_after(mock_sleep):
    responses = [_status_error(429, {"retry-after": "7"}), "ok"]

    async def fn():
        item = responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    assert await retry_async(fn, max_retries=2, base_delay=0.01) == "ok"
    mock_sleep.assert_awaited_once_with(7.0)
