"""Tests for rate limit tracking."""

from __future__ import annotations

import time
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from repo_insights.github.rate_limit import MAX_WAIT_SECONDS, RateLimitMonitor


def _response(status_code: int = 200, headers: dict | None = None):
    resp = MagicMock(spec=httpx.Response)
    resp.status_code = status_code
    resp.headers = headers or {}
    return resp


def test_no_wait_without_headers():
    monitor = RateLimitMonitor()
    monitor.update(_response())
    assert monitor.remaining is None
    assert monitor.seconds_to_wait() == 0


def test_no_wait_above_threshold():
    monitor = RateLimitMonitor(threshold=10)
    monitor.update(
        _response(headers={"X-RateLimit-Remaining": "50", "X-RateLimit-Reset": str(time.time() + 60)})
    )
    assert monitor.remaining == 50
    assert monitor.seconds_to_wait() == 0


def test_wait_until_reset_when_low():
    now = 1_000_000.0
    monitor = RateLimitMonitor(threshold=10)
    monitor.update(
        _response(headers={"X-RateLimit-Remaining": "3", "X-RateLimit-Reset": str(now + 30)})
    )
    assert monitor.seconds_to_wait(now=now) == pytest.approx(31)


def test_wait_is_capped():
    now = 1_000_000.0
    monitor = RateLimitMonitor()
    monitor.update(
        _response(headers={"X-RateLimit-Remaining": "0", "X-RateLimit-Reset": str(now + 99_999)})
    )
    assert monitor.seconds_to_wait(now=now) == MAX_WAIT_SECONDS


def test_retry_after_on_secondary_limit():
    monitor = RateLimitMonitor()
    with patch("repo_insights.github.rate_limit.time.time", return_value=500.0):
        monitor.update(_response(403, {"Retry-After": "20"}))
    assert monitor.seconds_to_wait(now=500.0) == pytest.approx(20)


def test_retry_after_ignored_on_success():
    monitor = RateLimitMonitor()
    monitor.update(_response(200, {"Retry-After": "20"}))
    assert monitor.seconds_to_wait() == 0


@pytest.mark.asyncio
async def test_wait_if_needed_sleeps():
    monitor = RateLimitMonitor()
    monitor.seconds_to_wait = MagicMock(return_value=5.0)
    with patch("repo_insights.github.rate_limit.asyncio.sleep", new=AsyncMock()) as sleep:
        await monitor.wait_if_needed()
    sleep.assert_awaited_once_with(5.0)


@pytest.mark.asyncio
async def test_wait_if_needed_no_sleep():
    monitor = RateLimitMonitor()
    with patch("repo_insights.github.rate_limit.asyncio.sleep", new=AsyncMock()) as sleep:
        await monitor.wait_if_needed()
    sleep.assert_not_awaited()
