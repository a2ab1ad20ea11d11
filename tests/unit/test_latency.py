"""Tests for latency strategies."""

import random
from unittest.mock import AsyncMock, patch

import pytest

from video_studio.services.latency import FixedLatency, NoLatency, UniformLatency


async def test_no_latency_returns_immediately():
    with patch("video_studio.services.latency.asyncio.sleep", new=AsyncMock()) as sleep:
        await NoLatency().wait()

    sleep.assert_awaited_once_with(0)


async def test_fixed_latency_sleeps_in_seconds():
    with patch("video_studio.services.latency.asyncio.sleep", new=AsyncMock()) as sleep:
        await FixedLatency(6000).wait()

    sleep.assert_awaited_once_with(6.0)


def test_fixed_latency_rejects_negative():
    with pytest.raises(ValueError):
        FixedLatency(-1)


def test_uniform_latency_stays_in_range():
    latency = UniformLatency(500, 1500, rng=random.Random(42))

    delays = [latency.next_delay_ms() for _ in range(200)]

    assert all(500 <= d <= 1500 for d in delays)


def test_uniform_latency_rejects_inverted_range():
    with pytest.raises(ValueError):
        UniformLatency(min_ms=100, max_ms=50)
