# tests/unit/pipeline/test_limiter.py — v1
"""Tests for pipeline/limiter.py — order-preserving bounded concurrency."""

from __future__ import annotations

import asyncio

import pytest

from sitedigest.pipeline.limiter import map_concurrent


class TestMapConcurrent:
    @pytest.mark.asyncio
    async def test_preserves_input_order(self):
        async def slow_echo(x: int) -> int:
            await asyncio.sleep(0.01 * (5 - x))
            return x * 10

        assert await map_concurrent([0, 1, 2, 3, 4], slow_echo, 5) == [0, 10, 20, 30, 40]

    @pytest.mark.asyncio
    async def test_bounded_in_flight(self):
        in_flight = 0
        peak = 0

        async def work(x: int) -> int:
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return x

        result = await map_concurrent(list(range(20)), work, 3)
        assert result == list(range(20))
        assert peak == 3

    @pytest.mark.asyncio
    async def test_failure_leaves_empty_slot(self):
        async def work(x: int) -> int:
            if x == 1:
                raise ValueError("nope")
            return x

        assert await map_concurrent([0, 1, 2], work, 2) == [0, None, 2]

    @pytest.mark.asyncio
    async def test_empty(self):
        async def work(x):
            return x

        assert await map_concurrent([], work, 2) == []

    @pytest.mark.asyncio
    async def test_invalid_concurrency(self):
        async def work(x):
            return x

        with pytest.raises(ValueError):
            await map_concurrent([1], work, 0)
