# src/pipeline/limiter.py — v1
"""Bounded-concurrency map over a list of items."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


async def map_concurrent(
    items: Sequence[T],
    fn: Callable[[T], Awaitable[R]],
    concurrency: int,
) -> list[R | None]:
    """Apply *fn* to every item with at most *concurrency* calls in flight.

    Results come back in input order whatever the completion order. A call
    that raises leaves ``None`` in its slot; the others keep running.

    Raises:
        ValueError: If concurrency < 1.
    """
    if concurrency < 1:
        raise ValueError("concurrency must be >= 1")
    if not items:
        return []

    semaphore = asyncio.Semaphore(concurrency)

    async def run(index: int, item: T) -> R | None:
        async with semaphore:
            try:
                return await fn(item)
            except Exception as e:
                logger.warning("Task %d failed: %s", index, e)
                return None

    return list(await asyncio.gather(*(run(i, item) for i, item in enumerate(items))))
