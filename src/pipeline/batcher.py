# src/pipeline/batcher.py — v1
"""Group a lazy item stream into fixed-size batches.

Holds at most one batch in memory, so it provides backpressure against a
potentially unbounded URL stream: the source is only pulled when the
consumer asks for the next batch.
"""

from __future__ import annotations

from typing import AsyncIterable, AsyncIterator, Iterable, TypeVar

T = TypeVar("T")


async def batched(
    source: AsyncIterable[T] | Iterable[T], size: int,
) -> AsyncIterator[list[T]]:
    """Yield lists of *size* items in source order; the last may be shorter.

    Errors raised by *source* propagate unchanged.

    Raises:
        ValueError: If size < 1.
    """
    if size < 1:
        raise ValueError("batch size must be >= 1")

    batch: list[T] = []
    async for item in _aiter(source):
        batch.append(item)
        if len(batch) == size:
            yield batch
            batch = []
    if batch:
        yield batch


async def _aiter(source: AsyncIterable[T] | Iterable[T]) -> AsyncIterator[T]:
    if hasattr(source, "__aiter__"):
        async for item in source:  # type: ignore[union-attr]
            yield item
    else:
        for item in source:  # type: ignore[union-attr]
            yield item


async def take(source: AsyncIterable[T], limit: int | None) -> AsyncIterator[T]:
    """Yield at most *limit* items from *source* (all of them when None)."""
    if limit is None:
        async for item in source:
            yield item
        return
    if limit <= 0:
        return
    count = 0
    async for item in source:
        yield item
        count += 1
        if count >= limit:
            return
