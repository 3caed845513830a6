"""
Concurrency-limited pipeline for the domain resolver.

Each protocol gets its own pipeline instance with its own ceiling, so slow
WHOIS lookups never consume RDAP slots and vice versa.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable, Sequence, TypeVar

T = TypeVar("T")
R = TypeVar("R")


class ConcurrencyLimitedPipeline:
    """
    Bounded-parallelism executor for independent lookups.

    At most `limit` operations are in flight at any moment. Completion order
    is unspecified; run() returns results aligned with its input items.
    """

    def __init__(self, limit: int, name: str = "pipeline") -> None:
        """
        Initialize the pipeline.

        Args:
            limit: Maximum number of concurrent operations (>= 1)
            name: Label used in logs
        """
        if limit < 1:
            raise ValueError(f"Concurrency limit must be at least 1, got {limit}")

        self._limit = limit
        self._name = name
        self._semaphore = asyncio.Semaphore(limit)
        self._in_flight = 0
        self._peak_in_flight = 0

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def name(self) -> str:
        return self._name

    @property
    def in_flight(self) -> int:
        return self._in_flight

    @property
    def peak_in_flight(self) -> int:
        """Highest number of simultaneous operations observed."""
        return self._peak_in_flight

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[None]:
        """
        Hold one slot for the duration of the block.

        Usage:
            async with pipeline.acquire():
                result = await lookup()
        """
        async with self._semaphore:
            self._in_flight += 1
            self._peak_in_flight = max(self._peak_in_flight, self._in_flight)
            try:
                yield
            finally:
                self._in_flight -= 1

    async def run(
        self,
        items: Sequence[T],
        operation: Callable[[T], Awaitable[R]],
    ) -> list[R]:
        """
        Run operation over every item within the concurrency ceiling.

        Args:
            items: Inputs, one operation per item
            operation: Async callable applied to each item

        Returns:
            Results in the same order as items
        """

        async def limited(item: T) -> R:
            async with self.acquire():
                return await operation(item)

        if not items:
            return []

        return list(await asyncio.gather(*(limited(item) for item in items)))
