"""
Retry Manager for the domain resolver.

Wraps a single network call with bounded attempts and linearly increasing
delays. Used identically by the RDAP and WHOIS clients; each client decides
what counts as a failure by raising.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

from .config import RetryConfig

T = TypeVar("T")

SleepFunc = Callable[[float], Awaitable[None]]


class RetryManager:
    """
    Manages retry logic with linear backoff.

    The delay before attempt n+1 is base_delay * n, capped at max_delay, so
    repeated failures ease off rate-sensitive servers without synchronized
    retry storms.
    """

    def __init__(
        self,
        config: Optional[RetryConfig] = None,
        sleep: Optional[SleepFunc] = None,
    ) -> None:
        """
        Initialize the retry manager.

        Args:
            config: Retry configuration with attempt ceiling and delays
            sleep: Awaitable sleep function (defaults to asyncio.sleep)
        """
        self._config = config or RetryConfig()
        self._sleep = sleep or asyncio.sleep

    @property
    def max_attempts(self) -> int:
        return max(1, self._config.max_attempts)

    def _calculate_delay(self, attempt: int) -> float:
        """
        Calculate wait time after a failed attempt.

        Args:
            attempt: Number of the attempt that just failed (1-indexed)

        Returns:
            The delay in seconds before the next attempt
        """
        delay = self._config.base_delay_seconds * attempt
        return min(delay, self._config.max_delay_seconds)

    async def execute_with_retry(
        self,
        operation: Callable[[], Awaitable[T]],
        is_retryable: Optional[Callable[[Exception], bool]] = None,
    ) -> T:
        """
        Execute an operation with retry logic and linear backoff.

        Args:
            operation: The async operation to execute
            is_retryable: Optional predicate; errors for which it returns
                False are raised immediately. All errors are retryable
                when omitted.

        Returns:
            The result of the first successful attempt

        Raises:
            Exception: The last error raised once attempts are exhausted
        """
        attempt = 0
        while True:
            attempt += 1
            try:
                return await operation()
            except Exception as e:
                if attempt >= self.max_attempts:
                    raise
                if is_retryable is not None and not is_retryable(e):
                    raise

            await self._sleep(self._calculate_delay(attempt))
