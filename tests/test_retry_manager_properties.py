"""
Property-based tests for the Retry Manager module.

Uses Hypothesis for property-based testing of attempt ceilings and the
linear backoff schedule.
"""

import asyncio

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from domain_resolver.config import RetryConfig
from domain_resolver.exceptions import LookupUnavailableError, NetworkError
from domain_resolver.retry_manager import RetryManager


class RecordingSleep:
    """Sleep replacement that records requested delays without waiting."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class FlakyOperation:
    """Fails a fixed number of times, then returns a value."""

    def __init__(self, failures: int, value: str = "ok") -> None:
        self.failures = failures
        self.value = value
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise NetworkError(code="server_error", message=f"failure {self.calls}")
        return self.value


class TestRetryScheduleProperty:
    """Attempt counting and backoff delays."""

    def test_two_failures_then_success(self) -> None:
        sleep = RecordingSleep()
        manager = RetryManager(RetryConfig(max_attempts=3, base_delay_seconds=1.0), sleep=sleep)
        operation = FlakyOperation(failures=2)

        result = asyncio.run(manager.execute_with_retry(operation))

        assert result == "ok"
        assert operation.calls == 3
        assert sleep.delays == [1.0, 2.0]

    def test_exhausted_attempts_reraise_last_error(self) -> None:
        sleep = RecordingSleep()
        manager = RetryManager(RetryConfig(max_attempts=3, base_delay_seconds=1.0), sleep=sleep)
        operation = FlakyOperation(failures=10)

        with pytest.raises(NetworkError) as exc_info:
            asyncio.run(manager.execute_with_retry(operation))

        assert exc_info.value.message == "failure 3"
        assert operation.calls == 3
        # No sleep after the final attempt
        assert sleep.delays == [1.0, 2.0]

    @given(
        max_attempts=st.integers(min_value=1, max_value=8),
        failures=st.integers(min_value=0, max_value=10),
        base_delay=st.floats(min_value=0.0, max_value=5.0, allow_nan=False),
    )
    @settings(max_examples=100, deadline=None)
    def test_attempts_never_exceed_ceiling(
        self,
        max_attempts: int,
        failures: int,
        base_delay: float,
    ) -> None:
        """
        *For any* ceiling and failure count, the operation SHALL be called
        min(failures + 1, max_attempts) times, with one delay between each
        pair of consecutive attempts.
        """
        sleep = RecordingSleep()
        config = RetryConfig(max_attempts=max_attempts, base_delay_seconds=base_delay)
        manager = RetryManager(config, sleep=sleep)
        operation = FlakyOperation(failures=failures)

        async def run() -> bool:
            try:
                await manager.execute_with_retry(operation)
            except NetworkError:
                return False
            return True

        succeeded = asyncio.run(run())

        expected_calls = min(failures + 1, max_attempts)
        assert operation.calls == expected_calls
        assert succeeded == (failures < max_attempts)
        assert len(sleep.delays) == expected_calls - 1

    @given(
        base_delay=st.floats(min_value=0.0, max_value=10.0, allow_nan=False),
        max_delay=st.floats(min_value=0.0, max_value=30.0, allow_nan=False),
        attempt=st.integers(min_value=1, max_value=20),
    )
    @settings(max_examples=100)
    def test_delay_is_linear_and_capped(self, base_delay: float, max_delay: float, attempt: int) -> None:
        manager = RetryManager(RetryConfig(base_delay_seconds=base_delay, max_delay_seconds=max_delay))

        assert manager._calculate_delay(attempt) == min(base_delay * attempt, max_delay)

    def test_non_positive_ceiling_still_attempts_once(self) -> None:
        manager = RetryManager(RetryConfig(max_attempts=0), sleep=RecordingSleep())
        operation = FlakyOperation(failures=0)

        assert asyncio.run(manager.execute_with_retry(operation)) == "ok"
        assert manager.max_attempts == 1
        assert operation.calls == 1


class TestRetryablePredicateProperty:
    """Errors the caller marks as permanent are not retried."""

    def test_non_retryable_error_raises_immediately(self) -> None:
        sleep = RecordingSleep()
        manager = RetryManager(RetryConfig(max_attempts=5), sleep=sleep)
        calls = 0

        async def operation() -> str:
            nonlocal calls
            calls += 1
            raise LookupUnavailableError(code="not_installed", message="whois executable not found")

        with pytest.raises(LookupUnavailableError):
            asyncio.run(manager.execute_with_retry(
                operation,
                is_retryable=lambda e: not isinstance(e, LookupUnavailableError),
            ))

        assert calls == 1
        assert sleep.delays == []

    def test_retryable_errors_use_full_budget(self) -> None:
        sleep = RecordingSleep()
        manager = RetryManager(RetryConfig(max_attempts=4, base_delay_seconds=0.5), sleep=sleep)
        operation = FlakyOperation(failures=3)

        result = asyncio.run(manager.execute_with_retry(
            operation,
            is_retryable=lambda e: isinstance(e, NetworkError),
        ))

        assert result == "ok"
        assert operation.calls == 4
        assert sleep.delays == [0.5, 1.0, 1.5]
