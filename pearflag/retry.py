"""
Retry utility with a fixed delay between attempts and a per-attempt timeout.
"""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Optional, TypeVar

from pearflag.errors import ConfigurationError, PearFlagError, RequestTimeoutError

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Configuration for retry behavior."""

    retries: int = 3
    """Total number of attempts, the first one included."""

    delay_ms: int = 1000
    """Fixed delay between attempts in milliseconds."""

    def __post_init__(self):
        if not isinstance(self.retries, int) or self.retries < 1:
            raise ConfigurationError(f"Retries must be an integer >= 1, got {self.retries!r}")
        if not isinstance(self.delay_ms, (int, float)) or self.delay_ms < 0:
            raise ConfigurationError(f"Retry delay must be >= 0, got {self.delay_ms!r}")


@dataclass
class RetryResult(Generic[T]):
    """Result of a retry operation."""

    success: bool
    data: Optional[T] = None
    error: Optional[Exception] = None
    attempts: int = 1


DEFAULT_RETRY_POLICY = RetryPolicy()


def is_retryable_error(error: Exception) -> bool:
    """
    Check if an error is retryable.

    Transport failures and timeouts are retried; validation, configuration
    and response format errors are not.
    """
    if isinstance(error, PearFlagError):
        return error.retryable
    return False


async def run_with_timeout(awaitable: Awaitable[T], timeout_ms: float) -> T:
    """
    Await ``awaitable``, cancelling it if it runs longer than ``timeout_ms``.

    Raises:
        RequestTimeoutError: If the timer fires first
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout_ms / 1000.0)
    except asyncio.TimeoutError:
        raise RequestTimeoutError(f"Request timed out after {timeout_ms}ms") from None


async def fetch_with_retry(
    fn: Callable[[], Awaitable[T]],
    policy: Optional[RetryPolicy] = None,
    on_failure: Optional[Callable[[int, Exception], None]] = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> RetryResult[T]:
    """
    Execute an async function with retry logic and a fixed delay.

    Args:
        fn: Async function performing one attempt
        policy: Retry policy
        on_failure: Called with the attempt number and error of every failed attempt
        sleep: Coroutine used to wait between attempts

    Returns:
        RetryResult with success status and data/error
    """
    cfg = policy or DEFAULT_RETRY_POLICY
    last_error: Optional[Exception] = None

    for attempt in range(1, cfg.retries + 1):
        try:
            data = await fn()
            return RetryResult(success=True, data=data, attempts=attempt)
        except Exception as error:
            last_error = error
            if on_failure is not None:
                on_failure(attempt, error)

            # Don't retry non-retryable errors
            if not is_retryable_error(error):
                return RetryResult(success=False, error=error, attempts=attempt)

            # Don't sleep after the last attempt
            if attempt < cfg.retries:
                await sleep(cfg.delay_ms / 1000.0)

    return RetryResult(
        success=False,
        error=last_error or Exception("Retry exhausted"),
        attempts=cfg.retries,
    )


async def retry_async(
    fn: Callable[[], Awaitable[T]],
    policy: Optional[RetryPolicy] = None,
    on_failure: Optional[Callable[[int, Exception], None]] = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """
    Execute an async function with retry, raising on failure.

    Raises:
        Exception: The last error if all attempts fail
    """
    result = await fetch_with_retry(fn, policy, on_failure=on_failure, sleep=sleep)

    if not result.success:
        raise result.error  # type: ignore

    return result.data  # type: ignore
