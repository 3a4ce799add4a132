"""Retry logic for handling GitHub API rate limits and transient errors.

Every remote call runs through `execute_with_retry`, either directly or via the
`retry_on_rate_limit` decorator. Only `TransientRemoteError` is retried; the
GitHub adapter decides which failures are transient at the point where the
API response is received, so this module never inspects raw HTTP errors.

Delay selection, in priority order:
- primary rate limit used up with a known reset time: wait until the reset
- retry-after header present: wait exactly that long
- secondary rate limit without guidance: exponential backoff, at least 60 seconds
- any other transient error: plain exponential backoff

A random jitter below one second is added to every delay.
"""

import asyncio
import functools
import inspect
import random
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, TypeVar

import structlog

from upstream_sync.github.exceptions import RetryExhaustedError, TransientRemoteError
from upstream_sync.utils.constants import (
    DEFAULT_BASE_DELAY_MS,
    DEFAULT_MAX_ATTEMPTS,
    MAX_JITTER_MS,
    SECONDARY_RATE_LIMIT_MIN_DELAY_MS,
)

logger = structlog.get_logger(__name__)

T = TypeVar("T")
F = TypeVar("F", bound=Callable[..., Any])


@dataclass(frozen=True)
class RetryPolicy:
    """Attempt cap and base delay applied to one outer remote operation."""

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    base_delay_ms: int = DEFAULT_BASE_DELAY_MS


def compute_backoff_delay(
    error: TransientRemoteError,
    attempt: int,
    base_delay_ms: int = DEFAULT_BASE_DELAY_MS,
    now_ms: int | None = None,
) -> tuple[int, str]:
    """Compute how long to wait after a transient failure.

    Args:
        error: The classified transient error, including its rate limit signal
        attempt: The attempt number that just failed (1-based)
        base_delay_ms: Base delay for exponential backoff
        now_ms: Current time as epoch milliseconds (defaults to the wall clock)

    Returns:
        Tuple of (delay in milliseconds, human readable rationale)
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    signal = error.signal
    exponential_delay_ms = base_delay_ms * 2 ** (attempt - 1)

    if signal.is_exhausted:
        delay_ms = signal.reset_epoch_ms - now_ms  # type: ignore[operator]
        rationale = "primary rate limit exhausted, waiting until reset"
    elif signal.retry_after_seconds is not None:
        delay_ms = int(signal.retry_after_seconds * 1000)
        rationale = "honoring retry-after cool-down"
    elif error.secondary:
        delay_ms = max(SECONDARY_RATE_LIMIT_MIN_DELAY_MS, exponential_delay_ms)
        rationale = "secondary rate limit without retry guidance, exponential backoff"
    else:
        delay_ms = exponential_delay_ms
        rationale = "transient error, exponential backoff"

    delay_ms = max(0, delay_ms) + random.randrange(MAX_JITTER_MS)
    return delay_ms, rationale


async def execute_with_retry(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    base_delay_ms: int = DEFAULT_BASE_DELAY_MS,
    operation_name: str | None = None,
) -> T:
    """Run an async operation, retrying it while it fails with a transient error.

    Args:
        operation: Zero-argument callable returning a fresh awaitable on each call
        max_attempts: Total number of attempts, including the first
        base_delay_ms: Base delay for exponential backoff
        operation_name: Name used in log messages and errors

    Returns:
        The result of the first successful attempt

    Raises:
        RetryExhaustedError: If the last allowed attempt also failed transiently
        Exception: Any non-transient error, re-raised on the attempt it occurred
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
    name = operation_name or getattr(operation, "__name__", "operation")

    for attempt in range(1, max_attempts + 1):
        try:
            return await operation()
        except TransientRemoteError as e:
            if attempt >= max_attempts:
                logger.error(
                    "Max attempts reached for transient GitHub error",
                    operation=name,
                    attempt=attempt,
                    max_attempts=max_attempts,
                    status_code=e.status_code,
                    rate_limit_resource=e.signal.resource,
                    rate_limit_limit=e.signal.limit,
                    rate_limit_used=e.signal.used,
                    rate_limit_remaining=e.signal.remaining_requests,
                )
                raise RetryExhaustedError(name, attempt, e) from e

            delay_ms, rationale = compute_backoff_delay(e, attempt, base_delay_ms)
            logger.warning(
                f"GitHub transient error, retrying in {delay_ms / 1000:.1f} seconds",
                operation=name,
                attempt=attempt,
                max_attempts=max_attempts,
                wait_time_ms=delay_ms,
                rationale=rationale,
                status_code=e.status_code,
            )
            await asyncio.sleep(delay_ms / 1000)

    # The loop either returns or raises on its final attempt.
    raise RuntimeError(f"Retry loop for {name} exited without a result")


def retry_on_rate_limit(max_attempts: int | None = None, base_delay_ms: int | None = None) -> Callable[[F], F]:
    """Decorator for retrying async functions when they hit GitHub rate limits.

    When called without explicit limits, the decorated method's instance is
    consulted for a `retry_policy` attribute (see `RetryPolicy`), falling back
    to the module defaults.

    Example:
        @retry_on_rate_limit()
        async def get_repository(self):
            return await self.client.rest.repos.async_get(owner=self.owner, repo=self.repo_name)
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            policy = getattr(args[0], "retry_policy", None) if args else None
            if not isinstance(policy, RetryPolicy):
                policy = RetryPolicy()
            return await execute_with_retry(
                lambda: func(*args, **kwargs),
                max_attempts=max_attempts if max_attempts is not None else policy.max_attempts,
                base_delay_ms=base_delay_ms if base_delay_ms is not None else policy.base_delay_ms,
                operation_name=func.__name__,
            )

        @functools.wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            """Sync version of the retry wrapper - raises error since we only support async."""
            raise RuntimeError(
                f"Function {func.__name__} decorated with @retry_on_rate_limit must be async. This decorator only supports async functions."
            )

        if inspect.iscoroutinefunction(func):
            return async_wrapper  # type: ignore
        else:
            return sync_wrapper  # type: ignore

    return decorator
