"""Retry combinator for fallible async operations.

Runs an awaitable factory inside a tenacity ``AsyncRetrying`` loop with bounded
attempts and exponential backoff. Configuration errors, validation errors and
cooperative aborts are never retried, and the original exception is re-raised
once attempts are exhausted.
"""

import asyncio
import functools
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Literal, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_exponential,
    wait_random_exponential,
)
from tenacity.wait import wait_base

from ..exceptions import EmbeddingConfigurationError, IndexingAbortedError, ValidationError
from .logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

NON_RETRYABLE_ERRORS = (EmbeddingConfigurationError, ValidationError, IndexingAbortedError, asyncio.CancelledError)


@dataclass(frozen=True)
class RetryPolicy:
    """Backoff parameters for a retried call.

    Attributes:
        attempts: Total number of attempts including the first one.
        initial_delay: Delay in seconds before the second attempt.
        multiplier: Growth factor applied to the delay after each failure.
        max_delay: Upper bound for a single delay in seconds.
        jitter: ``"full"`` draws each delay uniformly from ``[0, delay]``;
            ``"none"`` sleeps for the exact delay.
    """

    attempts: int = 3
    initial_delay: float = 0.5
    multiplier: float = 1.5
    max_delay: float = 30.0
    jitter: Literal["full", "none"] = "full"

    def __post_init__(self) -> None:
        if self.attempts < 1:
            raise ValueError("attempts must be at least 1")
        if self.initial_delay < 0 or self.max_delay < 0:
            raise ValueError("delays must not be negative")
        if self.multiplier < 1:
            raise ValueError("multiplier must be at least 1")
        if self.jitter not in ("full", "none"):
            raise ValueError(f"Unsupported jitter mode: {self.jitter}")

    @classmethod
    def from_settings(cls, settings: Any) -> "RetryPolicy":
        """Build a policy from the ``EMBEDDING_RETRY_*`` settings."""
        return cls(
            attempts=settings.EMBEDDING_RETRY_ATTEMPTS,
            initial_delay=settings.EMBEDDING_RETRY_INITIAL_DELAY,
            multiplier=settings.EMBEDDING_RETRY_MULTIPLIER,
            max_delay=settings.EMBEDDING_RETRY_MAX_DELAY,
            jitter=settings.EMBEDDING_RETRY_JITTER,
        )

    def wait_strategy(self) -> wait_base:
        """Return the tenacity wait strategy for this policy."""
        if self.jitter == "full":
            return wait_random_exponential(multiplier=self.initial_delay, exp_base=self.multiplier, max=self.max_delay)
        return wait_exponential(multiplier=self.initial_delay, exp_base=self.multiplier, max=self.max_delay)


def _log_retry(operation_name: str, policy: RetryPolicy) -> Callable[[RetryCallState], None]:
    def before_sleep(retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
        logger.warning(
            f"{operation_name} failed (attempt {retry_state.attempt_number}/{policy.attempts}), "
            f"retrying in {delay:.2f}s: {error}"
        )

    return before_sleep


def _build_retrying(policy: RetryPolicy, operation_name: str) -> AsyncRetrying:
    return AsyncRetrying(
        stop=stop_after_attempt(policy.attempts),
        wait=policy.wait_strategy(),
        retry=retry_if_exception_type(Exception) & retry_if_not_exception_type(NON_RETRYABLE_ERRORS),
        before_sleep=_log_retry(operation_name, policy),
        reraise=True,
    )


async def call_with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    operation_name: str = "operation",
) -> T:
    """Await ``operation()`` under ``policy``.

    Args:
        operation: Zero-argument callable returning a fresh awaitable per attempt.
        policy: Attempts and backoff to apply.
        operation_name: Label used in retry log messages.

    Returns:
        The result of the first successful attempt.

    Raises:
        Exception: The last error raised by ``operation`` when attempts are
            exhausted, or the first non-retryable error.
    """
    retrying = _build_retrying(policy, operation_name)
    async for attempt in retrying:
        with attempt:
            return await operation()
    raise RuntimeError(f"{operation_name} exited the retry loop without a result")


def with_retry(
    policy: RetryPolicy, operation_name: str | None = None
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """Decorate an async function so that every call runs under ``policy``."""

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        name = operation_name or func.__qualname__

        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            return await call_with_retry(lambda: func(*args, **kwargs), policy, name)

        return wrapper

    return decorator
