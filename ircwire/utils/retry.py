"""Reconnect backoff for establishing sessions, built on Tenacity."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    stop_never,
    wait_exponential,
)

from ..constants import (
    RECONNECT_INITIAL_DELAY,
    RECONNECT_MAX_ATTEMPTS,
    RECONNECT_MAX_DELAY,
)
from ..errors.internal import NetworkError, RegistrationError
from ..logs.logger import logger

T = TypeVar("T")

RETRYABLE_ERRORS: tuple[type[BaseException], ...] = (
    OSError,
    NetworkError,
    RegistrationError,
)


class RetryExhaustedError(Exception):
    """Exception raised when all connection attempts have been exhausted."""

    def __init__(
        self, message: str, attempts: int, final_exception: BaseException | None = None
    ) -> None:
        super().__init__(message)
        self.attempts = attempts
        self.final_exception = final_exception


def _log_retry(retry_state: RetryCallState) -> None:
    outcome = retry_state.outcome
    error = outcome.exception() if outcome is not None else None
    delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
    logger.log_event(
        "client",
        "connect_failed",
        level=logging.WARNING,
        error=str(error),
        attempt=retry_state.attempt_number,
    )
    logger.log_event(
        "client",
        "connect_retry",
        level=logging.INFO,
        delay=float(delay),
        attempt=retry_state.attempt_number + 1,
    )


async def retry_connect(
    operation: Callable[[], Awaitable[T]],
    *,
    initial_delay: float = RECONNECT_INITIAL_DELAY,
    max_delay: float = RECONNECT_MAX_DELAY,
    max_attempts: int = RECONNECT_MAX_ATTEMPTS,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Call ``operation`` until it succeeds, doubling the wait after each failure.

    Only connection and registration failures are retried; anything else
    propagates immediately.

    Args:
        operation: Async callable establishing the connection.
        initial_delay: Wait after the first failure, in seconds.
        max_delay: Upper bound for a single wait.
        max_attempts: Total attempts before giving up; 0 retries forever.
        sleep: Awaitable sleep, replaceable in tests.

    Returns:
        The result of the first successful call.

    Raises:
        RetryExhaustedError: ``max_attempts`` calls all failed.
    """
    retrying = AsyncRetrying(
        stop=stop_after_attempt(max_attempts) if max_attempts > 0 else stop_never,
        wait=wait_exponential(multiplier=initial_delay, min=initial_delay, max=max_delay),
        retry=retry_if_exception_type(RETRYABLE_ERRORS),
        before_sleep=_log_retry,
        sleep=sleep,
        reraise=True,
    )
    try:
        return await retrying(operation)
    except RETRYABLE_ERRORS as e:
        raise RetryExhaustedError(
            f"Connection failed after {max_attempts} attempts",
            attempts=max_attempts,
            final_exception=e,
        ) from e
