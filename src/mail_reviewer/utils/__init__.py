"""Utility functions for Mail Reviewer."""

import asyncio
import logging
import sys
from typing import Awaitable, Callable, TypeVar

import structlog

from mail_reviewer.exceptions import RateLimitError, RateLimitExceeded

logger = structlog.get_logger()

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


def configure_logging(level: str = "INFO") -> None:
    """Configure structlog to drop events below ``level``.

    Events go to stderr so command output on stdout stays machine-readable.
    """

    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper(), logging.INFO)
        ),
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
    )


async def retry_on_rate_limit(
    func: Callable[[], Awaitable[T]],
    max_attempts: int = 5,
    delay: float = 5.0,
    backoff: float = 2.0,
    sleep: Sleep = asyncio.sleep,
) -> T:
    """Await ``func()``, retrying with exponential backoff while rate limited.

    Only RateLimitError is retried; other exceptions propagate immediately. A
    server-provided Retry-After longer than the current delay takes precedence.

    Args:
        func: Zero-argument coroutine factory; called once per attempt.
        max_attempts: Total attempts before giving up.
        delay: Initial delay between attempts in seconds.
        backoff: Multiplier for delay after each attempt.
        sleep: Awaitable sleep function.

    Returns:
        Result of the first successful attempt.

    Raises:
        RateLimitExceeded: If every attempt was rate limited.
    """

    current_delay = delay

    for attempt in range(1, max_attempts + 1):
        try:
            return await func()
        except RateLimitError as e:
            if attempt >= max_attempts:
                logger.error("rate_limit_retry_exhausted", attempts=attempt)
                raise RateLimitExceeded(attempt) from e

            wait = max(current_delay, e.retry_after or 0.0)
            logger.warning(
                "rate_limited_retrying",
                attempt=attempt,
                max_attempts=max_attempts,
                delay=wait,
            )
            await sleep(wait)
            current_delay *= backoff

    raise RateLimitExceeded(max_attempts)
