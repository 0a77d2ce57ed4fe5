"""
infrastructure.retry - Exponential backoff for flaky provider calls.

retry_async() runs a zero-argument coroutine factory up to
policy.max_attempts times. Between failed attempt i and attempt i+1 it
sleeps base_delay_ms * 2**i (no jitter). If every attempt fails, the error
from the final attempt is raised; earlier errors are only logged.

Only ProviderError (which includes timeouts) is retried by default.
Anything else is a bug, not a transient failure, and propagates at once.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from domain.exceptions import ProviderError
from domain.models import RetryPolicy

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    *,
    label: str = "operation",
    retry_on: tuple[type[BaseException], ...] = (ProviderError,),
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Await operation() with retries and exponential backoff.

    Args:
        operation: Called once per attempt; must return a fresh awaitable.
        policy:    Attempt count and base delay.
        label:     Name used in log lines.
        retry_on:  Exception types that count as retryable failures.
        sleep:     Injected for tests.

    Returns:
        The first successful result.

    Raises:
        The exception from the last attempt when all attempts fail.
    """
    for attempt in range(policy.max_attempts):
        logger.debug("%s: attempt %d/%d", label, attempt + 1, policy.max_attempts)
        try:
            return await operation()
        except retry_on as e:
            if attempt == policy.max_attempts - 1:
                logger.warning(
                    "%s: all %d attempt(s) failed, last error: %s",
                    label, policy.max_attempts, e,
                )
                raise
            delay = policy.delay_seconds(attempt)
            logger.warning(
                "%s: attempt %d/%d failed (%s) — retrying in %.1fs",
                label, attempt + 1, policy.max_attempts, e, delay,
            )
            await sleep(delay)
