"""Bounded exponential backoff for calls to external services."""

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Retry schedule: delays grow by ``backoff_factor`` up to ``max_interval``."""

    max_attempts: int = 3
    initial_interval: float = 0.5
    backoff_factor: float = 2.0
    max_interval: float = 5.0
    jitter: bool = True

    def delay_for(self, attempt: int) -> float:
        """Delay before retrying after the given (1-indexed) failed attempt."""
        delay = min(
            self.initial_interval * (self.backoff_factor ** (attempt - 1)),
            self.max_interval,
        )
        if self.jitter:
            delay = random.uniform(delay / 2, delay)
        return delay


async def retry_with_backoff(
    call: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    retry_on: tuple[type[BaseException], ...],
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Await ``call()`` and retry it on ``retry_on`` errors.

    Any other exception propagates immediately. After the last attempt the
    final transient error propagates unchanged.
    """
    attempt = 1
    while True:
        try:
            return await call()
        except retry_on as e:
            if attempt >= policy.max_attempts:
                raise
            delay = policy.delay_for(attempt)
            logger.warning(
                "Transient error, retrying",
                extra={
                    "attempt": attempt,
                    "delay_s": round(delay, 3),
                    "error_type": type(e).__name__,
                },
            )
            await sleep(delay)
            attempt += 1
