"""Retry policy for fallible async operations"""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Tuple, Type, TypeVar

import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)

logger = structlog.get_logger()

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """
    Bounded exponential backoff with jitter.

    Delay before retry n (1-based) is
    min(base_delay * multiplier ** (n - 1), max_delay) + uniform(0, jitter).
    """
    max_attempts: int = 4
    base_delay: float = 1.0
    max_delay: float = 10.0
    multiplier: float = 2.0
    jitter: float = 1.0
    retry_on: Tuple[Type[BaseException], ...] = (Exception,)

    def wait_strategy(self):
        return wait_exponential(
            multiplier=self.base_delay,
            exp_base=self.multiplier,
            max=self.max_delay,
        ) + wait_random(0, self.jitter)

    def _before_sleep(self, name: str) -> Callable[[RetryCallState], None]:
        def log_retry(retry_state: RetryCallState) -> None:
            error = retry_state.outcome.exception() if retry_state.outcome else None
            logger.warning(
                f"{name} failed, retrying",
                attempt=retry_state.attempt_number,
                max_attempts=self.max_attempts,
                delay=round(retry_state.next_action.sleep, 2) if retry_state.next_action else None,
                error=str(error),
            )
        return log_retry

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        name: str = "operation",
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ) -> T:
        """
        Await `operation()` until it succeeds or attempts run out.

        The last exception is re-raised unchanged when every attempt fails.
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(max(1, self.max_attempts)),
            wait=self.wait_strategy(),
            retry=retry_if_exception_type(self.retry_on),
            before_sleep=self._before_sleep(name),
            reraise=True,
            sleep=sleep or asyncio.sleep,
        )

        result = None
        async for attempt in retrying:
            with attempt:
                result = await operation()
        return result
