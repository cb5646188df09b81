"""
Retry Executor
==============
Exponential backoff retry for transient failures, built on tenacity.
"""

from typing import Awaitable, Callable, Optional, TypeVar
import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from solarmon_core.metrics import RETRY_ATTEMPTS
from solarmon_core.timing import Clock, SYSTEM_CLOCK

from .predicates import default_retry_predicate

logger = structlog.get_logger(__name__)

T = TypeVar("T")

RetryPredicate = Callable[[BaseException], bool]


class RetryExecutor:
    """
    Runs an async operation up to ``max_attempts`` times.

    The delay after attempt ``n`` is ``base_delay_ms * 2 ** (n - 1)`` with no
    jitter. Errors rejected by the predicate propagate on first occurrence,
    as does anything that is not an ``Exception`` (e.g. task cancellation);
    when attempts run out the last error is re-raised unchanged.
    """

    def __init__(self, clock: Clock = SYSTEM_CLOCK, name: str = "default"):
        self.name = name
        self._clock = clock

    @staticmethod
    def _retryable(predicate: RetryPredicate) -> RetryPredicate:
        def check(error: BaseException) -> bool:
            return isinstance(error, Exception) and predicate(error)
        return check

    async def _sleep(self, seconds: float) -> None:
        await self._clock.sleep_ms(seconds * 1000)

    def _before_sleep(self, context: str) -> Callable[[RetryCallState], None]:
        def log_retry(retry_state: RetryCallState) -> None:
            RETRY_ATTEMPTS.labels(client=self.name).inc()
            error = retry_state.outcome.exception() if retry_state.outcome else None
            logger.warning(
                "request_retry",
                client=self.name,
                context=context,
                attempt=retry_state.attempt_number,
                next_delay_ms=round(retry_state.next_action.sleep * 1000) if retry_state.next_action else None,
                error=str(error),
            )
        return log_retry

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        max_attempts: int,
        base_delay_ms: float,
        retry_predicate: Optional[RetryPredicate] = None,
        context: str = "",
    ) -> T:
        """
        Execute ``operation`` with retries.

        Args:
            operation: Zero-argument coroutine factory, called once per attempt
            max_attempts: Total attempts including the first
            base_delay_ms: Delay before the first retry
            retry_predicate: Returns True for retryable errors
            context: Label used in log lines (e.g. ``GET /plants``)

        Returns:
            Result of the first successful attempt
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(max_attempts),
            wait=wait_exponential(multiplier=base_delay_ms / 1000, exp_base=2, min=0),
            retry=retry_if_exception(self._retryable(retry_predicate or default_retry_predicate)),
            sleep=self._sleep,
            before_sleep=self._before_sleep(context),
            reraise=True,
        )

        async for attempt in retrying:
            with attempt:
                result = await operation()

        if attempt.retry_state.attempt_number > 1:
            logger.info(
                "request_succeeded_after_retry",
                client=self.name,
                context=context,
                attempt=attempt.retry_state.attempt_number,
                max_attempts=max_attempts,
            )
        return result
