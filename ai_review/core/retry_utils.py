"""Tenacity glue that lets a caller follow fallback retry decisions.

The fallback engine never sleeps. Callers that want the engine to drive
their retry loop use ``create_fallback_retrying``: each failed attempt
raises ``RetryRequested`` carrying the decision, and tenacity waits for
the decision's delay before the next attempt.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
)

from ai_review.core.executors import ExecutionResult

logger = logging.getLogger(__name__)


class RetryRequested(Exception):
    """Signal from one attempt that the fallback engine asked for another."""

    def __init__(self, decision: ExecutionResult) -> None:
        super().__init__(f"fallback requested {decision.strategy.value}")
        self.decision = decision


def wait_for_decision(retry_state: RetryCallState) -> float:
    """Seconds to wait, taken from the decision that requested the retry."""
    if retry_state.outcome is None:
        return 0.0
    exc = retry_state.outcome.exception()
    if isinstance(exc, RetryRequested):
        return exc.decision.delay_ms / 1000
    return 0.0


def log_retry_attempt(retry_state: RetryCallState) -> None:
    """Log retry attempts for debugging."""
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
    strategy = exc.decision.strategy.value if isinstance(exc, RetryRequested) else "unknown"
    logger.info(
        "Attempt %d failed, re-invoking AI review (%s) after %.2fs",
        retry_state.attempt_number,
        strategy,
        delay,
    )


def create_fallback_retrying(
    max_attempts: int = 3,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> AsyncRetrying:
    """
    Create an AsyncRetrying loop driven by fallback decisions.

    Args:
        max_attempts: Upper bound on primary-path invocations.
        sleep: Coroutine used to wait between attempts.

    Returns:
        Configured AsyncRetrying. Only ``RetryRequested`` triggers a retry;
        any other exception propagates unchanged.

    Example:
        async for attempt in create_fallback_retrying(3):
            with attempt:
                ...
    """
    return AsyncRetrying(
        sleep=sleep,
        stop=stop_after_attempt(max(max_attempts, 1)),
        wait=wait_for_decision,
        retry=retry_if_exception_type(RetryRequested),
        before_sleep=log_retry_attempt,
        reraise=True,
    )
