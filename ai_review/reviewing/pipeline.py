"""Caller-side review loop that follows fallback decisions."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Iterable

from ai_review.core.orchestrator import FallbackOrchestrator
from ai_review.core.retry_utils import RetryRequested, create_fallback_retrying
from ai_review.reviewing.models import ReviewContext, ReviewPrompt, StructuredReviewResult

logger = logging.getLogger(__name__)

CompletionCaller = Callable[[ReviewPrompt], Awaitable[StructuredReviewResult]]


class ReviewPipeline:
    """
    Run an AI review and recover from failures.

    The AI completion caller is invoked with a prompt. When it raises, the
    orchestrator decides: retries wait for the decision's delay (and use
    the simplified prompt when one is attached), terminal fallbacks return
    their result, and a ``none`` decision re-raises the original error.
    """

    def __init__(
        self,
        caller: CompletionCaller,
        orchestrator: FallbackOrchestrator | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        """
        Initialize pipeline.

        Args:
            caller: Async AI completion caller.
            orchestrator: Fallback decision engine.
            sleep: Coroutine used to wait between attempts.
        """
        self.caller = caller
        self.orchestrator = orchestrator or FallbackOrchestrator()
        self._sleep = sleep

    async def run(
        self,
        prompt: ReviewPrompt | dict[str, Any],
        context: ReviewContext | dict[str, Any] | None = None,
        files: Iterable[Any] | None = None,
    ) -> StructuredReviewResult:
        """
        Review with the AI, falling back as the orchestrator decides.

        Args:
            prompt: Initial review prompt.
            context: Review context passed through to fallbacks.
            files: Changed files for degraded analysis.

        Returns:
            The AI result, or a terminal fallback result of the same shape.

        Raises:
            Exception: The AI caller's error when fallbacks are disabled.
        """
        current = ReviewPrompt.coerce(prompt)
        review_context = ReviewContext.coerce(context)
        file_list = list(files or ())

        retrying = create_fallback_retrying(
            max_attempts=self.orchestrator.config.max_attempts,
            sleep=self._sleep,
        )

        async for attempt in retrying:
            with attempt:
                attempt_number = attempt.retry_state.attempt_number
                try:
                    result = await self.caller(current)
                except Exception as exc:
                    decision = self.orchestrator.handle(
                        exc,
                        review_context,
                        attempt_number,
                        files=file_list,
                        prompt=current,
                    )
                    if decision.should_retry:
                        if decision.prompt is not None:
                            current = decision.prompt
                        raise RetryRequested(decision) from exc
                    if decision.response is None:
                        raise
                    return decision.response

                logger.info("AI review succeeded on attempt %d", attempt_number)
                return result

        # Unreachable: every attempt either returns or raises.
        raise RuntimeError("review loop ended without a result")
