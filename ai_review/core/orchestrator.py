"""Fallback orchestrator: classify, select, execute."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any

from ai_review.config.settings import FallbackSettings
from ai_review.core.audit import AuditSink, emit
from ai_review.core.error_classifier import FailureInfo, FailureKind, classify_error
from ai_review.core.executors import ExecutionResult, StrategyExecutor
from ai_review.core.strategy_selector import Strategy, select_strategy
from ai_review.reviewing.models import ReviewContext
from ai_review.reviewing.static_analyzer import FileAnalyzer

logger = logging.getLogger(__name__)


def _coerce_attempt(attempt: Any) -> int:
    """Attempt numbers are 1-based; anything unusable counts as the first."""
    if isinstance(attempt, bool):
        return 1
    try:
        value = int(attempt)
    except (TypeError, ValueError):
        return 1
    return value if value >= 1 else 1


class FallbackOrchestrator:
    """
    Recovery decision engine for failed AI reviews.

    Stateless across calls: the attempt counter belongs to the caller and
    the configuration is frozen at construction, so one instance can serve
    concurrent reviews. Never raises for malformed input.

    Example:
        orchestrator = FallbackOrchestrator(settings.fallbacks)
        decision = orchestrator.handle(exc, context, attempt)
        if decision.should_retry:
            ...  # wait decision.delay_ms, re-invoke (with decision.prompt if set)
        elif decision.response is not None:
            ...  # publish decision.response like a normal review
        else:
            raise exc  # fallbacks disabled
    """

    def __init__(
        self,
        config: FallbackSettings | None = None,
        audit_sink: AuditSink | None = None,
        analyzer: FileAnalyzer | None = None,
    ) -> None:
        """
        Initialize orchestrator.

        Args:
            config: Fallback settings, treated as read-only.
            audit_sink: Optional receiver for decision events.
            analyzer: Optional per-file analyzer for degraded mode.
        """
        self.config = config or FallbackSettings()
        self.audit_sink = audit_sink
        self.executor = StrategyExecutor(self.config, analyzer=analyzer)

    def determine_strategy(self, error: Any, attempt: Any = 1) -> Strategy:
        """Classify ``error`` and select a strategy without executing it."""
        return select_strategy(classify_error(error), _coerce_attempt(attempt), self.config)

    def handle(
        self,
        error: Any,
        context: ReviewContext | dict[str, Any] | None = None,
        attempt: Any = 1,
        *,
        files: Any = None,
        prompt: Any = None,
    ) -> ExecutionResult:
        """
        Decide and execute recovery for a failed AI review.

        Args:
            error: Exception or ``{name, message}`` mapping from the AI caller.
            context: Review context.
            attempt: 1-based number of the attempt that just failed.
            files: Changed files, used only by degraded mode.
            prompt: Prompt that failed, used to build a simplified prompt.

        Returns:
            ExecutionResult tagged with the classified failure kind.
        """
        info = FailureInfo.from_error(error)
        attempt_number = _coerce_attempt(attempt)
        review_context = ReviewContext.coerce(context)

        kind = classify_error(info)
        strategy = select_strategy(kind, attempt_number, self.config)

        self._log_decision(info, kind, strategy, attempt_number)

        result = self.executor.execute(
            strategy,
            error=info,
            context=review_context,
            attempt=attempt_number,
            original_prompt=prompt,
            files=files,
        )
        result = replace(result, failure_kind=kind)

        emit(
            self.audit_sink,
            "fallback_decision",
            failure_kind=kind.value,
            strategy=result.strategy.value,
            attempt=attempt_number,
            should_retry=result.should_retry,
            error_name=info.name,
            error_message=info.message,
            repository=review_context.repository,
            branch=review_context.target_branch,
            commit=review_context.commit_sha,
        )
        return result

    def execute(
        self,
        strategy: Strategy | str,
        *,
        error: Any = None,
        context: ReviewContext | dict[str, Any] | None = None,
        attempt: Any = 1,
        prompt: Any = None,
        files: Any = None,
        reason: str | None = None,
    ) -> ExecutionResult:
        """
        Execute an explicitly chosen strategy, e.g. an operator-requested
        degraded review or emergency bypass.

        Unknown strategy names execute as ``NONE``.
        """
        review_context = ReviewContext.coerce(context)
        result = self.executor.execute(
            strategy,
            error=error,
            context=review_context,
            attempt=_coerce_attempt(attempt),
            original_prompt=prompt,
            files=files,
            reason=reason,
        )

        emit(
            self.audit_sink,
            "fallback_executed",
            requested=str(strategy.value if isinstance(strategy, Strategy) else strategy),
            strategy=result.strategy.value,
            should_retry=result.should_retry,
            reason=reason,
            repository=review_context.repository,
            branch=review_context.target_branch,
            commit=review_context.commit_sha,
        )
        return result

    def degraded_review(
        self,
        context: ReviewContext | dict[str, Any] | None,
        files: Any,
    ) -> ExecutionResult:
        """Review ``files`` with static heuristics instead of the AI."""
        return self.execute(Strategy.DEGRADED, context=context, files=files)

    def emergency_bypass(
        self,
        context: ReviewContext | dict[str, Any] | None = None,
        reason: str | None = None,
    ) -> ExecutionResult:
        """Force a passing, clearly flagged result while the AI is unavailable."""
        return self.execute(Strategy.EMERGENCY, context=context, reason=reason)

    def get_configuration(self) -> dict[str, Any]:
        """Effective fallback configuration."""
        return {
            "enabled": self.config.enabled,
            "max_attempts": self.config.max_attempts,
            "strategies": list(self.config.strategies),
        }

    def is_enabled(self) -> bool:
        """Whether fallbacks are enabled."""
        return self.config.enabled

    def _log_decision(
        self,
        info: FailureInfo,
        kind: FailureKind,
        strategy: Strategy,
        attempt: int,
    ) -> None:
        """Log a decision at a level matching its severity."""
        if strategy == Strategy.NONE:
            logger.warning(
                "Fallbacks disabled; AI review failure (%s) will propagate: %s",
                kind.value,
                info.message,
            )
        elif strategy.is_terminal:
            logger.error(
                "AI review failed (%s) on attempt %d, falling back to %s: %s",
                kind.value,
                attempt,
                strategy.value,
                info.message,
            )
        else:
            logger.warning(
                "AI review failed (%s) on attempt %d, will %s: %s",
                kind.value,
                attempt,
                strategy.value,
                info.message,
            )
