"""Executors that turn a selected strategy into a concrete outcome."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from ai_review.config.settings import FallbackSettings
from ai_review.core.backoff import calculate_retry_delay
from ai_review.core.error_classifier import FailureInfo, FailureKind, classify_error
from ai_review.core.strategy_selector import Strategy
from ai_review.reviewing.models import (
    Issue,
    IssueSeverity,
    ReviewContext,
    ReviewFile,
    ReviewPrompt,
    ReviewSummary,
    StructuredReviewResult,
    UNKNOWN,
)
from ai_review.reviewing.static_analyzer import FileAnalyzer, StaticAnalyzer
from ai_review.utils import truncate_with_marker

logger = logging.getLogger(__name__)

SIMPLIFIED_SYSTEM_PROMPT = """You are a code reviewer. Review the provided code for issues and respond with a simple JSON format:
{
  "issues": [
    {
      "severity": "HIGH|MEDIUM|LOW",
      "category": "Security|Performance|Standards|Formatting|Logic",
      "description": "Brief description of the issue"
    }
  ],
  "summary": {
    "totalIssues": 0,
    "highSeverityCount": 0,
    "mediumSeverityCount": 0,
    "lowSeverityCount": 0
  }
}"""

SIMPLIFIED_USER_PREFIX = (
    "Review this code for critical issues only. "
    "Focus on security and major problems. Keep response concise."
)

BASE_MANUAL_INSTRUCTIONS: tuple[str, ...] = (
    "Review code for security vulnerabilities",
    "Check for performance issues",
    "Verify coding standards compliance",
    "Ensure proper error handling",
    "Review for potential bugs or logic errors",
)

PRODUCTION_INSTRUCTIONS: tuple[str, ...] = (
    "Pay special attention to production readiness",
    "Verify all security measures are in place",
)

DEVELOPMENT_INSTRUCTIONS: tuple[str, ...] = (
    "Focus on code quality and maintainability",
)

FALLBACK_TYPES: dict[Strategy, str] = {
    Strategy.DEGRADED: "degraded_review",
    Strategy.MANUAL: "manual_review",
    Strategy.EMERGENCY: "emergency_bypass",
}


@dataclass(frozen=True)
class ExecutionResult:
    """
    Outcome of executing a strategy.

    Non-terminal outcomes set ``should_retry``: a plain retry carries only
    ``delay_ms``, a simplified retry also carries the replacement ``prompt``.
    Terminal outcomes carry ``response`` (except ``NONE``, which carries
    nothing and tells the caller to surface the original error).
    """

    strategy: Strategy
    should_retry: bool
    delay_ms: int = 0
    prompt: ReviewPrompt | None = None
    response: StructuredReviewResult | None = None
    failure_kind: FailureKind | None = None

    @property
    def is_terminal(self) -> bool:
        """Whether the caller should stop re-invoking the primary path."""
        return not self.should_retry

    @property
    def replaces_prompt(self) -> bool:
        """Whether the caller must retry with ``prompt`` instead of the original."""
        return self.should_retry and self.prompt is not None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        data: dict[str, Any] = {
            "type": self.strategy.value,
            "should_retry": self.should_retry,
        }
        if self.should_retry:
            data["delay"] = self.delay_ms
        if self.prompt is not None:
            data["prompt"] = self.prompt.to_dict()
        if self.response is not None:
            data["response"] = self.response.to_dict()
        if self.failure_kind is not None:
            data["failure_kind"] = self.failure_kind.value
        return data


class StrategyExecutor:
    """
    Execute one recovery strategy.

    Executors never perform I/O: degraded mode only reads file contents
    the caller already supplied, and retries return a delay instead of
    sleeping.
    """

    def __init__(
        self,
        config: FallbackSettings | None = None,
        analyzer: FileAnalyzer | None = None,
    ) -> None:
        """
        Initialize executor.

        Args:
            config: Fallback settings (read-only).
            analyzer: Per-file analyzer for degraded mode.
        """
        self.config = config or FallbackSettings()
        self.analyzer = analyzer or StaticAnalyzer(
            large_file_line_threshold=self.config.large_file_line_threshold,
        )

    def execute(
        self,
        strategy: Strategy | str | None,
        *,
        error: Any = None,
        context: Any = None,
        attempt: int = 1,
        original_prompt: Any = None,
        files: Any = None,
        reason: str | None = None,
    ) -> ExecutionResult:
        """
        Execute ``strategy``.

        Args:
            strategy: Strategy or strategy name; unknown names execute as ``NONE``.
            error: Failure that triggered recovery.
            context: Review context (ReviewContext or mapping).
            attempt: 1-based attempt number that failed.
            original_prompt: Prompt to simplify.
            files: Files for degraded analysis.
            reason: Bypass reason for emergency mode.

        Returns:
            ExecutionResult for the strategy.
        """
        selected = Strategy.parse(strategy)
        review_context = ReviewContext.coerce(context)

        if selected == Strategy.RETRY:
            return ExecutionResult(
                strategy=selected,
                should_retry=True,
                delay_ms=calculate_retry_delay(attempt),
            )

        if selected == Strategy.SIMPLIFIED:
            return ExecutionResult(
                strategy=selected,
                should_retry=True,
                prompt=self.create_simplified_prompt(original_prompt),
            )

        if selected == Strategy.DEGRADED:
            return ExecutionResult(
                strategy=selected,
                should_retry=False,
                response=self.create_degraded_review_fallback(review_context, files),
            )

        if selected == Strategy.MANUAL:
            return ExecutionResult(
                strategy=selected,
                should_retry=False,
                response=self.create_manual_review_fallback(error, review_context),
            )

        if selected == Strategy.EMERGENCY:
            return ExecutionResult(
                strategy=selected,
                should_retry=False,
                response=self.create_emergency_bypass_fallback(review_context, reason),
            )

        return ExecutionResult(strategy=Strategy.NONE, should_retry=False)

    def create_simplified_prompt(self, original_prompt: Any = None) -> ReviewPrompt:
        """
        Build a smaller prompt that asks only for critical issues.

        Args:
            original_prompt: ReviewPrompt or mapping with ``user`` content.

        Returns:
            ReviewPrompt with a minimal JSON schema instruction.
        """
        prompt = ReviewPrompt.coerce(original_prompt)
        code = truncate_with_marker(
            prompt.user or "Code to review:",
            self.config.simplified_prompt_max_chars,
        )
        return ReviewPrompt(
            system=SIMPLIFIED_SYSTEM_PROMPT,
            user=f"{SIMPLIFIED_USER_PREFIX}\n\n{code}",
        )

    def create_manual_review_fallback(
        self,
        error: Any,
        context: ReviewContext,
    ) -> StructuredReviewResult:
        """Build the placeholder result that asks a human to review."""
        info = FailureInfo.from_error(error)
        issues = [
            Issue(
                severity=IssueSeverity.MEDIUM,
                category="Standards",
                description="AI code review service unavailable. Manual review required.",
                location="all",
                recommendation="Please have a team member review this code manually before merging.",
            )
        ]
        return StructuredReviewResult(
            issues=issues,
            summary=ReviewSummary.from_issues(
                issues,
                fallback_type=FALLBACK_TYPES[Strategy.MANUAL],
                error=info.message or None,
            ),
            metadata={
                "fallback_reason": classify_error(info).value,
                "context": context.to_metadata(),
                "instructions": self.get_manual_review_instructions(context),
            },
        )

    def get_manual_review_instructions(self, context: ReviewContext) -> list[str]:
        """Checklist for the human reviewer, stricter for production branches."""
        instructions = list(BASE_MANUAL_INSTRUCTIONS)

        branch = context.target_branch.removeprefix("refs/heads/").lower()
        production = {b.lower() for b in self.config.production_branches}

        if branch in production:
            instructions.extend(PRODUCTION_INSTRUCTIONS)
        elif branch and branch != UNKNOWN:
            instructions.extend(DEVELOPMENT_INSTRUCTIONS)

        return instructions

    def create_degraded_review_fallback(
        self,
        context: ReviewContext,
        files: Any,
    ) -> StructuredReviewResult:
        """Review supplied files with static heuristics only."""
        issues: list[Issue] = []
        for file in ReviewFile.coerce_many(files):
            try:
                issues.extend(self.analyzer.analyze(file))
            except Exception as e:
                logger.warning("Static analysis failed for %r: %s", file, e)

        logger.warning("Degraded review produced %d heuristic issues", len(issues))

        return StructuredReviewResult(
            issues=issues,
            summary=ReviewSummary.from_issues(
                issues,
                fallback_type=FALLBACK_TYPES[Strategy.DEGRADED],
            ),
            metadata={
                "fallback_reason": "ai_service_unavailable",
                "context": context.to_metadata(),
                "note": (
                    "This review was performed using basic static analysis "
                    "due to AI service unavailability."
                ),
            },
        )

    def create_emergency_bypass_fallback(
        self,
        context: ReviewContext,
        reason: str | None = None,
    ) -> StructuredReviewResult:
        """Build an empty, explicitly flagged result that lets a merge proceed."""
        bypass_reason = reason or self.config.emergency_reason
        logger.error("Emergency review bypass (%s)", bypass_reason)

        return StructuredReviewResult(
            issues=[],
            summary=ReviewSummary.from_issues(
                [],
                fallback_type=FALLBACK_TYPES[Strategy.EMERGENCY],
                bypass_reason=bypass_reason,
            ),
            metadata={
                "fallback_reason": "emergency_bypass",
                "context": context.to_metadata(),
                "warning": (
                    "Code review was bypassed due to emergency. "
                    "Manual review is strongly recommended."
                ),
            },
        )
