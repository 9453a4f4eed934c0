"""Tests for the caller-side review pipeline."""

from __future__ import annotations

import pytest

from ai_review.config.settings import FallbackSettings
from ai_review.core.audit import InMemoryAuditSink
from ai_review.core.orchestrator import FallbackOrchestrator
from ai_review.reviewing.models import (
    Issue,
    IssueSeverity,
    ReviewPrompt,
    StructuredReviewResult,
)
from ai_review.reviewing.pipeline import ReviewPipeline


class ScriptedCaller:
    """AI caller that raises or returns according to a script."""

    def __init__(self, outcomes: list) -> None:
        self.outcomes = list(outcomes)
        self.prompts: list[ReviewPrompt] = []

    async def __call__(self, prompt: ReviewPrompt) -> StructuredReviewResult:
        self.prompts.append(prompt)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class RecordingSleep:
    """Async sleep replacement that records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


def ai_result() -> StructuredReviewResult:
    return StructuredReviewResult.from_ai_review(
        [Issue(IssueSeverity.LOW, "Style", "Rename variable", "a.py:3")]
    )


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def prompt() -> ReviewPrompt:
    return ReviewPrompt(system="Full review instructions", user="diff --git a/app.js b/app.js")


class TestReviewPipeline:
    """Tests for ReviewPipeline.run."""

    @pytest.mark.asyncio
    async def test_success_first_try(self, sleep, prompt):
        """A successful AI call is returned untouched."""
        caller = ScriptedCaller([ai_result()])
        pipeline = ReviewPipeline(caller, sleep=sleep)

        result = await pipeline.run(prompt)

        assert result.summary.fallback_used is False
        assert len(result.issues) == 1
        assert sleep.delays == []
        assert caller.prompts == [prompt]

    @pytest.mark.asyncio
    async def test_retry_then_success(self, sleep, prompt):
        """A rate limit waits the backoff delay and re-sends the same prompt."""
        caller = ScriptedCaller([RuntimeError("rate limit exceeded"), ai_result()])
        pipeline = ReviewPipeline(caller, sleep=sleep)

        result = await pipeline.run(prompt)

        assert result.summary.fallback_used is False
        assert sleep.delays == [1.0]
        assert caller.prompts == [prompt, prompt]

    @pytest.mark.asyncio
    async def test_timeout_escalates_to_simplified_prompt(self, sleep, prompt):
        """A second timeout swaps in the simplified prompt."""
        caller = ScriptedCaller([TimeoutError("Request timeout"), TimeoutError("Request timeout"), ai_result()])
        pipeline = ReviewPipeline(caller, sleep=sleep)

        result = await pipeline.run(prompt)

        assert result.summary.fallback_used is False
        assert sleep.delays == [1.0, 0.0]
        assert caller.prompts[1] == prompt
        assert "critical issues only" in caller.prompts[2].user
        assert "diff --git a/app.js b/app.js" in caller.prompts[2].user

    @pytest.mark.asyncio
    async def test_exhaustion_returns_manual_review(self, sleep, prompt):
        """Repeated failures end in the manual-review placeholder."""
        caller = ScriptedCaller([RuntimeError("rate limit exceeded")] * 3)
        pipeline = ReviewPipeline(caller, sleep=sleep)

        result = await pipeline.run(prompt, {"target_branch": "main"})

        assert result.summary.fallback_type == "manual_review"
        assert result.summary.fallback_used is True
        assert len(caller.prompts) == 3
        assert sleep.delays == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_authentication_is_not_retried(self, sleep, prompt):
        """Auth failures go straight to manual review."""
        caller = ScriptedCaller([PermissionError("unauthorized")])
        pipeline = ReviewPipeline(caller, sleep=sleep)

        result = await pipeline.run(prompt)

        assert result.summary.fallback_type == "manual_review"
        assert len(caller.prompts) == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_disabled_fallbacks_reraise(self, sleep, prompt):
        """With fallbacks disabled the original error propagates."""
        caller = ScriptedCaller([TimeoutError("Request timeout")])
        orchestrator = FallbackOrchestrator(FallbackSettings(enabled=False))
        pipeline = ReviewPipeline(caller, orchestrator=orchestrator, sleep=sleep)

        with pytest.raises(TimeoutError, match="Request timeout"):
            await pipeline.run(prompt)

        assert len(caller.prompts) == 1

    @pytest.mark.asyncio
    async def test_attempt_numbers_reach_the_orchestrator(self, sleep, prompt):
        """The loop passes 1-based attempt numbers to each decision."""
        audit = InMemoryAuditSink()
        caller = ScriptedCaller([ConnectionError("connection reset")] * 2)
        pipeline = ReviewPipeline(caller, FallbackOrchestrator(audit_sink=audit), sleep=sleep)

        result = await pipeline.run(prompt)

        decisions = audit.of_type("fallback_decision")
        assert [e.payload["attempt"] for e in decisions] == [1, 2]
        assert [e.payload["strategy"] for e in decisions] == ["retry", "manual"]
        assert result.summary.fallback_type == "manual_review"

    @pytest.mark.asyncio
    async def test_accepts_mapping_prompt(self, sleep):
        """Prompts may be given as mappings."""
        caller = ScriptedCaller([ai_result()])
        pipeline = ReviewPipeline(caller, sleep=sleep)

        await pipeline.run({"system": "s", "user": "u"})

        assert caller.prompts == [ReviewPrompt(system="s", user="u")]
