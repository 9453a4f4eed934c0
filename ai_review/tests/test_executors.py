"""Tests for strategy executors."""

import pytest

from ai_review.config.settings import FallbackSettings
from ai_review.core.executors import (
    BASE_MANUAL_INSTRUCTIONS,
    DEVELOPMENT_INSTRUCTIONS,
    PRODUCTION_INSTRUCTIONS,
    ExecutionResult,
    StrategyExecutor,
)
from ai_review.core.strategy_selector import Strategy
from ai_review.reviewing.models import (
    Issue,
    IssueSeverity,
    ReviewContext,
    ReviewFile,
    ReviewPrompt,
)


@pytest.fixture
def executor() -> StrategyExecutor:
    return StrategyExecutor(FallbackSettings())


class TestRetryAndSimplified:
    """Tests for the non-terminal executors."""

    def test_retry_carries_backoff_delay(self, executor):
        """Retry signals a delay and no prompt."""
        result = executor.execute(Strategy.RETRY, attempt=2)

        assert result.strategy == Strategy.RETRY
        assert result.should_retry is True
        assert result.delay_ms == 2000
        assert result.prompt is None
        assert result.response is None
        assert result.replaces_prompt is False

    def test_simplified_carries_prompt(self, executor):
        """Simplified retry attaches a replacement prompt."""
        original = ReviewPrompt(system="Complex system prompt", user="Review this complex code")
        result = executor.execute(Strategy.SIMPLIFIED, original_prompt=original)

        assert result.should_retry is True
        assert result.replaces_prompt is True
        assert result.delay_ms == 0
        assert "simple JSON format" in result.prompt.system
        assert "critical issues only" in result.prompt.user
        assert "Review this complex code" in result.prompt.user

    def test_simplified_without_original_prompt(self, executor):
        """A missing prompt falls back to a generic label."""
        prompt = executor.create_simplified_prompt({})

        assert "simple JSON format" in prompt.system
        assert "Code to review:" in prompt.user

    def test_simplified_truncates_long_content(self):
        """Oversized user content is truncated with a marker."""
        executor = StrategyExecutor(FallbackSettings(simplified_prompt_max_chars=200))
        prompt = executor.create_simplified_prompt({"user": "x" * 5000})

        assert prompt.user.endswith("[...truncated]")
        assert len(prompt.user) < 400


class TestManualReview:
    """Tests for the manual-review placeholder."""

    def test_manual_placeholder(self, executor, main_context):
        """Manual review yields one MEDIUM standards issue."""
        result = executor.execute(
            Strategy.MANUAL,
            error=RuntimeError("authentication failed"),
            context=main_context,
        )
        response = result.response

        assert result.should_retry is False
        assert len(response.issues) == 1
        assert response.issues[0].severity == IssueSeverity.MEDIUM
        assert response.issues[0].category == "Standards"
        assert "Manual review required" in response.issues[0].description
        assert response.summary.fallback_used is True
        assert response.summary.fallback_type == "manual_review"
        assert response.summary.medium_severity_count == 1
        assert response.summary.error == "authentication failed"
        assert response.metadata["fallback_reason"] == "authentication"
        assert response.metadata["context"]["repository"] == "acme/shop"
        assert response.metadata["instructions"]

    def test_base_instructions_without_branch(self, executor):
        """Unknown branches get only the base checklist."""
        instructions = executor.get_manual_review_instructions(ReviewContext())

        assert instructions == list(BASE_MANUAL_INSTRUCTIONS)

    @pytest.mark.parametrize("branch", ["main", "master", "refs/heads/main", "MAIN"])
    def test_production_instructions(self, executor, branch):
        """Production branches get stricter wording."""
        instructions = executor.get_manual_review_instructions(ReviewContext(target_branch=branch))

        for line in PRODUCTION_INSTRUCTIONS:
            assert line in instructions
        for line in DEVELOPMENT_INSTRUCTIONS:
            assert line not in instructions

    @pytest.mark.parametrize("branch", ["develop", "dev", "feature/login"])
    def test_development_instructions(self, executor, branch):
        """Other branches get maintainability-focused wording."""
        instructions = executor.get_manual_review_instructions(ReviewContext(target_branch=branch))

        assert "Focus on code quality and maintainability" in instructions
        assert "Pay special attention to production readiness" not in instructions

    def test_configured_production_branches(self):
        """Production branch names come from configuration."""
        executor = StrategyExecutor(FallbackSettings(production_branches=["release"]))

        instructions = executor.get_manual_review_instructions(ReviewContext(target_branch="release"))

        assert "Verify all security measures are in place" in instructions


class TestDegradedReview:
    """Tests for the degraded static-analysis review."""

    def test_degraded_review_aggregates_files(self, executor, main_context):
        """Issues from all files are aggregated into one terminal result."""
        result = executor.execute(
            Strategy.DEGRADED,
            context=main_context,
            files=[
                {"path": "src/test.js", "content": 'console.log("test"); eval("dangerous");'},
                {"path": "app.test.js", "content": "console.log('debug')"},
            ],
        )
        response = result.response

        assert result.should_retry is False
        assert response.summary.fallback_type == "degraded_review"
        assert response.summary.fallback_used is True
        assert response.summary.total_issues == len(response.issues)
        assert any(
            i.severity == IssueSeverity.HIGH and i.category == "Security" for i in response.issues
        )
        assert not any(i.location == "app.test.js" for i in response.issues)
        assert response.metadata["fallback_reason"] == "ai_service_unavailable"

    def test_degraded_review_without_files(self, executor):
        """No files means an empty, still well-formed result."""
        response = executor.execute(Strategy.DEGRADED).response

        assert response.issues == []
        assert response.summary.total_issues == 0

    def test_custom_analyzer(self, main_context):
        """A custom analyzer replaces the built-in heuristics."""

        class OneIssueAnalyzer:
            def analyze(self, file):
                return [Issue(IssueSeverity.LOW, "Style", "custom", ReviewFile.coerce(file).path)]

        executor = StrategyExecutor(FallbackSettings(), analyzer=OneIssueAnalyzer())
        response = executor.create_degraded_review_fallback(main_context, [{"path": "a.py"}])

        assert [i.description for i in response.issues] == ["custom"]

    def test_analyzer_receives_normalized_files(self, main_context):
        """Analyzers always see ReviewFile values."""
        seen = []

        class RecordingAnalyzer:
            def analyze(self, file):
                seen.append(file)
                return []

        executor = StrategyExecutor(FallbackSettings(), analyzer=RecordingAnalyzer())
        executor.create_degraded_review_fallback(main_context, {"path": "a.js", "content": "x"})

        assert seen == [ReviewFile(path="a.js", content="x")]

    def test_failing_analyzer_skips_file(self, main_context):
        """An analyzer error for one file does not abort the review."""

        class FlakyAnalyzer:
            def analyze(self, file):
                if file.path == "bad.py":
                    raise RuntimeError("boom")
                return [Issue(IssueSeverity.LOW, "Style", "ok")]

        executor = StrategyExecutor(FallbackSettings(), analyzer=FlakyAnalyzer())
        response = executor.create_degraded_review_fallback(
            main_context, [{"path": "bad.py"}, {"path": "good.py"}]
        )

        assert len(response.issues) == 1


class TestEmergencyAndUnknown:
    """Tests for emergency bypass and unknown strategies."""

    def test_emergency_default_reason(self, executor, main_context):
        """Emergency bypass defaults its reason to 'emergency'."""
        result = executor.execute(Strategy.EMERGENCY, context=main_context)
        response = result.response

        assert result.should_retry is False
        assert response.issues == []
        assert response.summary.fallback_type == "emergency_bypass"
        assert response.summary.bypass_reason == "emergency"
        assert "strongly recommended" in response.metadata["warning"]

    def test_emergency_custom_reason(self, executor):
        """A supplied reason is recorded."""
        response = executor.execute("emergency", reason="hotfix INC-42").response

        assert response.summary.bypass_reason == "hotfix INC-42"

    @pytest.mark.parametrize("name", ["retyr", "", None, "none"])
    def test_unknown_strategy_is_none(self, executor, name):
        """Unknown names never retry."""
        result = executor.execute(name)

        assert result == ExecutionResult(strategy=Strategy.NONE, should_retry=False)
        assert result.is_terminal

    def test_string_strategy_names(self, executor):
        """Strategy names work like enum members."""
        assert executor.execute("retry", attempt=1).delay_ms == 1000


class TestExecutionResult:
    """Tests for ExecutionResult serialization."""

    def test_retry_to_dict(self):
        """Retry decisions serialize their delay."""
        data = ExecutionResult(strategy=Strategy.RETRY, should_retry=True, delay_ms=1000).to_dict()

        assert data == {"type": "retry", "should_retry": True, "delay": 1000}

    def test_terminal_to_dict(self, executor):
        """Terminal decisions serialize their response."""
        data = executor.execute(Strategy.EMERGENCY).to_dict()

        assert data["type"] == "emergency"
        assert data["should_retry"] is False
        assert "delay" not in data
        assert data["response"]["summary"]["bypass_reason"] == "emergency"
        assert data["response"]["issues"] == []
