"""Test fixtures for AI review."""

from __future__ import annotations

import pytest

from ai_review.config.settings import FallbackSettings
from ai_review.core.audit import InMemoryAuditSink
from ai_review.core.orchestrator import FallbackOrchestrator
from ai_review.reviewing.models import ReviewContext


@pytest.fixture
def fallback_settings() -> FallbackSettings:
    """Default fallback settings."""
    return FallbackSettings()


@pytest.fixture
def audit_sink() -> InMemoryAuditSink:
    """In-memory audit sink."""
    return InMemoryAuditSink()


@pytest.fixture
def orchestrator(fallback_settings: FallbackSettings, audit_sink: InMemoryAuditSink) -> FallbackOrchestrator:
    """Orchestrator with default settings and an in-memory audit sink."""
    return FallbackOrchestrator(fallback_settings, audit_sink=audit_sink)


@pytest.fixture
def main_context() -> ReviewContext:
    """Context for a change targeting main."""
    return ReviewContext(
        repository="acme/shop",
        target_branch="main",
        commit_sha="abc123",
        author="dev@example.com",
    )


@pytest.fixture
def large_file_content() -> str:
    """Content comfortably past the large-file threshold."""
    return "\n".join(f"const line{i} = {i};" for i in range(80))
