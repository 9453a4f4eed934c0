"""Review models, static analysis, and the caller-side review loop."""

from ai_review.reviewing.models import (
    Issue,
    IssueSeverity,
    ReviewContext,
    ReviewFile,
    ReviewPrompt,
    ReviewSummary,
    StructuredReviewResult,
)
from ai_review.reviewing.static_analyzer import FileAnalyzer, StaticAnalyzer

__all__ = [
    # Models
    "Issue",
    "IssueSeverity",
    "ReviewContext",
    "ReviewFile",
    "ReviewPrompt",
    "ReviewSummary",
    "StructuredReviewResult",
    # Static analysis
    "FileAnalyzer",
    "StaticAnalyzer",
]
