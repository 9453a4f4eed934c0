"""
AI Review - failure recovery for AI-driven code review

Classifies failures of the AI reviewer, decides how to recover, and
produces results with the same shape as a successful AI review.
"""

__version__ = "0.1.0"
__author__ = "ai-review contributors"

from ai_review.config.settings import FallbackSettings, Settings
from ai_review.core.orchestrator import FallbackOrchestrator
from ai_review.reviewing.pipeline import ReviewPipeline

__all__ = [
    "FallbackOrchestrator",
    "FallbackSettings",
    "ReviewPipeline",
    "Settings",
]
