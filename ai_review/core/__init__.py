"""Failure-recovery decision engine."""

from ai_review.core.audit import (
    AuditEvent,
    AuditSink,
    InMemoryAuditSink,
    LoggingAuditSink,
)
from ai_review.core.backoff import BASE_DELAY_MS, MAX_DELAY_MS, calculate_retry_delay
from ai_review.core.error_classifier import FailureInfo, FailureKind, classify_error
from ai_review.core.executors import ExecutionResult, StrategyExecutor
from ai_review.core.orchestrator import FallbackOrchestrator
from ai_review.core.retry_utils import (
    RetryRequested,
    create_fallback_retrying,
    wait_for_decision,
)
from ai_review.core.strategy_selector import Strategy, select_strategy

__all__ = [
    # Audit
    "AuditEvent",
    "AuditSink",
    "InMemoryAuditSink",
    "LoggingAuditSink",
    # Backoff
    "BASE_DELAY_MS",
    "MAX_DELAY_MS",
    "calculate_retry_delay",
    # Classification
    "FailureInfo",
    "FailureKind",
    "classify_error",
    # Execution
    "ExecutionResult",
    "StrategyExecutor",
    # Orchestration
    "FallbackOrchestrator",
    # Retry utilities
    "RetryRequested",
    "create_fallback_retrying",
    "wait_for_decision",
    # Selection
    "Strategy",
    "select_strategy",
]
