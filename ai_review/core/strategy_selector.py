"""Select a recovery strategy from failure kind and attempt count."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Protocol, Sequence

from ai_review.core.error_classifier import FailureKind

logger = logging.getLogger(__name__)


class Strategy(str, Enum):
    """Recovery strategy for a failed AI review."""

    NONE = "none"
    RETRY = "retry"
    SIMPLIFIED = "simplified"
    DEGRADED = "degraded"
    MANUAL = "manual"
    EMERGENCY = "emergency"

    @property
    def is_terminal(self) -> bool:
        """Whether the strategy ends the review instead of re-invoking it."""
        return self not in (Strategy.RETRY, Strategy.SIMPLIFIED)

    @classmethod
    def parse(cls, value: Strategy | str | None) -> Strategy:
        """Parse a strategy name; anything unrecognized becomes ``NONE``."""
        if isinstance(value, Strategy):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            logger.warning("Unknown fallback strategy %r, treating as none", value)
            return cls.NONE


class FallbackConfig(Protocol):
    """Read-only view of the fallback settings the selector needs."""

    @property
    def enabled(self) -> bool: ...

    @property
    def max_attempts(self) -> int: ...

    @property
    def strategies(self) -> Sequence[str]: ...


def _table(kind: FailureKind, attempt: int) -> Strategy:
    """Per-kind strategy below the attempt ceiling."""
    if kind == FailureKind.TIMEOUT:
        return Strategy.RETRY if attempt < 2 else Strategy.SIMPLIFIED
    if kind == FailureKind.RATE_LIMIT:
        return Strategy.RETRY
    if kind == FailureKind.AUTHENTICATION:
        # Credentials will not fix themselves between attempts.
        return Strategy.MANUAL
    if kind == FailureKind.MALFORMED_RESPONSE:
        return Strategy.SIMPLIFIED
    if kind == FailureKind.NETWORK:
        return Strategy.RETRY if attempt < 2 else Strategy.MANUAL
    if kind == FailureKind.TOKEN_LIMIT:
        return Strategy.SIMPLIFIED
    return Strategy.MANUAL


def select_strategy(kind: FailureKind, attempt: int, config: FallbackConfig) -> Strategy:
    """
    Choose the recovery strategy for a failure.

    Rules, in order:
    1. Fallbacks disabled: ``NONE``.
    2. ``attempt >= max_attempts``: ``MANUAL`` whatever the kind.
    3. Per-kind table; a non-terminal pick that is not in
       ``config.strategies`` escalates to ``MANUAL``.

    Args:
        kind: Classified failure kind.
        attempt: 1-based attempt number owned by the caller.
        config: Fallback configuration.

    Returns:
        Selected strategy.
    """
    if not config.enabled:
        return Strategy.NONE

    if attempt >= config.max_attempts:
        return Strategy.MANUAL

    strategy = _table(kind, attempt)

    if not strategy.is_terminal and strategy.value not in config.strategies:
        logger.info(
            "Strategy %s not allowed by configuration, escalating to manual",
            strategy.value,
        )
        return Strategy.MANUAL

    return strategy
