"""Classify upstream AI failures into a fixed set of failure kinds."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class FailureKind(str, Enum):
    """Kind of upstream failure."""

    TIMEOUT = "timeout"
    RATE_LIMIT = "rate_limit"
    AUTHENTICATION = "authentication"
    MALFORMED_RESPONSE = "malformed_response"
    NETWORK = "network"
    TOKEN_LIMIT = "token_limit"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class FailureInfo:
    """Name and message of a failure, independent of exception types."""

    name: str = ""
    message: str = ""

    @classmethod
    def from_error(cls, error: Any) -> FailureInfo:
        """
        Normalize anything error-like.

        Args:
            error: An exception, a mapping with ``name``/``message``, a
                FailureInfo, a bare message string, or None.

        Returns:
            FailureInfo with string fields (possibly empty).
        """
        if isinstance(error, FailureInfo):
            return error
        if isinstance(error, BaseException):
            return cls(name=type(error).__name__, message=str(error))
        if isinstance(error, Mapping):
            name = error.get("name")
            message = error.get("message")
            return cls(
                name=name if isinstance(name, str) else "",
                message=message if isinstance(message, str) else "",
            )
        if isinstance(error, str):
            return cls(message=error)
        return cls()


# Checked in order; the first rule that matches wins.
_RULES: tuple[tuple[FailureKind, frozenset[str], tuple[str, ...]], ...] = (
    (FailureKind.TIMEOUT, frozenset({"TimeoutError"}), ("timeout",)),
    (FailureKind.RATE_LIMIT, frozenset(), ("rate limit",)),
    (FailureKind.AUTHENTICATION, frozenset(), ("authentication", "unauthorized")),
    (FailureKind.MALFORMED_RESPONSE, frozenset({"ParseError"}), ("malformed",)),
    (FailureKind.NETWORK, frozenset(), ("network", "connection")),
    (FailureKind.TOKEN_LIMIT, frozenset(), ("token limit", "context length")),
)


def classify_error(error: Any) -> FailureKind:
    """
    Map a failure to exactly one FailureKind.

    Matching is a case-insensitive substring search over the error name
    and message together. Unmatched input maps to ``UNKNOWN``.
    """
    info = FailureInfo.from_error(error)
    haystack = f"{info.name} {info.message}".lower()

    for kind, names, needles in _RULES:
        if info.name in names or any(needle in haystack for needle in needles):
            logger.debug("Classified %r as %s", info, kind.value)
            return kind

    return FailureKind.UNKNOWN
