"""Audit events emitted by the fallback engine."""

from __future__ import annotations

import json
import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, UTC
from typing import Any, Protocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuditEvent:
    """A single compliance-relevant event."""

    event_type: str
    payload: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "event_type": self.event_type,
            "payload": self.payload,
            "timestamp": self.timestamp.isoformat(),
        }


class AuditSink(Protocol):
    """Receiver of audit events. Delivery is fire-and-forget."""

    def record(self, event: AuditEvent) -> None: ...


class LoggingAuditSink:
    """Write audit events as JSON lines to a dedicated logger."""

    def __init__(self, logger_name: str = "ai_review.audit") -> None:
        self._logger = logging.getLogger(logger_name)

    def record(self, event: AuditEvent) -> None:
        """Log the event as one JSON document."""
        self._logger.info(json.dumps(event.to_dict(), sort_keys=True, default=str))


class InMemoryAuditSink:
    """
    Keep the most recent audit events in memory.

    Useful for tests and for surfacing recent fallback activity in a
    status report.
    """

    def __init__(self, max_events: int = 1000) -> None:
        """
        Initialize sink.

        Args:
            max_events: Oldest events are dropped past this size.
        """
        self._events: deque[AuditEvent] = deque(maxlen=max_events)

    def record(self, event: AuditEvent) -> None:
        """Store the event."""
        self._events.append(event)

    @property
    def events(self) -> list[AuditEvent]:
        """Recorded events, oldest first."""
        return list(self._events)

    def of_type(self, event_type: str) -> list[AuditEvent]:
        """Recorded events with the given type."""
        return [e for e in self._events if e.event_type == event_type]

    def clear(self) -> None:
        """Drop all recorded events."""
        self._events.clear()


def emit(sink: AuditSink | None, event_type: str, **payload: Any) -> None:
    """
    Send an event to ``sink`` without letting sink failures escape.

    Args:
        sink: Destination, or None to skip auditing.
        event_type: Event name.
        **payload: Event fields.
    """
    if sink is None:
        return
    try:
        sink.record(AuditEvent(event_type=event_type, payload=payload))
    except Exception as e:
        logger.warning("Audit sink failed for %s: %s", event_type, e)
