"""
Lifecycle event bus for the wedding guest system.

Presentation layers subscribe here to refresh guest lists and seat maps
without polling. Delivery is synchronous and in-memory: no persistence, no
replay for late subscribers. The durable trail lives in ``rsvp_history`` and
``guest_communications``.
"""

import logging
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from functools import lru_cache
from typing import Any

logger = logging.getLogger(__name__)


class LifecycleEventType(str, Enum):
    RSVP = "rsvp"
    ARCHIVE = "archive"
    RESTORE = "restore"
    LINK = "link"
    UNLINK = "unlink"
    SYNC = "sync"
    BOOKING = "booking"


@dataclass(frozen=True)
class LifecycleEvent:
    """A guest, RSVP or booking mutation that has been committed."""

    event_type: LifecycleEventType
    data: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))


EventHandler = Callable[[LifecycleEvent], None]


class EventBus:
    """Publish/subscribe service, one instance per process."""

    def __init__(self) -> None:
        self._handlers: dict[LifecycleEventType, list[EventHandler]] = defaultdict(list)

    def subscribe(
        self, event_type: LifecycleEventType, handler: EventHandler
    ) -> Callable[[], None]:
        """Register ``handler`` for ``event_type``. Returns the unsubscribe function."""
        event_type = LifecycleEventType(event_type)
        self._handlers[event_type].append(handler)

        def unsubscribe() -> None:
            handlers = self._handlers.get(event_type, [])
            if handler in handlers:
                handlers.remove(handler)

        return unsubscribe

    def emit(
        self, event_type: LifecycleEventType, payload: dict[str, Any] | None = None
    ) -> LifecycleEvent:
        event = LifecycleEvent(event_type=LifecycleEventType(event_type), data=payload or {})
        # copy: handlers may unsubscribe while being notified
        for handler in list(self._handlers.get(event.event_type, [])):
            try:
                handler(event)
            except Exception:
                logger.exception("Lifecycle event handler failed for %s", event.event_type.value)
        return event

    def subscriber_count(self, event_type: LifecycleEventType) -> int:
        return len(self._handlers.get(LifecycleEventType(event_type), []))


@lru_cache
def get_event_bus() -> EventBus:
    return EventBus()
