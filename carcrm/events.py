# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""In-process event bus for exchange-rate health notifications."""

import inspect
import logging
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from carcrm.models.base import utcnow

logger = logging.getLogger(__name__)


class AppEvent(str, Enum):
    """Application events that monitoring code can subscribe to."""

    RATES_REFRESHED = "rates.refreshed"
    RATE_SOURCE_FAILED = "rates.source_failed"
    RATES_PERSIST_FAILED = "rates.persist_failed"


@dataclass
class EventPayload:
    """Payload for an application event."""

    event_type: AppEvent
    timestamp: datetime
    data: dict[str, Any]


# Type alias for event handlers
EventHandler = Callable[[EventPayload], Any]


class EventBus:
    """Event bus for application-wide notifications.

    Handlers may be plain functions or coroutine functions. A failing
    handler is logged and never affects the publisher.
    """

    def __init__(self) -> None:
        """Initialize the event bus."""
        self._handlers: dict[AppEvent, list[EventHandler]] = defaultdict(list)
        self._async_handlers: dict[AppEvent, list[EventHandler]] = defaultdict(list)

    def subscribe(self, event_type: AppEvent, handler: EventHandler) -> None:
        """Subscribe to an event.

        Args:
            event_type: Event type to subscribe to
            handler: Function to call when event fires (sync or async)
        """
        if inspect.iscoroutinefunction(handler):
            self._async_handlers[event_type].append(handler)
        else:
            self._handlers[event_type].append(handler)

        logger.debug(f"Subscribed {handler!r} to event {event_type.value}")

    def unsubscribe(self, event_type: AppEvent, handler: EventHandler) -> None:
        """Unsubscribe a handler; unknown handlers are ignored."""
        if handler in self._handlers[event_type]:
            self._handlers[event_type].remove(handler)
        if handler in self._async_handlers[event_type]:
            self._async_handlers[event_type].remove(handler)

    async def publish(self, event_type: AppEvent, data: dict[str, Any]) -> None:
        """Publish an event to all subscribers.

        Args:
            event_type: Type of event
            data: Event data payload
        """
        payload = EventPayload(
            event_type=event_type,
            timestamp=utcnow(),
            data=data,
        )

        for handler in list(self._handlers.get(event_type, [])):
            try:
                handler(payload)
            except Exception as e:
                logger.error(
                    f"Error in sync event handler for {event_type.value}: {e}"
                )

        for handler in list(self._async_handlers.get(event_type, [])):
            try:
                await handler(payload)
            except Exception as e:
                logger.error(
                    f"Error in async event handler for {event_type.value}: {e}"
                )

    def get_subscriber_count(self, event_type: AppEvent) -> int:
        """Get the number of subscribers for an event type."""
        sync_count = len(self._handlers.get(event_type, []))
        async_count = len(self._async_handlers.get(event_type, []))
        return sync_count + async_count


# Global event bus singleton
event_bus = EventBus()
