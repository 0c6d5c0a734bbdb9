"""In-process async event bus used to deliver task lifecycle events."""

import logging
from collections.abc import Awaitable, Callable
from typing import Any


logger = logging.getLogger(__name__)

EventHandler = Callable[..., Awaitable[None]]


class EventBus:
    """Routes named events to async subscribers, one event at a time.

    Handlers run sequentially in subscription order. A failing handler is
    logged and does not prevent the remaining handlers from running.
    """

    def __init__(self) -> None:
        self._subscribers: dict[str, list[EventHandler]] = {}

    def subscribe(self, event_type: str, handler: EventHandler) -> Callable[[], None]:
        """Register a handler and return a callable that removes it again."""
        self._subscribers.setdefault(event_type, []).append(handler)

        def unsubscribe() -> None:
            handlers = self._subscribers.get(event_type, [])
            if handler in handlers:
                handlers.remove(handler)

        return unsubscribe

    def subscriber_count(self, event_type: str) -> int:
        return len(self._subscribers.get(event_type, []))

    async def emit(self, event_type: str, **payload: Any) -> None:
        """Deliver an event to every subscriber of ``event_type``."""
        for handler in list(self._subscribers.get(event_type, [])):
            try:
                await handler(**payload)
            except Exception:
                logger.exception("Error in %s handler", event_type)
