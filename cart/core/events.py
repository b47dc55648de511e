"""
In-process Refresh Event Channel

Carries the two signals the menu depends on:

- APPLICATION_READY: published once, after startup wiring completes
- CONFIG_REFRESHED: published whenever external configuration was reloaded

Events carry no payload; listeners re-read configuration themselves.
A failing listener is logged and does not stop the others.
"""

from collections.abc import Awaitable, Callable
from enum import Enum

from cart.core.logging.logger import get_logger

logger = get_logger(__name__)


class RefreshEvent(str, Enum):
    APPLICATION_READY = "application_ready"
    CONFIG_REFRESHED = "config_refreshed"


Listener = Callable[[RefreshEvent], Awaitable[None]]


class RefreshEventBus:
    """Explicit listener registry; listeners are awaited in registration order."""

    def __init__(self):
        self._listeners: dict[RefreshEvent, list[Listener]] = {event: [] for event in RefreshEvent}

    def subscribe(self, listener: Listener, *events: RefreshEvent) -> None:
        for event in events or tuple(RefreshEvent):
            self._listeners[event].append(listener)

    def listeners(self, event: RefreshEvent) -> list[Listener]:
        return list(self._listeners[event])

    async def publish(self, event: RefreshEvent) -> None:
        logger.info("refresh_event_published", refresh_event=event.value)
        for listener in self.listeners(event):
            try:
                await listener(event)
            except Exception as e:
                logger.error(
                    "refresh_listener_failed",
                    refresh_event=event.value,
                    listener=getattr(listener, "__qualname__", repr(listener)),
                    error=str(e),
                    exc_info=True,
                )
