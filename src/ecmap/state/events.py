"""Change events and the subscriber lists that deliver them.

The bus is owned by a single :class:`ecmap.state.store.StateStore`; there is
no process-wide bus. Delivery is synchronous, in subscription order, on the
publishing thread.
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Callable
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict

_logger = logging.getLogger(__name__)


class EventName(StrEnum):
    CHANGE = "change"
    CHANGE_STATE = "change:state"


class EventContext(BaseModel):
    """First argument passed to every handler."""

    model_config = ConfigDict(frozen=True)

    name: EventName
    sequence: int


Handler = Callable[[EventContext, Any], None]


class EventBus:
    """Explicitly owned subscriber lists keyed by :class:`EventName`."""

    def __init__(self) -> None:
        self._handlers: dict[EventName, list[Handler]] = {name: [] for name in EventName}
        self._sequence = itertools.count(1)

    def subscribe(self, name: EventName | str, handler: Handler) -> None:
        self._handlers[EventName(name)].append(handler)

    def unsubscribe(self, name: EventName | str, handler: Handler | None = None) -> None:
        """Remove *handler*, or every handler for *name* when omitted.

        Removing a handler that was never subscribed is a no-op.
        """
        event = EventName(name)
        if handler is None:
            self._handlers[event].clear()
            return
        # A handler subscribed twice is removed entirely.
        self._handlers[event] = [h for h in self._handlers[event] if h != handler]

    def handler_count(self, name: EventName | str) -> int:
        return len(self._handlers[EventName(name)])

    def publish(self, name: EventName | str, payload: Any) -> None:
        event = EventName(name)
        context = EventContext(name=event, sequence=next(self._sequence))
        # Subscriptions changed during delivery apply from the next publish.
        for handler in list(self._handlers[event]):
            try:
                handler(context, payload)
            except Exception:
                _logger.warning("Handler %r failed for event=%s", handler, event, exc_info=True)
