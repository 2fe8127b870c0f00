"""
Script events.

The interpreter publishes what happens during a run (start, node entry,
choices, signals, end) on an EventBus so hosts such as a game, the CLI or
a test can react without the interpreter knowing about them.

Usage:
    bus = EventBus()

    def on_signal(event: Event) -> None:
        print(event["name"], event["value"])

    bus.subscribe(ScriptEvent.SIGNAL, on_signal)
    Interpreter(program, events=bus).run()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable

logger = logging.getLogger(__name__)


class ScriptEvent(Enum):
    """Events published by the interpreter, with the data each carries."""
    RUN_STARTED = auto()    # entry
    NODE_ENTERED = auto()   # node, line
    SIGNAL = auto()         # name, value
    CHOICE_MADE = auto()    # node, choice_id, target
    RUN_ENDED = auto()      # termination, node


@dataclass
class Event:
    """
    One published event.

    Attributes:
        type: What happened
        data: Event-specific values (see ScriptEvent)
    """
    type: ScriptEvent
    data: dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def __getitem__(self, key: str) -> Any:
        return self.data[key]


EventHandler = Callable[[Event], None]


class EventBus:
    """
    Delivers script events to subscribed handlers in subscription order.

    A failing handler is logged and skipped; it never interrupts the run
    that published the event.
    """

    def __init__(self):
        self._handlers: dict[ScriptEvent, list[EventHandler]] = {}

    def subscribe(self, event_type: ScriptEvent, handler: EventHandler) -> None:
        self._handlers.setdefault(event_type, []).append(handler)

    def unsubscribe(self, event_type: ScriptEvent, handler: EventHandler) -> None:
        handlers = self._handlers.get(event_type)
        if handlers and handler in handlers:
            handlers.remove(handler)

    def publish(self, event_type: ScriptEvent, **data: Any) -> Event:
        """Build an event from keyword data and hand it to every handler."""
        event = Event(type=event_type, data=data)

        # Copy so handlers may unsubscribe themselves
        for handler in list(self._handlers.get(event_type, ())):
            try:
                handler(event)
            except Exception:
                logger.exception(f"Error in {event_type.name} handler")

        return event

    def clear(self, event_type: ScriptEvent | None = None) -> None:
        """Drop the handlers of one event type, or of all of them."""
        if event_type is None:
            self._handlers.clear()
        else:
            self._handlers.pop(event_type, None)
