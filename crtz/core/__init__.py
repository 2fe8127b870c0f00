"""
Core module - event bus and run configuration.
"""

from crtz.core.events import EventBus, Event, EventHandler, ScriptEvent
from crtz.core.config import RunConfig

__all__ = [
    "EventBus",
    "Event",
    "EventHandler",
    "ScriptEvent",
    "RunConfig",
]
