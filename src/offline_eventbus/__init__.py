"""In-process event bus with invocation limits and offline replay."""

from .event_bus import BusConfig, EventBus, ListenerOptions, create_event_bus
from .logging import setup_logging
from .settings import Settings, get_settings

__all__ = [
    "BusConfig",
    "EventBus",
    "ListenerOptions",
    "Settings",
    "create_event_bus",
    "get_settings",
    "setup_logging",
]
