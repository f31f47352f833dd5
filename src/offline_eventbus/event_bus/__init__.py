"""Event Bus System for In-Process Publish/Subscribe.

This module provides a synchronous event bus keyed by event name. It supports:

- **Named Events**: Any hashable value can name an event channel
- **Invocation Limits**: Listeners can expire after a number of calls (``once``)
- **Duplicate Suppression**: A callback is registered at most once per name
- **Offline Mode**: Emissions without listeners are buffered and replayed in order
- **Per-Instance State**: Every bus is independent; there is no global bus

## Quick Start

```python
from offline_eventbus.event_bus import EventBus

def send_welcome_email(user_id: int, email: str) -> None:
    print(f"Sending welcome email to {email}")

bus = EventBus()
bus.on("user.created", send_welcome_email)
bus.emit("user.created", 1, "user@example.com")
```

## Architecture

- **core.py**: Configuration, option normalization, listener records, exceptions
- **bus.py**: Registration, dispatch and offline replay

"""

from .bus import EventBus, create_event_bus
from .core import (
    BusConfig,
    BusConfigurationError,
    EventBusError,
    ListenerOptions,
    ListenerRecord,
    merge_options,
    same_callback,
)

__all__ = [
    "BusConfig",
    "BusConfigurationError",
    "EventBus",
    "EventBusError",
    "ListenerOptions",
    "ListenerRecord",
    "create_event_bus",
    "merge_options",
    "same_callback",
]
