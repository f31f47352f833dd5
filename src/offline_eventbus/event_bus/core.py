"""Core Event Bus Components.

This module contains the data types the event bus is built from. They carry
no dispatch logic of their own; ``bus.py`` owns all mutation.

## Key Components

- **BusConfig**: Construction-time configuration of a bus (offline mode)
- **ListenerOptions**: Normalized per-registration options (count, repeat)
- **ListenerRecord**: One registered callback with its remaining invocations
- **merge_options**: Turns any user-supplied options value into ListenerOptions
- **EventBusError**: Base exception for all event bus related errors
- **BusConfigurationError**: Raised when a bus configuration is invalid

## Options Example

```python
from offline_eventbus.event_bus.core import merge_options

merge_options({"count": 3})      # ListenerOptions(count=3, repeat=False)
merge_options(None)              # ListenerOptions(count=-1, repeat=False)
merge_options({"count": "3"})    # ListenerOptions(count=-1, repeat=False)
```

"""

import inspect
from collections.abc import Callable, Hashable, Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

Listener = Callable[..., Any]
EventName = Hashable

UNLIMITED = -1


class BusConfig(BaseModel):
    """Configuration fixed for the lifetime of an EventBus.

    Unknown keys are ignored so that a plain mapping carrying extra entries
    can be passed straight to the bus constructor.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    offline: bool = Field(
        default=False,
        description="Buffer events emitted while no listener exists and replay them on registration",
    )


class ListenerOptions(BaseModel):
    """Normalized options of a single ``on`` call."""

    count: int = Field(default=UNLIMITED, description="Remaining invocations, -1 for unlimited")
    repeat: bool = Field(default=False, description="Requested duplicate registration of the same callback")


@dataclass(eq=False)
class ListenerRecord:
    """A registered callback and its invocation budget.

    Records compare by identity, so two registrations of the same callback
    are still distinct records. ``removed`` is set once the record has left
    its listener list; a dispatch pass that is already running skips it.
    """

    callback: Listener
    count: int = UNLIMITED
    removed: bool = field(default=False, repr=False)

    @property
    def unlimited(self) -> bool:
        return self.count < 0


def same_callback(a: Listener, b: Listener) -> bool:
    """Whether two callbacks are the same callable.

    Callables match by identity. Bound methods are recreated on every
    attribute access, so two of them match when they bind the same function
    to the same object.
    """
    if a is b:
        return True
    return inspect.ismethod(a) and inspect.ismethod(b) and a.__self__ is b.__self__ and a.__func__ is b.__func__


def merge_options(options: Any = None) -> ListenerOptions:
    """Normalize a user-supplied options value.

    Args:
        options: A mapping, a ListenerOptions instance, or anything else
            (which is treated as an empty mapping).

    Returns:
        ListenerOptions with ``count`` kept only when it is an integer
        (or an integral float) and ``repeat`` set to the truthiness of the
        given value.
    """
    if isinstance(options, ListenerOptions):
        source: Mapping[str, Any] = options.model_dump()
    elif isinstance(options, Mapping):
        source = options
    else:
        source = {}

    count = source.get("count")
    if isinstance(count, bool) or not isinstance(count, int | float):
        count = UNLIMITED
    elif isinstance(count, float):
        count = int(count) if count.is_integer() else UNLIMITED

    return ListenerOptions(count=count, repeat=bool(source.get("repeat")))


class EventBusError(Exception):
    """Base exception for all event bus related errors.

    The bus itself never raises on bad call arguments (those degrade to
    no-ops); this hierarchy covers construction problems only.

    Use this for catching any event bus related error:
        ```python
        try:
            bus = EventBus(raw_config)
        except EventBusError as e:
            logger.error(f"Event bus error: {e}")
        ```
    """


class BusConfigurationError(EventBusError):
    """Raised when a bus configuration cannot be validated.

    This occurs when:
    - The configuration is neither a mapping nor a BusConfig
    - ``offline`` holds a value that cannot be read as a boolean
    """
