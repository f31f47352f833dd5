"""Event Bus Implementation.

This module provides the EventBus class that handles listener registration,
synchronous emission and offline replay. Everything runs on the caller's
thread: ``emit`` returns only after every listener it reached has returned.

## Key Features

- **Invocation Limits**: A listener can be registered for a fixed number of calls
- **Duplicate Suppression**: The same callback is registered at most once per name
- **Offline Mode**: Events emitted before any listener exists are buffered and
  replayed, oldest first, as soon as a listener is registered
- **Re-entrancy**: Listeners may call ``on``, ``off`` and ``emit`` on the same
  bus while a dispatch pass is running

## Advanced Usage

```python
from offline_eventbus.event_bus import EventBus

bus = EventBus({"offline": True})
bus.emit("ready", "a")
bus.emit("ready", "b")

seen = []
bus.on("ready", seen.append)   # replays "a" then "b"
bus.emit("ready", "c")
assert seen == ["a", "b", "c"]

bus.on("tick", print, {"count": 2})   # removed after the second call
bus.once("shutdown", print)           # same as {"count": 1}
```

"""

from collections.abc import Mapping
from typing import Any

from loguru import logger
from pydantic import ValidationError

from offline_eventbus.settings import Settings, get_settings

from .core import (
    BusConfig,
    BusConfigurationError,
    EventName,
    Listener,
    ListenerOptions,
    ListenerRecord,
    merge_options,
    same_callback,
)


class EventBus:
    """In-process publish/subscribe bus with count limits and offline replay.

    Each instance owns its own listener registry and offline buffer; two
    buses never share state.

    Example:
        ```python
        bus = EventBus()
        bus.on("user.created", send_welcome_email)
        bus.emit("user.created", user)
        ```
    """

    def __init__(self, config: BusConfig | Mapping[str, Any] | None = None) -> None:
        """Initialize a new EventBus instance.

        Args:
            config: ``BusConfig``, a mapping such as ``{"offline": True}``, or None
                for the defaults. Unknown keys are ignored.

        Raises:
            BusConfigurationError: If the configuration cannot be validated
        """
        self._config = self._build_config(config)
        self._registry: dict[EventName, list[ListenerRecord]] = {}
        self._offline_buffer: dict[EventName, list[tuple[Any, ...]]] = {}
        logger.debug(f"EventBus initialized (offline={self._config.offline})")

    @staticmethod
    def _build_config(config: BusConfig | Mapping[str, Any] | None) -> BusConfig:
        if config is None:
            return BusConfig()
        if isinstance(config, BusConfig):
            return config
        if not isinstance(config, Mapping):
            raise BusConfigurationError(f"Bus configuration must be a mapping or BusConfig, got: {type(config).__name__}")
        try:
            return BusConfig.model_validate(dict(config))
        except ValidationError as e:
            raise BusConfigurationError(f"Invalid bus configuration: {e}") from e

    @property
    def config(self) -> BusConfig:
        """Get the configuration the bus was created with."""
        return self._config

    @property
    def is_offline_mode(self) -> bool:
        """Whether events emitted without listeners are buffered for replay."""
        return self._config.offline

    def get_listeners(self, name: EventName) -> list[ListenerRecord]:
        """Get the live listener list for an event name, creating it if needed."""
        return self._registry.setdefault(name, [])

    def listener_count(self, name: EventName) -> int:
        """Get the number of listeners registered for an event name."""
        return len(self._registry.get(name, ()))

    def get_offline_args(self, name: EventName) -> list[tuple[Any, ...]]:
        """Get the live offline buffer for an event name, creating it if needed."""
        return self._offline_buffer.setdefault(name, [])

    def get_registered_events(self) -> list[EventName]:
        """Get all event names that currently have at least one listener.

        Returns:
            List of event names in first-registration order

        Example:
            ```python
            for name in bus.get_registered_events():
                print(f"{name}: {bus.listener_count(name)} listeners")
            ```
        """
        return [name for name, listeners in self._registry.items() if listeners]

    def clear_listeners(self, name: EventName) -> None:
        """Remove every listener registered for an event name."""
        listeners = self._registry.get(name)
        if not listeners:
            return
        for record in listeners:
            record.removed = True
        listeners.clear()
        logger.debug(f"Cleared listeners for {name!r}")

    def clear_offline(self, name: EventName) -> None:
        """Drop every buffered argument tuple for an event name."""
        buffered = self._offline_buffer.get(name)
        if buffered:
            logger.debug(f"Dropped {len(buffered)} buffered events for {name!r}")
            buffered.clear()

    def on(
        self,
        name: EventName | None,
        callback: Listener,
        options: ListenerOptions | Mapping[str, Any] | None = None,
    ) -> None:
        """Register a listener and replay any buffered events for its name.

        Nothing happens when ``name`` is None or ``callback`` is not callable.

        Args:
            name: The event name to listen on
            callback: Called with the positional arguments of each matching emit
            options: ``count`` limits the number of invocations (-1 unlimited,
                0 skips registration); ``repeat`` requests a duplicate
                registration of the same callback
        """
        if name is None or not callable(callback):
            logger.trace(f"Ignoring registration (name={name!r}, callback={callback!r})")
            return
        self.register_listener(name, callback, options)
        self.exec_offline_listeners(name)

    def once(self, name: EventName | None, callback: Listener) -> None:
        """Register a listener that is removed after its first invocation."""
        self.on(name, callback, {"count": 1})

    def register_listener(
        self,
        name: EventName,
        callback: Listener,
        options: ListenerOptions | Mapping[str, Any] | None = None,
    ) -> bool:
        """Append a listener record without triggering offline replay.

        Returns:
            True if a record was added, False if the registration was skipped
        """
        option = merge_options(options)
        listeners = self.get_listeners(name)

        if option.count == 0:
            logger.debug(f"Skipped listener for {name!r}: count is 0")
            return False
        # repeat=True never registers, even for a new callback (see DESIGN.md)
        if option.repeat:
            logger.debug(f"Skipped listener for {name!r}: repeat registrations are rejected")
            return False
        if any(same_callback(record.callback, callback) for record in listeners):
            logger.debug(f"Skipped listener for {name!r}: callback already registered")
            return False

        listeners.append(ListenerRecord(callback=callback, count=option.count))
        logger.debug(f"Registered listener for {name!r}: {callback!r} (count={option.count})")
        return True

    def off(self, name: EventName | None, callback: Listener | None = None) -> None:
        """Remove listeners for an event name.

        In offline mode the buffered events for ``name`` are dropped as well,
        whether or not ``callback`` is given.

        Args:
            name: The event name; nothing happens when it is None
            callback: Remove every record holding this callback. When omitted
                all listeners for ``name`` are removed.
        """
        if name is None:
            return
        if self.is_offline_mode:
            self.clear_offline(name)
        if callback is None:
            self.clear_listeners(name)
            return

        listeners = self._registry.get(name, [])
        for index in range(len(listeners) - 1, -1, -1):
            if same_callback(listeners[index].callback, callback):
                listeners.pop(index).removed = True
                logger.debug(f"Removed listener for {name!r}: {callback!r}")

    def emit(self, name: EventName, *args: Any) -> None:
        """Emit an event to its listeners, or buffer it in offline mode.

        An emit with no listeners is buffered when the bus is offline and is
        a no-op otherwise. Exceptions raised by listeners propagate to the
        caller; listeners after the failing one are not invoked.

        Args:
            name: The event name
            *args: Positional arguments passed to every listener
        """
        if self.listener_count(name) == 0 and self.is_offline_mode:
            self.get_offline_args(name).append(args)
            logger.debug(f"Buffered {name!r} for offline replay ({len(self._offline_buffer[name])} pending)")
            return
        self.exec_listeners(name, *args)

    def exec_listeners(self, name: EventName, *args: Any) -> None:
        """Run one dispatch pass over the listeners of an event name.

        The pass covers the records present when it starts, in registration
        order. Records removed while it runs are skipped and records added
        while it runs wait for the next pass. A record whose count reaches
        zero is removed before the pass moves on.
        """
        listeners = self._registry.get(name)
        if not listeners:
            logger.trace(f"No listeners for {name!r}")
            return

        logger.trace(f"Dispatching {name!r} to {len(listeners)} listeners")
        for record in tuple(listeners):
            if record.removed:
                continue
            record.callback(*args)
            if record.removed or record.unlimited:
                continue
            record.count -= 1
            if record.count == 0:
                record.removed = True
                listeners.remove(record)
                logger.trace(f"Listener {record.callback!r} for {name!r} exhausted")

    def exec_offline_listeners(self, name: EventName) -> None:
        """Replay buffered events for an event name against current listeners.

        Each round takes ``min(buffered, listeners)`` tuples from the front of
        the buffer and dispatches them in order. The bound is recomputed every
        round, so listeners added during replay still receive the tuples that
        remain, and replay stops as soon as no listener is left.
        """
        buffered = self._offline_buffer.get(name)
        if not buffered:
            return

        consume_count = min(len(buffered), self.listener_count(name))
        while consume_count > 0:
            batch = buffered[:consume_count]
            del buffered[:consume_count]
            logger.debug(f"Replaying {len(batch)} buffered events for {name!r}")
            for args in batch:
                self.exec_listeners(name, *args)
            consume_count = min(len(buffered), self.listener_count(name))


def create_event_bus(settings: Settings | None = None) -> EventBus:
    """Create a new EventBus configured from settings.

    Args:
        settings: Settings to read ``offline`` from. Defaults to ``get_settings()``.

    Returns:
        A new EventBus; every call returns an independent instance

    Example:
        ```python
        bus = create_event_bus()               # honours EVENTBUS_OFFLINE
        bus = create_event_bus(Settings(offline=True))
        ```
    """
    settings = settings or get_settings()
    return EventBus(BusConfig(offline=settings.offline))
