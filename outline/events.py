"""Event channel for engine notifications.

Every completed or rejected operation produces exactly one event. Consumers
(renderer, persistence layer, collaboration bridge) subscribe with a callback;
the channel also keeps an in-memory log so callers and tests can inspect what
was emitted.

Usage:
    channel = EventChannel()
    channel.subscribe(lambda event: print(event.name, event.payload))
    channel.subscribe(on_archive, name="item:archive")
"""

import json
import logging
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Callable, Optional

from outline.lib.constants import EVENT_PERMISSION_DENIED

logger = logging.getLogger(__name__)

Listener = Callable[["Event"], None]


@dataclass
class Event:
    """A single notification."""
    name: str
    payload: dict
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    def to_dict(self) -> dict:
        return asdict(self)

    def to_json(self) -> str:
        return json.dumps({"event": self.name, **self.payload}, default=str)


class EventChannel:
    """Fan-out of engine events to subscribers."""

    def __init__(self, keep_log: bool = True):
        self.keep_log = keep_log
        self.log: list[Event] = []
        self._listeners: list[tuple[Optional[str], Listener]] = []

    def subscribe(self, listener: Listener, name: Optional[str] = None) -> Callable[[], None]:
        """Register listener for every event, or only events called `name`.

        Returns a function that removes the subscription.
        """
        entry = (name, listener)
        self._listeners.append(entry)

        def unsubscribe() -> None:
            if entry in self._listeners:
                self._listeners.remove(entry)

        return unsubscribe

    def emit(self, name: str, **payload) -> Event:
        """Build an event, record it and deliver it to subscribers."""
        event = Event(name=name, payload=payload)
        if self.keep_log:
            self.log.append(event)
        logger.debug(f"[EVENT] {name} {payload}")
        for wanted, listener in list(self._listeners):
            if wanted is None or wanted == name:
                listener(event)
        return event

    def permission_denied(self, item_id: str, action: str) -> Event:
        """Report a rejected operation."""
        logger.warning(f"[EVENT] {item_id}: {action} rejected")
        return self.emit(EVENT_PERMISSION_DENIED, id=item_id, action=action)

    def names(self) -> list[str]:
        """Names of logged events, oldest first."""
        return [e.name for e in self.log]

    def last(self, name: Optional[str] = None) -> Optional[Event]:
        """Most recent logged event (optionally of one name)."""
        for event in reversed(self.log):
            if name is None or event.name == name:
                return event
        return None

    def clear(self) -> None:
        self.log.clear()
