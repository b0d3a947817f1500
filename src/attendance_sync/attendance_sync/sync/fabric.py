"""Change broadcast fabric.

``BroadcastHub`` is the messaging medium shared by every context attached to
one storage profile (the stand-in for the browser's cross-tab channel
machinery). Each context owns a ``BroadcastFabric`` that opens one
``BroadcastChannel`` endpoint per entity type. A message posted on a channel
reaches every open endpoint with the same name, the sender included, so
subscribers in the publishing context refresh too.

Delivery is best-effort and synchronous on the publisher's thread: no
replay for late subscribers, no retry, no acknowledgement.
"""
from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, List, Optional

from ..core.constants import DEFAULT_CHANNEL_PREFIX
from ..core.enums import EntityType
from ..core.exceptions import ChannelClosedError, DeserializationError
from .events import ChangeEvent

logger = logging.getLogger(__name__)

Handler = Callable[[ChangeEvent], None]
Unsubscribe = Callable[[], None]


def channel_name(entity_type: EntityType, prefix: str = DEFAULT_CHANNEL_PREFIX) -> str:
    return f"{prefix}-{EntityType(entity_type).value}-updates"


class BroadcastHub:
    def __init__(self):
        self._lock = threading.RLock()
        self._endpoints: Dict[str, List["BroadcastChannel"]] = {}

    def register(self, channel: "BroadcastChannel") -> None:
        with self._lock:
            self._endpoints.setdefault(channel.name, []).append(channel)

    def unregister(self, channel: "BroadcastChannel") -> None:
        with self._lock:
            endpoints = self._endpoints.get(channel.name, [])
            if channel in endpoints:
                endpoints.remove(channel)
            if not endpoints:
                self._endpoints.pop(channel.name, None)

    def post(self, name: str, message: str) -> int:
        """Deliver ``message`` to every endpoint named ``name``. Returns how many were reached."""

        with self._lock:
            targets = list(self._endpoints.get(name, []))
        for endpoint in targets:
            endpoint._deliver(message)
        return len(targets)

    def endpoint_count(self, name: str) -> int:
        with self._lock:
            return len(self._endpoints.get(name, []))


class BroadcastChannel:
    """One context's endpoint on a named channel."""

    def __init__(self, name: str, hub: BroadcastHub):
        self.name = name
        self._hub = hub
        self._lock = threading.RLock()
        self._listeners: List[Callable[[str], None]] = []
        self._closed = False
        hub.register(self)

    @property
    def closed(self) -> bool:
        return self._closed

    def post_message(self, message: str) -> int:
        if self._closed:
            raise ChannelClosedError(f"Channel {self.name} is closed")
        return self._hub.post(self.name, message)

    def add_listener(self, listener: Callable[[str], None]) -> Unsubscribe:
        if self._closed:
            raise ChannelClosedError(f"Channel {self.name} is closed")

        with self._lock:
            self._listeners.append(listener)

        def remove() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return remove

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._hub.unregister(self)
        with self._lock:
            self._listeners.clear()

    def _deliver(self, message: str) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(message)
            except Exception as e:
                logger.error(f"Listener on {self.name} failed: {e}", exc_info=True)


class BroadcastFabric:
    """Per-context publish/subscribe over one channel per entity type."""

    def __init__(self, hub: BroadcastHub, *, prefix: str = DEFAULT_CHANNEL_PREFIX):
        self._hub = hub
        self._prefix = prefix
        self._channels: Dict[EntityType, BroadcastChannel] = {}
        self._open = False

    @property
    def hub(self) -> BroadcastHub:
        return self._hub

    @property
    def is_open(self) -> bool:
        return self._open

    def open(self) -> "BroadcastFabric":
        if self._open:
            return self
        for entity_type in EntityType:
            self._channels[entity_type] = BroadcastChannel(channel_name(entity_type, self._prefix), self._hub)
        self._open = True
        logger.debug(f"Broadcast fabric opened ({len(self._channels)} channels)")
        return self

    def close(self) -> None:
        if not self._open:
            return
        for channel in self._channels.values():
            channel.close()
        self._channels.clear()
        self._open = False
        logger.debug("Broadcast fabric closed")

    def __enter__(self) -> "BroadcastFabric":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def publish(self, entity_type: EntityType, event: ChangeEvent) -> int:
        channel = self._channel(entity_type)
        if event.entity_type != EntityType(entity_type):
            raise ValueError(f"Event for {event.entity_type.value} published on {channel.name}")
        return channel.post_message(event.to_message())

    def subscribe(self, entity_type: EntityType, handler: Handler) -> Unsubscribe:
        channel = self._channel(entity_type)

        def on_message(message: str) -> None:
            try:
                event = ChangeEvent.from_message(message)
            except DeserializationError as e:
                logger.warning(f"Dropping malformed message on {channel.name}: {e}")
                return
            handler(event)

        return channel.add_listener(on_message)

    def _channel(self, entity_type: EntityType) -> BroadcastChannel:
        if not self._open:
            raise ChannelClosedError("Broadcast fabric is not open. Call open() first.")
        return self._channels[EntityType(entity_type)]
