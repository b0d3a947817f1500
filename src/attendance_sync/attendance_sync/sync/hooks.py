"""Subscription hooks that bind a view's lifetime to broadcast channels.

A view creates a hook, starts it when it mounts (or enters it as a context
manager) and stops it when it is torn down. Refresh is coarse: every event
on any listed channel triggers the callback, with no payload filtering, so
subscribers re-fetch whole collections.
"""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Callable, Generic, Iterable, List, Optional, TypeVar, Union

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_NOTIFICATION_DISMISS_SECONDS
from ..core.enums import EntityType
from .events import ChangeEvent
from .fabric import BroadcastFabric, Unsubscribe


T = TypeVar("T")

EntityTypes = Union[EntityType, Iterable[EntityType]]


def _as_list(entity_types: EntityTypes) -> List[EntityType]:
    if isinstance(entity_types, (str, EntityType)):
        return [EntityType(entity_types)]
    return [EntityType(e) for e in entity_types]


class RealtimeSync:
    """Forward every event on the listed channels to ``on_change``."""

    def __init__(
        self,
        fabric: BroadcastFabric,
        entity_types: EntityTypes,
        on_change: Callable[[ChangeEvent], None],
        *,
        enabled: bool = True,
    ):
        self._fabric = fabric
        self._entity_types = _as_list(entity_types)
        self._on_change = on_change
        self._enabled = enabled
        self._unsubscribers: List[Unsubscribe] = []

    @property
    def entity_types(self) -> List[EntityType]:
        return list(self._entity_types)

    @property
    def active(self) -> bool:
        return bool(self._unsubscribers)

    def start(self) -> "RealtimeSync":
        if not self._enabled or self.active:
            return self
        for entity_type in self._entity_types:
            self._unsubscribers.append(self._fabric.subscribe(entity_type, self._handle))
        return self

    def stop(self) -> None:
        unsubscribers, self._unsubscribers = self._unsubscribers, []
        for unsub in unsubscribers:
            unsub()

    def __enter__(self) -> "RealtimeSync":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    def _handle(self, event: ChangeEvent) -> None:
        self._on_change(event)


def realtime_refresh(
    fabric: BroadcastFabric,
    entity_types: EntityTypes,
    on_refresh: Callable[[], None],
    *,
    enabled: bool = True,
) -> RealtimeSync:
    """Hook that calls ``on_refresh()`` for every event on the listed channels."""

    return RealtimeSync(fabric, entity_types, lambda _event: on_refresh(), enabled=enabled)


class RealtimeState(Generic[T]):
    """View state kept current by re-running ``loader`` on every event.

    When ``merge`` is given it is used instead of a full reload.
    """

    def __init__(
        self,
        loader: Callable[[], T],
        fabric: BroadcastFabric,
        entity_types: EntityTypes,
        *,
        merge: Optional[Callable[[T, ChangeEvent], T]] = None,
    ):
        self._loader = loader
        self._merge = merge
        self.data: T = loader()
        self.refresh_count = 0
        self._sync = RealtimeSync(fabric, entity_types, self._on_change)

    def start(self) -> "RealtimeState[T]":
        # Events fired before mounting are never replayed: reload on mount.
        self.data = self._loader()
        self._sync.start()
        return self

    def stop(self) -> None:
        self._sync.stop()

    def __enter__(self) -> "RealtimeState[T]":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    def _on_change(self, event: ChangeEvent) -> None:
        if self._merge is not None:
            self.data = self._merge(self.data, event)
        else:
            self.data = self._loader()
        self.refresh_count += 1


class RealtimeNotification:
    """Latest change event on the listed channels, hidden after ``dismiss_after``."""

    def __init__(
        self,
        fabric: BroadcastFabric,
        entity_types: EntityTypes,
        *,
        dismiss_after: timedelta = timedelta(seconds=DEFAULT_NOTIFICATION_DISMISS_SECONDS),
        clock: Callable[[], datetime] = now_local,
    ):
        self._dismiss_after = dismiss_after
        self._clock = clock
        self._event: Optional[ChangeEvent] = None
        self._received_at: Optional[datetime] = None
        self._sync = RealtimeSync(fabric, entity_types, self._on_change)

    @property
    def current(self) -> Optional[ChangeEvent]:
        if self._event is None or self._received_at is None:
            return None
        if self._clock() - self._received_at >= self._dismiss_after:
            return None
        return self._event

    def dismiss(self) -> None:
        self._event = None
        self._received_at = None

    def start(self) -> "RealtimeNotification":
        self._sync.start()
        return self

    def stop(self) -> None:
        self._sync.stop()

    def __enter__(self) -> "RealtimeNotification":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    def _on_change(self, event: ChangeEvent) -> None:
        self._event = event
        self._received_at = self._clock()
