from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional

from .announcements.service import AnnouncementService
from .attendance.report import AttendanceReportService
from .attendance.service import AttendanceService
from .core.constants import (
    DEFAULT_CHANNEL_PREFIX,
    DEFAULT_DEBOUNCE_MS,
    DEFAULT_LIVE_CODE_TTL_MINUTES,
)
from .core.enums import FlushPolicy
from .registrations.service import RegistrationService
from .storage.backend import KeyValueStorage
from .storage.memory_storage import MemoryStorage
from .storage.persister import Persister, TimerFactory
from .storage.sqlite_storage import SQLiteStorage
from .store.store import AttendanceStore
from .sync.fabric import BroadcastFabric, BroadcastHub
from .sync.storage_watch import KeyChangeHandler, StorageWatcher
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    """Everything one context (one simulated tab) needs, wired together."""

    storage: KeyValueStorage
    hub: BroadcastHub
    persister: Persister
    fabric: BroadcastFabric
    store: AttendanceStore

    auth_service: AuthService
    user_service: UserService
    attendance_service: AttendanceService
    report_service: AttendanceReportService
    announcement_service: AnnouncementService
    registration_service: RegistrationService

    def watch_storage(self, on_change: KeyChangeHandler, **kwargs: Any) -> StorageWatcher:
        """Watcher for raw writes to this context's storage; call ``start()`` on it."""

        return StorageWatcher(self.storage, on_change, **kwargs)

    def close(self) -> None:
        self.store.close()


def build_storage(settings: Any) -> KeyValueStorage:
    backend = str(getattr(settings, "STORAGE_BACKEND", "memory")).lower()
    if backend == "sqlite":
        return SQLiteStorage(getattr(settings, "STORAGE_PATH", None))
    if backend == "memory":
        return MemoryStorage(quota_bytes=getattr(settings, "STORAGE_QUOTA_BYTES", None))
    raise ValueError(f"Unknown STORAGE_BACKEND: {backend!r}")


def build_container(
    *,
    settings: Any,
    storage: Optional[KeyValueStorage] = None,
    hub: Optional[BroadcastHub] = None,
    clock: Optional[Callable[[], datetime]] = None,
    timer_factory: Optional[TimerFactory] = None,
) -> Container:
    """Build one context. Pass the same ``storage`` and ``hub`` to build sibling contexts."""

    storage = storage if storage is not None else build_storage(settings)
    hub = hub if hub is not None else BroadcastHub()

    persister = Persister(
        storage,
        policy=FlushPolicy(str(getattr(settings, "FLUSH_POLICY", FlushPolicy.IMMEDIATE.value)).lower()),
        debounce_ms=int(getattr(settings, "AUTOSAVE_DEBOUNCE_MS", DEFAULT_DEBOUNCE_MS)),
        timer_factory=timer_factory,
    )
    fabric = BroadcastFabric(hub, prefix=str(getattr(settings, "CHANNEL_PREFIX", DEFAULT_CHANNEL_PREFIX)))
    password_method = getattr(settings, "PASSWORD_HASH_METHOD", None) or None

    store = AttendanceStore(
        persister,
        fabric,
        clock=clock,
        live_code_ttl_minutes=int(getattr(settings, "LIVE_CODE_TTL_MINUTES", DEFAULT_LIVE_CODE_TTL_MINUTES)),
        password_hash_method=password_method,
    ).open()

    if bool(getattr(settings, "AUTO_SEED", True)):
        store.initialize()

    return Container(
        storage=storage,
        hub=hub,
        persister=persister,
        fabric=fabric,
        store=store,
        auth_service=AuthService(store),
        user_service=UserService(store, password_method=password_method),
        attendance_service=AttendanceService(store),
        report_service=AttendanceReportService(store),
        announcement_service=AnnouncementService(store),
        registration_service=RegistrationService(store),
    )
