from __future__ import annotations

import importlib
from datetime import datetime

import pytest

from src.attendance_sync.attendance_sync.container import build_container
from src.attendance_sync.attendance_sync.core.enums import EntityType
from src.attendance_sync.attendance_sync.storage.memory_storage import MemoryStorage
from src.attendance_sync.attendance_sync.sync.fabric import BroadcastHub
from tests.helpers import FixedClock


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 1, 10, 9, 0, 0)


@pytest.fixture
def clock(fixed_now) -> FixedClock:
    return FixedClock(fixed_now)


@pytest.fixture
def settings():
    return importlib.import_module("config.testing")


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def hub() -> BroadcastHub:
    return BroadcastHub()


@pytest.fixture
def container(settings, storage, hub, clock):
    c = build_container(settings=settings, storage=storage, hub=hub, clock=clock)
    yield c
    c.close()


@pytest.fixture
def store(container):
    return container.store


@pytest.fixture
def other_tab(settings, storage, hub, clock):
    """A second context on the same storage profile."""

    c = build_container(settings=settings, storage=storage, hub=hub, clock=clock)
    yield c
    c.close()


@pytest.fixture
def recorder():
    """Subscribe a list-appending handler: ``events = recorder(fabric, EntityType.USER)``."""

    def subscribe(fabric, entity_type: EntityType) -> list:
        events: list = []
        fabric.subscribe(entity_type, events.append)
        return events

    return subscribe
