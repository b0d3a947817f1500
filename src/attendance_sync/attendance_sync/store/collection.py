"""Generic typed collection stored as one JSON array under a fixed key.

Every mutation reads the whole array, changes it, writes the whole array
back through the persister and publishes one change event on the entity's
channel once that write has reached storage. A mutation never overwrites a
blob it could not read. Reads are linear scans; there is no index.
"""
from __future__ import annotations

import dataclasses
import logging
import threading
from datetime import datetime
from typing import Any, Callable, Dict, Generic, List, Mapping, Optional, Tuple, Type, TypeVar

from ..common.codec import coerce_fields, dumps, loads, record_from_dict, record_to_dict
from ..common.datetime_utils import epoch_millis
from ..core.enums import ChangeType, EntityType, ResultStatus, Role
from ..core.exceptions import (
    ConflictError,
    DeserializationError,
    NotFoundError,
    StorageWriteError,
    StoreError,
    ValidationError,
)
from ..core.results import MutationResult, ReadResult
from ..storage.persister import Persister
from ..sync.events import ChangeEvent
from ..sync.fabric import BroadcastFabric

logger = logging.getLogger(__name__)

T = TypeVar("T")

Actor = Callable[[], Tuple[Optional[str], Optional[Role]]]


def _no_actor() -> Tuple[Optional[str], Optional[Role]]:
    return None, None


class Collection(Generic[T]):
    def __init__(
        self,
        *,
        key: str,
        entity_type: EntityType,
        record_type: Type[T],
        persister: Persister,
        fabric: BroadcastFabric,
        clock: Callable[[], datetime],
        actor: Optional[Actor] = None,
        lock: Optional[threading.RLock] = None,
        id_attr: str = "id",
    ):
        self.key = key
        self.entity_type = EntityType(entity_type)
        self.record_type = record_type
        self._persister = persister
        self._fabric = fabric
        self._clock = clock
        self._actor = actor or _no_actor
        self._lock = lock or threading.RLock()
        self._id_attr = id_attr
        self._field_names = {f.name for f in dataclasses.fields(record_type)}

    # ---- reads -------------------------------------------------------------

    def read(self) -> ReadResult[T]:
        """Decode the stored array. A missing key is an empty collection, not an error."""

        try:
            text = self._persister.read(self.key)
        except StoreError as e:
            return ReadResult(records=[], error=e)
        if text is None:
            return ReadResult(records=[])

        try:
            raw = loads(text, key=self.key)
            if not isinstance(raw, list):
                raise DeserializationError(f"Expected a JSON array under {self.key!r}", key=self.key)
            records = [record_from_dict(self.record_type, item) for item in raw]
        except DeserializationError as e:
            if e.key is None:
                e.key = self.key
            return ReadResult(records=[], error=e)
        return ReadResult(records=records)

    def get_all(self) -> List[T]:
        result = self.read()
        if result.error is not None:
            logger.warning(f"Treating {self.key} as empty: {result.error}")
        return result.records

    def get_by_id(self, record_id: str) -> Optional[T]:
        for record in self.get_all():
            if self._id_of(record) == record_id:
                return record
        return None

    def filter(self, predicate: Callable[[T], bool]) -> List[T]:
        return [r for r in self.get_all() if predicate(r)]

    # ---- mutations ---------------------------------------------------------

    def add(self, record: T) -> MutationResult[T]:
        with self._lock:
            current = self.read()
            if current.error is not None:
                return self._read_failed(current.error)
            records = current.records
            records.append(record)
            error = self._save(records)
            if error is not None:
                return MutationResult.failure(ResultStatus.WRITE_FAILED, error)
            event = self._event(ChangeType.ADD, record_to_dict(record))
        self._publish_when_written(event)
        return MutationResult.success(record)

    def update(
        self,
        record_id: str,
        changes: Optional[Mapping[str, Any]] = None,
        *,
        expected: Optional[T] = None,
        **fields: Any,
    ) -> MutationResult[T]:
        """Shallow-merge ``changes`` (snake_case attribute names) into the record with ``record_id``.

        ``expected`` turns the write into a compare-and-set: if the stored record
        differs from it, nothing is written and a CONFLICT result is returned.
        """

        merged: Dict[str, Any] = dict(changes or {})
        merged.update(fields)
        unknown = sorted(set(merged) - self._field_names)
        if unknown:
            raise ValidationError(f"Unknown {self.record_type.__name__} fields: {', '.join(unknown)}")
        try:
            coerced = coerce_fields(self.record_type, merged)
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Invalid {self.record_type.__name__} value: {e}") from e

        return self.modify(record_id, lambda current: dataclasses.replace(current, **coerced), expected=expected)

    def modify(
        self,
        record_id: str,
        change: Callable[[T], T],
        *,
        expected: Optional[T] = None,
        event_extra: Optional[Callable[[T, T], Dict[str, Any]]] = None,
        change_type: ChangeType = ChangeType.UPDATE,
    ) -> MutationResult[T]:
        with self._lock:
            current = self.read()
            if current.error is not None:
                return self._read_failed(current.error)
            records = current.records
            index = self._index_of(records, record_id)
            if index is None:
                return self._not_found(record_id)

            old = records[index]
            if expected is not None and old != expected:
                return MutationResult.failure(
                    ResultStatus.CONFLICT,
                    ConflictError(f"{self.record_type.__name__} {record_id!r} changed since it was read", key=self.key),
                    previous=old,
                )

            new = change(old)
            records[index] = new
            error = self._save(records)
            if error is not None:
                return MutationResult.failure(ResultStatus.WRITE_FAILED, error, previous=old)

            data: Dict[str, Any] = {"id": record_id, "old": record_to_dict(old), "new": record_to_dict(new)}
            if event_extra is not None:
                data.update(event_extra(old, new))
            event = self._event(change_type, data)
        self._publish_when_written(event)
        return MutationResult.success(new, previous=old)

    def delete(self, record_id: str) -> MutationResult[T]:
        with self._lock:
            current = self.read()
            if current.error is not None:
                return self._read_failed(current.error)
            records = current.records
            index = self._index_of(records, record_id)
            if index is None:
                return self._not_found(record_id)
            removed = records.pop(index)
            error = self._save(records)
            if error is not None:
                return MutationResult.failure(ResultStatus.WRITE_FAILED, error, previous=removed)
            event = self._event(ChangeType.DELETE, record_to_dict(removed))
        self._publish_when_written(event)
        return MutationResult.success(removed, previous=removed)

    def replace_all(self, records: List[T], *, immediate: bool = False) -> None:
        """Overwrite the whole collection without broadcasting (seeding, imports, repairing a corrupt blob)."""

        with self._lock:
            self._persister.write(self.key, self._encode(records), immediate=immediate)

    # ---- helpers -----------------------------------------------------------

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    def publish(self, change_type: ChangeType, data: Any) -> None:
        self._publish_when_written(self._event(change_type, data))

    def _read_failed(self, error: StoreError) -> MutationResult[T]:
        # Writing now would replace records that could not be read.
        logger.error(f"Refusing to write {self.key}: {error}")
        return MutationResult.failure(ResultStatus.READ_FAILED, error)

    def _not_found(self, record_id: str) -> MutationResult[T]:
        return MutationResult.failure(
            ResultStatus.NOT_FOUND,
            NotFoundError(f"{self.record_type.__name__} {record_id!r} not found", key=self.key),
        )

    def _save(self, records: List[T]) -> Optional[StorageWriteError]:
        try:
            self._persister.write(self.key, self._encode(records))
        except StorageWriteError as e:
            logger.error(f"Failed to save {self.key}: {e}")
            return e
        return None

    def _encode(self, records: List[T]) -> str:
        return dumps([record_to_dict(r) for r in records])

    def _event(self, change_type: ChangeType, data: Any) -> ChangeEvent:
        """Build the change event now, so it names the user who made the change."""

        user_id, role = self._actor()
        return ChangeEvent(
            type=change_type,
            entity_type=self.entity_type,
            data=data,
            timestamp=epoch_millis(self._clock()),
            user_id=user_id,
            source=role,
        )

    def _publish_when_written(self, event: ChangeEvent) -> None:
        # Subscribers re-read storage, so the event waits for a debounced save to land.
        self._persister.when_written(self.key, lambda: self._deliver(event))

    def _deliver(self, event: ChangeEvent) -> None:
        if not self._fabric.is_open:
            logger.debug(f"Fabric closed, {event.type.value} on {self.entity_type.value} not broadcast")
            return
        self._fabric.publish(self.entity_type, event)

    def _id_of(self, record: T) -> str:
        return getattr(record, self._id_attr)

    def _index_of(self, records: List[T], record_id: str) -> Optional[int]:
        for i, record in enumerate(records):
            if self._id_of(record) == record_id:
                return i
        return None
