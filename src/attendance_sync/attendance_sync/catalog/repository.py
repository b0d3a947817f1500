from __future__ import annotations

from typing import Generic, List, Optional, TypeVar

from ..core.results import MutationResult
from ..store.collection import Collection
from .model import Department, MasterSubject, Section

T = TypeVar("T")


class _CatalogRepository(Generic[T]):
    def __init__(self, collection: Collection[T]):
        self._items = collection

    @property
    def collection(self) -> Collection[T]:
        return self._items

    def get_all(self) -> List[T]:
        return self._items.get_all()

    def get_by_id(self, item_id: str) -> Optional[T]:
        return self._items.get_by_id(item_id)

    def add(self, item: T) -> MutationResult[T]:
        return self._items.add(item)

    def update(self, item_id: str, *, expected: Optional[T] = None, **changes) -> MutationResult[T]:
        return self._items.update(item_id, changes, expected=expected)

    def delete(self, item_id: str) -> MutationResult[T]:
        """Remove one entry. Dependent sections/subjects are left in place."""

        return self._items.delete(item_id)


class DepartmentRepository(_CatalogRepository[Department]):
    pass


class SectionRepository(_CatalogRepository[Section]):
    def by_department(self, department_id: str) -> List[Section]:
        return self._items.filter(lambda s: s.department_id == department_id)


class MasterSubjectRepository(_CatalogRepository[MasterSubject]):
    def by_department(self, department_id: str) -> List[MasterSubject]:
        return self._items.filter(lambda s: s.department_id == department_id)
