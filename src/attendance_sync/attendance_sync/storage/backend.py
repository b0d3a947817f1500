from __future__ import annotations

from typing import Iterable, Optional, Protocol


class KeyValueStorage(Protocol):
    """Storage primitive the store is built on: string keys to string blobs.

    Note (DIP): the persister depends on this interface, not on a concrete backend.
    Implementations raise ``StorageWriteError`` when a write is refused.
    """

    def get_item(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set_item(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove_item(self, key: str) -> None:
        raise NotImplementedError

    def keys(self) -> Iterable[str]:
        raise NotImplementedError

    def clear(self) -> None:
        raise NotImplementedError
