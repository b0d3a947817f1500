from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..core.enums import ChangeType, EntityType, Role
from ..core.exceptions import DeserializationError


@dataclass(frozen=True)
class ChangeEvent:
    """One add/update/delete mutation on one entity type.

    ``data`` is JSON-compatible: the affected record for add/delete, and
    ``{"id", "old", "new"}`` for update.
    """

    type: ChangeType
    entity_type: EntityType
    data: Any
    timestamp: int
    user_id: Optional[str] = None
    source: Optional[Role] = None

    def to_message(self) -> str:
        payload: Dict[str, Any] = {
            "type": self.type.value,
            "entityType": self.entity_type.value,
            "data": self.data,
            "timestamp": int(self.timestamp),
        }
        if self.user_id is not None:
            payload["userId"] = self.user_id
        if self.source is not None:
            payload["source"] = self.source.value
        return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)

    @classmethod
    def from_message(cls, message: str) -> "ChangeEvent":
        try:
            raw = json.loads(message)
            return cls(
                type=ChangeType(raw["type"]),
                entity_type=EntityType(raw["entityType"]),
                data=raw.get("data"),
                timestamp=int(raw["timestamp"]),
                user_id=raw.get("userId"),
                source=Role(raw["source"]) if raw.get("source") else None,
            )
        except (KeyError, TypeError, ValueError) as e:
            raise DeserializationError(f"Malformed change event: {e}") from e
