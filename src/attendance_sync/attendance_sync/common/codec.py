"""JSON codec between entity dataclasses and their stored camelCase form.

Stored records use the dashboard's camelCase keys (``studentId``,
``markedAt``). Optional attributes that are ``None`` are left out, and keys
the dataclass does not know are ignored on load.
"""
from __future__ import annotations

import dataclasses
import json
import typing
from enum import Enum
from functools import lru_cache
from typing import Any, Dict, List, Mapping, Type, TypeVar

from ..core.exceptions import DeserializationError

T = TypeVar("T")


def to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


@lru_cache(maxsize=None)
def _field_types(cls: type) -> Dict[str, Any]:
    return typing.get_type_hints(cls)


def _unwrap_optional(tp: Any) -> Any:
    if typing.get_origin(tp) is typing.Union:
        args = [a for a in typing.get_args(tp) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return tp


def _coerce(tp: Any, value: Any) -> Any:
    if value is None:
        return None
    tp = _unwrap_optional(tp)
    if isinstance(tp, type) and issubclass(tp, Enum):
        return tp(value)
    if typing.get_origin(tp) in (list, List):
        return list(value)
    if tp is int and isinstance(value, str):
        return int(value)
    return value


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


def record_to_dict(record: Any) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for f in dataclasses.fields(record):
        value = getattr(record, f.name)
        if value is None:
            continue
        out[to_camel(f.name)] = _plain(value)
    return out


def record_from_dict(cls: Type[T], raw: Mapping[str, Any]) -> T:
    if not isinstance(raw, Mapping):
        raise DeserializationError(f"{cls.__name__} record must be an object, got {type(raw).__name__}")

    hints = _field_types(cls)
    kwargs: Dict[str, Any] = {}
    for f in dataclasses.fields(cls):
        camel = to_camel(f.name)
        if camel in raw:
            value = raw[camel]
        elif f.name in raw:
            value = raw[f.name]
        else:
            continue
        try:
            kwargs[f.name] = _coerce(hints[f.name], value)
        except (TypeError, ValueError) as e:
            raise DeserializationError(f"{cls.__name__}.{f.name}: {e}") from e

    try:
        return cls(**kwargs)
    except TypeError as e:
        raise DeserializationError(f"{cls.__name__}: {e}") from e


def dumps(payload: Any) -> str:
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)


def loads(text: str, *, key: str | None = None) -> Any:
    try:
        return json.loads(text)
    except (TypeError, ValueError) as e:
        raise DeserializationError(f"Malformed JSON under {key!r}: {e}", key=key) from e


def coerce_fields(cls: type, changes: Mapping[str, Any]) -> Dict[str, Any]:
    """Coerce partial-update values (e.g. plain strings for enum fields) to the field types."""

    hints = _field_types(cls)
    return {name: _coerce(hints[name], value) for name, value in changes.items()}
