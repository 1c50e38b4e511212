from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Hashable

from pydantic import BaseModel


QueryKey = tuple[Hashable, ...]


def _freeze(value: Any) -> Hashable:
    # Normalize parameters into a hashable, order-independent form; unset filters vanish.
    if isinstance(value, BaseModel):
        value = value.model_dump(exclude_none=True)
    if isinstance(value, Mapping):
        return tuple(
            sorted((str(name), _freeze(item)) for name, item in value.items() if item is not None)
        )
    if isinstance(value, (set, frozenset)):
        return tuple(sorted(_freeze(item) for item in value))
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(item) for item in value)
    return value


def query_key(name: str, *params: Any) -> QueryKey:
    return (name, *(_freeze(param) for param in params))


def matches_prefix(key: QueryKey, prefix: QueryKey) -> bool:
    # Partial keys address every slot that starts with them, like ("anomalies",).
    return key[: len(prefix)] == prefix
