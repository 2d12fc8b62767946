"""Helpers shared by the entity services."""
from __future__ import annotations

from typing import Any, Iterable, Mapping

from portal.exceptions import NotFoundError

# fields a caller may never overwrite through an update payload
SERVER_OWNED = ('id', 'created_at')


def found(obj, entity: str, pk: Any):
    if obj is None:
        raise NotFoundError(entity, pk)
    return obj


def apply_changes(obj, data: Mapping[str, Any], *, preserve: Iterable[str] = SERVER_OWNED):
    """Copy ``data`` onto ``obj``, then restore the server-owned fields."""
    kept = {name: getattr(obj, name) for name in preserve if hasattr(obj, name)}
    for name, value in data.items():
        setattr(obj, name, value)
    for name, value in kept.items():
        setattr(obj, name, value)
    return obj
