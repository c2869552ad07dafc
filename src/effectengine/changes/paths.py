from __future__ import annotations

from typing import Any, Mapping, MutableMapping

_MISSING = object()


def get_at_path(document: Any, path: str, default: Any = None) -> Any:
    """Read a dotted key path from nested mappings or attribute objects."""

    current = document
    for part in path.split("."):
        if current is None:
            return default
        if isinstance(current, Mapping):
            current = current.get(part, _MISSING)
        else:
            current = getattr(current, part, _MISSING)
        if current is _MISSING:
            return default
    return default if current is None else current


def set_at_path(document: MutableMapping[str, Any], path: str, value: Any) -> None:
    """Write ``value`` at a dotted key path, creating intermediate mappings."""

    parts = path.split(".")
    target = document
    for part in parts[:-1]:
        child = target.get(part)
        if not isinstance(child, MutableMapping):
            child = {}
            target[part] = child
        target = child
    target[parts[-1]] = value


def merge_changes(document: MutableMapping[str, Any], changes: Mapping[str, Any] | None) -> MutableMapping[str, Any]:
    """Write a changes map into ``document`` in place and return it."""

    if not changes:
        return document
    for key, value in changes.items():
        set_at_path(document, key, value)
    return document
