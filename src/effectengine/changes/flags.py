from __future__ import annotations

from dataclasses import replace
from typing import Any, Mapping

from effectengine.changes.change import EffectChange
from effectengine.constants import CHARACTER_FLAGS, FLAGS_PREFIX
from effectengine.schema.type_tags import ResolvedType, TypeTag

_FLAG_TAGS = {
    bool: TypeTag.BOOLEAN,
    int: TypeTag.NUMBER,
    float: TypeTag.NUMBER,
    str: TypeTag.STRING,
}


def flag_config(key: str, flags: Mapping[str, Mapping[str, Any]] | None = None) -> Mapping[str, Any] | None:
    """Return the character flag configuration targeted by ``key``, if any."""

    if not key.startswith(FLAGS_PREFIX):
        return None
    flags = CHARACTER_FLAGS if flags is None else flags
    return flags.get(key[len(FLAGS_PREFIX):])


def flag_type(config: Mapping[str, Any]) -> ResolvedType:
    return ResolvedType(_FLAG_TAGS.get(config.get("type"), TypeTag.UNTYPED))


def flag_initial_value(config: Mapping[str, Any]) -> Any:
    """Value a flag takes before any effect touched it."""

    if config.get("placeholder") is not None:
        return config["placeholder"]
    flag_kind = config.get("type")
    if flag_kind is bool:
        return False
    if flag_kind in (int, float):
        return 0
    return None


def prepare_flag_change(change: EffectChange, config: Mapping[str, Any]) -> EffectChange:
    """Coerce a flag change's value to the flag's declared type."""

    if config.get("type") is bool:
        return replace(change, value=change.value != "false" and bool(change.value))
    return change
