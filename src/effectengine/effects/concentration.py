from __future__ import annotations

import copy
from typing import Any, Mapping

import esper

from effectengine.components.actor import Actor
from effectengine.components.document import Document
from effectengine.components.item import Item
from effectengine.constants import DURATION_SECONDS, STATUS_CONCENTRATING
from effectengine.effects.registry import StatusEffectRegistry, default_status_registry
from effectengine.errors import ConcentrationError


def effect_duration_from_item(duration: Mapping[str, Any] | None) -> dict[str, int]:
    """Map an item's duration onto an effect duration."""

    duration = duration or {}
    value = duration.get("value") or 1
    try:
        value = int(value)
    except (TypeError, ValueError):
        value = 1
    units = duration.get("units")
    if units == "turn":
        return {"turns": value}
    if units == "round":
        return {"rounds": value}
    if units in DURATION_SECONDS:
        return {"seconds": value * DURATION_SECONDS[units]}
    return {}


def _merge(target: dict[str, Any], source: Mapping[str, Any]) -> dict[str, Any]:
    for key, value in source.items():
        if isinstance(value, Mapping) and isinstance(target.get(key), dict):
            _merge(target[key], value)
        else:
            target[key] = copy.deepcopy(value)
    return target


def create_concentration_effect_data(
    item_entity: int,
    data: Mapping[str, Any] | None = None,
    registry: StatusEffectRegistry | None = None,
) -> dict[str, Any]:
    """Build effect data for an actor concentrating on an embedded item."""

    item = esper.try_component(item_entity, Item)
    document = esper.try_component(item_entity, Document)
    if item is None or document is None:
        raise ConcentrationError("You may not begin concentrating on this item!")
    embedded = document.parent_entity is not None and esper.has_component(document.parent_entity, Actor)
    if not embedded or not item.requires_concentration:
        raise ConcentrationError("You may not begin concentrating on this item!")

    status = (registry or default_status_registry).get(STATUS_CONCENTRATING)
    effect_data: dict[str, Any] = {
        "name": f"Concentrating: {document.name}",
        "img": status.img,
        "description": f"Concentrating on {document.name} ({item.type}).",
        "duration": effect_duration_from_item(item.system.get("duration")),
        "origin": document.uuid,
        "statuses": [status.id, *status.statuses],
        "flags": {"dnd5e": {"item": {"data": document.id}}},
    }
    if item.type == "spell":
        effect_data["flags"]["dnd5e"]["spellLevel"] = item.system.get("level", 0)
    return _merge(effect_data, data or {})
