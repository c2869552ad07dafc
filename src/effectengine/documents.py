"""Conversion between plain document data and esper components."""
from __future__ import annotations

import copy
from dataclasses import asdict
from typing import Any, Mapping

import esper

from effectengine.changes.change import EffectChange
from effectengine.components.active_effect import ActiveEffect, EffectDuration, EffectType
from effectengine.components.actor import Actor
from effectengine.components.document import ACTIVE_EFFECT, ACTOR, ITEM, Document
from effectengine.components.item import Item
from effectengine.constants import FLAG_SCOPE


def effect_from_data(doc_id: str, data: Mapping[str, Any]) -> ActiveEffect:
    flags = copy.deepcopy(dict(data.get("flags") or {}))
    effect_type = data.get("type") or EffectType.GENERIC.value
    # Enchantments used to be flagged instead of typed.
    scoped = flags.get(FLAG_SCOPE)
    if isinstance(scoped, dict) and scoped.get("type") == EffectType.ENCHANTMENT.value:
        effect_type = EffectType.ENCHANTMENT.value
        del scoped["type"]
    duration = data.get("duration") or {}
    changes = [
        change if isinstance(change, EffectChange) else EffectChange.from_data(change)
        for change in data.get("changes") or ()
    ]
    return ActiveEffect(
        id=doc_id,
        name=data.get("name", ""),
        img=data.get("img", ""),
        type=EffectType(effect_type),
        origin=data.get("origin"),
        statuses=set(data.get("statuses") or ()),
        disabled=bool(data.get("disabled", False)),
        duration=EffectDuration(
            rounds=duration.get("rounds"),
            turns=duration.get("turns"),
            seconds=duration.get("seconds"),
        ),
        changes=changes,
        flags=flags,
        description=data.get("description", ""),
        transfer=bool(data.get("transfer", True)),
    )


def build_component(document_name: str, doc_id: str, data: Mapping[str, Any]) -> Any:
    if document_name == ACTIVE_EFFECT:
        return effect_from_data(doc_id, data)
    if document_name == ITEM:
        return Item(
            type=data.get("type", "equipment"),
            system=copy.deepcopy(dict(data.get("system") or {})),
            flags=copy.deepcopy(dict(data.get("flags") or {})),
        )
    if document_name == ACTOR:
        return Actor(
            type=data.get("type", "character"),
            system=copy.deepcopy(dict(data.get("system") or {})),
            flags=copy.deepcopy(dict(data.get("flags") or {})),
            schema=data.get("schema"),
            disposition=int(data.get("disposition", 0)),
        )
    raise ValueError(f"Unknown document type '{document_name}'")


def document_data(entity: int) -> dict[str, Any] | None:
    """Plain data copy of a stored document, suitable for creating a clone."""

    document = esper.try_component(entity, Document)
    if document is None:
        return None
    data: dict[str, Any] = {"_id": document.id, "name": document.name}
    effect = esper.try_component(entity, ActiveEffect)
    if effect is not None:
        data.update(
            name=effect.name,
            img=effect.img,
            type=effect.type.value,
            origin=effect.origin,
            statuses=sorted(effect.statuses),
            disabled=effect.disabled,
            duration={key: value for key, value in asdict(effect.duration).items() if value is not None},
            changes=list(effect.changes),
            flags=copy.deepcopy(effect.flags),
            description=effect.description,
            transfer=effect.transfer,
        )
        return data
    item = esper.try_component(entity, Item)
    if item is not None:
        data.update(type=item.type, system=copy.deepcopy(item.system), flags=copy.deepcopy(item.flags))
        return data
    actor = esper.try_component(entity, Actor)
    if actor is not None:
        data.update(type=actor.type, system=copy.deepcopy(actor.system), flags=copy.deepcopy(actor.flags))
    return data
