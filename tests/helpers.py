from __future__ import annotations

import asyncio
from typing import Any, Callable

from effectengine.components.document import ACTIVE_EFFECT, ACTOR, ITEM
from effectengine.schema.fields import (
    BooleanField,
    DocumentSchema,
    FormulaField,
    NumberField,
    ObjectField,
    SchemaField,
    SetField,
    StringField,
    ArrayField,
)
from effectengine.world import EffectSystems


def run(coro):
    return asyncio.run(coro)


def character_schema() -> DocumentSchema:
    """A trimmed-down creature schema covering every field type."""

    def ability() -> SchemaField:
        return SchemaField({"value": NumberField(initial=10, integer=True), "bonus": FormulaField()})

    system = SchemaField(
        {
            "abilities": SchemaField({"str": ability(), "dex": ability()}),
            "attributes": SchemaField(
                {
                    "hp": SchemaField({"max": NumberField(integer=True), "temp": NumberField(integer=True)}),
                    "speed": SchemaField({"walk": NumberField(), "special": StringField()}),
                    "exhaustion": NumberField(initial=0, integer=True),
                    "inspiration": BooleanField(),
                }
            ),
            "bonuses": SchemaField({"mwak": SchemaField({"attack": FormulaField(), "damage": FormulaField()})}),
            "details": SchemaField({"biography": StringField(), "alignment": StringField()}),
            "traits": SchemaField(
                {
                    "languages": SchemaField({"value": SetField(StringField()), "custom": StringField()}),
                    "size": StringField(initial="med"),
                }
            ),
            "resources": ObjectField(),
            "tags": ArrayField(StringField()),
            "rolls": ArrayField(NumberField()),
        }
    )
    return DocumentSchema({"name": StringField(), "flags": ObjectField()}, namespaces={"system": system})


def character_data(**overrides: Any) -> dict[str, Any]:
    system = {
        "abilities": {"str": {"value": 14, "bonus": ""}, "dex": {"value": 12, "bonus": "1"}},
        "attributes": {
            "hp": {"max": 20, "temp": 0},
            "speed": {"walk": 30, "special": "Climb"},
            "exhaustion": 0,
            "inspiration": False,
            "ac": {"bonus": ""},
        },
        "bonuses": {"mwak": {"attack": "", "damage": "1d4"}},
        "details": {"biography": "", "alignment": "Neutral"},
        "traits": {"languages": {"value": {"common", "elvish"}, "custom": ""}, "size": "med"},
        "resources": {"primary": {"value": 1}},
        "tags": ["hero"],
        "rolls": [1],
    }
    system.update(overrides)
    return system


def create_actor(engine: EffectSystems, name: str = "Hero", **kwargs: Any) -> int:
    data = {
        "name": name,
        "type": "character",
        "system": kwargs.pop("system", None) or character_data(),
        "schema": kwargs.pop("schema", None) or character_schema(),
    }
    data.update(kwargs)
    entity = run(engine.store.create(ACTOR, data))
    assert entity is not None
    return entity


def create_item(engine: EffectSystems, parent: int | None, name: str = "Sword", item_type: str = "weapon", **system: Any) -> int:
    entity = run(engine.store.create(ITEM, {"name": name, "type": item_type, "system": system}, parent=parent))
    assert entity is not None
    return entity


def create_effect(engine: EffectSystems, parent: int, options: dict | None = None, **data: Any) -> int | None:
    data.setdefault("name", "Effect")
    return run(engine.store.create(ACTIVE_EFFECT, data, parent=parent, options=options))


def recorder(bus, event_name: str) -> list[dict]:
    """Subscribe to ``event_name`` and collect every payload."""

    payloads: list[dict] = []

    def _record(sender, **payload):
        payloads.append(payload)

    bus.subscribe(event_name, _record)
    return payloads


class VetoingStore:
    """Persistence wrapper that refuses creations selected by ``should_veto``."""

    def __init__(self, store, should_veto: Callable[[int, dict], bool]):
        self.store = store
        self.should_veto = should_veto
        self.calls = 0

    async def create(self, document_name, data, *, parent=None, options=None):
        index = self.calls
        self.calls += 1
        if self.should_veto(index, data):
            return None
        return await self.store.create(document_name, data, parent=parent, options=options)

    async def delete(self, entity):
        return await self.store.delete(entity)
