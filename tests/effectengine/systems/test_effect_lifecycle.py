import esper
import pytest

from effectengine.components.active_effect import ActiveEffect, EffectType
from effectengine.components.document import ACTIVE_EFFECT, ITEM, Document
from effectengine.constants import ERROR_ENCHANTMENT_ON_ACTOR
from effectengine.events.bus import (
    EVENT_EFFECT_CREATED,
    EVENT_EFFECT_DELETED,
    EVENT_ENCHANTMENT_TRACKED,
    EVENT_ENCHANTMENT_UNTRACKED,
    EVENT_NOTIFY_ERROR,
)
from tests.helpers import create_actor, create_effect, create_item, recorder, run


def _uuid(entity):
    return esper.component_for_entity(entity, Document).uuid


@pytest.fixture
def enchanting(engine):
    actor = create_actor(engine)
    scroll = create_item(
        engine,
        actor,
        name="Scroll of Flames",
        item_type="consumable",
        enchantment={"restrictions": {"types": ["weapon"], "max": 1}},
    )
    sword = create_item(engine, actor, name="Sword", item_type="weapon", equipped=True)
    return actor, scroll, sword


def _enchant(engine, origin, target, **data):
    data.setdefault("name", "Flaming")
    return create_effect(engine, target, type="enchantment", origin=_uuid(origin), disabled=True, **data)


def test_effect_events_emitted(engine, bus):
    created = recorder(bus, EVENT_EFFECT_CREATED)
    deleted = recorder(bus, EVENT_EFFECT_DELETED)
    actor = create_actor(engine)

    effect = create_effect(engine, actor, name="Bless")
    uuid = _uuid(effect)
    run(engine.store.delete(effect))

    assert created == [{"effect_entity": effect, "parent_entity": actor, "uuid": uuid}]
    assert deleted == [{"effect_entity": effect, "parent_entity": actor, "uuid": uuid}]


def test_keep_origin_false_uses_parent(engine):
    actor = create_actor(engine)

    effect = create_effect(engine, actor, {"keep_origin": False}, name="Bless", origin="Item.elsewhere")

    assert esper.component_for_entity(effect, ActiveEffect).origin == _uuid(actor)


def test_enchantment_on_actor_is_refused(engine, bus):
    errors = recorder(bus, EVENT_NOTIFY_ERROR)
    actor = create_actor(engine)

    assert create_effect(engine, actor, name="Flaming", type="enchantment") is None
    assert errors[0]["message"] == ERROR_ENCHANTMENT_ON_ACTOR
    assert engine.store.children(actor, ACTIVE_EFFECT) == []


def test_legacy_enchantment_flag_is_migrated(engine, bus):
    errors = recorder(bus, EVENT_NOTIFY_ERROR)
    actor = create_actor(engine)

    assert create_effect(engine, actor, name="Old", flags={"dnd5e": {"type": "enchantment"}}) is None
    assert errors


def test_applied_enchantment_is_enabled_and_tracked(engine, bus, enchanting):
    tracked = recorder(bus, EVENT_ENCHANTMENT_TRACKED)
    _actor, scroll, sword = enchanting

    effect = _enchant(engine, scroll, sword)

    component = esper.component_for_entity(effect, ActiveEffect)
    assert component.type is EffectType.ENCHANTMENT
    assert component.disabled is False
    assert engine.lifecycle.enchantments.applied(_uuid(scroll)) == {_uuid(effect)}
    assert tracked == [{"origin": _uuid(scroll), "uuid": _uuid(effect)}]


def test_enchantment_restrictions_are_enforced(engine, bus, enchanting):
    errors = recorder(bus, EVENT_NOTIFY_ERROR)
    actor, scroll, sword = enchanting
    shield = create_item(engine, actor, name="Shield", item_type="equipment")

    assert _enchant(engine, scroll, shield) is None
    assert _enchant(engine, scroll, sword) is not None
    second_sword = create_item(engine, actor, name="Dagger", item_type="weapon")
    assert _enchant(engine, scroll, second_sword) is None

    reasons = [payload["reason"] for payload in errors]
    assert reasons == ["enchantment_invalid", "enchantment_invalid"]


def test_deleting_enchantment_untracks_it(engine, bus, enchanting):
    untracked = recorder(bus, EVENT_ENCHANTMENT_UNTRACKED)
    _actor, scroll, sword = enchanting
    effect = _enchant(engine, scroll, sword)
    uuid = _uuid(effect)

    assert run(engine.store.delete(effect))

    assert engine.lifecycle.enchantments.applied(_uuid(scroll)) == frozenset()
    assert untracked == [{"origin": _uuid(scroll), "uuid": uuid}]


def test_rider_enchantments_copy_effects_and_items(engine, enchanting):
    actor, scroll, sword = enchanting
    create_effect(engine, scroll, {"keep_id": True}, _id="riderflame000000", name="Burning", flags={"dnd5e": {"rider": True}})
    torch = create_item(engine, None, name="Everburning Torch", item_type="equipment")

    effect = _enchant(
        engine,
        scroll,
        sword,
        flags={"dnd5e": {"enchantment": {"riders": {"effect": ["riderflame000000"], "item": [_uuid(torch)]}}}},
    )

    riders = engine.dependencies.get_dependents(effect)
    assert len(riders) == 2
    rider_effect, rider_item = riders
    effect_doc = esper.component_for_entity(rider_effect, Document)
    assert effect_doc.parent_entity == sword
    assert effect_doc.name == "Burning"
    assert "rider" not in esper.component_for_entity(rider_effect, ActiveEffect).flags["dnd5e"]
    item_doc = esper.component_for_entity(rider_item, Document)
    assert item_doc.document_name == ITEM
    assert item_doc.parent_entity == actor

    run(engine.store.delete(effect))

    assert not engine.store.exists(rider_effect)
    assert not engine.store.exists(rider_item)


def test_riders_only_created_by_creating_user(engine):
    actor = create_actor(engine)

    remote = create_effect(engine, actor, {"user_id": "someone-else"}, name="Sleep", statuses=["unconscious"])

    assert engine.dependencies.get_dependents(remote) == []
