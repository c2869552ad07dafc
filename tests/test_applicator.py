import copy
import logging

import pytest

from effectengine.changes.applicator import apply_change, apply_generic
from effectengine.changes.change import EffectChange, EffectMode
from tests.helpers import character_data, character_schema


@pytest.fixture
def schema():
    return character_schema()


@pytest.fixture
def document():
    return {"name": "Hero", "system": character_data(), "flags": {}}


def test_apply_change_does_not_mutate_document(schema, document):
    before = copy.deepcopy(document)

    changes = apply_change(document, EffectChange("system.abilities.str.value", "2", EffectMode.ADD), schema)

    assert changes == {"system.abilities.str.value": 16}
    assert document == before


def test_number_modes(schema, document):
    key = "system.attributes.hp.max"

    assert apply_change(document, EffectChange(key, "3", EffectMode.MULTIPLY), schema) == {key: 60}
    assert apply_change(document, EffectChange(key, "12", EffectMode.OVERRIDE), schema) == {key: 12}
    assert apply_change(document, EffectChange(key, "25", EffectMode.UPGRADE), schema) == {key: 25}
    assert apply_change(document, EffectChange(key, "15", EffectMode.UPGRADE), schema) == {}
    assert apply_change(document, EffectChange(key, "15", EffectMode.DOWNGRADE), schema) == {key: 15}


def test_upgrade_with_null_current_overrides(schema, document):
    document["system"]["attributes"]["speed"]["walk"] = None

    changes = apply_change(document, EffectChange("system.attributes.speed.walk", "40", EffectMode.UPGRADE), schema)

    assert changes == {"system.attributes.speed.walk": 40}


def test_formula_field_composes_symbolically(schema, document):
    changes = apply_change(document, EffectChange("system.bonuses.mwak.damage", "-1", EffectMode.ADD), schema)

    assert changes == {"system.bonuses.mwak.damage": "1d4 - 1"}


def test_formula_override_field_without_schema_entry(schema, document):
    changes = apply_change(document, EffectChange("system.attributes.ac.bonus", "+2", EffectMode.ADD), schema)

    assert changes == {"system.attributes.ac.bonus": "+2"}


def test_set_add_and_remove_tokens(schema, document):
    key = "system.traits.languages.value"

    added = apply_change(document, EffectChange(key, "draconic, -elvish", EffectMode.ADD), schema)

    assert added == {key: {"common", "draconic"}}
    assert document["system"]["traits"]["languages"]["value"] == {"common", "elvish"}


def test_set_override_replaces_contents(schema, document):
    key = "system.traits.languages.value"

    assert apply_change(document, EffectChange(key, "abyssal", EffectMode.OVERRIDE), schema) == {key: {"abyssal"}}


def test_array_add_appends(schema, document):
    changes = apply_change(document, EffectChange("system.rolls", "2, 3", EffectMode.ADD), schema)

    assert changes == {"system.rolls": [1, 2, 3]}


def test_string_override_fills_placeholder(schema, document):
    changes = apply_change(
        document,
        EffectChange("system.attributes.speed.special", "{}, Fly 30", EffectMode.OVERRIDE),
        schema,
    )

    assert changes == {"system.attributes.speed.special": "Climb, Fly 30"}


def test_boolean_modes(schema, document):
    key = "system.attributes.inspiration"

    assert apply_change(document, EffectChange(key, "true", EffectMode.ADD), schema) == {key: True}
    assert apply_change(document, EffectChange(key, "true", EffectMode.MULTIPLY), schema) == {key: False}


def test_object_add_merges(schema, document):
    changes = apply_change(document, EffectChange("system.resources", '{"secondary": {"value": 2}}', EffectMode.ADD), schema)

    assert changes == {"system.resources": {"primary": {"value": 1}, "secondary": {"value": 2}}}


def test_cast_failure_drops_change_and_reports(schema, document, caplog):
    errors = []

    with caplog.at_level(logging.WARNING):
        changes = apply_change(
            document,
            EffectChange("system.attributes.hp.max", "lots", EffectMode.ADD),
            schema,
            on_cast_error=errors.append,
            document_id="Actor.hero",
        )

    assert changes is None
    assert len(errors) == 1
    assert errors[0].key == "system.attributes.hp.max"
    assert errors[0].raw_value == "lots"
    assert "Actor.hero" in caplog.text


def test_character_flag_without_current_value(schema, document):
    changes = apply_change(
        document,
        EffectChange("flags.dnd5e.weaponCriticalThreshold", "19", EffectMode.DOWNGRADE),
        schema,
    )

    assert changes == {"flags.dnd5e.weaponCriticalThreshold": 19}


def test_boolean_character_flag_is_coerced(schema, document):
    changes = apply_change(document, EffectChange("flags.dnd5e.elvenAccuracy", "1", EffectMode.OVERRIDE), schema)

    assert changes == {"flags.dnd5e.elvenAccuracy": True}


def test_untyped_field_goes_to_generic_handler(schema, document):
    seen = []

    def generic(doc, change, current):
        seen.append((change.key, current))
        return {"handled": True}

    document["system"]["extra"] = 4
    changes = apply_change(document, EffectChange("system.extra", "1", EffectMode.ADD), schema, generic=generic)

    assert changes == {"handled": True}
    assert seen == [("system.extra", 4)]


def test_untyped_field_default_uses_current_value_type(schema, document):
    document["system"]["extra"] = 4

    assert apply_change(document, EffectChange("system.extra", "1", EffectMode.ADD), schema) == {"system.extra": 5}
    assert apply_generic(document, EffectChange("system.missing", "x", EffectMode.OVERRIDE), None) == {
        "system.missing": "x"
    }


def test_custom_mode_delegates_to_hook(schema, document):
    def custom(doc, change, current, delta, changes):
        changes[change.key] = current - delta

    changes = apply_change(
        document,
        EffectChange("system.attributes.hp.max", "5", EffectMode.CUSTOM),
        schema,
        custom=custom,
    )

    assert changes == {"system.attributes.hp.max": 15}


def test_custom_mode_without_hook_changes_nothing(schema, document):
    assert apply_change(document, EffectChange("system.attributes.hp.max", "5", EffectMode.CUSTOM), schema) == {}


def test_mismatched_stored_value_is_reported(schema, document):
    errors = []
    document["system"]["attributes"]["hp"]["max"] = "twenty"

    changes = apply_change(
        document,
        EffectChange("system.attributes.hp.max", "5", EffectMode.ADD),
        schema,
        on_cast_error=errors.append,
    )

    assert changes is None
    assert errors and errors[0].key == "system.attributes.hp.max"


def test_set_add_with_token_sequence(schema):
    document = {"system": {"traits": {"languages": {"value": {"a", "b"}}}}}
    key = "system.traits.languages.value"

    assert apply_change(document, EffectChange(key, ["-a", "c"], EffectMode.ADD), schema) == {key: {"b", "c"}}


def test_set_override_is_idempotent(schema, document):
    key = "system.traits.languages.value"
    change = EffectChange(key, "abyssal, infernal", EffectMode.OVERRIDE)

    first = apply_change(document, change, schema)
    document["system"]["traits"]["languages"]["value"] = first[key]
    second = apply_change(document, change, schema)

    assert first == second == {key: {"abyssal", "infernal"}}


def test_list_backed_set_field_gets_set_semantics(schema, document):
    key = "system.traits.languages.value"
    document["system"]["traits"]["languages"]["value"] = ["common", "elvish", "common"]

    added = apply_change(document, EffectChange(key, "-elvish, draconic", EffectMode.ADD), schema)
    overridden = apply_change(document, EffectChange(key, "abyssal, abyssal", EffectMode.OVERRIDE), schema)

    assert added == {key: {"common", "draconic"}}
    assert overridden == {key: {"abyssal"}}


def test_missing_set_field_starts_empty(schema, document):
    key = "system.traits.languages.value"
    del document["system"]["traits"]["languages"]["value"]

    assert apply_change(document, EffectChange(key, "abyssal, abyssal", EffectMode.OVERRIDE), schema) == {key: {"abyssal"}}
    assert apply_change(document, EffectChange(key, "-common, abyssal", EffectMode.ADD), schema) == {key: {"abyssal"}}


def test_zero_string_enables_boolean_flag(schema, document):
    key = "flags.dnd5e.elvenAccuracy"

    assert apply_change(document, EffectChange(key, "0", EffectMode.OVERRIDE), schema) == {key: True}
    assert apply_change(document, EffectChange(key, "false", EffectMode.OVERRIDE), schema) == {key: False}


def test_host_defined_mode_goes_to_custom_hook(schema, document):
    seen = []

    def custom(doc, change, current, delta, changes):
        seen.append(change.mode)
        changes[change.key] = delta

    number = EffectChange.from_data({"key": "system.attributes.hp.max", "value": "7", "mode": 7})
    formula = EffectChange.from_data({"key": "system.bonuses.mwak.damage", "value": "2", "mode": 7})

    assert apply_change(document, number, schema, custom=custom) == {"system.attributes.hp.max": 7}
    assert apply_change(document, formula, schema) == {}
    assert seen == [7]
