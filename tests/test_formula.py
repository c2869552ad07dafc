import pytest

from effectengine.changes.change import EffectMode
from effectengine.changes.formula import compose_formula, formula_terms, outer_function


def test_formula_terms_respect_brackets():
    assert formula_terms("1d4 + (2 * @abilities.str.mod)") == ["1d4", "+", "(2 * @abilities.str.mod)"]
    assert formula_terms("max(1, 2)") == ["max(1, 2)"]


def test_outer_function_detects_single_call():
    assert outer_function("max(1, 2)") == "max"
    assert outer_function("max(1, 2) + 3") is None
    assert outer_function("max(1) + min(2)") is None
    assert outer_function("1d6") is None


@pytest.mark.parametrize("mode", list(EffectMode))
def test_empty_current_takes_delta(mode):
    assert compose_formula("", mode, "1d4") == "1d4"
    assert compose_formula(None, mode, "1d4") == "1d4"


@pytest.mark.parametrize(
    "current, delta, expected",
    [
        ("1d4", "2", "1d4 + 2"),
        ("1d4", "-2", "1d4 - 2"),
        ("1d4", "+ 1d6", "1d4 + 1d6"),
        ("@prof", "-@abilities.dex.mod", "@prof - @abilities.dex.mod"),
    ],
)
def test_add_joins_with_sign(current, delta, expected):
    assert compose_formula(current, EffectMode.ADD, delta) == expected


def test_multiply_wraps_compound_expressions():
    assert compose_formula("1d4 + 2", EffectMode.MULTIPLY, "2") == "(1d4 + 2) * 2"
    assert compose_formula("1d4", EffectMode.MULTIPLY, "2") == "1d4 * 2"


def test_override_replaces():
    assert compose_formula("1d4 + 2", EffectMode.OVERRIDE, "3") == "3"


def test_upgrade_and_downgrade_wrap():
    assert compose_formula("1d4", EffectMode.UPGRADE, "3") == "max(1d4, 3)"
    assert compose_formula("1d4", EffectMode.DOWNGRADE, "3") == "min(1d4, 3)"


def test_upgrade_appends_to_existing_call():
    assert compose_formula("max(1d4, 3)", EffectMode.UPGRADE, "5") == "max(1d4, 3, 5)"


def test_upgrade_rewraps_other_function():
    assert compose_formula("min(1d4, 3)", EffectMode.UPGRADE, "5") == "max(min(1d4, 3), 5)"


def test_custom_mode_uses_hook():
    assert compose_formula("1d4", EffectMode.CUSTOM, "x") is None
    assert compose_formula("1d4", EffectMode.CUSTOM, "x", custom=lambda current, delta: f"{current}|{delta}") == "1d4|x"


@pytest.mark.parametrize("current", ["1d4", "@prof + 2", "min(1d4, 3)"])
def test_repeated_upgrades_share_one_call(current):
    once = compose_formula(current, EffectMode.UPGRADE, "3")
    twice = compose_formula(once, EffectMode.UPGRADE, "5")

    assert twice == f"max({current}, 3, 5)"
    assert twice.count("max(") == 1
