from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping

from effectengine.components.item import Item


class EnchantmentRegistry:
    """Tracks which enchantments each origin has applied."""

    def __init__(self) -> None:
        self._applied: Dict[str, set[str]] = {}

    def track(self, origin: str, uuid: str) -> None:
        self._applied.setdefault(origin, set()).add(uuid)

    def untrack(self, origin: str, uuid: str) -> None:
        applied = self._applied.get(origin)
        if applied is None:
            return
        applied.discard(uuid)
        if not applied:
            self._applied.pop(origin, None)

    def applied(self, origin: str) -> frozenset[str]:
        return frozenset(self._applied.get(origin, ()))

    def clear(self) -> None:
        self._applied.clear()


default_enchantment_registry = EnchantmentRegistry()


def enchantment_restrictions(origin: Item) -> Mapping[str, Any]:
    enchantment = origin.system.get("enchantment") or {}
    return enchantment.get("restrictions") or {}


def can_enchant(
    origin: Item | None,
    target: Item | None,
    applied: Iterable[str] = (),
) -> list[str]:
    """Return the reasons ``origin`` cannot enchant ``target``; empty when it can."""

    if origin is None:
        return ["Enchantment origin could not be found."]
    if target is None:
        return ["Enchantments can only be applied to items."]
    errors: list[str] = []
    restrictions = enchantment_restrictions(origin)
    allowed = tuple(restrictions.get("types") or ())
    if allowed and target.type not in allowed:
        errors.append(f"Enchantment cannot be applied to items of type '{target.type}'.")
    maximum = restrictions.get("max")
    if maximum is not None and len(set(applied)) >= int(maximum):
        errors.append(f"Enchantment has already been applied the maximum of {maximum} times.")
    return errors
