from __future__ import annotations

from effectengine.constants import EXHAUSTION_ICON
from effectengine.effects.registry import (
    StatusEffectDefinition,
    StatusEffectRegistry,
    default_status_registry,
)

_RULES = "Compendium.dnd5e.rules.JournalEntry.w7eitkpD7QQTB6j0.JournalEntryPage"


def ensure_default_status_effects_registered(registry: StatusEffectRegistry | None = None) -> None:
    """Register core status effect templates if they are not already present."""

    registry = registry or default_status_registry

    def _register(definition: StatusEffectDefinition) -> None:
        if registry.has(definition.id):
            return
        registry.register(definition)

    _register(
        StatusEffectDefinition(
            id="dead",
            name="Dead",
            img="systems/dnd5e/icons/svg/statuses/dead.svg",
            statuses=("incapacitated",),
        )
    )
    _register(
        StatusEffectDefinition(
            id="bloodied",
            name="Bloodied",
            img="systems/dnd5e/icons/svg/statuses/bloodied.svg",
        )
    )
    _register(
        StatusEffectDefinition(
            id="concentrating",
            name="Concentrating",
            img="systems/dnd5e/icons/svg/statuses/concentrating.svg",
            reference=f"{_RULES}.ahcGAdKyUYmkoGRE",
        )
    )
    _register(
        StatusEffectDefinition(
            id="exhaustion",
            name="Exhaustion",
            img=EXHAUSTION_ICON,
            reference=f"{_RULES}.cspWveykstnu3Zcv",
        )
    )
    _register(
        StatusEffectDefinition(
            id="incapacitated",
            name="Incapacitated",
            img="systems/dnd5e/icons/svg/statuses/incapacitated.svg",
            reference=f"{_RULES}.TpkZgLfxCmSndmpb",
        )
    )
    _register(
        StatusEffectDefinition(
            id="prone",
            name="Prone",
            img="icons/svg/falling.svg",
            reference=f"{_RULES}.y0TkcdyoZlOTmAFT",
        )
    )
    _register(
        StatusEffectDefinition(
            id="unconscious",
            name="Unconscious",
            img="icons/svg/unconscious.svg",
            statuses=("incapacitated",),
            riders=("prone",),
            reference=f"{_RULES}.UWw13ISmMxDzmwbd",
        )
    )
    _register(
        StatusEffectDefinition(
            id="paralyzed",
            name="Paralyzed",
            img="icons/svg/paralysis.svg",
            statuses=("incapacitated",),
            reference=f"{_RULES}.RnxZoTglPnLc6UPb",
        )
    )
    _register(
        StatusEffectDefinition(
            id="petrified",
            name="Petrified",
            img="systems/dnd5e/icons/svg/statuses/petrified.svg",
            statuses=("incapacitated",),
            reference=f"{_RULES}.xaNDaW6NwQTgHSmi",
        )
    )
    _register(
        StatusEffectDefinition(
            id="stunned",
            name="Stunned",
            img="icons/svg/daze.svg",
            statuses=("incapacitated",),
            reference=f"{_RULES}.ZyZMUwA2rboh4ObS",
        )
    )
    for status_id, name, img in (
        ("blinded", "Blinded", "icons/svg/blind.svg"),
        ("charmed", "Charmed", "systems/dnd5e/icons/svg/statuses/charmed.svg"),
        ("deafened", "Deafened", "icons/svg/deaf.svg"),
        ("frightened", "Frightened", "icons/svg/terror.svg"),
        ("grappled", "Grappled", "systems/dnd5e/icons/svg/statuses/grappled.svg"),
        ("invisible", "Invisible", "icons/svg/invisible.svg"),
        ("poisoned", "Poisoned", "icons/svg/poison.svg"),
        ("restrained", "Restrained", "icons/svg/net.svg"),
    ):
        _register(StatusEffectDefinition(id=status_id, name=name, img=img))
