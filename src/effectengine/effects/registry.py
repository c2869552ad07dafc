from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from effectengine.effects.ids import static_id


@dataclass(frozen=True, slots=True)
class StatusEffectDefinition:
    """Template for a named status effect (condition).

    ``statuses`` are co-occurring statuses added alongside the template's own
    id. ``riders`` name other status effects created as separate documents
    when this one is applied to an actor.
    """

    id: str
    name: str
    img: str = ""
    statuses: tuple[str, ...] = ()
    riders: tuple[str, ...] = ()
    reference: str | None = None

    @property
    def effect_id(self) -> str:
        return static_id(f"dnd5e{self.id}")


class StatusEffectRegistry:
    """In-memory collection of status effect templates."""

    def __init__(self) -> None:
        self._definitions: dict[str, StatusEffectDefinition] = {}

    def register(self, definition: StatusEffectDefinition) -> None:
        if definition.id in self._definitions:
            raise ValueError(f"Status effect '{definition.id}' already registered")
        self._definitions[definition.id] = definition

    def get(self, status_id: str) -> StatusEffectDefinition:
        try:
            return self._definitions[status_id]
        except KeyError as exc:
            raise KeyError(f"Status effect '{status_id}' is not registered") from exc

    def find(self, status_id: str) -> StatusEffectDefinition | None:
        return self._definitions.get(status_id)

    def has(self, status_id: str) -> bool:
        return status_id in self._definitions

    def all(self) -> Iterable[StatusEffectDefinition]:
        return tuple(self._definitions.values())

    def riders_for(self, statuses: Iterable[str]) -> list[str]:
        """Collect the riders of every status, first occurrence wins."""
        riders: dict[str, None] = {}
        for status in statuses:
            definition = self.find(status)
            if definition is None:
                continue
            for rider in definition.riders:
                riders.setdefault(rider, None)
        return list(riders)


default_status_registry = StatusEffectRegistry()


def register_status_effect(definition: StatusEffectDefinition) -> None:
    default_status_registry.register(definition)


def from_status_effect(
    status_id: str,
    registry: StatusEffectRegistry | None = None,
    **effect_data: Any,
) -> dict[str, Any]:
    """Build creation data for an effect instantiated from a status template."""

    definition = (registry or default_status_registry).get(status_id)
    data: dict[str, Any] = {
        "_id": definition.effect_id,
        "name": definition.name,
        "img": definition.img,
        "statuses": [definition.id, *definition.statuses],
    }
    data.update(effect_data)
    if "description" not in data and definition.reference:
        data["description"] = f"@Embed[{definition.reference} inline]"
    return data
