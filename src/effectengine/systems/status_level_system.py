from __future__ import annotations

import esper

from effectengine.changes.paths import get_at_path, set_at_path
from effectengine.components.active_effect import ActiveEffect
from effectengine.components.actor import Actor
from effectengine.components.document import ACTIVE_EFFECT, Document
from effectengine.constants import (
    EXHAUSTION_FLAG,
    EXHAUSTION_ICON,
    EXHAUSTION_LEVELS,
    EXHAUSTION_PATH,
    STATUS_DEAD,
    STATUS_EXHAUSTION,
    SYSTEM_PREFIX,
)
from effectengine.effects.ids import static_id
from effectengine.effects.registry import StatusEffectRegistry, default_status_registry
from effectengine.events.bus import EVENT_STATUS_LEVEL_ADVANCE, EVENT_STATUS_LEVEL_CHANGED, EventBus


def status_level_image(level: int, icon: str = EXHAUSTION_ICON) -> str:
    """Icon path for a given level: ``foo.svg`` becomes ``foo-3.svg``."""

    path, dot, ext = icon.rpartition(".")
    if not dot:
        return f"{icon}-{level}"
    return f"{path}-{level}.{ext}"


def clamp_level(level: int, max_level: int) -> int:
    return max(0, min(int(level), max_level))


class StatusLevelSystem:
    """Staged condition whose level moves one step at a time within ``[0, max_level]``.

    Reaching ``max_level`` marks the creature dead, together with every status
    the dead template carries.
    """

    def __init__(
        self,
        event_bus: EventBus,
        *,
        status_id: str = STATUS_EXHAUSTION,
        max_level: int = EXHAUSTION_LEVELS,
        path: str = EXHAUSTION_PATH,
        icon: str = EXHAUSTION_ICON,
        registry: StatusEffectRegistry | None = None,
    ) -> None:
        self.event_bus = event_bus
        self.status_id = status_id
        self.max_level = max_level
        self.path = path
        self.icon = icon
        self.registry = registry or default_status_registry
        self.effect_id = static_id(f"dnd5e{status_id}")
        self.event_bus.subscribe(EVENT_STATUS_LEVEL_ADVANCE, self.on_status_level_advance)

    def on_status_level_advance(self, sender, **payload) -> None:
        actor_entity = payload.get("actor_entity")
        if actor_entity is None:
            return
        self.advance_status_level(actor_entity, int(payload.get("delta", 1)))

    def current_level(self, actor_entity: int) -> int:
        try:
            actor = esper.component_for_entity(actor_entity, Actor)
        except KeyError:
            return 0
        level = get_at_path(actor.system, self._system_path, 0)
        try:
            return clamp_level(level, self.max_level)
        except (TypeError, ValueError):
            return 0

    def advance_status_level(self, actor_entity: int, delta: int) -> int:
        """Move the actor's level by one step in the direction of ``delta``."""
        try:
            actor = esper.component_for_entity(actor_entity, Actor)
        except KeyError:
            return 0
        previous = self.current_level(actor_entity)
        step = (delta > 0) - (delta < 0)
        level = clamp_level(previous + step, self.max_level)
        set_at_path(actor.system, self._system_path, level)
        effect_entity = self.find_status_effect(actor_entity)
        if effect_entity is not None:
            esper.component_for_entity(effect_entity, ActiveEffect).set_flag(EXHAUSTION_FLAG, level)
            self.prepare_status_level(effect_entity)
        if level != previous:
            self.event_bus.emit(
                EVENT_STATUS_LEVEL_CHANGED,
                actor_entity=actor_entity,
                previous=previous,
                level=level,
            )
        return level

    def prepare_status_level(self, effect_entity: int) -> int:
        """Refresh the name, icon and statuses of a status-level effect."""
        try:
            effect = esper.component_for_entity(effect_entity, ActiveEffect)
        except KeyError:
            return 0
        level = effect.get_flag(EXHAUSTION_FLAG)
        if not isinstance(level, (int, float)) or isinstance(level, bool):
            level = 1
        level = int(level)
        definition = self.registry.find(self.status_id)
        base_name = definition.name if definition is not None else self.status_id.title()
        effect.img = status_level_image(level, self.icon)
        effect.name = f"{base_name} {level}"
        if level >= self.max_level:
            effect.statuses.add(STATUS_DEAD)
            dead = self.registry.find(STATUS_DEAD)
            if dead is not None:
                effect.statuses.update(dead.statuses)
        return level

    def find_status_effect(self, actor_entity: int) -> int | None:
        for entity, document in esper.get_component(Document):
            if (
                document.parent_entity == actor_entity
                and document.document_name == ACTIVE_EFFECT
                and document.id == self.effect_id
            ):
                return entity
        return None

    def is_status_effect(self, effect_entity: int) -> bool:
        document = esper.try_component(effect_entity, Document)
        return document is not None and document.id == self.effect_id

    @property
    def _system_path(self) -> str:
        return self.path.removeprefix(SYSTEM_PREFIX)
