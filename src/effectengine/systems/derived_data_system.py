from __future__ import annotations

import copy
from typing import Any, List, Tuple

import esper

from effectengine.changes.applicator import CustomHook, apply_change
from effectengine.changes.change import EffectChange
from effectengine.changes.paths import merge_changes
from effectengine.components.active_effect import ActiveEffect, EffectType
from effectengine.components.actor import Actor
from effectengine.components.derived_data import DerivedData
from effectengine.components.document import ACTIVE_EFFECT, ITEM, Document
from effectengine.errors import CastError
from effectengine.events.bus import EVENT_CHANGE_CAST_FAILED, EventBus
from effectengine.systems.status_level_system import StatusLevelSystem
from effectengine.systems.suppression_system import SuppressionSystem


class DerivedDataSystem:
    """Runs the apply-effects pass for actors.

    Order within a pass: suppression is recomputed for every effect the actor
    can receive, status-level effects are refreshed, then the changes of
    active effects are applied by priority onto a copy of the source data.
    """

    def __init__(
        self,
        event_bus: EventBus,
        suppression: SuppressionSystem,
        status_levels: StatusLevelSystem | None = None,
        custom: CustomHook | None = None,
    ) -> None:
        self.event_bus = event_bus
        self.suppression = suppression
        self.status_levels = status_levels
        self.custom = custom

    def process(self) -> None:
        for actor_entity, _actor in list(esper.get_component(Actor)):
            self.prepare_actor(actor_entity)

    def prepare_actor(self, actor_entity: int) -> DerivedData:
        actor = esper.component_for_entity(actor_entity, Actor)
        document = esper.try_component(actor_entity, Document)
        document_id = document.uuid if document is not None else str(actor_entity)

        effect_entities = self.applicable_effects(actor_entity)
        for effect_entity in effect_entities:
            self.suppression.recompute_suppression(effect_entity)
            if self.status_levels is not None and self.status_levels.is_status_effect(effect_entity):
                self.status_levels.prepare_status_level(effect_entity)

        working: dict[str, Any] = {
            "name": document.name if document is not None else "",
            "system": copy.deepcopy(actor.system),
            "flags": copy.deepcopy(actor.flags),
        }
        derived = DerivedData(data=working)
        for _effect_entity, change in self._ordered_changes(effect_entities):
            changes = apply_change(
                working,
                change,
                actor.schema,
                custom=self.custom,
                on_cast_error=lambda error, key=change.key: self._on_cast_error(error, document_id, key),
                document_id=document_id,
            )
            if changes:
                merge_changes(working, changes)
                derived.overrides.update(changes)
        for effect_entity in effect_entities:
            effect = esper.component_for_entity(effect_entity, ActiveEffect)
            if effect.active:
                derived.statuses.update(effect.statuses)

        esper.add_component(actor_entity, derived)
        return derived

    def applicable_effects(self, actor_entity: int) -> List[int]:
        """Effects on the actor plus effects transferred from its items."""
        effects: List[int] = []
        for entity, document in list(esper.get_component(Document)):
            if document.document_name != ACTIVE_EFFECT or document.parent_entity is None:
                continue
            if document.parent_entity == actor_entity:
                effects.append(entity)
                continue
            parent_doc = esper.try_component(document.parent_entity, Document)
            if parent_doc is None or parent_doc.document_name != ITEM or parent_doc.parent_entity != actor_entity:
                continue
            effect = esper.try_component(entity, ActiveEffect)
            if effect is not None and effect.transfer and effect.type is not EffectType.ENCHANTMENT:
                effects.append(entity)
        return effects

    @staticmethod
    def _ordered_changes(effect_entities: List[int]) -> List[Tuple[int, EffectChange]]:
        ordered: List[Tuple[int, EffectChange]] = []
        for effect_entity in effect_entities:
            effect = esper.component_for_entity(effect_entity, ActiveEffect)
            if not effect.active:
                continue
            ordered.extend((effect_entity, change) for change in effect.changes)
        ordered.sort(key=lambda entry: entry[1].sort_priority)
        return ordered

    def _on_cast_error(self, error: CastError, document_id: str, key: str) -> None:
        self.event_bus.emit(
            EVENT_CHANGE_CAST_FAILED,
            key=error.key or key,
            value=error.raw_value,
            reason=error.reason,
            document=document_id,
        )
