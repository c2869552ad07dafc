from __future__ import annotations

import esper

from effectengine.components.active_effect import ActiveEffect, EffectType
from effectengine.components.document import Document
from effectengine.components.item import Item
from effectengine.events.bus import EVENT_SUPPRESSION_CHANGED, EventBus


class SuppressionSystem:
    """Derives whether each effect is suppressed by the item that grants it.

    Only the effect's own flag is written, so effects can be processed in any
    order and repeated passes give the same result.
    """

    def __init__(self, event_bus: EventBus) -> None:
        self.event_bus = event_bus

    def recompute_suppression(self, effect_entity: int) -> bool:
        try:
            effect = esper.component_for_entity(effect_entity, ActiveEffect)
        except KeyError:
            return False
        previous = effect.suppressed
        effect.suppressed = self._is_suppressed(effect_entity, effect)
        if effect.suppressed != previous:
            self.event_bus.emit(
                EVENT_SUPPRESSION_CHANGED,
                effect_entity=effect_entity,
                suppressed=effect.suppressed,
            )
        return effect.suppressed

    def process(self) -> None:
        for effect_entity, _effect in list(esper.get_component(ActiveEffect)):
            self.recompute_suppression(effect_entity)

    @staticmethod
    def _is_suppressed(effect_entity: int, effect: ActiveEffect) -> bool:
        if effect.type is EffectType.ENCHANTMENT:
            return False
        document = esper.try_component(effect_entity, Document)
        if document is None or document.parent_entity is None:
            return False
        item = esper.try_component(document.parent_entity, Item)
        if item is None:
            return False
        return item.effects_suppressed
