from __future__ import annotations

import logging
from typing import Any, Dict

import esper

from effectengine.components.active_effect import ActiveEffect, EffectType
from effectengine.components.actor import Actor
from effectengine.components.document import ACTIVE_EFFECT, Document
from effectengine.components.item import Item
from effectengine.constants import ERROR_ENCHANTMENT_ON_ACTOR
from effectengine.effects.enchantments import EnchantmentRegistry, can_enchant, default_enchantment_registry
from effectengine.errors import EnchantmentPlacementError
from effectengine.events.bus import (
    EVENT_EFFECT_CREATED,
    EVENT_EFFECT_DELETED,
    EVENT_ENCHANTMENT_TRACKED,
    EVENT_ENCHANTMENT_UNTRACKED,
    EVENT_NOTIFY_ERROR,
    EventBus,
)
from effectengine.systems.document_store import DeletedDocument, DocumentStore
from effectengine.systems.rider_system import RiderSystem
from effectengine.systems.suppression_system import SuppressionSystem

logger = logging.getLogger(__name__)


def is_applied_enchantment(effect: ActiveEffect, parent_uuid: str | None) -> bool:
    """An enchantment placed on an item by some other document."""
    return effect.type is EffectType.ENCHANTMENT and bool(effect.origin) and effect.origin != parent_uuid


class EffectLifecycleSystem:
    """Validates, decorates and cleans up effects as they are created and deleted."""

    def __init__(
        self,
        event_bus: EventBus,
        store: DocumentStore,
        riders: RiderSystem,
        suppression: SuppressionSystem,
        enchantments: EnchantmentRegistry | None = None,
    ) -> None:
        self.event_bus = event_bus
        self.store = store
        self.riders = riders
        self.suppression = suppression
        self.enchantments = enchantments or default_enchantment_registry
        self.store.register_hooks(
            ACTIVE_EFFECT,
            pre_create=self.pre_create,
            on_create=self.on_create,
            on_delete=self.on_delete,
        )

    async def pre_create(self, effect: ActiveEffect, parent: int | None, options: Dict[str, Any]) -> bool:
        parent_doc = esper.try_component(parent, Document) if parent is not None else None
        parent_uuid = parent_doc.uuid if parent_doc is not None else None
        if options.get("keep_origin") is False:
            effect.origin = parent_uuid

        if effect.type is EffectType.ENCHANTMENT and parent is not None and esper.has_component(parent, Actor):
            self.event_bus.emit(EVENT_NOTIFY_ERROR, message=ERROR_ENCHANTMENT_ON_ACTOR, reason="enchantment_on_actor")
            return False

        if is_applied_enchantment(effect, parent_uuid):
            try:
                self.validate_enchantment(effect, parent)
            except EnchantmentPlacementError as exc:
                for message in exc.messages:
                    logger.error(message)
                    self.event_bus.emit(EVENT_NOTIFY_ERROR, message=message, reason="enchantment_invalid")
                return False
            effect.disabled = False
        return True

    def validate_enchantment(self, effect: ActiveEffect, parent: int | None) -> None:
        origin_entity = self.store.resolve(effect.origin) if effect.origin else None
        origin = esper.try_component(origin_entity, Item) if origin_entity is not None else None
        target = esper.try_component(parent, Item) if parent is not None else None
        errors = can_enchant(origin, target, self.enchantments.applied(effect.origin or ""))
        if errors:
            raise EnchantmentPlacementError(errors)

    async def on_create(self, entity: int, options: Dict[str, Any], user_id: str) -> None:
        document = esper.component_for_entity(entity, Document)
        effect = esper.component_for_entity(entity, ActiveEffect)
        parent_doc = esper.try_component(document.parent_entity, Document) if document.parent_entity is not None else None
        applied = is_applied_enchantment(effect, parent_doc.uuid if parent_doc is not None else None)
        if applied:
            self.enchantments.track(effect.origin, document.uuid)
            self.event_bus.emit(EVENT_ENCHANTMENT_TRACKED, origin=effect.origin, uuid=document.uuid)

        # Riders are created once, by the user who created the effect.
        if user_id == self.store.user_id:
            self.suppression.recompute_suppression(entity)
            on_actor = document.parent_entity is not None and esper.has_component(document.parent_entity, Actor)
            if effect.active and on_actor:
                await self.riders.create_rider_conditions(entity)
            if applied:
                origin_entity = options.get("origin_entity")
                await self.riders.create_rider_enchantments(entity, origin_entity)

        self.event_bus.emit(
            EVENT_EFFECT_CREATED,
            effect_entity=entity,
            parent_entity=document.parent_entity,
            uuid=document.uuid,
        )

    async def on_delete(self, deleted: DeletedDocument) -> None:
        effect = deleted.effect
        if effect is not None and effect.origin and deleted.document.uuid in self.enchantments.applied(effect.origin):
            self.enchantments.untrack(effect.origin, deleted.document.uuid)
            self.event_bus.emit(EVENT_ENCHANTMENT_UNTRACKED, origin=effect.origin, uuid=deleted.document.uuid)
        self.event_bus.emit(
            EVENT_EFFECT_DELETED,
            effect_entity=deleted.entity,
            parent_entity=deleted.parent_entity,
            uuid=deleted.document.uuid,
        )
