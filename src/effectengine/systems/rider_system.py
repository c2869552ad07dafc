from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

import esper

from effectengine.components.active_effect import ActiveEffect
from effectengine.components.actor import Actor
from effectengine.components.document import ACTIVE_EFFECT, ITEM, Document
from effectengine.constants import WARNING_RIDER_VETOED
from effectengine.documents import document_data
from effectengine.effects.registry import StatusEffectRegistry, default_status_registry, from_status_effect
from effectengine.errors import CreationVeto
from effectengine.events.bus import EVENT_NOTIFY_WARNING, EventBus
from effectengine.systems.dependency_system import DependencySystem
from effectengine.systems.document_store import Persistence

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RiderTemplate:
    """Creation request for one document spawned alongside another."""

    document_name: str
    data: Dict[str, Any]
    parent: int | None = None
    options: Dict[str, Any] = field(default_factory=dict)


class RiderSystem:
    """Creates rider documents and records them as dependents of their owner."""

    def __init__(
        self,
        event_bus: EventBus,
        persistence: Persistence,
        dependencies: DependencySystem,
        registry: StatusEffectRegistry | None = None,
    ) -> None:
        self.event_bus = event_bus
        self.persistence = persistence
        self.dependencies = dependencies
        self.registry = registry or default_status_registry

    async def create_riders(self, owner: int, templates: Sequence[RiderTemplate]) -> List[int]:
        """Create every template concurrently and record the successes in template order.

        A veto only drops its own rider. Unexpected failures are raised after
        the riders that did get created have been recorded.
        """
        if not templates:
            return []
        results = await asyncio.gather(
            *(self._create(template) for template in templates),
            return_exceptions=True,
        )
        created: List[int] = []
        failure: BaseException | None = None
        for template, result in zip(templates, results):
            if result is None or isinstance(result, CreationVeto):
                self._warn_vetoed(owner, template)
                continue
            if isinstance(result, BaseException):
                failure = failure or result
                continue
            created.append(result)
        if created:
            self.dependencies.add_dependents(owner, *created)
        if failure is not None:
            raise failure
        return created

    async def create_rider_conditions(self, effect_entity: int) -> List[int]:
        """Create the status effects that ride along with this effect's statuses."""
        effect = esper.try_component(effect_entity, ActiveEffect)
        document = esper.try_component(effect_entity, Document)
        if effect is None or document is None or document.parent_entity is None:
            return []
        parent = document.parent_entity
        templates: List[RiderTemplate] = []
        for status_id in self.registry.riders_for(sorted(effect.statuses)):
            if not self.registry.has(status_id):
                continue
            data = from_status_effect(status_id, self.registry)
            if self._has_child_effect(parent, data["_id"]):
                continue
            templates.append(RiderTemplate(ACTIVE_EFFECT, data, parent=parent, options={"keep_id": True}))
        return await self.create_riders(effect_entity, templates)

    async def create_rider_enchantments(self, effect_entity: int, origin_entity: int | None = None) -> List[int]:
        """Copy an enchantment's rider effects and items onto the enchanted item and its owner."""
        effect = esper.try_component(effect_entity, ActiveEffect)
        document = esper.try_component(effect_entity, Document)
        if effect is None or document is None or document.parent_entity is None:
            return []
        if origin_entity is None and effect.origin:
            origin_entity = self._resolve(effect.origin)
        if origin_entity is None:
            return []

        templates: List[RiderTemplate] = []
        for rider_id in effect.get_flag("enchantment.riders.effect") or ():
            source = self._child_effect(origin_entity, rider_id)
            data = document_data(source) if source is not None else None
            if data is None:
                continue
            data.pop("_id", None)
            scoped = data.get("flags", {}).get("dnd5e")
            if isinstance(scoped, dict):
                scoped.pop("rider", None)
            data["origin"] = effect.origin
            templates.append(RiderTemplate(ACTIVE_EFFECT, data, parent=document.parent_entity))

        item_document = esper.try_component(document.parent_entity, Document)
        actor_entity = item_document.parent_entity if item_document is not None else None
        if actor_entity is not None and esper.has_component(actor_entity, Actor):
            for uuid in effect.get_flag("enchantment.riders.item") or ():
                source = self._resolve(uuid)
                data = document_data(source) if source is not None else None
                if data is None:
                    continue
                data.pop("_id", None)
                data.setdefault("flags", {}).setdefault("dnd5e", {})["enchantment"] = {"origin": document.uuid}
                templates.append(RiderTemplate(ITEM, data, parent=actor_entity))

        return await self.create_riders(effect_entity, templates)

    async def _create(self, template: RiderTemplate) -> int | None:
        return await self.persistence.create(
            template.document_name,
            template.data,
            parent=template.parent,
            options=template.options,
        )

    def _warn_vetoed(self, owner: int, template: RiderTemplate) -> None:
        logger.info("Rider %s for entity %s was not created", template.data.get("name") or template.document_name, owner)
        self.event_bus.emit(
            EVENT_NOTIFY_WARNING,
            message=WARNING_RIDER_VETOED,
            reason="rider_vetoed",
            entity=owner,
        )

    def _resolve(self, uuid: str) -> int | None:
        return self.dependencies.store.resolve(uuid)

    @staticmethod
    def _child_effect(parent: int, effect_id: str) -> int | None:
        for entity, document in esper.get_component(Document):
            if document.parent_entity == parent and document.document_name == ACTIVE_EFFECT and document.id == effect_id:
                return entity
        return None

    def _has_child_effect(self, parent: int, effect_id: str) -> bool:
        return self._child_effect(parent, effect_id) is not None

