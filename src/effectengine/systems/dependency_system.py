from __future__ import annotations

import logging
from typing import Iterable, List

import esper

from effectengine.components.dependent_list import DependentList, DependentRef
from effectengine.components.document import Document
from effectengine.constants import WARNING_CONCENTRATION_BREAK
from effectengine.events.bus import EVENT_DEPENDENTS_ADDED, EVENT_NOTIFY_WARNING, EventBus
from effectengine.session import Authority
from effectengine.systems.document_store import DeletedDocument, DocumentStore

logger = logging.getLogger(__name__)


class DependencySystem:
    """Tracks documents spawned by an owner and deletes them along with it.

    References are weak: they hold a uuid and are resolved through the store
    every time, so dependents deleted elsewhere simply drop out. An owner with
    live dependents can only be deleted by a user with elevated authority.
    """

    def __init__(self, event_bus: EventBus, store: DocumentStore, authority: Authority) -> None:
        self.event_bus = event_bus
        self.store = store
        self.authority = authority
        self.store.register_hooks(pre_delete=self.pre_delete, on_delete=self.on_delete)

    def add_dependents(self, owner: int, *dependents: int) -> List[DependentRef]:
        dependent_list = self._ensure_dependent_list(owner)
        added: List[DependentRef] = []
        for entity in dependents:
            document = esper.try_component(entity, Document)
            if document is None:
                continue
            ref = DependentRef(uuid=document.uuid)
            if ref in dependent_list.refs:
                continue
            dependent_list.refs.append(ref)
            added.append(ref)
        if added:
            self.event_bus.emit(
                EVENT_DEPENDENTS_ADDED,
                owner_entity=owner,
                uuids=[ref.uuid for ref in added],
            )
        return added

    def get_dependents(self, owner: int) -> List[int]:
        dependent_list = esper.try_component(owner, DependentList)
        if dependent_list is None:
            return []
        return self.resolve_refs(dependent_list.refs)

    def resolve_refs(self, refs: Iterable[DependentRef]) -> List[int]:
        resolved: List[int] = []
        for ref in refs:
            entity = self.store.resolve(ref.uuid)
            if entity is not None:
                resolved.append(entity)
        return resolved

    def can_delete(self, owner: int) -> bool:
        if not self.get_dependents(owner):
            return True
        return self.authority.has_elevated_authority()

    async def cascade_delete(self, owner: int) -> List[int]:
        """Delete the owner's live dependents one after another."""
        return await self._delete_all(self.get_dependents(owner))

    async def pre_delete(self, entity: int) -> bool:
        if self.can_delete(entity):
            return True
        logger.info("Deletion of entity %s blocked by %d live dependents", entity, len(self.get_dependents(entity)))
        self.event_bus.emit(
            EVENT_NOTIFY_WARNING,
            message=WARNING_CONCENTRATION_BREAK,
            reason="dependents",
            entity=entity,
        )
        return False

    async def on_delete(self, deleted: DeletedDocument) -> None:
        if deleted.dependents is None or not self.authority.has_elevated_authority():
            return
        await self._delete_all(self.resolve_refs(deleted.dependents.refs))

    async def _delete_all(self, entities: Iterable[int]) -> List[int]:
        deleted: List[int] = []
        for entity in entities:
            # An earlier deletion in this cascade may already have taken it.
            if not self.store.exists(entity):
                continue
            if await self.store.delete(entity):
                deleted.append(entity)
        return deleted

    def _ensure_dependent_list(self, owner: int) -> DependentList:
        try:
            return esper.component_for_entity(owner, DependentList)
        except KeyError:
            dependent_list = DependentList()
            esper.add_component(owner, dependent_list)
            return dependent_list
