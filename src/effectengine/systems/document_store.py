from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Protocol
from uuid import uuid4

import esper

from effectengine.components.active_effect import ActiveEffect
from effectengine.components.dependent_list import DependentList
from effectengine.components.document import Document, make_uuid
from effectengine.documents import build_component
from effectengine.errors import CreationVeto, DeletionVeto
from effectengine.events.bus import EventBus

logger = logging.getLogger(__name__)


class Persistence(Protocol):
    async def create(
        self,
        document_name: str,
        data: Mapping[str, Any],
        *,
        parent: int | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> int | None: ...

    async def delete(self, entity: int) -> bool: ...


@dataclass(slots=True)
class DeletedDocument:
    """What remains known about a document after it left the world."""

    entity: int
    document: Document
    effect: ActiveEffect | None = None
    dependents: DependentList | None = None

    @property
    def parent_entity(self) -> int | None:
        return self.document.parent_entity


PreCreateHook = Callable[[Any, "int | None", Dict[str, Any]], Awaitable["bool | None"]]
OnCreateHook = Callable[[int, Dict[str, Any], str], Awaitable[None]]
PreDeleteHook = Callable[[int], Awaitable["bool | None"]]
OnDeleteHook = Callable[[DeletedDocument], Awaitable[None]]


@dataclass(slots=True)
class _Hooks:
    pre_create: List[PreCreateHook] = field(default_factory=list)
    on_create: List[OnCreateHook] = field(default_factory=list)
    pre_delete: List[PreDeleteHook] = field(default_factory=list)
    on_delete: List[OnDeleteHook] = field(default_factory=list)


def _hook_name(hook: Callable[..., Any]) -> str:
    return getattr(hook, "__qualname__", repr(hook))


class DocumentStore:
    """In-memory persistence collaborator backed by the current esper world.

    Lifecycle hooks registered per document type run around every create and
    delete. A pre-hook returning ``False`` or raising a veto cancels the
    operation; ``create`` then returns ``None`` and ``delete`` returns ``False``.
    """

    def __init__(self, event_bus: EventBus, user_id: str = "local") -> None:
        self.event_bus = event_bus
        self.user_id = user_id
        self._hooks: Dict[str | None, _Hooks] = {}

    def register_hooks(
        self,
        document_name: str | None = None,
        *,
        pre_create: PreCreateHook | None = None,
        on_create: OnCreateHook | None = None,
        pre_delete: PreDeleteHook | None = None,
        on_delete: OnDeleteHook | None = None,
    ) -> None:
        """Register hooks for one document type, or for all types when ``document_name`` is None."""
        hooks = self._hooks.setdefault(document_name, _Hooks())
        if pre_create is not None:
            hooks.pre_create.append(pre_create)
        if on_create is not None:
            hooks.on_create.append(on_create)
        if pre_delete is not None:
            hooks.pre_delete.append(pre_delete)
        if on_delete is not None:
            hooks.on_delete.append(on_delete)

    def _hooks_for(self, document_name: str) -> List[_Hooks]:
        matched: List[_Hooks] = []
        for key in (None, document_name):
            hooks = self._hooks.get(key)
            if hooks is not None:
                matched.append(hooks)
        return matched

    async def create(
        self,
        document_name: str,
        data: Mapping[str, Any],
        *,
        parent: int | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> int | None:
        options = dict(options or {})
        parent_doc: Document | None = None
        if parent is not None:
            parent_doc = esper.try_component(parent, Document) if esper.entity_exists(parent) else None
            if parent_doc is None:
                logger.info("Cannot create %s: parent entity %s does not exist", document_name, parent)
                return None
        data = copy.deepcopy(dict(data))
        requested_id = data.pop("_id", None)
        doc_id = requested_id if (requested_id and options.get("keep_id")) else uuid4().hex[:16]
        if self.find_child(parent, document_name, doc_id) is not None:
            logger.info("Cannot create %s: id %s already exists on its parent", document_name, doc_id)
            return None
        component = build_component(document_name, doc_id, data)

        for hooks in self._hooks_for(document_name):
            for hook in hooks.pre_create:
                try:
                    allowed = await hook(component, parent, options)
                except CreationVeto as exc:
                    logger.info("%s [%s] | %s", document_name, doc_id, exc.reason)
                    return None
                if allowed is False:
                    logger.info("%s [%s] | creation refused by %s", document_name, doc_id, _hook_name(hook))
                    return None

        uuid = make_uuid(document_name, doc_id, parent_doc.uuid if parent_doc else None)
        name = getattr(component, "name", None) or data.get("name", "")
        document = Document(id=doc_id, document_name=document_name, uuid=uuid, name=name, parent_entity=parent)
        entity = esper.create_entity(document, component)
        user_id = options.get("user_id", self.user_id)
        for hooks in self._hooks_for(document_name):
            for hook in hooks.on_create:
                await hook(entity, options, user_id)
        return entity

    async def delete(self, entity: int) -> bool:
        if not esper.entity_exists(entity):
            return False
        document = esper.try_component(entity, Document)
        if document is None:
            return False
        for hooks in self._hooks_for(document.document_name):
            for hook in hooks.pre_delete:
                try:
                    allowed = await hook(entity)
                except DeletionVeto as exc:
                    logger.info("%s [%s] | %s", document.document_name, document.id, exc.reason)
                    return False
                if allowed is False:
                    logger.info("%s [%s] | deletion refused by %s", document.document_name, document.id, _hook_name(hook))
                    return False

        deleted = DeletedDocument(
            entity=entity,
            document=document,
            effect=esper.try_component(entity, ActiveEffect),
            dependents=esper.try_component(entity, DependentList),
        )
        self._remove(entity)
        for hooks in self._hooks_for(document.document_name):
            for hook in hooks.on_delete:
                await hook(deleted)
        return True

    def _remove(self, entity: int) -> None:
        # Embedded documents leave together with their parent.
        for child in self.children(entity):
            self._remove(child)
        esper.delete_entity(entity, immediate=True)

    def resolve(self, uuid: str) -> int | None:
        for entity, document in esper.get_component(Document):
            if document.uuid == uuid:
                return entity
        return None

    def children(self, parent: int | None, document_name: str | None = None) -> List[int]:
        return [
            entity
            for entity, document in esper.get_component(Document)
            if document.parent_entity == parent
            and (document_name is None or document.document_name == document_name)
        ]

    def find_child(self, parent: int | None, document_name: str, doc_id: str) -> int | None:
        for entity in self.children(parent, document_name):
            if esper.component_for_entity(entity, Document).id == doc_id:
                return entity
        return None

    def exists(self, entity: int) -> bool:
        return esper.entity_exists(entity) and esper.has_component(entity, Document)
