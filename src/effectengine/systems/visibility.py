from __future__ import annotations

import esper

from effectengine.components.active_effect import ActiveEffect
from effectengine.components.actor import DISPOSITION_FRIENDLY, Actor
from effectengine.components.document import Document
from effectengine.constants import BLOODIED_VISIBILITY, STATUS_BLOODIED
from effectengine.effects.ids import static_id
from effectengine.session import Session

BLOODIED_ID = static_id(f"dnd5e{STATUS_BLOODIED}")


def effect_target(effect_entity: int) -> int | None:
    """The actor an effect ultimately applies to, if any."""
    document = esper.try_component(effect_entity, Document)
    parent = document.parent_entity if document is not None else None
    while parent is not None:
        if esper.has_component(parent, Actor):
            return parent
        parent_doc = esper.try_component(parent, Document)
        parent = parent_doc.parent_entity if parent_doc is not None else None
    return None


def is_concealed(effect_entity: int, viewer: Session, visibility: str = BLOODIED_VISIBILITY) -> bool:
    """Whether ``viewer`` should not see this status effect."""
    target = effect_target(effect_entity)
    if viewer.can_observe(target):
        return False
    document = esper.try_component(effect_entity, Document)
    if document is None or document.id != BLOODIED_ID or visibility != "player":
        return False
    actor = esper.try_component(target, Actor) if target is not None else None
    return actor is None or actor.disposition != DISPOSITION_FRIENDLY


def is_temporary(effect_entity: int, viewer: Session, visibility: str = BLOODIED_VISIBILITY) -> bool:
    effect = esper.try_component(effect_entity, ActiveEffect)
    if effect is None:
        return False
    return effect.is_temporary and not is_concealed(effect_entity, viewer, visibility)
