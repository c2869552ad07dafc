from __future__ import annotations

from dataclasses import dataclass
from uuid import uuid4

import esper

from effectengine.effects.enchantments import EnchantmentRegistry
from effectengine.effects.factory import ensure_default_status_effects_registered
from effectengine.effects.registry import StatusEffectRegistry, default_status_registry
from effectengine.events.bus import EventBus
from effectengine.session import Session
from effectengine.systems.dependency_system import DependencySystem
from effectengine.systems.derived_data_system import DerivedDataSystem
from effectengine.systems.document_store import DocumentStore
from effectengine.systems.effect_lifecycle_system import EffectLifecycleSystem
from effectengine.systems.rider_system import RiderSystem
from effectengine.systems.status_level_system import StatusLevelSystem
from effectengine.systems.suppression_system import SuppressionSystem


@dataclass(slots=True)
class EffectSystems:
    world: str
    store: DocumentStore
    dependencies: DependencySystem
    riders: RiderSystem
    suppression: SuppressionSystem
    status_levels: StatusLevelSystem
    derived_data: DerivedDataSystem
    lifecycle: EffectLifecycleSystem


def create_world(
    event_bus: EventBus,
    session: Session | None = None,
    *,
    name: str | None = None,
    registry: StatusEffectRegistry | None = None,
    enchantments: EnchantmentRegistry | None = None,
) -> EffectSystems:
    """Switch esper to a fresh world and wire the effect systems onto ``event_bus``."""

    session = session or Session()
    world_name = name or f"effects-{uuid4().hex[:8]}"
    esper.switch_world(world_name)

    registry = registry or default_status_registry
    ensure_default_status_effects_registered(registry)

    store = DocumentStore(event_bus, user_id=session.user_id)
    dependencies = DependencySystem(event_bus, store, session)
    riders = RiderSystem(event_bus, store, dependencies, registry)
    suppression = SuppressionSystem(event_bus)
    status_levels = StatusLevelSystem(event_bus, registry=registry)
    derived_data = DerivedDataSystem(event_bus, suppression, status_levels)
    lifecycle = EffectLifecycleSystem(
        event_bus,
        store,
        riders,
        suppression,
        enchantments=enchantments or EnchantmentRegistry(),
    )
    return EffectSystems(
        world=world_name,
        store=store,
        dependencies=dependencies,
        riders=riders,
        suppression=suppression,
        status_levels=status_levels,
        derived_data=derived_data,
        lifecycle=lifecycle,
    )


def dispose_world(world_name: str) -> None:
    """Drop a world created by :func:`create_world` and return to the default one."""

    esper.switch_world("default")
    if world_name != "default":
        esper.delete_world(world_name)
