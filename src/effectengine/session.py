from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol


class Authority(Protocol):
    def has_elevated_authority(self) -> bool: ...


@dataclass(slots=True)
class Session:
    """The local user's standing in the shared game session."""

    user_id: str = "local"
    arbiter: bool = False
    observed_actors: set[int] = field(default_factory=set)

    def has_elevated_authority(self) -> bool:
        return self.arbiter

    def can_observe(self, actor_entity: int | None) -> bool:
        if self.arbiter:
            return True
        return actor_entity is not None and actor_entity in self.observed_actors
