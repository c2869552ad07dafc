from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from effectengine.changes.change import EffectChange
from effectengine.changes.paths import get_at_path, set_at_path
from effectengine.constants import FLAG_SCOPE


class EffectType(str, Enum):
    GENERIC = "base"
    ENCHANTMENT = "enchantment"


@dataclass(slots=True)
class EffectDuration:
    rounds: int | None = None
    turns: int | None = None
    seconds: int | None = None

    @property
    def remaining(self) -> int:
        if self.seconds is not None:
            return self.seconds
        return self.rounds or self.turns or 0


@dataclass(slots=True)
class ActiveEffect:
    """A buff, condition or enchantment attached to an actor or item.

    ``suppressed`` is derived on every data preparation pass and never stored.
    """

    id: str
    name: str = ""
    img: str = ""
    type: EffectType = EffectType.GENERIC
    origin: str | None = None
    statuses: set[str] = field(default_factory=set)
    disabled: bool = False
    duration: EffectDuration = field(default_factory=EffectDuration)
    changes: list[EffectChange] = field(default_factory=list)
    flags: dict[str, Any] = field(default_factory=dict)
    description: str = ""
    transfer: bool = True
    suppressed: bool = False

    @property
    def active(self) -> bool:
        return not self.disabled and not self.suppressed

    @property
    def is_temporary(self) -> bool:
        return self.duration.remaining > 0 or bool(self.statuses)

    def get_flag(self, key: str, default: Any = None) -> Any:
        return get_at_path(self.flags, f"{FLAG_SCOPE}.{key}", default)

    def set_flag(self, key: str, value: Any) -> None:
        set_at_path(self.flags, f"{FLAG_SCOPE}.{key}", value)
