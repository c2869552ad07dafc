from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any


class EffectMode(IntEnum):
    """How a change value is combined with the current field value."""

    CUSTOM = 0
    MULTIPLY = 1
    ADD = 2
    DOWNGRADE = 3
    UPGRADE = 4
    OVERRIDE = 5


@dataclass(frozen=True, slots=True)
class EffectChange:
    """A single declarative modification carried by an effect."""

    key: str
    value: Any
    mode: EffectMode | int = EffectMode.ADD
    priority: int | None = None

    def __post_init__(self) -> None:
        if isinstance(self.mode, EffectMode):
            return
        try:
            value = int(self.mode)
        except (TypeError, ValueError):
            value = EffectMode.CUSTOM
        try:
            mode = EffectMode(value)
        except ValueError:
            # Host-defined modes are kept as plain ints and handled by the custom hook.
            mode = value
        object.__setattr__(self, "mode", mode)

    @property
    def sort_priority(self) -> int:
        if self.priority is not None:
            return int(self.priority)
        return int(self.mode) * 10

    @classmethod
    def from_data(cls, data: dict[str, Any]) -> "EffectChange":
        return cls(
            key=str(data["key"]),
            value=data.get("value", ""),
            mode=data.get("mode", EffectMode.ADD),
            priority=data.get("priority"),
        )
