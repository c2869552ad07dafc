from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# Consumables only need to be equipped when they are one of these kinds.
EQUIPPED_CONSUMABLES = frozenset({"rod", "trinket", "wand"})


@dataclass(slots=True)
class Item:
    type: str
    system: dict[str, Any] = field(default_factory=dict)
    flags: dict[str, Any] = field(default_factory=dict)

    @property
    def effects_suppressed(self) -> bool:
        """Whether effects granted by this item are currently inactive."""
        kind = self.system.get("type")
        subtype = kind.get("value") if isinstance(kind, dict) else None
        require_equipped = self.type != "consumable" or subtype in EQUIPPED_CONSUMABLES
        if require_equipped and self.system.get("equipped") is False:
            return True
        return self.system.get("attunement") == "required" and not self.system.get("attuned", False)

    @property
    def requires_concentration(self) -> bool:
        return "concentration" in set(self.system.get("properties") or ())
