from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True)
class DerivedData:
    """Result of the latest apply-effects pass for an actor."""

    data: dict[str, Any] = field(default_factory=dict)
    overrides: dict[str, Any] = field(default_factory=dict)
    statuses: set[str] = field(default_factory=set)
