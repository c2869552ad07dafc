from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from effectengine.schema.fields import DocumentSchema

# Token dispositions as the host numbers them.
DISPOSITION_SECRET = -2
DISPOSITION_HOSTILE = -1
DISPOSITION_NEUTRAL = 0
DISPOSITION_FRIENDLY = 1


@dataclass(slots=True)
class Actor:
    """Source data of a creature document.

    ``system`` is never modified by effect application; the derived copy lives
    in :class:`effectengine.components.derived_data.DerivedData`.
    """

    type: str = "character"
    system: dict[str, Any] = field(default_factory=dict)
    flags: dict[str, Any] = field(default_factory=dict)
    schema: DocumentSchema | None = None
    disposition: int = DISPOSITION_NEUTRAL
