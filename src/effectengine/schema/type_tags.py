from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class TypeTag(Enum):
    """Semantic type of a document field, as seen by the change applicator."""

    FORMULA = "formula"
    ARRAY = "array"
    OBJECT = "object"
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    UNTYPED = "untyped"


@dataclass(frozen=True, slots=True)
class ResolvedType:
    """Result of resolving a key path against a schema.

    ``element`` is only set for arrays and carries the tag each element is
    cast to. ``field`` keeps the descriptor the tag came from, when there was one.
    """

    tag: TypeTag
    element: TypeTag | None = None
    field: Any = None

    @property
    def is_untyped(self) -> bool:
        return self.tag is TypeTag.UNTYPED


UNTYPED = ResolvedType(TypeTag.UNTYPED)
