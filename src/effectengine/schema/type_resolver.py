from __future__ import annotations

from effectengine.constants import FORMULA_FIELDS
from effectengine.schema.fields import ArrayField, DataField, DocumentSchema
from effectengine.schema.type_tags import UNTYPED, ResolvedType, TypeTag


def tag_for_field(field: DataField | None) -> TypeTag:
    if field is None:
        return TypeTag.UNTYPED
    return field.type_tag


def resolve_type(schema: DocumentSchema | None, key: str) -> ResolvedType:
    """Resolve the semantic type of the field at ``key``.

    A miss is not an error: it resolves to ``UNTYPED`` and the caller falls
    back to host behaviour for that field.
    """

    field = schema.get_field(key) if schema is not None else None
    if key in FORMULA_FIELDS:
        return ResolvedType(TypeTag.FORMULA, field=field)
    tag = tag_for_field(field)
    if tag is TypeTag.UNTYPED:
        return UNTYPED
    if tag is TypeTag.ARRAY:
        element = field.element if isinstance(field, ArrayField) else None
        return ResolvedType(tag, element=tag_for_field(element), field=field)
    return ResolvedType(tag, field=field)


def element_type(resolved: ResolvedType) -> TypeTag:
    """Return the tag array elements are cast to."""

    if resolved.tag is not TypeTag.ARRAY:
        raise ValueError(f"{resolved.tag.value} fields have no element type")
    return resolved.element or TypeTag.UNTYPED
