"""Resolution of a single effect change against an in-memory document.

``apply_change`` never mutates the document it is given. Every result flows
through the returned changes map, which the host merges afterwards.
"""
from __future__ import annotations

import logging
import re
from collections.abc import Mapping, Set
from dataclasses import replace
from typing import Any, Callable, Dict, Optional

from effectengine.changes.casting import cast_value
from effectengine.changes.change import EffectChange, EffectMode
from effectengine.changes.flags import flag_config, flag_initial_value, flag_type, prepare_flag_change
from effectengine.changes.formula import compose_formula
from effectengine.changes.paths import get_at_path
from effectengine.constants import OVERRIDE_PLACEHOLDER
from effectengine.errors import CastError
from effectengine.schema.fields import DocumentSchema, SetField
from effectengine.schema.type_resolver import resolve_type
from effectengine.schema.type_tags import ResolvedType, TypeTag

logger = logging.getLogger(__name__)

ChangesMap = Dict[str, Any]
CustomHook = Callable[[Any, EffectChange, Any, Any, ChangesMap], None]
GenericHandler = Callable[[Any, EffectChange, Any], Optional[ChangesMap]]
CastErrorSink = Callable[[CastError], None]

_NEGATION = re.compile(r"^\s*-\s*")


def apply_change(
    document: Any,
    change: EffectChange,
    schema: DocumentSchema | None,
    *,
    generic: GenericHandler | None = None,
    custom: CustomHook | None = None,
    on_cast_error: CastErrorSink | None = None,
    document_id: str | None = None,
) -> ChangesMap | None:
    """Compute the changes produced by applying ``change`` to ``document``.

    Returns ``None`` when the change was dropped because its value could not
    be cast. Fields the schema does not describe are handed to ``generic``
    (by default :func:`apply_generic`) and its result is returned unchanged.
    """

    config = flag_config(change.key)
    current = get_at_path(document, change.key)
    if config is not None:
        change = prepare_flag_change(change, config)
        resolved = flag_type(config)
        if current is None:
            current = flag_initial_value(config)
    else:
        resolved = resolve_type(schema, change.key)

    if resolved.is_untyped:
        if generic is not None:
            return generic(document, change, current)
        return apply_generic(
            document, change, current, custom=custom, on_cast_error=on_cast_error, document_id=document_id
        )

    if resolved.tag is TypeTag.FORMULA:
        return _apply_formula(document, change, current, custom)

    if resolved.tag is TypeTag.STRING and change.mode is EffectMode.OVERRIDE:
        change = _fill_placeholder(change, current)

    try:
        delta = cast_value(change.value, resolved, change.key)
    except CastError as exc:
        _report_cast_error(exc, resolved, document_id, on_cast_error)
        return None
    return _dispatch(document, change, current, delta, resolved, custom, on_cast_error, document_id)


def apply_generic(
    document: Any,
    change: EffectChange,
    current: Any,
    *,
    custom: CustomHook | None = None,
    on_cast_error: CastErrorSink | None = None,
    document_id: str | None = None,
) -> ChangesMap | None:
    """Host-default handling for fields without a schema type.

    The delta is cast to the type of the value currently stored at the key.
    """

    resolved = ResolvedType(infer_tag(current))
    if resolved.tag is TypeTag.ARRAY:
        resolved = ResolvedType(TypeTag.ARRAY, element=TypeTag.UNTYPED)
    try:
        delta = cast_value(change.value, resolved, change.key)
    except CastError as exc:
        _report_cast_error(exc, resolved, document_id, on_cast_error)
        return None
    return _dispatch(document, change, current, delta, resolved, custom, on_cast_error, document_id)


def infer_tag(value: Any) -> TypeTag:
    if isinstance(value, bool):
        return TypeTag.BOOLEAN
    if isinstance(value, (int, float)):
        return TypeTag.NUMBER
    if isinstance(value, str):
        return TypeTag.STRING
    if isinstance(value, (list, tuple, Set)):
        return TypeTag.ARRAY
    if isinstance(value, Mapping):
        return TypeTag.OBJECT
    return TypeTag.UNTYPED


def _apply_formula(document: Any, change: EffectChange, current: Any, custom: CustomHook | None) -> ChangesMap | None:
    delta = "" if change.value is None else str(change.value).strip()
    changes: ChangesMap = {}

    def _custom_formula(expression: str, value: str) -> str | None:
        if custom is not None:
            custom(document, change, expression, value, changes)
        return changes.get(change.key)

    result = compose_formula(current, change.mode, delta, custom=_custom_formula)
    if result is not None:
        changes[change.key] = result
    return changes


def _fill_placeholder(change: EffectChange, current: Any) -> EffectChange:
    if not isinstance(change.value, str) or OVERRIDE_PLACEHOLDER not in change.value:
        return change
    filled = change.value.replace(OVERRIDE_PLACEHOLDER, "" if current is None else str(current), 1)
    return replace(change, value=filled)


def _dispatch(
    document: Any,
    change: EffectChange,
    current: Any,
    delta: Any,
    resolved: ResolvedType,
    custom: CustomHook | None,
    on_cast_error: CastErrorSink | None,
    document_id: str | None,
) -> ChangesMap | None:
    changes: ChangesMap = {}
    mode = change.mode
    if isinstance(resolved.field, SetField) and mode in (EffectMode.ADD, EffectMode.OVERRIDE):
        # Stored data may hold a list or nothing where the schema declares a set.
        current = set(current or ())
    try:
        if mode is EffectMode.ADD:
            _apply_add(change, current, delta, changes)
        elif mode is EffectMode.MULTIPLY:
            _apply_multiply(change, current, delta, changes)
        elif mode is EffectMode.OVERRIDE:
            _apply_override(change, current, delta, changes)
        elif mode in (EffectMode.UPGRADE, EffectMode.DOWNGRADE):
            _apply_upgrade(change, current, delta, changes)
        elif custom is not None:
            custom(document, change, current, delta, changes)
    except TypeError as exc:
        # The stored value does not match the declared field type.
        error = CastError(change.key, change.value, str(exc))
        _report_cast_error(error, resolved, document_id, on_cast_error)
        return None
    return changes


def _apply_add(change: EffectChange, current: Any, delta: Any, changes: ChangesMap) -> None:
    if isinstance(current, Set):
        updated = set(current)
        for token in _tokens(delta):
            negated = _NEGATION.sub("", token) if isinstance(token, str) else token
            if negated != token:
                updated.discard(negated)
            else:
                updated.add(token)
        changes[change.key] = updated
        return
    if current is None:
        changes[change.key] = delta
    elif isinstance(current, bool):
        changes[change.key] = current or delta
    elif isinstance(current, (list, tuple)):
        changes[change.key] = list(current) + _tokens(delta)
    elif isinstance(current, Mapping) and isinstance(delta, Mapping):
        changes[change.key] = {**current, **delta}
    else:
        changes[change.key] = current + delta


def _apply_multiply(change: EffectChange, current: Any, delta: Any, changes: ChangesMap) -> None:
    if isinstance(current, bool):
        changes[change.key] = current and delta
    elif isinstance(current, (int, float)):
        changes[change.key] = current * delta


def _apply_override(change: EffectChange, current: Any, delta: Any, changes: ChangesMap) -> None:
    if isinstance(current, Set):
        changes[change.key] = set(_tokens(delta))
        return
    changes[change.key] = delta


def _apply_upgrade(change: EffectChange, current: Any, delta: Any, changes: ChangesMap) -> None:
    if current is None:
        _apply_override(change, current, delta, changes)
        return
    comparable = (
        isinstance(current, str) and isinstance(delta, str)
    ) or (
        _is_number(current) and _is_number(delta)
    )
    if not comparable:
        return
    if change.mode is EffectMode.UPGRADE and delta > current:
        changes[change.key] = delta
    elif change.mode is EffectMode.DOWNGRADE and delta < current:
        changes[change.key] = delta


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _tokens(delta: Any) -> list[Any]:
    if isinstance(delta, (list, tuple, Set)):
        return list(delta)
    return [delta]


def _report_cast_error(
    error: CastError,
    resolved: ResolvedType,
    document_id: str | None,
    sink: CastErrorSink | None,
) -> None:
    logger.warning(
        "Document [%s] | Unable to parse effect change for %s as %s: %r",
        document_id or "?",
        error.key,
        resolved.tag.value,
        error.raw_value,
    )
    if sink is not None:
        sink(error)
