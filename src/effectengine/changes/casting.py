from __future__ import annotations

import json
import math
from collections.abc import Mapping
from typing import Any, Callable, Dict, List

from effectengine.constants import ARRAY_DELIMITER
from effectengine.errors import CastError
from effectengine.schema.type_tags import ResolvedType, TypeTag


def cast_boolean(raw: Any) -> bool:
    if isinstance(raw, str):
        text = raw.strip()
        if text == "false":
            return False
        try:
            return bool(float(text))
        except ValueError:
            return bool(text)
    return bool(raw)


def cast_number(raw: Any) -> int | float:
    if isinstance(raw, bool):
        raise CastError(None, raw, "booleans are not numbers")
    if isinstance(raw, (int, float)):
        value = raw
    elif isinstance(raw, str):
        text = raw.strip()
        if not text:
            raise CastError(None, raw, "empty value")
        try:
            value = int(text)
        except ValueError:
            try:
                value = float(text)
            except ValueError as exc:
                raise CastError(None, raw, "not a numeric literal") from exc
    else:
        raise CastError(None, raw, f"cannot read a number from {type(raw).__name__}")
    if isinstance(value, float) and not math.isfinite(value):
        raise CastError(None, raw, "not a finite number")
    return value


def cast_string(raw: Any) -> str:
    if isinstance(raw, str):
        return raw
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return str(raw)
    raise CastError(None, raw, f"expected a string, got {type(raw).__name__}")


def cast_object(raw: Any) -> Mapping:
    if isinstance(raw, Mapping):
        return raw
    if isinstance(raw, str):
        try:
            parsed = json.loads(raw)
        except ValueError as exc:
            raise CastError(None, raw, "not a JSON object") from exc
        if isinstance(parsed, Mapping):
            return parsed
    raise CastError(None, raw, "expected an object")


def cast_formula(raw: Any) -> str:
    if raw is None:
        raise CastError(None, raw, "missing formula")
    return str(raw).strip()


def cast_untyped(raw: Any) -> Any:
    return raw


_CASTERS: Dict[TypeTag, Callable[[Any], Any]] = {
    TypeTag.BOOLEAN: cast_boolean,
    TypeTag.NUMBER: cast_number,
    TypeTag.STRING: cast_string,
    TypeTag.OBJECT: cast_object,
    TypeTag.FORMULA: cast_formula,
    TypeTag.UNTYPED: cast_untyped,
}


def split_array(raw: Any) -> List[Any]:
    """Turn a raw array change value into a list of raw elements.

    Sequences are taken as they are, a JSON array string is decoded, and any
    other string is split on commas.
    """

    if isinstance(raw, (list, tuple, set, frozenset)):
        return list(raw)
    if raw is None:
        return []
    if not isinstance(raw, str):
        return [raw]
    text = raw.strip()
    if not text:
        return []
    if text.startswith("["):
        try:
            parsed = json.loads(text)
        except ValueError:
            parsed = None
        if isinstance(parsed, list):
            return parsed
    return [part.strip() for part in text.split(ARRAY_DELIMITER) if part.strip()]


def cast_array(raw: Any, element: TypeTag, key: str | None = None) -> List[Any]:
    """Cast each element of an array change value; one bad element fails all."""

    if element is TypeTag.ARRAY:
        raise CastError(key, raw, "nested arrays are not supported")
    caster = _CASTERS[element]
    try:
        return [caster(item) for item in split_array(raw)]
    except CastError as exc:
        raise CastError(key, raw, exc.reason) from exc


def cast_value(raw: Any, target: TypeTag | ResolvedType, key: str | None = None) -> Any:
    """Cast a raw change value into the given type."""

    if isinstance(target, ResolvedType):
        if target.tag is TypeTag.ARRAY:
            return cast_array(raw, target.element or TypeTag.UNTYPED, key)
        target = target.tag
    if target is TypeTag.ARRAY:
        return cast_array(raw, TypeTag.UNTYPED, key)
    try:
        return _CASTERS[target](raw)
    except CastError as exc:
        if key is None:
            raise
        raise exc.with_key(key) from exc
