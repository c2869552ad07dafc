from __future__ import annotations

from typing import Any, Iterable, Mapping

from effectengine.schema.type_tags import TypeTag


class DataField:
    """Declarative description of one field in a document schema.

    Each concrete field exposes a ``type_tag`` class attribute; nothing in the
    engine inspects the class hierarchy to decide how a value is handled.
    """

    type_tag: TypeTag = TypeTag.UNTYPED

    def __init__(self, *, initial: Any = None, label: str = "") -> None:
        self.initial = initial
        self.label = label
        self.name: str | None = None

    def get_initial_value(self) -> Any:
        return self.initial() if callable(self.initial) else self.initial

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class BooleanField(DataField):
    type_tag = TypeTag.BOOLEAN

    def __init__(self, *, initial: Any = False, label: str = "") -> None:
        super().__init__(initial=initial, label=label)


class NumberField(DataField):
    type_tag = TypeTag.NUMBER

    def __init__(
        self,
        *,
        initial: Any = None,
        integer: bool = False,
        min: float | None = None,
        max: float | None = None,
        label: str = "",
    ) -> None:
        super().__init__(initial=initial, label=label)
        self.integer = integer
        self.min = min
        self.max = max


class StringField(DataField):
    type_tag = TypeTag.STRING

    def __init__(self, *, initial: Any = "", choices: Iterable[str] | None = None, label: str = "") -> None:
        super().__init__(initial=initial, label=label)
        self.choices = tuple(choices) if choices is not None else None


class FormulaField(StringField):
    """String field holding a dice or arithmetic expression kept in symbolic form."""

    type_tag = TypeTag.FORMULA

    def __init__(self, *, initial: Any = "", deterministic: bool = False, label: str = "") -> None:
        super().__init__(initial=initial, label=label)
        self.deterministic = deterministic


class ObjectField(DataField):
    type_tag = TypeTag.OBJECT

    def __init__(self, *, initial: Any = dict, label: str = "") -> None:
        super().__init__(initial=initial, label=label)


class ArrayField(DataField):
    type_tag = TypeTag.ARRAY

    def __init__(self, element: DataField | None = None, *, initial: Any = list, label: str = "") -> None:
        super().__init__(initial=initial, label=label)
        self.element = element


class SetField(ArrayField):
    """Array field whose prepared value is a set of unique entries."""

    def __init__(self, element: DataField | None = None, *, initial: Any = set, label: str = "") -> None:
        super().__init__(element, initial=initial, label=label)

    def get_initial_value(self) -> Any:
        value = super().get_initial_value()
        return set(value) if value is not None else set()


class SchemaField(DataField):
    """Nested group of named fields.

    A schema group is not a value type on its own, so changes that target it
    directly are left to the host.
    """

    def __init__(self, fields: Mapping[str, DataField], *, label: str = "") -> None:
        super().__init__(initial=None, label=label)
        self.fields: dict[str, DataField] = dict(fields)
        for name, field in self.fields.items():
            field.name = name

    def get_field(self, path: str | Iterable[str]) -> DataField | None:
        parts = path.split(".") if isinstance(path, str) else list(path)
        if not parts:
            return None
        field = self.fields.get(parts[0])
        if field is None:
            return None
        if len(parts) == 1:
            return field
        if isinstance(field, SchemaField):
            return field.get_field(parts[1:])
        return None

    def get_initial_value(self) -> dict[str, Any]:
        return {name: field.get_initial_value() for name, field in self.fields.items()}


class DocumentSchema:
    """Top-level schema of a document with optional namespaced sub-schemas.

    A key rooted at a namespace (``system.abilities.str.value``) is looked up
    in that namespace's schema using the remainder of the path.
    """

    def __init__(
        self,
        fields: Mapping[str, DataField] | None = None,
        namespaces: Mapping[str, SchemaField] | None = None,
    ) -> None:
        self.root = SchemaField(fields or {})
        self.namespaces: dict[str, SchemaField] = dict(namespaces or {})

    def get_field(self, path: str) -> DataField | None:
        namespace, _, remainder = path.partition(".")
        if remainder and namespace in self.namespaces:
            return self.namespaces[namespace].get_field(remainder)
        return self.root.get_field(path)

    def initial_data(self) -> dict[str, Any]:
        data = self.root.get_initial_value()
        for namespace, schema in self.namespaces.items():
            data[namespace] = schema.get_initial_value()
        return data
