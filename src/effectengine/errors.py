from __future__ import annotations

from typing import Any, Iterable


class EffectEngineError(Exception):
    """Base class for failures raised by the effect engine."""


class CastError(EffectEngineError):
    """A change value could not be coerced into its target field type."""

    def __init__(self, key: str | None, raw_value: Any, reason: str = "") -> None:
        self.key = key
        self.raw_value = raw_value
        self.reason = reason
        message = f"Unable to cast {raw_value!r} for {key or '<unknown>'}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)

    def with_key(self, key: str) -> "CastError":
        return CastError(key, self.raw_value, self.reason)


class CreationVeto(EffectEngineError):
    """The persistence collaborator refused to create a document."""

    def __init__(self, reason: str = "vetoed") -> None:
        self.reason = reason
        super().__init__(reason)


class DeletionVeto(EffectEngineError):
    """Deleting a document was refused, typically because of live dependents."""

    def __init__(self, reason: str = "vetoed") -> None:
        self.reason = reason
        super().__init__(reason)


class EnchantmentPlacementError(EffectEngineError):
    """An enchantment cannot be placed on the requested parent."""

    def __init__(self, messages: Iterable[str]) -> None:
        self.messages = list(messages)
        super().__init__("; ".join(self.messages) or "Invalid enchantment placement")


class ConcentrationError(EffectEngineError):
    """Concentration cannot begin on the given item."""
