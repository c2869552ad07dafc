from __future__ import annotations

from typing import Any, List

from effectengine.changes.paths import get_at_path


def add_overridden_choices(source: Any, derived: Any, prefix: str, path: str, overrides: List[str]) -> List[str]:
    """Record set entries that effects added or removed, as ``prefix.choice`` keys.

    Used to tell which choice inputs are driven by effects when the changes
    map alone does not say so. ``overrides`` is extended in place and returned.
    """

    original = set(get_at_path(source, path) or ())
    current = set(get_at_path(derived, path) or ())
    for choice in sorted(original ^ current, key=str):
        overrides.append(f"{prefix}.{choice}")
    return overrides
