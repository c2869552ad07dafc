"""Symbolic composition of formula fields.

Formula values are dice or arithmetic expressions that are evaluated later by
the host. Composition only edits the text so the expression stays readable and
keeps its dice and variable terms.
"""
from __future__ import annotations

import re
from typing import Any, Callable, List, Optional

from effectengine.changes.change import EffectMode

OPERATORS = "+-*/%"
_OPENING = "([{"
_CLOSING = ")]}"
_FUNCTION = re.compile(r"^([A-Za-z_][\w.]*)\s*\(")
_LEADING_SIGN = re.compile(r"^[+-]?")
_TRAILING_PAREN = re.compile(r"\)\s*$")

FormulaHook = Callable[[str, str], Optional[str]]


def formula_terms(formula: str) -> List[str]:
    """Split a formula into its top-level terms, operators included."""

    terms: List[str] = []
    buffer: List[str] = []
    depth = 0
    for char in formula:
        if char in _OPENING:
            depth += 1
        elif char in _CLOSING:
            depth = max(0, depth - 1)
        elif depth == 0 and char in OPERATORS:
            token = "".join(buffer).strip()
            if token:
                terms.append(token)
            terms.append(char)
            buffer = []
            continue
        buffer.append(char)
    token = "".join(buffer).strip()
    if token:
        terms.append(token)
    return terms


def outer_function(formula: str) -> str | None:
    """Return the function name when the whole formula is a single call."""

    terms = formula_terms(formula.strip())
    if len(terms) != 1:
        return None
    term = terms[0]
    match = _FUNCTION.match(term)
    if match is None or not term.endswith(")"):
        return None
    depth = 0
    # The call's own parenthesis must be the one closing at the very end.
    for index in range(match.end() - 1, len(term)):
        char = term[index]
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0 and index != len(term) - 1:
                return None
    return match.group(1)


def append_argument(formula: str, argument: str) -> str:
    """Add one more argument to the call that closes at the end of ``formula``."""

    return _TRAILING_PAREN.sub(f", {argument})", formula.strip(), count=1)


def compose_formula(
    current: Any,
    mode: EffectMode,
    delta: str,
    custom: FormulaHook | None = None,
) -> str | None:
    """Combine a formula with ``delta`` under ``mode`` without evaluating it.

    Returns ``None`` when a custom mode is not handled by ``custom``.
    """

    if not current or mode is EffectMode.OVERRIDE:
        return delta
    current = str(current).strip()
    if mode is EffectMode.ADD:
        operator = "-" if delta.startswith("-") else "+"
        delta = _LEADING_SIGN.sub("", delta, count=1).strip()
        return f"{current} {operator} {delta}"
    if mode is EffectMode.MULTIPLY:
        if len(formula_terms(current)) > 1:
            return f"({current}) * {delta}"
        return f"{current} * {delta}"
    if mode in (EffectMode.UPGRADE, EffectMode.DOWNGRADE):
        fn = "max" if mode is EffectMode.UPGRADE else "min"
        if outer_function(current) == fn:
            return append_argument(current, delta)
        return f"{fn}({current}, {delta})"
    if custom is None:
        return None
    return custom(current, delta)
