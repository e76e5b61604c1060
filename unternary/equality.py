"""Structural equality for expressions.

Two expressions are considered the same reference when their canonical
rendering is identical.  The comparison is purely syntactic: ``a.b`` and
``a["b"]`` differ, and two identically named bindings from different scopes
compare equal.  The unfolder only compares expressions taken from a single
statement, which keeps the second case harmless.
"""

from __future__ import annotations

from typing import Iterable, Optional

from .js_ast import JsExpression


def canonical_text(expression: JsExpression) -> str:
    return expression.render()


def expressions_equal(first: JsExpression, second: JsExpression) -> bool:
    if first is second:
        return True
    return canonical_text(first) == canonical_text(second)


def find_equal(needle: JsExpression, haystack: Iterable[JsExpression]) -> Optional[JsExpression]:
    """Return the first entry of ``haystack`` equal to ``needle``."""

    text = canonical_text(needle)
    for candidate in haystack:
        if canonical_text(candidate) == text:
            return candidate
    return None


__all__ = ["canonical_text", "expressions_equal", "find_equal"]
