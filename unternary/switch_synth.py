"""Detect conditional chains that are really ``switch`` statements.

Minifiers turn ``switch`` statements into chains such as::

    foo === 'bar' ? bar() : foo === 'baz' ? baz() : foo === 'qux' || foo === 'quux' ? qux() : quux()

Every guard in the chain compares the same *comparison base* (``foo``) with a
value.  :class:`SwitchSynthesizer` finds such a base, checks that enough
consecutive guards use it, and collects one ``case`` per compared value::

    switch (foo) {
      case 'bar':
        bar();
        break;
      case 'baz':
        baz();
        break;
      case 'qux':
      case 'quux':
        qux();
        break;
      default:
        quux();
        break;
    }

A base never contains a call: the discriminant is evaluated once while the
chain evaluates the base once per guard, so moving a call there would change
how often it runs.  Loose ``==`` guards are refused by default because ``switch``
matches with ``===``: ``x == null`` also holds for ``undefined`` and
``x == 0`` for ``''``, while ``case null:`` and ``case 0:`` do not.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .decision_tree import DecisionTree
from .equality import canonical_text, expressions_equal, find_equal
from .js_ast import (
    EQUALITY_OPERATORS,
    BinaryExpr,
    BreakStatement,
    CallExpr,
    ExpressionStatement,
    JsExpression,
    LiteralExpr,
    LogicalExpr,
    RawExpr,
    SwitchCase,
    SwitchStatement,
    UnaryExpr,
    walk,
)


logger = logging.getLogger(__name__)

SWITCH_THRESHOLD = 3

_EFFECTFUL_UNARY = frozenset({"delete", "await"})


@dataclass(frozen=True)
class SwitchRefusal:
    """A chain that passed the threshold but could not become a ``switch``."""

    base: str
    reason: str


def is_comparison_base(expression: JsExpression) -> bool:
    """Return ``True`` when ``expression`` may become a switch discriminant.

    Literals are the compared values rather than the base.  Calls anywhere in
    the expression, opaque source fragments and effectful unary operators are
    rejected.
    """

    if isinstance(expression, LiteralExpr):
        return False
    for node in walk(expression):
        if isinstance(node, (CallExpr, RawExpr)):
            return False
        if isinstance(node, UnaryExpr) and node.operator in _EFFECTFUL_UNARY:
            return False
    return True


def extract_comparison_bases(condition: Optional[JsExpression]) -> List[JsExpression]:
    """Find the expressions ``condition`` compares against values.

    ``a === 1`` yields ``[a]``, ``a == b`` yields ``[a, b]`` since either side
    could be the base, ``a === 1 || a === 2`` yields ``[a]`` and both
    ``a === 1 || b === 1`` and ``a === 1 && a === 2`` yield ``[]``.
    """

    if isinstance(condition, BinaryExpr) and condition.operator in EQUALITY_OPERATORS:
        return [node for node in (condition.left, condition.right) if is_comparison_base(node)]

    if isinstance(condition, LogicalExpr) and condition.operator == "||":
        left_bases = extract_comparison_bases(condition.left)
        right_bases = extract_comparison_bases(condition.right)
        if left_bases and right_bases:
            for candidate in left_bases:
                if find_equal(candidate, right_bases) is not None:
                    return [candidate]

    return []


def _comparisons(condition: Optional[JsExpression], base: JsExpression) -> List[Tuple[str, JsExpression]]:
    if isinstance(condition, BinaryExpr) and condition.operator in EQUALITY_OPERATORS:
        if expressions_equal(condition.left, base):
            return [(condition.operator, condition.right)]
        if expressions_equal(condition.right, base):
            return [(condition.operator, condition.left)]

    if isinstance(condition, LogicalExpr) and condition.operator == "||":
        return _comparisons(condition.left, base) + _comparisons(condition.right, base)

    return []


def extract_comparison_values(condition: Optional[JsExpression], base: JsExpression) -> List[JsExpression]:
    """Return the values compared with ``base`` in source order."""

    return [value for _, value in _comparisons(condition, base)]


def chain_depth(base: JsExpression, tree: DecisionTree, count: int = 0) -> int:
    """Length of the longest guard chain testing ``base``.

    A guard that does not test ``base`` invalidates its path with ``-1``.
    """

    if tree.is_leaf:
        return count

    if find_equal(base, extract_comparison_bases(tree.condition)) is None:
        return -1

    return max(chain_depth(base, branch, count + 1) for branch in tree.branches())


class _ChainRefused(Exception):
    """Raised during case collection when a switch would change behaviour."""


class SwitchSynthesizer:
    """Rewrite decision trees into ``switch`` statements when possible.

    Parameters
    ----------
    threshold:
        Minimum number of chained guards testing the same base.  Two guards
        read just as well as ``if``/``else if``, hence the default of three.
    strict_cases:
        When ``True`` a chain is refused if the ``switch`` could behave
        differently: a guarded branch that is not a single action, a chained
        guard that does not compare the base, or a loose ``==`` comparison
        (``switch`` matches with ``===``).  A guard without an action gets
        ``break`` so it cannot fall into the next case.  ``False`` keeps only
        the immediate guard expression of such branches, accepts ``==`` and
        leaves action-less cases empty.
    """

    def __init__(self, *, threshold: int = SWITCH_THRESHOLD, strict_cases: bool = True) -> None:
        self._threshold = max(1, threshold)
        self._strict_cases = strict_cases
        self.refusals: List[SwitchRefusal] = []
        self._refused: List[Tuple[DecisionTree, str]] = []

    # ------------------------------------------------------------------
    def try_synthesize(self, tree: DecisionTree) -> Optional[SwitchStatement]:
        """Return a ``switch`` equivalent to ``tree`` or ``None``."""

        if tree.is_leaf:
            return None
        bases = extract_comparison_bases(tree.condition)
        if not bases:
            return None

        base = next((candidate for candidate in bases if chain_depth(candidate, tree) >= self._threshold), None)
        if base is None:
            logger.debug("chain on %s below switch threshold %d", canonical_text(bases[0]), self._threshold)
            return None

        try:
            cases = self._collect_cases(tree, base)
        except _ChainRefused as exc:
            self._refuse(tree, base, str(exc))
            return None
        logger.debug("synthesised switch on %s with %d case(s)", canonical_text(base), len(cases))
        return SwitchStatement(base, cases)

    # ------------------------------------------------------------------
    def _collect_cases(self, tree: DecisionTree, base: JsExpression) -> List[SwitchCase]:
        cases: List[SwitchCase] = []
        if tree.is_leaf:
            return cases

        comparisons = _comparisons(tree.condition, base)
        if self._strict_cases:
            if not comparisons:
                raise _ChainRefused(f"guard '{canonical_text(tree.condition)}' does not compare the base")
            loose = next((value for operator, value in comparisons if operator == "=="), None)
            if loose is not None:
                raise _ChainRefused(f"'{canonical_text(base)} == {loose.render()}' matches loosely")

        if comparisons:
            *fallthrough, (_, last) = comparisons
            for _, value in fallthrough:
                cases.append(SwitchCase(value, []))
            true_branch = tree.true_branch
            if true_branch is None:
                cases.append(SwitchCase(last, [BreakStatement()] if self._strict_cases else []))
            else:
                if not true_branch.is_leaf and self._strict_cases:
                    raise _ChainRefused(f"case {last.render()} guards a nested condition")
                cases.append(
                    SwitchCase(last, [ExpressionStatement(true_branch.condition), BreakStatement()])
                )

        false_branch = tree.false_branch
        if false_branch is not None:
            if not false_branch.is_leaf:
                cases.extend(self._collect_cases(false_branch, base))
            else:
                cases.append(
                    SwitchCase(None, [ExpressionStatement(false_branch.condition), BreakStatement()])
                )

        return cases

    def _refuse(self, tree: DecisionTree, base: JsExpression, reason: str) -> None:
        key = canonical_text(base)
        # The renderer retries every subtree; one refusal per chain is enough.
        for refused, refused_key in self._refused:
            if refused_key == key and any(node is tree for node in refused.nodes()):
                logger.debug("not converting tail of refused chain on %s: %s", key, reason)
                return
        self._refused.append((tree, key))
        refusal = SwitchRefusal(key, reason)
        self.refusals.append(refusal)
        logger.warning("not converting chain on %s into a switch: %s", refusal.base, reason)


__all__ = [
    "SWITCH_THRESHOLD",
    "SwitchRefusal",
    "SwitchSynthesizer",
    "chain_depth",
    "extract_comparison_bases",
    "extract_comparison_values",
    "is_comparison_base",
]
