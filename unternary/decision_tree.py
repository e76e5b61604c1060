"""Binary decision trees modelling ternary and short-circuit evaluation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional

from .js_ast import ConditionalExpr, JsExpression, LogicalExpr, loose_null_check


@dataclass(frozen=True)
class DecisionTree:
    """Guard/action node.

    A node without branches is a *leaf* and ``condition`` then holds the
    action to execute rather than a test.  A node with a single branch is a
    short-circuit guard: ``true_branch`` runs only when ``condition`` is truthy
    and ``false_branch`` only when it is falsy.  With both branches exactly one
    of them runs.
    """

    condition: Optional[JsExpression]
    true_branch: Optional["DecisionTree"] = None
    false_branch: Optional["DecisionTree"] = None

    @property
    def is_leaf(self) -> bool:
        return self.true_branch is None and self.false_branch is None

    def depth(self) -> int:
        """Number of guards on the longest path to a leaf."""

        if self.is_leaf:
            return 0
        return 1 + max(branch.depth() for branch in self.branches())

    def branches(self) -> Iterator["DecisionTree"]:
        if self.true_branch is not None:
            yield self.true_branch
        if self.false_branch is not None:
            yield self.false_branch

    def nodes(self) -> Iterator["DecisionTree"]:
        """Yield this node and every node below it, pre-order."""

        yield self
        for branch in self.branches():
            yield from branch.nodes()

    def leaves(self) -> Iterator["DecisionTree"]:
        if self.is_leaf:
            yield self
            return
        for branch in self.branches():
            yield from branch.leaves()


def build_decision_tree(expression: JsExpression, *, descend_logical: bool = True) -> DecisionTree:
    """Convert ``expression`` into a :class:`DecisionTree`.

    Ternaries recurse into both arms; ``&&``, ``||`` and ``??`` recurse into
    their right operand.  ``a ?? b`` becomes the guard ``a == null`` so that
    renderers only deal with plain boolean tests.  With ``descend_logical``
    disabled logical expressions stay whole as leaves.
    """

    if isinstance(expression, ConditionalExpr):
        return DecisionTree(
            expression.test,
            build_decision_tree(expression.consequent, descend_logical=descend_logical),
            build_decision_tree(expression.alternate, descend_logical=descend_logical),
        )

    if descend_logical and isinstance(expression, LogicalExpr):
        right = build_decision_tree(expression.right, descend_logical=descend_logical)
        if expression.operator == "&&":
            return DecisionTree(expression.left, right, None)
        if expression.operator == "||":
            return DecisionTree(expression.left, None, right)
        if expression.operator == "??":
            return DecisionTree(loose_null_check(expression.left), right, None)

    return DecisionTree(expression)


__all__ = ["DecisionTree", "build_decision_tree"]
