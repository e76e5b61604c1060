"""Render decision trees as statements.

Two strategies exist.  :func:`render_if_chain` serves expression statements
and produces ``if``/``else if``/``else`` chains; the naive translation of
``a ? b() : c ? d() : e()`` would nest the second ``if`` inside an ``else``
block, so a false branch that renders to a single ``if`` is attached as the
``else`` directly::

    if (a) {
      b();
    } else if (c) {
      d();
    } else {
      e();
    }

:func:`render_early_return` serves ``return`` statements and emits guarded
returns one after another instead of nesting::

    if (a) {
      return b();
    }
    if (c) {
      return d();
    }
    return e();
"""

from __future__ import annotations

from typing import List, Optional

from .decision_tree import DecisionTree
from .js_ast import ExpressionStatement, IfStatement, JsStatement, ReturnStatement, negate, wrap_block
from .switch_synth import SwitchSynthesizer


def render_if_chain(tree: DecisionTree, synthesizer: Optional[SwitchSynthesizer] = None) -> List[JsStatement]:
    """Render ``tree`` for an expression statement.

    ``synthesizer`` is consulted for every subtree before falling back to
    ``if`` statements, so a switch-shaped tail of a longer chain still becomes
    a ``switch``.
    """

    if synthesizer is not None:
        switch = synthesizer.try_synthesize(tree)
        if switch is not None:
            return [switch]

    condition, true_branch, false_branch = tree.condition, tree.true_branch, tree.false_branch

    if true_branch is not None and false_branch is not None:
        false_statements = render_if_chain(false_branch, synthesizer)
        true_block = wrap_block(render_if_chain(true_branch, synthesizer))
        if len(false_statements) == 1 and isinstance(false_statements[0], IfStatement):
            return [IfStatement(condition, true_block, false_statements[0])]
        return [IfStatement(condition, true_block, wrap_block(false_statements))]

    if true_branch is not None:
        return [IfStatement(condition, wrap_block(render_if_chain(true_branch, synthesizer)))]

    if false_branch is not None:
        return [IfStatement(negate(condition), wrap_block(render_if_chain(false_branch, synthesizer)))]

    if condition is None:
        return []
    return [ExpressionStatement(condition)]


def render_early_return(tree: DecisionTree) -> List[JsStatement]:
    """Render ``tree`` as a sequence of guarded returns."""

    condition, true_branch, false_branch = tree.condition, tree.true_branch, tree.false_branch

    if true_branch is not None and false_branch is not None:
        return [
            IfStatement(condition, wrap_block(render_early_return(true_branch))),
            *render_early_return(false_branch),
        ]

    if true_branch is not None:
        return [IfStatement(condition, wrap_block(render_early_return(true_branch)))]

    if false_branch is not None:
        return [IfStatement(negate(condition), wrap_block(render_early_return(false_branch)))]

    if condition is None:
        return []
    return [ReturnStatement(condition)]


__all__ = ["render_if_chain", "render_early_return"]
