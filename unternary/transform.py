"""Unfold ternary and short-circuit statements into explicit control flow.

Three statement shapes are rewritten:

``a ? b() : c ? d() : e()``
    An expression statement holding a ternary becomes an ``if``/``else if``
    chain, or a ``switch`` when the guards compare one value repeatedly.

``x && a()`` / ``x || a()`` / ``x ?? a()``
    An expression statement holding a logical expression becomes
    ``if (x)``, ``if (!x)`` or ``if (x == null)``.

``return a ? b() : c ? d() : e()``
    A returned ternary with a nested ternary becomes a run of early returns.
    ``return a ? b() : c()`` reads fine as it is and stays untouched.

The module level ``rewrite_*`` functions work on AST nodes.
:class:`ConditionalUnfolder` applies them to JavaScript source text.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .decision_tree import DecisionTree, build_decision_tree
from .js_ast import ConditionalExpr, JsExpression, JsStatement, SwitchStatement, walk
from .js_formatter import JsRenderOptions
from .js_frontend import TRIGGER_LOGICAL, TRIGGER_RETURN, Trigger, find_triggers, make_parser, parse_source
from .renderer import render_early_return, render_if_chain
from .report import (
    REWRITE_EARLY_RETURN,
    REWRITE_IF_CHAIN,
    REWRITE_SWITCH,
    RefusalRecord,
    RewriteRecord,
    UnfoldReport,
)
from .splice import TextEdit, apply_edits, make_edit
from .switch_synth import SWITCH_THRESHOLD, SwitchSynthesizer


logger = logging.getLogger(__name__)


@dataclass
class UnfoldOptions:
    """Customisation knobs for the unfolder."""

    switch_threshold: int = SWITCH_THRESHOLD
    strict_cases: bool = True
    synthesize_switch: bool = True
    max_passes: int = 8
    render: JsRenderOptions = field(default_factory=JsRenderOptions)

    def __post_init__(self) -> None:
        if self.switch_threshold < 1:
            raise ValueError("switch threshold must be positive")
        if self.max_passes < 1:
            raise ValueError("max passes must be positive")

    def make_synthesizer(self) -> Optional[SwitchSynthesizer]:
        if not self.synthesize_switch:
            return None
        return SwitchSynthesizer(threshold=self.switch_threshold, strict_cases=self.strict_cases)


# ---------------------------------------------------------------------------
# entry points
# ---------------------------------------------------------------------------


def rewrite_conditional_statement(
    expression: JsExpression,
    options: Optional[UnfoldOptions] = None,
    *,
    synthesizer: Optional[SwitchSynthesizer] = None,
) -> List[JsStatement]:
    """Statements replacing ``expression;`` where ``expression`` is a ternary."""

    opts = options or UnfoldOptions()
    tree = build_decision_tree(expression)
    return render_if_chain(tree, synthesizer or opts.make_synthesizer())


def rewrite_logical_statement(
    expression: JsExpression,
    options: Optional[UnfoldOptions] = None,
    *,
    synthesizer: Optional[SwitchSynthesizer] = None,
) -> List[JsStatement]:
    """Statements replacing ``expression;`` where ``expression`` is ``&&``/``||``/``??``."""

    opts = options or UnfoldOptions()
    tree = build_decision_tree(expression)
    return render_if_chain(tree, synthesizer or opts.make_synthesizer())


def is_nested_conditional(expression: JsExpression) -> bool:
    if not isinstance(expression, ConditionalExpr):
        return False
    return any(
        isinstance(node, ConditionalExpr)
        for branch in (expression.consequent, expression.alternate)
        for node in walk(branch)
    )


def rewrite_return_argument(
    expression: JsExpression, options: Optional[UnfoldOptions] = None
) -> Optional[List[JsStatement]]:
    """Statements replacing ``return expression;`` or ``None`` to keep it.

    Logical operands stay whole: a returned ``x && a()`` yields ``x`` itself
    when ``x`` is falsy, which a guarded return cannot express.  ``options``
    is accepted for symmetry with the other entry points; early returns never
    become a ``switch``.
    """

    if not is_nested_conditional(expression):
        return None
    tree = build_decision_tree(expression, descend_logical=False)
    return render_early_return(tree)


# ---------------------------------------------------------------------------
# source level driver
# ---------------------------------------------------------------------------


@dataclass
class UnfoldResult:
    source: str
    report: UnfoldReport
    original: str = ""

    @property
    def changed(self) -> bool:
        return self.source != self.original


@dataclass
class _Rewrite:
    trigger: Trigger
    tree: DecisionTree
    statements: List[JsStatement]
    refusals: list


class ConditionalUnfolder:
    """Apply the rewrites to whole JavaScript sources.

    Each pass parses the source, rewrites every trigger that is not nested in
    another rewritten statement and splices the results back.  Statements
    nested inside a rewritten one (for example inside a callback passed to a
    rewritten call) are picked up by the next pass.
    """

    def __init__(self, options: Optional[UnfoldOptions] = None) -> None:
        self.options = options or UnfoldOptions()
        self._parser = make_parser()

    def unfold(self, source: str, *, name: Optional[str] = None) -> UnfoldResult:
        report = UnfoldReport(name)
        data = source.encode("utf-8")
        for _ in range(self.options.max_passes):
            edits = self._run_pass(data, report)
            if not edits:
                break
            data = apply_edits(data, edits)
            report.passes += 1
        else:
            if self._collect_rewrites(data):
                logger.warning(
                    "%s: stopped after %d passes with rewritable statements left",
                    name or "<source>",
                    self.options.max_passes,
                )
        return UnfoldResult(data.decode("utf-8"), report, source)

    # ------------------------------------------------------------------
    def _run_pass(self, data: bytes, report: UnfoldReport) -> List[TextEdit]:
        edits: List[TextEdit] = []
        for rewrite in self._collect_rewrites(data):
            site = rewrite.trigger.site
            edits.append(make_edit(site, rewrite.statements, self.options.render))
            report.register(
                RewriteRecord(
                    kind=_classify_rewrite(rewrite),
                    trigger=rewrite.trigger.kind,
                    line=site.line,
                    statements=len(rewrite.statements),
                    depth=rewrite.tree.depth(),
                )
            )
            for refusal in rewrite.refusals:
                report.register_refusal(RefusalRecord(site.line, refusal.base, refusal.reason))
        return edits

    def _collect_rewrites(self, data: bytes) -> List[_Rewrite]:
        tree = parse_source(data, self._parser)
        rewrites: List[_Rewrite] = []
        covered_until = -1
        for trigger in find_triggers(tree, data):
            if trigger.site.start < covered_until:
                continue
            rewrite = self._rewrite(trigger)
            if rewrite is None:
                continue
            rewrites.append(rewrite)
            covered_until = trigger.site.end
        return rewrites

    def _rewrite(self, trigger: Trigger) -> Optional[_Rewrite]:
        if trigger.kind == TRIGGER_RETURN:
            statements = rewrite_return_argument(trigger.expression)
            if statements is None:
                return None
            tree = build_decision_tree(trigger.expression, descend_logical=False)
            return _Rewrite(trigger, tree, statements, [])

        synthesizer = self.options.make_synthesizer()
        if trigger.kind == TRIGGER_LOGICAL:
            statements = rewrite_logical_statement(trigger.expression, self.options, synthesizer=synthesizer)
        else:
            statements = rewrite_conditional_statement(trigger.expression, self.options, synthesizer=synthesizer)
        refusals = list(synthesizer.refusals) if synthesizer is not None else []
        return _Rewrite(trigger, build_decision_tree(trigger.expression), statements, refusals)


def _classify_rewrite(rewrite: _Rewrite) -> str:
    if rewrite.trigger.kind == TRIGGER_RETURN:
        return REWRITE_EARLY_RETURN
    if len(rewrite.statements) == 1 and isinstance(rewrite.statements[0], SwitchStatement):
        return REWRITE_SWITCH
    return REWRITE_IF_CHAIN


def unfold_source(source: str, options: Optional[UnfoldOptions] = None) -> str:
    """Convenience wrapper returning only the rewritten text."""

    return ConditionalUnfolder(options).unfold(source).source


__all__ = [
    "UnfoldOptions",
    "UnfoldResult",
    "ConditionalUnfolder",
    "rewrite_conditional_statement",
    "rewrite_logical_statement",
    "rewrite_return_argument",
    "is_nested_conditional",
    "unfold_source",
]
