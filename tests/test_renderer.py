"""Tests for the if-chain and early-return renderers."""

from __future__ import annotations

from unternary.decision_tree import build_decision_tree
from unternary.js_ast import IfStatement, ReturnStatement, SwitchStatement
from unternary.js_formatter import render_statements
from unternary.js_frontend import parse_expression
from unternary.renderer import render_early_return, render_if_chain
from unternary.switch_synth import SwitchSynthesizer


def _chain(text: str, synthesizer=None) -> str:
    tree = build_decision_tree(parse_expression(text))
    return render_statements(render_if_chain(tree, synthesizer))


def _early(text: str) -> str:
    tree = build_decision_tree(parse_expression(text), descend_logical=False)
    return render_statements(render_early_return(tree))


def test_false_branch_if_is_flattened_into_else_if() -> None:
    tree = build_decision_tree(parse_expression("a ? b() : c ? d() : e()"))
    statements = render_if_chain(tree)

    assert len(statements) == 1
    assert isinstance(statements[0], IfStatement)
    assert isinstance(statements[0].alternate, IfStatement)
    assert render_statements(statements) == "\n".join(
        [
            "if (a) {",
            "  b();",
            "} else if (c) {",
            "  d();",
            "} else {",
            "  e();",
            "}",
        ]
    )


def test_true_branch_condition_stays_nested() -> None:
    assert _chain("a ? (b ? c() : d()) : e()") == "\n".join(
        [
            "if (a) {",
            "  if (b) {",
            "    c();",
            "  } else {",
            "    d();",
            "  }",
            "} else {",
            "  e();",
            "}",
        ]
    )


def test_short_circuit_guards() -> None:
    assert _chain("x && y()") == "if (x) {\n  y();\n}"
    assert _chain("x || y()") == "if (!x) {\n  y();\n}"
    assert _chain("x ?? y()") == "if (x == null) {\n  y();\n}"
    assert _chain("a || b ? f() : g()") == "if (a || b) {\n  f();\n} else {\n  g();\n}"


def test_logical_false_branch_joins_else_if() -> None:
    assert _chain("a ? b() : c && d()") == "if (a) {\n  b();\n} else if (c) {\n  d();\n}"


def test_switch_is_tried_on_every_subtree() -> None:
    text = "ready ? go() : mode === 1 ? one() : mode === 2 ? two() : mode === 3 ? three() : none()"
    tree = build_decision_tree(parse_expression(text))
    statements = render_if_chain(tree, SwitchSynthesizer())

    assert isinstance(statements[0], IfStatement)
    assert statements[0].condition.render() == "ready"
    alternate = statements[0].alternate
    assert alternate.statements and isinstance(alternate.statements[0], SwitchStatement)


def test_early_returns_are_sequential() -> None:
    assert _early("a ? b() : c ? d() : h()") == "\n".join(
        [
            "if (a) {",
            "  return b();",
            "}",
            "if (c) {",
            "  return d();",
            "}",
            "return h();",
        ]
    )


def test_early_return_keeps_nested_true_branch() -> None:
    statements = render_early_return(
        build_decision_tree(parse_expression("a ? (b ? c : d) : e"), descend_logical=False)
    )
    assert isinstance(statements[-1], ReturnStatement)
    assert render_statements(statements) == "\n".join(
        [
            "if (a) {",
            "  if (b) {",
            "    return c;",
            "  }",
            "  return d;",
            "}",
            "return e;",
        ]
    )


def test_early_return_keeps_logical_values_whole() -> None:
    assert _early("a ? x && y() : b ? c : d") == "\n".join(
        [
            "if (a) {",
            "  return x && y();",
            "}",
            "if (b) {",
            "  return c;",
            "}",
            "return d;",
        ]
    )
