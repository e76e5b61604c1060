"""Source level tests for the conditional unfolder."""

from __future__ import annotations

import logging

import pytest

from unternary.js_ast import IfStatement, SwitchStatement
from unternary.js_formatter import JsRenderOptions
from unternary.js_frontend import SourceParseError, parse_expression, parse_source
from unternary.transform import (
    ConditionalUnfolder,
    UnfoldOptions,
    is_nested_conditional,
    rewrite_conditional_statement,
    rewrite_logical_statement,
    rewrite_return_argument,
    unfold_source,
)


SWITCH_SOURCE = "mode === 'a' ? runA() : mode === 'b' ? runB() : mode === 'c' ? runC() : fallback();\n"


def _lines(*lines: str) -> str:
    return "\n".join(lines) + "\n"


# ---------------------------------------------------------------------------
# entry points
# ---------------------------------------------------------------------------


def test_rewrite_conditional_statement_honours_switch_option() -> None:
    expression = parse_expression(SWITCH_SOURCE.rstrip(";\n"))

    with_switch = rewrite_conditional_statement(expression)
    assert isinstance(with_switch[0], SwitchStatement)

    without_switch = rewrite_conditional_statement(expression, UnfoldOptions(synthesize_switch=False))
    assert isinstance(without_switch[0], IfStatement)


def test_rewrite_logical_statement() -> None:
    statements = rewrite_logical_statement(parse_expression("x || y()"))
    assert len(statements) == 1
    assert statements[0].condition.render() == "!x"


def test_non_nested_return_is_kept() -> None:
    assert not is_nested_conditional(parse_expression("a ? b : c"))
    assert rewrite_return_argument(parse_expression("a ? b : c")) is None
    assert is_nested_conditional(parse_expression("a ? b : (c ? d : e)"))
    assert is_nested_conditional(parse_expression("a ? f(b ? c : d) : e"))


def test_options_are_validated() -> None:
    with pytest.raises(ValueError):
        UnfoldOptions(switch_threshold=0)
    with pytest.raises(ValueError):
        UnfoldOptions(max_passes=0)


# ---------------------------------------------------------------------------
# whole sources
# ---------------------------------------------------------------------------


def test_top_level_ternary_statement() -> None:
    assert unfold_source("a ? b() : c();\n") == _lines(
        "if (a) {",
        "  b();",
        "} else {",
        "  c();",
        "}",
    )


def test_rewrite_follows_statement_indentation() -> None:
    source = _lines("function f(x) {", "  x ? g() : h();", "}")
    assert unfold_source(source) == _lines(
        "function f(x) {",
        "  if (x) {",
        "    g();",
        "  } else {",
        "    h();",
        "  }",
        "}",
    )


def test_switch_case_bodies_receive_flat_statements() -> None:
    source = _lines("switch (k) {", "  case 1:", "    a ? b() : c();", "    break;", "}")
    assert unfold_source(source) == _lines(
        "switch (k) {",
        "  case 1:",
        "    if (a) {",
        "      b();",
        "    } else {",
        "      c();",
        "    }",
        "    break;",
        "}",
    )


def test_sole_bodies_are_wrapped_in_blocks() -> None:
    assert unfold_source("if (ok) a && b();\n") == _lines(
        "if (ok) {",
        "  if (a) {",
        "    b();",
        "  }",
        "}",
    )

    result = unfold_source("if (p) q(); else r ? s() : t();\n")
    assert result.startswith("if (p) q(); else {\n  if (r) {\n    s();\n  } else {\n    t();\n  }\n}")
    parse_source(result.encode("utf-8"))


def test_nested_return_becomes_early_returns() -> None:
    source = _lines("function f() {", "  return a ? b : c ? d : e;", "}")
    assert unfold_source(source) == _lines(
        "function f() {",
        "  if (a) {",
        "    return b;",
        "  }",
        "  if (c) {",
        "    return d;",
        "  }",
        "  return e;",
        "}",
    )


def test_simple_return_and_declarations_are_untouched() -> None:
    source = _lines("function f() {", "  const v = a ? b : c;", "  return a ? b : c;", "}")
    result = ConditionalUnfolder().unfold(source)
    assert result.source == source
    assert not result.changed
    assert result.report.total_rewrites() == 0


def test_comments_outside_rewritten_statements_survive() -> None:
    source = _lines("// keep me", "a ? b() : c(); // trailing", "/* tail */")
    result = unfold_source(source)
    assert result.startswith("// keep me\nif (a) {")
    assert "} // trailing\n/* tail */\n" in result


def test_statement_without_semicolon() -> None:
    assert unfold_source("ready && start()\n") == "if (ready) {\n  start();\n}\n"


def test_switch_is_synthesised_in_sources() -> None:
    result = ConditionalUnfolder().unfold(SWITCH_SOURCE)
    assert result.source == _lines(
        "switch (mode) {",
        "  case 'a':",
        "    runA();",
        "    break;",
        "  case 'b':",
        "    runB();",
        "    break;",
        "  case 'c':",
        "    runC();",
        "    break;",
        "  default:",
        "    fallback();",
        "    break;",
        "}",
    )
    assert result.report.count_by_kind() == {"switch": 1}


def test_render_options_are_applied() -> None:
    options = UnfoldOptions(render=JsRenderOptions(indent="    ", semicolons=False))
    assert unfold_source("a && b();\n", options) == "if (a) {\n    b()\n}\n"


def test_callbacks_are_rewritten_and_result_is_stable() -> None:
    source = _lines(
        "items.forEach(item => {",
        "  item.ok ? keep(item) : drop(item);",
        "});",
        "ready && start();",
    )
    expected = _lines(
        "items.forEach(item => {",
        "  if (item.ok) {",
        "    keep(item);",
        "  } else {",
        "    drop(item);",
        "  }",
        "});",
        "if (ready) {",
        "  start();",
        "}",
    )
    once = unfold_source(source)
    assert once == expected
    assert unfold_source(once) == once


def test_statements_inside_rewritten_statements_use_another_pass() -> None:
    source = "a ? run(() => { b ? c() : d(); }) : e();\n"
    result = ConditionalUnfolder().unfold(source)

    assert result.report.passes == 2
    assert result.report.total_rewrites() == 2
    assert "?" not in result.source
    assert "if (b) {" in result.source
    parse_source(result.source.encode("utf-8"))


def test_pass_limit_is_reported(caplog: pytest.LogCaptureFixture) -> None:
    source = "a ? run(() => { b ? c() : d(); }) : e();\n"
    with caplog.at_level(logging.WARNING, logger="unternary.transform"):
        result = ConditionalUnfolder(UnfoldOptions(max_passes=1)).unfold(source, name="sample.js")

    assert result.report.passes == 1
    assert "b ? c() : d();" in result.source
    assert "sample.js: stopped after 1 passes" in caplog.text


def test_report_records_each_rewrite() -> None:
    source = _lines(
        "a ? b() : c();",
        "function f() {",
        "  return a ? b : c ? d : e;",
        "}",
        "x ?? init();",
    )
    report = ConditionalUnfolder().unfold(source, name="input.js").report

    assert report.name == "input.js"
    assert report.total_rewrites() == 3
    assert report.count_by_trigger() == {"conditional": 1, "logical": 1, "return": 1}
    assert report.count_by_kind() == {"early-return": 1, "if-chain": 2}
    assert [record.line for record in report.records] == [1, 3, 5]


def test_refused_switches_are_reported() -> None:
    source = "a === 1 ? (b ? f() : g()) : a === 2 ? h() : a === 3 ? i() : j();\n"
    report = ConditionalUnfolder().unfold(source).report

    assert report.count_by_kind() == {"if-chain": 1}
    assert len(report.refusals) == 1
    assert report.refusals[0].base == "a"
    assert report.refusals[0].line == 1


def test_syntax_errors_propagate() -> None:
    with pytest.raises(SourceParseError):
        unfold_source("a ? ;\n")


def test_multi_line_template_literal_is_not_reindented() -> None:
    source = "function q() {\n  a ? f(`x\ny`) : g();\n}\n"
    assert unfold_source(source) == "function q() {\n  if (a) {\n    f(`x\ny`);\n  } else {\n    g();\n  }\n}\n"


def test_loose_null_chain_stays_an_if_chain() -> None:
    result = ConditionalUnfolder().unfold("x == null ? f() : x == 0 ? g() : x == 1 ? h() : k();\n")

    assert result.source == _lines(
        "if (x == null) {",
        "  f();",
        "} else if (x == 0) {",
        "  g();",
        "} else if (x == 1) {",
        "  h();",
        "} else {",
        "  k();",
        "}",
    )
    assert "case" not in result.source
    assert len(result.report.refusals) == 1
    assert "matches loosely" in result.report.refusals[0].reason


def test_disjunction_guard_at_chain_end_keeps_its_break() -> None:
    assert unfold_source("a === 1 ? f() : a === 2 ? g() : a === 3 || h();\n") == _lines(
        "switch (a) {",
        "  case 1:",
        "    f();",
        "    break;",
        "  case 2:",
        "    g();",
        "    break;",
        "  case 3:",
        "    break;",
        "  default:",
        "    h();",
        "    break;",
        "}",
    )


@pytest.mark.parametrize(
    "source",
    [
        SWITCH_SOURCE,
        "a === 1 ? f() : a === 2 ? g() : a === 3 || h();\n",
        "a === 1 ? f() : a === 2 || a === 3 ? g() : a === 4 ? h() : k();\n",
        "x == null ? f() : x == 0 ? g() : x == 1 ? h() : k();\n",
    ],
)
def test_unfolded_output_is_a_fixed_point(source: str) -> None:
    once = unfold_source(source)
    assert once != source
    assert unfold_source(once) == once
