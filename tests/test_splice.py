from __future__ import annotations

import pytest

from unternary.js_ast import CallExpr, ExpressionStatement, NameExpr
from unternary.splice import StatementSite, TextEdit, apply_edits, line_indent, splice_statements


def _calls(*names: str) -> list:
    return [ExpressionStatement(CallExpr(NameExpr(name))) for name in names]


def test_splice_in_statement_list_keeps_indentation() -> None:
    source = b"{\n    old();\n}\n"
    start = source.index(b"old")
    site = StatementSite(start, start + len(b"old();"), indent="    ")

    assert splice_statements(source, site, _calls("a", "b")) == b"{\n    a();\n    b();\n}\n"


def test_splice_sole_body_adds_block() -> None:
    source = b"while (x) old();\n"
    start = source.index(b"old")
    site = StatementSite(start, start + len(b"old();"), indent="", needs_block=True)

    assert splice_statements(source, site, _calls("a")) == b"while (x) {\n  a();\n}\n"


def test_apply_edits_back_to_front() -> None:
    source = b"aaa bbb ccc"
    edits = [TextEdit(8, 11, b"C"), TextEdit(0, 3, b"AAAA")]
    assert apply_edits(source, edits) == b"AAAA bbb C"


def test_apply_edits_rejects_overlap() -> None:
    with pytest.raises(ValueError):
        apply_edits(b"abcdef", [TextEdit(0, 4, b"x"), TextEdit(2, 5, b"y")])


def test_line_indent() -> None:
    source = b"x;\n\t  if (a) b();\n"
    assert line_indent(source, source.index(b"b()")) == "\t  "
    assert line_indent(source, 0) == ""
