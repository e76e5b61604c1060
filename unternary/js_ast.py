"""Lightweight JavaScript abstract syntax tree helpers.

The unfolder only needs to understand a handful of constructs: the ternary and
short-circuit operators it takes apart, the equality comparisons the switch
detector inspects and the statements it emits.  Everything else that appears
inside a rewritten expression is carried along as :class:`RawExpr`, an opaque
leaf that keeps the original source text together with a precedence hint.

Expressions are immutable and render to a single line.  Rendering inserts only
the parentheses that operator precedence requires, which doubles as the
canonical form used by :mod:`unternary.equality`: ``a`` and ``(a)`` produce
identical text.  Statements expose an :meth:`emit` method which receives a
:class:`~unternary.js_formatter.JsWriter`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Sequence

from .js_formatter import JsWriter


# ---------------------------------------------------------------------------
# operator precedence
# ---------------------------------------------------------------------------

PREC_SEQUENCE = 1
PREC_ASSIGNMENT = 2
PREC_CONDITIONAL = 3
PREC_OR = 4
PREC_AND = 5
PREC_BIT_OR = 6
PREC_BIT_XOR = 7
PREC_BIT_AND = 8
PREC_EQUALITY = 9
PREC_RELATIONAL = 10
PREC_SHIFT = 11
PREC_ADDITIVE = 12
PREC_MULTIPLICATIVE = 13
PREC_EXPONENT = 14
PREC_UNARY = 15
PREC_POSTFIX = 16
PREC_CALL = 17
PREC_PRIMARY = 18

LOGICAL_OPERATORS = frozenset({"&&", "||", "??"})
EQUALITY_OPERATORS = frozenset({"==", "==="})

BINARY_PRECEDENCE = {
    "??": PREC_OR,
    "||": PREC_OR,
    "&&": PREC_AND,
    "|": PREC_BIT_OR,
    "^": PREC_BIT_XOR,
    "&": PREC_BIT_AND,
    "==": PREC_EQUALITY,
    "!=": PREC_EQUALITY,
    "===": PREC_EQUALITY,
    "!==": PREC_EQUALITY,
    "<": PREC_RELATIONAL,
    ">": PREC_RELATIONAL,
    "<=": PREC_RELATIONAL,
    ">=": PREC_RELATIONAL,
    "instanceof": PREC_RELATIONAL,
    "in": PREC_RELATIONAL,
    "<<": PREC_SHIFT,
    ">>": PREC_SHIFT,
    ">>>": PREC_SHIFT,
    "+": PREC_ADDITIVE,
    "-": PREC_ADDITIVE,
    "*": PREC_MULTIPLICATIVE,
    "/": PREC_MULTIPLICATIVE,
    "%": PREC_MULTIPLICATIVE,
    "**": PREC_EXPONENT,
}

_WORD_UNARY = frozenset({"typeof", "void", "delete", "await"})

# Tokens an expression statement may not start with.
_AMBIGUOUS_STATEMENT_START = re.compile(r"\{|function\b|async\s+function\b|class\b|let\s*\[")


def _wrap(expression: "JsExpression", minimum: int) -> str:
    text = expression.render()
    if expression.precedence < minimum:
        return f"({text})"
    return text


# ---------------------------------------------------------------------------
# expression nodes
# ---------------------------------------------------------------------------


class JsExpression:
    """Base class for all JavaScript expression nodes."""

    precedence = PREC_PRIMARY

    def render(self) -> str:
        raise NotImplementedError

    def children(self) -> Sequence["JsExpression"]:
        return ()


@dataclass(frozen=True)
class LiteralExpr(JsExpression):
    value: str

    def render(self) -> str:
        return self.value


@dataclass(frozen=True)
class NameExpr(JsExpression):
    name: str

    def render(self) -> str:
        return self.name


@dataclass(frozen=True)
class RawExpr(JsExpression):
    """Opaque expression kept verbatim from the source.

    ``kind`` records the parser node type so that callers can tell an arrow
    function from an assignment without re-parsing the text.
    """

    text: str
    precedence: int = PREC_ASSIGNMENT
    kind: str = ""

    def render(self) -> str:
        return self.text


@dataclass(frozen=True)
class UnaryExpr(JsExpression):
    operator: str
    operand: JsExpression

    precedence = PREC_UNARY

    def render(self) -> str:
        inner = _wrap(self.operand, PREC_UNARY)
        if self.operator in _WORD_UNARY:
            return f"{self.operator} {inner}"
        if self.operator in {"+", "-"} and inner.startswith(self.operator):
            return f"{self.operator} {inner}"
        return f"{self.operator}{inner}"

    def children(self) -> Sequence[JsExpression]:
        return (self.operand,)


@dataclass(frozen=True)
class BinaryExpr(JsExpression):
    left: JsExpression
    operator: str
    right: JsExpression

    @property
    def precedence(self) -> int:  # type: ignore[override]
        return BINARY_PRECEDENCE.get(self.operator, PREC_RELATIONAL)

    def render(self) -> str:
        own = self.precedence
        if self.operator == "**":
            lhs = _wrap(self.left, PREC_POSTFIX)
            rhs = _wrap(self.right, own)
        else:
            lhs = _wrap(self.left, own)
            rhs = _wrap(self.right, own + 1)
        return f"{lhs} {self.operator} {rhs}"

    def children(self) -> Sequence[JsExpression]:
        return (self.left, self.right)


@dataclass(frozen=True)
class LogicalExpr(JsExpression):
    """``&&``, ``||`` and ``??``.

    ``??`` shares a precedence level with ``||`` but JavaScript refuses to mix
    it with the other two operators without explicit grouping.
    """

    left: JsExpression
    operator: str
    right: JsExpression

    @property
    def precedence(self) -> int:  # type: ignore[override]
        return BINARY_PRECEDENCE[self.operator]

    def render(self) -> str:
        own = self.precedence
        lhs = self._operand(self.left, own)
        rhs = self._operand(self.right, own + 1)
        return f"{lhs} {self.operator} {rhs}"

    def _operand(self, operand: JsExpression, minimum: int) -> str:
        if isinstance(operand, LogicalExpr) and (operand.operator == "??") != (self.operator == "??"):
            return f"({operand.render()})"
        return _wrap(operand, minimum)

    def children(self) -> Sequence[JsExpression]:
        return (self.left, self.right)


@dataclass(frozen=True)
class ConditionalExpr(JsExpression):
    test: JsExpression
    consequent: JsExpression
    alternate: JsExpression

    precedence = PREC_CONDITIONAL

    def render(self) -> str:
        test = _wrap(self.test, PREC_OR)
        consequent = _wrap(self.consequent, PREC_ASSIGNMENT)
        alternate = _wrap(self.alternate, PREC_ASSIGNMENT)
        return f"{test} ? {consequent} : {alternate}"

    def children(self) -> Sequence[JsExpression]:
        return (self.test, self.consequent, self.alternate)


@dataclass(frozen=True)
class CallExpr(JsExpression):
    callee: JsExpression
    arguments: Sequence[JsExpression] = field(default_factory=tuple)
    optional: bool = False

    precedence = PREC_CALL

    def render(self) -> str:
        args = ", ".join(_wrap(arg, PREC_ASSIGNMENT) for arg in self.arguments)
        connector = "?." if self.optional else ""
        return f"{_wrap(self.callee, PREC_CALL)}{connector}({args})"

    def children(self) -> Sequence[JsExpression]:
        return (self.callee, *self.arguments)


@dataclass(frozen=True)
class MemberExpr(JsExpression):
    target: JsExpression
    property: str
    optional: bool = False

    precedence = PREC_CALL

    def render(self) -> str:
        target = _wrap(self.target, PREC_CALL)
        if isinstance(self.target, LiteralExpr) and self.target.value.isdigit():
            target = f"({target})"
        connector = "?." if self.optional else "."
        return f"{target}{connector}{self.property}"

    def children(self) -> Sequence[JsExpression]:
        return (self.target,)


@dataclass(frozen=True)
class IndexExpr(JsExpression):
    target: JsExpression
    index: JsExpression
    optional: bool = False

    precedence = PREC_CALL

    def render(self) -> str:
        connector = "?." if self.optional else ""
        return f"{_wrap(self.target, PREC_CALL)}{connector}[{self.index.render()}]"

    def children(self) -> Sequence[JsExpression]:
        return (self.target, self.index)


@dataclass(frozen=True)
class SequenceExpr(JsExpression):
    expressions: Sequence[JsExpression]

    precedence = PREC_SEQUENCE

    def render(self) -> str:
        return ", ".join(_wrap(expr, PREC_ASSIGNMENT) for expr in self.expressions)

    def children(self) -> Sequence[JsExpression]:
        return tuple(self.expressions)


def walk(expression: JsExpression) -> Iterator[JsExpression]:
    """Yield ``expression`` and every nested expression, depth first."""

    stack = [expression]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children()))


def negate(expression: JsExpression) -> UnaryExpr:
    return UnaryExpr("!", expression)


def loose_null_check(expression: JsExpression) -> BinaryExpr:
    """Return ``expression == null``, the guard equivalent of ``??``."""

    return BinaryExpr(expression, "==", LiteralExpr("null"))


# ---------------------------------------------------------------------------
# statement nodes
# ---------------------------------------------------------------------------


class JsStatement:
    """Base class for all emitted JavaScript statements."""

    def emit(self, writer: JsWriter) -> None:
        raise NotImplementedError


@dataclass
class ExpressionStatement(JsStatement):
    expression: JsExpression

    def emit(self, writer: JsWriter) -> None:
        text = self.expression.render()
        # Otherwise the parser reads a block or a declaration.
        if _AMBIGUOUS_STATEMENT_START.match(text):
            text = f"({text})"
        writer.write_statement(text)


@dataclass
class ReturnStatement(JsStatement):
    value: Optional[JsExpression] = None

    def emit(self, writer: JsWriter) -> None:
        if self.value is None:
            writer.write_statement("return")
        else:
            writer.write_statement(f"return {self.value.render()}")


@dataclass
class BreakStatement(JsStatement):
    def emit(self, writer: JsWriter) -> None:
        writer.write_statement("break")


@dataclass
class BlockStatement(JsStatement):
    statements: List[JsStatement] = field(default_factory=list)

    def extend(self, other: Iterable[JsStatement]) -> None:
        for statement in other:
            self.statements.append(statement)

    def emit(self, writer: JsWriter) -> None:
        writer.write_line("{")
        with writer.indented():
            self.emit_body(writer)
        writer.write_line("}")

    def emit_body(self, writer: JsWriter) -> None:
        for statement in self.statements:
            statement.emit(writer)


def _emit_nested(statement: JsStatement, writer: JsWriter) -> None:
    if isinstance(statement, BlockStatement):
        statement.emit_body(writer)
    else:
        statement.emit(writer)


@dataclass
class IfStatement(JsStatement):
    """``if`` statement whose alternate is either another ``if`` or a block.

    An :class:`IfStatement` alternate renders as ``else if`` which is how the
    renderers express a flattened chain.
    """

    condition: JsExpression
    consequent: JsStatement
    alternate: Optional[JsStatement] = None

    def emit(self, writer: JsWriter) -> None:
        writer.write_line(f"if ({self.condition.render()}) {{")
        self._emit_tail(writer)

    def _emit_tail(self, writer: JsWriter) -> None:
        with writer.indented():
            _emit_nested(self.consequent, writer)
        alternate = self.alternate
        if alternate is None:
            writer.write_line("}")
        elif isinstance(alternate, IfStatement):
            writer.write_line(f"}} else if ({alternate.condition.render()}) {{")
            alternate._emit_tail(writer)
        else:
            writer.write_line("} else {")
            with writer.indented():
                _emit_nested(alternate, writer)
            writer.write_line("}")


@dataclass
class SwitchCase:
    """A ``case`` label; ``test`` of ``None`` marks the ``default`` arm."""

    test: Optional[JsExpression]
    body: List[JsStatement] = field(default_factory=list)

    @property
    def is_default(self) -> bool:
        return self.test is None

    def emit(self, writer: JsWriter) -> None:
        if self.test is None:
            writer.write_line("default:")
        else:
            writer.write_line(f"case {self.test.render()}:")
        with writer.indented():
            for statement in self.body:
                statement.emit(writer)


@dataclass
class SwitchStatement(JsStatement):
    discriminant: JsExpression
    cases: List[SwitchCase] = field(default_factory=list)

    def emit(self, writer: JsWriter) -> None:
        writer.write_line(f"switch ({self.discriminant.render()}) {{")
        with writer.indented():
            for case in self.cases:
                case.emit(writer)
        writer.write_line("}")


def wrap_block(statements: Iterable[JsStatement]) -> BlockStatement:
    block = BlockStatement()
    block.extend(statements)
    return block


__all__ = [
    "JsExpression",
    "LiteralExpr",
    "NameExpr",
    "RawExpr",
    "UnaryExpr",
    "BinaryExpr",
    "LogicalExpr",
    "ConditionalExpr",
    "CallExpr",
    "MemberExpr",
    "IndexExpr",
    "SequenceExpr",
    "JsStatement",
    "ExpressionStatement",
    "ReturnStatement",
    "BreakStatement",
    "BlockStatement",
    "IfStatement",
    "SwitchCase",
    "SwitchStatement",
    "walk",
    "negate",
    "loose_null_check",
    "wrap_block",
    "LOGICAL_OPERATORS",
    "EQUALITY_OPERATORS",
]
