"""JavaScript parsing frontend built on tree-sitter.

Parsing is delegated to ``tree-sitter-javascript``.  This module converts the
expression nodes the unfolder cares about into :mod:`unternary.js_ast` nodes
and locates the statements that can be rewritten (*triggers*) together with
their splice context.  Anything the AST model does not cover becomes a
:class:`~unternary.js_ast.RawExpr` holding the original text, so conversion
never fails on valid input.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional

import tree_sitter_javascript
from tree_sitter import Language, Node, Parser, Tree

from .js_ast import (
    LOGICAL_OPERATORS,
    PREC_ASSIGNMENT,
    PREC_CALL,
    PREC_PRIMARY,
    PREC_UNARY,
    BinaryExpr,
    CallExpr,
    ConditionalExpr,
    IndexExpr,
    JsExpression,
    LiteralExpr,
    LogicalExpr,
    MemberExpr,
    NameExpr,
    RawExpr,
    SequenceExpr,
    UnaryExpr,
)
from .splice import StatementSite, line_indent


logger = logging.getLogger(__name__)

JS_LANGUAGE = Language(tree_sitter_javascript.language())

TRIGGER_CONDITIONAL = "conditional"
TRIGGER_LOGICAL = "logical"
TRIGGER_RETURN = "return"

# Parents whose statements form a list; anything else holds a single body.
_LIST_PARENTS = frozenset(
    {"program", "statement_block", "switch_case", "switch_default", "class_static_block"}
)

_NAME_KINDS = frozenset({"identifier", "this", "super", "undefined"})
_LITERAL_KINDS = frozenset({"number", "string", "true", "false", "null", "regex"})

_RAW_PRECEDENCE = {
    "array": PREC_PRIMARY,
    "object": PREC_PRIMARY,
    "template_string": PREC_PRIMARY,
    "function_expression": PREC_PRIMARY,
    "function": PREC_PRIMARY,
    "generator_function": PREC_PRIMARY,
    "class": PREC_PRIMARY,
    "meta_property": PREC_PRIMARY,
    "private_property_identifier": PREC_PRIMARY,
    "jsx_element": PREC_PRIMARY,
    "jsx_self_closing_element": PREC_PRIMARY,
    "new_expression": PREC_UNARY,
    "await_expression": PREC_UNARY,
    "update_expression": PREC_UNARY,
    "call_expression": PREC_CALL,
}


class SourceParseError(ValueError):
    """Raised when tree-sitter reports a syntax error."""

    def __init__(self, message: str, line: int, column: int) -> None:
        super().__init__(f"{message} at line {line}, column {column}")
        self.line = line
        self.column = column


@dataclass(frozen=True)
class Trigger:
    """A rewritable statement found in the source."""

    kind: str
    expression: JsExpression
    site: StatementSite


# ---------------------------------------------------------------------------
# parsing
# ---------------------------------------------------------------------------


def make_parser() -> Parser:
    parser = Parser()
    parser.language = JS_LANGUAGE
    return parser


def parse_source(source: bytes, parser: Optional[Parser] = None) -> Tree:
    """Parse ``source`` and raise :class:`SourceParseError` on syntax errors."""

    tree = (parser or make_parser()).parse(source)
    if tree.root_node.has_error:
        problem = _first_error(tree.root_node)
        row, column = problem.start_point if problem is not None else (0, 0)
        message = "missing token" if problem is not None and problem.is_missing else "syntax error"
        raise SourceParseError(message, row + 1, column + 1)
    return tree


def parse_expression(text: str) -> JsExpression:
    """Parse a single expression; mainly useful for tests and tooling."""

    tree = parse_source(f"({text});".encode("utf-8"))
    statements = _named(tree.root_node)
    if len(statements) != 1 or statements[0].type != "expression_statement":
        raise SourceParseError("expected a single expression", 1, 1)
    return convert_expression(_named(statements[0])[0])


def _first_error(node: Node) -> Optional[Node]:
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type == "ERROR" or current.is_missing:
            return current
        if current.has_error:
            stack.extend(reversed(current.children))
    return None


# ---------------------------------------------------------------------------
# expression conversion
# ---------------------------------------------------------------------------


def _named(node: Node) -> List[Node]:
    return [child for child in node.named_children if child.type != "comment"]


def _text(node: Node) -> str:
    return node.text.decode("utf-8")


def _has_optional_chain(node: Node) -> bool:
    return any(child.type == "optional_chain" for child in node.children)


def unwrap_parentheses(node: Node) -> Node:
    while node.type == "parenthesized_expression":
        inner = _named(node)
        if len(inner) != 1:
            break
        node = inner[0]
    return node


def convert_expression(node: Node) -> JsExpression:
    """Convert a tree-sitter expression node into the AST model."""

    kind = node.type
    if kind == "parenthesized_expression":
        inner = _named(node)
        if len(inner) == 1:
            return convert_expression(inner[0])
        return SequenceExpr(tuple(convert_expression(child) for child in inner))

    if kind == "ternary_expression":
        return ConditionalExpr(
            convert_expression(node.child_by_field_name("condition")),
            convert_expression(node.child_by_field_name("consequence")),
            convert_expression(node.child_by_field_name("alternative")),
        )

    if kind == "binary_expression":
        operator = node.child_by_field_name("operator").type
        left = convert_expression(node.child_by_field_name("left"))
        right = convert_expression(node.child_by_field_name("right"))
        if operator in LOGICAL_OPERATORS:
            return LogicalExpr(left, operator, right)
        return BinaryExpr(left, operator, right)

    if kind == "unary_expression":
        operator = node.child_by_field_name("operator").type
        return UnaryExpr(operator, convert_expression(node.child_by_field_name("argument")))

    if kind == "call_expression":
        arguments = node.child_by_field_name("arguments")
        if arguments is None or arguments.type != "arguments":
            # tagged template
            return RawExpr(_text(node), PREC_CALL, kind)
        return CallExpr(
            convert_expression(node.child_by_field_name("function")),
            tuple(convert_expression(arg) for arg in _named(arguments)),
            optional=_has_optional_chain(node),
        )

    if kind == "member_expression":
        return MemberExpr(
            convert_expression(node.child_by_field_name("object")),
            _text(node.child_by_field_name("property")),
            optional=_has_optional_chain(node),
        )

    if kind == "subscript_expression":
        return IndexExpr(
            convert_expression(node.child_by_field_name("object")),
            convert_expression(node.child_by_field_name("index")),
            optional=_has_optional_chain(node),
        )

    if kind == "sequence_expression":
        return SequenceExpr(tuple(_flatten_sequence(node)))

    if kind in _NAME_KINDS:
        return NameExpr(_text(node))

    if kind in _LITERAL_KINDS:
        return LiteralExpr(_text(node))

    return RawExpr(_text(node), _RAW_PRECEDENCE.get(kind, PREC_ASSIGNMENT), kind)


def _flatten_sequence(node: Node) -> Iterator[JsExpression]:
    # Older grammars nest sequences to the right instead of listing them.
    for child in _named(node):
        if child.type == "sequence_expression":
            yield from _flatten_sequence(child)
        else:
            yield convert_expression(child)


# ---------------------------------------------------------------------------
# trigger discovery
# ---------------------------------------------------------------------------


def _site_for(node: Node, source: bytes) -> StatementSite:
    parent = node.parent
    needs_block = parent is not None and parent.type not in _LIST_PARENTS
    return StatementSite(
        start=node.start_byte,
        end=node.end_byte,
        indent=line_indent(source, node.start_byte),
        needs_block=needs_block,
        line=node.start_point[0] + 1,
    )


def _classify(node: Node) -> Optional[tuple[str, Node]]:
    if node.type == "expression_statement":
        children = _named(node)
        if not children:
            return None
        expression = unwrap_parentheses(children[0])
        if expression.type == "ternary_expression":
            return TRIGGER_CONDITIONAL, expression
        if expression.type == "binary_expression":
            operator = expression.child_by_field_name("operator")
            if operator is not None and operator.type in LOGICAL_OPERATORS:
                return TRIGGER_LOGICAL, expression
        return None
    if node.type == "return_statement":
        children = _named(node)
        if not children:
            return None
        argument = unwrap_parentheses(children[0])
        if argument.type == "ternary_expression":
            return TRIGGER_RETURN, argument
    return None


def iter_nodes(root: Node) -> Iterator[Node]:
    """Yield every node below ``root`` in source order."""

    stack = [root]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.named_children))


def find_triggers(tree: Tree, source: bytes) -> List[Trigger]:
    """Return every trigger statement in ``tree`` in source order."""

    triggers: List[Trigger] = []
    for node in iter_nodes(tree.root_node):
        classified = _classify(node)
        if classified is None:
            continue
        kind, expression = classified
        triggers.append(Trigger(kind, convert_expression(expression), _site_for(node, source)))
    logger.debug("found %d trigger statement(s)", len(triggers))
    return triggers


__all__ = [
    "JS_LANGUAGE",
    "SourceParseError",
    "Trigger",
    "TRIGGER_CONDITIONAL",
    "TRIGGER_LOGICAL",
    "TRIGGER_RETURN",
    "make_parser",
    "parse_source",
    "parse_expression",
    "convert_expression",
    "unwrap_parentheses",
    "find_triggers",
    "iter_nodes",
]
