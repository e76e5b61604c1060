from unternary.decision_tree import build_decision_tree
from unternary.equality import canonical_text, expressions_equal, find_equal
from unternary.js_ast import LogicalExpr
from unternary.js_frontend import parse_expression


def _tree(text: str, **kwargs):
    return build_decision_tree(parse_expression(text), **kwargs)


def test_ternary_chain_builds_both_branches() -> None:
    tree = _tree("a ? b() : c ? d() : e()")

    assert tree.condition.render() == "a"
    assert tree.true_branch.is_leaf
    assert tree.false_branch.condition.render() == "c"
    assert tree.depth() == 2
    assert [leaf.condition.render() for leaf in tree.leaves()] == ["b()", "d()", "e()"]


def test_logical_operators_become_single_branch_guards() -> None:
    conjunction = _tree("x && y()")
    assert conjunction.condition.render() == "x"
    assert conjunction.true_branch.condition.render() == "y()"
    assert conjunction.false_branch is None

    disjunction = _tree("x || y()")
    assert disjunction.true_branch is None
    assert disjunction.false_branch.condition.render() == "y()"


def test_nullish_guard_is_a_loose_null_check() -> None:
    tree = _tree("x.y ?? init()")
    assert tree.condition.render() == "x.y == null"
    assert tree.true_branch.condition.render() == "init()"
    assert tree.false_branch is None


def test_logical_chain_recurses_into_right_operand() -> None:
    tree = _tree("a && b && c()")
    # && is left associative: (a && b) && c()
    assert tree.condition.render() == "a && b"
    assert tree.true_branch.condition.render() == "c()"


def test_logical_operands_stay_whole_when_not_descending() -> None:
    tree = _tree("a ? x && y() : z", descend_logical=False)
    assert isinstance(tree.true_branch.condition, LogicalExpr)
    assert tree.true_branch.is_leaf
    assert tree.depth() == 1


def test_plain_expression_is_a_leaf() -> None:
    tree = _tree("f(x)")
    assert tree.is_leaf
    assert tree.depth() == 0


def test_structural_equality_ignores_parentheses() -> None:
    first = parse_expression("(a.b)")
    second = parse_expression("a.b")
    assert expressions_equal(first, second)
    assert canonical_text(first) == "a.b"
    assert not expressions_equal(parse_expression("a.b"), parse_expression("a['b']"))
    assert find_equal(second, [parse_expression("c"), first]) is first
    assert find_equal(second, [parse_expression("c")]) is None
