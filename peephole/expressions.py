"""Arithmetic and condition trees rendered as fully parenthesised C."""

from __future__ import annotations

from . import constants
from .errors import MalformedNodeError
from .tree import Node, NodeKind

OPERATORS: dict[NodeKind, str] = {
    NodeKind.EXPRESSION_ADD: "+",
    NodeKind.EXPRESSION_SUBTRACT: "-",
    NodeKind.EXPRESSION_MULTIPLY: "*",
    NodeKind.EXPRESSION_DIVIDE: "/",
    NodeKind.EXPRESSION_REMAINDER: "%",
    NodeKind.CONDITION_EQUAL: "==",
    NodeKind.CONDITION_NEQUAL: "!=",
    NodeKind.CONDITION_AND: "&&",
    NodeKind.CONDITION_OR: "||",
    NodeKind.CONDITION_LT: "<",
    NodeKind.CONDITION_GT: ">",
    NodeKind.CONDITION_LE: "<=",
    NodeKind.CONDITION_GE: ">=",
}


def render_expression(node: Node) -> str:
    """Render an arithmetic or boolean subtree.

    Integer literals render as-is and variable references as the captured
    argument's local name. Operator nodes join all of their operands, so a
    chain ``a + b + c`` stored as one node renders as ``(a + b + c)``.
    """
    if node.kind == NodeKind.INT:
        return node.text
    if node.kind == NodeKind.VARIABLE:
        return constants.ARGUMENT_PREFIX + node.text
    operator = OPERATORS.get(node.kind)
    if operator is None:
        raise MalformedNodeError(node.kind.value, "not an expression", node.line)
    if len(node.children) < 2:
        raise MalformedNodeError(
            node.kind.value,
            f"operator needs at least two operands, found {len(node.children)}",
            node.line,
        )
    return "(" + f" {operator} ".join(render_expression(c) for c in node.children) + ")"
