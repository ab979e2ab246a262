"""Pattern AST — tagged nodes with ordered children and a parent back-reference.

Every non-terminal's meaning is fixed by its kind and the position of its
children:

  DECLARATION          NAME, INSTRUCTION_SET
  INSTRUCTION_SET      NAME+
  RULE                 NAME, match elements*, statements*
  NAMED_INSTRUCTION    NAME, INSTRUCTION | INSTRUCTION_SET, VARIABLE*
  UNNAMED_INSTRUCTION  INSTRUCTION | INSTRUCTION_SET, VARIABLE*
  INSTRUCTION          NAME
  STATEMENT_INSTRUCTION  NAME, expression*
  STATEMENT_VARIABLE   NAME
  STATEMENT_SWITCH     NAME, STATEMENT_CASE*
  STATEMENT_CASE       NAME, statement
  STATEMENT_COMPOUND   STATEMENT_IF+, STATEMENT_ELSE?
  STATEMENT_IF         condition, statement*
  STATEMENT_ELSE       statement*
  operators            operand, operand+
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .errors import MalformedNodeError


class NodeKind(str, Enum):
    START = "START"
    DECLARATION = "DECLARATION"
    INSTRUCTION_SET = "INSTRUCTION_SET"
    RULE = "RULE"
    # Match side
    NAMED_INSTRUCTION = "NAMED_INSTRUCTION"
    UNNAMED_INSTRUCTION = "UNNAMED_INSTRUCTION"
    INSTRUCTION = "INSTRUCTION"
    INSTRUCTION_COUNT = "INSTRUCTION_COUNT"
    # Replacement side
    STATEMENT_INSTRUCTION = "STATEMENT_INSTRUCTION"
    STATEMENT_VARIABLE = "STATEMENT_VARIABLE"
    STATEMENT_SWITCH = "STATEMENT_SWITCH"
    STATEMENT_CASE = "STATEMENT_CASE"
    STATEMENT_COMPOUND = "STATEMENT_COMPOUND"
    STATEMENT_IF = "STATEMENT_IF"
    STATEMENT_ELSE = "STATEMENT_ELSE"
    # Arithmetic
    EXPRESSION_ADD = "EXPRESSION_ADD"
    EXPRESSION_SUBTRACT = "EXPRESSION_SUBTRACT"
    EXPRESSION_MULTIPLY = "EXPRESSION_MULTIPLY"
    EXPRESSION_DIVIDE = "EXPRESSION_DIVIDE"
    EXPRESSION_REMAINDER = "EXPRESSION_REMAINDER"
    # Conditions
    CONDITION_EQUAL = "CONDITION_EQUAL"
    CONDITION_NEQUAL = "CONDITION_NEQUAL"
    CONDITION_AND = "CONDITION_AND"
    CONDITION_OR = "CONDITION_OR"
    CONDITION_LT = "CONDITION_LT"
    CONDITION_GT = "CONDITION_GT"
    CONDITION_LE = "CONDITION_LE"
    CONDITION_GE = "CONDITION_GE"
    # Terminals
    INT = "INT"
    VARIABLE = "VARIABLE"
    NAME = "NAME"


MATCH_KINDS: frozenset[NodeKind] = frozenset(
    {
        NodeKind.NAMED_INSTRUCTION,
        NodeKind.UNNAMED_INSTRUCTION,
        NodeKind.INSTRUCTION_COUNT,
    }
)

TERMINAL_KINDS: frozenset[NodeKind] = frozenset(
    {NodeKind.INT, NodeKind.VARIABLE, NodeKind.NAME}
)


@dataclass(eq=False)
class Node:
    kind: NodeKind
    text: str = ""
    children: list[Node] = field(default_factory=list)
    parent: Node | None = field(default=None, repr=False)
    line: int = 0

    def __post_init__(self):
        for child in self.children:
            child.parent = self

    def add(self, child: Node) -> Node:
        child.parent = self
        self.children.append(child)
        return child

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def child(self, index: int) -> Node:
        """Return the child at *index*, or raise if the node is too short."""
        if index >= len(self.children):
            raise MalformedNodeError(
                self.kind.value,
                f"expected a child at position {index}, found {len(self.children)}",
                self.line,
            )
        return self.children[index]

    def walk(self):
        """Yield this node and its descendants, depth first, parents first."""
        yield self
        for child in self.children:
            yield from child.walk()


# ── rule accessors ───────────────────────────────────────────────


def rule_name(rule: Node) -> str:
    return rule.child(0).text


def match_elements(rule: Node) -> list[Node]:
    return [child for child in rule.children[1:] if child.kind in MATCH_KINDS]


def replacement_statements(rule: Node) -> list[Node]:
    return [child for child in rule.children[1:] if child.kind not in MATCH_KINDS]


def rules_of(tree: Node) -> list[Node]:
    return [child for child in tree.children if child.kind == NodeKind.RULE]


# ── printing ─────────────────────────────────────────────────────


def format_tree(tree: Node) -> str:
    """Render *tree* one node per line, indented two spaces per level.

    Inner nodes print as ``TEXT  :(KIND)``; leaves print their bare text.
    """
    lines: list[str] = []

    def _visit(node: Node, depth: int):
        pad = "  " * depth
        if node.is_leaf and node.kind in TERMINAL_KINDS:
            lines.append(f"{pad}{node.text}")
            return
        lines.append(f"{pad}{node.text}  :({node.kind.value})")
        for child in node.children:
            _visit(child, depth + 1)

    _visit(tree, 0)
    return "\n".join(lines)
