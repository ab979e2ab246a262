"""Pattern-language parsing layer — lark grammar to pattern AST."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Callable

from lark import Lark, Token, Tree
from lark.exceptions import UnexpectedCharacters, UnexpectedInput, UnexpectedToken

from .errors import PatternSyntaxError
from .tree import Node, NodeKind

logger = logging.getLogger(__name__)

PATTERN_GRAMMAR = r"""
start: declaration* rule*

declaration: NAME "=" instruction_set ";"
instruction_set: "{" NAME ("|" NAME)* "}"

rule: "rule" NAME "{" _match_element* "}" "-->" "{" _statement* "}"

_match_element: named_instruction
              | unnamed_instruction
              | instruction_count
named_instruction: NAME ":" _target argument* ";"
unnamed_instruction: _target argument* ";"
_target: instruction | instruction_set
instruction: NAME
argument: NAME
instruction_count: "!" "end" ";"

_statement: instruction_statement
          | switch_statement
          | compound_statement
instruction_statement: NAME (sum ("," sum)*)? ";"
switch_statement: "switch" NAME "{" case_clause* "}"
case_clause: "case" NAME ":" (instruction_statement | switch_statement)
compound_statement: if_clause ("else" if_clause)* else_clause?
if_clause: "if" "(" condition ")" "{" _statement* "}"
else_clause: "else" "{" _statement* "}"

?condition: or_condition
?or_condition: and_condition ("||" and_condition)*
?and_condition: comparison ("&&" comparison)*
?comparison: sum (COMPARE_OP sum)?
?sum: product (ADD_OP product)*
?product: atom (MUL_OP atom)*
?atom: INT -> int_literal
     | NAME -> variable_reference
     | "(" condition ")"

COMPARE_OP: "==" | "!=" | "<=" | ">=" | "<" | ">"
ADD_OP: "+" | "-"
MUL_OP: "*" | "/" | "%"

COMMENT: /\/\/[^\n]*/

%import common.CNAME -> NAME
%import common.INT
%import common.WS
%ignore WS
%ignore COMMENT
"""

_OPERATOR_KINDS: dict[str, NodeKind] = {
    "+": NodeKind.EXPRESSION_ADD,
    "-": NodeKind.EXPRESSION_SUBTRACT,
    "*": NodeKind.EXPRESSION_MULTIPLY,
    "/": NodeKind.EXPRESSION_DIVIDE,
    "%": NodeKind.EXPRESSION_REMAINDER,
    "==": NodeKind.CONDITION_EQUAL,
    "!=": NodeKind.CONDITION_NEQUAL,
    "<": NodeKind.CONDITION_LT,
    ">": NodeKind.CONDITION_GT,
    "<=": NodeKind.CONDITION_LE,
    ">=": NodeKind.CONDITION_GE,
}


_MATCH_RULES: frozenset[str] = frozenset(
    {"named_instruction", "unnamed_instruction", "instruction_count"}
)


class ParserFactory(ABC):
    """Abstract factory for obtaining a pattern-language parser."""

    @abstractmethod
    def get_parser(self): ...


class LarkParserFactory(ParserFactory):
    """Concrete factory that builds (once) the LALR parser for the grammar."""

    def get_parser(self) -> Lark:
        return _lalr_parser()


@lru_cache(maxsize=1)
def _lalr_parser() -> Lark:
    return Lark(PATTERN_GRAMMAR, parser="lalr", propagate_positions=True)


class Parser:
    """Thin wrapper that parses pattern source and builds the pattern AST."""

    def __init__(self, parser_factory: ParserFactory | None = None):
        self._factory = parser_factory or LarkParserFactory()

    def parse(self, source: str) -> Node:
        parser = self._factory.get_parser()
        try:
            parse_tree = parser.parse(source)
        except UnexpectedInput as exc:
            raise PatternSyntaxError(
                _describe(exc), getattr(exc, "line", 0), getattr(exc, "column", 0)
            ) from exc
        tree = _TreeBuilder().build(parse_tree)
        logger.debug(
            "Parsed %d top-level nodes from %d chars", len(tree.children), len(source)
        )
        return tree


def parse_patterns(source: str) -> Node:
    """Parse pattern-language *source* into a START node."""
    return Parser().parse(source)


def _describe(exc: UnexpectedInput) -> str:
    if isinstance(exc, UnexpectedCharacters):
        return f"unexpected character {exc.char!r}"
    if isinstance(exc, UnexpectedToken) and exc.token.type != "$END":
        return f"unexpected '{exc.token}'"
    return "unexpected end of input"


def _line(item) -> int:
    if isinstance(item, Token):
        return item.line or 0
    return getattr(item.meta, "line", 0)


class _TreeBuilder:
    """Converts a lark parse tree into pattern AST nodes.

    Replacement statements that are a bare name with no arguments become
    reuse statements when the name labels a match-side instruction of the
    same rule; otherwise they construct a zero-operand instruction.
    """

    def __init__(self):
        self._named: frozenset[str] = frozenset()
        self._DISPATCH: dict[str, Callable[[Tree], Node]] = {
            "declaration": self._declaration,
            "instruction_set": self._instruction_set,
            "rule": self._rule,
            "named_instruction": self._named_instruction,
            "unnamed_instruction": self._unnamed_instruction,
            "instruction": self._instruction,
            "argument": self._argument,
            "instruction_count": self._instruction_count,
            "instruction_statement": self._instruction_statement,
            "switch_statement": self._switch_statement,
            "case_clause": self._case_clause,
            "compound_statement": self._compound_statement,
            "if_clause": self._if_clause,
            "else_clause": self._else_clause,
            "or_condition": self._logical(NodeKind.CONDITION_OR),
            "and_condition": self._logical(NodeKind.CONDITION_AND),
            "comparison": self._binary_chain,
            "sum": self._binary_chain,
            "product": self._binary_chain,
            "int_literal": self._int_literal,
            "variable_reference": self._variable_reference,
        }

    def build(self, parse_tree: Tree) -> Node:
        start = Node(NodeKind.START, text="start", line=_line(parse_tree))
        for child in parse_tree.children:
            start.add(self._convert(child))
        return start

    def _convert(self, item: Tree) -> Node:
        return self._DISPATCH[item.data](item)

    def _name(self, token: Token) -> Node:
        return Node(NodeKind.NAME, text=str(token), line=_line(token))

    # ── declarations ─────────────────────────────────────────────

    def _declaration(self, item: Tree) -> Node:
        name, instruction_set = item.children
        return Node(
            NodeKind.DECLARATION,
            text="declaration",
            children=[self._name(name), self._convert(instruction_set)],
            line=_line(item),
        )

    def _instruction_set(self, item: Tree) -> Node:
        return Node(
            NodeKind.INSTRUCTION_SET,
            text="instruction_set",
            children=[self._name(token) for token in item.children],
            line=_line(item),
        )

    # ── rules and match side ─────────────────────────────────────

    def _rule(self, item: Tree) -> Node:
        name_token, *body = item.children
        matches = [child for child in body if child.data in _MATCH_RULES]
        statements = [child for child in body if child.data not in _MATCH_RULES]
        self._named = frozenset(
            str(child.children[0])
            for child in matches
            if child.data == "named_instruction"
        )
        rule = Node(
            NodeKind.RULE, text=str(name_token), line=_line(item)
        )
        rule.add(self._name(name_token))
        for child in matches + statements:
            rule.add(self._convert(child))
        self._named = frozenset()
        return rule

    def _named_instruction(self, item: Tree) -> Node:
        name, target, *arguments = item.children
        return Node(
            NodeKind.NAMED_INSTRUCTION,
            text=str(name),
            children=[self._name(name), self._convert(target)]
            + [self._convert(arg) for arg in arguments],
            line=_line(item),
        )

    def _unnamed_instruction(self, item: Tree) -> Node:
        return Node(
            NodeKind.UNNAMED_INSTRUCTION,
            text="unnamed",
            children=[self._convert(child) for child in item.children],
            line=_line(item),
        )

    def _instruction(self, item: Tree) -> Node:
        (name,) = item.children
        return Node(
            NodeKind.INSTRUCTION,
            text="instruction",
            children=[self._name(name)],
            line=_line(item),
        )

    def _argument(self, item: Tree) -> Node:
        (name,) = item.children
        return Node(NodeKind.VARIABLE, text=str(name), line=_line(name))

    def _instruction_count(self, item: Tree) -> Node:
        return Node(NodeKind.INSTRUCTION_COUNT, text="end", line=_line(item))

    # ── replacement side ─────────────────────────────────────────

    def _instruction_statement(self, item: Tree) -> Node:
        name, *arguments = item.children
        if not arguments and str(name) in self._named:
            return Node(
                NodeKind.STATEMENT_VARIABLE,
                text=str(name),
                children=[self._name(name)],
                line=_line(item),
            )
        return Node(
            NodeKind.STATEMENT_INSTRUCTION,
            text=str(name),
            children=[self._name(name)] + [self._convert(arg) for arg in arguments],
            line=_line(item),
        )

    def _switch_statement(self, item: Tree) -> Node:
        variable, *cases = item.children
        return Node(
            NodeKind.STATEMENT_SWITCH,
            text="switch",
            children=[self._name(variable)] + [self._convert(c) for c in cases],
            line=_line(item),
        )

    def _case_clause(self, item: Tree) -> Node:
        label, body = item.children
        return Node(
            NodeKind.STATEMENT_CASE,
            text="case",
            children=[self._name(label), self._convert(body)],
            line=_line(item),
        )

    def _compound_statement(self, item: Tree) -> Node:
        return Node(
            NodeKind.STATEMENT_COMPOUND,
            text="compound",
            children=[self._convert(clause) for clause in item.children],
            line=_line(item),
        )

    def _if_clause(self, item: Tree) -> Node:
        return Node(
            NodeKind.STATEMENT_IF,
            text="if",
            children=[self._convert(child) for child in item.children],
            line=_line(item),
        )

    def _else_clause(self, item: Tree) -> Node:
        return Node(
            NodeKind.STATEMENT_ELSE,
            text="else",
            children=[self._convert(child) for child in item.children],
            line=_line(item),
        )

    # ── expressions ──────────────────────────────────────────────

    def _logical(self, kind: NodeKind) -> Callable[[Tree], Node]:
        def convert(item: Tree) -> Node:
            return Node(
                kind,
                text=kind.value,
                children=[self._convert(child) for child in item.children],
                line=_line(item),
            )

        return convert

    def _binary_chain(self, item: Tree) -> Node:
        """Fold ``a OP b OP c`` left to right.

        Consecutive uses of the same operator collapse into one n-ary node;
        operands that came from parentheses are never flattened.
        """
        first, *rest = item.children
        result = self._convert(first)
        built = False
        for operator, operand in zip(rest[::2], rest[1::2]):
            kind = _OPERATOR_KINDS[str(operator)]
            right = self._convert(operand)
            if built and result.kind == kind:
                result.add(right)
            else:
                result = Node(
                    kind, text=kind.value, children=[result, right], line=_line(item)
                )
                built = True
        return result

    def _int_literal(self, item: Tree) -> Node:
        (token,) = item.children
        return Node(NodeKind.INT, text=str(token), line=_line(token))

    def _variable_reference(self, item: Tree) -> Node:
        (token,) = item.children
        return Node(NodeKind.VARIABLE, text=str(token), line=_line(token))
