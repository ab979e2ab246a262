"""Statement emitter — replacement-side list construction for one binding combination."""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from typing import Sequence

from . import constants
from .bindings import RuleBindings
from .errors import MalformedNodeError, UndefinedVariableError, UnresolvedCaseError
from .expressions import render_expression
from .tree import Node, NodeKind

logger = logging.getLogger(__name__)


@dataclass
class _Chain:
    """Head and tail of the replacement list built so far on one code path."""

    head: str = ""
    tail: str = ""


class StatementEmitter:
    """Emits the replacement list and the final splice of one generated function.

    Every statement produces one ``CODE *statement_<k>`` node linked to the
    previous one. Switches are resolved here, against the concrete
    instruction fixed for the switched-on variable, so the generated C never
    branches on instruction kind. Conditionals become ``if``/``else if``
    chains whose branches each finish the list and splice it in.
    """

    def __init__(
        self,
        statements: Sequence[Node],
        replace_count: int,
        post_match_cursor: str,
        bindings: RuleBindings,
        fixed: Sequence[str],
    ):
        self._statements = list(statements)
        self._replace_count = replace_count
        self._post_match_cursor = post_match_cursor
        self._bindings = bindings
        self._fixed = tuple(fixed)
        self._counter = 0
        self._lines: list[str] = []

    def emit(self) -> str:
        self._counter = 0
        self._lines = []
        self._emit_sequence(self._statements, _Chain(), 1)
        return "\n".join(self._lines) + "\n"

    # ── helpers ──────────────────────────────────────────────────

    def _line(self, depth: int, text: str):
        self._lines.append(constants.INDENT * depth + text)

    def _fresh_statement(self) -> str:
        self._counter += 1
        return f"{constants.STATEMENT_PREFIX}{self._counter}"

    def _bound_instruction(self, variable: str) -> str:
        names = self._bindings.display_names
        if variable not in names:
            if variable in self._bindings.named_instructions:
                raise UndefinedVariableError(
                    variable, "is not bound to an instruction set"
                )
            raise UndefinedVariableError(variable)
        positions = names.count(variable)
        if positions > 1:
            raise UndefinedVariableError(
                variable, f"is ambiguous: {positions} instruction-set positions share it"
            )
        return self._fixed[names.index(variable)]

    # ── sequences ────────────────────────────────────────────────

    def _emit_sequence(self, statements: list[Node], chain: _Chain, depth: int):
        for index, statement in enumerate(statements):
            if statement.kind == NodeKind.STATEMENT_COMPOUND:
                if index != len(statements) - 1:
                    raise MalformedNodeError(
                        statement.kind.value,
                        "statements after a conditional are unreachable",
                        statement.line,
                    )
                self._emit_compound(statement, chain, depth)
                return
            name = self._emit_node(statement, depth)
            self._link(chain, name, depth)
        self._emit_splice(chain, depth)

    def _link(self, chain: _Chain, name: str, depth: int):
        if chain.tail:
            self._line(depth, f"{chain.tail}->next = {name};")
        else:
            chain.head = name
        chain.tail = name

    def _emit_splice(self, chain: _Chain, depth: int):
        if chain.tail:
            self._line(depth, f"{chain.tail}->next = {self._post_match_cursor};")
        head = chain.head or constants.NULL
        self._line(
            depth,
            f"return {constants.SPLICE_FUNCTION}(c, {self._replace_count}, {head});",
        )

    # ── single statements ────────────────────────────────────────

    def _emit_node(self, statement: Node, depth: int) -> str:
        if statement.kind == NodeKind.STATEMENT_INSTRUCTION:
            return self._emit_construct(statement, depth)
        if statement.kind == NodeKind.STATEMENT_VARIABLE:
            return self._emit_reuse(statement, depth)
        if statement.kind == NodeKind.STATEMENT_SWITCH:
            return self._emit_node(self._resolve_switch(statement), depth)
        raise MalformedNodeError(
            statement.kind.value, "not a replacement statement", statement.line
        )

    def _emit_construct(self, statement: Node, depth: int) -> str:
        opcode = statement.child(0).text
        arguments = "".join(
            render_expression(arg) + ", " for arg in statement.children[1:]
        )
        name = self._fresh_statement()
        self._line(
            depth,
            f"CODE *{name} = {constants.CONSTRUCTOR_PREFIX}{opcode}"
            f"({arguments}{constants.NULL});",
        )
        return name

    def _emit_reuse(self, statement: Node, depth: int) -> str:
        target = statement.child(0).text
        if target not in self._bindings.named_instructions:
            raise UndefinedVariableError(target, "does not name a matched instruction")
        name = self._fresh_statement()
        self._line(
            depth,
            f"CODE *{name} = {constants.COPY_FUNCTION}"
            f"({constants.INSTRUCTION_PREFIX}{target});",
        )
        return name

    def _resolve_switch(self, switch: Node) -> Node:
        """Pick the case body for the instruction bound to the switch variable."""
        variable = switch.child(0).text
        cases = switch.children[1:]
        if not cases:
            raise MalformedNodeError(switch.kind.value, "switch has no cases", switch.line)
        instruction = self._bound_instruction(variable)
        for case in cases:
            if case.kind != NodeKind.STATEMENT_CASE:
                raise MalformedNodeError(
                    switch.kind.value,
                    f"expected a case clause, found {case.kind.value}",
                    case.line,
                )
            if case.child(0).text == instruction:
                logger.debug("switch %s resolved to case %s", variable, instruction)
                return case.child(1)
        raise UnresolvedCaseError(variable, instruction)

    # ── conditionals ─────────────────────────────────────────────

    def _emit_compound(self, compound: Node, chain: _Chain, depth: int):
        clauses = compound.children
        if not clauses or clauses[0].kind != NodeKind.STATEMENT_IF:
            raise MalformedNodeError(
                compound.kind.value, "must start with an if clause", compound.line
            )
        has_else = False
        for index, clause in enumerate(clauses):
            if clause.kind == NodeKind.STATEMENT_IF:
                condition = render_expression(clause.child(0))
                opener = "if" if index == 0 else "} else if"
                self._line(depth, f"{opener} ({condition}) {{")
                body = clause.children[1:]
            elif clause.kind == NodeKind.STATEMENT_ELSE and index == len(clauses) - 1:
                self._line(depth, "} else {")
                body = clause.children
                has_else = True
            else:
                raise MalformedNodeError(
                    compound.kind.value,
                    f"unexpected {clause.kind.value} clause at position {index}",
                    clause.line,
                )
            self._emit_sequence(body, dataclasses.replace(chain), depth + 1)
        if not has_else:
            self._line(depth, "} else {")
            self._line(depth + 1, f"return {constants.FAILURE};")
        self._line(depth, "}")


def emit_statements(
    statements: Sequence[Node],
    replace_count: int,
    post_match_cursor: str,
    bindings: RuleBindings,
    fixed: Sequence[str],
) -> str:
    return StatementEmitter(
        statements, replace_count, post_match_cursor, bindings, fixed
    ).emit()
