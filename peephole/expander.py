"""Rule expansion into one specialised function per instruction-set combination."""

from __future__ import annotations

import logging

from . import constants
from .bindings import RuleBindings, resolve_bindings
from .codegen_types import GeneratedFunction
from .declarations import DeclarationMap
from .errors import MalformedNodeError, PeepholeError
from .match_emitter import MatchLayout, emit_match
from .registry import PatternRegistry
from .statement_emitter import emit_statements
from .tree import Node, replacement_statements, rule_name

logger = logging.getLogger(__name__)


def function_name(rule: str, fixed: tuple[str, ...]) -> str:
    return constants.FUNCTION_NAME_SEPARATOR.join((rule, *fixed))


class RuleExpander:
    """Expands one rule into every concrete matcher it stands for.

    The declaration map must be a per-rule copy: resolving the rule's
    bindings adds its inline instruction sets to it.
    """

    def __init__(self, rule: Node, declarations: DeclarationMap, registry: PatternRegistry):
        self._rule = rule
        self._name = rule_name(rule)
        self._declarations = declarations
        self._registry = registry
        self._bindings = RuleBindings()
        self._layout: MatchLayout | None = None
        self._statements: list[Node] = []
        self._code: list[str] = []

    def expand(self) -> str:
        try:
            self._bindings = resolve_bindings(self._rule, self._declarations)
            self._layout = emit_match(self._rule, self._declarations)
            if self._layout.template.slot_count != len(self._bindings):
                raise MalformedNodeError(
                    self._rule.kind.value,
                    f"{self._layout.template.slot_count} guard slots for "
                    f"{len(self._bindings)} bindings",
                    self._rule.line,
                )
        except PeepholeError as exc:
            exc.add_context(rule=self._name)
            raise
        self._statements = replacement_statements(self._rule)
        self._code = []
        before = len(self._registry)
        self._set_variables([""] * len(self._bindings), 0)
        logger.debug(
            "Rule '%s' expanded into %d function(s)",
            self._name,
            len(self._registry) - before,
        )
        return "".join(self._code)

    def _set_variables(self, fixed: list[str], index: int):
        """Fix position *index* to each candidate in turn and recurse rightwards.

        *fixed* is overwritten in place; leaves work from a tuple snapshot.
        """
        if index == len(self._bindings):
            self._emit_leaf(tuple(fixed))
            return
        for instruction in self._declarations[self._bindings.aliases[index]]:
            fixed[index] = instruction
            self._set_variables(fixed, index + 1)

    def _emit_leaf(self, fixed: tuple[str, ...]):
        layout = self._layout
        try:
            function = GeneratedFunction(
                name=function_name(self._name, fixed),
                declarations=layout.template.render(fixed),
                statements=emit_statements(
                    self._statements,
                    layout.replace_count,
                    layout.post_match_cursor,
                    self._bindings,
                    fixed,
                ),
            )
        except PeepholeError as exc:
            exc.add_context(
                rule=self._name,
                bindings=tuple(zip(self._bindings.display_names, fixed)),
            )
            raise
        self._code.append(function.render())
        self._registry.register(function.name)


def expand_rule(rule: Node, declarations: DeclarationMap, registry: PatternRegistry) -> str:
    return RuleExpander(rule, declarations, registry).expand()
