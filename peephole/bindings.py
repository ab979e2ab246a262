"""Resolves which match-side positions are bound to instruction sets."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from . import constants
from .declarations import DeclarationMap, unique_instructions
from .errors import MalformedNodeError
from .tree import Node, NodeKind, match_elements, rule_name

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Binding:
    display_name: str
    alias: str


@dataclass
class RuleBindings:
    bindings: list[Binding] = field(default_factory=list)
    # display names of every named match-side instruction, in order
    named_instructions: list[str] = field(default_factory=list)

    @property
    def display_names(self) -> list[str]:
        return [b.display_name for b in self.bindings]

    @property
    def aliases(self) -> list[str]:
        return [b.alias for b in self.bindings]

    def __len__(self) -> int:
        return len(self.bindings)


def _display_name(node: Node) -> str:
    """Name of the named/unnamed instruction enclosing *node*."""
    parent = node.parent
    if parent is not None and parent.kind == NodeKind.NAMED_INSTRUCTION:
        return parent.child(0).text
    return constants.UNNAMED_DISPLAY_NAME


def resolve_bindings(rule: Node, declarations: DeclarationMap) -> RuleBindings:
    """Walk the match side of *rule* and record its instruction-set bindings.

    Inline instruction sets are registered in *declarations* under fresh
    ``inlined_<n>`` aliases, so the caller must pass a per-rule copy.

    Raises:
        MalformedNodeError: if two match-side instructions share a name.
    """
    result = RuleBindings()
    inline_index = 1
    for element in match_elements(rule):
        if element.kind == NodeKind.NAMED_INSTRUCTION:
            name = element.child(0).text
            if name in result.named_instructions:
                raise MalformedNodeError(
                    rule.kind.value,
                    f"instruction name '{name}' is used more than once",
                    element.line,
                )
            result.named_instructions.append(name)
        for node in element.walk():
            if node.kind == NodeKind.INSTRUCTION:
                referenced = node.child(0).text
                if referenced in declarations:
                    result.bindings.append(Binding(_display_name(node), referenced))
            elif node.kind == NodeKind.INSTRUCTION_SET:
                alias = f"{constants.INLINE_ALIAS_PREFIX}{inline_index}"
                inline_index += 1
                declarations[alias] = unique_instructions(node, alias)
                result.bindings.append(Binding(_display_name(node), alias))
    logger.debug(
        "Rule '%s' binds %d instruction-set variable(s): %s",
        rule_name(rule),
        len(result),
        result.aliases,
    )
    return result
