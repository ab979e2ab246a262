"""Alias declarations: alias name to the ordered instructions it stands for."""

from __future__ import annotations

import logging

from .errors import DuplicateDeclarationError
from .tree import Node, NodeKind

logger = logging.getLogger(__name__)

DeclarationMap = dict[str, tuple[str, ...]]


def build_declaration_map(tree: Node) -> DeclarationMap:
    """Collect the leading declarations of a pattern file.

    Scanning stops at the first top-level node that is not a declaration.
    Instruction order inside each set is preserved so that rule expansion
    enumerates combinations in a reproducible order.

    Raises:
        DuplicateDeclarationError: if an alias is declared twice.
    """
    declarations: DeclarationMap = {}
    for node in tree.children:
        if node.kind != NodeKind.DECLARATION:
            break
        name = node.child(0).text
        if name in declarations:
            raise DuplicateDeclarationError(name)
        declarations[name] = unique_instructions(node.child(1), name)
    logger.debug("Built declaration map with %d aliases", len(declarations))
    return declarations


def unique_instructions(instruction_set: Node, alias: str) -> tuple[str, ...]:
    """Return the instruction names of *instruction_set*, first occurrence wins."""
    names = [child.text for child in instruction_set.children]
    unique = tuple(dict.fromkeys(names))
    if len(unique) != len(names):
        logger.warning(
            "Instruction set '%s' lists %d duplicate instruction(s); ignoring repeats",
            alias,
            len(names) - len(unique),
        )
    return unique
