"""Pure functions for predicting how far rules expand."""

from __future__ import annotations

from math import prod

from .bindings import resolve_bindings
from .declarations import build_declaration_map
from .tree import Node, rule_name, rules_of


def count_expansions(tree: Node) -> dict[str, int]:
    """Return how many functions each rule of *tree* will generate.

    Args:
        tree: A parsed pattern file (START node).

    Returns:
        A dict mapping rule names to the product of their bound instruction
        set sizes. A rule without instruction-set variables counts as 1.
        Empty dict for a file without rules.
    """
    declarations = build_declaration_map(tree)
    counts: dict[str, int] = {}
    for rule in rules_of(tree):
        local = dict(declarations)
        bindings = resolve_bindings(rule, local)
        counts[rule_name(rule)] = prod(len(local[alias]) for alias in bindings.aliases)
    return counts
