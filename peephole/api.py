"""Composable API functions for the pattern generator pipelines.

Each function corresponds to a CLI workflow (generation, ``-p``, ``--stats``)
but is callable programmatically without argparse or files.
"""

from __future__ import annotations

import logging

from .codegen_types import TranslationResult
from .generator import render_file, translate_tree
from .parser import parse_patterns
from .preamble import load_preamble
from .stats import count_expansions
from .tree import format_tree

logger = logging.getLogger(__name__)


def translate_source(source: str, stem: str = "patterns") -> TranslationResult:
    """Parse pattern source and translate it, without the helper preamble.

    Args:
        source: Pattern-language text.
        stem: Name used for the ``init_patterns_<stem>`` function.

    Returns:
        A TranslationResult with the generated code and function names.
    """
    logger.info("Translating pattern source (%d chars)", len(source))
    return translate_tree(parse_patterns(source), stem)


def generate_source(source: str, stem: str = "patterns", preamble: str | None = None) -> str:
    """Return the full generated file for *source*, helper preamble included.

    Args:
        source: Pattern-language text.
        stem: Name used for the ``init_patterns_<stem>`` function.
        preamble: Helper text to prepend; the packaged helpers when omitted.
    """
    helpers = load_preamble() if preamble is None else preamble
    return render_file(translate_source(source, stem), helpers)


def dump_ast(source: str) -> str:
    """Parse pattern source and return its indented AST listing."""
    return format_tree(parse_patterns(source))


def expansion_stats(source: str) -> dict[str, int]:
    """Parse pattern source and return per-rule function counts."""
    return count_expansions(parse_patterns(source))
