"""Named constants — eliminates magic strings across the generator."""

from __future__ import annotations

# ── generated C identifiers ─────────────────────────────────────

CURSOR_SENTINEL = "*c"
INSTRUCTION_PREFIX = "instr_"
ARGUMENT_PREFIX = "arg_"
STATEMENT_PREFIX = "statement_"
GUARD_PREFIX = "is_"
CONSTRUCTOR_PREFIX = "makeCODE"
COPY_FUNCTION = "copy"
NEXT_FUNCTION = "next"
SPLICE_FUNCTION = "replace"
REGISTER_MACRO = "ADD_PATTERN"
INIT_FUNCTION_PREFIX = "init_patterns_"
NULL = "NULL"
FAILURE = "0"
SUCCESS = "1"

INDENT = "  "

# ── bindings ─────────────────────────────────────────────────────

UNNAMED_DISPLAY_NAME = "unnamed"
INLINE_ALIAS_PREFIX = "inlined_"
FUNCTION_NAME_SEPARATOR = "_"

# ── files ────────────────────────────────────────────────────────

PATTERN_EXTENSIONS: tuple[str, ...] = (".peep", ".peephole", ".pattern", ".patterns")
OUTPUT_SUFFIX = ".gen.h"
HELPERS_FILENAME = "peephole_helpers.h"
