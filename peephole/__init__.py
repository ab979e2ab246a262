"""Peephole pattern compiler package."""

from .api import (  # noqa: F401
    translate_source,
    generate_source,
    dump_ast,
    expansion_stats,
)
from .errors import (  # noqa: F401
    PeepholeError,
    PatternSyntaxError,
    DuplicateDeclarationError,
    UndefinedVariableError,
    UnresolvedCaseError,
    MalformedNodeError,
)
