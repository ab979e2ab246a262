"""Errors raised while translating a pattern file; each aborts that file."""

from __future__ import annotations


class PeepholeError(Exception):
    """Base class for errors raised while translating one pattern file.

    The rule expander annotates errors with the rule being expanded and the
    concrete instruction bindings of the failing combination, so the message
    printed for the user points at the exact generated function.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
        self.rule: str = ""
        self.bindings: tuple[tuple[str, str], ...] = ()

    def add_context(
        self, rule: str = "", bindings: tuple[tuple[str, str], ...] = ()
    ) -> PeepholeError:
        """Attach rule/binding context unless an inner frame already did."""
        if rule and not self.rule:
            self.rule = rule
        if bindings and not self.bindings:
            self.bindings = bindings
        return self

    def __str__(self) -> str:
        parts = [self.message]
        if self.rule:
            parts.append(f"in rule '{self.rule}'")
        if self.bindings:
            fixed = ", ".join(f"{name}={instr}" for name, instr in self.bindings)
            parts.append(f"with {fixed}")
        return " ".join(parts)


class PatternSyntaxError(PeepholeError):
    """Raised when pattern source text does not match the grammar."""

    def __init__(self, message: str, line: int = 0, column: int = 0):
        location = f"line {line}, column {column}: " if line > 0 else ""
        super().__init__(f"{location}{message}")
        self.line = line
        self.column = column


class DuplicateDeclarationError(PeepholeError):
    def __init__(self, name: str):
        super().__init__(f"Redeclaration of instruction set '{name}'")
        self.name = name


class UndefinedVariableError(PeepholeError):
    def __init__(self, name: str, reason: str = "is not bound in the match pattern"):
        super().__init__(f"Variable '{name}' {reason}")
        self.name = name


class UnresolvedCaseError(PeepholeError):
    """Raised when a switch has no case for the instruction bound to its variable."""

    def __init__(self, variable: str, instruction: str):
        super().__init__(
            f"No case in switch on '{variable}' matches bound instruction '{instruction}'"
        )
        self.variable = variable
        self.instruction = instruction


class MalformedNodeError(PeepholeError):
    def __init__(self, kind: str, reason: str, line: int = 0):
        location = f" (line {line})" if line > 0 else ""
        super().__init__(f"Malformed {kind} node{location}: {reason}")
        self.kind = kind
