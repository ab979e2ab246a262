"""Declaration emitter — cursor declarations and guard checks for a rule's match side."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from . import constants
from .declarations import DeclarationMap
from .errors import MalformedNodeError
from .tree import Node, NodeKind, match_elements


@dataclass(frozen=True)
class DeclarationTemplate:
    """Declaration text with one open slot per instruction-set binding.

    ``segments`` always holds one more entry than there are slots; slot *i*
    sits between ``segments[i]`` and ``segments[i + 1]``.
    """

    segments: tuple[str, ...] = ("",)

    @property
    def slot_count(self) -> int:
        return len(self.segments) - 1

    def render(self, fixed: Sequence[str]) -> str:
        if len(fixed) != self.slot_count:
            raise ValueError(
                f"Template has {self.slot_count} slots, got {len(fixed)} instructions"
            )
        parts = [self.segments[0]]
        for instruction, segment in zip(fixed, self.segments[1:]):
            parts.append(instruction)
            parts.append(segment)
        return "".join(parts)


@dataclass(frozen=True)
class MatchLayout:
    template: DeclarationTemplate
    replace_count: int
    final_cursor: str

    @property
    def post_match_cursor(self) -> str:
        """Stream position just after the matched span."""
        if self.final_cursor == constants.CURSOR_SENTINEL:
            return constants.CURSOR_SENTINEL
        return f"{constants.NEXT_FUNCTION}({self.final_cursor})"


@dataclass
class _TemplateBuilder:
    segments: list[str] = field(default_factory=lambda: [""])

    def text(self, chunk: str):
        self.segments[-1] += chunk

    def slot(self):
        self.segments.append("")

    def build(self) -> DeclarationTemplate:
        return DeclarationTemplate(tuple(self.segments))


class MatchEmitter:
    """Emits the match-side prologue of every function generated for one rule.

    Each matched instruction gets a ``CODE *`` cursor variable followed by an
    ``is_<opcode>`` guard; a failing guard makes the generated function
    return 0. Opcodes that depend on an instruction-set binding are left as
    template slots and filled per combination by the rule expander.
    """

    def __init__(self, rule: Node, declarations: DeclarationMap):
        self._rule = rule
        self._declarations = declarations
        self._out = _TemplateBuilder()
        self._cursor = constants.CURSOR_SENTINEL
        self._position = 0
        self._declared_arguments: set[str] = set()
        self._arguments = ""
        self._ind = constants.INDENT

    def emit(self) -> MatchLayout:
        for element in match_elements(self._rule):
            if element.kind == NodeKind.INSTRUCTION_COUNT:
                self._emit_end_check()
            else:
                self._emit_instruction(element)
        return MatchLayout(
            template=self._out.build(),
            replace_count=self._position,
            final_cursor=self._cursor,
        )

    # ── elements ─────────────────────────────────────────────────

    def _emit_instruction(self, element: Node):
        self._position += 1
        if element.kind == NodeKind.NAMED_INSTRUCTION:
            variable = constants.INSTRUCTION_PREFIX + element.child(0).text
            target, captures = element.child(1), element.children[2:]
        else:
            variable = f"{constants.INSTRUCTION_PREFIX}{self._position}"
            target, captures = element.child(0), element.children[1:]

        self._declare_cursor(variable)
        self._declare_arguments(captures)

        if target.kind == NodeKind.INSTRUCTION:
            instruction = target.child(0).text
            if instruction in self._declarations:
                self._emit_guard(None)
            else:
                self._emit_guard(instruction)
        elif target.kind == NodeKind.INSTRUCTION_SET:
            self._emit_guard(None)
        else:
            raise MalformedNodeError(
                element.kind.value,
                f"expected an instruction or instruction set, found {target.kind.value}",
                element.line,
            )

    def _declare_cursor(self, variable: str):
        if self._cursor == constants.CURSOR_SENTINEL:
            source = constants.CURSOR_SENTINEL
        else:
            source = f"{constants.NEXT_FUNCTION}({self._cursor})"
        self._out.text(f"{self._ind}CODE *{variable} = {source};\n")
        self._cursor = variable

    def _declare_arguments(self, captures: list[Node]):
        self._arguments = ""
        for capture in captures:
            if capture.kind != NodeKind.VARIABLE:
                raise MalformedNodeError(
                    capture.kind.value, "expected an argument capture", capture.line
                )
            local = constants.ARGUMENT_PREFIX + capture.text
            if local not in self._declared_arguments:
                self._declared_arguments.add(local)
                self._out.text(f"{self._ind}int {local};\n")
            self._arguments += f", &{local}"

    def _emit_guard(self, instruction: str | None):
        """Guard the current cursor; ``None`` leaves the opcode as a slot."""
        self._out.text(f"{self._ind}if (!{constants.GUARD_PREFIX}")
        if instruction is None:
            self._out.slot()
        else:
            self._out.text(instruction)
        self._out.text(f"({self._cursor}{self._arguments})) {{\n")
        self._emit_failure()

    def _emit_end_check(self):
        self._out.text(f"{self._ind}if ({self._cursor} == {constants.NULL}) {{\n")
        self._emit_failure()

    def _emit_failure(self):
        self._out.text(f"{self._ind}{constants.INDENT}return {constants.FAILURE};\n")
        self._out.text(f"{self._ind}}}\n")


def emit_match(rule: Node, declarations: DeclarationMap) -> MatchLayout:
    return MatchEmitter(rule, declarations).emit()
