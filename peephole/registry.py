"""Per-file registry of generated matcher functions."""

from __future__ import annotations

from dataclasses import dataclass, field

from . import constants


@dataclass
class PatternRegistry:
    # generated function names, in generation order
    names: list[str] = field(default_factory=list)

    def register(self, name: str):
        self.names.append(name)

    def __len__(self) -> int:
        return len(self.names)

    def __iter__(self):
        return iter(self.names)

    def render_init(self, stem: str) -> str:
        """Emit ``init_patterns_<stem>()``, registering every name in order."""
        lines = [f"int {constants.INIT_FUNCTION_PREFIX}{stem}() {{"]
        lines.extend(
            f"{constants.INDENT}{constants.REGISTER_MACRO}({name});" for name in self.names
        )
        lines.append(f"{constants.INDENT}return {constants.SUCCESS};")
        lines.append("}")
        return "\n".join(lines) + "\n"
