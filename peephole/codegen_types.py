"""Generated-code data types (pure data, no business logic)."""

from __future__ import annotations

from pydantic import BaseModel


class GeneratedFunction(BaseModel):
    """One fully specialised matcher function."""

    name: str
    declarations: str
    statements: str

    def render(self) -> str:
        return (
            f"int {self.name}(CODE **c) {{\n"
            f"{self.declarations}\n"
            f"{self.statements}"
            "}\n\n\n"
        )


class TranslationResult(BaseModel):
    """Generated functions and registration code for one pattern file."""

    stem: str
    code: str
    function_names: list[str] = []

    def __str__(self) -> str:
        return self.code
