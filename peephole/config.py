"""Generator configuration (pure data)."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from . import constants


@dataclass(frozen=True)
class GeneratorConfig:
    """Groups file-generation settings chosen on the command line."""

    use_stdout: bool = False
    helpers_path: Path | None = None
    output_suffix: str = constants.OUTPUT_SUFFIX
    extensions: tuple[str, ...] = constants.PATTERN_EXTENSIONS
