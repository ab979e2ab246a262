"""File driver — translate whole pattern files and write the generated C."""

from __future__ import annotations

import logging
import re
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from .codegen_types import TranslationResult
from .config import GeneratorConfig
from .declarations import build_declaration_map
from .errors import PeepholeError
from .expander import expand_rule
from .parser import parse_patterns
from .preamble import load_preamble
from .registry import PatternRegistry
from .tree import Node, rules_of

logger = logging.getLogger(__name__)

_NON_IDENTIFIER = re.compile(r"[^A-Za-z0-9_]")


# ── naming ───────────────────────────────────────────────────────


def file_stem(path: str | Path) -> str:
    """Base name up to the first dot, usable inside a C identifier."""
    base = Path(path).name.split(".", 1)[0]
    return _NON_IDENTIFIER.sub("_", base) or "patterns"


def output_path(path: str | Path, config: GeneratorConfig = GeneratorConfig()) -> Path:
    """``dir/foo.patterns`` → ``dir/foo.gen.h``, next to the input file."""
    source = Path(path)
    name = source.name
    for extension in config.extensions:
        if name.endswith(extension):
            name = name[: -len(extension)]
            break
    return source.with_name(name + config.output_suffix)


def expand_paths(arguments: Iterable[str], config: GeneratorConfig = GeneratorConfig()) -> list[Path]:
    """Expand directory arguments to the pattern files beneath them."""
    paths: list[Path] = []
    for argument in arguments:
        candidate = Path(argument or ".")
        if candidate.is_dir():
            found = sorted(
                p
                for p in candidate.rglob("*")
                if p.is_file() and p.name.endswith(config.extensions)
            )
            logger.info("Found %d pattern file(s) under %s", len(found), candidate)
            paths.extend(found)
        else:
            paths.append(candidate)
    return paths


# ── translation ──────────────────────────────────────────────────


def translate_tree(tree: Node, stem: str) -> TranslationResult:
    """Translate one parsed pattern file.

    The declaration map is built once and copied for every rule, since rules
    register their inline instruction sets in it.
    """
    registry = PatternRegistry()
    declarations = build_declaration_map(tree)
    chunks: list[str] = []
    for rule in rules_of(tree):
        chunks.append(expand_rule(rule, dict(declarations), registry))
    chunks.append(registry.render_init(stem))
    logger.info(
        "Translated '%s': %d rule(s), %d function(s)",
        stem,
        len(rules_of(tree)),
        len(registry),
    )
    return TranslationResult(
        stem=stem, code="".join(chunks), function_names=list(registry)
    )


def render_file(result: TranslationResult, preamble: str) -> str:
    return preamble + result.code


# ── files ────────────────────────────────────────────────────────


@dataclass
class FileOutcome:
    path: Path
    output: Path | None = None
    function_count: int = 0
    error: str = ""

    @property
    def ok(self) -> bool:
        return not self.error


class PatternFileGenerator:
    """Translates a batch of pattern files, one independent unit per file.

    A file that fails to translate produces no output; the failure is logged
    with its rule and binding context and the batch moves on.
    """

    def __init__(self, config: GeneratorConfig = GeneratorConfig()):
        self._config = config
        self._preamble = load_preamble(config.helpers_path)

    def generate(self, paths: Iterable[Path]) -> list[FileOutcome]:
        outcomes = [self._generate_file(Path(path)) for path in paths]
        failed = sum(1 for outcome in outcomes if not outcome.ok)
        if failed:
            logger.warning("%d of %d pattern file(s) failed", failed, len(outcomes))
        return outcomes

    def _generate_file(self, path: Path) -> FileOutcome:
        outcome = FileOutcome(path=path)
        try:
            with open(path, encoding="utf-8") as handle:
                source = handle.read()
            result = translate_tree(parse_patterns(source), file_stem(path))
        except (PeepholeError, OSError, UnicodeDecodeError) as exc:
            logger.error("%s: %s", path, exc)
            outcome.error = str(exc)
            return outcome

        text = render_file(result, self._preamble)
        outcome.function_count = len(result.function_names)
        if self._config.use_stdout:
            sys.stdout.write(text)
            return outcome

        destination = output_path(path, self._config)
        try:
            with open(destination, "w", encoding="utf-8") as handle:
                handle.write(text)
        except OSError as exc:
            logger.error("%s: %s", destination, exc)
            outcome.error = str(exc)
            return outcome
        outcome.output = destination
        logger.info("Generated %s", destination)
        return outcome
