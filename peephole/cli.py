"""Command-line entry point."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .config import GeneratorConfig
from .errors import PeepholeError
from .generator import PatternFileGenerator, expand_paths
from .parser import parse_patterns
from .stats import count_expansions
from .tree import format_tree
from . import constants

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="peephole",
        description="Generate C peephole matchers from pattern files.",
        epilog="When a directory is given, files ending with "
        + " ".join(constants.PATTERN_EXTENSIONS)
        + " are processed.",
    )
    parser.add_argument("paths", nargs="+", help="Pattern files or directories")
    parser.add_argument(
        "--print-ast", "-p", action="store_true",
        help="Print each file's AST instead of generating code",
    )
    parser.add_argument(
        "--stdout", "-s", action="store_true",
        help="Write generated code to standard output",
    )
    parser.add_argument(
        "--stats", action="store_true",
        help="Print how many functions each rule expands into",
    )
    parser.add_argument(
        "--helpers", type=Path, default=None,
        help="Helper preamble to copy into generated files",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Log progress at INFO level",
    )
    return parser


def _inspect(paths: list[Path], show) -> int:
    """Parse each file and print ``show(tree)``; return the failure count."""
    failures = 0
    for path in paths:
        try:
            with open(path, encoding="utf-8") as handle:
                tree = parse_patterns(handle.read())
            print(f"═══ {path} ═══")
            print(show(tree))
        except (PeepholeError, OSError, UnicodeDecodeError) as exc:
            logger.error("%s: %s", path, exc)
            failures += 1
    return failures


def _format_stats(tree) -> str:
    counts = count_expansions(tree)
    lines = [f"  {name}: {count}" for name, count in counts.items()]
    lines.append(f"  total: {sum(counts.values())}")
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )

    config = GeneratorConfig(use_stdout=args.stdout, helpers_path=args.helpers)
    paths = expand_paths(args.paths, config)
    if not paths:
        logger.error("No pattern files found in %s", " ".join(args.paths))
        return 1

    if args.print_ast:
        return 1 if _inspect(paths, format_tree) else 0
    if args.stats:
        return 1 if _inspect(paths, _format_stats) else 0

    try:
        generator = PatternFileGenerator(config)
    except (OSError, UnicodeDecodeError) as exc:
        logger.error("Cannot read helper preamble: %s", exc)
        return 1
    outcomes = generator.generate(paths)
    return 0 if all(outcome.ok for outcome in outcomes) else 1


if __name__ == "__main__":
    sys.exit(main())
