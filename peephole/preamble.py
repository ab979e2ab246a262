"""Helper preamble copied verbatim to the top of every generated file."""

from __future__ import annotations

import logging
from pathlib import Path

from . import constants

logger = logging.getLogger(__name__)

DEFAULT_HELPERS_PATH = Path(__file__).parent / constants.HELPERS_FILENAME


def load_preamble(helpers_path: Path | None = None) -> str:
    """Read the helper preamble, ending with one blank separator line."""
    path = helpers_path or DEFAULT_HELPERS_PATH
    logger.debug("Loading helper preamble from %s", path)
    with open(path, encoding="utf-8") as handle:
        helpers = handle.read()
    return helpers.rstrip("\n") + "\n\n"
