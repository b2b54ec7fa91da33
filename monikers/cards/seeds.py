"""
Seed Decks - Bundled line-delimited card lists.

One card phrase per line, UTF-8, blank lines ignored. The bundled files
live in monikers/cards/data/; a host may point at another directory
holding files with the same names.
"""

from __future__ import annotations
import logging
from importlib import resources
from pathlib import Path

from ..engine_core.state import DeckVariant

logger = logging.getLogger(__name__)


def parse_seed_text(text: str) -> list[str]:
    """Split seed file contents into card phrases."""
    return [line.strip() for line in text.splitlines() if line.strip()]


def load_seed_lines(variant: DeckVariant, seed_dir: str | Path | None = None) -> list[str]:
    """
    Read the seed phrases for a deck variant.

    Args:
        variant: Which deck to read
        seed_dir: Directory overriding the bundled data

    Returns:
        Card phrases in file order; empty if the file is missing or unreadable
    """
    filename = f"{variant.resource_name}.txt"
    try:
        if seed_dir is not None:
            text = (Path(seed_dir) / filename).read_text(encoding="utf-8")
        else:
            text = (resources.files("monikers.cards") / "data" / filename).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Seed deck '%s' unavailable: %s", filename, e)
        return []

    return parse_seed_text(text)
