"""
Cards - Seed decks and the card pool.

This module contains:
- Bundled seed decks (base and family)
- Seed file loading
- CardPool: eligible cards, custom cards, reviewed-card exclusion
"""

from .pool import CardPool
from .seeds import load_seed_lines, parse_seed_text

__all__ = [
    "CardPool",
    "load_seed_lines",
    "parse_seed_text",
]
