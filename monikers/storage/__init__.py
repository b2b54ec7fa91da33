"""
Storage - Best-effort local persistence.

The only persistence in the system:
- The card pool, including custom cards
- Reviewed (retired) cards
- Preferences: cards per game, family deck toggle

Game sessions are never persisted.
"""

from .store import (
    KeyValueStore,
    MemoryStore,
    JsonFileStore,
    encode_card,
    decode_card,
    encode_cards,
    decode_cards,
)
from .persister import StatePersister

__all__ = [
    "KeyValueStore",
    "MemoryStore",
    "JsonFileStore",
    "encode_card",
    "decode_card",
    "encode_cards",
    "decode_cards",
    "StatePersister",
]
