"""
State Store - Local key/value storage for the card pool and preferences.

The store:
- Keeps every key in one JSON document on local disk
- Is a best-effort cache: read and write failures are logged, never raised
- In-memory state stays authoritative; the next successful save wins

Design decisions:
- Simple file-based storage, no database
- Writes go to a temporary file first and are moved into place
- MemoryStore offers the same interface for tests and ephemeral hosts
"""

from __future__ import annotations
import json
import logging
import os
from pathlib import Path
from typing import Any, Iterable, Protocol

from ..engine_core.state import Card, CardClass

logger = logging.getLogger(__name__)


# Persisted keys
CARDS_KEY = "cards"
REVIEWED_GOOD_KEY = "reviewedGood"
REVIEWED_BAD_KEY = "reviewedBad"
CARDS_PER_GAME_KEY = "cardsPerGame"
USE_FAMILY_CARDS_KEY = "useFamilyCards"

# Errors that mean "storage unavailable" rather than a bug
STORAGE_ERRORS = (OSError, ValueError, TypeError)


class KeyValueStore(Protocol):
    def get(self, key: str, default: Any = None) -> Any: ...

    def update(self, values: dict[str, Any]) -> bool: ...


class MemoryStore:
    """Dict-backed store."""

    def __init__(self, data: dict[str, Any] | None = None):
        self.data: dict[str, Any] = dict(data or {})
        self.save_count = 0

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def update(self, values: dict[str, Any]) -> bool:
        self.data.update(values)
        self.save_count += 1
        return True


class JsonFileStore:
    """
    File-backed store.

    Usage:
        store = JsonFileStore("~/.monikers/state.json")
        store.update({"cardsPerGame": 15})
        store.get("cardsPerGame")   # 15
    """

    def __init__(self, path: str | Path | None = None):
        if path is None:
            path = Path.home() / ".monikers" / "state.json"
        self.path = Path(path).expanduser()

    def get(self, key: str, default: Any = None) -> Any:
        return self._read().get(key, default)

    def update(self, values: dict[str, Any]) -> bool:
        """Merge values into the document. Returns False if the write failed."""
        data = self._read()
        data.update(values)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, self.path)
        except STORAGE_ERRORS as e:
            logger.warning("Could not save state to %s: %s", self.path, e)
            return False
        return True

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except STORAGE_ERRORS as e:
            logger.warning("Could not read state from %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring malformed state file %s", self.path)
            return {}
        return data


# =============================================================================
# Card codec
# =============================================================================

def encode_card(card: Card) -> dict[str, str]:
    return {
        "id": card.id,
        "text": card.text,
        "classification": card.classification.value,
    }


def decode_card(data: dict[str, Any]) -> Card:
    """Raises KeyError/ValueError/TypeError on malformed input."""
    return Card(
        id=str(data["id"]),
        text=str(data["text"]),
        classification=CardClass(data.get("classification", CardClass.SEED.value)),
    )


def encode_cards(cards: Iterable[Card]) -> list[dict[str, str]]:
    return [encode_card(card) for card in cards]


def decode_cards(items: Any) -> list[Card]:
    """Decode a stored card list, skipping entries that do not parse."""
    if not isinstance(items, list):
        return []
    cards = []
    for item in items:
        try:
            cards.append(decode_card(item))
        except (KeyError, ValueError, TypeError) as e:
            logger.warning("Skipping unreadable stored card %r: %s", item, e)
    return cards
