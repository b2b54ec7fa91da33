"""
Persister - Keeps the store in sync with the pool and preferences.

restore() loads saved state once at startup; attach() subscribes to
POOL_CHANGED and SETTINGS_CHANGED and writes a full snapshot after each.
The core never calls storage directly.
"""

from __future__ import annotations
import logging

from ..engine_core.events import GameEvent
from ..engine_core.state import DeckVariant
from ..cards.pool import CardPool
from ..session.game_loop import GameLoop
from .store import (
    KeyValueStore,
    STORAGE_ERRORS,
    CARDS_KEY,
    REVIEWED_GOOD_KEY,
    REVIEWED_BAD_KEY,
    CARDS_PER_GAME_KEY,
    USE_FAMILY_CARDS_KEY,
    encode_cards,
    decode_cards,
)

logger = logging.getLogger(__name__)


class StatePersister:
    """
    Usage:
        persister = StatePersister(store, pool, loop)
        persister.restore()
        persister.attach()
    """

    def __init__(self, store: KeyValueStore, pool: CardPool, loop: GameLoop):
        self.store = store
        self.pool = pool
        self.loop = loop
        self._attached = False

    def restore(self):
        """Load saved cards, reviews and preferences; missing keys keep defaults."""
        try:
            stored_cards = decode_cards(self.store.get(CARDS_KEY, []))
            reviewed_good = decode_cards(self.store.get(REVIEWED_GOOD_KEY, []))
            reviewed_bad = decode_cards(self.store.get(REVIEWED_BAD_KEY, []))
            cards_per_game = self.store.get(CARDS_PER_GAME_KEY, 0)
            use_family = bool(self.store.get(USE_FAMILY_CARDS_KEY, False))
        except STORAGE_ERRORS as e:
            logger.warning("Could not restore saved state: %s", e)
            self.pool.reload(notify=False)
            return

        if isinstance(cards_per_game, int) and cards_per_game > 0:
            try:
                self.loop.cards_per_game = cards_per_game
            except ValueError as e:
                logger.warning("Ignoring saved cards per game: %s", e)

        self.pool.restore(
            custom_cards=[card for card in stored_cards if card.is_custom],
            reviewed_good=reviewed_good,
            reviewed_bad=reviewed_bad,
            variant=DeckVariant.FAMILY if use_family else DeckVariant.BASE,
        )
        logger.info(
            "Restored %d custom card(s) and %d reviewed card(s)",
            len(self.pool.custom_cards()),
            len(reviewed_good) + len(reviewed_bad),
        )

    def attach(self):
        if self._attached:
            return
        self.pool.bus.subscribe_many(
            (GameEvent.POOL_CHANGED, GameEvent.SETTINGS_CHANGED),
            self._on_change,
        )
        self._attached = True

    def detach(self):
        for event in (GameEvent.POOL_CHANGED, GameEvent.SETTINGS_CHANGED):
            self.pool.bus.unsubscribe(event, self._on_change)
        self._attached = False

    def snapshot(self) -> dict:
        # Custom cards that are not currently in the pool must survive too
        pool_cards = self.pool.cards
        pool_ids = {card.id for card in pool_cards}
        cards = pool_cards + [card for card in self.pool.custom_cards() if card.id not in pool_ids]

        values = {
            CARDS_KEY: encode_cards(cards),
            REVIEWED_GOOD_KEY: encode_cards(self.pool.reviewed_good),
            REVIEWED_BAD_KEY: encode_cards(self.pool.reviewed_bad),
            USE_FAMILY_CARDS_KEY: self.pool.use_family_cards,
        }
        if self.loop.cards_per_game > 0:
            values[CARDS_PER_GAME_KEY] = self.loop.cards_per_game
        return values

    def save(self) -> bool:
        return self.store.update(self.snapshot())

    def _on_change(self, **_payload):
        if not self.save():
            logger.debug("State save skipped; keeping in-memory state")
