"""
Card Pool - The universe of cards a new game can draw from.

The pool is rebuilt from the seed deck of the selected variant, minus
every card that has already been reviewed. Custom cards (typed in by
players) are kept separately and join the pool for their variant when the
host enables them.

Reviewed cards are remembered by text so that seed cards, which get fresh
ids on every load, stay excluded across restarts.

Every mutation publishes POOL_CHANGED (or SETTINGS_CHANGED for the variant
toggle); persistence subscribes to those events.
"""

from __future__ import annotations
import logging
from pathlib import Path
from typing import Iterable

from ..engine_core.state import Card, CardClass, DeckVariant
from ..engine_core.events import EventBus, GameEvent
from .seeds import load_seed_lines

logger = logging.getLogger(__name__)


class CardPool:
    """
    Card Pool Manager.

    Usage:
        pool = CardPool(bus=bus)
        pool.reload()
        pool.cards              # eligible cards for the next game
        pool.use_family_cards = True   # switches deck and reloads
        pool.record_review(good=[...], bad=[...])
    """

    def __init__(
        self,
        bus: EventBus | None = None,
        seed_dir: str | Path | None = None,
        custom_cards_enabled: bool = False,
        variant: DeckVariant = DeckVariant.BASE,
    ):
        self.bus = bus or EventBus()
        self.seed_dir = seed_dir
        self.custom_cards_enabled = custom_cards_enabled
        self._variant = variant

        self._cards: list[Card] = []
        self._custom: list[Card] = []
        self.reviewed_good: list[Card] = []
        self.reviewed_bad: list[Card] = []

    # =========================================================================
    # Views
    # =========================================================================

    @property
    def cards(self) -> list[Card]:
        """Cards eligible for the next game."""
        return list(self._cards)

    @property
    def size(self) -> int:
        return len(self._cards)

    @property
    def is_empty(self) -> bool:
        return not self._cards

    @property
    def excluded_texts(self) -> set[str]:
        return {card.text for card in self.reviewed_good} | {card.text for card in self.reviewed_bad}

    @property
    def excluded_ids(self) -> set[str]:
        return {card.id for card in self.reviewed_good} | {card.id for card in self.reviewed_bad}

    def custom_cards(self) -> list[Card]:
        """All stored custom cards, whether or not they are in the pool."""
        return list(self._custom)

    def get_custom_card(self, card_id: str) -> Card | None:
        for card in self._custom:
            if card.id == card_id:
                return card
        return None

    # =========================================================================
    # Loading
    # =========================================================================

    @property
    def variant(self) -> DeckVariant:
        return self._variant

    @variant.setter
    def variant(self, value: DeckVariant):
        value = DeckVariant(value)
        if value is self._variant:
            return
        self._variant = value
        logger.info("Switched to %s deck", value.value)
        self.bus.publish(GameEvent.SETTINGS_CHANGED, use_family_cards=self.use_family_cards)
        self.reload()

    @property
    def use_family_cards(self) -> bool:
        return self._variant is DeckVariant.FAMILY

    @use_family_cards.setter
    def use_family_cards(self, value: bool):
        self.variant = DeckVariant.FAMILY if value else DeckVariant.BASE

    def load_pool(self, variant: DeckVariant) -> list[Card]:
        """
        Build a fresh pool for a variant without installing it.

        Seed cards get new ids on every call.
        """
        excluded = self.excluded_texts
        pool = [
            Card(text=text, classification=CardClass.SEED)
            for text in load_seed_lines(variant, self.seed_dir)
            if text not in excluded
        ]
        if self.custom_cards_enabled:
            wanted = variant.custom_class
            pool.extend(
                card for card in self._custom
                if card.classification is wanted and card.text not in excluded
            )
        return pool

    def reload(self, notify: bool = True) -> list[Card]:
        """Replace the pool with a fresh load of the current variant."""
        self._cards = self.load_pool(self._variant)
        logger.debug("Loaded %d cards for %s deck", len(self._cards), self._variant.value)
        if notify:
            self._changed()
        return self.cards

    def restore(
        self,
        custom_cards: Iterable[Card] = (),
        reviewed_good: Iterable[Card] = (),
        reviewed_bad: Iterable[Card] = (),
        variant: DeckVariant | None = None,
    ):
        """Install previously saved state and reload, without publishing."""
        self._custom = [card for card in custom_cards if card.is_custom]
        self.reviewed_good = list(reviewed_good)
        self.reviewed_bad = list(reviewed_bad)
        if variant is not None:
            self._variant = DeckVariant(variant)
        self.reload(notify=False)

    # =========================================================================
    # Custom cards
    # =========================================================================

    def add_custom_card(self, text: str, is_family: bool = False) -> Card:
        """Store a hand-entered card. Raises ValueError for blank text."""
        text = text.strip()
        if not text:
            raise ValueError("Card text must not be blank")

        card = Card(
            text=text,
            classification=CardClass.CUSTOM_FAMILY if is_family else CardClass.CUSTOM_BASE,
        )
        self._custom.append(card)
        if self.custom_cards_enabled and card.classification is self._variant.custom_class:
            self._cards.append(card)
        self._changed()
        return card

    def remove_custom_card(self, card_id: str) -> bool:
        card = self.get_custom_card(card_id)
        if card is None:
            return False
        self._custom.remove(card)
        self._cards = [c for c in self._cards if c.id != card_id]
        self._changed()
        return True

    def update_custom_card_family(self, card_id: str, is_family: bool) -> bool:
        """Reclassify a custom card. Unknown ids are ignored."""
        card = self.get_custom_card(card_id)
        if card is None:
            return False
        card.classification = CardClass.CUSTOM_FAMILY if is_family else CardClass.CUSTOM_BASE
        # Membership depends on classification
        self.reload()
        return True

    # =========================================================================
    # Reviews
    # =========================================================================

    def record_review(self, good: Iterable[Card], bad: Iterable[Card]):
        """
        Retire reviewed cards from future games.

        Both buckets leave the pool; they differ only in how they are
        listed afterwards.
        """
        good = list(good)
        bad = list(bad)
        self.reviewed_good.extend(good)
        self.reviewed_bad.extend(bad)

        retired = {card.id for card in good} | {card.id for card in bad}
        self._cards = [card for card in self._cards if card.id not in retired]
        logger.info("Retired %d card(s): %d good, %d bad", len(retired), len(good), len(bad))
        self._changed()

    def reset_reviews(self):
        """Forget all reviews and reload the full deck."""
        self.reviewed_good = []
        self.reviewed_bad = []
        logger.info("Cleared reviewed cards")
        self.reload()

    def _changed(self):
        self.bus.publish(GameEvent.POOL_CHANGED, size=len(self._cards))
