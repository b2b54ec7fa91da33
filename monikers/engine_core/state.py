"""
Game State - Plain data containers for cards and the play session.

Design principles:
- Plain dataclasses: no reactive fields, changes are announced via events
- Card identity is its id: text and classification may be edited
- Session owns everything that is reset when a game ends
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
import uuid


# Rounds 1-3 are playable; anything above is game over.
FIRST_ROUND = 1
LAST_ROUND = 3

DEFAULT_TURN_DURATION = 10


class CardClass(str, Enum):
    """Where a card came from."""
    SEED = "seed"  # Bundled seed deck
    CUSTOM_BASE = "custom_base"  # Entered by hand, base deck
    CUSTOM_FAMILY = "custom_family"  # Entered by hand, family deck

    @property
    def is_custom(self) -> bool:
        return self is not CardClass.SEED


class DeckVariant(str, Enum):
    """Seed deck selection."""
    BASE = "base"
    FAMILY = "family"

    @property
    def resource_name(self) -> str:
        return f"{self.value}_cards"

    @property
    def custom_class(self) -> CardClass:
        """Custom cards that join the pool for this variant."""
        if self is DeckVariant.FAMILY:
            return CardClass.CUSTOM_FAMILY
        return CardClass.CUSTOM_BASE


class RoundPhase(int, Enum):
    """The three clue-giving constraints, in play order."""
    TABOO = 1  # Say anything except the name
    ONE_WORD = 2  # Exactly one word
    MIME = 3  # No words at all

    @property
    def label(self) -> str:
        return _ROUND_LABELS[self]

    @classmethod
    def for_round(cls, round_number: int) -> RoundPhase | None:
        """Phase for a round number, or None outside rounds 1-3."""
        try:
            return cls(round_number)
        except ValueError:
            return None


_ROUND_LABELS = {
    RoundPhase.TABOO: "Taboo",
    RoundPhase.ONE_WORD: "One Word",
    RoundPhase.MIME: "Mime",
}


@dataclass
class Card:
    """
    A single clue card.

    Equality and hashing use only the id, so a card keeps its identity
    when its text or classification is edited.
    """
    text: str
    classification: CardClass = CardClass.SEED
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def __hash__(self):
        return hash(self.id)

    def __eq__(self, other):
        if not isinstance(other, Card):
            return False
        return self.id == other.id

    @property
    def is_custom(self) -> bool:
        return self.classification.is_custom


@dataclass
class Session:
    """
    Everything that lives for exactly one game.

    selected_cards is drawn once at game start and is the source deck
    for every round. active_deck is the working deck of the current round;
    cursor points at the card being shown.
    """
    round_number: int = 0
    selected_cards: list[Card] = field(default_factory=list)
    active_deck: list[Card] = field(default_factory=list)
    cursor: int = 0

    # Counters
    turn_count: int = 0
    correct_this_turn: int = 0
    skipped_this_turn: int = 0

    # Timer
    is_running: bool = False
    time_remaining: int = DEFAULT_TURN_DURATION

    # Post-game review done for this game
    has_reviewed: bool = False

    @property
    def phase(self) -> RoundPhase | None:
        return RoundPhase.for_round(self.round_number)

    @property
    def is_started(self) -> bool:
        return self.round_number >= FIRST_ROUND

    @property
    def is_playable(self) -> bool:
        """Turns may only run in rounds 1-3."""
        return FIRST_ROUND <= self.round_number <= LAST_ROUND

    @property
    def is_game_over(self) -> bool:
        return self.round_number > LAST_ROUND

    @property
    def current_card(self) -> Card | None:
        if 0 <= self.cursor < len(self.active_deck):
            return self.active_deck[self.cursor]
        return None

    def reset(self, turn_duration: int = DEFAULT_TURN_DURATION):
        """Return to the canonical idle state."""
        self.round_number = 0
        self.selected_cards = []
        self.active_deck = []
        self.cursor = 0
        self.turn_count = 0
        self.correct_this_turn = 0
        self.skipped_this_turn = 0
        self.is_running = False
        self.time_remaining = turn_duration
        self.has_reviewed = False

    def snapshot(self) -> dict:
        """Summary for event payloads and logs."""
        current = self.current_card
        return {
            "round_number": self.round_number,
            "turn_count": self.turn_count,
            "deck_size": len(self.active_deck),
            "selected_count": len(self.selected_cards),
            "cursor": self.cursor,
            "current_card_id": current.id if current else None,
            "correct_this_turn": self.correct_this_turn,
            "skipped_this_turn": self.skipped_this_turn,
            "is_running": self.is_running,
            "time_remaining": self.time_remaining,
            "has_reviewed": self.has_reviewed,
        }
