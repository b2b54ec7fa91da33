"""
Review - Post-game keep/discard classification of the game's cards.

After the game is over players rate each of the game's cards as good,
bad or undecided. Good and bad cards are both retired from future pools
(only the reviewed-list bucket differs); undecided cards stay eligible.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Mapping

from ..engine_core.state import Card
from ..engine_core.events import GameEvent
from ..cards.pool import CardPool
from .game_loop import GameLoop

logger = logging.getLogger(__name__)


class Rating(str, Enum):
    GOOD = "good"
    BAD = "bad"
    UNDECIDED = "undecided"


@dataclass(frozen=True)
class ReviewOutcome:
    """Ids kept (rated good) and discarded (rated bad)."""
    kept: frozenset[str]
    discarded: frozenset[str]

    @property
    def retired(self) -> frozenset[str]:
        return self.kept | self.discarded


class ReviewWorkflow:
    """
    Usage:
        review = ReviewWorkflow(loop, pool)
        if review.is_available:
            review.submit({card.id: Rating.GOOD for card in review.cards()})
    """

    def __init__(self, loop: GameLoop, pool: CardPool | None = None):
        self.loop = loop
        self.pool = pool or loop.pool

    @property
    def has_reviewed(self) -> bool:
        return self.loop.session.has_reviewed

    @property
    def is_available(self) -> bool:
        """Reviewing is offered once per finished game."""
        session = self.loop.session
        return session.is_game_over and not session.has_reviewed

    def cards(self) -> list[Card]:
        return list(self.loop.session.selected_cards)

    def submit(self, ratings: Mapping[str, Rating | str]) -> ReviewOutcome | None:
        """
        Apply ratings keyed by card id.

        Missing ids count as undecided; ids not in this game are ignored.

        Returns:
            The outcome, or None when no review is available
        """
        if not self.is_available:
            logger.debug("Review submitted outside a finished, unreviewed game; ignored")
            return None

        good: list[Card] = []
        bad: list[Card] = []
        for card in self.cards():
            rating = Rating(ratings.get(card.id, Rating.UNDECIDED))
            if rating is Rating.GOOD:
                good.append(card)
            elif rating is Rating.BAD:
                bad.append(card)

        self.pool.record_review(good, bad)
        self.loop.session.has_reviewed = True

        outcome = ReviewOutcome(
            kept=frozenset(card.id for card in good),
            discarded=frozenset(card.id for card in bad),
        )
        self.loop.bus.publish(
            GameEvent.REVIEW_SUBMITTED,
            kept=sorted(outcome.kept),
            discarded=sorted(outcome.discarded),
        )
        return outcome
