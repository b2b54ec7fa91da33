"""
API Service - Business logic layer between API and engine.

The service:
1. Wires the pool, game loop, review workflow and persistence together
2. Translates API requests to engine calls
3. Formats responses for clients

This layer is framework-agnostic (can be used with FastAPI, a CLI, etc.)
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Callable

from ..config import EnvironmentSettings
from ..engine_core.events import EventBus
from ..engine_core.state import Card
from ..engine_core.timer import Scheduler
from ..cards.pool import CardPool
from ..session.game_loop import GameLoop
from ..session.review import ReviewWorkflow
from ..storage.store import KeyValueStore, JsonFileStore
from ..storage.persister import StatePersister
from .schemas import (
    CardInfo,
    GameStatus,
    GameStateResponse,
    ReviewCardsResponse,
    ReviewResponse,
    PoolResponse,
    ReviewedCardsResponse,
    SettingsRequest,
    SettingsResponse,
    CustomCardsResponse,
)

logger = logging.getLogger(__name__)


class ReviewNotAvailable(Exception):
    """Review submitted before game over, or twice for one game."""


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService(store=MemoryStore())

        service.start_turn()
        service.correct_guess()
        state = service.get_game_state()
    """
    settings: EnvironmentSettings = field(default_factory=EnvironmentSettings.from_env)
    store: KeyValueStore | None = None
    scheduler: Scheduler | None = None
    shuffle: Callable[[list], None] | None = None

    bus: EventBus = field(default_factory=EventBus, init=False)
    pool: CardPool = field(init=False)
    game_loop: GameLoop = field(init=False)
    review: ReviewWorkflow = field(init=False)
    persister: StatePersister = field(init=False)

    def __post_init__(self):
        if self.store is None:
            self.store = JsonFileStore(self.settings.state_path)

        self.pool = CardPool(
            bus=self.bus,
            seed_dir=self.settings.seed_dir,
            custom_cards_enabled=self.settings.custom_cards_enabled,
        )
        self.game_loop = GameLoop(
            self.pool,
            bus=self.bus,
            scheduler=self.scheduler,
            shuffle=self.shuffle,
            turn_duration=self.settings.turn_duration,
        )
        self.review = ReviewWorkflow(self.game_loop, self.pool)

        self.persister = StatePersister(self.store, self.pool, self.game_loop)
        self.persister.restore()
        self.persister.attach()

    # =========================================================================
    # Gameplay
    # =========================================================================

    def get_game_state(self, applied: bool = True) -> GameStateResponse:
        loop = self.game_loop
        session = loop.session
        card = loop.current_card()

        return GameStateResponse(
            status=self._status(),
            title=loop.title,
            status_message=loop.status_message,
            round_number=session.round_number,
            round_name=session.phase.label if session.phase else None,
            current_card=_card_info(card) if card else None,
            deck_size=len(session.active_deck),
            selected_count=len(session.selected_cards),
            turn_count=session.turn_count,
            correct_this_turn=session.correct_this_turn,
            skipped_this_turn=session.skipped_this_turn,
            is_running=session.is_running,
            time_remaining=session.time_remaining,
            has_reviewed=session.has_reviewed,
            review_available=self.review.is_available,
            applied=applied,
        )

    def start_turn(self) -> GameStateResponse:
        return self.get_game_state(applied=self.game_loop.start_turn())

    def end_turn(self) -> GameStateResponse:
        return self.get_game_state(applied=self.game_loop.end_turn())

    def correct_guess(self) -> GameStateResponse:
        return self.get_game_state(applied=self.game_loop.correct_guess())

    def skip_card(self) -> GameStateResponse:
        return self.get_game_state(applied=self.game_loop.skip_card())

    def end_game(self) -> GameStateResponse:
        self.game_loop.end_game()
        return self.get_game_state()

    # =========================================================================
    # Review
    # =========================================================================

    def get_review_cards(self) -> ReviewCardsResponse:
        return ReviewCardsResponse(
            cards=[_card_info(card) for card in self.review.cards()],
            review_available=self.review.is_available,
            has_reviewed=self.review.has_reviewed,
        )

    def submit_review(self, ratings) -> ReviewResponse:
        """Raises ReviewNotAvailable outside a finished, unreviewed game."""
        outcome = self.review.submit(ratings)
        if outcome is None:
            raise ReviewNotAvailable("No finished game awaiting review")
        return ReviewResponse(
            kept=sorted(outcome.kept),
            discarded=sorted(outcome.discarded),
            pool_size=self.pool.size,
        )

    # =========================================================================
    # Pool
    # =========================================================================

    def get_pool(self) -> PoolResponse:
        cards = self.pool.cards
        return PoolResponse(
            use_family_cards=self.pool.use_family_cards,
            count=len(cards),
            cards=[_card_info(card) for card in cards],
        )

    def get_reviewed(self) -> ReviewedCardsResponse:
        return ReviewedCardsResponse(
            good=[_card_info(card) for card in self.pool.reviewed_good],
            bad=[_card_info(card) for card in self.pool.reviewed_bad],
        )

    def reset_reviews(self) -> ReviewedCardsResponse:
        self.pool.reset_reviews()
        return self.get_reviewed()

    # =========================================================================
    # Settings
    # =========================================================================

    def get_settings(self) -> SettingsResponse:
        return SettingsResponse(
            cards_per_game=self.game_loop.cards_per_game,
            use_family_cards=self.pool.use_family_cards,
            turn_duration=self.game_loop.turn_duration,
            custom_cards_enabled=self.pool.custom_cards_enabled,
        )

    def update_settings(self, request: SettingsRequest) -> SettingsResponse:
        if request.cards_per_game is not None:
            self.game_loop.cards_per_game = request.cards_per_game
        if request.use_family_cards is not None:
            self.pool.use_family_cards = request.use_family_cards
        return self.get_settings()

    # =========================================================================
    # Custom cards
    # =========================================================================

    def list_custom_cards(self) -> CustomCardsResponse:
        cards = self.pool.custom_cards()
        return CustomCardsResponse(
            cards=[_card_info(card) for card in cards],
            count=len(cards),
        )

    def add_custom_card(self, text: str, is_family: bool = False) -> CardInfo:
        """Raises ValueError for blank text."""
        return _card_info(self.pool.add_custom_card(text, is_family))

    def update_custom_card_family(self, card_id: str, is_family: bool) -> CardInfo | None:
        if not self.pool.update_custom_card_family(card_id, is_family):
            return None
        return _card_info(self.pool.get_custom_card(card_id))

    def remove_custom_card(self, card_id: str) -> bool:
        return self.pool.remove_custom_card(card_id)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def shutdown(self):
        """Cancel the countdown and write a final save; later changes stay in memory."""
        self.game_loop.countdown.cancel()
        self.persister.save()
        self.persister.detach()

    def _status(self) -> GameStatus:
        session = self.game_loop.session
        if session.is_game_over:
            return GameStatus.GAME_OVER
        if not session.is_started:
            return GameStatus.IDLE
        if session.is_running:
            return GameStatus.TURN_RUNNING
        return GameStatus.BETWEEN_TURNS


def _card_info(card: Card) -> CardInfo:
    return CardInfo(
        card_id=card.id,
        text=card.text,
        classification=card.classification,
    )
