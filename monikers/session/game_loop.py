"""
Game Loop - Round and turn progression for one game of Monikers.

The loop:
1. First Start draws the game's cards from the pool (round 1: Taboo)
2. Each turn reshuffles the remaining deck and runs a countdown
3. Correct guesses remove cards; skips move them to the back
4. A turn ends when time runs out, the player stops, or the deck empties
5. Ending a turn on an empty deck advances the round (One Word, Mime)
6. After round 3 the game is over until the next Start

Gameplay calls made at the wrong moment (a tap during a transition) are
no-ops that return False. They never raise.
"""

from __future__ import annotations
import logging
import random
from typing import Callable

from ..engine_core.state import (
    Card,
    RoundPhase,
    Session,
    LAST_ROUND,
    DEFAULT_TURN_DURATION,
)
from ..engine_core.events import EventBus, GameEvent
from ..engine_core.timer import Scheduler, AsyncioScheduler, Countdown
from ..cards.pool import CardPool

logger = logging.getLogger(__name__)


CARDS_PER_GAME_CHOICES = (5, 10, 15, 20, 25, 30)
DEFAULT_CARDS_PER_GAME = 20

ShuffleFn = Callable[[list], None]


class GameLoop:
    """
    Session State Machine.

    Usage:
        loop = GameLoop(pool, scheduler=ManualScheduler())

        loop.start_turn()        # first call also starts the game
        loop.current_card()      # card to describe
        loop.correct_guess()     # or loop.skip_card()
        loop.end_turn()          # or let the countdown expire

        print(loop.title, loop.status_message)
    """

    def __init__(
        self,
        pool: CardPool,
        bus: EventBus | None = None,
        scheduler: Scheduler | None = None,
        shuffle: ShuffleFn | None = None,
        turn_duration: int = DEFAULT_TURN_DURATION,
        cards_per_game: int = DEFAULT_CARDS_PER_GAME,
    ):
        self.pool = pool
        self.bus = bus or pool.bus
        self.shuffle = shuffle or random.shuffle
        self.turn_duration = turn_duration
        self._cards_per_game = _validate_cards_per_game(cards_per_game)

        self.session = Session(time_remaining=turn_duration)
        self.countdown = Countdown(scheduler or AsyncioScheduler(), self.tick)

    # =========================================================================
    # Settings
    # =========================================================================

    @property
    def cards_per_game(self) -> int:
        return self._cards_per_game

    @cards_per_game.setter
    def cards_per_game(self, value: int):
        value = _validate_cards_per_game(value)
        if value == self._cards_per_game:
            return
        self._cards_per_game = value
        self.bus.publish(GameEvent.SETTINGS_CHANGED, cards_per_game=value)

    # =========================================================================
    # Turn control
    # =========================================================================

    def start_turn(self) -> bool:
        """
        Start a timed turn.

        Before round 1, or after a finished game, this first sets up a new
        game. Does nothing while a turn is running or when no cards are
        available.
        """
        session = self.session
        if not session.is_started or session.is_game_over:
            if not self._initialize_game():
                return False

        if session.is_running or not session.is_playable:
            return False

        # Arm first: a turn without a timer must never become visible
        try:
            self.countdown.start()
        except RuntimeError as e:
            logger.error("Cannot start turn, countdown not scheduled: %s", e)
            return False

        session.correct_this_turn = 0
        session.skipped_this_turn = 0
        self.shuffle(session.active_deck)
        session.cursor = 0
        session.is_running = True
        session.turn_count += 1
        session.time_remaining = self.turn_duration

        logger.debug("Turn %d started in round %d", session.turn_count, session.round_number)
        self._publish(GameEvent.TURN_STARTED)
        return True

    def tick(self):
        """One second of the countdown; the tick after zero ends the turn."""
        session = self.session
        if not session.is_running:
            return
        if session.time_remaining > 0:
            session.time_remaining -= 1
            self.bus.publish(GameEvent.TICK, time_remaining=session.time_remaining)
        else:
            self.end_turn()

    def end_turn(self) -> bool:
        """Stop the running turn; advance the round if the deck is empty."""
        session = self.session
        if not session.is_running:
            return False

        self._stop_timer()
        self._publish(
            GameEvent.TURN_ENDED,
            correct=session.correct_this_turn,
            skipped=session.skipped_this_turn,
        )
        if not session.active_deck:
            self._advance_round()
        return True

    def end_game(self):
        """Abandon the game from any state and return to idle."""
        self._stop_timer()
        self.session.reset(self.turn_duration)
        logger.info("Game reset")
        self._publish(GameEvent.GAME_RESET)

    # =========================================================================
    # Card actions
    # =========================================================================

    def correct_guess(self) -> bool:
        """Remove the shown card; an emptied deck ends the turn at once."""
        session = self.session
        if not session.is_running or session.current_card is None:
            return False

        session.correct_this_turn += 1
        card = session.active_deck.pop(session.cursor)
        self._publish(GameEvent.CARD_GUESSED, card_id=card.id)

        if not session.active_deck:
            self.end_turn()
        elif session.cursor >= len(session.active_deck):
            session.cursor = 0
        return True

    def skip_card(self) -> bool:
        """Move the shown card to the back of the deck."""
        session = self.session
        if not session.is_running or session.current_card is None:
            return False

        session.skipped_this_turn += 1
        card = session.active_deck.pop(session.cursor)
        session.active_deck.append(card)
        if session.cursor >= len(session.active_deck):
            session.cursor = 0

        self._publish(GameEvent.CARD_SKIPPED, card_id=card.id)
        return True

    def current_card(self) -> Card | None:
        return self.session.current_card

    # =========================================================================
    # Display
    # =========================================================================

    @property
    def phase(self) -> RoundPhase | None:
        return self.session.phase

    @property
    def title(self) -> str:
        session = self.session
        if not session.is_started:
            return "Monikers"
        if session.phase is not None:
            return f"Round {session.round_number}: {session.phase.label}"
        return "Game Over"

    @property
    def status_message(self) -> str:
        """Prompt shown when no card is on screen; empty while a card shows."""
        session = self.session
        if self.pool.is_empty:
            return "No cards available. Add some first!"
        if not session.is_started:
            return f"Press Start to begin Round 1: {RoundPhase.TABOO.label}"
        if session.is_game_over:
            return f"Game over! Total turns: {session.turn_count}"
        if not session.active_deck:
            previous = session.round_number - 1
            previous_name = _round_label(previous)
            if session.round_number <= LAST_ROUND:
                return (
                    f"Round {previous} ({previous_name}) complete! "
                    f"Press Start for Round {session.round_number} ({_round_label(session.round_number)})."
                )
            return f"Round {previous} ({previous_name}) complete! Game over!"
        if not session.is_running:
            return "Pass to the next player! Press Start when ready."
        return ""

    # =========================================================================
    # Internals
    # =========================================================================

    def _initialize_game(self) -> bool:
        """Draw this game's cards and enter round 1. False if the pool is empty."""
        self.pool.reload()
        candidates = self.pool.cards
        if not candidates:
            logger.info("Cannot start a game: no cards available")
            return False

        self.shuffle(candidates)
        session = self.session
        session.has_reviewed = False
        session.selected_cards = candidates[:self._cards_per_game]
        session.round_number = 1
        session.active_deck = list(session.selected_cards)
        self.shuffle(session.active_deck)
        session.cursor = 0
        session.turn_count = 0
        session.time_remaining = self.turn_duration

        logger.info(
            "New game with %d card(s) from a pool of %d",
            len(session.selected_cards),
            len(candidates),
        )
        self._publish(GameEvent.GAME_STARTED)
        return True

    def _advance_round(self):
        session = self.session
        session.round_number += 1
        if session.round_number <= LAST_ROUND:
            session.active_deck = list(session.selected_cards)
            self.shuffle(session.active_deck)
            session.cursor = 0
            session.time_remaining = self.turn_duration
            logger.info("Advanced to round %d (%s)", session.round_number, _round_label(session.round_number))
            self._publish(GameEvent.ROUND_ADVANCED)
        else:
            session.active_deck = []
            session.cursor = 0
            logger.info("Game over after %d turn(s)", session.turn_count)
            self._publish(GameEvent.GAME_OVER)

    def _stop_timer(self):
        self.session.is_running = False
        self.countdown.cancel()

    def _publish(self, event: GameEvent, **extra):
        self.bus.publish(event, **self.session.snapshot(), **extra)


def _validate_cards_per_game(value: int) -> int:
    if value not in CARDS_PER_GAME_CHOICES:
        raise ValueError(
            f"cards_per_game must be one of {CARDS_PER_GAME_CHOICES}, got {value!r}"
        )
    return int(value)


def _round_label(round_number: int) -> str:
    phase = RoundPhase.for_round(round_number)
    return phase.label if phase else ""
