"""
Tests for the game loop (round and turn state machine).

Tests:
- Game setup on first start
- Correct guesses and skips
- Turn end and round advance
- Countdown expiry
- Early termination
- Status text and titles
"""

import random

import pytest

from ..engine_core.events import GameEvent
from ..engine_core.state import Session
from ..session.game_loop import GameLoop
from .conftest import keep_order, play_until_game_over


def ids(cards):
    return [card.id for card in cards]


class TestGameSetup:
    """Tests for the first start_turn of a game."""

    def test_start_draws_cards_and_starts_round_one(self, make_loop):
        """Pool of 25, 20 per game: 20 cards drawn, turn running."""
        loop = make_loop(pool_size=25, cards_per_game=20)

        assert loop.start_turn()

        session = loop.session
        assert len(session.selected_cards) == 20
        assert session.round_number == 1
        assert session.is_running
        assert session.time_remaining == 10
        assert session.turn_count == 1
        assert sorted(ids(session.active_deck)) == sorted(ids(session.selected_cards))

    def test_selected_cards_come_from_pool_without_repeats(self, make_loop):
        loop = make_loop(pool_size=25, cards_per_game=20, shuffle=random.Random(3).shuffle)
        loop.start_turn()

        texts = [card.text for card in loop.session.selected_cards]
        pool_texts = {card.text for card in loop.pool.cards}
        assert len(set(texts)) == 20
        assert set(texts) <= pool_texts

    def test_draw_clamps_to_pool_size(self, make_loop):
        loop = make_loop(pool_size=7, cards_per_game=20)

        loop.start_turn()

        assert len(loop.session.selected_cards) == 7

    def test_empty_pool_stays_idle(self, make_loop):
        loop = make_loop(pool_size=0)

        assert not loop.start_turn()

        assert loop.session.round_number == 0
        assert not loop.session.is_running
        assert loop.status_message == "No cards available. Add some first!"

    def test_start_while_running_is_noop(self, loop):
        loop.start_turn()
        deck_before = ids(loop.session.active_deck)

        assert not loop.start_turn()

        assert loop.session.turn_count == 1
        assert ids(loop.session.active_deck) == deck_before

    def test_start_without_event_loop_leaves_turn_unstarted(self, pool):
        """The default asyncio clock needs a running loop; without one no turn starts."""
        loop = GameLoop(pool, shuffle=keep_order)

        assert not loop.start_turn()

        session = loop.session
        assert not session.is_running
        assert session.turn_count == 0
        assert not loop.countdown.active
        assert not loop.correct_guess()

    def test_game_started_event(self, loop, recorder):
        loop.start_turn()

        names = recorder.names()
        assert names.index(GameEvent.GAME_STARTED) < names.index(GameEvent.TURN_STARTED)

    def test_invalid_cards_per_game_rejected(self, loop):
        with pytest.raises(ValueError):
            loop.cards_per_game = 12

    def test_cards_per_game_change_published(self, loop, recorder):
        loop.cards_per_game = 10

        assert recorder.of(GameEvent.SETTINGS_CHANGED) == [{"cards_per_game": 10}]


class TestCardActions:
    """Tests for correct_guess and skip_card."""

    def test_correct_guess_removes_current_card(self, loop):
        loop.start_turn()
        card = loop.current_card()
        size = len(loop.session.active_deck)

        assert loop.correct_guess()

        assert len(loop.session.active_deck) == size - 1
        assert card not in loop.session.active_deck
        assert loop.session.correct_this_turn == 1

    def test_skip_moves_card_to_back(self, loop):
        loop.start_turn()
        card = loop.current_card()
        size = len(loop.session.active_deck)

        assert loop.skip_card()

        assert len(loop.session.active_deck) == size
        assert loop.session.active_deck[-1] == card
        assert loop.session.skipped_this_turn == 1
        assert loop.session.correct_this_turn == 0

    def test_actions_ignored_when_not_running(self, loop):
        assert not loop.correct_guess()
        assert not loop.skip_card()

        loop.start_turn()
        loop.end_turn()
        size = len(loop.session.active_deck)

        assert not loop.correct_guess()
        assert not loop.skip_card()
        assert len(loop.session.active_deck) == size

    def test_cursor_and_deck_stay_valid(self, make_loop):
        """
        After every operation: cursor < deck size while the deck is
        non-empty, and the deck holds distinct cards from the game's selection.
        """
        rng = random.Random(11)
        loop = make_loop(pool_size=12, cards_per_game=10, shuffle=random.Random(5).shuffle)
        operations = [loop.start_turn, loop.end_turn, loop.correct_guess, loop.skip_card, loop.skip_card]

        for _ in range(400):
            rng.choice(operations)()
            session = loop.session
            deck = ids(session.active_deck)
            assert len(set(deck)) == len(deck)
            assert set(deck) <= set(ids(session.selected_cards))
            if session.active_deck:
                assert 0 <= session.cursor < len(session.active_deck)
            if session.is_running:
                assert session.is_playable

    def test_counters_reset_each_turn(self, loop):
        loop.start_turn()
        loop.correct_guess()
        loop.skip_card()
        loop.end_turn()

        loop.start_turn()

        assert loop.session.correct_this_turn == 0
        assert loop.session.skipped_this_turn == 0
        assert loop.session.turn_count == 2


class TestRoundProgression:
    """Tests for turn end and round advance."""

    def test_emptying_deck_ends_turn_and_advances_round(self, make_loop):
        """Three correct guesses on a 3-card deck move to round 2."""
        loop = make_loop(pool_size=3, cards_per_game=5)
        loop.start_turn()

        loop.correct_guess()
        loop.correct_guess()
        assert loop.session.is_running

        loop.correct_guess()

        session = loop.session
        assert not session.is_running
        assert session.round_number == 2
        assert sorted(ids(session.active_deck)) == sorted(ids(session.selected_cards))
        assert session.cursor == 0
        assert session.time_remaining == 10

    def test_new_round_reshuffles_selected_cards(self, make_loop):
        loop = make_loop(pool_size=6, cards_per_game=5, shuffle=random.Random(8).shuffle)
        loop.start_turn()
        selected = ids(loop.session.selected_cards)

        while loop.correct_guess():
            pass

        assert loop.session.round_number == 2
        assert sorted(ids(loop.session.active_deck)) == sorted(selected)
        assert ids(loop.session.selected_cards) == selected

    def test_end_turn_with_cards_left_keeps_round(self, loop):
        loop.start_turn()
        loop.correct_guess()

        assert loop.end_turn()

        assert loop.session.round_number == 1
        assert not loop.session.is_running
        assert loop.status_message == "Pass to the next player! Press Start when ready."

    def test_end_turn_twice_same_as_once(self, loop, recorder):
        loop.start_turn()
        loop.end_turn()
        state = loop.session.snapshot()

        assert not loop.end_turn()

        assert loop.session.snapshot() == state
        assert len(recorder.of(GameEvent.TURN_ENDED)) == 1

    def test_rounds_advance_one_at_a_time(self, make_loop, recorder):
        loop = make_loop(pool_size=4, cards_per_game=5)

        play_until_game_over(loop)

        rounds = [payload["round_number"] for payload in recorder.of(GameEvent.ROUND_ADVANCED)]
        assert rounds == [2, 3]
        assert len(recorder.of(GameEvent.GAME_OVER)) == 1
        assert loop.session.round_number == 4

    def test_game_over_after_seven_turns(self, make_loop):
        loop = make_loop(pool_size=3, cards_per_game=5)

        def turn(guesses=None):
            loop.start_turn()
            if guesses is None:
                while loop.correct_guess():
                    pass
            else:
                loop.end_turn()

        turn(0)
        turn()      # round 1 done
        turn(0)
        turn()      # round 2 done
        turn(0)
        turn(0)
        turn()      # round 3 done

        session = loop.session
        assert session.is_game_over
        assert session.turn_count == 7
        assert session.active_deck == []
        assert loop.status_message == "Game over! Total turns: 7"
        assert loop.title == "Game Over"

    def test_no_turns_after_game_over_until_restart(self, make_loop):
        loop = make_loop(pool_size=3, cards_per_game=5)
        play_until_game_over(loop)

        assert not loop.correct_guess()
        assert not loop.end_turn()

        # Start after game over begins a fresh game
        assert loop.start_turn()
        assert loop.session.round_number == 1
        assert loop.session.turn_count == 1


class TestCountdown:
    """Tests for the turn timer."""

    def test_tick_decrements_time(self, loop, scheduler):
        loop.start_turn()

        scheduler.advance(3)

        assert loop.session.time_remaining == 7
        assert loop.session.is_running

    def test_turn_ends_on_tick_after_zero(self, loop, scheduler, recorder):
        loop.start_turn()

        scheduler.advance(10)
        assert loop.session.time_remaining == 0
        assert loop.session.is_running

        scheduler.advance(1)
        assert not loop.session.is_running
        assert loop.session.round_number == 1
        assert scheduler.pending == 0
        assert len(recorder.of(GameEvent.TICK)) == 10

    def test_restarted_turn_uses_fresh_countdown(self, loop, scheduler):
        loop.start_turn()
        scheduler.advance(4)
        loop.end_turn()
        scheduler.advance(2)

        loop.start_turn()
        scheduler.advance(3)

        assert loop.session.time_remaining == 7
        assert scheduler.pending == 1

    def test_end_turn_stops_ticks(self, loop, scheduler):
        loop.start_turn()
        scheduler.advance(2)
        loop.end_turn()

        scheduler.advance(30)

        assert loop.session.time_remaining == 8

    def test_reshuffle_is_a_permutation(self, make_loop, scheduler):
        loop = make_loop(pool_size=15, cards_per_game=10, shuffle=random.Random(21).shuffle)
        loop.start_turn()
        loop.end_turn()
        before = sorted(ids(loop.session.active_deck))

        for _ in range(5):
            loop.start_turn()
            assert sorted(ids(loop.session.active_deck)) == before
            scheduler.advance(11)


class TestEndGame:
    """Tests for early termination."""

    @pytest.mark.parametrize("setup", ["idle", "running", "between_turns", "game_over"])
    def test_end_game_resets_to_idle(self, make_loop, scheduler, setup):
        loop = make_loop(pool_size=3, cards_per_game=5)
        if setup == "running":
            loop.start_turn()
            loop.correct_guess()
        elif setup == "between_turns":
            loop.start_turn()
            loop.end_turn()
        elif setup == "game_over":
            play_until_game_over(loop)

        loop.end_game()

        assert loop.session == Session(time_remaining=loop.turn_duration)
        assert scheduler.pending == 0

    def test_no_ticks_after_end_game(self, loop, scheduler):
        loop.start_turn()
        scheduler.advance(2)

        loop.end_game()
        scheduler.advance(20)

        assert loop.session.time_remaining == 10
        assert not loop.session.is_running

    def test_end_game_twice_is_safe(self, loop):
        loop.start_turn()
        loop.end_game()
        loop.end_game()

        assert loop.session.round_number == 0


class TestDisplay:
    """Tests for title and status message."""

    def test_idle(self, loop):
        assert loop.title == "Monikers"
        assert loop.status_message == "Press Start to begin Round 1: Taboo"

    def test_card_showing_has_blank_status(self, loop):
        loop.start_turn()

        assert loop.title == "Round 1: Taboo"
        assert loop.status_message == ""

    def test_round_titles(self, make_loop):
        loop = make_loop(pool_size=2, cards_per_game=5)
        loop.start_turn()
        loop.correct_guess()
        loop.correct_guess()

        assert loop.title == "Round 2: One Word"

        loop.start_turn()
        loop.correct_guess()
        loop.correct_guess()

        assert loop.title == "Round 3: Mime"

    def test_round_complete_messages(self, loop):
        session = loop.session
        session.round_number = 2
        session.active_deck = []

        assert loop.status_message == (
            "Round 1 (Taboo) complete! Press Start for Round 2 (One Word)."
        )

    def test_phase(self, loop):
        assert loop.phase is None
        loop.start_turn()
        assert loop.phase.label == "Taboo"


def test_default_scheduler_is_lazy(pool):
    """Creating a loop outside an event loop does not touch asyncio."""
    loop = GameLoop(pool)
    assert not loop.countdown.active
