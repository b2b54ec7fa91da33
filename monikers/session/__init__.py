"""
Session Module - One game of Monikers, start to review.

A game:
- Starts on the first Start, drawing its cards from the pool
- Runs three rounds (Taboo, One Word, Mime) of timed turns
- Ends after round 3, or early via end_game()
- Is followed by an optional review that retires cards from the pool

Game state is ephemeral; only the pool and preferences are persisted.
"""

from .game_loop import GameLoop, CARDS_PER_GAME_CHOICES, DEFAULT_CARDS_PER_GAME
from .review import ReviewWorkflow, ReviewOutcome, Rating

__all__ = [
    "GameLoop",
    "CARDS_PER_GAME_CHOICES",
    "DEFAULT_CARDS_PER_GAME",
    "ReviewWorkflow",
    "ReviewOutcome",
    "Rating",
]
