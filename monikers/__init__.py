"""
Monikers - Session engine for the cooperative party game.

Three timed rounds over a shared deck of cards:
- Round 1 (Taboo): say anything but the name
- Round 2 (One Word): exactly one word
- Round 3 (Mime): no words

The engine provides:
- The card pool, with seed decks, custom cards and retired cards
- The round/turn state machine with a cancellable countdown
- Post-game review that retires cards from future games
- A REST/WebSocket API and a small CLI
"""

__version__ = "0.1.0"
