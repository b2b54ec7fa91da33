"""
API Module - Client app interface.

Exposes the engine via REST API and a WebSocket event feed.
The client app:
1. Starts turns and reports correct guesses and skips
2. Follows the countdown and round changes over the WebSocket
3. Submits post-game reviews
4. Manages preferences and custom cards

Game state is in-memory; only the card pool and preferences persist.
"""

from .service import APIService, ReviewNotAvailable
from .app import create_app

__all__ = [
    "APIService",
    "ReviewNotAvailable",
    "create_app",
]
