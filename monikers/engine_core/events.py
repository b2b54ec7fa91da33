"""
Events - Change notifications published by the pool and the game loop.

Nothing in the core holds references to views or storage. Instead every
state-changing operation publishes an event and outer layers (persistence,
WebSocket feed, CLI) subscribe to the ones they care about.

Handlers are called synchronously, in subscription order, on the thread
that published the event.
"""

from __future__ import annotations
import logging
from enum import Enum
from typing import Any, Callable

logger = logging.getLogger(__name__)


class GameEvent(str, Enum):
    """Event channels."""
    # Game loop
    GAME_STARTED = "game_started"
    TURN_STARTED = "turn_started"
    TICK = "tick"
    CARD_GUESSED = "card_guessed"
    CARD_SKIPPED = "card_skipped"
    TURN_ENDED = "turn_ended"
    ROUND_ADVANCED = "round_advanced"
    GAME_OVER = "game_over"
    GAME_RESET = "game_reset"

    # Review
    REVIEW_SUBMITTED = "review_submitted"

    # Pool and preferences (persisted)
    POOL_CHANGED = "pool_changed"
    SETTINGS_CHANGED = "settings_changed"


Handler = Callable[..., Any]


class EventBus:
    """
    Minimal publish/subscribe bus.

    Usage:
        bus = EventBus()
        bus.subscribe(GameEvent.GAME_OVER, lambda **payload: print(payload))
        bus.publish(GameEvent.GAME_OVER, turn_count=7)
    """

    def __init__(self):
        self._handlers: dict[GameEvent, list[Handler]] = {}

    def subscribe(self, event: GameEvent, handler: Handler):
        """Subscribe a handler; it receives the payload as keyword arguments."""
        handlers = self._handlers.setdefault(event, [])
        if handler not in handlers:
            handlers.append(handler)
            logger.debug("Subscribed %s to '%s'", handler, event.value)

    def subscribe_many(self, events, handler: Handler):
        for event in events:
            self.subscribe(event, handler)

    def unsubscribe(self, event: GameEvent, handler: Handler):
        handlers = self._handlers.get(event)
        if not handlers or handler not in handlers:
            return
        handlers.remove(handler)
        if not handlers:
            del self._handlers[event]

    def publish(self, event: GameEvent, **payload: Any) -> int:
        """
        Deliver an event to all subscribers.

        A failing handler is logged and skipped so the publisher and the
        remaining handlers are unaffected.

        Returns:
            Number of handlers that ran without raising
        """
        handlers = list(self._handlers.get(event, []))
        logger.debug("Publishing '%s' to %d handler(s)", event.value, len(handlers))
        delivered = 0
        for handler in handlers:
            try:
                handler(**payload)
            except Exception:
                logger.exception("Handler %s failed for event '%s'", handler, event.value)
            else:
                delivered += 1
        return delivered
