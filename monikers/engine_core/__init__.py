"""
Engine Core - Game-agnostic building blocks.

Contains:
- State: cards, round phases, the per-game Session record
- Events: change notifications for outer layers
- Timer: cancellable countdown with injectable scheduler
"""

from .state import (
    Card,
    CardClass,
    DeckVariant,
    RoundPhase,
    Session,
    FIRST_ROUND,
    LAST_ROUND,
    DEFAULT_TURN_DURATION,
)
from .events import EventBus, GameEvent
from .timer import Scheduler, AsyncioScheduler, ManualScheduler, Countdown

__all__ = [
    "Card",
    "CardClass",
    "DeckVariant",
    "RoundPhase",
    "Session",
    "FIRST_ROUND",
    "LAST_ROUND",
    "DEFAULT_TURN_DURATION",
    "EventBus",
    "GameEvent",
    "Scheduler",
    "AsyncioScheduler",
    "ManualScheduler",
    "Countdown",
]
