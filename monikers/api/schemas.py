"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the exact contract between a client app (the view
layer) and the engine. Every gameplay response carries the full game
state so the client can redraw from a single payload.

Error Codes:
- CARD_NOT_FOUND: Custom card id does not exist
- VALIDATION_ERROR: Request value is invalid (e.g. blank card text)
- REVIEW_NOT_AVAILABLE: Review submitted before game over or twice
- INTERNAL_ERROR: Unexpected failure
"""

from enum import Enum
from typing import Literal, Optional, Any
from pydantic import BaseModel, Field

from ..engine_core.state import CardClass
from ..session.review import Rating


CardsPerGame = Literal[5, 10, 15, 20, 25, 30]


# =============================================================================
# Enums
# =============================================================================

class GameStatus(str, Enum):
    """Coarse game status for client routing."""
    IDLE = "idle"
    TURN_RUNNING = "turn_running"
    BETWEEN_TURNS = "between_turns"
    GAME_OVER = "game_over"


class ErrorCode(str, Enum):
    """Structured error codes."""
    CARD_NOT_FOUND = "CARD_NOT_FOUND"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    REVIEW_NOT_AVAILABLE = "REVIEW_NOT_AVAILABLE"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class CardInfo(BaseModel):
    """Card information for display."""
    card_id: str
    text: str
    classification: CardClass


# =============================================================================
# Request Models
# =============================================================================

class ReviewRequest(BaseModel):
    """Ratings keyed by card id; missing cards count as undecided."""
    ratings: dict[str, Rating] = Field(default_factory=dict)


class SettingsRequest(BaseModel):
    """Partial update of player preferences."""
    cards_per_game: Optional[CardsPerGame] = None
    use_family_cards: Optional[bool] = None


class CustomCardRequest(BaseModel):
    """Add a hand-entered card."""
    text: str = Field(min_length=1, max_length=200)
    is_family: bool = False


class CustomCardUpdate(BaseModel):
    """Reclassify a custom card."""
    is_family: bool


# =============================================================================
# Response Models
# =============================================================================

class GameStateResponse(BaseModel):
    """Complete game state for display."""
    status: GameStatus
    title: str
    status_message: str
    round_number: int = Field(ge=0)
    round_name: Optional[str] = None
    current_card: Optional[CardInfo] = None
    deck_size: int = 0
    selected_count: int = 0
    turn_count: int = 0
    correct_this_turn: int = 0
    skipped_this_turn: int = 0
    is_running: bool = False
    time_remaining: int = 0
    has_reviewed: bool = False
    review_available: bool = False
    applied: bool = Field(True, description="False when the action was a no-op")


class ReviewCardsResponse(BaseModel):
    """Cards of the finished game, awaiting ratings."""
    cards: list[CardInfo] = Field(default_factory=list)
    review_available: bool = False
    has_reviewed: bool = False


class ReviewResponse(BaseModel):
    """Result of a submitted review."""
    kept: list[str] = Field(default_factory=list)
    discarded: list[str] = Field(default_factory=list)
    pool_size: int = 0


class PoolResponse(BaseModel):
    """Cards eligible for the next game."""
    use_family_cards: bool
    count: int
    cards: list[CardInfo] = Field(default_factory=list)


class ReviewedCardsResponse(BaseModel):
    """Retired cards, by rating."""
    good: list[CardInfo] = Field(default_factory=list)
    bad: list[CardInfo] = Field(default_factory=list)


class SettingsResponse(BaseModel):
    """Current preferences."""
    cards_per_game: CardsPerGame
    use_family_cards: bool
    turn_duration: int
    custom_cards_enabled: bool


class CustomCardsResponse(BaseModel):
    cards: list[CardInfo] = Field(default_factory=list)
    count: int = 0


class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str
    error_code: ErrorCode
    details: Optional[dict[str, Any]] = None


class HealthResponse(BaseModel):
    status: str = "healthy"
    service: str = "monikers-engine"
    version: str = "1.0.0"
