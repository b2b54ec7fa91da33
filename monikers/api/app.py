"""
FastAPI Application - REST API for the Monikers client app.

Endpoints:
    GET    /api/v1/game                      Get game state
    POST   /api/v1/game/turn/start           Start a turn (starts a game if needed)
    POST   /api/v1/game/turn/end             Stop the running turn
    POST   /api/v1/game/card/correct         Current card guessed
    POST   /api/v1/game/card/skip            Current card skipped
    DELETE /api/v1/game                      End the game early
    GET    /api/v1/review                    Cards of the finished game
    POST   /api/v1/review                    Submit ratings
    GET    /api/v1/pool                      Cards eligible for the next game
    GET    /api/v1/reviewed                  Retired cards
    DELETE /api/v1/reviewed                  Reset reviews
    GET    /api/v1/settings                  Get preferences
    PUT    /api/v1/settings                  Update preferences
    GET    /api/v1/cards/custom              List custom cards
    POST   /api/v1/cards/custom              Add a custom card
    PATCH  /api/v1/cards/custom/{card_id}    Reclassify a custom card
    DELETE /api/v1/cards/custom/{card_id}    Delete a custom card
    WS     /api/v1/game/ws                   Event feed (ticks, round changes, ...)

The countdown runs on the server's event loop; clients follow it through
the WebSocket feed or by polling GET /game.

Gameplay actions never fail: a call made at the wrong moment returns the
unchanged state with applied=false.
"""

from contextlib import asynccontextmanager
from functools import partial
from typing import Union
import asyncio
import json
import logging

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from ..engine_core.events import GameEvent
from .service import APIService, ReviewNotAvailable
from .schemas import (
    CardInfo,
    GameStateResponse,
    ReviewCardsResponse,
    ReviewRequest,
    ReviewResponse,
    PoolResponse,
    ReviewedCardsResponse,
    SettingsRequest,
    SettingsResponse,
    CustomCardRequest,
    CustomCardUpdate,
    CustomCardsResponse,
    ErrorCode,
    ErrorResponse,
    HealthResponse,
)

logger = logging.getLogger(__name__)


def create_app(service: APIService | None = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    api_service = service or APIService()

    # WebSocket connections and in-flight broadcast tasks
    ws_connections: list[WebSocket] = []
    pending_tasks: set[asyncio.Task] = set()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        api_service.shutdown()

    app = FastAPI(
        title="Monikers Engine API",
        description="""
Session engine for the cooperative party game Monikers.

## Flow

1. `POST /game/turn/start` starts round 1 and the first turn
2. `POST /game/card/correct` / `POST /game/card/skip` while the turn runs
3. The turn ends when the timer expires, on `POST /game/turn/end`,
   or when the last card is guessed
4. After round 3, `GET /review` and `POST /review` retire rated cards

## Error Codes

| Code | Description |
|------|-------------|
| `CARD_NOT_FOUND` | Custom card does not exist |
| `VALIDATION_ERROR` | Invalid request value |
| `REVIEW_NOT_AVAILABLE` | No finished game awaiting review |
| `INTERNAL_ERROR` | Unexpected server failure |
        """,
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=api_service.settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: dict | None = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    @app.exception_handler(Exception)
    async def unexpected_error(request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return make_error_response(
            ErrorCode.INTERNAL_ERROR,
            "Internal server error",
            status_code=500,
        )

    async def broadcast(message: dict):
        """Send a message to every WebSocket client, dropping dead ones."""
        dead_connections = []
        for ws in list(ws_connections):
            try:
                await ws.send_json(message)
            except (WebSocketDisconnect, RuntimeError):
                dead_connections.append(ws)
        for ws in dead_connections:
            if ws in ws_connections:
                ws_connections.remove(ws)

    def forward_event(event: GameEvent, **payload):
        """Bus handler: push the event to WebSocket clients."""
        if not ws_connections:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Published outside the event loop (e.g. a manual clock); nobody to push to
            return
        task = loop.create_task(broadcast({"type": event.value, "payload": payload}))
        pending_tasks.add(task)
        task.add_done_callback(pending_tasks.discard)

    for event in GameEvent:
        api_service.bus.subscribe(event, partial(forward_event, event))

    # =========================================================================
    # Game Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/game",
        response_model=GameStateResponse,
        tags=["Game"],
        summary="Get current game state",
    )
    async def get_game_state() -> GameStateResponse:
        return api_service.get_game_state()

    @app.post(
        "/api/v1/game/turn/start",
        response_model=GameStateResponse,
        tags=["Game"],
        summary="Start a turn",
    )
    async def start_turn() -> GameStateResponse:
        """
        Start a timed turn. Before round 1 or after game over this first
        draws a new game's cards from the pool.
        """
        return api_service.start_turn()

    @app.post(
        "/api/v1/game/turn/end",
        response_model=GameStateResponse,
        tags=["Game"],
        summary="End the running turn",
    )
    async def end_turn() -> GameStateResponse:
        return api_service.end_turn()

    @app.post(
        "/api/v1/game/card/correct",
        response_model=GameStateResponse,
        tags=["Game"],
        summary="Mark the current card as guessed",
    )
    async def correct_guess() -> GameStateResponse:
        return api_service.correct_guess()

    @app.post(
        "/api/v1/game/card/skip",
        response_model=GameStateResponse,
        tags=["Game"],
        summary="Skip the current card",
    )
    async def skip_card() -> GameStateResponse:
        return api_service.skip_card()

    @app.delete(
        "/api/v1/game",
        response_model=GameStateResponse,
        tags=["Game"],
        summary="End the game early",
    )
    async def end_game() -> GameStateResponse:
        return api_service.end_game()

    # =========================================================================
    # Review Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/review",
        response_model=ReviewCardsResponse,
        tags=["Review"],
        summary="Cards of the finished game",
    )
    async def get_review_cards() -> ReviewCardsResponse:
        return api_service.get_review_cards()

    @app.post(
        "/api/v1/review",
        response_model=ReviewResponse,
        responses={409: {"model": ErrorResponse}},
        tags=["Review"],
        summary="Submit card ratings",
    )
    async def submit_review(body: ReviewRequest) -> Union[ReviewResponse, JSONResponse]:
        """
        Rate the finished game's cards. Good and bad cards are retired from
        future games; undecided cards stay in the pool.

        **Request Body:**
        ```json
        {"ratings": {"<card_id>": "good", "<card_id>": "bad"}}
        ```
        """
        try:
            return api_service.submit_review(body.ratings)
        except ReviewNotAvailable as e:
            return make_error_response(ErrorCode.REVIEW_NOT_AVAILABLE, str(e), status_code=409)

    # =========================================================================
    # Pool Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/pool",
        response_model=PoolResponse,
        tags=["Cards"],
        summary="Cards eligible for the next game",
    )
    async def get_pool() -> PoolResponse:
        return api_service.get_pool()

    @app.get(
        "/api/v1/reviewed",
        response_model=ReviewedCardsResponse,
        tags=["Cards"],
        summary="Retired cards",
    )
    async def get_reviewed() -> ReviewedCardsResponse:
        return api_service.get_reviewed()

    @app.delete(
        "/api/v1/reviewed",
        response_model=ReviewedCardsResponse,
        tags=["Cards"],
        summary="Reset reviews and restore the full deck",
    )
    async def reset_reviews() -> ReviewedCardsResponse:
        return api_service.reset_reviews()

    @app.get(
        "/api/v1/cards/custom",
        response_model=CustomCardsResponse,
        tags=["Cards"],
        summary="List custom cards",
    )
    async def list_custom_cards() -> CustomCardsResponse:
        return api_service.list_custom_cards()

    @app.post(
        "/api/v1/cards/custom",
        response_model=CardInfo,
        status_code=201,
        responses={400: {"model": ErrorResponse}},
        tags=["Cards"],
        summary="Add a custom card",
    )
    async def add_custom_card(body: CustomCardRequest) -> Union[CardInfo, JSONResponse]:
        try:
            return api_service.add_custom_card(body.text, body.is_family)
        except ValueError as e:
            return make_error_response(ErrorCode.VALIDATION_ERROR, str(e))

    @app.patch(
        "/api/v1/cards/custom/{card_id}",
        response_model=CardInfo,
        responses={404: {"model": ErrorResponse}},
        tags=["Cards"],
        summary="Reclassify a custom card",
    )
    async def update_custom_card(card_id: str, body: CustomCardUpdate) -> Union[CardInfo, JSONResponse]:
        card = api_service.update_custom_card_family(card_id, body.is_family)
        if card is None:
            return make_error_response(
                ErrorCode.CARD_NOT_FOUND,
                f"Card {card_id} not found",
                status_code=404,
            )
        return card

    @app.delete(
        "/api/v1/cards/custom/{card_id}",
        status_code=204,
        responses={404: {"model": ErrorResponse}},
        tags=["Cards"],
        summary="Delete a custom card",
    )
    async def remove_custom_card(card_id: str):
        if not api_service.remove_custom_card(card_id):
            return make_error_response(
                ErrorCode.CARD_NOT_FOUND,
                f"Card {card_id} not found",
                status_code=404,
            )
        return Response(status_code=204)

    # =========================================================================
    # Settings Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/settings",
        response_model=SettingsResponse,
        tags=["Settings"],
        summary="Get preferences",
    )
    async def get_settings() -> SettingsResponse:
        return api_service.get_settings()

    @app.put(
        "/api/v1/settings",
        response_model=SettingsResponse,
        tags=["Settings"],
        summary="Update preferences",
    )
    async def update_settings(body: SettingsRequest) -> SettingsResponse:
        """Switching decks reloads the pool."""
        return api_service.update_settings(body)

    # =========================================================================
    # WebSocket Endpoint
    # =========================================================================

    @app.websocket("/api/v1/game/ws")
    async def websocket_endpoint(websocket: WebSocket):
        """
        WebSocket for real-time updates.

        Messages from server ({"type": ..., "payload": {...}}):
        - state: full game state (sent on connect)
        - tick, turn_started, turn_ended, card_guessed, card_skipped
        - round_advanced, game_started, game_over, game_reset
        - review_submitted, pool_changed, settings_changed

        Messages from client:
        - ping: Keep-alive
        """
        await websocket.accept()
        ws_connections.append(websocket)

        try:
            await websocket.send_json({
                "type": "state",
                "payload": api_service.get_game_state().model_dump(mode="json"),
            })

            while True:
                data = await websocket.receive_text()
                try:
                    message = json.loads(data)
                except json.JSONDecodeError:
                    await websocket.send_json({
                        "type": "error",
                        "payload": {"message": "Invalid JSON"},
                    })
                    continue
                if isinstance(message, dict) and message.get("type") == "ping":
                    await websocket.send_json({"type": "pong"})

        except WebSocketDisconnect:
            logger.debug("WebSocket client disconnected")
        finally:
            if websocket in ws_connections:
                ws_connections.remove(websocket)

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        return HealthResponse()

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Monikers Engine API",
            "version": "1.0.0",
            "docs": "/api/docs",
            "health": "/health",
        }

    return app
