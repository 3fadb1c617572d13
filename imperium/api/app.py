"""
FastAPI Application - REST API for table clients.

Endpoints:
    GET    /api/v1/health                                  Health check
    POST   /api/v1/sessions                                Create session
    GET    /api/v1/sessions                                List sessions
    GET    /api/v1/sessions/{id}                           Get session
    DELETE /api/v1/sessions/{id}                           End session
    GET    /api/v1/sessions/{id}/state                     Full tracker state
    GET    /api/v1/sessions/{id}/factions                  Faction catalog
    POST   /api/v1/sessions/{id}/players                   Register player
    PATCH  /api/v1/sessions/{id}/players/{pid}             Rename player
    PUT    /api/v1/sessions/{id}/players/{pid}/faction     Change faction
    DELETE /api/v1/sessions/{id}/players/{pid}             Remove player
    PUT    /api/v1/sessions/{id}/speaker                   Set speaker
    POST   /api/v1/sessions/{id}/cards/assign              Assign card
    DELETE /api/v1/sessions/{id}/cards/{initiative}/owner  Unassign card
    POST   /api/v1/sessions/{id}/cards/{initiative}/toggle Toggle activation
    GET    /api/v1/sessions/{id}/cards/validation          Quota check
    POST   /api/v1/sessions/{id}/players/{pid}/pass        Pass
    DELETE /api/v1/sessions/{id}/players/{pid}/pass        Unpass
    POST   /api/v1/sessions/{id}/passes/reset              Clear all passes
    POST   /api/v1/sessions/{id}/turn/advance              Next player
    POST   /api/v1/sessions/{id}/rounds                    Start new round
    PUT    /api/v1/sessions/{id}/phase                     Set game phase
    POST   /api/v1/sessions/{id}/reset                     Reset game
    POST   /api/v1/sessions/{id}/timer/toggle              Start/pause timer
    POST   /api/v1/sessions/{id}/timer/reset               Reset current timer
    PUT    /api/v1/sessions/{id}/players/{pid}/vp          Set VP
    POST   /api/v1/sessions/{id}/players/{pid}/vp/gain     Add VP
    POST   /api/v1/sessions/{id}/players/{pid}/vp/lose     Remove VP
    POST   /api/v1/sessions/{id}/vp/reset                  Zero all VP
    GET    /api/v1/sessions/{id}/vp/win                    Win check
    GET    /api/v1/sessions/{id}/vp/standings              Standings
    GET    /api/v1/sessions/{id}/vp/history                Recent VP changes
    POST   /api/v1/sessions/{id}/agendas                   Open agenda
    POST   /api/v1/sessions/{id}/agendas/current/votes     Record ballot
    PUT    /api/v1/sessions/{id}/agendas/current/outcome   Set outcome
    POST   /api/v1/sessions/{id}/agendas/current/complete  Archive agenda
    DELETE /api/v1/sessions/{id}/agendas/current           Cancel agenda
    GET    /api/v1/sessions/{id}/agendas/current/tally     Tally open agenda
    GET    /api/v1/sessions/{id}/agendas/{aid}/tally       Tally archived agenda
    DELETE /api/v1/sessions/{id}/agendas/{aid}             Delete archived agenda
    DELETE /api/v1/sessions/{id}/agendas                   Clear history
    POST   /api/v1/sessions/{id}/save                      Save
    POST   /api/v1/sessions/{id}/load                      Load saved game
    POST   /api/v1/sessions/{id}/export                    Export to file
    POST   /api/v1/sessions/{id}/import                    Import from file

All responses are JSON with explicit Pydantic schemas.
"""

from typing import Annotated

from .. import __version__
from ..config import ALLOWED_ORIGINS, IMPERIUM_DATA_DIR, configure_logging


def create_app(service=None):
    """
    Create the FastAPI application.

    Args:
        service: Optional TrackerService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    try:
        from fastapi import FastAPI, Query
        from fastapi.middleware.cors import CORSMiddleware
        from fastapi.responses import JSONResponse
    except ImportError:
        raise ImportError(
            "FastAPI not installed. Install with: pip install fastapi uvicorn"
        )

    from .service import TrackerService
    from .schemas import (
        # Request models
        AssignCardRequest,
        ChangeFactionRequest,
        CreateAgendaRequest,
        CreatePlayerRequest,
        CreateSessionRequest,
        ExportRequest,
        ImportRequest,
        OutcomeRequest,
        PhaseRequest,
        RenamePlayerRequest,
        SpeakerRequest,
        VoteRequest,
        VPAdjustRequest,
        VPRequest,
        # Response models
        CommandResponse,
        EndSessionResponse,
        ErrorResponse,
        FactionListResponse,
        GameStateResponse,
        HealthResponse,
        PlayerCreatedResponse,
        SessionListResponse,
        SessionResponse,
        StandingsResponse,
        StorageResponse,
        TallyResponse,
        ValidationResponse,
        VPHistoryResponse,
        WinCheckResponse,
        # Enums
        ErrorCode,
    )

    app = FastAPI(
        title="Imperium Tracker API",
        description="""
Table-side tracker for a strategy board game: strategy cards, initiative
order, passes, agenda votes and victory points.

## Error Codes

| Code | Description |
|------|-------------|
| `SESSION_NOT_FOUND` | Session does not exist |
| `PLAYER_NOT_FOUND` | Player is not registered in the session |
| `CARD_NOT_FOUND` | No strategy card with that initiative |
| `AGENDA_NOT_FOUND` | No archived agenda with that id |
| `NO_OPEN_AGENDA` | No agenda is open |
| `QUOTA_EXCEEDED` | Player already holds their quota of cards |
| `INVALID_VALUE` | Rejected by the game rules |
| `VALIDATION_ERROR` | Invalid input or saved game |
| `STORAGE_ERROR` | Saving or loading failed |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_service = service or TrackerService(data_dir=IMPERIUM_DATA_DIR)

    # =========================================================================
    # Error helpers
    # =========================================================================

    status_codes = {
        ErrorCode.SESSION_NOT_FOUND: 404,
        ErrorCode.AGENDA_NOT_FOUND: 404,
        ErrorCode.STORAGE_ERROR: 500,
        ErrorCode.INTERNAL_ERROR: 500,
    }

    def make_error_response(error: ErrorResponse) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_codes.get(error.error_code, 400),
            content=error.model_dump(mode="json"),
        )

    def respond(result):
        if isinstance(result, ErrorResponse):
            return make_error_response(result)
        return result

    errors = {400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}}

    # =========================================================================
    # Health
    # =========================================================================

    @app.get("/api/v1/health", response_model=HealthResponse, tags=["Health"])
    async def health() -> HealthResponse:
        return HealthResponse(version=__version__)

    # =========================================================================
    # Session Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions",
        response_model=SessionResponse,
        tags=["Sessions"],
        summary="Create a new tracked game",
    )
    async def create_session(body: CreateSessionRequest) -> SessionResponse:
        """
        Create a new session with the eight strategy cards dealt out.

        Pass a saved game document in `state` to resume it.
        """
        return api_service.create_session(body)

    @app.get(
        "/api/v1/sessions",
        response_model=SessionListResponse,
        tags=["Sessions"],
        summary="List active sessions",
    )
    async def list_sessions() -> SessionListResponse:
        return api_service.list_sessions()

    @app.get(
        "/api/v1/sessions/{session_id}",
        response_model=SessionResponse,
        responses=errors,
        tags=["Sessions"],
    )
    async def get_session(session_id: str):
        return respond(api_service.get_session(session_id))

    @app.delete(
        "/api/v1/sessions/{session_id}",
        response_model=EndSessionResponse,
        tags=["Sessions"],
        summary="End a session",
    )
    async def end_session(session_id: str) -> EndSessionResponse:
        return api_service.end_session(session_id)

    @app.get(
        "/api/v1/sessions/{session_id}/state",
        response_model=GameStateResponse,
        responses=errors,
        tags=["Sessions"],
        summary="Get the full tracker state",
    )
    async def get_state(session_id: str):
        return respond(api_service.get_game_state(session_id))

    # =========================================================================
    # Player Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/sessions/{session_id}/factions",
        response_model=FactionListResponse,
        responses=errors,
        tags=["Players"],
    )
    async def list_factions(
        session_id: str,
        available: Annotated[bool, Query(description="Only factions nobody has picked")] = False,
    ):
        return respond(api_service.list_factions(session_id, available_only=available))

    @app.post(
        "/api/v1/sessions/{session_id}/players",
        response_model=PlayerCreatedResponse,
        responses=errors,
        tags=["Players"],
        summary="Register a player",
    )
    async def create_player(session_id: str, body: CreatePlayerRequest):
        return respond(api_service.create_player(session_id, body))

    @app.patch(
        "/api/v1/sessions/{session_id}/players/{player_id}",
        response_model=CommandResponse,
        responses=errors,
        tags=["Players"],
    )
    async def rename_player(session_id: str, player_id: str, body: RenamePlayerRequest):
        return respond(api_service.rename_player(session_id, player_id, body))

    @app.put(
        "/api/v1/sessions/{session_id}/players/{player_id}/faction",
        response_model=CommandResponse,
        responses=errors,
        tags=["Players"],
    )
    async def change_faction(session_id: str, player_id: str, body: ChangeFactionRequest):
        return respond(api_service.change_faction(session_id, player_id, body))

    @app.delete(
        "/api/v1/sessions/{session_id}/players/{player_id}",
        response_model=CommandResponse,
        responses=errors,
        tags=["Players"],
    )
    async def delete_player(session_id: str, player_id: str):
        return respond(api_service.delete_player(session_id, player_id))

    @app.put(
        "/api/v1/sessions/{session_id}/speaker",
        response_model=CommandResponse,
        responses=errors,
        tags=["Players"],
    )
    async def set_speaker(session_id: str, body: SpeakerRequest):
        return respond(api_service.set_speaker(session_id, body))

    # =========================================================================
    # Strategy Card Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions/{session_id}/cards/assign",
        response_model=CommandResponse,
        responses=errors,
        tags=["Strategy Cards"],
        summary="Give a strategy card to a player",
    )
    async def assign_card(session_id: str, body: AssignCardRequest):
        """
        Assign a card, taking it from its current owner if needed.

        Fails with `QUOTA_EXCEEDED` when the player already holds their
        quota (two cards with 3 or 4 players, otherwise one).
        """
        return respond(api_service.assign_card(session_id, body))

    @app.delete(
        "/api/v1/sessions/{session_id}/cards/{initiative}/owner",
        response_model=CommandResponse,
        responses=errors,
        tags=["Strategy Cards"],
    )
    async def unassign_card(session_id: str, initiative: int):
        return respond(api_service.unassign_card(session_id, initiative))

    @app.post(
        "/api/v1/sessions/{session_id}/cards/{initiative}/toggle",
        response_model=CommandResponse,
        responses=errors,
        tags=["Strategy Cards"],
    )
    async def toggle_activation(session_id: str, initiative: int):
        return respond(api_service.toggle_activation(session_id, initiative))

    @app.get(
        "/api/v1/sessions/{session_id}/cards/validation",
        response_model=ValidationResponse,
        responses=errors,
        tags=["Strategy Cards"],
    )
    async def validate_assignments(session_id: str):
        return respond(api_service.validate_assignments(session_id))

    # =========================================================================
    # Turn Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions/{session_id}/players/{player_id}/pass",
        response_model=CommandResponse,
        responses=errors,
        tags=["Turns"],
    )
    async def pass_player(session_id: str, player_id: str):
        return respond(api_service.pass_player(session_id, player_id))

    @app.delete(
        "/api/v1/sessions/{session_id}/players/{player_id}/pass",
        response_model=CommandResponse,
        responses=errors,
        tags=["Turns"],
    )
    async def unpass_player(session_id: str, player_id: str):
        return respond(api_service.unpass_player(session_id, player_id))

    @app.post(
        "/api/v1/sessions/{session_id}/passes/reset",
        response_model=CommandResponse,
        responses=errors,
        tags=["Turns"],
    )
    async def reset_passes(session_id: str):
        return respond(api_service.reset_passes(session_id))

    @app.post(
        "/api/v1/sessions/{session_id}/turn/advance",
        response_model=CommandResponse,
        responses=errors,
        tags=["Turns"],
    )
    async def advance_turn(session_id: str):
        return respond(api_service.advance_turn(session_id))

    @app.post(
        "/api/v1/sessions/{session_id}/rounds",
        response_model=CommandResponse,
        responses=errors,
        tags=["Turns"],
        summary="Start a new round",
    )
    async def start_new_round(session_id: str):
        """Unpicked cards gain a trade good; cards, passes and the turn pointer reset."""
        return respond(api_service.start_new_round(session_id))

    @app.put(
        "/api/v1/sessions/{session_id}/phase",
        response_model=CommandResponse,
        responses=errors,
        tags=["Turns"],
    )
    async def set_phase(session_id: str, body: PhaseRequest):
        return respond(api_service.set_phase(session_id, body))

    @app.post(
        "/api/v1/sessions/{session_id}/reset",
        response_model=CommandResponse,
        responses=errors,
        tags=["Sessions"],
    )
    async def reset_game(session_id: str):
        return respond(api_service.reset_game(session_id))

    @app.post(
        "/api/v1/sessions/{session_id}/timer/toggle",
        response_model=CommandResponse,
        responses=errors,
        tags=["Turns"],
    )
    async def toggle_timer(session_id: str):
        return respond(api_service.toggle_timer(session_id))

    @app.post(
        "/api/v1/sessions/{session_id}/timer/reset",
        response_model=CommandResponse,
        responses=errors,
        tags=["Turns"],
    )
    async def reset_timer(session_id: str):
        return respond(api_service.reset_timer(session_id))

    # =========================================================================
    # Victory Point Endpoints
    # =========================================================================

    @app.put(
        "/api/v1/sessions/{session_id}/players/{player_id}/vp",
        response_model=CommandResponse,
        responses=errors,
        tags=["Victory Points"],
    )
    async def set_victory_points(session_id: str, player_id: str, body: VPRequest):
        return respond(api_service.set_victory_points(session_id, player_id, body))

    @app.post(
        "/api/v1/sessions/{session_id}/players/{player_id}/vp/gain",
        response_model=CommandResponse,
        responses=errors,
        tags=["Victory Points"],
    )
    async def gain_victory_points(session_id: str, player_id: str, body: VPAdjustRequest):
        return respond(api_service.adjust_victory_points(session_id, player_id, body, gain=True))

    @app.post(
        "/api/v1/sessions/{session_id}/players/{player_id}/vp/lose",
        response_model=CommandResponse,
        responses=errors,
        tags=["Victory Points"],
    )
    async def lose_victory_points(session_id: str, player_id: str, body: VPAdjustRequest):
        return respond(api_service.adjust_victory_points(session_id, player_id, body, gain=False))

    @app.post(
        "/api/v1/sessions/{session_id}/vp/reset",
        response_model=CommandResponse,
        responses=errors,
        tags=["Victory Points"],
    )
    async def reset_victory_points(session_id: str):
        return respond(api_service.reset_victory_points(session_id))

    @app.get(
        "/api/v1/sessions/{session_id}/vp/win",
        response_model=WinCheckResponse,
        responses=errors,
        tags=["Victory Points"],
    )
    async def check_win(session_id: str):
        return respond(api_service.check_win(session_id))

    @app.get(
        "/api/v1/sessions/{session_id}/vp/standings",
        response_model=StandingsResponse,
        responses=errors,
        tags=["Victory Points"],
    )
    async def get_standings(session_id: str):
        return respond(api_service.get_standings(session_id))

    @app.get(
        "/api/v1/sessions/{session_id}/vp/history",
        response_model=VPHistoryResponse,
        responses=errors,
        tags=["Victory Points"],
    )
    async def get_vp_history(
        session_id: str,
        count: Annotated[int, Query(ge=1, le=100)] = 10,
    ):
        return respond(api_service.get_vp_history(session_id, count))

    # =========================================================================
    # Agenda Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions/{session_id}/agendas",
        response_model=CommandResponse,
        responses=errors,
        tags=["Agendas"],
        summary="Open a new agenda",
    )
    async def create_agenda(session_id: str, body: CreateAgendaRequest):
        return respond(api_service.create_agenda(session_id, body))

    @app.post(
        "/api/v1/sessions/{session_id}/agendas/current/votes",
        response_model=CommandResponse,
        responses=errors,
        tags=["Agendas"],
    )
    async def record_vote(session_id: str, body: VoteRequest):
        return respond(api_service.record_vote(session_id, body))

    @app.put(
        "/api/v1/sessions/{session_id}/agendas/current/outcome",
        response_model=CommandResponse,
        responses=errors,
        tags=["Agendas"],
    )
    async def set_outcome(session_id: str, body: OutcomeRequest):
        return respond(api_service.set_outcome(session_id, body))

    @app.post(
        "/api/v1/sessions/{session_id}/agendas/current/complete",
        response_model=CommandResponse,
        responses=errors,
        tags=["Agendas"],
    )
    async def complete_agenda(session_id: str):
        return respond(api_service.complete_agenda(session_id))

    @app.delete(
        "/api/v1/sessions/{session_id}/agendas/current",
        response_model=CommandResponse,
        responses=errors,
        tags=["Agendas"],
    )
    async def cancel_agenda(session_id: str):
        return respond(api_service.cancel_agenda(session_id))

    @app.get(
        "/api/v1/sessions/{session_id}/agendas/current/tally",
        response_model=TallyResponse,
        responses=errors,
        tags=["Agendas"],
    )
    async def get_current_tally(session_id: str):
        return respond(api_service.get_tally(session_id))

    @app.get(
        "/api/v1/sessions/{session_id}/agendas/{agenda_id}/tally",
        response_model=TallyResponse,
        responses=errors,
        tags=["Agendas"],
    )
    async def get_agenda_tally(session_id: str, agenda_id: str):
        return respond(api_service.get_tally(session_id, agenda_id))

    @app.delete(
        "/api/v1/sessions/{session_id}/agendas/{agenda_id}",
        response_model=CommandResponse,
        responses=errors,
        tags=["Agendas"],
    )
    async def delete_agenda(session_id: str, agenda_id: str):
        return respond(api_service.delete_agenda(session_id, agenda_id))

    @app.delete(
        "/api/v1/sessions/{session_id}/agendas",
        response_model=CommandResponse,
        responses=errors,
        tags=["Agendas"],
    )
    async def clear_agenda_history(session_id: str):
        return respond(api_service.clear_agenda_history(session_id))

    # =========================================================================
    # Persistence Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions/{session_id}/save",
        response_model=StorageResponse,
        responses=errors,
        tags=["Persistence"],
    )
    async def save_game(session_id: str):
        return respond(api_service.save_game(session_id))

    @app.post(
        "/api/v1/sessions/{session_id}/load",
        response_model=CommandResponse,
        responses=errors,
        tags=["Persistence"],
    )
    async def load_game(session_id: str):
        return respond(api_service.load_game(session_id))

    @app.post(
        "/api/v1/sessions/{session_id}/export",
        response_model=StorageResponse,
        responses=errors,
        tags=["Persistence"],
    )
    async def export_game(session_id: str, body: ExportRequest):
        return respond(api_service.export_game(session_id, body))

    @app.post(
        "/api/v1/sessions/{session_id}/import",
        response_model=CommandResponse,
        responses=errors,
        tags=["Persistence"],
    )
    async def import_game(session_id: str, body: ImportRequest):
        return respond(api_service.import_game(session_id, body))

    return app


# For running directly: uvicorn imperium.api.app:app
app = None
try:
    configure_logging()
    app = create_app()
except ImportError:
    # FastAPI not installed
    pass
