"""
API Service - Business logic layer between API and engine.

The service:
1. Manages sessions
2. Translates API requests to engine calls
3. Turns engine booleans into structured errors
4. Formats state for table clients

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
Every method returns a response model or an ErrorResponse; nothing here
raises for a rejected game action.
"""

from __future__ import annotations
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError

from .schemas import (
    # Requests
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
    # Responses
    CommandResponse,
    EndSessionResponse,
    ErrorResponse,
    FactionListResponse,
    GameStateResponse,
    PlayerCreatedResponse,
    SessionListResponse,
    SessionResponse,
    StandingsResponse,
    StorageResponse,
    TallyResponse,
    ValidationResponse,
    VPHistoryResponse,
    WinCheckResponse,
    # Shared
    AgendaInfo,
    BallotInfo,
    FactionInfo,
    GameStateDocument,
    InvalidPlayerInfo,
    PlayerInfo,
    StandingInfo,
    StrategyCardInfo,
    VPChangeInfo,
    # Enums
    ErrorCode,
    PhaseName,
)
from ..config import IMPERIUM_STORAGE_KEY
from ..engine_core.state import Agenda, GamePhase, GameState, Player, StrategyCard
from ..engine_core.initiative import effective_initiative
from ..games.twilight.cards import get_card_color, get_card_definition
from ..games.twilight.factions import FACTIONS, get_faction
from ..session import GameSession, SessionManager
from ..storage import StateStorage, default_export_name

logger = logging.getLogger(__name__)

Response = Union[CommandResponse, ErrorResponse]


def _error(error_code: ErrorCode, message: str, details: Optional[dict] = None) -> ErrorResponse:
    return ErrorResponse(error=message, error_code=error_code, details=details)


@dataclass
class TrackerService:
    """
    Main API service for table clients.

    Usage:
        service = TrackerService()

        session = service.create_session(CreateSessionRequest())
        service.create_player(session.session_id, CreatePlayerRequest(...))
        service.assign_card(session.session_id, AssignCardRequest(...))
    """
    session_manager: SessionManager = field(default_factory=SessionManager)
    data_dir: Optional[Union[str, Path]] = None

    # Storage per session, created on first use
    _storages: dict[str, StateStorage] = field(default_factory=dict)

    # =========================================================================
    # Sessions
    # =========================================================================

    def create_session(self, request: CreateSessionRequest) -> SessionResponse:
        state = None
        if request.state is not None:
            state = GameState.from_dict(request.state.to_document())

        session = self.session_manager.create_session(state=state)
        if request.autosave:
            session.enable_autosave(self._storage_for(session.session_id))
        return self._session_to_response(session)

    def get_session(self, session_id: str) -> Union[SessionResponse, ErrorResponse]:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._session_not_found(session_id)
        return self._session_to_response(session)

    def end_session(self, session_id: str) -> EndSessionResponse:
        success = self.session_manager.end_session(session_id)
        self._storages.pop(session_id, None)
        return EndSessionResponse(success=success, session_id=session_id)

    def list_sessions(self) -> SessionListResponse:
        sessions = self.session_manager.list_active_sessions()
        return SessionListResponse(sessions=sessions, count=len(sessions))

    def get_game_state(self, session_id: str) -> Union[GameStateResponse, ErrorResponse]:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._session_not_found(session_id)
        return self._build_game_state(session)

    # =========================================================================
    # Players
    # =========================================================================

    def list_factions(
        self, session_id: str, available_only: bool = False
    ) -> Union[FactionListResponse, ErrorResponse]:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._session_not_found(session_id)

        factions = session.players.get_available_factions() if available_only else list(FACTIONS)
        return FactionListResponse(
            factions=[
                FactionInfo(faction_id=f.faction_id, name=f.name, expansion=f.expansion)
                for f in factions
            ],
            count=len(factions),
        )

    def create_player(
        self, session_id: str, request: CreatePlayerRequest
    ) -> Union[PlayerCreatedResponse, ErrorResponse]:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._session_not_found(session_id)

        creation = session.players.create_player(request.name, request.faction_id)
        if not creation.success:
            return _error(
                ErrorCode.VALIDATION_ERROR,
                "; ".join(creation.errors),
                details={"errors": creation.errors},
            )
        return PlayerCreatedResponse(
            success=True,
            player_id=creation.player_id,
            state=self._build_game_state(session),
        )

    def rename_player(self, session_id: str, player_id: str, request: RenamePlayerRequest) -> Response:
        return self._run(
            session_id,
            lambda s: s.players.rename_player(player_id, request.name),
            player_id=player_id,
            message="Invalid player name",
        )

    def change_faction(self, session_id: str, player_id: str, request: ChangeFactionRequest) -> Response:
        return self._run(
            session_id,
            lambda s: s.players.change_faction(player_id, request.faction_id),
            player_id=player_id,
            message=f"Faction {request.faction_id} is unknown or already taken",
        )

    def delete_player(self, session_id: str, player_id: str) -> Response:
        return self._run(
            session_id, lambda s: s.players.delete_player(player_id), player_id=player_id
        )

    def set_speaker(self, session_id: str, request: SpeakerRequest) -> Response:
        return self._run(
            session_id,
            lambda s: s.players.set_speaker(request.player_id),
            player_id=request.player_id,
        )

    # =========================================================================
    # Strategy cards
    # =========================================================================

    def assign_card(self, session_id: str, request: AssignCardRequest) -> Response:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._session_not_found(session_id)

        valid, reason = session.cards.validate_assignment(request.player_id, request.initiative)
        if not valid:
            code = ErrorCode.PLAYER_NOT_FOUND if reason == "Player not found" else ErrorCode.CARD_NOT_FOUND
            return _error(code, reason)

        if not session.cards.assign_card(request.player_id, request.initiative):
            max_cards = session.cards.max_cards_per_player()
            return _error(
                ErrorCode.QUOTA_EXCEEDED,
                f"Player already has the maximum of {max_cards} card(s)",
                details={"max_cards": max_cards},
            )
        return self._command_response(session)

    def unassign_card(self, session_id: str, initiative: int) -> Response:
        return self._run(
            session_id,
            lambda s: s.cards.unassign_card(initiative),
            initiative=initiative,
            message=f"Strategy card {initiative} is not assigned",
        )

    def toggle_activation(self, session_id: str, initiative: int) -> Response:
        return self._run(
            session_id, lambda s: s.cards.toggle_activation(initiative), initiative=initiative
        )

    def validate_assignments(self, session_id: str) -> Union[ValidationResponse, ErrorResponse]:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._session_not_found(session_id)

        validation = session.cards.validate_all_assigned()
        return ValidationResponse(
            valid=validation.valid,
            required_cards=validation.required_cards,
            invalid_players=[
                InvalidPlayerInfo(
                    player_id=p.player_id,
                    name=p.name,
                    card_count=p.card_count,
                    required_cards=p.required_cards,
                )
                for p in validation.invalid_players
            ],
        )

    # =========================================================================
    # Turns, passes and rounds
    # =========================================================================

    def pass_player(self, session_id: str, player_id: str) -> Response:
        return self._run(
            session_id, lambda s: s.passes.mark_passed(player_id), player_id=player_id
        )

    def unpass_player(self, session_id: str, player_id: str) -> Response:
        return self._run(session_id, lambda s: s.passes.unpass(player_id), player_id=player_id)

    def reset_passes(self, session_id: str) -> Response:
        return self._run(session_id, lambda s: s.passes.reset_all_passes())

    def advance_turn(self, session_id: str) -> Response:
        return self._run(
            session_id,
            lambda s: s.initiative.advance_turn(),
            message="No active players left in this round",
        )

    def start_new_round(self, session_id: str) -> Response:
        return self._run(session_id, lambda s: s.start_new_round())

    def set_phase(self, session_id: str, request: PhaseRequest) -> Response:
        return self._run(
            session_id, lambda s: s.set_game_phase(GamePhase(request.phase.value))
        )

    def reset_game(self, session_id: str) -> Response:
        return self._run(session_id, lambda s: s.reset_game().success)

    # =========================================================================
    # Timer
    # =========================================================================

    def toggle_timer(self, session_id: str) -> Response:
        return self._run(session_id, lambda s: s.timer.toggle())

    def reset_timer(self, session_id: str) -> Response:
        def reset(s: GameSession) -> bool:
            s.timer.reset()
            return True
        return self._run(session_id, reset)

    # =========================================================================
    # Victory points
    # =========================================================================

    def set_victory_points(self, session_id: str, player_id: str, request: VPRequest) -> Response:
        return self._run(
            session_id,
            lambda s: s.victory.set_player_vp(player_id, request.points),
            player_id=player_id,
        )

    def adjust_victory_points(
        self, session_id: str, player_id: str, request: VPAdjustRequest, gain: bool = True
    ) -> Response:
        def adjust(s: GameSession) -> bool:
            if gain:
                return s.victory.increment_player_vp(player_id, request.amount)
            return s.victory.decrement_player_vp(player_id, request.amount)
        return self._run(session_id, adjust, player_id=player_id)

    def reset_victory_points(self, session_id: str) -> Response:
        return self._run(session_id, lambda s: s.victory.reset_all_vps())

    def check_win(self, session_id: str) -> Union[WinCheckResponse, ErrorResponse]:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._session_not_found(session_id)

        win_check = session.victory.check_win_condition()
        leader = session.victory.get_leader()
        return WinCheckResponse(
            has_winner=win_check.has_winner,
            winning_vp=win_check.winning_vp,
            winners=[self._player_to_info(p) for p in win_check.winners],
            leader_vp=leader.vp if leader else None,
            leader_ids=[p.player_id for p in leader.players] if leader else [],
            is_tied=leader.is_tied if leader else False,
        )

    def get_standings(self, session_id: str) -> Union[StandingsResponse, ErrorResponse]:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._session_not_found(session_id)

        summary = session.victory.get_summary()
        return StandingsResponse(
            standings=[
                StandingInfo(
                    rank=s.rank,
                    player_id=s.player_id,
                    player_name=s.player_name,
                    faction_id=s.faction_id,
                    victory_points=s.victory_points,
                    is_leader=s.is_leader,
                )
                for s in session.victory.get_standings()
            ],
            total_vp=summary.total_vp,
            average_vp=summary.average_vp,
        )

    def get_vp_history(self, session_id: str, count: int = 10) -> Union[VPHistoryResponse, ErrorResponse]:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._session_not_found(session_id)

        return VPHistoryResponse(
            changes=[
                VPChangeInfo(
                    player_id=c.player_id,
                    player_name=c.player_name,
                    old_vp=c.old_vp,
                    new_vp=c.new_vp,
                    delta=c.delta,
                    reason=c.reason,
                    timestamp=c.timestamp,
                )
                for c in session.victory.get_recent_changes(count)
            ]
        )

    # =========================================================================
    # Agendas
    # =========================================================================

    def create_agenda(self, session_id: str, request: CreateAgendaRequest) -> Response:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._session_not_found(session_id)

        session.agenda.create_agenda(request.name)
        return self._command_response(session)

    def record_vote(self, session_id: str, request: VoteRequest) -> Response:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._session_not_found(session_id)
        if not session.agenda.has_open_agenda:
            return _error(ErrorCode.NO_OPEN_AGENDA, "No agenda is open")

        if not session.agenda.record_vote(request.player_id, request.vote_count, request.voted_for):
            return _error(ErrorCode.PLAYER_NOT_FOUND, f"Player {request.player_id} not found")
        return self._command_response(session)

    def set_outcome(self, session_id: str, request: OutcomeRequest) -> Response:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._session_not_found(session_id)

        if not session.agenda.set_outcome(request.outcome):
            return _error(ErrorCode.NO_OPEN_AGENDA, "No agenda is open")
        return self._command_response(session)

    def complete_agenda(self, session_id: str) -> Response:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._session_not_found(session_id)
        if not session.agenda.has_open_agenda:
            return _error(ErrorCode.NO_OPEN_AGENDA, "No agenda is open")

        if not session.agenda.complete_agenda():
            return _error(ErrorCode.INVALID_VALUE, "Set an outcome before completing the agenda")
        return self._command_response(session)

    def cancel_agenda(self, session_id: str) -> Response:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._session_not_found(session_id)

        session.agenda.cancel_current_agenda()
        return self._command_response(session)

    def get_tally(
        self, session_id: str, agenda_id: Optional[str] = None
    ) -> Union[TallyResponse, ErrorResponse]:
        """Tally an archived agenda by id, or the open agenda."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._session_not_found(session_id)

        if agenda_id:
            agenda = session.agenda.get_agenda(agenda_id)
            if agenda is None:
                return _error(ErrorCode.AGENDA_NOT_FOUND, f"Agenda {agenda_id} not found")
        else:
            agenda = session.agenda.get_current_agenda()
            if agenda is None:
                return _error(ErrorCode.NO_OPEN_AGENDA, "No agenda is open")

        summary = session.agenda.format_agenda(agenda)
        return TallyResponse(
            agenda=self._agenda_to_info(summary.agenda),
            vote_summary=summary.vote_summary,
            total_votes=summary.total_votes,
            winning_option=session.agenda.get_winning_option(agenda),
        )

    def delete_agenda(self, session_id: str, agenda_id: str) -> Response:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._session_not_found(session_id)

        if not session.agenda.delete_agenda(agenda_id):
            return _error(ErrorCode.AGENDA_NOT_FOUND, f"Agenda {agenda_id} not found")
        return self._command_response(session)

    def clear_agenda_history(self, session_id: str) -> Response:
        return self._run(session_id, lambda s: s.agenda.clear_history())

    # =========================================================================
    # Persistence
    # =========================================================================

    def save_game(self, session_id: str) -> Union[StorageResponse, ErrorResponse]:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._session_not_found(session_id)

        storage = self._storage_for(session_id)
        if not storage.save_game(session.snapshot()):
            return _error(ErrorCode.STORAGE_ERROR, "Failed to save game")
        return StorageResponse(success=True, path=str(storage.path))

    def load_game(self, session_id: str) -> Response:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._session_not_found(session_id)

        state = self._storage_for(session_id).load_game()
        if state is None:
            return _error(ErrorCode.STORAGE_ERROR, "No saved game to load")
        return self._load_checked(session, state)

    def export_game(
        self, session_id: str, request: ExportRequest
    ) -> Union[StorageResponse, ErrorResponse]:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._session_not_found(session_id)

        storage = self._storage_for(session_id)
        path = Path(request.path) if request.path else storage.data_dir / default_export_name()
        if not storage.export_to_file(session.snapshot(), path):
            return _error(ErrorCode.STORAGE_ERROR, f"Failed to export game to {path}")
        return StorageResponse(success=True, path=str(path))

    def import_game(self, session_id: str, request: ImportRequest) -> Response:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._session_not_found(session_id)

        state = self._storage_for(session_id).import_from_file(request.path)
        if state is None:
            return _error(ErrorCode.STORAGE_ERROR, f"Could not read a game from {request.path}")
        return self._load_checked(session, state)

    def _load_checked(self, session: GameSession, state: GameState) -> Response:
        """Validate a document against the table invariants, then replace the state."""
        try:
            document = GameStateDocument.model_validate(state.to_dict())
        except ValidationError as e:
            logger.warning("Rejected game document: %s", e)
            return _error(
                ErrorCode.VALIDATION_ERROR,
                "Saved game is invalid",
                details={"errors": [err["msg"] for err in e.errors()]},
            )

        session.load_state(GameState.from_dict(document.to_document()))
        return self._command_response(session)

    def _storage_for(self, session_id: str) -> StateStorage:
        if session_id not in self._storages:
            self._storages[session_id] = StateStorage(
                data_dir=self.data_dir,
                storage_key=f"{IMPERIUM_STORAGE_KEY}-{session_id}",
            )
        return self._storages[session_id]

    # =========================================================================
    # Helper methods
    # =========================================================================

    def _run(
        self,
        session_id: str,
        action,
        player_id: Optional[str] = None,
        initiative: Optional[int] = None,
        message: Optional[str] = None,
    ) -> Response:
        """
        Run an engine call that answers True/False.

        On False, report the most specific reason that can be checked from
        outside the engine: a missing player, a missing card, then the
        caller's message.
        """
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._session_not_found(session_id)

        if action(session):
            return self._command_response(session)

        snapshot = session.snapshot()
        if player_id is not None and not snapshot.get_player(player_id):
            return _error(ErrorCode.PLAYER_NOT_FOUND, f"Player {player_id} not found")
        if initiative is not None and not snapshot.get_card(initiative):
            return _error(ErrorCode.CARD_NOT_FOUND, f"Strategy card {initiative} not found")
        return _error(ErrorCode.INVALID_VALUE, message or "Action was rejected")

    def _command_response(self, session: GameSession) -> CommandResponse:
        return CommandResponse(success=True, state=self._build_game_state(session))

    @staticmethod
    def _session_not_found(session_id: str) -> ErrorResponse:
        return _error(ErrorCode.SESSION_NOT_FOUND, f"Session {session_id} not found")

    def _session_to_response(self, session: GameSession) -> SessionResponse:
        snapshot = session.snapshot()
        return SessionResponse(
            session_id=session.session_id,
            created_at=session.created_at,
            player_count=snapshot.num_players,
            game_phase=PhaseName(snapshot.game_phase.value),
            autosave=session.storage is not None,
        )

    def _build_game_state(self, session: GameSession) -> GameStateResponse:
        """Build the full state response from one snapshot."""
        snapshot = session.snapshot()
        current = session.initiative.get_current_player()
        open_agenda = session.agenda.get_current_agenda()

        return GameStateResponse(
            session_id=session.session_id,
            game_phase=PhaseName(snapshot.game_phase.value),
            players=[self._player_to_info(p) for p in snapshot.players],
            strategy_cards=[
                self._card_to_info(c) for c in snapshot.strategy_cards
            ],
            current_player_id=current.player_id if current else None,
            current_player_index=snapshot.current_player_index,
            max_cards_per_player=session.cards.max_cards_per_player(),
            all_passed=snapshot.action_phase.all_passed,
            turn_count=snapshot.action_phase.turn_count,
            timer_running=snapshot.timer_running,
            agendas=[self._agenda_to_info(a) for a in snapshot.agenda_phase.agendas],
            current_agenda=self._agenda_to_info(open_agenda) if open_agenda else None,
        )

    @staticmethod
    def _player_to_info(player: Player) -> PlayerInfo:
        faction = get_faction(player.faction_id)
        initiative = effective_initiative(player)
        return PlayerInfo(
            player_id=player.player_id,
            name=player.name,
            faction_id=player.faction_id,
            faction_name=faction.name if faction else None,
            strategy_cards=list(player.strategy_cards),
            is_speaker=player.is_speaker,
            has_passed=player.has_passed,
            victory_points=player.victory_points,
            turn_time_seconds=player.turn_time_seconds,
            effective_initiative=None if math.isinf(initiative) else int(initiative),
        )

    @staticmethod
    def _card_to_info(card: StrategyCard) -> StrategyCardInfo:
        definition = get_card_definition(card.initiative)
        return StrategyCardInfo(
            initiative=card.initiative,
            name=card.name,
            color=get_card_color(card.initiative),
            player_id=card.player_id,
            is_activated=card.is_activated,
            trade_good_bonus=card.trade_good_bonus,
            primary_ability=definition.primary_ability if definition else None,
            secondary_ability=definition.secondary_ability if definition else None,
        )

    @staticmethod
    def _agenda_to_info(agenda: Agenda) -> AgendaInfo:
        return AgendaInfo(
            agenda_id=agenda.agenda_id,
            name=agenda.name,
            votes=[
                BallotInfo(
                    player_id=b.player_id,
                    player_name=b.player_name,
                    vote_count=b.vote_count,
                    voted_for=b.voted_for,
                )
                for b in agenda.votes
            ],
            outcome=agenda.outcome,
            timestamp=agenda.timestamp,
        )

