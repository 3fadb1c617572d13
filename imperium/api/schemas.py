"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between a table client (a web page, a
phone) and the tracker. Every response has an explicit type so the
OpenAPI schema is complete.

Error Codes:
- SESSION_NOT_FOUND: Session does not exist or has ended
- PLAYER_NOT_FOUND: Player id is not registered in the session
- CARD_NOT_FOUND: No strategy card with that initiative
- AGENDA_NOT_FOUND: No archived agenda with that id
- NO_OPEN_AGENDA: Ballot or outcome sent while no agenda is open
- QUOTA_EXCEEDED: Player already holds their quota of strategy cards
- INVALID_VALUE: Command was well-formed but rejected by the game rules
- VALIDATION_ERROR: Request body or imported document is invalid
- STORAGE_ERROR: Saving or loading failed
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..games.twilight.rules import MAX_NAME_LENGTH, MAX_VP, MIN_VP


# =============================================================================
# Enums
# =============================================================================

class ErrorCode(str, Enum):
    """Structured error codes."""
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    PLAYER_NOT_FOUND = "PLAYER_NOT_FOUND"
    CARD_NOT_FOUND = "CARD_NOT_FOUND"
    AGENDA_NOT_FOUND = "AGENDA_NOT_FOUND"
    NO_OPEN_AGENDA = "NO_OPEN_AGENDA"
    QUOTA_EXCEEDED = "QUOTA_EXCEEDED"
    INVALID_VALUE = "INVALID_VALUE"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    STORAGE_ERROR = "STORAGE_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class PhaseName(str, Enum):
    """Game phases, as sent over the wire."""
    SETUP = "setup"
    STATUS = "status"
    ACTION = "action"
    AGENDA = "agenda"


# =============================================================================
# Shared Models
# =============================================================================

class PlayerInfo(BaseModel):
    """A player as shown at the table."""
    player_id: str
    name: str
    faction_id: str
    faction_name: Optional[str] = None
    strategy_cards: list[int] = Field(default_factory=list)
    is_speaker: bool = False
    has_passed: bool = False
    victory_points: int = 0
    turn_time_seconds: int = 0
    effective_initiative: Optional[int] = Field(
        None, description="Initiative used for turn order; null when holding no cards"
    )


class StrategyCardInfo(BaseModel):
    """One strategy card with its catalog details."""
    initiative: int
    name: str
    color: str
    player_id: Optional[str] = None
    is_activated: bool = False
    trade_good_bonus: int = 0
    primary_ability: Optional[str] = None
    secondary_ability: Optional[str] = None


class BallotInfo(BaseModel):
    player_id: str
    player_name: str
    vote_count: int
    voted_for: str


class AgendaInfo(BaseModel):
    """An open or archived agenda."""
    agenda_id: str
    name: str
    votes: list[BallotInfo] = Field(default_factory=list)
    outcome: Optional[str] = None
    timestamp: float = 0.0


class FactionInfo(BaseModel):
    faction_id: str
    name: str
    expansion: str


class InvalidPlayerInfo(BaseModel):
    player_id: str
    name: str
    card_count: int
    required_cards: int


class StandingInfo(BaseModel):
    rank: int
    player_id: str
    player_name: str
    faction_id: str
    victory_points: int
    is_leader: bool


class VPChangeInfo(BaseModel):
    player_id: str
    player_name: str
    old_vp: int
    new_vp: int
    delta: int
    reason: str
    timestamp: float


# =============================================================================
# Request Models
# =============================================================================

class CreateSessionRequest(BaseModel):
    """Create a session, optionally seeded from a saved document."""
    autosave: bool = Field(False, description="Save after every change")
    state: Optional["GameStateDocument"] = None


class CreatePlayerRequest(BaseModel):
    name: str = Field(description=f"Display name, 1 to {MAX_NAME_LENGTH} characters")
    faction_id: str = Field(description="Faction id, e.g. 'arborec'")


class RenamePlayerRequest(BaseModel):
    name: str


class ChangeFactionRequest(BaseModel):
    faction_id: str


class SpeakerRequest(BaseModel):
    player_id: str


class AssignCardRequest(BaseModel):
    player_id: str
    initiative: int = Field(ge=1, le=8)


class VPRequest(BaseModel):
    """Set a player's victory points. Out of range values are clamped."""
    points: int


class VPAdjustRequest(BaseModel):
    amount: int = Field(1, ge=1)


class PhaseRequest(BaseModel):
    phase: PhaseName


class CreateAgendaRequest(BaseModel):
    name: str = ""


class VoteRequest(BaseModel):
    """One player's ballot. A second ballot from the same player replaces the first."""
    player_id: str
    vote_count: int = Field(ge=0)
    voted_for: str


class OutcomeRequest(BaseModel):
    outcome: str


class ExportRequest(BaseModel):
    path: Optional[str] = Field(None, description="Target file; defaults to a dated name")


class ImportRequest(BaseModel):
    path: str


# =============================================================================
# Saved game document
# =============================================================================

class _Document(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class PlayerDocument(_Document):
    id: str
    name: str
    faction: str
    strategy_cards: list[int] = Field(default_factory=list, alias="strategyCards")
    is_speaker: bool = Field(False, alias="isSpeaker")
    turn_time_seconds: int = Field(0, ge=0, alias="turnTimeSeconds")
    has_passed: bool = Field(False, alias="hasPassed")
    victory_points: int = Field(0, ge=MIN_VP, le=MAX_VP, alias="victoryPoints")


class StrategyCardDocument(_Document):
    initiative: int = Field(ge=1, le=8)
    name: str = ""
    player_id: Optional[str] = Field(None, alias="playerId")
    is_activated: bool = Field(False, alias="isActivated")
    trade_good_bonus: int = Field(0, ge=0, alias="tradeGoodBonus")


class ActionPhaseDocument(_Document):
    all_passed: bool = Field(False, alias="allPassed")
    turn_count: int = Field(0, ge=0, alias="turnCount")


class BallotDocument(_Document):
    player_id: str = Field(alias="playerId")
    player_name: str = Field("", alias="playerName")
    vote_count: int = Field(0, ge=0, alias="voteCount")
    voted_for: str = Field("", alias="votedFor")


class AgendaDocument(_Document):
    id: str
    name: str = ""
    votes: list[BallotDocument] = Field(default_factory=list)
    outcome: Optional[str] = None
    timestamp: float = 0.0


class AgendaPhaseDocument(_Document):
    agendas: list[AgendaDocument] = Field(default_factory=list)
    current_agenda_index: int = Field(0, ge=0, alias="currentAgendaIndex")


class GameStateDocument(_Document):
    """
    The saved game document, validated before it reaches the core.

    The core loads documents as-is, without migration. Anything that would
    break the ownership or speaker invariants is rejected here.
    """
    players: list[PlayerDocument] = Field(default_factory=list)
    strategy_cards: list[StrategyCardDocument] = Field(
        default_factory=list, alias="strategyCards"
    )
    current_player_index: int = Field(0, ge=0, alias="currentPlayerIndex")
    timer_running: bool = Field(False, alias="timerRunning")
    timer_start_time: Optional[float] = Field(None, alias="timerStartTime")
    game_phase: PhaseName = Field(PhaseName.SETUP, alias="gamePhase")
    action_phase: ActionPhaseDocument = Field(
        default_factory=ActionPhaseDocument, alias="actionPhase"
    )
    agenda_phase: AgendaPhaseDocument = Field(
        default_factory=AgendaPhaseDocument, alias="agendaPhase"
    )

    @model_validator(mode="after")
    def check_invariants(self) -> "GameStateDocument":
        ids = [p.id for p in self.players]
        if len(set(ids)) != len(ids):
            raise ValueError("player ids must be unique")
        if sum(1 for p in self.players if p.is_speaker) > 1:
            raise ValueError("at most one player can be speaker")

        owners = {c.initiative: c.player_id for c in self.strategy_cards}
        if len(owners) != len(self.strategy_cards):
            raise ValueError("strategy card initiatives must be unique")
        for player in self.players:
            for initiative in player.strategy_cards:
                if owners.get(initiative) != player.id:
                    raise ValueError(
                        f"player {player.id} holds card {initiative} it does not own"
                    )
        for initiative, owner in owners.items():
            if owner is None:
                continue
            player = next((p for p in self.players if p.id == owner), None)
            if player is None or initiative not in player.strategy_cards:
                raise ValueError(f"card {initiative} names an owner that does not hold it")
        return self

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


CreateSessionRequest.model_rebuild()


# =============================================================================
# Response Models
# =============================================================================

class GameStateResponse(BaseModel):
    """Complete tracker state for a session."""
    session_id: str
    game_phase: PhaseName
    players: list[PlayerInfo] = Field(default_factory=list)
    strategy_cards: list[StrategyCardInfo] = Field(default_factory=list)
    current_player_id: Optional[str] = None
    current_player_index: int = 0
    max_cards_per_player: int = 1
    all_passed: bool = False
    turn_count: int = 0
    timer_running: bool = False
    agendas: list[AgendaInfo] = Field(default_factory=list)
    current_agenda: Optional[AgendaInfo] = None


class CommandResponse(BaseModel):
    """Result of an accepted mutation, with the state after it."""
    success: bool = True
    changes: list[str] = Field(default_factory=list)
    state: GameStateResponse


class PlayerCreatedResponse(BaseModel):
    success: bool
    player_id: Optional[str] = None
    errors: list[str] = Field(default_factory=list)
    state: Optional[GameStateResponse] = None


class ValidationResponse(BaseModel):
    """Whether every player holds exactly their quota of strategy cards."""
    valid: bool
    required_cards: int
    invalid_players: list[InvalidPlayerInfo] = Field(default_factory=list)


class TallyResponse(BaseModel):
    agenda: AgendaInfo
    vote_summary: dict[str, int] = Field(default_factory=dict)
    total_votes: int = 0
    winning_option: Optional[str] = None


class WinCheckResponse(BaseModel):
    has_winner: bool
    winning_vp: int
    winners: list[PlayerInfo] = Field(default_factory=list)
    leader_vp: Optional[int] = None
    leader_ids: list[str] = Field(default_factory=list)
    is_tied: bool = False


class StandingsResponse(BaseModel):
    standings: list[StandingInfo] = Field(default_factory=list)
    total_vp: int = 0
    average_vp: float = 0.0


class VPHistoryResponse(BaseModel):
    changes: list[VPChangeInfo] = Field(default_factory=list)


class FactionListResponse(BaseModel):
    factions: list[FactionInfo] = Field(default_factory=list)
    count: int = 0


class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str
    error_code: ErrorCode
    details: Optional[dict] = None


class SessionResponse(BaseModel):
    session_id: str
    created_at: float
    player_count: int
    game_phase: PhaseName
    autosave: bool = False


class SessionListResponse(BaseModel):
    sessions: list[str] = Field(default_factory=list)
    count: int = 0


class EndSessionResponse(BaseModel):
    success: bool
    session_id: str


class StorageResponse(BaseModel):
    success: bool
    path: Optional[str] = None


class HealthResponse(BaseModel):
    status: str = "healthy"
    version: str
