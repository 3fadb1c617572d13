"""
Typed Commands - The closed set of state mutations.

Every change to the state tree is one of these commands. Each command
declares exactly the fields it may change; the reducer knows how to apply
each one. Commands replace free-form "merge these fields" updates, so a
caller can never write a field the command does not own.

Command groups:
- Roster: AddPlayer, RemovePlayer, RenamePlayer, ChangeFaction, SetSpeaker
- Cards: InitializeStrategyCards, AssignCard, UnassignCard, SetCardActivation
- Turns: SetPassed, ResetAllPasses, SetTurnCount, SetCurrentPlayerIndex,
  StartNewRound
- Scoring: SetVictoryPoints
- Timer: SetTimer, PauseTimer, AddTurnTime, ResetTurnTime
- Agendas: ArchiveAgenda, DeleteAgenda, ClearAgendaHistory
- Session: SetGamePhase, ReplaceState, ResetGame
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from .state import Agenda, GamePhase, GameState, StrategyCard


class CommandType(Enum):
    """Tags for every command."""
    ADD_PLAYER = "add_player"
    REMOVE_PLAYER = "remove_player"
    RENAME_PLAYER = "rename_player"
    CHANGE_FACTION = "change_faction"
    SET_SPEAKER = "set_speaker"

    INITIALIZE_STRATEGY_CARDS = "initialize_strategy_cards"
    ASSIGN_CARD = "assign_card"
    UNASSIGN_CARD = "unassign_card"
    SET_CARD_ACTIVATION = "set_card_activation"

    SET_PASSED = "set_passed"
    RESET_ALL_PASSES = "reset_all_passes"
    SET_TURN_COUNT = "set_turn_count"
    SET_CURRENT_PLAYER_INDEX = "set_current_player_index"
    START_NEW_ROUND = "start_new_round"

    SET_VICTORY_POINTS = "set_victory_points"

    SET_TIMER = "set_timer"
    PAUSE_TIMER = "pause_timer"
    ADD_TURN_TIME = "add_turn_time"
    RESET_TURN_TIME = "reset_turn_time"

    ARCHIVE_AGENDA = "archive_agenda"
    DELETE_AGENDA = "delete_agenda"
    CLEAR_AGENDA_HISTORY = "clear_agenda_history"

    SET_GAME_PHASE = "set_game_phase"
    REPLACE_STATE = "replace_state"
    RESET_GAME = "reset_game"


class CommandParseError(ValueError):
    """Raised when a command dictionary cannot be turned into a command."""


# =============================================================================
# Roster
# =============================================================================

@dataclass
class AddPlayer:
    """
    Register a new player.

    The id is chosen by the caller (PlayerRegistry generates one).
    Name and faction are expected to be validated already; the reducer
    still refuses duplicate ids and duplicate factions.
    """
    player_id: str
    name: str
    faction_id: str

    @property
    def command_type(self) -> CommandType:
        return CommandType.ADD_PLAYER

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.command_type.value,
            "player_id": self.player_id,
            "name": self.name,
            "faction_id": self.faction_id,
        }


@dataclass
class RemovePlayer:
    """Remove a player and release any strategy cards they hold."""
    player_id: str

    @property
    def command_type(self) -> CommandType:
        return CommandType.REMOVE_PLAYER

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.command_type.value, "player_id": self.player_id}


@dataclass
class RenamePlayer:
    player_id: str
    name: str

    @property
    def command_type(self) -> CommandType:
        return CommandType.RENAME_PLAYER

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.command_type.value,
            "player_id": self.player_id,
            "name": self.name,
        }


@dataclass
class ChangeFaction:
    player_id: str
    faction_id: str

    @property
    def command_type(self) -> CommandType:
        return CommandType.CHANGE_FACTION

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.command_type.value,
            "player_id": self.player_id,
            "faction_id": self.faction_id,
        }


@dataclass
class SetSpeaker:
    """
    Make one player the speaker.

    Clears the flag on every other player in the same mutation.
    """
    player_id: str

    @property
    def command_type(self) -> CommandType:
        return CommandType.SET_SPEAKER

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.command_type.value, "player_id": self.player_id}


# =============================================================================
# Strategy cards
# =============================================================================

@dataclass
class InitializeStrategyCards:
    """Create the strategy cards. Refused once cards exist."""
    cards: list[StrategyCard]

    @property
    def command_type(self) -> CommandType:
        return CommandType.INITIALIZE_STRATEGY_CARDS

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.command_type.value,
            "cards": [c.to_dict() for c in self.cards],
        }


@dataclass
class AssignCard:
    """
    Give a strategy card to a player.

    Examples:
        AssignCard(player_id="player-1", initiative=3)
    """
    player_id: str
    initiative: int

    @property
    def command_type(self) -> CommandType:
        return CommandType.ASSIGN_CARD

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.command_type.value,
            "player_id": self.player_id,
            "initiative": self.initiative,
        }


@dataclass
class UnassignCard:
    initiative: int

    @property
    def command_type(self) -> CommandType:
        return CommandType.UNASSIGN_CARD

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.command_type.value, "initiative": self.initiative}


@dataclass
class SetCardActivation:
    initiative: int
    activated: bool

    @property
    def command_type(self) -> CommandType:
        return CommandType.SET_CARD_ACTIVATION

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.command_type.value,
            "initiative": self.initiative,
            "activated": self.activated,
        }


# =============================================================================
# Turns and rounds
# =============================================================================

@dataclass
class SetPassed:
    """
    Set or clear a player's pass flag.

    The all-passed aggregate is recomputed in the same mutation.
    """
    player_id: str
    has_passed: bool

    @property
    def command_type(self) -> CommandType:
        return CommandType.SET_PASSED

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.command_type.value,
            "player_id": self.player_id,
            "has_passed": self.has_passed,
        }


@dataclass
class ResetAllPasses:
    """Clear every pass flag and start a new turn cycle (turn_count + 1)."""

    @property
    def command_type(self) -> CommandType:
        return CommandType.RESET_ALL_PASSES

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.command_type.value}


@dataclass
class SetTurnCount:
    turn_count: int

    @property
    def command_type(self) -> CommandType:
        return CommandType.SET_TURN_COUNT

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.command_type.value, "turn_count": self.turn_count}


@dataclass
class SetCurrentPlayerIndex:
    index: int

    @property
    def command_type(self) -> CommandType:
        return CommandType.SET_CURRENT_PLAYER_INDEX

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.command_type.value, "index": self.index}


@dataclass
class StartNewRound:
    """
    Reset the table for a new round.

    Unclaimed cards gain one trade good bonus; passes, activations and
    all card ownership are cleared; the turn pointer returns to 0 and the
    turn count advances. Victory points, speaker and roster are kept.
    """

    @property
    def command_type(self) -> CommandType:
        return CommandType.START_NEW_ROUND

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.command_type.value}


# =============================================================================
# Scoring and timer
# =============================================================================

@dataclass
class SetVictoryPoints:
    player_id: str
    victory_points: int

    @property
    def command_type(self) -> CommandType:
        return CommandType.SET_VICTORY_POINTS

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.command_type.value,
            "player_id": self.player_id,
            "victory_points": self.victory_points,
        }


@dataclass
class SetTimer:
    running: bool
    start_time: float | None = None

    @property
    def command_type(self) -> CommandType:
        return CommandType.SET_TIMER

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.command_type.value,
            "running": self.running,
            "start_time": self.start_time,
        }


@dataclass
class PauseTimer:
    """
    Stop the timer, banking elapsed seconds on a player in the same step.

    With no player_id the timer just stops.
    """
    player_id: str | None = None
    seconds: int = 0

    @property
    def command_type(self) -> CommandType:
        return CommandType.PAUSE_TIMER

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.command_type.value,
            "player_id": self.player_id,
            "seconds": self.seconds,
        }


@dataclass
class AddTurnTime:
    player_id: str
    seconds: int

    @property
    def command_type(self) -> CommandType:
        return CommandType.ADD_TURN_TIME

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.command_type.value,
            "player_id": self.player_id,
            "seconds": self.seconds,
        }


@dataclass
class ResetTurnTime:
    player_id: str

    @property
    def command_type(self) -> CommandType:
        return CommandType.RESET_TURN_TIME

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.command_type.value, "player_id": self.player_id}


# =============================================================================
# Agendas
# =============================================================================

@dataclass
class ArchiveAgenda:
    """Append a completed agenda to the history."""
    agenda: Agenda

    @property
    def command_type(self) -> CommandType:
        return CommandType.ARCHIVE_AGENDA

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.command_type.value, "agenda": self.agenda.to_dict()}


@dataclass
class DeleteAgenda:
    agenda_id: str

    @property
    def command_type(self) -> CommandType:
        return CommandType.DELETE_AGENDA

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.command_type.value, "agenda_id": self.agenda_id}


@dataclass
class ClearAgendaHistory:

    @property
    def command_type(self) -> CommandType:
        return CommandType.CLEAR_AGENDA_HISTORY

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.command_type.value}


# =============================================================================
# Session
# =============================================================================

@dataclass
class SetGamePhase:
    """Move to any phase. No sequencing rules are checked."""
    phase: GamePhase

    @property
    def command_type(self) -> CommandType:
        return CommandType.SET_GAME_PHASE

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.command_type.value, "phase": self.phase.value}


@dataclass
class ReplaceState:
    """Full replace of the state tree (load). No partial merge."""
    state: GameState

    @property
    def command_type(self) -> CommandType:
        return CommandType.REPLACE_STATE

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.command_type.value, "state": self.state.to_dict()}


@dataclass
class ResetGame:

    @property
    def command_type(self) -> CommandType:
        return CommandType.RESET_GAME

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.command_type.value}


# Union type for all commands
Command = Union[
    AddPlayer, RemovePlayer, RenamePlayer, ChangeFaction, SetSpeaker,
    InitializeStrategyCards, AssignCard, UnassignCard, SetCardActivation,
    SetPassed, ResetAllPasses, SetTurnCount, SetCurrentPlayerIndex, StartNewRound,
    SetVictoryPoints, SetTimer, PauseTimer, AddTurnTime, ResetTurnTime,
    ArchiveAgenda, DeleteAgenda, ClearAgendaHistory,
    SetGamePhase, ReplaceState, ResetGame,
]


def _require(data: dict[str, Any], key: str, kind: type | tuple[type, ...]) -> Any:
    if key not in data:
        raise CommandParseError(f"Command '{data.get('type')}' missing field '{key}'")
    value = data[key]
    # bool is an int subclass; never accept it where a number is expected
    if isinstance(value, bool) and bool not in (kind if isinstance(kind, tuple) else (kind,)):
        raise CommandParseError(f"Field '{key}' has invalid value {value!r}")
    if not isinstance(value, kind):
        raise CommandParseError(f"Field '{key}' has invalid value {value!r}")
    return value


def _from_document(factory: Any, payload: Any) -> Any:
    try:
        return factory(payload)
    except (KeyError, TypeError, ValueError) as e:
        raise CommandParseError(f"Malformed document: {e}") from e


def parse_command(data: dict[str, Any]) -> Command:
    """
    Parse a command from a dictionary.

    Args:
        data: Dictionary with "type" key and command-specific fields

    Returns:
        Typed command object

    Raises:
        CommandParseError: If type is unknown or fields are missing/invalid
    """
    command_type = data.get("type")
    if not command_type:
        raise CommandParseError("Command missing 'type' field")

    try:
        ctype = CommandType(command_type)
    except ValueError:
        raise CommandParseError(f"Unknown command type: {command_type}")

    if ctype == CommandType.ADD_PLAYER:
        return AddPlayer(
            player_id=_require(data, "player_id", str),
            name=_require(data, "name", str),
            faction_id=_require(data, "faction_id", str),
        )
    elif ctype == CommandType.REMOVE_PLAYER:
        return RemovePlayer(player_id=_require(data, "player_id", str))
    elif ctype == CommandType.RENAME_PLAYER:
        return RenamePlayer(
            player_id=_require(data, "player_id", str),
            name=_require(data, "name", str),
        )
    elif ctype == CommandType.CHANGE_FACTION:
        return ChangeFaction(
            player_id=_require(data, "player_id", str),
            faction_id=_require(data, "faction_id", str),
        )
    elif ctype == CommandType.SET_SPEAKER:
        return SetSpeaker(player_id=_require(data, "player_id", str))
    elif ctype == CommandType.INITIALIZE_STRATEGY_CARDS:
        cards = _require(data, "cards", list)
        return InitializeStrategyCards(cards=[_from_document(StrategyCard.from_dict, c) for c in cards])
    elif ctype == CommandType.ASSIGN_CARD:
        return AssignCard(
            player_id=_require(data, "player_id", str),
            initiative=_require(data, "initiative", int),
        )
    elif ctype == CommandType.UNASSIGN_CARD:
        return UnassignCard(initiative=_require(data, "initiative", int))
    elif ctype == CommandType.SET_CARD_ACTIVATION:
        return SetCardActivation(
            initiative=_require(data, "initiative", int),
            activated=_require(data, "activated", bool),
        )
    elif ctype == CommandType.SET_PASSED:
        return SetPassed(
            player_id=_require(data, "player_id", str),
            has_passed=_require(data, "has_passed", bool),
        )
    elif ctype == CommandType.RESET_ALL_PASSES:
        return ResetAllPasses()
    elif ctype == CommandType.SET_TURN_COUNT:
        return SetTurnCount(turn_count=_require(data, "turn_count", int))
    elif ctype == CommandType.SET_CURRENT_PLAYER_INDEX:
        return SetCurrentPlayerIndex(index=_require(data, "index", int))
    elif ctype == CommandType.START_NEW_ROUND:
        return StartNewRound()
    elif ctype == CommandType.SET_VICTORY_POINTS:
        return SetVictoryPoints(
            player_id=_require(data, "player_id", str),
            victory_points=_require(data, "victory_points", int),
        )
    elif ctype == CommandType.SET_TIMER:
        start_time = data.get("start_time")
        if start_time is not None and not isinstance(start_time, (int, float)):
            raise CommandParseError(f"Field 'start_time' has invalid value {start_time!r}")
        return SetTimer(running=_require(data, "running", bool), start_time=start_time)
    elif ctype == CommandType.PAUSE_TIMER:
        player_id = data.get("player_id")
        if player_id is not None and not isinstance(player_id, str):
            raise CommandParseError(f"Field 'player_id' has invalid value {player_id!r}")
        seconds = data.get("seconds", 0)
        if isinstance(seconds, bool) or not isinstance(seconds, int):
            raise CommandParseError(f"Field 'seconds' has invalid value {seconds!r}")
        return PauseTimer(player_id=player_id, seconds=seconds)
    elif ctype == CommandType.ADD_TURN_TIME:
        return AddTurnTime(
            player_id=_require(data, "player_id", str),
            seconds=_require(data, "seconds", int),
        )
    elif ctype == CommandType.RESET_TURN_TIME:
        return ResetTurnTime(player_id=_require(data, "player_id", str))
    elif ctype == CommandType.ARCHIVE_AGENDA:
        return ArchiveAgenda(agenda=_from_document(Agenda.from_dict, _require(data, "agenda", dict)))
    elif ctype == CommandType.DELETE_AGENDA:
        return DeleteAgenda(agenda_id=_require(data, "agenda_id", str))
    elif ctype == CommandType.CLEAR_AGENDA_HISTORY:
        return ClearAgendaHistory()
    elif ctype == CommandType.SET_GAME_PHASE:
        phase = _require(data, "phase", str)
        try:
            return SetGamePhase(phase=GamePhase(phase))
        except ValueError:
            raise CommandParseError(f"Unknown game phase: {phase}")
    elif ctype == CommandType.REPLACE_STATE:
        return ReplaceState(state=_from_document(GameState.from_dict, _require(data, "state", dict)))
    elif ctype == CommandType.RESET_GAME:
        return ResetGame()
    else:
        raise CommandParseError(f"Unhandled command type: {ctype}")


def parse_commands(data: list[dict[str, Any]]) -> list[Command]:
    """Parse a list of commands from dictionaries."""
    return [parse_command(d) for d in data]


@dataclass
class CommandResult:
    """
    Result of applying a command.

    Contains:
    - Whether the command succeeded
    - New state (if succeeded)
    - Error message and code (if failed)
    - Human-readable changes, for logs and UI notifications
    """
    success: bool
    new_state: GameState | None = None
    error: str | None = None
    error_code: str | None = None
    changes: list[str] = field(default_factory=list)

    @classmethod
    def failure(cls, error: str, error_code: str | None = None) -> CommandResult:
        """Create a failure result."""
        return cls(success=False, error=error, error_code=error_code)

    @classmethod
    def success_with_state(
        cls,
        state: GameState,
        changes: list[str] | None = None,
    ) -> CommandResult:
        """Create a success result with new state."""
        return cls(success=True, new_state=state, changes=changes or [])
