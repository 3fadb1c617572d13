"""
Engine Core - Deterministic tracker state and the engines that drive it.

The engine is the runtime that:
1. Owns one GameState per game (GameStateStore)
2. Applies typed commands through the reducer
3. Assigns strategy cards against quotas
4. Orders turns by initiative and tracks passes
5. Records agenda ballots and victory points
"""

from .state import (
    ActionPhaseState,
    Agenda,
    AgendaPhaseState,
    Ballot,
    GamePhase,
    GameState,
    Player,
    StrategyCard,
)
from .commands import Command, CommandParseError, CommandResult, CommandType, parse_command
from .reducer import Reducer, apply_command
from .store import GameStateStore
from .strategy_cards import AssignmentValidation, InvalidAssignment, StrategyCardAssignmentEngine
from .initiative import InitiativeOrderingEngine, effective_initiative
from .passes import ActionPhaseSummary, PassTracker
from .agenda import AgendaBallotTracker, AgendaSummary
from .victory import VictoryPointLedger, VPChange, WinCheck, Leader
from .players import PlayerRegistry, PlayerCreation, PlayerValidation
from .timer import TurnTimer, format_time

__all__ = [
    "ActionPhaseState",
    "Agenda",
    "AgendaPhaseState",
    "Ballot",
    "GamePhase",
    "GameState",
    "Player",
    "StrategyCard",
    "Command",
    "CommandParseError",
    "CommandResult",
    "CommandType",
    "parse_command",
    "Reducer",
    "apply_command",
    "GameStateStore",
    "AssignmentValidation",
    "InvalidAssignment",
    "StrategyCardAssignmentEngine",
    "InitiativeOrderingEngine",
    "effective_initiative",
    "ActionPhaseSummary",
    "PassTracker",
    "AgendaBallotTracker",
    "AgendaSummary",
    "VictoryPointLedger",
    "VPChange",
    "WinCheck",
    "Leader",
    "PlayerRegistry",
    "PlayerCreation",
    "PlayerValidation",
    "TurnTimer",
    "format_time",
]
