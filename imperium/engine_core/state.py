"""
Game State - The canonical state tree for one tracked game.

Design principles:
- One tree per session, owned by GameStateStore
- Snapshots are deep structural copies (clone), never shared references
- Serializable: to_dict/from_dict produce the single keyed document
  used for save, load, export and import
"""

from __future__ import annotations
from copy import deepcopy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class GamePhase(Enum):
    """Game phases. Any phase may follow any other."""
    SETUP = "setup"
    STATUS = "status"
    ACTION = "action"
    AGENDA = "agenda"


@dataclass
class Player:
    """
    A registered player.

    strategy_cards holds the initiatives of the cards this player owns,
    in the order they were assigned.
    """
    player_id: str
    name: str
    faction_id: str
    strategy_cards: list[int] = field(default_factory=list)
    is_speaker: bool = False
    turn_time_seconds: int = 0
    has_passed: bool = False
    victory_points: int = 0

    @property
    def card_count(self) -> int:
        return len(self.strategy_cards)

    def holds(self, initiative: int) -> bool:
        return initiative in self.strategy_cards

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.player_id,
            "name": self.name,
            "faction": self.faction_id,
            "strategyCards": list(self.strategy_cards),
            "isSpeaker": self.is_speaker,
            "turnTimeSeconds": self.turn_time_seconds,
            "hasPassed": self.has_passed,
            "victoryPoints": self.victory_points,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Player:
        return cls(
            player_id=data["id"],
            name=data["name"],
            faction_id=data["faction"],
            strategy_cards=list(data.get("strategyCards") or []),
            is_speaker=bool(data.get("isSpeaker", False)),
            turn_time_seconds=int(data.get("turnTimeSeconds", 0)),
            has_passed=bool(data.get("hasPassed", False)),
            victory_points=int(data.get("victoryPoints", 0)),
        )


@dataclass
class StrategyCard:
    """
    Runtime state of one of the eight strategy cards.

    The static definition (abilities, color) lives in the game catalog.
    Only ownership, activation and the trade good bonus ever change.
    """
    initiative: int
    name: str
    player_id: str | None = None
    is_activated: bool = False
    trade_good_bonus: int = 0

    @property
    def is_assigned(self) -> bool:
        return self.player_id is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "initiative": self.initiative,
            "name": self.name,
            "playerId": self.player_id,
            "isActivated": self.is_activated,
            "tradeGoodBonus": self.trade_good_bonus,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StrategyCard:
        return cls(
            initiative=int(data["initiative"]),
            name=data.get("name", ""),
            player_id=data.get("playerId"),
            is_activated=bool(data.get("isActivated", False)),
            trade_good_bonus=int(data.get("tradeGoodBonus") or 0),
        )


@dataclass
class ActionPhaseState:
    all_passed: bool = False
    turn_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {"allPassed": self.all_passed, "turnCount": self.turn_count}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ActionPhaseState:
        return cls(
            all_passed=bool(data.get("allPassed", False)),
            turn_count=int(data.get("turnCount", 0)),
        )


@dataclass
class Ballot:
    """One player's vote on an agenda."""
    player_id: str
    player_name: str
    vote_count: int
    voted_for: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "playerId": self.player_id,
            "playerName": self.player_name,
            "voteCount": self.vote_count,
            "votedFor": self.voted_for,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Ballot:
        return cls(
            player_id=data["playerId"],
            player_name=data.get("playerName", ""),
            vote_count=int(data.get("voteCount", 0)),
            voted_for=data.get("votedFor", ""),
        )


@dataclass
class Agenda:
    """
    An agenda put to the vote.

    Mutable only while open in the AgendaBallotTracker. Once archived into
    AgendaPhaseState.agendas it is never changed again.
    """
    agenda_id: str
    name: str
    votes: list[Ballot] = field(default_factory=list)
    outcome: str | None = None
    timestamp: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.agenda_id,
            "name": self.name,
            "votes": [ballot.to_dict() for ballot in self.votes],
            "outcome": self.outcome,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Agenda:
        return cls(
            agenda_id=data["id"],
            name=data.get("name", ""),
            votes=[Ballot.from_dict(v) for v in data.get("votes") or []],
            outcome=data.get("outcome"),
            timestamp=float(data.get("timestamp", 0.0)),
        )


@dataclass
class AgendaPhaseState:
    agendas: list[Agenda] = field(default_factory=list)
    current_agenda_index: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "agendas": [agenda.to_dict() for agenda in self.agendas],
            "currentAgendaIndex": self.current_agenda_index,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AgendaPhaseState:
        return cls(
            agendas=[Agenda.from_dict(a) for a in data.get("agendas") or []],
            current_agenda_index=int(data.get("currentAgendaIndex", 0)),
        )


@dataclass
class GameState:
    """
    Complete tracker state at a point in time.

    This is the canonical state that the store owns.
    All state changes go through the reducer.
    """
    players: list[Player] = field(default_factory=list)
    strategy_cards: list[StrategyCard] = field(default_factory=list)
    current_player_index: int = 0

    # Turn timer
    timer_running: bool = False
    timer_start_time: float | None = None

    game_phase: GamePhase = GamePhase.SETUP
    action_phase: ActionPhaseState = field(default_factory=ActionPhaseState)
    agenda_phase: AgendaPhaseState = field(default_factory=AgendaPhaseState)

    @property
    def num_players(self) -> int:
        return len(self.players)

    def get_player(self, player_id: str) -> Player | None:
        """Get player by ID."""
        for p in self.players:
            if p.player_id == player_id:
                return p
        return None

    def get_card(self, initiative: int) -> StrategyCard | None:
        """Get strategy card by initiative."""
        for card in self.strategy_cards:
            if card.initiative == initiative:
                return card
        return None

    def clone(self) -> GameState:
        """Deep copy the state."""
        return deepcopy(self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "players": [p.to_dict() for p in self.players],
            "strategyCards": [c.to_dict() for c in self.strategy_cards],
            "currentPlayerIndex": self.current_player_index,
            "timerRunning": self.timer_running,
            "timerStartTime": self.timer_start_time,
            "gamePhase": self.game_phase.value,
            "actionPhase": self.action_phase.to_dict(),
            "agendaPhase": self.agenda_phase.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GameState:
        """
        Rebuild a state tree from its document form.

        No schema migration is attempted; callers validate documents
        before handing them to the core.
        """
        return cls(
            players=[Player.from_dict(p) for p in data.get("players") or []],
            strategy_cards=[
                StrategyCard.from_dict(c) for c in data.get("strategyCards") or []
            ],
            current_player_index=int(data.get("currentPlayerIndex", 0)),
            timer_running=bool(data.get("timerRunning", False)),
            timer_start_time=data.get("timerStartTime"),
            game_phase=GamePhase(data.get("gamePhase", GamePhase.SETUP.value)),
            action_phase=ActionPhaseState.from_dict(data.get("actionPhase") or {}),
            agenda_phase=AgendaPhaseState.from_dict(data.get("agendaPhase") or {}),
        )
