"""
Victory Point Ledger - Clamped VP changes, an audit trail, win detection.

Every write is clamped to [0, 99]. Writes that change nothing are not
recorded. The audit trail keeps the most recent 100 changes.
"""

from __future__ import annotations
import logging
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable

from .state import Player
from .store import GameStateStore
from .commands import SetVictoryPoints
from ..games.twilight.rules import WIN_CONDITION_VP, clamp_vp, to_whole_number

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 100


@dataclass(frozen=True)
class VPChange:
    """One audited VP change. Records are read-only once written."""
    player_id: str
    player_name: str
    old_vp: int
    new_vp: int
    delta: int
    reason: str
    timestamp: float


@dataclass
class WinCheck:
    has_winner: bool
    winners: list[Player] = field(default_factory=list)
    winning_vp: int = WIN_CONDITION_VP


@dataclass
class Leader:
    vp: int
    players: list[Player]
    is_tied: bool


@dataclass
class Standing:
    rank: int
    player_id: str
    player_name: str
    faction_id: str
    victory_points: int
    is_leader: bool


@dataclass
class VPSummary:
    total_players: int
    total_vp: int
    average_vp: float
    leader: Leader | None
    has_winner: bool
    winners: list[Player] = field(default_factory=list)


class VictoryPointLedger:
    """
    Mutates victory points through the store and audits every net change.

    The audit trail is ledger-local (not part of the saved state tree).
    """

    def __init__(self, store: GameStateStore, clock: Callable[[], float] = time.time):
        self.store = store
        self._clock = clock
        self._history: deque[VPChange] = deque(maxlen=HISTORY_LIMIT)

    # =========================================================================
    # Mutations
    # =========================================================================

    def set_player_vp(self, player_id: str, points: Any) -> bool:
        target = to_whole_number(points)
        return self._write(player_id, lambda old: target, "Manual set")

    def increment_player_vp(self, player_id: str, amount: int = 1) -> bool:
        return self._write(player_id, lambda old: old + amount, f"Gained {amount} VP")

    def decrement_player_vp(self, player_id: str, amount: int = 1) -> bool:
        return self._write(player_id, lambda old: old - amount, f"Lost {amount} VP")

    def reset_all_vps(self) -> bool:
        for player in self.store.get().players:
            self._write(player.player_id, lambda old: 0, "Reset")
        return True

    def _write(self, player_id: str, compute: Callable[[int], int], reason: str) -> bool:
        """
        Clamp and apply a VP change.

        Returns False only for an unknown player; a clamped no-op is still
        a success.
        """
        player = self.store.get().get_player(player_id)
        if not player:
            return False

        old_vp = player.victory_points
        new_vp = clamp_vp(compute(old_vp))
        if new_vp == old_vp:
            return True

        result = self.store.apply(SetVictoryPoints(player_id=player_id, victory_points=new_vp))
        if not result.success:
            return False

        self._history.append(
            VPChange(
                player_id=player_id,
                player_name=player.name,
                old_vp=old_vp,
                new_vp=new_vp,
                delta=new_vp - old_vp,
                reason=reason,
                timestamp=self._clock(),
            )
        )
        return True

    # =========================================================================
    # Queries
    # =========================================================================

    def get_player_vp(self, player_id: str) -> int:
        player = self.store.get().get_player(player_id)
        return player.victory_points if player else 0

    def check_win_condition(self) -> WinCheck:
        """Every player at or above the win threshold is a winner."""
        winners = [p for p in self.store.get().players if p.victory_points >= WIN_CONDITION_VP]
        return WinCheck(has_winner=bool(winners), winners=winners)

    def has_player_won(self, player_id: str) -> bool:
        return self.get_player_vp(player_id) >= WIN_CONDITION_VP

    def get_leader(self) -> Leader | None:
        players = self.store.get().players
        if not players:
            return None

        max_vp = max(p.victory_points for p in players)
        leaders = [p for p in players if p.victory_points == max_vp]
        return Leader(vp=max_vp, players=leaders, is_tied=len(leaders) > 1)

    def get_players_by_vp(self) -> list[Player]:
        return sorted(self.store.get().players, key=lambda p: p.victory_points, reverse=True)

    def get_standings(self) -> list[Standing]:
        return [
            Standing(
                rank=index + 1,
                player_id=p.player_id,
                player_name=p.name,
                faction_id=p.faction_id,
                victory_points=p.victory_points,
                is_leader=index == 0,
            )
            for index, p in enumerate(self.get_players_by_vp())
        ]

    def get_summary(self) -> VPSummary:
        players = self.store.get().players
        total = sum(p.victory_points for p in players)
        average = total / len(players) if players else 0
        win_check = self.check_win_condition()
        return VPSummary(
            total_players=len(players),
            total_vp=total,
            average_vp=round(average, 1),
            leader=self.get_leader(),
            has_winner=win_check.has_winner,
            winners=win_check.winners,
        )

    # =========================================================================
    # Audit trail
    # =========================================================================

    def get_history(self) -> list[VPChange]:
        return list(self._history)

    def get_recent_changes(self, count: int = 10) -> list[VPChange]:
        """Most recent changes, newest first."""
        if count <= 0:
            return []
        return list(self._history)[-count:][::-1]

    def clear_history(self):
        self._history.clear()
