"""
Pass Tracker - Per-player pass flags and the all-passed aggregate.
"""

from __future__ import annotations
from dataclasses import dataclass

from .state import Player
from .store import GameStateStore
from .commands import ResetAllPasses, SetPassed, SetTurnCount
from .reducer import all_players_passed


@dataclass
class ActionPhaseSummary:
    passed_count: int
    total_players: int
    active_players: int
    all_passed: bool
    turn_count: int


class PassTracker:
    """
    Tracks which players have passed in the current action phase.

    The all-passed flag is recomputed by the same command that changes a
    pass flag, so it is never stale.
    """

    def __init__(self, store: GameStateStore):
        self.store = store

    def mark_passed(self, player_id: str) -> bool:
        return self.store.apply(SetPassed(player_id=player_id, has_passed=True)).success

    def unpass(self, player_id: str) -> bool:
        return self.store.apply(SetPassed(player_id=player_id, has_passed=False)).success

    def reset_all_passes(self) -> bool:
        """Clear every pass flag and count a new turn cycle. Cards are kept."""
        return self.store.apply(ResetAllPasses()).success

    def have_all_passed(self) -> bool:
        return all_players_passed(self.store.get())

    def get_passed_players(self) -> list[Player]:
        return [p for p in self.store.get().players if p.has_passed]

    def get_unpassed_players(self) -> list[Player]:
        return [p for p in self.store.get().players if not p.has_passed]

    def has_player_passed(self, player_id: str) -> bool:
        player = self.store.get().get_player(player_id)
        return player.has_passed if player else False

    def get_turn_count(self) -> int:
        return self.store.get().action_phase.turn_count

    def reset_turn_count(self) -> bool:
        return self.store.apply(SetTurnCount(turn_count=0)).success

    def summary(self) -> ActionPhaseSummary:
        state = self.store.get()
        passed = sum(1 for p in state.players if p.has_passed)
        return ActionPhaseSummary(
            passed_count=passed,
            total_players=state.num_players,
            active_players=state.num_players - passed,
            all_passed=state.action_phase.all_passed,
            turn_count=state.action_phase.turn_count,
        )
