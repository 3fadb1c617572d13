"""
Initiative Ordering - Who acts next in the action phase.

A player's effective initiative is the lowest initiative among the cards
they hold. Factions with the always-first rule act at initiative 0, but
only while they hold a card; a player with no cards never takes a turn.

The current player is a position in the active list, not a player
identity. When someone ahead of that position passes, the same position
can point at a different player. That is how the turn rotates past
passed players.
"""

from __future__ import annotations
import logging
import math

from .state import GameState, Player
from .store import GameStateStore
from .commands import SetCurrentPlayerIndex
from ..games.twilight.factions import is_always_first

logger = logging.getLogger(__name__)


def effective_initiative(player: Player) -> float:
    """
    Initiative used for turn order.

    Examples:
        cards [3, 7], ordinary faction       -> 3
        cards [3, 7], always-first faction   -> 0
        no cards, always-first faction       -> inf
    """
    if not player.strategy_cards:
        return math.inf
    if is_always_first(player.faction_id):
        return 0
    return min(player.strategy_cards)


def active_players_in(state: GameState) -> list[Player]:
    """Players holding a card who have not passed, in turn order."""
    candidates = [p for p in state.players if p.strategy_cards and not p.has_passed]
    # sorted() is stable: registration order breaks ties
    return sorted(candidates, key=effective_initiative)


class InitiativeOrderingEngine:

    def __init__(self, store: GameStateStore):
        self.store = store

    def effective_initiative(self, player: Player) -> float:
        return effective_initiative(player)

    def active_players(self) -> list[Player]:
        return active_players_in(self.store.get())

    def get_current_player(self) -> Player | None:
        """Resolve the turn pointer against the active list as it is now."""
        state = self.store.get()
        active = active_players_in(state)
        if not active:
            return None
        return active[state.current_player_index % len(active)]

    def advance_turn(self) -> bool:
        """
        Move the turn pointer to the next active position.

        The active list is recomputed first, since passes may have changed
        it. With nobody active the pointer stays where it is.
        """
        state = self.store.get()
        active = active_players_in(state)
        if not active:
            logger.debug("No active players; turn not advanced")
            return False

        next_index = (state.current_player_index + 1) % len(active)
        return self.store.apply(SetCurrentPlayerIndex(index=next_index)).success

    def turn_order(self) -> list[Player]:
        """Everyone holding a card, passed or not, in initiative order."""
        state = self.store.get()
        return sorted(
            (p for p in state.players if p.strategy_cards),
            key=effective_initiative,
        )

    def players_by_initiative(self) -> list[Player]:
        """All players in initiative order; players without cards go last."""
        return sorted(self.store.get().players, key=effective_initiative)
