"""
Strategy Card Assignment - Card ownership against per-player quotas.

Player count decides the quota: three and four player games hold two
cards each, every other count holds one. Ownership is always kept
consistent in both directions (card -> player and player -> cards).
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field

from .state import Player, StrategyCard
from .store import GameStateStore
from .commands import AssignCard, InitializeStrategyCards, SetCardActivation, UnassignCard
from ..games.twilight.cards import STRATEGY_CARDS
from ..games.twilight.rules import quota

logger = logging.getLogger(__name__)


@dataclass
class InvalidAssignment:
    """A player whose card count does not match the quota."""
    player_id: str
    name: str
    card_count: int
    required_cards: int


@dataclass
class AssignmentValidation:
    valid: bool
    required_cards: int
    invalid_players: list[InvalidAssignment] = field(default_factory=list)


def create_strategy_cards() -> list[StrategyCard]:
    """Fresh, unowned runtime cards for every catalog definition."""
    return [StrategyCard(initiative=d.initiative, name=d.name) for d in STRATEGY_CARDS]


class StrategyCardAssignmentEngine:
    """
    Assigns, unassigns and validates strategy cards.

    All reads go through store snapshots; all writes are single commands,
    so a reassignment (revoke from one player, give to another) is one
    atomic mutation.
    """

    def __init__(self, store: GameStateStore):
        self.store = store

    def initialize_cards(self) -> bool:
        """Create the eight strategy cards, once per game."""
        if self.store.get().strategy_cards:
            return False
        return self.store.apply(InitializeStrategyCards(cards=create_strategy_cards())).success

    def max_cards_per_player(self) -> int:
        return quota(self.store.player_count)

    def assign_card(self, player_id: str, initiative: int) -> bool:
        """
        Give a card to a player.

        Returns False (and changes nothing) for an unknown player or card,
        or when the player is already at quota. Assigning a card the
        player already owns succeeds without changing anything.
        """
        result = self.store.apply(AssignCard(player_id=player_id, initiative=initiative))
        if not result.success:
            logger.debug("Card %s not assigned to %s: %s", initiative, player_id, result.error)
        return result.success

    def unassign_card(self, initiative: int) -> bool:
        """Release a card. Returns False if it was not assigned."""
        return self.store.apply(UnassignCard(initiative=initiative)).success

    def validate_all_assigned(self) -> AssignmentValidation:
        """
        Check that every player holds exactly their quota of cards.

        Holding fewer cards than required is invalid, and so is holding
        more (possible after the roster changes).
        """
        state = self.store.get()
        required = quota(state.num_players)

        invalid = [
            InvalidAssignment(
                player_id=p.player_id,
                name=p.name,
                card_count=p.card_count,
                required_cards=required,
            )
            for p in state.players
            if p.card_count != required
        ]
        return AssignmentValidation(
            valid=not invalid,
            required_cards=required,
            invalid_players=invalid,
        )

    def validate_assignment(self, player_id: str, initiative: int) -> tuple[bool, str | None]:
        """Check that both ends of an assignment exist."""
        state = self.store.get()
        if not state.get_player(player_id):
            return False, "Player not found"
        if not state.get_card(initiative):
            return False, "Card not found"
        return True, None

    # =========================================================================
    # Activation
    # =========================================================================

    def toggle_activation(self, initiative: int) -> bool:
        card = self.store.get().get_card(initiative)
        if not card:
            return False
        return self.store.apply(
            SetCardActivation(initiative=initiative, activated=not card.is_activated)
        ).success

    def activate_card(self, initiative: int) -> bool:
        return self.store.apply(SetCardActivation(initiative=initiative, activated=True)).success

    def deactivate_card(self, initiative: int) -> bool:
        card = self.store.get().get_card(initiative)
        if not card or not card.is_activated:
            return False
        return self.store.apply(SetCardActivation(initiative=initiative, activated=False)).success

    def reset_all_activations(self):
        for card in self.store.get().strategy_cards:
            if card.is_activated:
                self.store.apply(SetCardActivation(initiative=card.initiative, activated=False))

    def are_all_cards_activated(self) -> bool:
        """True when at least one card is assigned and every assigned card is activated."""
        assigned = self.get_assigned_cards()
        if not assigned:
            return False
        return all(card.is_activated for card in assigned)

    # =========================================================================
    # Queries
    # =========================================================================

    def get_player_by_card(self, initiative: int) -> Player | None:
        state = self.store.get()
        card = state.get_card(initiative)
        if card and card.player_id:
            return state.get_player(card.player_id)
        return None

    def get_unassigned_cards(self) -> list[StrategyCard]:
        return [c for c in self.store.get().strategy_cards if c.player_id is None]

    def get_assigned_cards(self) -> list[StrategyCard]:
        return [c for c in self.store.get().strategy_cards if c.player_id is not None]
