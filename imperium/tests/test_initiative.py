"""
Tests for initiative ordering and turn rotation.
"""

import math

import pytest

from ..engine_core.state import Player
from ..engine_core.commands import AddPlayer, AssignCard, SetCurrentPlayerIndex, SetPassed
from ..engine_core.initiative import InitiativeOrderingEngine, effective_initiative
from ..games.twilight.factions import is_always_first
from .conftest import add_players


@pytest.fixture
def initiative(four_player_store) -> InitiativeOrderingEngine:
    return InitiativeOrderingEngine(four_player_store)


class TestEffectiveInitiative:

    def test_lowest_held_card(self):
        player = Player(player_id="p", name="P", faction_id="arborec", strategy_cards=[3, 7])
        assert effective_initiative(player) == 3

    def test_order_of_holding_does_not_matter(self):
        player = Player(player_id="p", name="P", faction_id="arborec", strategy_cards=[7, 3])
        assert effective_initiative(player) == 3

    def test_always_first_faction_with_cards(self):
        player = Player(
            player_id="p", name="P", faction_id="naalu-collective", strategy_cards=[3, 7]
        )
        assert is_always_first("naalu-collective")
        assert effective_initiative(player) == 0

    def test_always_first_faction_without_cards(self):
        """The always-first rule only applies while holding a card."""
        player = Player(player_id="p", name="P", faction_id="naalu-collective")
        assert effective_initiative(player) == math.inf

    def test_no_cards(self):
        player = Player(player_id="p", name="P", faction_id="arborec")
        assert effective_initiative(player) == math.inf


class TestActivePlayers:

    def test_turn_order_scenario(self, four_player_store, initiative):
        """A pass ahead of the pointer rotates the turn to the next player."""
        store = four_player_store
        store.apply(AssignCard(player_id="p1", initiative=1))
        store.apply(AssignCard(player_id="p2", initiative=2))
        store.apply(AssignCard(player_id="p2", initiative=4))

        assert [p.player_id for p in initiative.active_players()] == ["p1", "p2"]
        assert initiative.get_current_player().player_id == "p1"

        store.apply(SetPassed(player_id="p1", has_passed=True))

        assert [p.player_id for p in initiative.active_players()] == ["p2"]
        assert store.get().current_player_index == 0
        assert initiative.get_current_player().player_id == "p2"

    def test_players_without_cards_excluded(self, four_player_store, initiative):
        four_player_store.apply(AssignCard(player_id="p3", initiative=5))
        assert [p.player_id for p in initiative.active_players()] == ["p3"]

    def test_always_first_player_leads(self, store):
        add_players(store, 2)
        store.apply(AddPlayer(player_id="naalu", name="Nia", faction_id="naalu-collective"))
        store.apply(AssignCard(player_id="p1", initiative=1))
        store.apply(AssignCard(player_id="p2", initiative=2))
        store.apply(AssignCard(player_id="naalu", initiative=8))

        engine = InitiativeOrderingEngine(store)
        assert [p.player_id for p in engine.active_players()] == ["naalu", "p1", "p2"]

    def test_nobody_active(self, initiative):
        assert initiative.active_players() == []
        assert initiative.get_current_player() is None

    def test_pointer_wraps_around_active_list(self, four_player_store, initiative):
        four_player_store.apply(AssignCard(player_id="p1", initiative=1))
        four_player_store.apply(AssignCard(player_id="p2", initiative=2))
        four_player_store.apply(SetCurrentPlayerIndex(index=5))

        assert initiative.get_current_player().player_id == "p2"


class TestAdvanceTurn:

    def test_advance_cycles(self, four_player_store, initiative):
        for player_id, card in [("p1", 1), ("p2", 2), ("p3", 3)]:
            four_player_store.apply(AssignCard(player_id=player_id, initiative=card))

        seen = []
        for _ in range(4):
            seen.append(initiative.get_current_player().player_id)
            assert initiative.advance_turn()

        assert seen == ["p1", "p2", "p3", "p1"]

    def test_advance_recomputes_after_pass(self, four_player_store, initiative):
        for player_id, card in [("p1", 1), ("p2", 2), ("p3", 3)]:
            four_player_store.apply(AssignCard(player_id=player_id, initiative=card))

        initiative.advance_turn()  # p2's turn
        four_player_store.apply(SetPassed(player_id="p2", has_passed=True))
        assert initiative.get_current_player().player_id == "p3"

        initiative.advance_turn()
        assert initiative.get_current_player().player_id == "p1"

    def test_advance_with_nobody_active(self, four_player_store, initiative):
        four_player_store.apply(SetCurrentPlayerIndex(index=2))
        assert initiative.advance_turn() is False
        assert four_player_store.get().current_player_index == 2


class TestOrdering:

    def test_turn_order_includes_passed(self, four_player_store, initiative):
        four_player_store.apply(AssignCard(player_id="p4", initiative=2))
        four_player_store.apply(AssignCard(player_id="p1", initiative=6))
        four_player_store.apply(SetPassed(player_id="p4", has_passed=True))

        assert [p.player_id for p in initiative.turn_order()] == ["p4", "p1"]

    def test_players_by_initiative_puts_cardless_last(self, four_player_store, initiative):
        four_player_store.apply(AssignCard(player_id="p3", initiative=4))
        order = [p.player_id for p in initiative.players_by_initiative()]
        assert order == ["p3", "p1", "p2", "p4"]
