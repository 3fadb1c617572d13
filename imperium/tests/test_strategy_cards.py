"""
Tests for strategy card assignment.

Tests:
- Quota table
- Assignment, reassignment and idempotence
- Exact-quota validation
- Activation
"""

import pytest

from ..engine_core.commands import AddPlayer, StartNewRound
from ..engine_core.strategy_cards import StrategyCardAssignmentEngine
from ..games.twilight.cards import STRATEGY_CARDS, get_card_color, DEFAULT_CARD_COLOR
from ..games.twilight.rules import quota
from .conftest import add_players


@pytest.fixture
def cards(store) -> StrategyCardAssignmentEngine:
    return StrategyCardAssignmentEngine(store)


class TestQuota:

    @pytest.mark.parametrize("count", range(0, 13))
    def test_quota_table(self, count):
        assert quota(count) == (2 if count in (3, 4) else 1)

    def test_engine_quota_follows_roster(self, store, cards):
        assert cards.max_cards_per_player() == 1
        add_players(store, 3)
        assert cards.max_cards_per_player() == 2

        store.apply(AddPlayer(player_id="p4", name="Dave", faction_id="embers-of-muaat"))
        assert cards.max_cards_per_player() == 2

        store.apply(AddPlayer(player_id="p5", name="Erin", faction_id="emirates-of-hacan"))
        assert cards.max_cards_per_player() == 1


class TestInitialization:

    def test_eight_unowned_cards(self, cards, store):
        snapshot = store.get()
        assert [c.initiative for c in snapshot.strategy_cards] == list(range(1, 9))
        assert [c.name for c in snapshot.strategy_cards] == [d.name for d in STRATEGY_CARDS]
        assert all(c.player_id is None for c in snapshot.strategy_cards)
        assert all(c.trade_good_bonus == 0 for c in snapshot.strategy_cards)

    def test_initialize_only_once(self, cards):
        assert cards.initialize_cards() is False

    def test_card_colors(self):
        assert get_card_color(1) == "#c41e3a"
        assert get_card_color(42) == DEFAULT_CARD_COLOR


class TestAssignment:

    def test_assign_sets_both_directions(self, four_player_store):
        cards = StrategyCardAssignmentEngine(four_player_store)
        assert cards.assign_card("p1", 3)

        snapshot = four_player_store.get()
        assert snapshot.get_card(3).player_id == "p1"
        assert snapshot.get_player("p1").strategy_cards == [3]
        assert cards.get_player_by_card(3).player_id == "p1"

    def test_assign_unknown_player_or_card(self, four_player_store):
        cards = StrategyCardAssignmentEngine(four_player_store)
        before = four_player_store.get()

        assert cards.assign_card("nobody", 1) is False
        assert cards.assign_card("p1", 9) is False
        assert four_player_store.get() == before

    def test_assign_is_idempotent(self, four_player_store):
        cards = StrategyCardAssignmentEngine(four_player_store)
        four_player_store.apply(StartNewRound())  # card 5 gains a bonus
        assert cards.assign_card("p1", 5)
        after_first = four_player_store.get()

        assert cards.assign_card("p1", 5)
        after_second = four_player_store.get()

        assert after_second.get_player("p1").strategy_cards == [5]
        assert after_second.get_card(5) == after_first.get_card(5)
        assert after_second.get_card(5).trade_good_bonus == 0

    def test_assign_resets_bonus(self, four_player_store):
        cards = StrategyCardAssignmentEngine(four_player_store)
        four_player_store.apply(StartNewRound())
        four_player_store.apply(StartNewRound())
        assert four_player_store.get().get_card(8).trade_good_bonus == 2

        cards.assign_card("p2", 8)
        assert four_player_store.get().get_card(8).trade_good_bonus == 0

    def test_reassign_moves_card(self, four_player_store):
        cards = StrategyCardAssignmentEngine(four_player_store)
        cards.assign_card("p1", 2)
        cards.assign_card("p1", 6)
        cards.assign_card("p2", 7)

        before = four_player_store.get()
        assert cards.assign_card("p2", 6)
        after = four_player_store.get()

        assert after.get_player("p1").card_count == before.get_player("p1").card_count - 1
        assert after.get_player("p2").card_count == before.get_player("p2").card_count + 1
        assert after.get_card(6).player_id == "p2"
        assert after.get_player("p1").strategy_cards == [2]
        assert after.get_player("p2").strategy_cards == [7, 6]

    def test_quota_exceeded(self, store):
        add_players(store, 2)
        cards = StrategyCardAssignmentEngine(store)

        assert cards.assign_card("p1", 1)
        assert cards.assign_card("p1", 2) is False
        assert store.get().get_player("p1").strategy_cards == [1]
        assert store.get().get_card(2).player_id is None

    def test_player_at_quota_cannot_take_card_from_another(self, store):
        add_players(store, 2)
        cards = StrategyCardAssignmentEngine(store)
        cards.assign_card("p1", 1)
        cards.assign_card("p2", 2)

        assert cards.assign_card("p1", 2) is False
        assert store.get().get_card(2).player_id == "p2"

    def test_unassign(self, four_player_store):
        cards = StrategyCardAssignmentEngine(four_player_store)
        cards.assign_card("p3", 4)

        assert cards.unassign_card(4)
        snapshot = four_player_store.get()
        assert snapshot.get_card(4).player_id is None
        assert snapshot.get_player("p3").strategy_cards == []

    def test_unassign_unowned_card_fails(self, cards):
        assert cards.unassign_card(4) is False
        assert cards.unassign_card(99) is False

    def test_assigned_and_unassigned_lists(self, four_player_store):
        cards = StrategyCardAssignmentEngine(four_player_store)
        cards.assign_card("p1", 1)
        cards.assign_card("p2", 8)

        assert [c.initiative for c in cards.get_assigned_cards()] == [1, 8]
        assert [c.initiative for c in cards.get_unassigned_cards()] == [2, 3, 4, 5, 6, 7]

    def test_validate_assignment(self, four_player_store):
        cards = StrategyCardAssignmentEngine(four_player_store)
        assert cards.validate_assignment("p1", 1) == (True, None)
        assert cards.validate_assignment("ghost", 1) == (False, "Player not found")
        assert cards.validate_assignment("p1", 0) == (False, "Card not found")


class TestValidateAllAssigned:

    def test_four_player_scenario(self, four_player_store):
        cards = StrategyCardAssignmentEngine(four_player_store)
        for player_id, initiative in [("p1", 1), ("p1", 3), ("p2", 2), ("p2", 4), ("p3", 5), ("p4", 6)]:
            assert cards.assign_card(player_id, initiative)

        validation = cards.validate_all_assigned()
        assert not validation.valid
        assert validation.required_cards == 2
        assert [p.player_id for p in validation.invalid_players] == ["p3", "p4"]
        assert all(p.card_count == 1 for p in validation.invalid_players)
        assert all(p.required_cards - p.card_count == 1 for p in validation.invalid_players)

        cards.assign_card("p3", 7)
        cards.assign_card("p4", 8)
        validation = cards.validate_all_assigned()
        assert validation.valid
        assert validation.invalid_players == []

    def test_holding_more_than_quota_is_invalid(self, store):
        """The roster can change under an existing assignment."""
        add_players(store, 3)
        cards = StrategyCardAssignmentEngine(store)
        cards.assign_card("p1", 1)
        cards.assign_card("p1", 2)
        cards.assign_card("p2", 3)
        cards.assign_card("p2", 4)
        cards.assign_card("p3", 5)
        cards.assign_card("p3", 6)
        assert cards.validate_all_assigned().valid

        # A fifth player drops the quota to one
        store.apply(AddPlayer(player_id="p4", name="Dave", faction_id="embers-of-muaat"))
        store.apply(AddPlayer(player_id="p5", name="Erin", faction_id="emirates-of-hacan"))

        validation = cards.validate_all_assigned()
        assert not validation.valid
        assert validation.required_cards == 1
        assert {p.player_id for p in validation.invalid_players} == {"p1", "p2", "p3", "p4", "p5"}

    def test_no_players_is_valid(self, cards):
        assert cards.validate_all_assigned().valid


class TestActivation:

    def test_toggle(self, four_player_store):
        cards = StrategyCardAssignmentEngine(four_player_store)
        assert cards.toggle_activation(3)
        assert four_player_store.get().get_card(3).is_activated
        assert cards.toggle_activation(3)
        assert not four_player_store.get().get_card(3).is_activated

    def test_toggle_unknown_card(self, cards):
        assert cards.toggle_activation(12) is False

    def test_deactivate_inactive_card_fails(self, cards):
        assert cards.deactivate_card(2) is False
        assert cards.activate_card(2)
        assert cards.deactivate_card(2)

    def test_all_activated(self, four_player_store):
        cards = StrategyCardAssignmentEngine(four_player_store)
        assert cards.are_all_cards_activated() is False

        cards.assign_card("p1", 1)
        cards.assign_card("p2", 2)
        cards.activate_card(1)
        assert cards.are_all_cards_activated() is False

        cards.activate_card(2)
        assert cards.are_all_cards_activated()

    def test_reset_all_activations(self, four_player_store):
        cards = StrategyCardAssignmentEngine(four_player_store)
        cards.activate_card(1)
        cards.activate_card(5)
        cards.reset_all_activations()
        assert not any(c.is_activated for c in four_player_store.get().strategy_cards)
