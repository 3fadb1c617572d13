"""
Tests for the victory point ledger.
"""

from dataclasses import FrozenInstanceError

import pytest

from ..engine_core.victory import HISTORY_LIMIT, VictoryPointLedger
from ..games.twilight.rules import MAX_VP, WIN_CONDITION_VP
from .conftest import add_players


class TestMutations:

    def test_set_and_clamp(self, four_player_session):
        victory = four_player_session.victory

        assert victory.set_player_vp("p1", 7)
        assert victory.get_player_vp("p1") == 7

        assert victory.set_player_vp("p1", 150)
        assert victory.get_player_vp("p1") == MAX_VP

        assert victory.set_player_vp("p1", -3)
        assert victory.get_player_vp("p1") == 0

    def test_set_non_numeric_becomes_zero(self, four_player_session):
        victory = four_player_session.victory
        victory.set_player_vp("p1", 5)
        victory.set_player_vp("p1", "abc")
        assert victory.get_player_vp("p1") == 0

    def test_set_truncates_fractions(self, four_player_session):
        victory = four_player_session.victory
        assert victory.set_player_vp("p1", "6.9")
        assert victory.get_player_vp("p1") == 6

        victory.set_player_vp("p1", 3.2)
        assert victory.get_player_vp("p1") == 3

    def test_increment_and_decrement(self, four_player_session):
        victory = four_player_session.victory
        victory.increment_player_vp("p2")
        victory.increment_player_vp("p2", 3)
        victory.decrement_player_vp("p2", 2)

        assert victory.get_player_vp("p2") == 2

    def test_decrement_below_zero_is_clamped(self, four_player_session):
        victory = four_player_session.victory
        assert victory.decrement_player_vp("p3", 5)
        assert victory.get_player_vp("p3") == 0
        assert victory.get_history() == []

    def test_unknown_player(self, four_player_session):
        victory = four_player_session.victory
        assert victory.set_player_vp("ghost", 3) is False
        assert victory.increment_player_vp("ghost") is False
        assert victory.get_player_vp("ghost") == 0

    def test_reset_all(self, four_player_session):
        victory = four_player_session.victory
        victory.set_player_vp("p1", 4)
        victory.set_player_vp("p4", 9)

        assert victory.reset_all_vps()
        assert all(p.victory_points == 0 for p in four_player_session.snapshot().players)
        assert [c.reason for c in victory.get_recent_changes(2)] == ["Reset", "Reset"]


class TestAuditTrail:

    def test_records_net_changes(self, four_player_session, clock):
        victory = four_player_session.victory
        victory.set_player_vp("p1", 4)
        clock.advance(30)
        victory.increment_player_vp("p1", 2)

        history = victory.get_history()
        assert [(c.old_vp, c.new_vp, c.delta, c.reason) for c in history] == [
            (0, 4, 4, "Manual set"),
            (4, 6, 2, "Gained 2 VP"),
        ]
        assert history[0].player_name == "Alice"
        assert history[1].timestamp - history[0].timestamp == 30

    def test_no_op_not_recorded(self, four_player_session):
        victory = four_player_session.victory
        victory.set_player_vp("p1", 0)
        victory.set_player_vp("p1", 99)
        victory.increment_player_vp("p1")

        assert len(victory.get_history()) == 1

    def test_history_is_bounded(self, four_player_session):
        """Pushing 105 changes evicts the oldest 5."""
        victory = four_player_session.victory
        for points in range(1, 100):
            victory.set_player_vp("p1", points)
        for points in range(1, 7):
            victory.set_player_vp("p2", points)

        history = victory.get_history()
        assert len(history) == HISTORY_LIMIT
        assert (history[0].player_id, history[0].old_vp, history[0].new_vp) == ("p1", 5, 6)
        assert (history[-1].player_id, history[-1].new_vp) == ("p2", 6)

    def test_recent_changes_newest_first(self, four_player_session):
        victory = four_player_session.victory
        for points in [1, 2, 3, 4]:
            victory.set_player_vp("p2", points)

        recent = victory.get_recent_changes(2)
        assert [c.new_vp for c in recent] == [4, 3]
        assert victory.get_recent_changes(0) == []

    def test_records_are_read_only(self, four_player_session):
        victory = four_player_session.victory
        victory.set_player_vp("p1", 4)

        with pytest.raises(FrozenInstanceError):
            victory.get_history()[0].new_vp = 10
        with pytest.raises(FrozenInstanceError):
            victory.get_recent_changes(1)[0].reason = "Forged"

        change = victory.get_history()[0]
        assert (change.new_vp, change.reason) == (4, "Manual set")

    def test_clear_history(self, four_player_session):
        victory = four_player_session.victory
        victory.set_player_vp("p1", 1)
        victory.clear_history()
        assert victory.get_history() == []


class TestWinCondition:

    def test_no_winner(self, four_player_session):
        victory = four_player_session.victory
        victory.set_player_vp("p1", WIN_CONDITION_VP - 1)

        check = victory.check_win_condition()
        assert not check.has_winner
        assert check.winners == []
        assert check.winning_vp == WIN_CONDITION_VP

    def test_multiple_winners(self, four_player_session):
        victory = four_player_session.victory
        victory.set_player_vp("p1", 10)
        victory.set_player_vp("p3", 12)
        victory.set_player_vp("p4", 9)

        check = victory.check_win_condition()
        assert check.has_winner
        assert [p.player_id for p in check.winners] == ["p1", "p3"]
        assert victory.has_player_won("p3")
        assert not victory.has_player_won("p4")

    def test_leader(self, four_player_session):
        victory = four_player_session.victory
        victory.set_player_vp("p2", 6)
        leader = victory.get_leader()
        assert leader.vp == 6
        assert [p.player_id for p in leader.players] == ["p2"]
        assert not leader.is_tied

    def test_leader_tie(self, four_player_session):
        victory = four_player_session.victory
        victory.set_player_vp("p2", 6)
        victory.set_player_vp("p4", 6)

        leader = victory.get_leader()
        assert leader.is_tied
        assert [p.player_id for p in leader.players] == ["p2", "p4"]

    def test_no_leader_without_players(self, session):
        assert session.victory.get_leader() is None


class TestStandings:

    def test_standings_and_summary(self, four_player_session):
        victory = four_player_session.victory
        victory.set_player_vp("p1", 3)
        victory.set_player_vp("p2", 8)
        victory.set_player_vp("p3", 1)

        standings = victory.get_standings()
        assert [(s.rank, s.player_id) for s in standings] == [
            (1, "p2"), (2, "p1"), (3, "p3"), (4, "p4"),
        ]
        assert standings[0].is_leader
        assert not standings[1].is_leader

        summary = victory.get_summary()
        assert summary.total_players == 4
        assert summary.total_vp == 12
        assert summary.average_vp == 3.0
        assert summary.leader.vp == 8
        assert not summary.has_winner

    def test_summary_rounds_average(self, store):
        add_players(store, 3)
        victory = VictoryPointLedger(store)
        victory.set_player_vp("p1", 1)
        victory.set_player_vp("p2", 1)

        assert victory.get_summary().average_vp == pytest.approx(0.7)

    def test_empty_summary(self, session):
        summary = session.victory.get_summary()
        assert summary.total_players == 0
        assert summary.average_vp == 0
        assert summary.leader is None
