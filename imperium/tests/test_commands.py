"""
Tests for command parsing at the boundary.
"""

import pytest

from ..engine_core.state import Agenda, Ballot, GamePhase, GameState
from ..engine_core.commands import (
    AddPlayer,
    ArchiveAgenda,
    AssignCard,
    CommandParseError,
    ReplaceState,
    SetGamePhase,
    PauseTimer,
    SetPassed,
    SetTimer,
    StartNewRound,
    parse_command,
    parse_commands,
)


class TestParseCommand:

    def test_parse_assign_card(self):
        command = parse_command({"type": "assign_card", "player_id": "p1", "initiative": 3})
        assert command == AssignCard(player_id="p1", initiative=3)

    def test_parse_command_without_fields(self):
        assert parse_command({"type": "start_new_round"}) == StartNewRound()

    def test_to_dict_parses_back(self):
        """A command's dict form is accepted by the parser."""
        commands = [
            AddPlayer(player_id="p1", name="Alice", faction_id="arborec"),
            SetPassed(player_id="p1", has_passed=True),
            SetGamePhase(phase=GamePhase.AGENDA),
            SetTimer(running=True, start_time=12.5),
            PauseTimer(player_id="p1", seconds=30),
            PauseTimer(),
        ]
        assert parse_commands([c.to_dict() for c in commands]) == commands

    def test_parse_nested_documents(self):
        agenda = Agenda(
            agenda_id="agenda-1",
            name="Mandate",
            votes=[Ballot(player_id="p1", player_name="Alice", vote_count=3, voted_for="For")],
            outcome="For",
            timestamp=10.0,
        )
        assert parse_command(ArchiveAgenda(agenda=agenda).to_dict()) == ArchiveAgenda(agenda=agenda)

        state = GameState(game_phase=GamePhase.STATUS)
        assert parse_command(ReplaceState(state=state).to_dict()) == ReplaceState(state=state)


class TestParseErrors:

    def test_missing_type(self):
        with pytest.raises(CommandParseError, match="missing 'type'"):
            parse_command({"player_id": "p1"})

    def test_unknown_type(self):
        with pytest.raises(CommandParseError, match="Unknown command type"):
            parse_command({"type": "merge_state", "players": []})

    def test_missing_field(self):
        with pytest.raises(CommandParseError, match="initiative"):
            parse_command({"type": "assign_card", "player_id": "p1"})

    def test_wrong_field_type(self):
        with pytest.raises(CommandParseError):
            parse_command({"type": "assign_card", "player_id": "p1", "initiative": "3"})

    def test_bool_is_not_a_number(self):
        with pytest.raises(CommandParseError):
            parse_command({"type": "set_victory_points", "player_id": "p1", "victory_points": True})

    def test_unknown_phase(self):
        with pytest.raises(CommandParseError, match="Unknown game phase"):
            parse_command({"type": "set_game_phase", "phase": "combat"})

    def test_malformed_agenda_document(self):
        with pytest.raises(CommandParseError, match="Malformed"):
            parse_command({"type": "archive_agenda", "agenda": {"name": "No id"}})

    def test_parse_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_command({"type": "nope"})
