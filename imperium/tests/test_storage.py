"""
Tests for file-based state storage.
"""

import json
from datetime import date

import pytest

from ..engine_core.commands import AssignCard, SetVictoryPoints
from ..engine_core.state import GamePhase
from ..storage import StateStorage, default_export_name


@pytest.fixture
def storage(tmp_path) -> StateStorage:
    return StateStorage(data_dir=tmp_path, storage_key="test-game")


class TestSaveLoad:

    def test_nothing_saved(self, storage):
        assert not storage.has_saved_game()
        assert storage.load_game() is None

    def test_save_and_load(self, storage, four_player_session):
        session = four_player_session
        session.store.apply(AssignCard(player_id="p2", initiative=3))
        session.store.apply(SetVictoryPoints(player_id="p4", victory_points=6))
        session.set_game_phase(GamePhase.ACTION)

        assert storage.save_game(session.snapshot())
        assert storage.has_saved_game()
        assert storage.path.name == "test-game.json"

        loaded = storage.load_game()
        assert loaded == session.snapshot()

    def test_document_keys(self, storage, four_player_session):
        storage.save_game(four_player_session.snapshot())
        document = json.loads(storage.path.read_text(encoding="utf-8"))

        assert set(document) == {
            "players", "strategyCards", "currentPlayerIndex", "timerRunning",
            "timerStartTime", "gamePhase", "actionPhase", "agendaPhase",
        }
        assert document["players"][0]["faction"] == "arborec"
        assert document["gamePhase"] == "setup"

    def test_no_tmp_file_left_behind(self, storage, four_player_session, tmp_path):
        storage.save_game(four_player_session.snapshot())
        assert [p.name for p in tmp_path.iterdir()] == ["test-game.json"]

    def test_clear(self, storage, four_player_session):
        storage.save_game(four_player_session.snapshot())
        assert storage.clear_saved_game()
        assert not storage.has_saved_game()
        assert storage.clear_saved_game()

    def test_corrupt_file(self, storage, tmp_path):
        (tmp_path / "test-game.json").write_text("{not json", encoding="utf-8")
        assert storage.load_game() is None

    def test_missing_required_field(self, storage, tmp_path):
        document = {"players": [{"name": "No Id", "faction": "arborec"}]}
        (tmp_path / "test-game.json").write_text(json.dumps(document), encoding="utf-8")
        assert storage.load_game() is None

    def test_is_available(self, storage):
        assert storage.is_available()

    def test_separate_keys(self, tmp_path, four_player_session):
        first = StateStorage(data_dir=tmp_path, storage_key="one")
        second = StateStorage(data_dir=tmp_path, storage_key="two")
        first.save_game(four_player_session.snapshot())

        assert first.has_saved_game()
        assert not second.has_saved_game()


class TestExportImport:

    def test_export_is_indented(self, storage, four_player_session, tmp_path):
        target = tmp_path / "exports" / "game.json"
        assert storage.export_to_file(four_player_session.snapshot(), target)

        text = target.read_text(encoding="utf-8")
        assert text.startswith("{\n  ")

    def test_import(self, storage, four_player_session, tmp_path):
        target = tmp_path / "game.json"
        storage.export_to_file(four_player_session.snapshot(), target)

        imported = storage.import_from_file(target)
        assert imported == four_player_session.snapshot()

    def test_import_missing_file(self, storage, tmp_path):
        assert storage.import_from_file(tmp_path / "nope.json") is None

    def test_default_export_name(self):
        assert default_export_name(date(2026, 10, 19)) == "ti4-game-2026-10-19.json"
