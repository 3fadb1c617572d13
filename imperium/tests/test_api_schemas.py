"""
Tests for API schemas and the HTTP surface.

Ensures:
1. Saved game documents are validated before reaching the core
2. Error bodies follow the ErrorResponse shape
3. HTTP status codes follow the error codes
4. OpenAPI generation works
"""

import pytest
from pydantic import ValidationError

from ..api.schemas import (
    AssignCardRequest,
    ErrorCode,
    ErrorResponse,
    GameStateDocument,
    VoteRequest,
)
from ..api.service import TrackerService


def _document(**overrides) -> dict:
    document = {
        "players": [
            {"id": "p1", "name": "Alice", "faction": "arborec", "strategyCards": [1]},
            {"id": "p2", "name": "Bob", "faction": "winnu", "isSpeaker": True},
        ],
        "strategyCards": [
            {"initiative": 1, "name": "Leadership", "playerId": "p1"},
            {"initiative": 2, "name": "Diplomacy"},
        ],
        "gamePhase": "action",
    }
    document.update(overrides)
    return document


class TestGameStateDocument:

    def test_valid_document(self):
        document = GameStateDocument.model_validate(_document())

        assert document.players[0].strategy_cards == [1]
        assert document.game_phase.value == "action"
        dumped = document.to_document()
        assert dumped["players"][1]["isSpeaker"] is True
        assert dumped["agendaPhase"] == {"agendas": [], "currentAgendaIndex": 0}

    def test_unknown_keys_are_ignored(self):
        document = GameStateDocument.model_validate(_document(theme="dark"))
        assert "theme" not in document.to_document()

    def test_duplicate_player_ids(self):
        players = [
            {"id": "p1", "name": "Alice", "faction": "arborec"},
            {"id": "p1", "name": "Bob", "faction": "winnu"},
        ]
        with pytest.raises(ValidationError, match="unique"):
            GameStateDocument.model_validate({"players": players})

    def test_two_speakers(self):
        players = [
            {"id": "p1", "name": "Alice", "faction": "arborec", "isSpeaker": True},
            {"id": "p2", "name": "Bob", "faction": "winnu", "isSpeaker": True},
        ]
        with pytest.raises(ValidationError, match="speaker"):
            GameStateDocument.model_validate({"players": players})

    def test_player_holds_card_owned_by_nobody(self):
        cards = [{"initiative": 1, "name": "Leadership"}]
        with pytest.raises(ValidationError, match="does not own"):
            GameStateDocument.model_validate(_document(strategyCards=cards))

    def test_card_owner_does_not_hold_it(self):
        cards = [
            {"initiative": 1, "name": "Leadership", "playerId": "p1"},
            {"initiative": 2, "name": "Diplomacy", "playerId": "p2"},
        ]
        with pytest.raises(ValidationError, match="does not hold"):
            GameStateDocument.model_validate(_document(strategyCards=cards))

    @pytest.mark.parametrize("player", [
        {"id": "p1", "name": "Alice", "faction": "arborec", "victoryPoints": 100},
        {"id": "p1", "name": "Alice", "faction": "arborec", "victoryPoints": -1},
        {"id": "p1", "name": "Alice", "faction": "arborec", "turnTimeSeconds": -3},
    ])
    def test_out_of_range_values(self, player):
        with pytest.raises(ValidationError):
            GameStateDocument.model_validate({"players": [player]})

    def test_unknown_phase(self):
        with pytest.raises(ValidationError):
            GameStateDocument.model_validate({"gamePhase": "strategy"})


class TestRequestModels:

    @pytest.mark.parametrize("initiative", [0, 9])
    def test_initiative_range(self, initiative):
        with pytest.raises(ValidationError):
            AssignCardRequest(player_id="p1", initiative=initiative)

    def test_negative_votes(self):
        with pytest.raises(ValidationError):
            VoteRequest(player_id="p1", vote_count=-1, voted_for="For")

    def test_error_response_serializes_code(self):
        error = ErrorResponse(error="nope", error_code=ErrorCode.QUOTA_EXCEEDED)
        assert error.model_dump(mode="json") == {
            "success": False,
            "error": "nope",
            "error_code": "QUOTA_EXCEEDED",
            "details": None,
        }


class TestHTTP:

    @pytest.fixture
    def client(self, tmp_path):
        from fastapi.testclient import TestClient
        from ..api.app import create_app

        return TestClient(create_app(TrackerService(data_dir=tmp_path)))

    @pytest.fixture
    def session_id(self, client):
        return client.post("/api/v1/sessions", json={}).json()["session_id"]

    def _add_player(self, client, session_id, name, faction_id):
        response = client.post(
            f"/api/v1/sessions/{session_id}/players",
            json={"name": name, "faction_id": faction_id},
        )
        assert response.status_code == 200
        return response.json()["player_id"]

    def test_health(self, client):
        response = client.get("/api/v1/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_unknown_session_is_404(self, client):
        response = client.get("/api/v1/sessions/nope/state")

        assert response.status_code == 404
        assert response.json()["error_code"] == "SESSION_NOT_FOUND"

    def test_quota_exceeded_is_400(self, client, session_id):
        player_id = self._add_player(client, session_id, "Alice", "arborec")
        assign = f"/api/v1/sessions/{session_id}/cards/assign"

        assert client.post(assign, json={"player_id": player_id, "initiative": 1}).status_code == 200
        response = client.post(assign, json={"player_id": player_id, "initiative": 2})

        assert response.status_code == 400
        assert response.json()["error_code"] == "QUOTA_EXCEEDED"

    def test_request_validation_is_422(self, client, session_id):
        response = client.post(
            f"/api/v1/sessions/{session_id}/cards/assign",
            json={"player_id": "p1", "initiative": 11},
        )
        assert response.status_code == 422

    def test_agenda_flow(self, client, session_id):
        base = f"/api/v1/sessions/{session_id}"
        alice = self._add_player(client, session_id, "Alice", "arborec")
        bob = self._add_player(client, session_id, "Bob", "winnu")

        client.post(f"{base}/agendas", json={"name": "Mandate"})
        client.post(f"{base}/agendas/current/votes",
                    json={"player_id": alice, "vote_count": 3, "voted_for": "For"})
        client.post(f"{base}/agendas/current/votes",
                    json={"player_id": bob, "vote_count": 2, "voted_for": "Against"})

        tally = client.get(f"{base}/agendas/current/tally").json()
        assert tally["vote_summary"] == {"For": 3, "Against": 2}

        client.put(f"{base}/agendas/current/outcome", json={"outcome": "For"})
        state = client.post(f"{base}/agendas/current/complete").json()["state"]
        agenda_id = state["agendas"][0]["agenda_id"]

        assert client.get(f"{base}/agendas/{agenda_id}/tally").json()["winning_option"] == "For"
        assert client.delete(f"{base}/agendas/{agenda_id}").status_code == 200
        assert client.get(f"{base}/agendas/{agenda_id}/tally").status_code == 404

    def test_vp_endpoints(self, client, session_id):
        base = f"/api/v1/sessions/{session_id}"
        alice = self._add_player(client, session_id, "Alice", "arborec")

        client.put(f"{base}/players/{alice}/vp", json={"points": 8})
        client.post(f"{base}/players/{alice}/vp/gain", json={"amount": 2})

        win = client.get(f"{base}/vp/win").json()
        assert win["has_winner"]
        history = client.get(f"{base}/vp/history", params={"count": 1}).json()
        assert [c["reason"] for c in history["changes"]] == ["Gained 2 VP"]

    def test_openapi_schema(self, client):
        schema = client.get("/openapi.json").json()

        assert "/api/v1/sessions/{session_id}/cards/assign" in schema["paths"]
        for name in ["GameStateResponse", "ErrorResponse", "TallyResponse"]:
            assert name in schema["components"]["schemas"]
