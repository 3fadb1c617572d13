"""
Pytest fixtures for tracker tests.
"""

import pytest

from ..engine_core.state import GameState
from ..engine_core.commands import AddPlayer
from ..engine_core.store import GameStateStore
from ..engine_core.strategy_cards import StrategyCardAssignmentEngine
from ..session import GameSession


class FakeClock:
    """Manually advanced clock for timer and timestamp tests."""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


ROSTER = [
    ("p1", "Alice", "arborec"),
    ("p2", "Bob", "barony-of-letnev"),
    ("p3", "Carol", "clan-of-saar"),
    ("p4", "Dave", "embers-of-muaat"),
    ("p5", "Erin", "emirates-of-hacan"),
    ("p6", "Frank", "federation-of-sol"),
    ("p7", "Grace", "ghosts-of-creuss"),
    ("p8", "Heidi", "l1z1x-mindnet"),
]


def add_players(store: GameStateStore, count: int) -> list[str]:
    """Register the first `count` roster entries with fixed ids."""
    for player_id, name, faction_id in ROSTER[:count]:
        result = store.apply(AddPlayer(player_id=player_id, name=name, faction_id=faction_id))
        assert result.success, result.error
    return [player_id for player_id, _, _ in ROSTER[:count]]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> GameStateStore:
    """A store with the eight strategy cards and no players."""
    store = GameStateStore(GameState())
    StrategyCardAssignmentEngine(store).initialize_cards()
    return store


@pytest.fixture
def four_player_store(store: GameStateStore) -> GameStateStore:
    """Store with players p1..p4 (quota 2)."""
    add_players(store, 4)
    return store


@pytest.fixture
def session(clock: FakeClock) -> GameSession:
    """A fresh session on the fake clock."""
    return GameSession.create(session_id="test-session", clock=clock)


@pytest.fixture
def four_player_session(session: GameSession) -> GameSession:
    add_players(session.store, 4)
    return session
