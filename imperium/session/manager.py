"""
Session Manager - Creates and manages tracked games.

A session is one game at one table:
- Owns exactly one GameStateStore
- Owns one instance of every engine, all sharing that store
- Optionally autosaves through a StateStorage subscriber

There are no process-wide singletons. Anything that needs the game gets
the session (or one of its engines) passed in.
"""

from __future__ import annotations
import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Callable

from ..engine_core.state import GamePhase, GameState
from ..engine_core.commands import CommandResult, SetGamePhase, StartNewRound
from ..engine_core.store import GameStateStore
from ..engine_core.strategy_cards import StrategyCardAssignmentEngine
from ..engine_core.initiative import InitiativeOrderingEngine
from ..engine_core.passes import PassTracker
from ..engine_core.agenda import AgendaBallotTracker
from ..engine_core.victory import VictoryPointLedger
from ..engine_core.players import PlayerRegistry
from ..engine_core.timer import TurnTimer
from ..storage import StateStorage

logger = logging.getLogger(__name__)


@dataclass
class GameSession:
    """
    One tracked game.

    Contains:
    - The store (the only mutable state)
    - The engines, each holding a reference to the same store
    - Session metadata
    """
    session_id: str
    created_at: float
    store: GameStateStore
    cards: StrategyCardAssignmentEngine
    initiative: InitiativeOrderingEngine
    passes: PassTracker
    agenda: AgendaBallotTracker
    victory: VictoryPointLedger
    players: PlayerRegistry
    timer: TurnTimer
    storage: StateStorage | None = None
    metadata: dict[str, str] = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        session_id: str | None = None,
        state: GameState | None = None,
        clock: Callable[[], float] = time.time,
    ) -> GameSession:
        """Build a session with a fresh store and its engines."""
        store = GameStateStore(state)
        initiative = InitiativeOrderingEngine(store)
        session = cls(
            session_id=session_id or str(uuid.uuid4()),
            created_at=clock(),
            store=store,
            cards=StrategyCardAssignmentEngine(store),
            initiative=initiative,
            passes=PassTracker(store),
            agenda=AgendaBallotTracker(store, clock=clock),
            victory=VictoryPointLedger(store, clock=clock),
            players=PlayerRegistry(store),
            timer=TurnTimer(store, initiative, clock=clock),
        )
        session.cards.initialize_cards()
        return session

    def snapshot(self) -> GameState:
        return self.store.get()

    def set_game_phase(self, phase: GamePhase) -> bool:
        return self.store.apply(SetGamePhase(phase=phase)).success

    def start_new_round(self) -> bool:
        """Reset cards, passes and the turn pointer for a new round."""
        result = self.store.apply(StartNewRound())
        if result.success:
            logger.info("Session %s: new round", self.session_id)
        return result.success

    def reset_game(self) -> CommandResult:
        """Wipe the game and deal out a fresh set of strategy cards."""
        result = self.store.reset()
        self.agenda.cancel_current_agenda()
        self.victory.clear_history()
        self.cards.initialize_cards()
        return result

    def load_state(self, state: GameState) -> CommandResult:
        """Full replace; the open agenda does not survive a load."""
        self.agenda.cancel_current_agenda()
        result = self.store.load(state)
        if not self.store.get().strategy_cards:
            self.cards.initialize_cards()
        return result

    # =========================================================================
    # Persistence
    # =========================================================================

    def enable_autosave(self, storage: StateStorage):
        """Save after every change, once the game has players."""
        self.storage = storage
        self.store.subscribe(self._autosave, replay=False)

    def disable_autosave(self):
        self.store.unsubscribe(self._autosave)
        self.storage = None

    def _autosave(self, state: GameState):
        if self.storage is not None and state.players:
            self.storage.save_game(state)


class SessionManager:
    """
    Manages game sessions.

    Responsibilities:
    - Create sessions
    - Track active sessions
    - End sessions

    Sessions are in-memory; persistence is opt-in per session.
    """

    def __init__(self):
        self._sessions: dict[str, GameSession] = {}

    def create_session(
        self,
        state: GameState | None = None,
        autosave_storage: StateStorage | None = None,
    ) -> GameSession:
        """
        Create a new game session.

        Args:
            state: Optional state to start from (e.g. an imported game)
            autosave_storage: Save after every change to this storage

        Returns:
            New GameSession with strategy cards dealt out
        """
        session = GameSession.create(state=state)
        if autosave_storage is not None:
            session.enable_autosave(autosave_storage)

        self._sessions[session.session_id] = session
        logger.info("Created session %s", session.session_id)
        return session

    def get_session(self, session_id: str) -> GameSession | None:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    def end_session(self, session_id: str) -> bool:
        """End a session and drop it from memory."""
        session = self._sessions.pop(session_id, None)
        if not session:
            return False
        session.disable_autosave()
        logger.info("Ended session %s", session_id)
        return True

    def list_active_sessions(self) -> list[str]:
        """List IDs of active sessions."""
        return list(self._sessions)
