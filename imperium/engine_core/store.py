"""
Game State Store - Single owner of the mutable state tree.

The store:
- Holds exactly one GameState
- Hands out deep snapshots only (get); callers can never reach the
  canonical tree through a returned value
- Applies typed commands atomically through the Reducer
- Notifies subscribers synchronously, in registration order, once per
  successful mutation

A subscriber that raises is logged and skipped; later subscribers still
receive the update and the mutation still counts as applied. Slow
collaborators (rendering, persistence) belong behind a subscriber and
must never be called from a reducer handler.
"""

from __future__ import annotations
import logging
from collections import deque
from typing import Callable

from .state import GameState
from .commands import Command, CommandResult, ReplaceState, ResetGame
from .reducer import Reducer

logger = logging.getLogger(__name__)

Subscriber = Callable[[GameState], None]


class GameStateStore:
    """
    Single writer, single state tree.

    Usage:
        store = GameStateStore()
        store.subscribe(render)

        result = store.apply(AssignCard(player_id="p1", initiative=3))
        if result.success:
            snapshot = store.get()
    """

    def __init__(self, state: GameState | None = None, reducer: Reducer | None = None):
        self._state = state.clone() if state else GameState()
        self._reducer = reducer or Reducer()
        self._subscribers: list[Subscriber] = []
        self._pending: deque[GameState] = deque()
        self._notifying = False

    # =========================================================================
    # Queries
    # =========================================================================

    def get(self) -> GameState:
        """Return a deep, independent snapshot of the current state."""
        return self._state.clone()

    @property
    def player_count(self) -> int:
        return len(self._state.players)

    # =========================================================================
    # Mutation
    # =========================================================================

    def apply(self, command: Command) -> CommandResult:
        """
        Apply a command atomically.

        On failure the canonical state is untouched and nobody is notified.
        On success the new state replaces the old one, then subscribers run.
        The returned result carries a snapshot, not the canonical tree.
        """
        result = self._reducer.apply(self._state, command)
        if not result.success or result.new_state is None:
            logger.debug(
                "Rejected %s: %s (%s)",
                command.command_type.value, result.error, result.error_code,
            )
            return result

        self._state = result.new_state
        for change in result.changes:
            logger.info(change)

        self._notify()
        return CommandResult.success_with_state(self._state.clone(), changes=result.changes)

    def load(self, state: GameState) -> CommandResult:
        """Replace the whole state tree (no merge, no migration)."""
        return self.apply(ReplaceState(state=state))

    def reset(self) -> CommandResult:
        """Start over from an empty tree."""
        return self.apply(ResetGame())

    # =========================================================================
    # Subscriptions
    # =========================================================================

    def subscribe(self, callback: Subscriber, *, replay: bool = True) -> bool:
        """
        Register a callback for state changes.

        By default the callback is called once straight away with the
        current state, so a new view can render without waiting for the
        next change. Returns False for non-callables.
        """
        if not callable(callback):
            return False

        self._subscribers.append(callback)
        if replay:
            self._deliver(callback, self._state.clone())
        return True

    def unsubscribe(self, callback: Subscriber) -> bool:
        """Remove a callback. Returns False if it was not registered."""
        before = len(self._subscribers)
        self._subscribers = [s for s in self._subscribers if s != callback]
        return len(self._subscribers) != before

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def _notify(self):
        """
        Deliver the state produced by one mutation to every subscriber.

        A subscriber may apply further commands; their states are queued and
        delivered after the current one, so every subscriber sees each
        mutation exactly once and in order.
        """
        self._pending.append(self._state)
        if self._notifying:
            return

        self._notifying = True
        try:
            while self._pending:
                state = self._pending.popleft()
                # Iterate over a copy: a subscriber may unsubscribe itself
                for callback in list(self._subscribers):
                    self._deliver(callback, state.clone())
        finally:
            self._notifying = False

    @staticmethod
    def _deliver(callback: Subscriber, snapshot: GameState):
        try:
            callback(snapshot)
        except Exception:
            logger.exception("Error in subscriber callback %r", callback)
