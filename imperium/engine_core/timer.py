"""
Turn Timer - Accumulates time spent by the current player.

Only bookkeeping lives here; ticking a display every second is the UI's
job. Elapsed time is measured from a start timestamp so a paused or
backgrounded display never loses time.
"""

from __future__ import annotations
import time
from typing import Callable

from .store import GameStateStore
from .commands import PauseTimer, ResetTurnTime, SetTimer
from .initiative import InitiativeOrderingEngine


def format_time(total_seconds: int) -> str:
    """Format seconds as MM:SS."""
    minutes, seconds = divmod(max(0, int(total_seconds)), 60)
    return f"{minutes:02d}:{seconds:02d}"


class TurnTimer:

    def __init__(
        self,
        store: GameStateStore,
        initiative: InitiativeOrderingEngine,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.initiative = initiative
        self._clock = clock

    def is_running(self) -> bool:
        return self.store.get().timer_running

    def start(self) -> bool:
        if self.is_running():
            return False
        return self.store.apply(SetTimer(running=True, start_time=self._clock())).success

    def pause(self) -> bool:
        """Stop the timer and bank the elapsed whole seconds on the current player."""
        state = self.store.get()
        if not state.timer_running:
            return False

        current = self.initiative.get_current_player()
        if current and state.timer_start_time is not None:
            command = PauseTimer(
                player_id=current.player_id,
                seconds=self._elapsed(state.timer_start_time),
            )
        else:
            command = PauseTimer()
        # Banking and stopping land as one mutation
        return self.store.apply(command).success

    def toggle(self) -> bool:
        return self.pause() if self.is_running() else self.start()

    def reset(self):
        """Pause, then zero the current player's time."""
        self.pause()
        current = self.initiative.get_current_player()
        if current:
            self.store.apply(ResetTurnTime(player_id=current.player_id))
        self.store.apply(SetTimer(running=False))

    def current_player_time(self) -> int:
        current = self.initiative.get_current_player()
        if not current:
            return 0
        state = self.store.get()
        running = 0
        if state.timer_running and state.timer_start_time is not None:
            running = self._elapsed(state.timer_start_time)
        return current.turn_time_seconds + running

    def player_time(self, player_id: str) -> int:
        player = self.store.get().get_player(player_id)
        return player.turn_time_seconds if player else 0

    def _elapsed(self, start_time: float) -> int:
        return max(0, int(self._clock() - start_time))
