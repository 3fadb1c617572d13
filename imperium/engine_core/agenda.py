"""
Agenda Ballot Tracker - The open agenda, its ballots, and the history.

At most one agenda is open at a time. The open agenda lives here, outside
the state tree, until it is completed (archived into the history through
the store) or cancelled (discarded).

Tallies group ballots by the exact voted-for text. The grouping keeps the
order in which options were first seen, and a tie for the most votes goes
to the option seen first. Python dicts keep insertion order, and the
winner is found by a left-to-right scan that only replaces the leader on
a strictly higher total.
"""

from __future__ import annotations
import logging
import time
import uuid
from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any, Callable

from .state import Agenda, Ballot
from .store import GameStateStore
from .commands import ArchiveAgenda, ClearAgendaHistory, DeleteAgenda
from ..games.twilight.rules import to_whole_number

logger = logging.getLogger(__name__)

DEFAULT_AGENDA_NAME = "Agenda"


@dataclass
class AgendaSummary:
    """An agenda plus its tally, for display."""
    agenda: Agenda
    vote_summary: dict[str, int] = field(default_factory=dict)
    total_votes: int = 0


def tally_votes(agenda: Agenda | None) -> dict[str, int]:
    """Sum vote counts per option, in first-seen option order."""
    summary: dict[str, int] = {}
    if agenda is None:
        return summary
    for ballot in agenda.votes:
        summary[ballot.voted_for] = summary.get(ballot.voted_for, 0) + ballot.vote_count
    return summary


def winning_option(summary: dict[str, int]) -> str | None:
    """Option with the most votes; ties go to the option seen first."""
    winner = None
    best = None
    for option, votes in summary.items():
        if best is None or votes > best:
            winner, best = option, votes
    return winner


def _coerce_vote_count(vote_count: Any) -> int:
    return max(0, to_whole_number(vote_count))


class AgendaBallotTracker:
    """
    Records votes on the open agenda and archives completed agendas.

    Usage:
        tracker = AgendaBallotTracker(store)
        tracker.create_agenda("Mandate")
        tracker.record_vote("p1", 3, "For")
        tracker.set_outcome("For")
        tracker.complete_agenda()
    """

    def __init__(self, store: GameStateStore, clock: Callable[[], float] = time.time):
        self.store = store
        self._clock = clock
        self._current: Agenda | None = None

    # =========================================================================
    # Open agenda
    # =========================================================================

    def create_agenda(self, name: str = "") -> Agenda:
        """Open a new agenda, discarding any agenda that was still open."""
        if self._current is not None:
            logger.info("Discarding open agenda %s", self._current.name)
        self._current = Agenda(
            agenda_id=f"agenda-{uuid.uuid4().hex[:12]}",
            name=(name or "").strip() or DEFAULT_AGENDA_NAME,
            timestamp=self._clock(),
        )
        return deepcopy(self._current)

    def get_current_agenda(self) -> Agenda | None:
        return deepcopy(self._current)

    @property
    def has_open_agenda(self) -> bool:
        return self._current is not None

    def record_vote(self, player_id: str, vote_count: Any, voted_for: str) -> bool:
        """
        Record a player's ballot, replacing any earlier ballot from them.

        The replacement ballot goes to the end of the list.
        """
        if self._current is None:
            return False
        player = self.store.get().get_player(player_id)
        if not player:
            return False

        self._current.votes = [b for b in self._current.votes if b.player_id != player_id]
        self._current.votes.append(
            Ballot(
                player_id=player_id,
                player_name=player.name,
                vote_count=_coerce_vote_count(vote_count),
                voted_for=(voted_for or "").strip(),
            )
        )
        return True

    def set_outcome(self, outcome: str) -> bool:
        if self._current is None:
            return False
        self._current.outcome = (outcome or "").strip()
        return True

    def complete_agenda(self) -> bool:
        """
        Archive the open agenda.

        Needs an open agenda with a non-empty outcome; otherwise nothing
        changes and False is returned.
        """
        if self._current is None or not self._current.outcome:
            return False

        result = self.store.apply(ArchiveAgenda(agenda=deepcopy(self._current)))
        if not result.success:
            return False

        self._current = None
        return True

    def cancel_current_agenda(self):
        """Discard the open agenda without archiving it."""
        self._current = None

    # =========================================================================
    # Tallies
    # =========================================================================

    def tally(self, agenda: Agenda | None = None) -> dict[str, int]:
        """Tally the given agenda, or the open one."""
        return tally_votes(agenda if agenda is not None else self._current)

    def get_winning_option(self, agenda: Agenda | None = None) -> str | None:
        return winning_option(self.tally(agenda))

    def format_agenda(self, agenda: Agenda | None) -> AgendaSummary | None:
        if agenda is None:
            return None
        return AgendaSummary(
            agenda=deepcopy(agenda),
            vote_summary=tally_votes(agenda),
            total_votes=sum(b.vote_count for b in agenda.votes),
        )

    # =========================================================================
    # History
    # =========================================================================

    def get_history(self) -> list[Agenda]:
        return self.store.get().agenda_phase.agendas

    def get_agenda(self, agenda_id: str) -> Agenda | None:
        for agenda in self.get_history():
            if agenda.agenda_id == agenda_id:
                return agenda
        return None

    def delete_agenda(self, agenda_id: str) -> bool:
        return self.store.apply(DeleteAgenda(agenda_id=agenda_id)).success

    def clear_history(self) -> bool:
        """Drop every archived agenda and the open one."""
        self._current = None
        return self.store.apply(ClearAgendaHistory()).success
