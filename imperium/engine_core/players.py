"""
Player Registry - Registration, faction bookkeeping and the speaker.

Registration is one of the two places the engine reports structured
validation detail (the other is the strategy card check). Every other
operation answers with a plain True/False.
"""

from __future__ import annotations
import logging
import uuid
from dataclasses import dataclass, field

from .state import Player
from .store import GameStateStore
from .commands import AddPlayer, ChangeFaction, RemovePlayer, RenamePlayer, SetSpeaker
from ..games.twilight.factions import FACTIONS, Faction, get_faction
from ..games.twilight.rules import MAX_NAME_LENGTH, MAX_PLAYERS

logger = logging.getLogger(__name__)


@dataclass
class PlayerValidation:
    valid: bool
    errors: list[str] = field(default_factory=list)


@dataclass
class PlayerCreation:
    success: bool
    player_id: str | None = None
    errors: list[str] = field(default_factory=list)


def _generate_player_id() -> str:
    return f"player-{uuid.uuid4().hex[:12]}"


class PlayerRegistry:

    def __init__(self, store: GameStateStore):
        self.store = store

    def get_available_factions(self) -> list[Faction]:
        """Factions nobody has picked yet."""
        taken = {p.faction_id for p in self.store.get().players}
        return [f for f in FACTIONS if f.faction_id not in taken]

    def validate_player_data(self, name: str | None, faction_id: str | None) -> PlayerValidation:
        """
        Validate a registration.

        Name is required and at most 30 characters after trimming.
        Faction is required, must exist, and must not be taken.
        """
        errors = []
        trimmed = (name or "").strip()

        if not trimmed:
            errors.append("Player name is required")
        elif len(trimmed) > MAX_NAME_LENGTH:
            errors.append(f"Player name must be {MAX_NAME_LENGTH} characters or less")

        if not faction_id:
            errors.append("Faction is required")
        elif not get_faction(faction_id):
            errors.append("Invalid faction selected")
        elif faction_id not in {f.faction_id for f in self.get_available_factions()}:
            errors.append("Faction is already assigned to another player")

        return PlayerValidation(valid=not errors, errors=errors)

    def create_player(self, name: str | None, faction_id: str | None) -> PlayerCreation:
        validation = self.validate_player_data(name, faction_id)
        if not validation.valid:
            return PlayerCreation(success=False, errors=validation.errors)
        if not self.can_add_player():
            return PlayerCreation(
                success=False, errors=[f"A game has at most {MAX_PLAYERS} players"]
            )

        player_id = _generate_player_id()
        result = self.store.apply(
            AddPlayer(player_id=player_id, name=name.strip(), faction_id=faction_id)
        )
        if not result.success:
            return PlayerCreation(success=False, errors=[result.error])
        return PlayerCreation(success=True, player_id=player_id)

    def rename_player(self, player_id: str, new_name: str | None) -> bool:
        trimmed = (new_name or "").strip()
        if not trimmed or len(trimmed) > MAX_NAME_LENGTH:
            return False
        return self.store.apply(RenamePlayer(player_id=player_id, name=trimmed)).success

    def change_faction(self, player_id: str, faction_id: str) -> bool:
        """Switch faction. Keeping one's own faction is allowed."""
        if not get_faction(faction_id):
            return False
        return self.store.apply(ChangeFaction(player_id=player_id, faction_id=faction_id)).success

    def delete_player(self, player_id: str) -> bool:
        return self.store.apply(RemovePlayer(player_id=player_id)).success

    def set_speaker(self, player_id: str) -> bool:
        """Make this player the only speaker."""
        return self.store.apply(SetSpeaker(player_id=player_id)).success

    def get_speaker(self) -> Player | None:
        for p in self.store.get().players:
            if p.is_speaker:
                return p
        return None

    def get_player(self, player_id: str) -> Player | None:
        return self.store.get().get_player(player_id)

    def get_players(self) -> list[Player]:
        return self.store.get().players

    def get_player_count(self) -> int:
        return self.store.player_count

    def can_add_player(self) -> bool:
        return self.get_player_count() < MAX_PLAYERS
