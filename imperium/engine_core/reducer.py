"""
Reducer - Applies commands to game state.

The reducer is the single point of state mutation.
All state changes go through Reducer.apply().

Design principles:
- Pure function: (state, command) -> new_state; the input is never touched
- Validates before applying; a rejected command changes nothing
- Returns CommandResult with success/failure
- Enforces the table invariants: bidirectional card ownership, card
  quotas, a single speaker, VP bounds
"""

from __future__ import annotations
import logging
from copy import deepcopy
from dataclasses import dataclass

from .state import (
    ActionPhaseState,
    AgendaPhaseState,
    GameState,
    Player,
    StrategyCard,
)
from .commands import (
    AddPlayer,
    AddTurnTime,
    ArchiveAgenda,
    AssignCard,
    ChangeFaction,
    ClearAgendaHistory,
    Command,
    CommandResult,
    CommandType,
    DeleteAgenda,
    InitializeStrategyCards,
    PauseTimer,
    RemovePlayer,
    RenamePlayer,
    ReplaceState,
    ResetAllPasses,
    ResetGame,
    ResetTurnTime,
    SetCardActivation,
    SetCurrentPlayerIndex,
    SetGamePhase,
    SetPassed,
    SetSpeaker,
    SetTimer,
    SetTurnCount,
    SetVictoryPoints,
    StartNewRound,
    UnassignCard,
)
from ..games.twilight.rules import MAX_VP, MIN_VP, quota

logger = logging.getLogger(__name__)

# Error codes
PLAYER_NOT_FOUND = "PLAYER_NOT_FOUND"
CARD_NOT_FOUND = "CARD_NOT_FOUND"
AGENDA_NOT_FOUND = "AGENDA_NOT_FOUND"
QUOTA_EXCEEDED = "QUOTA_EXCEEDED"
INVALID_VALUE = "INVALID_VALUE"
ALREADY_INITIALIZED = "ALREADY_INITIALIZED"
NO_HANDLER = "NO_HANDLER"
HANDLER_ERROR = "HANDLER_ERROR"


def all_players_passed(state: GameState) -> bool:
    """True when there is at least one player and every player has passed."""
    return bool(state.players) and all(p.has_passed for p in state.players)


@dataclass
class Reducer:
    """
    Reducer applies commands to game state.

    Stateless - all state is in GameState.
    """

    def apply(self, state: GameState, command: Command) -> CommandResult:
        """
        Apply a command to the game state.

        Handlers work on a clone, so a failed or raising handler leaves
        the caller's state exactly as it was.
        """
        handler = self._get_handler(command.command_type)
        if not handler:
            return CommandResult.failure(
                f"No handler for command type: {command.command_type}",
                error_code=NO_HANDLER,
            )

        try:
            return handler(state.clone(), command)
        except Exception as e:
            logger.exception("Handler for %s failed", command.command_type.value)
            return CommandResult.failure(str(e), error_code=HANDLER_ERROR)

    def _get_handler(self, command_type: CommandType):
        """Get the handler function for a command type."""
        handlers = {
            CommandType.ADD_PLAYER: self._handle_add_player,
            CommandType.REMOVE_PLAYER: self._handle_remove_player,
            CommandType.RENAME_PLAYER: self._handle_rename_player,
            CommandType.CHANGE_FACTION: self._handle_change_faction,
            CommandType.SET_SPEAKER: self._handle_set_speaker,
            CommandType.INITIALIZE_STRATEGY_CARDS: self._handle_initialize_cards,
            CommandType.ASSIGN_CARD: self._handle_assign_card,
            CommandType.UNASSIGN_CARD: self._handle_unassign_card,
            CommandType.SET_CARD_ACTIVATION: self._handle_set_card_activation,
            CommandType.SET_PASSED: self._handle_set_passed,
            CommandType.RESET_ALL_PASSES: self._handle_reset_all_passes,
            CommandType.SET_TURN_COUNT: self._handle_set_turn_count,
            CommandType.SET_CURRENT_PLAYER_INDEX: self._handle_set_current_player_index,
            CommandType.START_NEW_ROUND: self._handle_start_new_round,
            CommandType.SET_VICTORY_POINTS: self._handle_set_victory_points,
            CommandType.SET_TIMER: self._handle_set_timer,
            CommandType.PAUSE_TIMER: self._handle_pause_timer,
            CommandType.ADD_TURN_TIME: self._handle_add_turn_time,
            CommandType.RESET_TURN_TIME: self._handle_reset_turn_time,
            CommandType.ARCHIVE_AGENDA: self._handle_archive_agenda,
            CommandType.DELETE_AGENDA: self._handle_delete_agenda,
            CommandType.CLEAR_AGENDA_HISTORY: self._handle_clear_agenda_history,
            CommandType.SET_GAME_PHASE: self._handle_set_game_phase,
            CommandType.REPLACE_STATE: self._handle_replace_state,
            CommandType.RESET_GAME: self._handle_reset_game,
        }
        return handlers.get(command_type)

    # =========================================================================
    # Roster
    # =========================================================================

    def _handle_add_player(self, state: GameState, command: AddPlayer) -> CommandResult:
        if state.get_player(command.player_id):
            return CommandResult.failure(
                f"Player {command.player_id} already exists", error_code=INVALID_VALUE
            )
        if any(p.faction_id == command.faction_id for p in state.players):
            return CommandResult.failure(
                f"Faction {command.faction_id} is already taken", error_code=INVALID_VALUE
            )

        state.players.append(
            Player(
                player_id=command.player_id,
                name=command.name,
                faction_id=command.faction_id,
            )
        )
        return CommandResult.success_with_state(
            state, changes=[f"{command.name} joined as {command.faction_id}"]
        )

    def _handle_remove_player(self, state: GameState, command: RemovePlayer) -> CommandResult:
        player = state.get_player(command.player_id)
        if not player:
            return CommandResult.failure(
                f"Player {command.player_id} not found", error_code=PLAYER_NOT_FOUND
            )

        state.players = [p for p in state.players if p.player_id != command.player_id]
        for card in state.strategy_cards:
            if card.player_id == command.player_id:
                card.player_id = None
        state.action_phase.all_passed = all_players_passed(state)

        return CommandResult.success_with_state(state, changes=[f"{player.name} left the game"])

    def _handle_rename_player(self, state: GameState, command: RenamePlayer) -> CommandResult:
        player = state.get_player(command.player_id)
        if not player:
            return CommandResult.failure(
                f"Player {command.player_id} not found", error_code=PLAYER_NOT_FOUND
            )
        if not command.name:
            return CommandResult.failure("Player name is required", error_code=INVALID_VALUE)

        old_name = player.name
        player.name = command.name
        return CommandResult.success_with_state(
            state, changes=[f"{old_name} renamed to {command.name}"]
        )

    def _handle_change_faction(self, state: GameState, command: ChangeFaction) -> CommandResult:
        player = state.get_player(command.player_id)
        if not player:
            return CommandResult.failure(
                f"Player {command.player_id} not found", error_code=PLAYER_NOT_FOUND
            )
        taken_by_other = any(
            p.faction_id == command.faction_id and p.player_id != player.player_id
            for p in state.players
        )
        if taken_by_other:
            return CommandResult.failure(
                f"Faction {command.faction_id} is already taken", error_code=INVALID_VALUE
            )

        player.faction_id = command.faction_id
        return CommandResult.success_with_state(
            state, changes=[f"{player.name} now plays {command.faction_id}"]
        )

    def _handle_set_speaker(self, state: GameState, command: SetSpeaker) -> CommandResult:
        speaker = state.get_player(command.player_id)
        if not speaker:
            return CommandResult.failure(
                f"Player {command.player_id} not found", error_code=PLAYER_NOT_FOUND
            )

        for p in state.players:
            p.is_speaker = False
        speaker.is_speaker = True
        return CommandResult.success_with_state(state, changes=[f"{speaker.name} is speaker"])

    # =========================================================================
    # Strategy cards
    # =========================================================================

    def _handle_initialize_cards(
        self, state: GameState, command: InitializeStrategyCards
    ) -> CommandResult:
        if state.strategy_cards:
            return CommandResult.failure(
                "Strategy cards are already initialized", error_code=ALREADY_INITIALIZED
            )

        state.strategy_cards = [
            StrategyCard(initiative=card.initiative, name=card.name)
            for card in command.cards
        ]
        return CommandResult.success_with_state(
            state, changes=[f"Created {len(state.strategy_cards)} strategy cards"]
        )

    def _handle_assign_card(self, state: GameState, command: AssignCard) -> CommandResult:
        """
        Assign a card, revoking it from its previous owner if needed.

        Re-assigning a card to the player who already owns it is a
        successful no-op: the trade good bonus is not touched again.
        """
        card = state.get_card(command.initiative)
        if not card:
            return CommandResult.failure(
                f"Strategy card {command.initiative} not found", error_code=CARD_NOT_FOUND
            )
        player = state.get_player(command.player_id)
        if not player:
            return CommandResult.failure(
                f"Player {command.player_id} not found", error_code=PLAYER_NOT_FOUND
            )

        if player.holds(command.initiative) and card.player_id == player.player_id:
            return CommandResult.success_with_state(state)

        max_cards = quota(state.num_players)
        if player.card_count >= max_cards:
            return CommandResult.failure(
                f"{player.name} already has {max_cards} "
                f"card{'s' if max_cards > 1 else ''}",
                error_code=QUOTA_EXCEEDED,
            )

        changes = []
        if card.player_id and card.player_id != player.player_id:
            previous = state.get_player(card.player_id)
            if previous:
                previous.strategy_cards = [
                    i for i in previous.strategy_cards if i != command.initiative
                ]
                changes.append(f"{card.name} taken from {previous.name}")

        card.player_id = player.player_id
        card.trade_good_bonus = 0
        if not player.holds(command.initiative):
            player.strategy_cards.append(command.initiative)

        changes.append(f"{card.name} assigned to {player.name}")
        return CommandResult.success_with_state(state, changes=changes)

    def _handle_unassign_card(self, state: GameState, command: UnassignCard) -> CommandResult:
        card = state.get_card(command.initiative)
        if not card:
            return CommandResult.failure(
                f"Strategy card {command.initiative} not found", error_code=CARD_NOT_FOUND
            )
        if not card.player_id:
            return CommandResult.failure(
                f"{card.name} is not assigned", error_code=INVALID_VALUE
            )

        owner = state.get_player(card.player_id)
        if owner:
            owner.strategy_cards = [i for i in owner.strategy_cards if i != command.initiative]
        card.player_id = None

        return CommandResult.success_with_state(state, changes=[f"{card.name} unassigned"])

    def _handle_set_card_activation(
        self, state: GameState, command: SetCardActivation
    ) -> CommandResult:
        card = state.get_card(command.initiative)
        if not card:
            return CommandResult.failure(
                f"Strategy card {command.initiative} not found", error_code=CARD_NOT_FOUND
            )

        card.is_activated = command.activated
        verb = "activated" if command.activated else "deactivated"
        return CommandResult.success_with_state(state, changes=[f"{card.name} {verb}"])

    # =========================================================================
    # Turns and rounds
    # =========================================================================

    def _handle_set_passed(self, state: GameState, command: SetPassed) -> CommandResult:
        player = state.get_player(command.player_id)
        if not player:
            return CommandResult.failure(
                f"Player {command.player_id} not found", error_code=PLAYER_NOT_FOUND
            )

        player.has_passed = command.has_passed
        state.action_phase.all_passed = all_players_passed(state)

        verb = "passed" if command.has_passed else "is back in the round"
        return CommandResult.success_with_state(state, changes=[f"{player.name} {verb}"])

    def _handle_reset_all_passes(self, state: GameState, command: ResetAllPasses) -> CommandResult:
        for p in state.players:
            p.has_passed = False
        state.action_phase = ActionPhaseState(
            all_passed=False,
            turn_count=state.action_phase.turn_count + 1,
        )
        return CommandResult.success_with_state(state, changes=["All passes cleared"])

    def _handle_set_turn_count(self, state: GameState, command: SetTurnCount) -> CommandResult:
        if command.turn_count < 0:
            return CommandResult.failure("Turn count cannot be negative", error_code=INVALID_VALUE)

        state.action_phase.turn_count = command.turn_count
        return CommandResult.success_with_state(state)

    def _handle_set_current_player_index(
        self, state: GameState, command: SetCurrentPlayerIndex
    ) -> CommandResult:
        if command.index < 0:
            return CommandResult.failure("Player index cannot be negative", error_code=INVALID_VALUE)

        state.current_player_index = command.index
        return CommandResult.success_with_state(state)

    def _handle_start_new_round(self, state: GameState, command: StartNewRound) -> CommandResult:
        """
        Round reset.

        The bonus step must run before ownership is cleared so that only
        cards nobody picked this round are rewarded.
        """
        for card in state.strategy_cards:
            if not card.player_id:
                card.trade_good_bonus += 1

        for p in state.players:
            p.has_passed = False
            p.strategy_cards = []

        for card in state.strategy_cards:
            card.is_activated = False
            card.player_id = None

        state.current_player_index = 0
        state.action_phase = ActionPhaseState(
            all_passed=False,
            turn_count=state.action_phase.turn_count + 1,
        )
        return CommandResult.success_with_state(
            state, changes=[f"Round {state.action_phase.turn_count} started"]
        )

    # =========================================================================
    # Scoring and timer
    # =========================================================================

    def _handle_set_victory_points(
        self, state: GameState, command: SetVictoryPoints
    ) -> CommandResult:
        player = state.get_player(command.player_id)
        if not player:
            return CommandResult.failure(
                f"Player {command.player_id} not found", error_code=PLAYER_NOT_FOUND
            )
        if not MIN_VP <= command.victory_points <= MAX_VP:
            return CommandResult.failure(
                f"Victory points must be between {MIN_VP} and {MAX_VP}",
                error_code=INVALID_VALUE,
            )

        player.victory_points = command.victory_points
        return CommandResult.success_with_state(
            state, changes=[f"{player.name} has {command.victory_points} VP"]
        )

    def _handle_set_timer(self, state: GameState, command: SetTimer) -> CommandResult:
        state.timer_running = command.running
        state.timer_start_time = command.start_time if command.running else None
        return CommandResult.success_with_state(state)

    def _handle_pause_timer(self, state: GameState, command: PauseTimer) -> CommandResult:
        if command.player_id is not None:
            player = state.get_player(command.player_id)
            if not player:
                return CommandResult.failure(
                    f"Player {command.player_id} not found", error_code=PLAYER_NOT_FOUND
                )
            if command.seconds < 0:
                return CommandResult.failure(
                    "Turn time cannot go backwards", error_code=INVALID_VALUE
                )
            player.turn_time_seconds += command.seconds

        state.timer_running = False
        state.timer_start_time = None
        return CommandResult.success_with_state(state)

    def _handle_add_turn_time(self, state: GameState, command: AddTurnTime) -> CommandResult:
        player = state.get_player(command.player_id)
        if not player:
            return CommandResult.failure(
                f"Player {command.player_id} not found", error_code=PLAYER_NOT_FOUND
            )
        if command.seconds < 0:
            return CommandResult.failure("Turn time cannot go backwards", error_code=INVALID_VALUE)

        player.turn_time_seconds += command.seconds
        return CommandResult.success_with_state(state)

    def _handle_reset_turn_time(self, state: GameState, command: ResetTurnTime) -> CommandResult:
        player = state.get_player(command.player_id)
        if not player:
            return CommandResult.failure(
                f"Player {command.player_id} not found", error_code=PLAYER_NOT_FOUND
            )

        player.turn_time_seconds = 0
        return CommandResult.success_with_state(state)

    # =========================================================================
    # Agendas
    # =========================================================================

    def _handle_archive_agenda(self, state: GameState, command: ArchiveAgenda) -> CommandResult:
        if not command.agenda.outcome:
            return CommandResult.failure(
                "Agenda has no outcome and cannot be archived", error_code=INVALID_VALUE
            )

        agendas = state.agenda_phase.agendas
        agendas.append(deepcopy(command.agenda))
        state.agenda_phase.current_agenda_index = len(agendas) - 1
        return CommandResult.success_with_state(
            state, changes=[f"{command.agenda.name} resolved: {command.agenda.outcome}"]
        )

    def _handle_delete_agenda(self, state: GameState, command: DeleteAgenda) -> CommandResult:
        agendas = state.agenda_phase.agendas
        remaining = [a for a in agendas if a.agenda_id != command.agenda_id]
        if len(remaining) == len(agendas):
            return CommandResult.failure(
                f"Agenda {command.agenda_id} not found", error_code=AGENDA_NOT_FOUND
            )

        state.agenda_phase = AgendaPhaseState(
            agendas=remaining,
            current_agenda_index=max(0, len(remaining) - 1),
        )
        return CommandResult.success_with_state(state)

    def _handle_clear_agenda_history(
        self, state: GameState, command: ClearAgendaHistory
    ) -> CommandResult:
        state.agenda_phase = AgendaPhaseState()
        return CommandResult.success_with_state(state, changes=["Agenda history cleared"])

    # =========================================================================
    # Session
    # =========================================================================

    def _handle_set_game_phase(self, state: GameState, command: SetGamePhase) -> CommandResult:
        state.game_phase = command.phase
        return CommandResult.success_with_state(
            state, changes=[f"Phase is now {command.phase.value}"]
        )

    def _handle_replace_state(self, state: GameState, command: ReplaceState) -> CommandResult:
        return CommandResult.success_with_state(command.state.clone(), changes=["State loaded"])

    def _handle_reset_game(self, state: GameState, command: ResetGame) -> CommandResult:
        return CommandResult.success_with_state(GameState(), changes=["Game reset"])


def apply_command(state: GameState, command: Command) -> CommandResult:
    """
    Convenience function to apply a command.

    Creates a Reducer and applies the command.
    """
    return Reducer().apply(state, command)
