"""
API Module - Table client interface.

Exposes the tracker via REST API. A table client:
1. Creates a session
2. Registers players and hands out strategy cards
3. Marks passes and advances turns during the action phase
4. Records agenda ballots and victory points
5. Saves, loads, exports and imports the game

All state is session-scoped. No user accounts.
"""

from .schemas import (
    # Requests
    AssignCardRequest,
    CreatePlayerRequest,
    CreateSessionRequest,
    VoteRequest,
    VPRequest,
    # Responses
    CommandResponse,
    ErrorResponse,
    GameStateResponse,
    SessionResponse,
    # Shared
    ErrorCode,
    GameStateDocument,
    PlayerInfo,
    StrategyCardInfo,
)
from .service import TrackerService
from .app import create_app

__all__ = [
    # Requests
    "AssignCardRequest",
    "CreatePlayerRequest",
    "CreateSessionRequest",
    "VoteRequest",
    "VPRequest",
    # Responses
    "CommandResponse",
    "ErrorResponse",
    "GameStateResponse",
    "SessionResponse",
    # Shared
    "ErrorCode",
    "GameStateDocument",
    "PlayerInfo",
    "StrategyCardInfo",
    # Service
    "TrackerService",
    "create_app",
]
