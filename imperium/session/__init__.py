"""
Session Module - One tracked game per session.

A session bundles the state store with every engine that works on it.
"""

from .manager import GameSession, SessionManager

__all__ = [
    "GameSession",
    "SessionManager",
]
