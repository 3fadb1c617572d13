"""
Imperium - Rules and state engine for a strategy board game tracker.

A deterministic, single-writer engine that backs a table-side companion
tracker. The engine provides:
- Player registration and faction bookkeeping
- Strategy card assignment against per-player-count quotas
- Turn ordering by initiative, with pass tracking
- Round resets
- Agenda ballots and vote tallies
- Victory point ledger with win detection
"""

__version__ = "0.1.0"
