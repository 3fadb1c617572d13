"""
Twilight Imperium catalog - card definitions, factions and rule constants.
"""

from .cards import (
    STRATEGY_CARDS,
    StrategyCardDefinition,
    get_card_color,
    get_card_definition,
)
from .factions import (
    ALWAYS_FIRST_FACTIONS,
    FACTIONS,
    Faction,
    get_faction,
    get_factions_by_expansion,
    is_always_first,
)
from .rules import (
    MAX_NAME_LENGTH,
    MAX_PLAYERS,
    MAX_VP,
    MIN_VP,
    WIN_CONDITION_VP,
    clamp_vp,
    quota,
)

__all__ = [
    "STRATEGY_CARDS",
    "StrategyCardDefinition",
    "get_card_color",
    "get_card_definition",
    "ALWAYS_FIRST_FACTIONS",
    "FACTIONS",
    "Faction",
    "get_faction",
    "get_factions_by_expansion",
    "is_always_first",
    "MAX_NAME_LENGTH",
    "MAX_PLAYERS",
    "MAX_VP",
    "MIN_VP",
    "WIN_CONDITION_VP",
    "clamp_vp",
    "quota",
]
