"""
Strategy card definitions.

The eight strategy cards with their most recent printed versions.
Runtime ownership lives in engine_core.state.StrategyCard; these are the
static definitions only.
"""

from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class StrategyCardDefinition:
    """Static definition of a strategy card."""
    initiative: int
    name: str
    color: str
    version: str
    primary_ability: str
    secondary_ability: str


STRATEGY_CARDS: tuple[StrategyCardDefinition, ...] = (
    StrategyCardDefinition(
        initiative=1,
        name="Leadership",
        color="#c41e3a",
        version="base",
        primary_ability="Gain 3 command tokens",
        secondary_ability="Spend 1 influence to gain 1 command token",
    ),
    StrategyCardDefinition(
        initiative=2,
        name="Diplomacy",
        color="#ffa500",
        version="codex-1",
        primary_ability="Ready up to 2 exhausted planets you control",
        secondary_ability="Spend 1 influence to ready an exhausted planet you control",
    ),
    StrategyCardDefinition(
        initiative=3,
        name="Politics",
        color="#9370db",
        version="base",
        primary_ability="Draw 2 action cards and become speaker",
        secondary_ability="Spend 1 influence to draw 2 action cards",
    ),
    StrategyCardDefinition(
        initiative=4,
        name="Construction",
        color="#228b22",
        version="thunders-edge",
        primary_ability="Place 1 PDS or 1 space dock on a planet you control",
        secondary_ability="Spend 1 influence to place 1 PDS on a planet you control",
    ),
    StrategyCardDefinition(
        initiative=5,
        name="Trade",
        color="#ffd700",
        version="base",
        primary_ability="Gain 3 trade goods and refresh commodities",
        secondary_ability="Send commodities or resolve trade agreements",
    ),
    StrategyCardDefinition(
        initiative=6,
        name="Warfare",
        color="#dc143c",
        version="thunders-edge",
        primary_ability="Remove 1 command token from board, then produce units",
        secondary_ability="Spend 1 influence to use PRODUCTION in 1 system",
    ),
    StrategyCardDefinition(
        initiative=7,
        name="Technology",
        color="#4682b4",
        version="base",
        primary_ability="Research 1 technology",
        secondary_ability="Spend 1 influence and 4 resources to research 1 technology",
    ),
    StrategyCardDefinition(
        initiative=8,
        name="Imperial",
        color="#8b4513",
        version="base",
        primary_ability="Score 1 public objective or gain 1 victory point",
        secondary_ability="Spend 1 influence to draw 1 secret objective",
    ),
)

DEFAULT_CARD_COLOR = "#3a5270"


def get_card_definition(initiative: int) -> StrategyCardDefinition | None:
    """Get a card definition by initiative."""
    for card in STRATEGY_CARDS:
        if card.initiative == initiative:
            return card
    return None


def get_card_color(initiative: int) -> str:
    card = get_card_definition(initiative)
    return card.color if card else DEFAULT_CARD_COLOR
