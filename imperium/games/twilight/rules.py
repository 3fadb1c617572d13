"""
Rule constants and small rule functions shared by the engines.
"""

MAX_PLAYERS = 8
MAX_NAME_LENGTH = 30

WIN_CONDITION_VP = 10
MIN_VP = 0
MAX_VP = 99


def quota(player_count: int) -> int:
    """
    Number of strategy cards each player holds.

    Three and four player games deal two cards per player;
    every other player count deals one.
    """
    return 2 if player_count in (3, 4) else 1


def clamp_vp(points: int) -> int:
    return max(MIN_VP, min(MAX_VP, points))


def to_whole_number(value) -> int:
    """
    Read a count typed at the table, truncating any fractional part.

    "3.7" reads as 3. Anything that is not a finite number reads as 0.
    """
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 0
