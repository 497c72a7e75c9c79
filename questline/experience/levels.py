"""Level progression over cumulative XP. Pure functions, no side effects."""

from pydantic import Field

from questline.shared.schemas.base import FrozenSchema

from .exceptions import InvalidXPInputError
from .rules import LevelCurve


class LevelProgress(FrozenSchema):
    """Where a cumulative XP total sits on the level curve."""

    level: int = Field(ge=1)
    xp_to_next: int = Field(ge=0)
    progress: float = Field(ge=0, le=100)


def level_threshold(level: int, curve: LevelCurve) -> int:
    """Cumulative XP needed to reach ``level``.

    Level 1: 0 XP (everyone starts here)
    Level 2: base_xp
    Level n: base_xp + increment * (n - 2)
    """
    if level <= 1:
        return 0
    return curve.base_xp + curve.increment * (level - 2)


def level_from_xp(total_xp: int, curve: LevelCurve) -> int:
    """Current level given total XP, via the closed-form inverse of the curve."""
    if total_xp < curve.base_xp:
        return 1
    return (total_xp - curve.base_xp) // curve.increment + 2


def calculate_level(total_xp: int, curve: LevelCurve) -> LevelProgress:
    """Level, XP left to the next level, and percent progress within the level.

    Raises:
        InvalidXPInputError: ``total_xp`` is negative or not an integer.
    """
    if isinstance(total_xp, bool) or not isinstance(total_xp, int):
        raise InvalidXPInputError(
            f"total_xp must be an integer, got {type(total_xp).__name__}",
            field="total_xp",
        )
    if total_xp < 0:
        raise InvalidXPInputError(f"total_xp must be >= 0, got {total_xp}", field="total_xp")

    level = level_from_xp(total_xp, curve)
    level_start = level_threshold(level, curve)
    next_threshold = level_threshold(level + 1, curve)

    span = next_threshold - level_start
    progress = min((total_xp - level_start) / span * 100, 100.0)

    return LevelProgress(
        level=level,
        xp_to_next=max(next_threshold - total_xp, 0),
        progress=max(progress, 0.0),
    )
