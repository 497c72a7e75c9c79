"""Pydantic v2 schemas for the Experience system."""

from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import Field

from questline.shared.schemas.base import BaseSchema


class Difficulty(str, Enum):
    """Difficulty of a quest or logged event."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class XPSourceType(str, Enum):
    """Where an XP transaction originated."""

    QUEST = "quest"
    EVENT = "event"
    RANDOM_ENCOUNTER = "random_encounter"
    STREAK_BONUS = "streak_bonus"
    WEEKLY_CONTRACT = "weekly_contract"
    ADMIN_ADJUSTMENT = "admin_adjustment"
    REWARD_ADJUST = "reward_adjust"


class XPTransactionDraft(BaseSchema):
    """An XP transaction ready for the caller to persist.

    Mirrors the ``xp_transactions`` row: the engine fills in the numbers,
    storage and the profile binding stay with the caller.
    """

    source: XPSourceType
    source_id: UUID | str | None = None
    base_xp: int
    multiplier: float
    total_xp: int
    context: dict[str, Any] = Field(default_factory=dict)
    notes: str | None = None


class SimulateXPRequest(BaseSchema):
    """Admin simulator input, shaped like the simulator form."""

    base_xp: int = Field(ge=0, strict=True)
    difficulty: Difficulty
    class_aligned: bool = Field(default=False, strict=True)
    social_proof: bool = Field(default=False, strict=True)
    first_time: bool = Field(default=False, strict=True)


class SimulateXPResponse(BaseSchema):
    """Simulator preview of a single award."""

    multiplier: float
    total: int
    breakdown: dict[str, float | int]


class LevelProgressResponse(BaseSchema):
    """Level and in-level progress for a cumulative XP total."""

    total_xp: int
    level: int
    xp_to_next: int
    progress: float


class ActiveRulesetResponse(BaseSchema):
    """The ruleset currently used for XP calculations."""

    name: str
    active: bool
    rules_json: dict[str, Any]
