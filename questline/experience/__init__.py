"""Experience system: XP scoring, level progression and rulesets."""

from questline.experience.calculator import (
    XPBreakdown,
    XPCalculationInput,
    XPCalculationResult,
    calculate_xp,
)
from questline.experience.exceptions import (
    InsufficientXPError,
    InvalidXPInputError,
    RewardOnCooldownError,
    RulesetConfigurationError,
    XPEngineError,
)
from questline.experience.levels import (
    LevelProgress,
    calculate_level,
    level_from_xp,
    level_threshold,
)
from questline.experience.rules import (
    DEFAULT_RULES,
    DifficultyMultipliers,
    LevelCurve,
    Multipliers,
    NoveltyRule,
    Ruleset,
    default_ruleset,
    load_ruleset,
    parse_ruleset,
    select_active_ruleset,
)
from questline.experience.schemas import Difficulty, XPSourceType, XPTransactionDraft

__all__ = [
    # Calculator
    "XPBreakdown",
    "XPCalculationInput",
    "XPCalculationResult",
    "calculate_xp",
    # Levels
    "LevelProgress",
    "calculate_level",
    "level_from_xp",
    "level_threshold",
    # Rulesets
    "DEFAULT_RULES",
    "DifficultyMultipliers",
    "LevelCurve",
    "Multipliers",
    "NoveltyRule",
    "Ruleset",
    "default_ruleset",
    "load_ruleset",
    "parse_ruleset",
    "select_active_ruleset",
    # Schemas
    "Difficulty",
    "XPSourceType",
    "XPTransactionDraft",
    # Errors
    "InsufficientXPError",
    "InvalidXPInputError",
    "RewardOnCooldownError",
    "RulesetConfigurationError",
    "XPEngineError",
]
