"""Custom exceptions for the XP engine."""

from datetime import datetime
from typing import Any


class XPEngineError(Exception):
    """Base exception for XP engine errors."""

    def __init__(self, message: str, error_type: str = "xp_engine_error"):
        self.message = message
        self.error_type = error_type
        super().__init__(message)


class InvalidXPInputError(XPEngineError):
    """Raised when an activity or XP total fails validation.

    Negative base XP, an unrecognised difficulty, a negative total, or an
    activity missing from the catalog all land here.
    """

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message, "invalid_xp_input")
        self.field = field


class RulesetConfigurationError(XPEngineError):
    """Raised when a ruleset document is malformed or cannot be selected."""

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None):
        super().__init__(message, "invalid_ruleset")
        self.errors = errors or []


class InsufficientXPError(XPEngineError):
    """Raised when a purchase costs more than the available balance."""

    def __init__(self, balance: int, cost: int):
        super().__init__(
            f"Insufficient XP: balance {balance} is below cost {cost}",
            "insufficient_xp",
        )
        self.balance = balance
        self.cost = cost


class RewardOnCooldownError(XPEngineError):
    """Raised when a reward is bought again before its cooldown elapsed."""

    def __init__(self, available_at: datetime):
        super().__init__(
            f"Reward is still on cooldown until {available_at.isoformat()}",
            "reward_on_cooldown",
        )
        self.available_at = available_at
