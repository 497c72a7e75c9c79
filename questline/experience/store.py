"""Reward store checks: spending XP on rewards."""

from datetime import datetime, timedelta
from uuid import UUID

from questline.shared.utils.datetime_utils import ensure_utc

from .exceptions import InsufficientXPError, InvalidXPInputError, RewardOnCooldownError
from .schemas import XPSourceType, XPTransactionDraft


def cooldown_ends_at(last_purchase_at: datetime, cooldown_days: int) -> datetime:
    return ensure_utc(last_purchase_at) + timedelta(days=cooldown_days)


def check_purchase(
    balance: int,
    cost: int,
    *,
    last_purchase_at: datetime | None,
    cooldown_days: int,
    now: datetime,
) -> None:
    """Raise unless the reward can be bought right now.

    Raises:
        InvalidXPInputError: negative cost or cooldown.
        InsufficientXPError: ``balance`` is below ``cost``.
        RewardOnCooldownError: the last purchase is still inside its cooldown.
    """
    if cost < 0:
        raise InvalidXPInputError(f"Reward cost must be >= 0, got {cost}", field="cost")
    if cooldown_days < 0:
        raise InvalidXPInputError(
            f"cooldown_days must be >= 0, got {cooldown_days}", field="cooldown_days"
        )
    if balance < cost:
        raise InsufficientXPError(balance=balance, cost=cost)
    if last_purchase_at is not None:
        available_at = cooldown_ends_at(last_purchase_at, cooldown_days)
        if ensure_utc(now) < available_at:
            raise RewardOnCooldownError(available_at=available_at)


def purchase_transaction(reward_id: UUID | str, cost: int) -> XPTransactionDraft:
    """The negative XP transaction that pays for a reward."""
    if cost < 0:
        raise InvalidXPInputError(f"Reward cost must be >= 0, got {cost}", field="cost")
    return XPTransactionDraft(
        source=XPSourceType.REWARD_ADJUST,
        source_id=reward_id,
        base_xp=-cost,
        multiplier=1.0,
        total_xp=-cost,
        notes="Purchased reward",
    )
