"""First-time combo detection over a user's recent activity.

The engine only sees a boolean ``first_time_combo``; this module is the
lookback that produces it from stored activity history.
"""

from collections.abc import Iterable
from datetime import datetime, timedelta

from pydantic import Field

from questline.shared.schemas.base import FrozenSchema
from questline.shared.utils.datetime_utils import ensure_utc

from .exceptions import InvalidXPInputError

DEFAULT_WINDOW_DAYS = 30


class ActivityRecord(FrozenSchema):
    """A previously logged activity, as much of it as the lookback needs."""

    tags: tuple[str, ...] = Field(default_factory=tuple)
    created_at: datetime


def is_first_time_combo(
    tags: Iterable[str],
    history: Iterable[ActivityRecord],
    *,
    now: datetime,
    window_days: int = DEFAULT_WINDOW_DAYS,
) -> bool:
    """True if no activity inside the window carried exactly this tag set.

    Tags compare as sets, so order and repeats do not matter. Naive
    datetimes are taken as UTC.
    """
    if window_days < 1:
        raise InvalidXPInputError(
            f"window_days must be >= 1, got {window_days}", field="window_days"
        )

    candidate = frozenset(tags)
    cutoff = ensure_utc(now) - timedelta(days=window_days)
    for record in history:
        if ensure_utc(record.created_at) < cutoff:
            continue
        if frozenset(record.tags) == candidate:
            return False
    return True
