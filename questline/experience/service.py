"""ExperienceService — scores quests, events and simulator previews.

Binds one active ruleset and turns completed activities into XP transaction
drafts. Persisting the drafts, streaks and cooldown state is the caller's
responsibility; nothing here touches storage.
"""

from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any
from uuid import UUID

from questline.shared.utils.datetime_utils import utcnow
from questline.shared.utils.logging import get_logger

from .calculator import XPCalculationInput, XPCalculationResult, calculate_xp
from .exceptions import InvalidXPInputError
from .levels import LevelProgress, calculate_level
from .novelty import ActivityRecord, is_first_time_combo
from .rules import Ruleset, base_xp_for_tags
from .schemas import Difficulty, XPSourceType, XPTransactionDraft
from .store import check_purchase

logger = get_logger(__name__)


class ExperienceService:
    """Scores activities against a single ruleset."""

    def __init__(self, ruleset: Ruleset):
        self.ruleset = ruleset

    def score_quest_completion(
        self,
        quest_id: UUID | str,
        base_xp: int,
        difficulty: Difficulty | str,
        evidence_url: str | None = None,
        first_time_combo: bool = False,
        notes: str | None = None,
    ) -> XPTransactionDraft:
        """Score a completed quest.

        Quest completion always counts as class-aligned; an evidence URL
        earns the social-proof bonus.
        """
        context = {
            "difficulty": _difficulty_value(difficulty),
            "classAligned": True,
            "socialProof": bool(evidence_url),
            "novelty": first_time_combo,
        }
        result = calculate_xp(
            {
                "base": base_xp,
                "difficulty": context["difficulty"],
                "class_aligned": True,
                "first_time_combo": first_time_combo,
                "social_proof": context["socialProof"],
            },
            self.ruleset,
        )
        return self._draft(XPSourceType.QUEST, quest_id, base_xp, result, context, notes)

    def score_event(
        self,
        event_id: UUID | str,
        tags: Iterable[str],
        difficulty: Difficulty | str,
        history: Iterable[ActivityRecord],
        *,
        evidence_url: str | None = None,
        now: datetime | None = None,
        notes: str | None = None,
    ) -> XPTransactionDraft:
        """Score a logged event.

        Base XP comes from the event's tags; the novelty bonus applies when
        the same tag set was not logged inside the ruleset's window.
        ``history`` must not include the event being scored.
        """
        tags = list(tags)
        base_xp = base_xp_for_tags(self.ruleset, tags)
        novel = is_first_time_combo(
            tags,
            history,
            now=now or utcnow(),
            window_days=self.ruleset.multipliers.novelty.window_days,
        )
        context = {
            "difficulty": _difficulty_value(difficulty),
            "classAligned": True,
            "socialProof": bool(evidence_url),
            "novelty": novel,
            "tags": sorted(set(tags)),
        }
        result = calculate_xp(
            {
                "base": base_xp,
                "difficulty": context["difficulty"],
                "class_aligned": True,
                "first_time_combo": novel,
                "social_proof": context["socialProof"],
            },
            self.ruleset,
        )
        return self._draft(XPSourceType.EVENT, event_id, base_xp, result, context, notes)

    def simulate(self, xp_input: XPCalculationInput | Mapping[str, Any]) -> XPCalculationResult:
        """Admin preview: score an input without producing a transaction."""
        result = calculate_xp(xp_input, self.ruleset)
        logger.info(
            "xp_simulated",
            ruleset=self.ruleset.name,
            multiplier=result.multiplier,
            total=result.total,
        )
        return result

    def level_for(self, total_xp: int) -> LevelProgress:
        """Level progress on this ruleset's curve."""
        return calculate_level(total_xp, self.ruleset.level_curve)

    def check_purchase(
        self,
        balance: int,
        cost: int,
        *,
        last_purchase_at: datetime | None = None,
        cooldown_days: int | None = None,
        now: datetime | None = None,
    ) -> None:
        """Validate a reward purchase; rewards without a cooldown use the ruleset's."""
        if cooldown_days is None:
            cooldown_days = self.ruleset.store.default_cooldown
        check_purchase(
            balance,
            cost,
            last_purchase_at=last_purchase_at,
            cooldown_days=cooldown_days,
            now=now or utcnow(),
        )

    def _draft(
        self,
        source: XPSourceType,
        source_id: UUID | str,
        base_xp: int,
        result: XPCalculationResult,
        context: dict[str, Any],
        notes: str | None,
    ) -> XPTransactionDraft:
        logger.info(
            "xp_scored",
            ruleset=self.ruleset.name,
            source=source.value,
            source_id=str(source_id),
            base_xp=base_xp,
            multiplier=result.multiplier,
            total_xp=result.total,
        )
        return XPTransactionDraft(
            source=source,
            source_id=source_id,
            base_xp=base_xp,
            multiplier=result.multiplier,
            total_xp=result.total,
            context={**context, "breakdown": result.breakdown.as_display()},
            notes=notes,
        )


def _difficulty_value(difficulty: Difficulty | str) -> str:
    try:
        return Difficulty(difficulty).value
    except ValueError:
        raise InvalidXPInputError(
            f"Unknown difficulty {difficulty!r}; expected one of "
            + ", ".join(d.value for d in Difficulty),
            field="difficulty",
        ) from None
