"""XP calculation engine — stateless, deterministic, cacheable.

Turns a raw activity plus the active ruleset into an XP award with a
breakdown that reconstructs the total. Storage of the resulting transaction
is the caller's job.
"""

import math
from collections.abc import Mapping
from decimal import Decimal
from typing import Any

from pydantic import Field, ValidationError

from questline.shared.schemas.base import FrozenSchema
from questline.shared.utils.logging import get_logger

from .exceptions import InvalidXPInputError, RulesetConfigurationError
from .rules import Ruleset
from .schemas import Difficulty

logger = get_logger(__name__)


class XPCalculationInput(FrozenSchema):
    """One activity to score. Built per award, never stored."""

    base: int = Field(ge=0, strict=True)
    difficulty: Difficulty
    class_aligned: bool = Field(default=False, strict=True, alias="classAligned")
    first_time_combo: bool = Field(default=False, strict=True, alias="firstTimeCombo")
    social_proof: bool = Field(default=False, strict=True, alias="socialProof")


class XPBreakdown(FrozenSchema):
    """Multiplier terms that produced an award, in application order.

    Optional terms are None when their condition did not hold.
    """

    base: int
    difficulty: float
    class_alignment: float | None = Field(default=None, alias="classAlignment")
    novelty: float | None = None
    social_proof: float | None = Field(default=None, alias="socialProof")

    def terms(self) -> list[float]:
        """Applied multiplier terms, base XP excluded."""
        optional = (self.class_alignment, self.novelty, self.social_proof)
        return [self.difficulty, *(term for term in optional if term is not None)]

    def reconstruct_total(self) -> int:
        """Recompute the awarded total from the breakdown alone."""
        return _ceil_total(self.base, _product(self.terms()))

    def as_display(self) -> dict[str, float | int]:
        """Ordered ``{modifier: value}`` mapping for audit/display output."""
        return self.model_dump(by_alias=True, exclude_none=True)


class XPCalculationResult(FrozenSchema):
    """Immutable result of an XP calculation."""

    multiplier: float
    total: int
    breakdown: XPBreakdown


def _product(terms: list[float]) -> Decimal:
    # Coefficients are multiplied as the decimals an admin typed, so
    # 10 x 1.1 scores 11 rather than ceil(11.000000000000002).
    product = Decimal(1)
    for term in terms:
        product *= Decimal(str(term))
    return product


def _ceil_total(base: int, multiplier: Decimal) -> int:
    return math.ceil(Decimal(base) * multiplier)


def _coerce_input(xp_input: XPCalculationInput | Mapping[str, Any]) -> XPCalculationInput:
    if isinstance(xp_input, XPCalculationInput):
        return xp_input
    if not isinstance(xp_input, Mapping):
        raise InvalidXPInputError(
            f"XP input must be an XPCalculationInput or mapping, got {type(xp_input).__name__}"
        )
    try:
        return XPCalculationInput.model_validate(xp_input)
    except ValidationError as exc:
        err = exc.errors()[0]
        field = ".".join(str(part) for part in err["loc"]) or None
        raise InvalidXPInputError(
            f"Invalid XP input: {field}: {err['msg']}" if field else f"Invalid XP input: {err['msg']}",
            field=field,
        ) from exc


def calculate_xp(
    xp_input: XPCalculationInput | Mapping[str, Any],
    ruleset: Ruleset,
) -> XPCalculationResult:
    """Calculate XP for a single activity.

    Pure function — no side effects, no DB access. The multiplier is the
    product of the difficulty coefficient and each flagged bonus, and the
    total is always rounded up so no fractional XP is lost.

    Raises:
        InvalidXPInputError: negative base, unknown difficulty, non-boolean flag.
        RulesetConfigurationError: ``ruleset`` is not a validated Ruleset.
    """
    activity = _coerce_input(xp_input)
    if not isinstance(ruleset, Ruleset):
        raise RulesetConfigurationError(
            f"Expected a Ruleset, got {type(ruleset).__name__}; "
            "parse admin documents with Ruleset.from_rules_json first"
        )

    multipliers = ruleset.multipliers
    breakdown: dict[str, Any] = {
        "base": activity.base,
        "difficulty": multipliers.difficulty.for_difficulty(activity.difficulty),
    }
    if activity.class_aligned:
        breakdown["class_alignment"] = multipliers.class_alignment
    if activity.first_time_combo:
        breakdown["novelty"] = multipliers.novelty.bonus
    if activity.social_proof:
        breakdown["social_proof"] = multipliers.social_proof

    terms = XPBreakdown(**breakdown)
    multiplier = _product(terms.terms())
    total = _ceil_total(activity.base, multiplier)

    logger.debug(
        "xp_calculated",
        ruleset=ruleset.name,
        base=activity.base,
        difficulty=activity.difficulty,
        multiplier=float(multiplier),
        total=total,
    )
    return XPCalculationResult(
        multiplier=float(multiplier),
        total=total,
        breakdown=terms,
    )
