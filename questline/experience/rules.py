"""Rulesets: the admin-editable coefficients the XP engine runs on.

A ruleset is the validated form of the admin ``rules_json`` document. The
engine never reads ambient configuration; callers select the active ruleset
and pass it in, so an edited or A/B-tested ruleset takes effect without a
redeploy.
"""

import json
from collections.abc import Iterable, Mapping
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Final

from pydantic import Field, NonNegativeInt, ValidationError, field_serializer, field_validator

from questline.shared.schemas.base import FrozenSchema
from questline.shared.utils.logging import get_logger

from .exceptions import InvalidXPInputError, RulesetConfigurationError
from .schemas import Difficulty

logger = get_logger(__name__)

# Base XP for a logged event whose tags match no catalog activity
DEFAULT_EVENT_BASE_XP: Final[int] = 15

# Event tag -> catalog activity, checked in order
EVENT_TAG_ACTIVITIES: Final[tuple[tuple[str, str], ...]] = (
    ("tutorial", "complete_tutorial"),
    ("deploy", "deploy_mvp"),
    ("post", "write_post"),
    ("bug", "fix_bug"),
)

DEFAULT_RULES: Final[dict[str, Any]] = {
    "levelCurve": {
        "baseXP": 100,
        "increment": 50,
    },
    "baseXPCatalog": {
        "read_doc": 5,
        "implement_utility": 15,
        "complete_tutorial": 20,
        "ship_mvp_local": 35,
        "deploy_mvp": 50,
        "write_post": 15,
        "get_dm_lead": 40,
        "book_meeting": 60,
        "close_pilot": 120,
        "publish_demo": 20,
        "run_evaluation": 30,
        "fix_bug": 30,
    },
    "multipliers": {
        "difficulty": {
            "easy": 1.0,
            "medium": 1.2,
            "hard": 1.5,
        },
        "classAlignment": 1.2,
        "novelty": {
            "bonus": 1.1,
            "windowDays": 30,
        },
        "socialProof": 1.1,
    },
    "store": {
        "defaultCooldown": 7,
    },
}


class LevelCurve(FrozenSchema):
    """Linear level curve.

    Level 2 needs ``base_xp`` cumulative XP; each later level needs
    ``increment`` more than the one before it.
    """

    base_xp: int = Field(default=100, gt=0, alias="baseXP")
    increment: int = Field(default=50, gt=0)


class DifficultyMultipliers(FrozenSchema):
    easy: float = Field(gt=0, allow_inf_nan=False, strict=True)
    medium: float = Field(gt=0, allow_inf_nan=False, strict=True)
    hard: float = Field(gt=0, allow_inf_nan=False, strict=True)

    def for_difficulty(self, difficulty: Difficulty | str) -> float:
        return getattr(self, Difficulty(difficulty).value)


class NoveltyRule(FrozenSchema):
    bonus: float = Field(gt=0, allow_inf_nan=False, strict=True)
    window_days: int = Field(default=30, ge=1, alias="windowDays")


class Multipliers(FrozenSchema):
    difficulty: DifficultyMultipliers
    class_alignment: float = Field(gt=0, allow_inf_nan=False, strict=True, alias="classAlignment")
    novelty: NoveltyRule
    social_proof: float = Field(gt=0, allow_inf_nan=False, strict=True, alias="socialProof")


class StoreRules(FrozenSchema):
    default_cooldown: int = Field(default=7, ge=0, alias="defaultCooldown")


class Ruleset(FrozenSchema):
    """A named, versioned bundle of multiplier coefficients and catalog."""

    name: str = "default"
    active: bool = False
    level_curve: LevelCurve = Field(default_factory=LevelCurve, alias="levelCurve")
    base_xp_catalog: Mapping[str, NonNegativeInt] = Field(
        default_factory=dict, alias="baseXPCatalog", validate_default=True
    )
    multipliers: Multipliers
    store: StoreRules = Field(default_factory=StoreRules)

    @field_validator("base_xp_catalog", mode="after")
    @classmethod
    def _freeze_catalog(cls, catalog: Mapping[str, int]) -> Mapping[str, int]:
        # Rulesets are cached and shared between requests
        return MappingProxyType(dict(catalog))

    @field_serializer("base_xp_catalog")
    def _dump_catalog(self, catalog: Mapping[str, int]) -> dict[str, int]:
        return dict(catalog)

    def __hash__(self) -> int:
        return hash(
            (
                self.name,
                self.active,
                self.level_curve,
                tuple(sorted(self.base_xp_catalog.items())),
                self.multipliers,
                self.store,
            )
        )

    @classmethod
    def from_rules_json(
        cls,
        data: Mapping[str, Any],
        name: str = "default",
        active: bool = False,
    ) -> "Ruleset":
        """Validate an admin rules document.

        Raises:
            RulesetConfigurationError: the document is missing a coefficient,
                carries a non-positive multiplier, or is not a mapping.
        """
        if not isinstance(data, Mapping):
            raise RulesetConfigurationError(
                f"Ruleset {name!r} must be a JSON object, got {type(data).__name__}"
            )
        try:
            ruleset = cls.model_validate({**data, "name": name, "active": active})
        except ValidationError as exc:
            errors = [
                {"loc": ".".join(str(part) for part in err["loc"]), "msg": err["msg"]}
                for err in exc.errors()
            ]
            logger.warning("ruleset_invalid", ruleset=name, errors=errors)
            raise RulesetConfigurationError(
                f"Ruleset {name!r} is invalid: "
                + "; ".join(f"{e['loc']}: {e['msg']}" for e in errors),
                errors=errors,
            ) from exc
        return ruleset

    def to_rules_json(self) -> dict[str, Any]:
        """The admin document form, without the record's name/active flag."""
        return self.model_dump(by_alias=True, exclude={"name", "active"})


def parse_ruleset(data: Mapping[str, Any], name: str = "default", active: bool = False) -> Ruleset:
    """Parse either a bare rules document or a stored ruleset record.

    A record looks like ``{"name": ..., "active": ..., "rules_json": {...}}``.
    """
    if isinstance(data, Mapping) and "rules_json" in data:
        return Ruleset.from_rules_json(
            data["rules_json"],
            name=data.get("name", name),
            active=bool(data.get("active", active)),
        )
    return Ruleset.from_rules_json(data, name=name, active=active)


@lru_cache
def default_ruleset() -> Ruleset:
    """The built-in ruleset, used when no admin ruleset is configured."""
    return Ruleset.from_rules_json(DEFAULT_RULES, name="default", active=True)


def load_ruleset(path: str | Path) -> Ruleset:
    """Load a ruleset from a JSON file."""
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise RulesetConfigurationError(f"Cannot read ruleset file {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise RulesetConfigurationError(
            f"Ruleset file {path} is not valid JSON: {exc.msg} (line {exc.lineno})"
        ) from exc

    ruleset = parse_ruleset(data, name=path.stem, active=True)
    logger.debug("ruleset_loaded", ruleset=ruleset.name, path=str(path))
    return ruleset


def select_active_ruleset(rulesets: Iterable[Ruleset]) -> Ruleset:
    """Return the single active ruleset.

    Raises:
        RulesetConfigurationError: none or more than one ruleset is active.
    """
    active = [ruleset for ruleset in rulesets if ruleset.active]
    if not active:
        raise RulesetConfigurationError("No active ruleset")
    if len(active) > 1:
        names = ", ".join(repr(ruleset.name) for ruleset in active)
        raise RulesetConfigurationError(f"More than one active ruleset: {names}")
    return active[0]


def base_xp_for_activity(ruleset: Ruleset, activity: str) -> int:
    """Base XP for a catalog activity such as ``fix_bug``."""
    try:
        return ruleset.base_xp_catalog[activity]
    except KeyError:
        raise InvalidXPInputError(
            f"Unknown activity {activity!r} in ruleset {ruleset.name!r}",
            field="activity",
        ) from None


def base_xp_for_tags(ruleset: Ruleset, tags: Iterable[str]) -> int:
    """Base XP for a logged event, resolved from its tags.

    The first tag rule that matches wins; events matching none earn
    ``DEFAULT_EVENT_BASE_XP``.
    """
    tag_set = set(tags)
    for tag, activity in EVENT_TAG_ACTIVITIES:
        if tag in tag_set:
            if activity not in ruleset.base_xp_catalog:
                raise RulesetConfigurationError(
                    f"Ruleset {ruleset.name!r} has no baseXPCatalog entry for {activity!r}",
                    errors=[{"loc": f"baseXPCatalog.{activity}", "msg": "Field required"}],
                )
            return ruleset.base_xp_catalog[activity]
    return DEFAULT_EVENT_BASE_XP
