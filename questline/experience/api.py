"""REST API endpoints for the XP simulator, level lookups and the active ruleset."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Path, status

from questline.experience.config import get_experience_settings, resolve_active_ruleset
from questline.experience.exceptions import InvalidXPInputError, RulesetConfigurationError
from questline.experience.rules import Ruleset
from questline.experience.schemas import (
    ActiveRulesetResponse,
    LevelProgressResponse,
    SimulateXPRequest,
    SimulateXPResponse,
)
from questline.experience.service import ExperienceService
from questline.shared.schemas.base import ErrorDetail
from questline.shared.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/experience", tags=["experience"])


# ===========================================
# DEPENDENCIES
# ===========================================


def get_active_ruleset() -> Ruleset:
    """Resolve the ruleset XP calculations run on.

    Override this dependency to serve rulesets from another store.
    """
    try:
        return resolve_active_ruleset(get_experience_settings())
    except RulesetConfigurationError as exc:
        logger.error("active_ruleset_invalid", error=exc.message, errors=exc.errors)
        raise _problem(status.HTTP_500_INTERNAL_SERVER_ERROR, "Invalid ruleset", exc) from exc


def get_experience_service(ruleset: Ruleset = Depends(get_active_ruleset)) -> ExperienceService:
    return ExperienceService(ruleset)


def _problem(status_code: int, title: str, exc: InvalidXPInputError | RulesetConfigurationError) -> HTTPException:
    errors = exc.errors if isinstance(exc, RulesetConfigurationError) else None
    if isinstance(exc, InvalidXPInputError) and exc.field:
        errors = [{"loc": exc.field, "msg": exc.message}]
    detail = ErrorDetail(
        type=exc.error_type,
        title=title,
        status=status_code,
        detail=exc.message,
        errors=errors or None,
    )
    return HTTPException(status_code=status_code, detail=detail.model_dump())


# ===========================================
# SIMULATOR ENDPOINTS
# ===========================================


@router.post("/simulate", response_model=SimulateXPResponse)
async def simulate_xp(
    request: SimulateXPRequest,
    service: ExperienceService = Depends(get_experience_service),
):
    """
    Preview the XP an activity would earn under the active ruleset.

    Nothing is stored; identical inputs always return identical results.
    """
    try:
        result = service.simulate(
            {
                "base": request.base_xp,
                "difficulty": request.difficulty,
                "class_aligned": request.class_aligned,
                "first_time_combo": request.first_time,
                "social_proof": request.social_proof,
            }
        )
    except InvalidXPInputError as exc:
        raise _problem(status.HTTP_422_UNPROCESSABLE_ENTITY, "Invalid XP input", exc) from exc

    return SimulateXPResponse(
        multiplier=result.multiplier,
        total=result.total,
        breakdown=result.breakdown.as_display(),
    )


# ===========================================
# LEVEL ENDPOINTS
# ===========================================


@router.get("/levels/{total_xp}", response_model=LevelProgressResponse)
async def get_level(
    total_xp: int = Path(ge=0),
    service: ExperienceService = Depends(get_experience_service),
):
    """Level, XP to next level, and in-level progress for a cumulative total."""
    progress = service.level_for(total_xp)
    return LevelProgressResponse(
        total_xp=total_xp,
        level=progress.level,
        xp_to_next=progress.xp_to_next,
        progress=progress.progress,
    )


# ===========================================
# RULESET ENDPOINTS
# ===========================================


@router.get("/rules/active", response_model=ActiveRulesetResponse)
async def get_active_rules(ruleset: Ruleset = Depends(get_active_ruleset)):
    """The ruleset currently used for XP calculations."""
    return ActiveRulesetResponse(
        name=ruleset.name,
        active=ruleset.active,
        rules_json=ruleset.to_rules_json(),
    )
