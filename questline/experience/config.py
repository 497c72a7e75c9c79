"""Configuration for the Experience engine."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings

from .exceptions import RulesetConfigurationError
from .rules import Ruleset, default_ruleset, load_ruleset


class ExperienceSettings(BaseSettings):
    """Settings for XP scoring and the admin simulator."""

    model_config = {"env_prefix": "XP_ENGINE_", "case_sensitive": False}

    # Ruleset Settings
    rules_file: Path | None = Field(
        default=None,
        description="JSON file holding the active ruleset; built-in defaults when unset",
    )

    # Logging Settings
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    json_logs: bool = Field(
        default=True,
        description="Emit JSON logs; console renderer when false",
    )

    # API Settings
    debug: bool = Field(
        default=False,
        description="Include exception text in 500 responses",
    )


@lru_cache
def get_experience_settings() -> ExperienceSettings:
    """Get cached experience settings."""
    return ExperienceSettings()


def resolve_active_ruleset(settings: ExperienceSettings) -> Ruleset:
    """The ruleset named by ``settings``, or the built-in defaults.

    A rules file is parsed once per modification time.
    """
    if settings.rules_file is None:
        return default_ruleset()
    path = settings.rules_file.resolve()
    try:
        mtime_ns = path.stat().st_mtime_ns
    except OSError as exc:
        raise RulesetConfigurationError(f"Cannot read ruleset file {path}: {exc}") from exc
    return _load_ruleset_version(path, mtime_ns)


@lru_cache(maxsize=8)
def _load_ruleset_version(path: Path, mtime_ns: int) -> Ruleset:
    return load_ruleset(path)
