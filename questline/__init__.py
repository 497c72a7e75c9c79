"""Questline XP Engine.

Rule-driven experience points for a gamified productivity tracker: activities
are scored against an admin-editable ruleset, and cumulative XP maps onto a
linear level curve.

Modules:
    - experience: XP calculator, level progression, rulesets, novelty lookback,
      reward store checks, and the simulator API
    - shared: Base schemas and structured logging
"""

from questline.main import app, create_app, APP_VERSION, APP_TITLE

__version__ = APP_VERSION
__all__ = ["app", "create_app", "APP_VERSION", "APP_TITLE"]
