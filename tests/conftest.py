"""Global pytest fixtures for the Questline XP engine.

This module provides shared fixtures for testing including:
- The default ruleset and a factory for edited rulesets
- An async HTTP client over the FastAPI app
"""

import copy
from collections.abc import AsyncGenerator, Callable
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from questline.experience.rules import DEFAULT_RULES, LevelCurve, Ruleset, default_ruleset


# ===========================================
# RULESET FIXTURES
# ===========================================


@pytest.fixture
def ruleset() -> Ruleset:
    """The built-in default ruleset."""
    return default_ruleset()


@pytest.fixture
def curve() -> LevelCurve:
    """Default level curve: 100 XP to level 2, +50 per level after."""
    return LevelCurve()


@pytest.fixture
def rules_doc() -> dict[str, Any]:
    """A fresh, mutable copy of the default admin rules document."""
    return copy.deepcopy(DEFAULT_RULES)


@pytest.fixture
def make_ruleset(rules_doc: dict[str, Any]) -> Callable[..., Ruleset]:
    """Build a ruleset from the default document with multiplier overrides."""

    def _make(name: str = "edited", active: bool = True, **multipliers: Any) -> Ruleset:
        doc = copy.deepcopy(rules_doc)
        doc["multipliers"].update(multipliers)
        return Ruleset.from_rules_json(doc, name=name, active=active)

    return _make


# ===========================================
# API CLIENT FIXTURES
# ===========================================


@pytest_asyncio.fixture
async def async_client() -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client for API testing."""
    from questline.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
