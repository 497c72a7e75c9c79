"""Base schemas and common types used across the platform."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# ===========================================
# BASE MODELS
# ===========================================


class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        use_enum_values=True,
    )


class FrozenSchema(BaseSchema):
    """Immutable value object. Instances are hashable and safe to share.

    Subclasses with mapping fields must freeze them and define ``__hash__``.
    """

    model_config = ConfigDict(frozen=True)


# ===========================================
# ERROR RESPONSES
# ===========================================


class ErrorDetail(BaseSchema):
    """RFC 7807 Problem Details format."""

    type: str = Field(description="URI reference identifying the problem type")
    title: str = Field(description="Short, human-readable summary")
    status: int = Field(description="HTTP status code")
    detail: str = Field(description="Human-readable explanation")
    instance: str | None = Field(default=None, description="URI reference for this occurrence")
    errors: list[dict[str, Any]] | None = Field(
        default=None, description="Additional error details"
    )
