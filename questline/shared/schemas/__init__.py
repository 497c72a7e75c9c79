"""Shared schemas module."""

from questline.shared.schemas.base import (
    BaseSchema,
    ErrorDetail,
    FrozenSchema,
)

__all__ = [
    "BaseSchema",
    "ErrorDetail",
    "FrozenSchema",
]
