"""Shared schema primitives for pagination request/response models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class LenientOptions(BaseModel):
    """Options base: unknown keys preserved, aliases and field names both accepted.

    Validators on subclasses coerce instead of rejecting, so validation of
    caller options never fails.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class StrictIgnoreRequest(BaseModel):
    """Request base with strict typing and ignored unknown fields."""

    model_config = ConfigDict(extra="ignore", strict=True)


class StrictResponse(BaseModel):
    """Response/result base with forbidden unknown fields."""

    model_config = ConfigDict(extra="forbid")


class FrozenValue(BaseModel):
    """Immutable internal value passed between pagination stages."""

    model_config = ConfigDict(frozen=True, extra="forbid")
