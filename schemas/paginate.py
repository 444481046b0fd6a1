"""Pydantic schemas for aggregate pagination options and the tool request."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

from pydantic import Field, ValidationInfo, field_validator

from schemas.common import LenientOptions, StrictIgnoreRequest
from utils.coercion import (
    DEFAULT_LIMIT,
    coerce_flag,
    coerce_limit,
    coerce_offset,
    coerce_page,
)


class PaginationOptions(LenientOptions):
    """Options for one paginate call.

    ``page`` and ``offset`` stay None unless supplied; whether they were
    supplied at all is read from ``model_fields_set`` (see ``has_offset``
    and ``has_page``). Passthrough fields are executor concerns and are not
    interpreted here.
    """

    # must precede ``limit``: the limit validator reads it
    legacy_limit_fallback: bool = Field(default=False, alias="legacyLimitFallback")

    page: Optional[int] = None
    offset: Optional[int] = None
    limit: int = DEFAULT_LIMIT
    pagination: bool = True
    sort: Any = None
    allow_disk_use: bool = Field(default=False, alias="allowDiskUse")
    custom_labels: dict[str, Any] = Field(default_factory=dict, alias="customLabels")

    # passthrough
    collation: Any = None
    lean: Any = False
    lean_with_id: Any = Field(default=True, alias="leanWithId")
    projection: Any = None
    select: Any = ""
    options: Any = None

    @field_validator("legacy_limit_fallback", mode="before")
    @classmethod
    def coerce_legacy_flag(cls, value: Any) -> bool:
        return coerce_flag(value, False)

    @field_validator("page", mode="before")
    @classmethod
    def coerce_page_value(cls, value: Any) -> int:
        return coerce_page(value)

    @field_validator("offset", mode="before")
    @classmethod
    def coerce_offset_value(cls, value: Any) -> int:
        return coerce_offset(value)

    @field_validator("limit", mode="before")
    @classmethod
    def coerce_limit_value(cls, value: Any, info: ValidationInfo) -> int:
        """Positive limits pass; anything else takes the configured fallback."""
        legacy = info.data.get("legacy_limit_fallback", False)
        return coerce_limit(value, legacy_zero_fallback=legacy)

    @field_validator("pagination", mode="before")
    @classmethod
    def coerce_pagination(cls, value: Any) -> bool:
        return coerce_flag(value, True)

    @field_validator("allow_disk_use", mode="before")
    @classmethod
    def coerce_allow_disk_use(cls, value: Any) -> bool:
        return coerce_flag(value, False)

    @field_validator("custom_labels", mode="before")
    @classmethod
    def coerce_custom_labels(cls, value: Any) -> dict[str, Any]:
        """Non-mapping label overrides are ignored."""
        if not isinstance(value, Mapping):
            return {}
        return {str(k): v for k, v in value.items()}

    @property
    def has_offset(self) -> bool:
        return "offset" in self.model_fields_set

    @property
    def has_page(self) -> bool:
        return "page" in self.model_fields_set


class AggregatePaginateRequest(StrictIgnoreRequest):
    """Request schema for the aggregate_paginate tool."""

    collection: str
    pipeline: list[dict[str, Any]] = Field(default_factory=list)
    page: Optional[int] = None
    offset: Optional[int] = None
    limit: Optional[int] = None
    pagination: Optional[bool] = None
    sort: Optional[dict[str, int]] = None
    allow_disk_use: Optional[bool] = None
    custom_labels: Optional[dict[str, str]] = None

    @field_validator("collection")
    @classmethod
    def validate_collection(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("cannot be empty")
        if value.startswith("system.") or "$" in value:
            raise ValueError(f"'{value}' is not a valid collection name")
        return value

    def to_options(self) -> dict[str, Any]:
        """Options mapping with only the keys the caller supplied."""
        return self.model_dump(
            include={
                "page",
                "offset",
                "limit",
                "pagination",
                "sort",
                "allow_disk_use",
                "custom_labels",
            },
            exclude_none=True,
        )
