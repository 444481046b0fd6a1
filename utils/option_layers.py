"""
Layered resolution of pagination options.

Options come from three layers, lowest precedence first:

1. built-in defaults (``DEFAULT_OPTIONS``)
2. process-wide global overrides (seeded from ``Config``, replaced with
   ``set_global_options``)
3. per-call options

Later layers replace earlier values key by key, except ``customLabels``,
which merges label by label. Keys are canonicalized to their camelCase
spelling before merging so ``allow_disk_use`` and ``allowDiskUse`` never
compete.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Optional

from pydantic import BaseModel

from config import get_config
from models.labels import LabelSet, resolve_labels
from schemas.paginate import PaginationOptions
from utils.coercion import DEFAULT_LIMIT

logger = logging.getLogger(__name__)

LABELS_KEY = "customLabels"

DEFAULT_OPTIONS: Mapping[str, Any] = MappingProxyType(
    {
        "collation": {},
        "lean": False,
        "leanWithId": True,
        "limit": DEFAULT_LIMIT,
        "projection": {},
        "select": "",
        "options": {},
        "pagination": True,
    }
)

_CANONICAL_KEYS = {
    "allow_disk_use": "allowDiskUse",
    "custom_labels": "customLabels",
    "lean_with_id": "leanWithId",
    "legacy_limit_fallback": "legacyLimitFallback",
}

_global_options: Mapping[str, Any] = MappingProxyType({})


def canonical_key(key: str) -> str:
    return _CANONICAL_KEYS.get(key, key)


def _as_mapping(layer: Any) -> Mapping[str, Any]:
    if layer is None:
        return {}
    if isinstance(layer, BaseModel):
        return layer.model_dump(by_alias=True, exclude_unset=True)
    if isinstance(layer, Mapping):
        return layer
    logger.debug("Ignoring non-mapping options layer of type %s", type(layer).__name__)
    return {}


def merge_layers(*layers: Any) -> dict[str, Any]:
    """
    Merge option layers, lowest precedence first.

    Args:
        *layers: Mappings (or PaginationOptions) in precedence order;
            None entries are skipped

    Returns:
        Merged plain dict with canonical keys; ``customLabels`` holds the
        label-by-label merge of every layer
    """
    merged: dict[str, Any] = {}
    label_layers = []
    for layer in layers:
        for key, value in _as_mapping(layer).items():
            key = canonical_key(str(key))
            if key == LABELS_KEY:
                label_layers.append(value)
                continue
            merged[key] = value
    if label_layers:
        merged[LABELS_KEY] = resolve_labels(label_layers).overrides()
    return merged


def resolve_options(*call_layers: Any) -> PaginationOptions:
    """
    Resolve the effective options for one call.

    Stacks ``DEFAULT_OPTIONS``, the current global overrides and the given
    per-call layers, then coerces the result.

    Args:
        *call_layers: Per-call option mappings, lowest precedence first

    Returns:
        Coerced PaginationOptions; key presence (offset/page) reflects
        every layer
    """
    merged = merge_layers(DEFAULT_OPTIONS, _global_options, *call_layers)
    return PaginationOptions.model_validate(merged)


def resolve_call_labels(options: PaginationOptions) -> LabelSet:
    """LabelSet for already-resolved options."""
    return resolve_labels([options.custom_labels])


def set_global_options(options: Optional[Mapping[str, Any]]) -> None:
    """
    Replace the global override layer.

    Args:
        options: New global overrides, or None to clear them
    """
    global _global_options
    _global_options = MappingProxyType(merge_layers(options))
    logger.debug("Global pagination options set: %s", dict(_global_options))


def get_global_options() -> Mapping[str, Any]:
    """Read-only view of the current global override layer."""
    return _global_options


def reset_global_options() -> None:
    """Reseed the global override layer from configuration."""
    set_global_options(get_config().global_options())


reset_global_options()
