"""
Unit tests for layered option resolution.

Tests precedence of defaults, global overrides and per-call options.
"""

import pytest

from models.labels import Label
from schemas.paginate import PaginationOptions
from utils.option_layers import (
    DEFAULT_OPTIONS,
    canonical_key,
    get_global_options,
    merge_layers,
    reset_global_options,
    resolve_call_labels,
    resolve_options,
    set_global_options,
)


@pytest.fixture(autouse=True)
def clean_global_options():
    set_global_options(None)
    yield
    reset_global_options()


class TestMergeLayers:
    """Tests for merge_layers."""

    def test_later_layer_wins(self):
        merged = merge_layers({"limit": 10, "sort": {"a": 1}}, {"limit": 20})

        assert merged == {"limit": 20, "sort": {"a": 1}}

    def test_keys_are_canonicalized(self):
        merged = merge_layers({"allowDiskUse": False}, {"allow_disk_use": True})

        assert merged == {"allowDiskUse": True}

    def test_custom_labels_merge_per_label(self):
        merged = merge_layers(
            {"customLabels": {"docs": "items", "meta": "paginator"}},
            {"custom_labels": {"docs": "rows"}},
        )

        assert merged["customLabels"] == {"docs": "rows", "meta": "paginator"}

    def test_none_layers_are_skipped(self):
        assert merge_layers(None, {"limit": 5}, None) == {"limit": 5}

    def test_accepts_pagination_options_model(self):
        options = PaginationOptions.model_validate({"page": 2})

        merged = merge_layers({"limit": 50}, options)

        assert merged == {"limit": 50, "page": 2}

    def test_canonical_key(self):
        assert canonical_key("lean_with_id") == "leanWithId"
        assert canonical_key("page") == "page"


class TestResolveOptions:
    """Tests for resolve_options."""

    def test_defaults_only(self):
        options = resolve_options()

        assert options.limit == DEFAULT_OPTIONS["limit"]
        assert options.pagination is True
        assert options.has_page is False
        assert options.has_offset is False

    def test_global_overrides_defaults(self):
        set_global_options({"limit": 25})

        assert resolve_options().limit == 25

    def test_call_overrides_global(self):
        set_global_options({"limit": 25})

        assert resolve_options({"limit": 5}).limit == 5

    def test_offset_in_global_layer_counts_as_present(self):
        set_global_options({"offset": 0})

        assert resolve_options({"page": 3}).has_offset is True

    def test_global_labels_merge_with_call_labels(self):
        set_global_options({"customLabels": {"meta": "paginator"}})

        options = resolve_options({"customLabels": {"docs": "items"}})
        labels = resolve_call_labels(options)

        assert labels.meta_key == "paginator"
        assert labels.key(Label.DOCS) == "items"

    def test_non_mapping_call_options_are_ignored(self):
        options = resolve_options("page=2")

        assert options.has_page is False

    def test_legacy_mode_absent_limit_uses_default(self):
        set_global_options({"legacyLimitFallback": True})

        assert resolve_options({"page": 1}).limit == 10
        assert PaginationOptions.model_validate({"legacyLimitFallback": True}).limit == 10

    @pytest.mark.parametrize("limit", [0, "-3", "abc"])
    def test_legacy_mode_supplied_invalid_limit_is_unbounded(self, limit):
        set_global_options({"legacyLimitFallback": True})

        assert resolve_options({"limit": limit}).limit == 0


class TestGlobalOptions:
    """Tests for the global override layer."""

    def test_set_and_get(self):
        set_global_options({"allow_disk_use": True})

        assert dict(get_global_options()) == {"allowDiskUse": True}

    def test_global_view_is_read_only(self):
        set_global_options({"limit": 5})

        with pytest.raises(TypeError):
            get_global_options()["limit"] = 6

    def test_clear(self):
        set_global_options({"limit": 5})
        set_global_options(None)

        assert dict(get_global_options()) == {}
