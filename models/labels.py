"""
Envelope field labels for aggregate pagination results.

Every field of the result envelope has a logical name (``Label``) and an
output key. Callers rename output keys through ``customLabels``; the mapping
is resolved once and applied when the envelope is assembled.
"""

from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Optional


class Label(str, Enum):
    """Logical envelope fields that can be renamed by the caller."""

    TOTAL_DOCS = "totalDocs"
    LIMIT = "limit"
    PAGE = "page"
    TOTAL_PAGES = "totalPages"
    DOCS = "docs"
    NEXT_PAGE = "nextPage"
    PREV_PAGE = "prevPage"
    PAGING_COUNTER = "pagingCounter"
    HAS_PREV_PAGE = "hasPrevPage"
    HAS_NEXT_PAGE = "hasNextPage"
    META = "meta"


# meta is the only label without a default key: unset means a flat envelope
DEFAULT_LABELS: Dict[Label, Optional[str]] = {
    label: (None if label is Label.META else label.value) for label in Label
}


def _coerce_label_value(value: Any) -> Optional[str]:
    """Turn a caller-supplied label value into an output key.

    Returns None when the value should fall back to the default.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return None
    text = str(value).strip()
    return text or None


class LabelSet:
    """Immutable mapping from ``Label`` to output key names."""

    __slots__ = ("_keys",)

    def __init__(self, overrides: Optional[Mapping[Any, Any]] = None):
        keys = dict(DEFAULT_LABELS)
        for raw_name, value in (overrides or {}).items():
            label = label_for(raw_name)
            if label is None:
                continue
            key = _coerce_label_value(value)
            if key is not None:
                keys[label] = key
        self._keys = keys

    def key(self, label: Label) -> Optional[str]:
        """Output key for a logical field (None only for an unset meta)."""
        return self._keys[label]

    @property
    def meta_key(self) -> Optional[str]:
        return self._keys[Label.META]

    @property
    def is_nested(self) -> bool:
        """True when metadata nests under the meta key."""
        return self._keys[Label.META] is not None

    def overrides(self) -> Dict[str, str]:
        """Labels that differ from the defaults, keyed by logical name."""
        return {
            label.value: key
            for label, key in self._keys.items()
            if key is not None and key != DEFAULT_LABELS[label]
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LabelSet):
            return NotImplemented
        return self._keys == other._keys

    def __repr__(self) -> str:
        return f"LabelSet({self.overrides()!r})"


def label_for(name: Any) -> Optional[Label]:
    """Look up a ``Label`` by its logical name; unknown names give None."""
    if isinstance(name, Label):
        return name
    try:
        return Label(name)
    except ValueError:
        return None


def resolve_labels(layers: Iterable[Optional[Mapping[Any, Any]]]) -> LabelSet:
    """
    Merge label overrides layer by layer, lowest precedence first.

    A later layer only replaces the labels it names; an empty or None value
    in a later layer does not clear an earlier override.

    Args:
        layers: Label mappings (logical name -> output key), e.g.
            global overrides followed by per-call ``customLabels``

    Returns:
        Resolved LabelSet
    """
    merged: Dict[Label, str] = {}
    for layer in layers:
        if not layer or not isinstance(layer, Mapping):
            continue
        for raw_name, value in layer.items():
            label = label_for(raw_name)
            if label is None:
                continue
            key = _coerce_label_value(value)
            if key is not None:
                merged[label] = key
    return LabelSet({label.value: key for label, key in merged.items()})
