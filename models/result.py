"""
Value types passed between the executor and the pagination computer.

- ``AggregateQuery``: the caller's pipeline descriptor (stages + raw options)
- ``RawQueryResult``: what the executor hands back (window + total count)
- ``PaginationMeta``: derived metadata, before labels are applied
"""

from __future__ import annotations

import copy
from collections.abc import Mapping, Sequence
from typing import Any, Dict, List, Optional

from pydantic import Field

from models.labels import Label, LabelSet
from schemas.common import FrozenValue, StrictResponse


class AggregateQuery(FrozenValue):
    """An aggregation pipeline plus the raw aggregate options it carries."""

    pipeline: List[Dict[str, Any]] = Field(default_factory=list)
    options: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def of(cls, query: Any) -> "AggregateQuery":
        """
        Normalize the accepted pipeline descriptor shapes.

        Accepts an AggregateQuery, a sequence of stages, a mapping with
        ``pipeline``/``options`` keys, or None (empty pipeline).
        """
        if query is None:
            return cls()
        if isinstance(query, AggregateQuery):
            return query
        if isinstance(query, Mapping):
            return cls(
                pipeline=list(query.get("pipeline") or []),
                options=dict(query.get("options") or {}),
            )
        if isinstance(query, Sequence) and not isinstance(query, (str, bytes)):
            return cls(pipeline=list(query))
        raise TypeError(f"Unsupported pipeline descriptor: {type(query).__name__}")

    def clone_stages(self) -> List[Dict[str, Any]]:
        """Deep copy of the stages so each branch can append independently."""
        return copy.deepcopy(self.pipeline)


class RawQueryResult(FrozenValue):
    """Ordered document window plus the total row count."""

    docs: List[Any]
    count: int = 0


class PaginationMeta(StrictResponse):
    """Pagination metadata keyed by logical field name."""

    total_docs: int
    limit: int
    page: int
    total_pages: Optional[int] = None
    offset: Optional[int] = Field(default=None, description="Set only in offset mode")
    paging_counter: int
    has_prev_page: bool
    has_next_page: bool
    prev_page: Optional[int] = None
    next_page: Optional[int] = None

    def to_labelled(self, labels: LabelSet) -> Dict[str, Any]:
        """Render the metadata with output keys taken from ``labels``."""
        rendered: Dict[str, Any] = {
            labels.key(Label.TOTAL_DOCS): self.total_docs,
            labels.key(Label.LIMIT): self.limit,
            labels.key(Label.PAGE): self.page,
            labels.key(Label.TOTAL_PAGES): self.total_pages,
            labels.key(Label.PAGING_COUNTER): self.paging_counter,
            labels.key(Label.HAS_PREV_PAGE): self.has_prev_page,
            labels.key(Label.HAS_NEXT_PAGE): self.has_next_page,
        }
        navigation = {
            labels.key(Label.PREV_PAGE): self.prev_page,
            labels.key(Label.NEXT_PAGE): self.next_page,
        }
        # offset has no label of its own; a field labelled "offset" keeps the key
        if self.offset is not None and "offset" not in rendered and "offset" not in navigation:
            rendered["offset"] = self.offset
        rendered.update(navigation)
        return rendered
