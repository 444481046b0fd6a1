"""
Query executor boundary for aggregate pagination.

Builds the two pipeline branches (windowed data, grouped count) from the
caller's pipeline and runs them against a MongoDB collection through motor.
The pagination computer never talks to the store; it only sees what an
executor returns.
"""

import logging
from collections.abc import Mapping, Sequence
from typing import Any, Dict, List, Optional, Protocol

from motor.motor_asyncio import AsyncIOMotorCollection
from pydantic import Field
from pymongo.errors import ConnectionFailure, ExecutionTimeout, PyMongoError

from models.errors import create_upstream_query_error
from models.result import AggregateQuery
from schemas.common import FrozenValue
from utils.coercion import parse_int

logger = logging.getLogger(__name__)

DATA_BRANCH = "data"
COUNT_BRANCH = "count"

COUNT_STAGE = {"$group": {"_id": None, "count": {"$sum": 1}}}

_SORT_DIRECTIONS = {
    "asc": 1,
    "ascending": 1,
    "desc": -1,
    "descending": -1,
}


class BranchSettings(FrozenValue):
    """Aggregate settings shared by both branches."""

    allow_disk_use: bool = False
    collation: Optional[Dict[str, Any]] = None
    raw_options: Dict[str, Any] = Field(default_factory=dict)

    def aggregate_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for ``Collection.aggregate``."""
        kwargs = dict(self.raw_options)
        if self.allow_disk_use:
            kwargs["allowDiskUse"] = True
        if self.collation:
            kwargs["collation"] = self.collation
        return kwargs


class QueryExecutor(Protocol):
    """Runs the two pagination branches against a document store."""

    async def run_data(self, pipeline: List[Dict[str, Any]], settings: BranchSettings) -> List[Any]:
        """Run the windowed data pipeline and return its documents in order."""
        ...

    async def run_count(self, pipeline: List[Dict[str, Any]], settings: BranchSettings) -> int:
        """Run the grouped count pipeline and return the row count."""
        ...


def _sort_direction(value: Any) -> Any:
    if isinstance(value, Mapping):
        # {"$meta": "textScore"} and similar pass through
        return dict(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _SORT_DIRECTIONS:
            return _SORT_DIRECTIONS[lowered]
    parsed = parse_int(value)
    if parsed is not None and parsed < 0:
        return -1
    return 1


def normalize_sort(sort: Any) -> Optional[Dict[str, Any]]:
    """
    Normalize a sort specification into a ``$sort`` stage body.

    Accepts a mapping ({"createdAt": -1, "name": "asc"}), a list of
    (field, direction) pairs, or a space-separated string where a leading
    "-" means descending ("-createdAt name").

    Args:
        sort: Caller sort specification

    Returns:
        Ordered field -> direction dict, or None when there is nothing to sort
    """
    if not sort:
        return None

    spec: Dict[str, Any] = {}
    if isinstance(sort, str):
        for token in sort.split():
            if token.startswith("-"):
                spec[token[1:]] = -1
            else:
                spec[token.lstrip("+")] = 1
    elif isinstance(sort, Mapping):
        for name, direction in sort.items():
            spec[str(name)] = _sort_direction(direction)
    elif isinstance(sort, Sequence):
        for item in sort:
            if isinstance(item, str):
                spec[item] = 1
            elif isinstance(item, Sequence) and len(item) == 2:
                spec[str(item[0])] = _sort_direction(item[1])
    spec.pop("", None)
    return spec or None


def build_data_pipeline(
    query: AggregateQuery,
    sort: Any = None,
    skip: int = 0,
    limit: int = 0,
    paginate: bool = True,
) -> List[Dict[str, Any]]:
    """
    Build the data branch: caller stages, then $sort, then $skip and $limit.

    Skip precedes limit. Nothing is windowed when ``paginate`` is False,
    and an unbounded (0) limit adds no ``$limit`` stage.

    Args:
        query: Caller pipeline descriptor
        sort: Optional sort specification
        skip: Rows to skip
        limit: Page size (0 for unbounded)
        paginate: Whether to window the branch

    Returns:
        New list of stages; the caller's pipeline is not modified
    """
    stages = query.clone_stages()

    sort_spec = normalize_sort(sort)
    if sort_spec:
        stages.append({"$sort": sort_spec})

    if paginate:
        stages.append({"$skip": max(skip, 0)})
        if limit > 0:
            stages.append({"$limit": limit})

    return stages


def build_count_pipeline(query: AggregateQuery) -> List[Dict[str, Any]]:
    """
    Build the count branch: caller stages followed by a single-group count.

    Never windowed, never sorted.
    """
    stages = query.clone_stages()
    stages.append({"$group": dict(COUNT_STAGE["$group"])})
    return stages


def extract_count(groups: Sequence[Any]) -> int:
    """Row count from the count branch output; 0 when no group came back."""
    if not groups:
        return 0
    first = groups[0]
    if not isinstance(first, Mapping):
        return 0
    count = parse_int(first.get("count"))
    return count if count is not None else 0


def build_branch_settings(
    query: AggregateQuery,
    allow_disk_use: bool = False,
    collation: Any = None,
) -> BranchSettings:
    """Settings applied to both branches."""
    return BranchSettings(
        allow_disk_use=allow_disk_use,
        collation=dict(collation) if isinstance(collation, Mapping) and collation else None,
        raw_options=dict(query.options or {}),
    )


class MotorAggregateExecutor:
    """Executor backed by a motor collection's ``aggregate``."""

    def __init__(self, collection: AsyncIOMotorCollection):
        self.collection = collection

    async def _aggregate(
        self,
        branch: str,
        pipeline: List[Dict[str, Any]],
        settings: BranchSettings,
        length: Optional[int] = None,
    ) -> List[Any]:
        logger.debug("Running %s branch on %s: %s", branch, self.collection.name, pipeline)
        try:
            cursor = self.collection.aggregate(pipeline, **settings.aggregate_kwargs())
            return await cursor.to_list(length=length)
        except (ConnectionFailure, ExecutionTimeout) as e:
            logger.warning("Retryable failure in %s branch: %s", branch, e)
            raise create_upstream_query_error(
                branch, str(e), retryable=True, original_error=e
            ) from e
        except PyMongoError as e:
            logger.warning("Failure in %s branch: %s", branch, e)
            raise create_upstream_query_error(
                branch, str(e), retryable=False, original_error=e
            ) from e

    async def run_data(self, pipeline: List[Dict[str, Any]], settings: BranchSettings) -> List[Any]:
        return await self._aggregate(DATA_BRANCH, pipeline, settings)

    async def run_count(self, pipeline: List[Dict[str, Any]], settings: BranchSettings) -> int:
        groups = await self._aggregate(COUNT_BRANCH, pipeline, settings, length=1)
        return extract_count(groups)
