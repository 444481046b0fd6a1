"""
Entry point for paginating an aggregation pipeline.

Resolves options, runs the windowed data branch and the count branch
concurrently through an executor, and hands both results to the pagination
computer. Results are delivered either through a completion callback or as
the coroutine's return value, never both.
"""

import asyncio
import json
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from bson import json_util
from pydantic import ValidationError

from db.connection import get_collection
from db.executor import (
    MotorAggregateExecutor,
    QueryExecutor,
    build_branch_settings,
    build_count_pipeline,
    build_data_pipeline,
)
from models.errors import PaginateError, create_internal_error
from models.result import AggregateQuery, RawQueryResult
from schemas.paginate import AggregatePaginateRequest
from utils.option_layers import resolve_options
from utils.pagination import compute_envelope, resolve_window
from utils.pydantic_error_mapper import map_pydantic_validation_error

logger = logging.getLogger(__name__)

Callback = Callable[[Optional[BaseException], Optional[Dict[str, Any]]], Any]


async def run_branches(
    data: Awaitable[List[Any]], count: Awaitable[int]
) -> Tuple[List[Any], int]:
    """
    Await the data and count branches concurrently.

    If either branch fails the other is cancelled and the failure propagates
    unchanged.

    Returns:
        Tuple of (docs, count)
    """
    data_task = asyncio.ensure_future(data)
    count_task = asyncio.ensure_future(count)
    try:
        docs, total = await asyncio.gather(data_task, count_task)
    except BaseException:
        for task in (data_task, count_task):
            if not task.done():
                task.cancel()
        raise
    return docs, total


async def _paginate(
    executor: QueryExecutor, query: Any, options: Optional[Dict[str, Any]]
) -> Dict[str, Any]:
    aggregate_query = AggregateQuery.of(query)
    resolved = resolve_options(options)
    window = resolve_window(resolved)

    data_pipeline = build_data_pipeline(
        aggregate_query,
        sort=resolved.sort,
        skip=window.skip,
        limit=window.limit,
        paginate=window.paginate,
    )
    count_pipeline = build_count_pipeline(aggregate_query)
    settings = build_branch_settings(
        aggregate_query,
        allow_disk_use=resolved.allow_disk_use,
        collation=resolved.collation,
    )

    docs, count = await run_branches(
        executor.run_data(data_pipeline, settings),
        executor.run_count(count_pipeline, settings),
    )
    return compute_envelope(RawQueryResult(docs=list(docs), count=count), resolved)


async def aggregate_paginate(
    executor: QueryExecutor,
    query: Any = None,
    options: Optional[Dict[str, Any]] = None,
    callback: Optional[Callback] = None,
) -> Optional[Dict[str, Any]]:
    """
    Paginate an aggregation pipeline.

    Args:
        executor: Runs the data and count branches (e.g. MotorAggregateExecutor)
        query: AggregateQuery, list of stages, or None for an empty pipeline
        options: Per-call pagination options (page, offset, limit,
            pagination, sort, allowDiskUse, customLabels, collation, ...)
        callback: Optional ``callback(error, envelope)``; when given the
            result goes only to the callback and None is returned

    Returns:
        The envelope when no callback is given, otherwise None

    Raises:
        Whatever the executor raised (unchanged), when no callback is given
    """
    try:
        envelope = await _paginate(executor, query, options)
    except Exception as e:
        if callback is None:
            raise
        callback(e, None)
        return None

    if callback is not None:
        callback(None, envelope)
        return None
    return envelope


def _to_json_safe(envelope: Dict[str, Any]) -> Dict[str, Any]:
    """Render BSON types (ObjectId, datetime, Decimal128) as relaxed extended JSON."""
    return json.loads(json_util.dumps(envelope))


async def aggregate_paginate_tool(args: Dict[str, Any]) -> Dict[str, Any]:
    """
    Tool handler: paginate a pipeline against a named collection.

    Args:
        args: Dictionary containing:
            - collection (str): Collection name (required)
            - pipeline (list): Aggregation stages (default: [])
            - page, offset, limit, pagination, sort, allow_disk_use,
              custom_labels: Optional pagination options

    Returns:
        The JSON-safe envelope, or on error:
        {
            "error": {
                "code": str,         # UPSTREAM_QUERY_FAILURE, VALIDATION_ERROR, INTERNAL_ERROR
                "message": str,      # Human-readable error message
                "retryable": bool    # Whether operation can be retried
            }
        }
    """
    try:
        try:
            request = AggregatePaginateRequest.model_validate(args)
        except ValidationError as e:
            raise map_pydantic_validation_error(e) from e

        executor = MotorAggregateExecutor(get_collection(request.collection))
        envelope = await aggregate_paginate(
            executor,
            AggregateQuery(pipeline=request.pipeline),
            request.to_options(),
        )
        return _to_json_safe(envelope)

    except PaginateError as e:
        # Already sanitized
        return e.to_dict()

    except Exception as e:
        logger.exception("Unexpected error in aggregate_paginate tool")
        internal_error = create_internal_error(message=str(e), original_error=e)
        return internal_error.to_dict()
