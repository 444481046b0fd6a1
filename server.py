#!/usr/bin/env python3
"""
MCP Server entry point for aggregate-paginate.

Exposes a single tool that runs a MongoDB aggregation pipeline with
page-oriented slicing and returns the documents together with pagination
metadata (total count, page position, navigation flags).

Usage:
    python server.py

The server runs in stdio mode by default, which is the standard transport
for MCP servers that are invoked by LLM agents.
"""

import logging
from typing import Any

from mcp.server.fastmcp import FastMCP

from config import get_config
from tools.aggregate_paginate import aggregate_paginate_tool
from utils.option_layers import reset_global_options

# Create FastMCP server instance
config = get_config()
mcp = FastMCP(
    name=config.server_name,
    instructions=(
        "This server pages through MongoDB aggregation results. "
        "Use aggregate_paginate with a collection name and a pipeline (list of stage objects). "
        "Address the window either by page (1-based) or by offset (0-based rows); "
        "when both are given, offset wins. "
        "Responses carry docs plus totalDocs, limit, page, totalPages, pagingCounter, "
        "hasPrevPage/hasNextPage and prevPage/nextPage."
    ),
)


@mcp.tool(
    name="aggregate_paginate",
    description=(
        "Run an aggregation pipeline against a MongoDB collection and return one page of results "
        "with pagination metadata. Counts all matching documents in parallel with the page query."
    ),
)
async def aggregate_paginate_mcp_tool(
    collection: str,
    pipeline: list[dict[str, Any]] | None = None,
    page: int | None = None,
    offset: int | None = None,
    limit: int | None = None,
    pagination: bool | None = None,
    sort: dict[str, int] | None = None,
    allow_disk_use: bool | None = None,
    custom_labels: dict[str, str] | None = None,
) -> dict:
    """
    Run an aggregation pipeline and return one page of results.

    Args:
        collection: Collection name in the configured database.
        pipeline: Aggregation stages, e.g. [{"$match": {"status": "active"}}] (default: []).
        page: 1-based page number. Ignored when offset is given.
        offset: 0-based row offset. Takes precedence over page.
        limit: Page size (default: 10; non-positive values fall back to the default).
        pagination: Set false to return every matching document as a single page.
        sort: Sort specification, e.g. {"createdAt": -1}.
        allow_disk_use: Let the server spill large sorts/groups to disk.
        custom_labels: Rename envelope keys, e.g. {"docs": "items", "meta": "paginator"}.

    Returns:
        Dictionary with structure (default labels):
        {
            "docs": [...],
            "totalDocs": int,
            "limit": int,
            "page": int,
            "totalPages": int,
            "offset": int,          # Only when addressed by offset
            "pagingCounter": int,   # 1-based index of the first doc on this page
            "hasPrevPage": bool,
            "hasNextPage": bool,
            "prevPage": int | None,
            "nextPage": int | None
        }

        On error, returns:
        {
            "error": {
                "code": str,            # UPSTREAM_QUERY_FAILURE, VALIDATION_ERROR, INTERNAL_ERROR
                "message": str,
                "retryable": bool
            }
        }
    """
    args: dict[str, Any] = {"collection": collection}

    # Only include parameters that were explicitly provided
    if pipeline is not None:
        args["pipeline"] = pipeline
    if page is not None:
        args["page"] = page
    if offset is not None:
        args["offset"] = offset
    if limit is not None:
        args["limit"] = limit
    if pagination is not None:
        args["pagination"] = pagination
    if sort is not None:
        args["sort"] = sort
    if allow_disk_use is not None:
        args["allow_disk_use"] = allow_disk_use
    if custom_labels is not None:
        args["custom_labels"] = custom_labels

    return await aggregate_paginate_tool(args)


def main():
    """
    Main entry point for the MCP server.

    Runs the server in stdio mode, which is the standard transport
    for MCP servers that are invoked by LLM agents.
    """
    # Load and setup configuration
    config.setup_logging()
    reset_global_options()

    # Log startup information
    logger = logging.getLogger(__name__)
    logger.info("Starting aggregate-paginate MCP Server")
    logger.info(f"Server name: {config.server_name}")

    # Validate configuration and log warnings
    warnings = config.validate()
    for warning in warnings:
        logger.warning(warning)

    # Start the server
    logger.info("Server starting in stdio mode")
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
