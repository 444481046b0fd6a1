"""
Integration tests for MCP server entry point.

Tests that server.py registers the aggregate_paginate tool with proper
metadata and forwards only explicitly provided parameters.
"""

import asyncio
import inspect
from unittest.mock import AsyncMock, patch

from config import get_config
from server import aggregate_paginate_mcp_tool, mcp


class TestServerIntegration:
    """Integration tests for the MCP server."""

    def test_server_has_configured_name(self):
        """Test that the MCP server uses the configured name."""
        assert mcp.name == get_config().server_name

    def test_server_has_instructions(self):
        assert mcp.instructions is not None
        assert "aggregate_paginate" in mcp.instructions

    def test_tool_is_registered(self):
        assert "aggregate_paginate" in mcp._tool_manager._tools

    def test_tool_has_correct_metadata(self):
        tool = mcp._tool_manager._tools["aggregate_paginate"]

        assert tool.name == "aggregate_paginate"
        assert tool.description is not None
        assert "pagination" in tool.description.lower()

    def test_tool_function_signature(self):
        params = inspect.signature(aggregate_paginate_mcp_tool).parameters

        assert list(params) == [
            "collection",
            "pipeline",
            "page",
            "offset",
            "limit",
            "pagination",
            "sort",
            "allow_disk_use",
            "custom_labels",
        ]
        assert all(params[name].default is None for name in list(params)[1:])
        assert inspect.signature(aggregate_paginate_mcp_tool).return_annotation is dict

    def test_wrapper_forwards_only_provided_parameters(self):
        """Test that None parameters are not forwarded to the tool."""
        tool = AsyncMock(return_value={"docs": []})

        with patch("server.aggregate_paginate_tool", tool):
            result = asyncio.run(aggregate_paginate_mcp_tool("orders", page=2, pagination=False))

        assert result == {"docs": []}
        tool.assert_awaited_once_with({"collection": "orders", "page": 2, "pagination": False})

    def test_wrapper_forwards_all_parameters(self):
        tool = AsyncMock(return_value={})

        with patch("server.aggregate_paginate_tool", tool):
            asyncio.run(
                aggregate_paginate_mcp_tool(
                    "orders",
                    pipeline=[{"$match": {}}],
                    offset=20,
                    limit=5,
                    sort={"createdAt": -1},
                    allow_disk_use=True,
                    custom_labels={"docs": "items"},
                )
            )

        tool.assert_awaited_once_with(
            {
                "collection": "orders",
                "pipeline": [{"$match": {}}],
                "offset": 20,
                "limit": 5,
                "sort": {"createdAt": -1},
                "allow_disk_use": True,
                "custom_labels": {"docs": "items"},
            }
        )
