"""MCP handler registration and error-to-result mapping."""

from __future__ import annotations

import functools
import logging
from collections.abc import Iterable

import anyio.to_thread
from mcp import types
from mcp.server import Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from pydantic import AnyUrl

from nocodb_mcp.serving.mcp import errors
from nocodb_mcp.serving.mcp.tools import list_tool_descriptors
from nocodb_mcp.serving.services.dispatch import Dispatcher
from nocodb_mcp.serving.services.resources import ResourceService

LOG = logging.getLogger("nocodb_mcp.serving.mcp.registry")


class ToolCallFailedError(Exception):
    """Raised so the MCP server reports the tool result with ``isError`` set."""


def run_tool(
    dispatcher: Dispatcher,
    name: str,
    arguments: dict[str, object],
) -> list[types.TextContent]:
    """
    Dispatch one tool call and map failures onto MCP error results.

    Returns
    -------
    list[types.TextContent]
        Content blocks of a successful result.

    Raises
    ------
    ToolCallFailedError
        When the operation produced an error result or rejected its arguments.
    """
    try:
        result = dispatcher.dispatch(name, arguments)
    except errors.UnknownOperationError:
        raise
    except errors.McpError as exc:
        raise ToolCallFailedError(f"Error: {exc}") from exc
    if result.is_error:
        raise ToolCallFailedError(result.text)
    return result.to_mcp_content()


def register_tools(server: Server, dispatcher: Dispatcher) -> None:
    """Register ``list_tools`` and ``call_tool`` handlers on the low-level server."""

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return [descriptor.to_mcp_tool() for descriptor in list_tool_descriptors()]

    # The dispatcher owns argument validation.
    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: dict[str, object] | None) -> list[types.TextContent]:
        LOG.info("Tool call %s", name)
        return await anyio.to_thread.run_sync(
            functools.partial(run_tool, dispatcher, name, arguments or {})
        )


def register_resources(server: Server, resources: ResourceService) -> None:
    """Register ``list_resources`` and ``read_resource`` handlers on the low-level server."""

    @server.list_resources()
    async def list_resources() -> list[types.Resource]:
        descriptors = await anyio.to_thread.run_sync(resources.list_resources)
        return [
            types.Resource(
                uri=AnyUrl(descriptor.uri),
                name=descriptor.name,
                description=descriptor.description,
                mimeType=descriptor.mime_type,
            )
            for descriptor in descriptors
        ]

    @server.read_resource()
    async def read_resource(uri: AnyUrl) -> Iterable[ReadResourceContents]:
        contents = await anyio.to_thread.run_sync(resources.read_resource, str(uri))
        return [ReadResourceContents(content=contents.text, mime_type=contents.mime_type)]
