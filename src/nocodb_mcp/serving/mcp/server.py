"""MCP server exposing NocoDB operations and resources over stdio."""

from __future__ import annotations

import logging
from collections.abc import Callable

import anyio
from mcp.server import Server
from mcp.server.stdio import stdio_server

from nocodb_mcp import __version__
from nocodb_mcp.config.serving_models import ServingConfig
from nocodb_mcp.serving.mcp.registry import register_resources, register_tools
from nocodb_mcp.serving.services.dispatch import Dispatcher
from nocodb_mcp.serving.services.wiring import BackendResource, build_backend_resource

SERVER_NAME = "nocodb-server"
LOG = logging.getLogger("nocodb_mcp.serving.mcp.server")


def create_mcp_server(
    cfg: ServingConfig | None = None,
    *,
    backend_factory: Callable[[ServingConfig], BackendResource] = build_backend_resource,
    register_tools_fn: Callable[[Server, Dispatcher], None] = register_tools,
) -> tuple[Server, Callable[[], None]]:
    """
    Create the MCP server instance plus shutdown hook.

    Parameters
    ----------
    cfg:
        Optional pre-loaded ServingConfig. When omitted, environment variables are used.
    backend_factory:
        Factory producing the dispatcher, resource service and close hook.
    register_tools_fn:
        Hook used to register tool handlers; tests substitute a recorder.

    Returns
    -------
    tuple[Server, Callable[[], None]]
        Configured MCP server and shutdown callback.
    """
    config = cfg or ServingConfig.from_env()
    resource = backend_factory(config)
    server: Server = Server(SERVER_NAME, version=__version__)
    register_tools_fn(server, resource.dispatcher)
    register_resources(server, resource.resources)
    return server, resource.close


async def _serve_stdio(server: Server) -> None:
    async with stdio_server() as (read_stream, write_stream):
        LOG.info("NocoDB MCP server running on stdio")
        await server.run(read_stream, write_stream, server.create_initialization_options())


def run_stdio(cfg: ServingConfig | None = None) -> None:
    """
    Run the MCP server over stdio until the client disconnects.

    Parameters
    ----------
    cfg:
        Optional pre-loaded configuration; environment variables are used otherwise.
    """
    server, close = create_mcp_server(cfg)
    try:
        anyio.run(_serve_stdio, server)
    finally:
        close()


def main() -> None:
    """Run the NocoDB MCP server with configuration from the environment."""
    run_stdio()


if __name__ == "__main__":
    main()
