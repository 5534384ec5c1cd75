"""Shared backend wiring helpers for HTTP and MCP surfaces."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

import httpx

from nocodb_mcp.config.serving_models import ServingConfig
from nocodb_mcp.serving.mcp.backend import NocoDBClient
from nocodb_mcp.serving.services.dispatch import Dispatcher
from nocodb_mcp.serving.services.handlers import HandlerContext
from nocodb_mcp.serving.services.observability import ServiceObservability
from nocodb_mcp.serving.services.resources import ResourceService

LOG = logging.getLogger("nocodb_mcp.services.wiring")

__all__ = ["BackendResource", "build_backend_resource", "build_dispatcher"]


@dataclass
class BackendResource:
    """Bundle of dispatcher, resource service, and cleanup hook."""

    dispatcher: Dispatcher
    resources: ResourceService
    close: Callable[[], None]


def get_observability_from_config(cfg: ServingConfig) -> ServiceObservability | None:
    """
    Derive service observability settings from configuration flags.

    Returns
    -------
    ServiceObservability | None
        Enabled observability config when toggled on; otherwise ``None``.
    """
    if not cfg.enable_observability:
        return None
    return ServiceObservability(enabled=True)


def build_dispatcher(
    cfg: ServingConfig,
    *,
    client: NocoDBClient | None = None,
    observability: ServiceObservability | None = None,
    transport: str = "mcp",
) -> Dispatcher:
    """
    Construct a dispatcher bound to an immutable configuration.

    Parameters
    ----------
    cfg:
        Validated serving configuration.
    client:
        Optional pre-built NocoDB client; one is created from ``cfg`` otherwise.
    observability:
        Optional observability override; derived from ``cfg`` when omitted.
    transport:
        Label recorded in call metrics.

    Returns
    -------
    Dispatcher
        Dispatcher routing the fixed operation set.
    """
    remote = client or NocoDBClient.from_config(cfg)
    return Dispatcher(
        context=HandlerContext(config=cfg, client=remote),
        observability=observability or get_observability_from_config(cfg),
        transport=transport,
    )


def build_backend_resource(
    cfg: ServingConfig,
    *,
    http_client: httpx.Client | None = None,
    transport: str = "mcp",
) -> BackendResource:
    """
    Construct the dispatcher and resource service over one shared HTTP client.

    Parameters
    ----------
    cfg:
        Validated serving configuration.
    http_client:
        Optional pre-built HTTPX client (tests inject a mock transport here).
    transport:
        Label recorded in call metrics.

    Returns
    -------
    BackendResource
        Dispatcher, resource service, and close hook suitable for server startup.
    """
    client = NocoDBClient.from_config(cfg, client=http_client)
    LOG.info("Configured NocoDB backend %s", cfg.describe())
    if not cfg.auth_token:
        LOG.warning("NOCODB_AUTH_TOKEN is not set; requests will be sent unauthenticated")
    dispatcher = build_dispatcher(cfg, client=client, transport=transport)
    return BackendResource(
        dispatcher=dispatcher,
        resources=ResourceService(client=client),
        close=client.close,
    )
