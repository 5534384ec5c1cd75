"""Shared fixtures for the NocoDB MCP test suite."""

from __future__ import annotations

import os

import pytest

from nocodb_mcp.config.serving_models import ServingConfig
from nocodb_mcp.serving.services.dispatch import Dispatcher
from tests._helpers.fakes import BASE_URL, StubNocoDB


@pytest.fixture
def serving_config() -> ServingConfig:
    """
    Configuration with a token and default base id.

    Returns
    -------
    ServingConfig
        Immutable configuration pointing at the stub base URL.
    """
    return ServingConfig(base_url=BASE_URL, auth_token="tok-123", default_base_id="base-1")


@pytest.fixture
def nocodb() -> StubNocoDB:
    """
    Empty stub NocoDB; tests register the routes they need.

    Returns
    -------
    StubNocoDB
        Recording stub with no routes.
    """
    return StubNocoDB()


@pytest.fixture
def dispatcher(serving_config: ServingConfig, nocodb: StubNocoDB) -> Dispatcher:
    """
    Dispatcher whose remote calls go to the stub.

    Returns
    -------
    Dispatcher
        Dispatcher bound to ``serving_config``.
    """
    return nocodb.dispatcher(serving_config)


NOCODB_ENV_VARS = (
    "NOCODB_URL",
    "NOCODB_AUTH_TOKEN",
    "NOCODB_BASE_ID",
    "API_VERSION",
    "NOCODB_TIMEOUT_SEC",
    "NOCODB_MCP_OBSERVABILITY",
    "NOCODB_MCP_HTTP_HOST",
    "NOCODB_MCP_HTTP_PORT",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """
    Isolated process environment without NocoDB settings.

    Values written by ``load_dotenv`` land in the copy and vanish after the test.

    Returns
    -------
    dict[str, str]
        The patched ``os.environ`` mapping.
    """
    environ = {key: value for key, value in os.environ.items() if key not in NOCODB_ENV_VARS}
    monkeypatch.setattr(os, "environ", environ)
    return environ
