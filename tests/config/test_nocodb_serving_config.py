"""Serving configuration loading and validation."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from nocodb_mcp.config.serving_models import DEFAULT_API_VERSION, DEFAULT_BASE_URL, ServingConfig
from tests._helpers.expect import expect_equal, expect_true


def test_from_env_defaults(clean_env: dict[str, str]) -> None:
    """Unset variables fall back to a local NocoDB on the v2 API."""
    cfg = ServingConfig.from_env()
    expect_equal(cfg.base_url, DEFAULT_BASE_URL)
    expect_equal(cfg.api_version, DEFAULT_API_VERSION)
    expect_true(cfg.auth_token is None)
    expect_true(cfg.default_base_id is None)
    expect_equal(cfg.timeout_seconds, 30.0)
    expect_true(not cfg.enable_observability)


def test_from_env_reads_variables(clean_env: dict[str, str]) -> None:
    clean_env.update(
        {
            "NOCODB_URL": "https://noco.example.com/",
            "NOCODB_AUTH_TOKEN": "  tok  ",
            "NOCODB_BASE_ID": "base-9",
            "API_VERSION": "v3",
            "NOCODB_TIMEOUT_SEC": "5",
            "NOCODB_MCP_OBSERVABILITY": "yes",
            "NOCODB_MCP_HTTP_PORT": "9001",
        }
    )
    cfg = ServingConfig.from_env()
    expect_equal(cfg.base_url, "https://noco.example.com")
    expect_equal(cfg.auth_token, "tok")
    expect_equal(cfg.default_base_id, "base-9")
    expect_equal(cfg.api_version, "v3")
    expect_equal(cfg.timeout_seconds, 5.0)
    expect_true(cfg.enable_observability)
    expect_equal(cfg.http_port, 9001)


def test_blank_token_counts_as_unset(clean_env: dict[str, str]) -> None:
    clean_env["NOCODB_AUTH_TOKEN"] = "   "
    expect_true(ServingConfig.from_env().auth_token is None)


@pytest.mark.parametrize(
    "overrides",
    [{"base_url": "/"}, {"api_version": "  "}, {"timeout_seconds": 0}],
)
def test_invalid_settings_are_rejected(overrides: dict[str, object]) -> None:
    with pytest.raises(ValidationError):
        ServingConfig.model_validate(overrides)


def test_config_is_frozen() -> None:
    cfg = ServingConfig()
    with pytest.raises(ValidationError):
        cfg.base_url = "http://elsewhere"  # type: ignore[misc]


def test_describe_hides_token() -> None:
    described = ServingConfig(auth_token="secret").describe()
    expect_equal(described["token"], "configured")
    expect_true("secret" not in str(described))
    expect_equal(ServingConfig().describe()["token"], "not configured")
