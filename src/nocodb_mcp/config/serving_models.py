"""Serving configuration shared by the MCP and HTTP surfaces."""

from __future__ import annotations

import os

from pydantic import BaseModel, ConfigDict, Field, model_validator

DEFAULT_BASE_URL = "http://localhost:8080"
DEFAULT_API_VERSION = "v2"


def _parse_env_flag(value: str | None, *, default: bool) -> bool:
    """
    Interpret a string environment value as a boolean.

    Parameters
    ----------
    value:
        Raw environment variable value or None.
    default:
        Value to return when the environment variable is unset.

    Returns
    -------
    bool
        Parsed boolean flag.
    """
    if value is None:
        return default
    return value.lower() not in {"0", "false", "no", "off"}


def _env_or_none(name: str) -> str | None:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return None
    return value.strip()


class ServingConfig(BaseModel):
    """
    Runtime settings for talking to a NocoDB deployment.

    The model is frozen: it is built once at start-up and handed to the
    dispatcher factory, never re-read from the environment inside handlers.
    """

    model_config = ConfigDict(frozen=True)

    base_url: str = Field(
        default=DEFAULT_BASE_URL,
        description="Base URL of the NocoDB instance, e.g. 'https://noco.example.com'.",
    )
    auth_token: str | None = Field(
        default=None,
        description="API token sent in the xc-token header. Requests go out unauthenticated when unset.",
    )
    default_base_id: str | None = Field(
        default=None,
        description="Base (project) id used by query_table_by_name.",
    )
    api_version: str = Field(
        default=DEFAULT_API_VERSION,
        description="API revision used for base-scoped table access, e.g. 'v2'.",
    )
    timeout_seconds: float = Field(
        default=30.0,
        description="Timeout in seconds for remote HTTP calls.",
    )
    enable_observability: bool = Field(
        default=False,
        description="Emit structured service_call log lines for each dispatched operation.",
    )
    http_host: str = Field(
        default="127.0.0.1",
        description="Bind host for the HTTP tools API.",
    )
    http_port: int = Field(
        default=8000,
        description="Bind port for the HTTP tools API.",
    )

    @classmethod
    def from_env(cls) -> ServingConfig:
        """
        Construct a ServingConfig from environment variables.

        Returns
        -------
        ServingConfig
            Validated configuration populated from environment values.
        """
        return cls(
            base_url=os.environ.get("NOCODB_URL") or DEFAULT_BASE_URL,
            auth_token=_env_or_none("NOCODB_AUTH_TOKEN"),
            default_base_id=_env_or_none("NOCODB_BASE_ID"),
            api_version=os.environ.get("API_VERSION") or DEFAULT_API_VERSION,
            timeout_seconds=float(os.environ.get("NOCODB_TIMEOUT_SEC", "30.0")),
            enable_observability=_parse_env_flag(
                os.environ.get("NOCODB_MCP_OBSERVABILITY"), default=False
            ),
            http_host=os.environ.get("NOCODB_MCP_HTTP_HOST", "127.0.0.1"),
            http_port=int(os.environ.get("NOCODB_MCP_HTTP_PORT", "8000")),
        )

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: object) -> object:
        if isinstance(data, dict) and isinstance(data.get("base_url"), str):
            data = {**data, "base_url": data["base_url"].strip().rstrip("/")}
        return data

    @model_validator(mode="after")
    def _validate(self) -> ServingConfig:
        """
        Reject settings that would make every remote call fail.

        Returns
        -------
        ServingConfig
            The validated configuration.

        Raises
        ------
        ValueError
            When the base URL or API version is empty or the timeout is not positive.
        """
        if not self.base_url:
            message = "base_url must not be empty"
            raise ValueError(message)
        if not self.api_version.strip():
            message = "api_version must not be empty"
            raise ValueError(message)
        if self.timeout_seconds <= 0:
            message = "timeout_seconds must be positive"
            raise ValueError(message)
        return self

    def describe(self) -> dict[str, object]:
        """
        Summarize the configuration without leaking the token.

        Returns
        -------
        dict[str, object]
            Log-safe view of the settings.
        """
        return {
            "base_url": self.base_url,
            "base_id": self.default_base_id,
            "api_version": self.api_version,
            "token": "configured" if self.auth_token else "not configured",
            "timeout_seconds": self.timeout_seconds,
        }


__all__ = ["DEFAULT_API_VERSION", "DEFAULT_BASE_URL", "ServingConfig"]
