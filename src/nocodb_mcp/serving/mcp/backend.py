"""HTTP client wrapper for the NocoDB REST API."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Literal, Protocol

import httpx

from nocodb_mcp.config.serving_models import ServingConfig
from nocodb_mcp.serving.mcp import errors

HTTP_ERROR_STATUS = 400
LOG = logging.getLogger("nocodb_mcp.serving.mcp.backend")

HttpMethod = Literal["GET", "POST", "PATCH", "DELETE"]


@dataclass(frozen=True)
class RemoteRequest:
    """Immutable description of one call against the NocoDB API."""

    method: HttpMethod
    path: str
    params: dict[str, object] = field(default_factory=dict)
    json: object = None


class RemoteClient(Protocol):
    """Interface the operation handlers need from the transport."""

    def send(self, request: RemoteRequest) -> object:
        """Execute a request and return the decoded JSON body."""
        ...


def build_headers(auth_token: str | None) -> dict[str, str]:
    """
    Build the fixed header set sent with every request.

    Returns
    -------
    dict[str, str]
        JSON content negotiation headers plus the xc-token credential when configured.
    """
    headers = {
        "Content-Type": "application/json",
        "Accept": "application/json",
    }
    if auth_token:
        headers["xc-token"] = auth_token
    return headers


def _error_message(response: httpx.Response) -> tuple[str, object]:
    message = f"Request failed with status code {response.status_code}"
    try:
        body: object = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        body = response.text or None
    if isinstance(body, dict):
        remote = body.get("msg") or body.get("message") or body.get("error")
        if remote:
            message = f"{message}: {remote}"
    return message, body


@dataclass
class NocoDBClient(RemoteClient):
    """Synchronous NocoDB client bound to one base URL and credential."""

    base_url: str
    auth_token: str | None = None
    timeout: float = 30.0
    client: httpx.Client | None = None
    _owns_client: bool = field(init=False, default=False)

    def __post_init__(self) -> None:
        """Initialize the HTTP client unless one was injected."""
        if self.client is None:
            self.client = httpx.Client(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=build_headers(self.auth_token),
            )
            self._owns_client = True
        else:
            self.client.headers.update(build_headers(self.auth_token))
            self._owns_client = False

    @classmethod
    def from_config(cls, cfg: ServingConfig, *, client: httpx.Client | None = None) -> NocoDBClient:
        """
        Create a client from serving configuration.

        Returns
        -------
        NocoDBClient
            Client using the configured base URL, token and timeout.
        """
        return cls(
            base_url=cfg.base_url,
            auth_token=cfg.auth_token,
            timeout=cfg.timeout_seconds,
            client=client,
        )

    def close(self) -> None:
        """Close the underlying HTTP client when this instance created it."""
        if self._owns_client and self.client is not None:
            self.client.close()

    def send(self, request: RemoteRequest) -> object:
        """
        Execute a request and decode the JSON response.

        Parameters
        ----------
        request:
            Method, path, query parameters and JSON body to send.

        Returns
        -------
        object
            Decoded JSON payload, or ``None`` for an empty body.

        Raises
        ------
        errors.RemoteCallError
            On transport errors or when NocoDB answers with status >= 400.
        """
        if self.client is None:
            message = "HTTP client is not initialized"
            raise errors.remote_call_failure(message)
        params = {k: str(v) for k, v in request.params.items() if v is not None}
        LOG.debug("%s %s params=%s", request.method, request.path, params)
        try:
            response = self.client.request(
                request.method,
                request.path,
                params=params or None,
                json=request.json,
            )
        except httpx.HTTPError as exc:
            raise errors.remote_call_failure(str(exc) or exc.__class__.__name__) from exc
        if response.status_code >= HTTP_ERROR_STATUS:
            message, body = _error_message(response)
            LOG.debug("%s %s failed: %s body=%s", request.method, request.path, message, body)
            raise errors.remote_call_failure(message, status=response.status_code, body=body)
        if not response.content:
            return None
        try:
            return response.json()
        except json.JSONDecodeError as exc:
            message = f"Invalid JSON in response from {request.path}"
            raise errors.remote_call_failure(message, status=response.status_code) from exc
