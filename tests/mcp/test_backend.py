"""NocoDB HTTP client behaviour."""

from __future__ import annotations

import httpx
import pytest

from nocodb_mcp.config.serving_models import ServingConfig
from nocodb_mcp.serving.mcp import errors
from nocodb_mcp.serving.mcp.backend import NocoDBClient, RemoteRequest, build_headers
from tests._helpers.expect import expect_equal, expect_in, expect_not_in, expect_true
from tests._helpers.fakes import BASE_URL, StubNocoDB, connect_error, empty_response, json_response


def test_headers_include_token_when_configured() -> None:
    headers = build_headers("secret")
    expect_equal(headers["xc-token"], "secret")
    expect_equal(headers["Content-Type"], "application/json")
    expect_equal(headers["Accept"], "application/json")


def test_headers_omit_token_when_unset(nocodb: StubNocoDB) -> None:
    expect_not_in("xc-token", build_headers(None))
    nocodb.route("GET", "/ping", json_response({"ok": True}))
    client = nocodb.nocodb_client(ServingConfig(base_url=BASE_URL))
    client.send(RemoteRequest("GET", "/ping"))
    expect_not_in("xc-token", nocodb.calls[0].headers)


def test_none_params_are_dropped(nocodb: StubNocoDB, serving_config: ServingConfig) -> None:
    nocodb.route("GET", "/records", json_response({"list": []}))
    client = nocodb.nocodb_client(serving_config)
    client.send(RemoteRequest("GET", "/records", params={"limit": 10, "baseId": None}))
    expect_equal(nocodb.calls[0].params, {"limit": "10"})


def test_json_body_is_sent(nocodb: StubNocoDB, serving_config: ServingConfig) -> None:
    nocodb.route("POST", "/records", json_response({"Id": 1}))
    payload = nocodb.nocodb_client(serving_config).send(
        RemoteRequest("POST", "/records", json={"name": "Ada"})
    )
    expect_equal(payload, {"Id": 1})
    expect_equal(nocodb.calls[0].body, {"name": "Ada"})


def test_status_error_carries_remote_message(nocodb: StubNocoDB, serving_config: ServingConfig) -> None:
    nocodb.route("GET", "/boom", json_response({"message": "Base not found"}, 404))
    with pytest.raises(errors.RemoteCallError) as excinfo:
        nocodb.nocodb_client(serving_config).send(RemoteRequest("GET", "/boom"))
    expect_equal(excinfo.value.message, "Request failed with status code 404: Base not found")
    data = excinfo.value.detail.data or {}
    expect_equal(data.get("remote_status"), 404)
    expect_equal(data.get("remote_body"), {"message": "Base not found"})


def test_status_error_without_json_body(nocodb: StubNocoDB, serving_config: ServingConfig) -> None:
    nocodb.route("GET", "/boom", lambda _request: httpx.Response(500, text="gateway down"))
    with pytest.raises(errors.RemoteCallError) as excinfo:
        nocodb.nocodb_client(serving_config).send(RemoteRequest("GET", "/boom"))
    expect_equal(excinfo.value.message, "Request failed with status code 500")


def test_network_error_is_remote_failure(nocodb: StubNocoDB, serving_config: ServingConfig) -> None:
    nocodb.route("GET", "/down", connect_error("connection refused"))
    with pytest.raises(errors.RemoteCallError) as excinfo:
        nocodb.nocodb_client(serving_config).send(RemoteRequest("GET", "/down"))
    expect_in("connection refused", excinfo.value.message)


def test_empty_body_decodes_to_none(nocodb: StubNocoDB, serving_config: ServingConfig) -> None:
    nocodb.route("DELETE", "/records/1", empty_response())
    payload = nocodb.nocodb_client(serving_config).send(RemoteRequest("DELETE", "/records/1"))
    expect_true(payload is None)


def test_invalid_json_is_remote_failure(nocodb: StubNocoDB, serving_config: ServingConfig) -> None:
    nocodb.route("GET", "/html", lambda _request: httpx.Response(200, text="<html></html>"))
    with pytest.raises(errors.RemoteCallError) as excinfo:
        nocodb.nocodb_client(serving_config).send(RemoteRequest("GET", "/html"))
    expect_in("Invalid JSON", excinfo.value.message)


def test_injected_client_is_not_closed(nocodb: StubNocoDB, serving_config: ServingConfig) -> None:
    http_client = nocodb.http_client()
    NocoDBClient.from_config(serving_config, client=http_client).close()
    expect_true(not http_client.is_closed)
    http_client.close()


def test_owned_client_uses_config(serving_config: ServingConfig) -> None:
    client = NocoDBClient.from_config(serving_config)
    try:
        if client.client is None:
            pytest.fail("Client was not created")
        expect_equal(str(client.client.base_url), f"{BASE_URL}/")
        expect_equal(client.client.headers.get("xc-token"), "tok-123")
    finally:
        client.close()
    expect_true(client.client is not None and client.client.is_closed)
