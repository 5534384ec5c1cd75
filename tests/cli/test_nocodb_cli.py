"""Tests for the nocodb-mcp CLI commands."""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from nocodb_mcp.cli import main as cli_main
from nocodb_mcp.cli.main import main, make_parser
from nocodb_mcp.config.serving_models import ServingConfig
from nocodb_mcp.serving.services.dispatch import operation_names
from nocodb_mcp.serving.services.wiring import BackendResource, build_backend_resource
from tests._helpers.expect import expect_equal, expect_in, expect_length, expect_true
from tests._helpers.fakes import StubNocoDB, json_response

if TYPE_CHECKING:
    from _pytest.capture import CaptureFixture


@dataclass
class CliResult:
    """Captured CLI execution result."""

    exit_code: int
    stdout: str
    stderr: str


CliRunner = Callable[[list[str]], CliResult]


@pytest.fixture
def cli_runner(
    capsys: CaptureFixture[str],
    clean_env: dict[str, str],
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> CliRunner:
    """
    Run the CLI with captured output from an empty working directory.

    Returns
    -------
    CliRunner
        Callable that executes the CLI and captures stdout/stderr.
    """
    monkeypatch.chdir(tmp_path)

    def _run(args: list[str]) -> CliResult:
        exit_code = main(args)
        captured = capsys.readouterr()
        return CliResult(exit_code=exit_code, stdout=captured.out, stderr=captured.err)

    return _run


@pytest.fixture
def loaded_configs(nocodb: StubNocoDB, monkeypatch: pytest.MonkeyPatch) -> list[ServingConfig]:
    """
    Route ``call`` through the stub and record the configuration it was built with.

    Returns
    -------
    list[ServingConfig]
        Configurations passed to the backend factory, in call order.
    """
    seen: list[ServingConfig] = []

    def _factory(cfg: ServingConfig, *, transport: str = "cli") -> BackendResource:
        seen.append(cfg)
        return build_backend_resource(cfg, http_client=nocodb.http_client(), transport=transport)

    monkeypatch.setattr(cli_main, "build_backend_resource", _factory)
    return seen


def test_parser_offers_every_operation() -> None:
    parser = make_parser()
    args = parser.parse_args(["call", "query_table_by_name", "--args", '{"tableName": "t"}'])
    expect_equal(args.operation, "query_table_by_name")
    expect_equal(args.arguments, '{"tableName": "t"}')


def test_unknown_operation_is_rejected_by_parser(cli_runner: CliRunner) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli_runner(["call", "drop_database"])
    expect_equal(excinfo.value.code, 2)


def test_tools_prints_catalog(cli_runner: CliRunner) -> None:
    result = cli_runner(["tools"])
    expect_equal(result.exit_code, 0, label="exit_code")
    data = json.loads(result.stdout)
    expect_equal(tuple(entry["name"] for entry in data), operation_names())
    for entry in data:
        expect_in("input_schema", entry, label="entry keys")


def test_call_prints_success_text(
    cli_runner: CliRunner,
    nocodb: StubNocoDB,
    loaded_configs: list[ServingConfig],
) -> None:
    nocodb.route("GET", "/api/v1/db/meta/projects/p1/tables", json_response({"list": []}))
    result = cli_runner(["call", "list_tables", "--args", '{"projectId": "p1"}'])
    expect_equal(result.exit_code, 0, label="exit_code")
    expect_equal(json.loads(result.stdout), {"list": []})
    expect_length(loaded_configs, 1)


def test_call_error_result_exits_nonzero(
    cli_runner: CliRunner,
    nocodb: StubNocoDB,
    loaded_configs: list[ServingConfig],
) -> None:
    nocodb.route("GET", "/api/v1/db/meta/projects", json_response({"msg": "Unauthorized"}, 401))
    result = cli_runner(["call", "list_projects"])
    expect_equal(result.exit_code, 1, label="exit_code")
    expect_equal(result.stdout, "")
    expect_in("Error: Failed to list projects", result.stderr)


def test_call_missing_argument_exits_nonzero(
    cli_runner: CliRunner,
    nocodb: StubNocoDB,
    loaded_configs: list[ServingConfig],
) -> None:
    result = cli_runner(["call", "list_tables"])
    expect_equal(result.exit_code, 1, label="exit_code")
    expect_in("list_tables requires argument 'projectId'", result.stderr)
    expect_length(nocodb.calls, 0)


@pytest.mark.parametrize("raw", ["{not json", "[1, 2]"])
def test_call_rejects_bad_args_json(
    cli_runner: CliRunner,
    loaded_configs: list[ServingConfig],
    raw: str,
) -> None:
    result = cli_runner(["call", "list_projects", "--args", raw])
    expect_equal(result.exit_code, 1, label="exit_code")
    expect_in("--args must be", result.stderr)
    expect_length(loaded_configs, 0)


def test_env_file_settings_are_loaded(
    cli_runner: CliRunner,
    nocodb: StubNocoDB,
    loaded_configs: list[ServingConfig],
    tmp_path: Path,
) -> None:
    env_file = tmp_path / "custom.env"
    env_file.write_text(
        "NOCODB_URL=https://noco.example.com\nNOCODB_BASE_ID=base-7\nNOCODB_AUTH_TOKEN=abc\n",
        encoding="utf-8",
    )
    nocodb.route("GET", "/api/v1/db/meta/projects", json_response({"list": []}))

    result = cli_runner(["--env-file", str(env_file), "call", "list_projects"])

    expect_equal(result.exit_code, 0, label="exit_code")
    expect_length(loaded_configs, 1)
    expect_equal(loaded_configs[0].base_url, "https://noco.example.com")
    expect_equal(loaded_configs[0].default_base_id, "base-7")
    expect_equal(nocodb.calls[0].headers.get("xc-token"), "abc")


def test_default_env_file_in_working_directory(
    cli_runner: CliRunner,
    nocodb: StubNocoDB,
    loaded_configs: list[ServingConfig],
    tmp_path: Path,
) -> None:
    (tmp_path / ".env").write_text("API_VERSION=v3\n", encoding="utf-8")
    nocodb.route("GET", "/api/v1/db/meta/projects", json_response({"list": []}))
    result = cli_runner(["call", "list_projects"])
    expect_equal(result.exit_code, 0, label="exit_code")
    expect_equal(loaded_configs[0].api_version, "v3")


def test_missing_env_file_exits_nonzero(cli_runner: CliRunner, tmp_path: Path) -> None:
    result = cli_runner(["--env-file", str(tmp_path / "absent.env"), "tools"])
    expect_equal(result.exit_code, 0, label="exit_code")
    result = cli_runner(["--env-file", str(tmp_path / "absent.env"), "call", "list_projects"])
    expect_equal(result.exit_code, 1, label="exit_code")
    expect_true(".env file not found" in result.stderr)
