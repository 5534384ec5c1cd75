"""CLI entrypoint for serving and exercising the NocoDB MCP bridge."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Callable, Iterable
from pathlib import Path

from dotenv import load_dotenv

from nocodb_mcp.config.serving_models import ServingConfig
from nocodb_mcp.serving.mcp import errors
from nocodb_mcp.serving.mcp.tools import list_tool_descriptors
from nocodb_mcp.serving.services.dispatch import operation_names
from nocodb_mcp.serving.services.wiring import build_backend_resource

LOG = logging.getLogger("nocodb_mcp.cli")

CommandHandler = Callable[[argparse.Namespace], int]


# ---------------------------------------------------------------------------
# Argument parsing / logging setup
# ---------------------------------------------------------------------------


def _setup_logging(verbosity: int) -> None:
    """
    Configure logging based on -v/--verbose count.

    0 -> WARNING, 1 -> INFO, 2+ -> DEBUG. Output goes to stderr because
    stdout carries the MCP stdio transport.
    """
    if verbosity <= 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _load_env(env_file: Path | None) -> None:
    """Load a .env file into the process environment without overriding set variables."""
    if env_file is not None:
        if not env_file.is_file():
            message = f".env file not found: {env_file}"
            raise FileNotFoundError(message)
        LOG.info("Loading environment from %s", env_file)
        load_dotenv(env_file)
        return
    default = Path.cwd() / ".env"
    if default.is_file():
        LOG.info("Loading environment from %s", default)
        load_dotenv(default)
    else:
        LOG.info("No .env file found; using process environment and defaults")


def _load_config(args: argparse.Namespace) -> ServingConfig:
    _load_env(args.env_file)
    config = ServingConfig.from_env()
    LOG.info("NocoDB MCP configuration: %s", config.describe())
    return config


def _parse_arguments_json(raw: str) -> dict[str, object]:
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as exc:
        message = f"--args must be valid JSON: {exc.msg}"
        raise errors.invalid_argument(message) from exc
    if not isinstance(parsed, dict):
        message = "--args must be a JSON object"
        raise errors.invalid_argument(message)
    return parsed


def _make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nocodb-mcp",
        description="MCP server and tools API for NocoDB",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (can be repeated)",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Path to a .env file (defaults to ./.env when present)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the MCP server over stdio")
    serve.set_defaults(func=_cmd_serve)

    serve_http = subparsers.add_parser("serve-http", help="Run the HTTP tools API with uvicorn")
    serve_http.add_argument("--host", default=None, help="Bind host (default: NOCODB_MCP_HTTP_HOST)")
    serve_http.add_argument(
        "--port", type=int, default=None, help="Bind port (default: NOCODB_MCP_HTTP_PORT)"
    )
    serve_http.set_defaults(func=_cmd_serve_http)

    call = subparsers.add_parser("call", help="Dispatch a single operation and print the result")
    call.add_argument("operation", choices=operation_names(), help="Operation name")
    call.add_argument(
        "--args",
        dest="arguments",
        default="{}",
        help="Operation arguments as a JSON object",
    )
    call.set_defaults(func=_cmd_call)

    tools = subparsers.add_parser("tools", help="Print the tool catalog as JSON")
    tools.set_defaults(func=_cmd_tools)

    return parser


def make_parser() -> argparse.ArgumentParser:
    """
    Public helper to construct the CLI parser (for tests/tools).

    Returns
    -------
    argparse.ArgumentParser
        Configured parser with all subcommands registered.
    """
    return _make_parser()


# ---------------------------------------------------------------------------
# Command implementations
# ---------------------------------------------------------------------------


def _cmd_serve(args: argparse.Namespace) -> int:
    from nocodb_mcp.serving.mcp.server import run_stdio

    run_stdio(_load_config(args))
    return 0


def _cmd_serve_http(args: argparse.Namespace) -> int:
    import uvicorn

    from nocodb_mcp.serving.http.fastapi import create_app

    config = _load_config(args)
    host = args.host or config.http_host
    port = args.port or config.http_port
    LOG.info("Starting HTTP tools API on %s:%s", host, port)
    uvicorn.run(create_app(config_loader=lambda: config), host=host, port=port)
    return 0


def _cmd_call(args: argparse.Namespace) -> int:
    arguments = _parse_arguments_json(args.arguments)
    resource = build_backend_resource(_load_config(args), transport="cli")
    try:
        result = resource.dispatcher.dispatch(args.operation, arguments)
    finally:
        resource.close()
    stream = sys.stderr if result.is_error else sys.stdout
    stream.write(result.text + "\n")
    return 1 if result.is_error else 0


def _cmd_tools(_args: argparse.Namespace) -> int:
    payload = [descriptor.model_dump() for descriptor in list_tool_descriptors()]
    sys.stdout.write(json.dumps(payload, indent=2) + "\n")
    return 0


def main(argv: Iterable[str] | None = None) -> int:
    """
    CLI entrypoint for the NocoDB MCP bridge.

    Parameters
    ----------
    argv:
        Optional argument list (defaults to sys.argv).

    Returns
    -------
    int
        Exit code (0 on success).
    """
    parser = _make_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    _setup_logging(args.verbose)

    try:
        func: CommandHandler = args.func
        return int(func(args))
    except (errors.McpError, OSError, ValueError) as exc:
        LOG.error("Command %s failed: %s", args.command, exc)
        sys.stderr.write(f"Error: {exc}\n")
        return 1


if __name__ == "__main__":
    sys.exit(main())
