"""Configuration models for the NocoDB MCP bridge.

The only runtime setting object is ``ServingConfig``; build it once with
``ServingConfig.from_env()`` and pass it to ``build_dispatcher``.
"""

from nocodb_mcp.config.serving_models import DEFAULT_API_VERSION, DEFAULT_BASE_URL, ServingConfig

__all__ = ["DEFAULT_API_VERSION", "DEFAULT_BASE_URL", "ServingConfig"]
