"""MCP protocol surface: models, errors, client, tool catalog and server."""
