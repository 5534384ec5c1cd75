"""Command-line entrypoints for the NocoDB MCP bridge."""
