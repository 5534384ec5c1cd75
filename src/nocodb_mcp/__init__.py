"""MCP bridge exposing NocoDB projects, tables and records as tools."""

__version__ = "0.1.0"
