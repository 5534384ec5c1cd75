"""Serving surfaces exposing NocoDB via MCP (stdio) and HTTP (FastAPI)."""
