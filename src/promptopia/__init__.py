"""Promptopia - MCP server for reusable prompt templates."""

__version__ = "1.1.0"
