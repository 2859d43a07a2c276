"""MCP server layer: tool registry, prompts capability, stdio transport."""
