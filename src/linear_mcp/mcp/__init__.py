"""MCP protocol surface: the tool catalog and the stdio server."""
