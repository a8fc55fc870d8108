"""Linear MCP: Linear's GraphQL API as MCP tools over stdio."""

__version__ = "0.1.0"
