"""Entry point for the Linear MCP stdio server."""

import asyncio
import logging
import sys

from .config import get_settings
from .http_client import close_http_client
from .linear import LinearClient
from .mcp.server import LinearMCPServer
from .observability.logging import configure_logging

logger = logging.getLogger(__name__)


async def serve(api_key: str, api_url: str):
    """Run the MCP server until stdin closes, then release the HTTP client."""
    client = LinearClient(api_key, api_url=api_url)
    server = LinearMCPServer(client, api_key)
    try:
        await server.run_stdio()
    finally:
        await close_http_client()


def main():
    settings = get_settings()

    configure_logging(
        environment=settings.environment,
        log_level=settings.get_log_level(),
    )

    if not settings.linear_api_key:
        logger.error("LINEAR_API_KEY environment variable is required")
        sys.exit(1)

    logger.info(
        "Starting %s v%s (api_url=%s)",
        settings.app_name,
        settings.app_version,
        settings.linear_api_url,
    )

    try:
        asyncio.run(serve(settings.linear_api_key, settings.linear_api_url))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")


if __name__ == "__main__":
    main()
