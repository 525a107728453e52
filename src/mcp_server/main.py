"""GitLab Zero-Leak MCP Server - entry point.

Loads configuration, configures logging, prints the effective configuration
banner and serves the selected transport.
"""

import asyncio
import sys
from typing import Optional

from shared.config import Settings, get_settings
from shared.errors import ConfigurationError
from shared.logging import get_logger, setup_logging
from mcp_server.app import build_application

logger = get_logger(__name__)


def main(settings: Optional[Settings] = None) -> int:
    """
    Run the MCP Server.

    Returns:
        Process exit code: 0 on clean shutdown, 1 on fatal startup errors
    """
    try:
        settings = settings or get_settings()
    except Exception as e:
        setup_logging()
        logger.error("Failed to load configuration", error=str(e))
        return 1

    setup_logging(settings.mcp_log_level, json_output=settings.mcp_log_json)

    try:
        settings.require_token()
        application = build_application(settings)
    except ConfigurationError as e:
        logger.error(str(e))
        return 1
    except Exception as e:
        logger.error("Failed to start server", error=str(e), exc_info=True)
        return 1

    logger.info("Configuration loaded", **settings.banner())

    try:
        if settings.mcp_transport == "http":
            from mcp_server.http import serve_http
            serve_http(application)
        else:
            from mcp_server.stdio import serve_stdio
            asyncio.run(serve_stdio(application))
    except KeyboardInterrupt:
        logger.info("Server shutting down (SIGINT)")
    except Exception as e:
        logger.error("Fatal error in main()", error=str(e), exc_info=True)
        return 1

    return 0


def run() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
