#!/usr/bin/env python3
"""Startup script for Recipe Share Backend Service"""

import sys
import uvicorn
import structlog

from core.config import settings
from core.logging import configure_logging

configure_logging()
logger = structlog.get_logger()


def start_server():
    """Start the FastAPI server"""
    logger.info(
        "Starting Recipe Share Backend Service",
        host=settings.HOST,
        port=settings.PORT,
        environment=settings.ENVIRONMENT
    )

    try:
        # Import the app here to catch any import errors
        from main import app
        logger.info("Successfully imported FastAPI app")

        config = uvicorn.Config(
            app=app,
            host=settings.HOST,
            port=settings.PORT,
            log_level=settings.LOG_LEVEL.lower(),
            access_log=False,  # LoggingMiddleware logs every request
            use_colors=False,
            server_header=False,
            limit_concurrency=1000,
            timeout_keep_alive=5,
            loop="auto"
        )

        server = uvicorn.Server(config)
        server.run()

    except ImportError as e:
        logger.error("Failed to import app", error=str(e))
        sys.exit(1)
    except Exception as e:
        logger.exception("Failed to start server", error=str(e), error_type=type(e).__name__)
        sys.exit(1)


if __name__ == "__main__":
    start_server()
