"""
Logging Setup and Request/Response Logging Middleware

Logs every HTTP request handled by the service:
- Request method and path
- Response status code
- Request processing time
- Client IP address

Redirects and statistics lookups are the hot paths, so each line is kept
to a single formatted message on the "shortlinks" logger.
"""

import logging
import time

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware

from shortlinks.api.endpoints import get_client_ip

logger = logging.getLogger("shortlinks")

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """
    Configure root logging for the service.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ...)
    """
    logging.basicConfig(format=LOG_FORMAT)
    logging.getLogger("shortlinks").setLevel(level.upper())


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware for logging HTTP requests and responses.

    Adds an X-Process-Time header with the handling time in seconds.
    """

    async def dispatch(self, request: Request, call_next):
        client_ip = get_client_ip(request)
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            process_time = time.perf_counter() - start_time
            logger.exception(
                f"{request.method} {request.url.path} "
                f"FAILED {process_time*1000:.2f}ms IP:{client_ip}"
            )
            raise

        process_time = time.perf_counter() - start_time

        # Format: METHOD PATH STATUS_CODE PROCESS_TIME_MS CLIENT_IP
        log = logger.warning if response.status_code >= 500 else logger.info
        log(
            f"{request.method} {request.url.path} "
            f"{response.status_code} {process_time*1000:.2f}ms "
            f"IP:{client_ip}"
        )

        response.headers["X-Process-Time"] = f"{process_time:.6f}"
        return response


def add_logging_middleware(app: FastAPI) -> None:
    """
    Add logging middleware to FastAPI app.

    Args:
        app: FastAPI application instance
    """
    app.add_middleware(LoggingMiddleware)
