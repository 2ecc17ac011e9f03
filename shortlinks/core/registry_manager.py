"""
Registry Manager

This module owns the lifecycle of the application's URL registry and its
expiry sweeper.

Design:
- One registry per application instance, stored on app.state
- Created on application startup together with the sweeper
- Sweeper cancelled on shutdown
- Endpoints obtain the registry through the get_registry dependency,
  which tests override with their own instance
"""

import logging

from fastapi import FastAPI, Request

from shortlinks.core.setting import settings
from shortlinks.services.registry import URLRegistry
from shortlinks.services.sweeper import ExpirySweeper

logger = logging.getLogger(__name__)


def get_registry(request: Request) -> URLRegistry:
    """
    Dependency returning the registry of the running application.

    Usage in FastAPI:
        @router.get("/endpoint")
        async def endpoint(registry: URLRegistry = Depends(get_registry)):
            ...
    """
    return request.app.state.registry


async def initialize_registry(app: FastAPI) -> None:
    """
    Create the registry and start the expiry sweeper.
    """
    if getattr(app.state, "registry", None) is not None:
        logger.warning("URL registry already initialized")
        return

    registry = URLRegistry(
        short_code_length=settings.SHORT_CODE_LENGTH,
        max_generation_attempts=settings.MAX_GENERATION_ATTEMPTS,
    )
    sweeper = ExpirySweeper(registry, interval_seconds=settings.SWEEP_INTERVAL_SECONDS)
    sweeper.start()

    app.state.registry = registry
    app.state.sweeper = sweeper

    logger.info(
        f"URL registry initialized: "
        f"short_code_length={settings.SHORT_CODE_LENGTH}, "
        f"sweep_interval={settings.SWEEP_INTERVAL_SECONDS}s"
    )


async def shutdown_registry(app: FastAPI) -> None:
    """Stop the sweeper and drop the registry (state is not persisted)."""
    sweeper = getattr(app.state, "sweeper", None)
    if sweeper is not None:
        await sweeper.stop()
        app.state.sweeper = None

    registry = getattr(app.state, "registry", None)
    if registry is not None:
        logger.info(f"Shutting down URL registry, discarding {len(registry)} short URLs")
        app.state.registry = None
