"""
FastAPI Application Entry Point

This module initializes the FastAPI application and configures:
- API routes
- Middleware (logging, CORS, rate limiting)
- Application lifecycle (in-memory registry and expiry sweeper)

Run with:
    uvicorn shortlinks.main:app
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from shortlinks.api import endpoints
from shortlinks.core.rate_limit import limiter
from shortlinks.core.registry_manager import initialize_registry, shutdown_registry
from shortlinks.core.setting import settings
from shortlinks.middleware.logging import add_logging_middleware, configure_logging

configure_logging(settings.LOG_LEVEL)

app = FastAPI(
    title="URL Shortener Service",
    description="Time-limited short URLs with click analytics, kept in memory",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

add_logging_middleware(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Health endpoints defined before router to match before catch-all route
@app.get("/", tags=["Health"])
async def root():
    """Root endpoint for health checks."""
    return {
        "message": "URL Shortener Service",
        "version": "1.0.0",
        "docs": "/docs"
    }


@app.get("/health", tags=["Health"])
async def health_check(request: Request):
    """
    Health check endpoint for monitoring.

    Returns:
        Health status and the number of short URLs currently held
    """
    registry = getattr(request.app.state, "registry", None)
    return {
        "status": "healthy" if registry is not None else "starting",
        "active_urls": len(registry) if registry is not None else 0,
    }


app.include_router(endpoints.router, tags=["URL Shortener"])


@app.on_event("startup")
async def startup_event():
    """Create the registry and start the expiry sweeper."""
    await initialize_registry(app)


@app.on_event("shutdown")
async def shutdown_event():
    """Stop the expiry sweeper."""
    await shutdown_registry(app)
