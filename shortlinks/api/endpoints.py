"""
FastAPI Endpoints for URL Shortener Service

This module defines all REST API endpoints with minimal logic.
Endpoints only handle:
- Request validation (Pydantic models)
- Rate limiting
- Error handling and HTTP responses
- Delegating to the registry

Error mapping:
- InvalidURLError / InvalidValidityError -> 400
- Malformed short code in path -> 400
- ShortcodeTakenError -> 409
- ShortCodeNotFoundError -> 404
- ShortcodeExpiredError -> 410
- GenerationExhaustedError -> 503
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import RedirectResponse

from shortlinks.api.schemas import ShortenRequest, ShortenResponse, StatsResponse, iso_z
from shortlinks.core.exceptions import (
    GenerationExhaustedError,
    InvalidURLError,
    InvalidValidityError,
    ShortCodeNotFoundError,
    ShortcodeExpiredError,
    ShortcodeTakenError,
)
from shortlinks.core.rate_limit import RATE_LIMITS, limiter
from shortlinks.core.registry_manager import get_registry
from shortlinks.core.setting import settings
from shortlinks.core.validators import sanitize_short_code
from shortlinks.models import RequestContext
from shortlinks.services.registry import URLRegistry

logger = logging.getLogger(__name__)

router = APIRouter()


def get_client_ip(request: Request) -> str:
    """
    Extract client IP address from request.

    Handles proxies and load balancers by checking X-Forwarded-For header.

    Args:
        request: FastAPI Request object

    Returns:
        IP address as string
    """
    # Check for forwarded IP (from proxy/load balancer)
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        # X-Forwarded-For can contain multiple IPs, take the first one
        return forwarded_for.split(",")[0].strip()

    # Fallback to direct client IP
    return request.client.host if request.client else "unknown"


def _require_short_code(short_code: str) -> str:
    sanitized_code = sanitize_short_code(short_code)
    if not sanitized_code:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid short code format: '{short_code}'. Short codes must be 3-20 alphanumeric characters."
        )
    return sanitized_code


@router.post(
    "/shorturls",
    response_model=ShortenResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a short URL",
    description="Takes a long URL with an optional validity and short code and returns a time-limited short link"
)
@limiter.limit(RATE_LIMITS["shorten"])
async def create_short_url(
    request: Request,  # Required for rate limiting (slowapi expects parameter named 'request')
    body: ShortenRequest,
    registry: URLRegistry = Depends(get_registry)
) -> ShortenResponse:
    """
    Create a new short URL from a long URL.

    Returns:
        ShortenResponse with shortcode, shortLink and expiry

    Raises:
        HTTPException 400: If the URL or validity is rejected by the registry
        HTTPException 409: If the requested short code is already in use
        HTTPException 503: If no free random short code could be generated
    """
    validity = body.validity if body.validity is not None else settings.DEFAULT_VALIDITY_MINUTES

    try:
        created = registry.create(body.url, validity, body.shortcode)
    except (InvalidURLError, InvalidValidityError) as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except ShortcodeTakenError as e:
        logger.info(f"Short code collision on requested code '{e.short_code}'")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e)
        )
    except GenerationExhaustedError as e:
        logger.error(f"Short code generation failed for {body.url}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e)
        )

    return ShortenResponse(
        shortcode=created.shortcode,
        short_link=f"{settings.BASE_URL.rstrip('/')}/{created.shortcode}",
        expiry=iso_z(created.expires_at)
    )


@router.get(
    "/shorturls/{short_code}",
    response_model=StatsResponse,
    summary="Get URL statistics",
    description="Returns the record and full click history of a short URL, including expired ones not yet purged"
)
@limiter.limit(RATE_LIMITS["stats"])
async def get_url_stats(
    short_code: str,
    request: Request,  # Required for rate limiting
    registry: URLRegistry = Depends(get_registry)
) -> StatsResponse:
    """
    Get statistics for a short URL.

    Raises:
        HTTPException 400: If short code format is invalid
        HTTPException 404: If short code not found
        HTTPException 429: If rate limit exceeded
    """
    short_code = _require_short_code(short_code)

    try:
        stats = registry.get_statistics(short_code)
    except ShortCodeNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )

    return StatsResponse.from_statistics(stats)


@router.get(
    "/{short_code}",
    status_code=status.HTTP_302_FOUND,
    summary="Redirect to original URL",
    description="Takes a short code, records the click and redirects to the original long URL"
)
@limiter.limit(RATE_LIMITS["redirect"])
async def redirect_to_url(
    short_code: str,
    request: Request,
    registry: URLRegistry = Depends(get_registry)
) -> RedirectResponse:
    """
    Redirect to the original URL for a given short code.

    Args:
        short_code: The short code to look up
        request: FastAPI Request object (for visitor details and rate limiting)

    Returns:
        RedirectResponse (HTTP 302) to original URL

    Raises:
        HTTPException 400: If short code format is invalid
        HTTPException 404: If short code not found
        HTTPException 410: If the short URL has expired
        HTTPException 429: If rate limit exceeded
    """
    short_code = _require_short_code(short_code)

    context = RequestContext(
        source_address=get_client_ip(request),
        user_agent=request.headers.get("User-Agent"),
        referrer=request.headers.get("Referer"),
    )

    try:
        original_url = registry.resolve(short_code, context)
    except ShortCodeNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )
    except ShortcodeExpiredError as e:
        logger.info(
            f"Redirect refused for expired code '{e.short_code}' "
            f"(expired at {iso_z(e.expires_at)})"
        )
        raise HTTPException(
            status_code=status.HTTP_410_GONE,
            detail=str(e)
        )

    return RedirectResponse(
        url=original_url,
        status_code=status.HTTP_302_FOUND
    )
