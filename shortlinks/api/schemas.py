"""
API Request and Response Schemas

This module defines all Pydantic models for API requests and responses.
Separated from endpoints to keep concerns separated and enable reuse.

Design Principles:
- Request models: Define input validation (URL, validity bounds, short code format)
- Response models: Define output structure, serialized in camelCase
- Timestamps are ISO-8601 strings in UTC with a "Z" suffix
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from shortlinks.core.setting import settings
from shortlinks.core.validators import SHORT_CODE_PATTERN, is_valid_url
from shortlinks.models import ClickEvent, UrlStatistics


def iso_z(dt: datetime) -> str:
    """Format a datetime as ISO-8601 UTC with a "Z" suffix, e.g. 2026-01-01T12:00:00Z."""
    return dt.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


class CamelModel(BaseModel):
    """Base for response models: snake_case in Python, camelCase on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ShortenRequest(BaseModel):
    """Request model for URL shortening endpoint."""
    url: str = Field(..., description="The long URL to shorten")
    validity: Optional[int] = Field(
        None,
        ge=1,
        le=settings.MAX_VALIDITY_MINUTES,
        description="Validity in minutes (default 30)"
    )
    shortcode: Optional[str] = Field(
        None,
        pattern=SHORT_CODE_PATTERN.pattern,
        description="Custom short code, 3-20 alphanumeric characters"
    )

    @field_validator("url")
    @classmethod
    def check_url(cls, value: str) -> str:
        value = value.strip()
        if not is_valid_url(value):
            raise ValueError(
                "URL must use http:// or https://, have a valid domain "
                "and be at most 2048 characters"
            )
        return value


class ShortenResponse(CamelModel):
    """Response model for URL shortening endpoint."""
    shortcode: str = Field(..., description="The short code")
    short_link: str = Field(..., description="The complete short URL")
    expiry: str = Field(..., description="Expiry time (ISO-8601, UTC)")


class ClickItem(CamelModel):
    """A single click in the statistics response."""
    timestamp: str
    source_address: str
    user_agent: Optional[str] = None
    referrer: str
    location: str

    @classmethod
    def from_event(cls, event: ClickEvent) -> "ClickItem":
        return cls(
            timestamp=iso_z(event.timestamp),
            source_address=event.source_address,
            user_agent=event.user_agent,
            referrer=event.referrer,
            location=event.location,
        )


class StatsResponse(CamelModel):
    """Response model for statistics endpoint."""
    shortcode: str
    original_url: str
    total_clicks: int
    created_at: str
    expires_at: str
    is_expired: bool
    click_data: list[ClickItem]

    @classmethod
    def from_statistics(cls, stats: UrlStatistics) -> "StatsResponse":
        return cls(
            shortcode=stats.shortcode,
            original_url=stats.original_url,
            total_clicks=stats.total_clicks,
            created_at=iso_z(stats.created_at),
            expires_at=iso_z(stats.expires_at),
            is_expired=stats.is_expired,
            click_data=[ClickItem.from_event(event) for event in stats.click_data],
        )
