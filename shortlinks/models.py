"""
Domain Models for URL Shortener Service

This module defines the in-memory records held by the registry:
- UrlRecord: The mapping between a short code and its original URL
- ClickEvent: A single visit, stored per short code for analytics

Plus the value objects exchanged with callers:
- RequestContext: What the request layer knows about a visitor
- CreatedShortURL: Result of a successful create
- UrlStatistics: Snapshot returned by the statistics operation

Design Decisions:
- All models are frozen: a record never changes after creation
- Expiry is not a stored field; it is derived from expires_at on every read
- Timestamps are timezone-aware UTC datetimes
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

DIRECT_REFERRER = "Direct"


class UrlRecord(BaseModel):
    """
    A registered short URL.

    Fields:
    - shortcode: Unique key (3-20 alphanumeric characters)
    - original_url: The long URL that was shortened
    - validity_minutes: Length of the validity window
    - created_at: When the short URL was registered
    - expires_at: created_at + validity_minutes
    """
    model_config = ConfigDict(frozen=True)

    shortcode: str
    original_url: str
    validity_minutes: int = Field(ge=1)
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        """A record is expired strictly after its deadline."""
        return now > self.expires_at


class ClickEvent(BaseModel):
    """A single resolved visit to a short URL."""
    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    source_address: str
    user_agent: Optional[str] = None
    referrer: str = DIRECT_REFERRER
    location: str


class RequestContext(BaseModel):
    """Visitor details supplied by the request layer on redirect."""
    model_config = ConfigDict(frozen=True)

    source_address: str
    user_agent: Optional[str] = None
    referrer: Optional[str] = None


class CreatedShortURL(BaseModel):
    """Result of registering a short URL."""
    model_config = ConfigDict(frozen=True)

    shortcode: str
    created_at: datetime
    expires_at: datetime


class UrlStatistics(BaseModel):
    """Point-in-time statistics for a short URL."""
    model_config = ConfigDict(frozen=True)

    shortcode: str
    original_url: str
    total_clicks: int
    created_at: datetime
    expires_at: datetime
    is_expired: bool
    click_data: list[ClickEvent]
