"""
Short URL Registry

This service is the core of the URL shortener. It keeps every short URL and
its click history in memory and exposes four operations:
- create: Register a long URL under a requested or random short code
- resolve: Look up a short code for redirection and record the click
- get_statistics: Snapshot of a short code's record and click history
- sweep_expired: Purge every record whose validity window has passed

Design Decisions:
- One lock guards both mappings; every check-then-mutate runs inside it
- No I/O while the lock is held, so every operation completes in bounded time;
  errors are raised to the caller, which decides what to log
- Expiry is derived from the clock on each call, never stored as a flag
- Clock, random source and location resolver are injected for testability
- Random codes are drawn from the base62 alphabet; collisions are retried
  up to a cap instead of looping forever
"""

import logging
import random
import threading
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from shortlinks.core.exceptions import (
    GenerationExhaustedError,
    InvalidURLError,
    InvalidValidityError,
    ShortCodeNotFoundError,
    ShortcodeExpiredError,
    ShortcodeTakenError,
)
from shortlinks.core.location import CoarseLocationResolver, LocationResolver
from shortlinks.core.validators import is_valid_url
from shortlinks.models import (
    DIRECT_REFERRER,
    ClickEvent,
    CreatedShortURL,
    RequestContext,
    UrlRecord,
    UrlStatistics,
)

logger = logging.getLogger(__name__)


BASE62_CHARS = "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"
DEFAULT_SHORT_CODE_LENGTH = 6
DEFAULT_VALIDITY_MINUTES = 30
DEFAULT_MAX_GENERATION_ATTEMPTS = 10


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class URLRegistry:
    """
    In-memory store of short URLs and their click histories.

    A record and its click list are always inserted and removed together,
    under the same lock, so no caller ever observes one without the other.
    """

    def __init__(
        self,
        clock: Callable[[], datetime] = utc_now,
        rng: Optional[random.Random] = None,
        location_resolver: Optional[LocationResolver] = None,
        short_code_length: int = DEFAULT_SHORT_CODE_LENGTH,
        max_generation_attempts: int = DEFAULT_MAX_GENERATION_ATTEMPTS,
    ):
        """
        Initialize an empty registry.

        Args:
            clock: Returns the current time as an aware UTC datetime
            rng: Random source for short code generation
            location_resolver: Strategy deriving a location label for clicks
            short_code_length: Length of generated short codes (default: 6)
            max_generation_attempts: Random draws before giving up (default: 10)
        """
        self._clock = clock
        self._random = rng or random.SystemRandom()
        self._location_resolver = location_resolver or CoarseLocationResolver()
        self.short_code_length = short_code_length
        self.max_generation_attempts = max_generation_attempts

        self._records: dict[str, UrlRecord] = {}
        self._clicks: dict[str, list[ClickEvent]] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __contains__(self, shortcode: object) -> bool:
        with self._lock:
            return shortcode in self._records

    def generate_short_code(self) -> str:
        """Draw a random base62 short code of the configured length."""
        return "".join(
            self._random.choice(BASE62_CHARS) for _ in range(self.short_code_length)
        )

    def create(
        self,
        original_url: str,
        validity_minutes: int = DEFAULT_VALIDITY_MINUTES,
        shortcode: Optional[str] = None,
    ) -> CreatedShortURL:
        """
        Register a new short URL.

        Args:
            original_url: The long URL to shorten
            validity_minutes: Minutes the short URL stays resolvable
            shortcode: Requested short code, or None for a random one

        Returns:
            CreatedShortURL with the short code and its validity window

        Raises:
            InvalidURLError: If the URL is malformed
            InvalidValidityError: If validity_minutes is not a positive integer
            ShortcodeTakenError: If the requested short code is in use
            GenerationExhaustedError: If no free random code was found
        """
        if not is_valid_url(original_url):
            raise InvalidURLError(
                original_url,
                reason="Invalid URL format. URL must use http:// or https:// and have a valid domain"
            )
        if isinstance(validity_minutes, bool) or not isinstance(validity_minutes, int) \
                or validity_minutes < 1:
            raise InvalidValidityError(validity_minutes)

        collisions = 0
        with self._lock:
            if shortcode is not None:
                if shortcode in self._records:
                    raise ShortcodeTakenError(shortcode)
                code = shortcode
            else:
                code, collisions = self._next_free_code()

            now = self._clock()
            record = UrlRecord(
                shortcode=code,
                original_url=original_url,
                validity_minutes=validity_minutes,
                created_at=now,
                expires_at=now + timedelta(minutes=validity_minutes),
            )
            self._records[code] = record
            self._clicks[code] = []

        if collisions:
            logger.debug(f"Generated short code collided {collisions} time(s) before '{code}'")
        logger.info(
            f"Short URL created: code={code}, "
            f"validity={validity_minutes}m, expires_at={record.expires_at.isoformat()}"
        )
        return CreatedShortURL(
            shortcode=record.shortcode,
            created_at=record.created_at,
            expires_at=record.expires_at,
        )

    def _next_free_code(self) -> tuple[str, int]:
        # Caller must hold self._lock; returns the code and the collisions seen
        for attempt in range(self.max_generation_attempts):
            code = self.generate_short_code()
            if code not in self._records:
                return code, attempt
        raise GenerationExhaustedError(self.max_generation_attempts)

    def resolve(self, shortcode: str, context: RequestContext) -> str:
        """
        Get the original URL for redirection and record the click.

        The expiry check and the click append share one reading of the clock
        and run under the registry lock.

        Args:
            shortcode: The short code to look up
            context: Visitor details from the request layer

        Returns:
            The original URL

        Raises:
            ShortCodeNotFoundError: If the short code is unknown or purged
            ShortcodeExpiredError: If the validity window has passed
        """
        location = self._location_resolver.resolve(context.source_address)

        with self._lock:
            record = self._records.get(shortcode)
            if record is None:
                raise ShortCodeNotFoundError(shortcode)

            now = self._clock()
            if record.is_expired(now):
                raise ShortcodeExpiredError(shortcode, record.expires_at)

            self._clicks[shortcode].append(
                ClickEvent(
                    timestamp=now,
                    source_address=context.source_address,
                    user_agent=context.user_agent,
                    referrer=context.referrer or DIRECT_REFERRER,
                    location=location,
                )
            )

        logger.debug(f"Short URL accessed: code={shortcode}, location={location}")
        return record.original_url

    def get_statistics(self, shortcode: str) -> UrlStatistics:
        """
        Get statistics for a short URL.

        Expired records are still reported (with is_expired=True) until the
        sweep purges them.

        Raises:
            ShortCodeNotFoundError: If the short code is unknown or purged
        """
        with self._lock:
            record = self._records.get(shortcode)
            if record is None:
                raise ShortCodeNotFoundError(shortcode)
            clicks = list(self._clicks[shortcode])
            now = self._clock()

        logger.debug(f"Statistics read: code={shortcode}, clicks={len(clicks)}")
        return UrlStatistics(
            shortcode=record.shortcode,
            original_url=record.original_url,
            total_clicks=len(clicks),
            created_at=record.created_at,
            expires_at=record.expires_at,
            is_expired=record.is_expired(now),
            click_data=clicks,
        )

    def sweep_expired(self) -> int:
        """
        Remove every expired record together with its click history.

        Returns:
            Number of short URLs removed
        """
        with self._lock:
            now = self._clock()
            expired = [
                code for code, record in self._records.items()
                if record.is_expired(now)
            ]
            for code in expired:
                del self._records[code]
                del self._clicks[code]

        if expired:
            logger.info(f"Cleaned up {len(expired)} expired short URLs")
        return len(expired)
