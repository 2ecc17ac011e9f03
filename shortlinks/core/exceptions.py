"""
Custom Exceptions

This module defines the exceptions raised by the short URL registry.
Each exception carries the offending value so the API layer can log it
and translate it into an HTTP response.

Mapping used by the API layer:
- InvalidURLError / InvalidValidityError -> 400
- ShortcodeTakenError -> 409
- ShortCodeNotFoundError -> 404
- ShortcodeExpiredError -> 410
- GenerationExhaustedError -> 503
"""

from datetime import datetime


class URLShortenerException(Exception):
    """Base exception for URL shortener service."""
    pass


class InvalidURLError(URLShortenerException):
    """Raised when URL validation fails."""

    def __init__(self, url: str, reason: str = "Invalid URL format"):
        self.url = url
        self.reason = reason
        super().__init__(f"{reason}: {url}")


class InvalidValidityError(URLShortenerException):
    """Raised when a validity window is not a positive number of minutes."""

    def __init__(self, validity_minutes: int):
        self.validity_minutes = validity_minutes
        super().__init__(f"Validity must be at least 1 minute, got {validity_minutes!r}")


class ShortcodeTakenError(URLShortenerException):
    """Raised when a requested short code is already registered."""

    def __init__(self, short_code: str):
        self.short_code = short_code
        super().__init__(f"Short code '{short_code}' is already in use")


class ShortCodeNotFoundError(URLShortenerException):
    """Raised when a short code is unknown or has been purged."""

    def __init__(self, short_code: str):
        self.short_code = short_code
        super().__init__(f"Short code '{short_code}' not found")


class ShortcodeExpiredError(URLShortenerException):
    """Raised when a short code is resolved after its validity window."""

    def __init__(self, short_code: str, expires_at: datetime):
        self.short_code = short_code
        self.expires_at = expires_at
        super().__init__(
            f"Short code '{short_code}' expired at {expires_at.isoformat()}"
        )


class GenerationExhaustedError(URLShortenerException):
    """Raised when random short code generation keeps colliding."""

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(
            f"Could not generate a unique short code after {attempts} attempts"
        )
