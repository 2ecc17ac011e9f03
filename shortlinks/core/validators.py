"""
Input Validators and Sanitizers

This module provides validation and sanitization functions for user inputs.
The API layer validates before calling the registry; the registry calls
is_valid_url again as a double-check.

Security Considerations:
- Input validation prevents injection attacks
- Only http/https URLs are accepted (no javascript:, data:, file:)
- Length limits prevent DoS attacks
"""

import re
from typing import Optional
from urllib.parse import urlparse

MAX_URL_LENGTH = 2048
MIN_SHORT_CODE_LENGTH = 3
MAX_SHORT_CODE_LENGTH = 20

SHORT_CODE_PATTERN = re.compile(
    rf"^[0-9a-zA-Z]{{{MIN_SHORT_CODE_LENGTH},{MAX_SHORT_CODE_LENGTH}}}$"
)


def sanitize_short_code(short_code: str) -> Optional[str]:
    """
    Sanitize and validate short code format.

    Short codes should only contain base62 characters: [0-9a-zA-Z]
    and be between 3 and 20 characters long.

    Args:
        short_code: The short code to sanitize

    Returns:
        Sanitized short code if valid, None otherwise
    """
    if not short_code or not isinstance(short_code, str):
        return None

    # Remove any whitespace
    short_code = short_code.strip()

    if not SHORT_CODE_PATTERN.match(short_code):
        return None

    return short_code


def validate_url_length(url: str, max_length: int = MAX_URL_LENGTH) -> bool:
    """
    Validate URL length to prevent DoS attacks.

    Args:
        url: The URL to validate
        max_length: Maximum allowed length (default: 2048 per RFC 7230)

    Returns:
        True if URL length is valid, False otherwise
    """
    return bool(url) and len(url) <= max_length


def is_valid_url(url: str) -> bool:
    """
    Validate URL format and security.

    Checks that URL uses http/https and has a valid domain. The scheme
    whitelist is what rejects javascript:, data:, file: and vbscript: URLs;
    the same words elsewhere in a path or query are allowed.

    Args:
        url: The URL string to validate

    Returns:
        True if valid and safe, False otherwise
    """
    if not isinstance(url, str) or not validate_url_length(url):
        return False

    try:
        result = urlparse(url)
    except ValueError:
        return False

    if not result.scheme or not result.netloc:
        return False

    if result.scheme.lower() not in {"http", "https"}:
        return False

    domain = result.hostname or ""
    if domain != "localhost" and "." not in domain:
        return False

    return True
