"""
Security Validators Module
Validation of the delivery endpoint before any credential is sent to it

SECURITY STORY: The server token travels in a request header. A base URL
with a typo in the scheme (or a bare hostname) can send that header over
plain text to an unintended host, so the URL is checked when the client is
configured rather than discovered at the first send.
"""

import logging
from typing import Tuple
from urllib.parse import urljoin, urlparse

ALLOWED_SCHEMES = ('http', 'https')

logger = logging.getLogger(__name__)


def validate_base_url(url: str) -> Tuple[bool, str]:
    """
    Validate the configured base URL of the delivery service.

    Args:
        url: The base URL to validate

    Returns:
        Tuple of (is_valid: bool, error_message: str)
    """
    if not url or not url.strip():
        return False, "URL is empty"

    try:
        parsed = urlparse(url)
        # Accessing .port raises ValueError on malformed ports
        parsed.port
    except ValueError as e:
        return False, f"Failed to parse URL: {e}"

    if parsed.scheme not in ALLOWED_SCHEMES:
        return False, f"URL scheme must be http or https, got: {parsed.scheme or '(none)'}"

    if not parsed.hostname:
        return False, "URL must contain a valid hostname"

    return True, ""


def warn_if_insecure(url: str) -> None:
    """Log a warning when the token would travel over plain http"""
    if urlparse(url).scheme == 'http':
        logger.warning("Base URL %s uses plain http; the server token is sent unencrypted", url)


def join_endpoint(base_url: str, path: str) -> str:
    """
    Resolve an absolute endpoint path against the base URL.

    The path replaces any path carried by the base URL, so
    ``join_endpoint("https://api.example.com/v1", "/email")`` gives
    ``https://api.example.com/email``.

    Raises:
        ValueError: If the composed URL is not a usable http(s) URL.
    """
    url = urljoin(base_url, path)
    is_valid, error = validate_base_url(url)
    if not is_valid:
        raise ValueError(f"cannot compose endpoint {path!r} from {base_url!r}: {error}")
    return url
