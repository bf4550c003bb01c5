"""
Sanitization Utility Module
Makes provider response bodies and caller-supplied text safe to log.
"""

import re
import unicodedata
from typing import Optional

ANSI_ESCAPE_PATTERN = re.compile(r'\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])')


def sanitize_for_logging(text: Optional[str], max_length: int = 255) -> str:
    """
    Sanitize text for safe logging to prevent Log Injection (CRLF) and terminal manipulation.

    Error bodies returned by the delivery service end up in log lines; they
    are untrusted and can be arbitrarily long.

    Args:
        text: The input string to sanitize.
        max_length: Maximum allowed length for the log entry (truncates if longer).

    Returns:
        Sanitized string safe for logging.
    """
    if not text:
        return ""

    # Bound the work done on huge bodies before the more expensive passes
    if len(text) > max_length * 4:
        text = text[:max_length * 4]

    text = unicodedata.normalize('NFKC', text)

    text = text.replace('\n', '\\n').replace('\r', '\\r')

    text = ANSI_ESCAPE_PATTERN.sub('', text)

    # Remove other non-printable control characters (ASCII 0-31 except tab)
    text = "".join(ch for ch in text if ch == '\t' or ord(ch) >= 32)

    if len(text) > max_length:
        text = text[:max_length] + "..."

    return text


def mask_address(address: str) -> str:
    """
    Mask the local part of an address for log output.

    Example:
        >>> mask_address("jane.doe@example.com")
        "j***@example.com"
    """
    if not address or "@" not in address:
        return "***"
    local, _, domain = address.partition("@")
    return f"{local[:1]}***@{domain}"
