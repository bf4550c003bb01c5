"""
Error Taxonomy Module
Typed exceptions raised by address parsing, builders and delivery calls

Validation and configuration errors are raised before any network call.
Builder and delivery failures derive from DeliveryError; address grammar
failures raise ParseError.
"""

from typing import Optional


class PostmarkClientError(Exception):
    """Base class for every error raised by this library"""


class ParseError(PostmarkClientError):
    """Raised when a value does not satisfy the email address grammar"""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class DeliveryError(PostmarkClientError):
    """Base class for errors raised while building or sending messages"""


class ConfigurationError(DeliveryError):
    """
    Raised for caller-fixable problems detected before any network call:
    missing builder fields, an unusable endpoint URL, an oversized batch or
    invalid environment configuration.
    """


class AuthenticationError(DeliveryError):
    """Raised when the provider answers 401; carries the response body"""

    def __init__(self, message: str):
        super().__init__(f"Authentication failed: {message}")
        self.message = message


class ServerResponseError(DeliveryError):
    """Raised for any non-2xx response other than 401"""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"Server responded with HTTP {status_code}: {message}")
        self.status_code = status_code
        self.message = message


class DeliveryTimeoutError(DeliveryError):
    """Raised when the transport gives up after the configured timeout"""

    def __init__(self, timeout: float):
        super().__init__(f"Request timed out after {timeout:g} seconds")
        self.timeout = timeout


class TransportError(DeliveryError):
    """Raised for transport failures other than timeouts (refused connections, DNS failures)"""


class SerializationError(DeliveryError):
    """Raised when a successful response body does not decode to the expected shape"""

    def __init__(self, message: str, body: Optional[str] = None):
        super().__init__(message)
        self.body = body
