"""
Configuration Management Module
Handles loading and validation of environment variables and settings
"""

import math
import os
from dataclasses import dataclass
from typing import List, Optional

from dotenv import load_dotenv

from postmark_client.modules.delivery_client import DEFAULT_TIMEOUT, DeliveryClient
from postmark_client.modules.email_address import EmailAddress
from postmark_client.modules.errors import ConfigurationError, ParseError
from postmark_client.utils.credentials import ServerToken
from postmark_client.utils.security_validators import validate_base_url

DEFAULT_BASE_URL = "https://api.postmarkapp.com"


@dataclass
class ClientConfig:
    """Configuration for the delivery client"""
    base_url: str
    sender: str
    server_token: ServerToken
    timeout: str


@dataclass
class LoggingConfig:
    """Configuration for logging"""
    log_level: str
    json_format: bool


class Config:
    """Main configuration class"""

    def __init__(self, env_file: str = ".env"):
        """
        Initialize configuration from environment file

        Variables already present in the process environment win over the
        values in the file.

        Args:
            env_file: Path to environment file (default: .env)
        """
        load_dotenv(env_file)

        self.client = self._load_client_config()
        self.logging = self._load_logging_config()

    def _load_client_config(self) -> ClientConfig:
        """Load delivery client configuration"""
        return ClientConfig(
            base_url=os.getenv("POSTMARK_BASE_URL", DEFAULT_BASE_URL).strip(),
            sender=os.getenv("POSTMARK_SENDER", "").strip(),
            server_token=ServerToken(os.getenv("POSTMARK_SERVER_TOKEN", "").strip()),
            timeout=os.getenv("POSTMARK_TIMEOUT", str(DEFAULT_TIMEOUT)).strip(),
        )

    def _load_logging_config(self) -> LoggingConfig:
        """Load logging configuration"""
        return LoggingConfig(
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            json_format=self._get_bool("LOG_JSON", False),
        )

    @staticmethod
    def _get_bool(key: str, default: bool = False) -> bool:
        """Convert environment variable to boolean"""
        value = os.getenv(key, str(default)).lower()
        return value in ('true', '1', 'yes', 'on')

    def timeout_seconds(self) -> float:
        """
        Parsed request timeout

        Raises:
            ConfigurationError: If the value is not a positive number
        """
        try:
            timeout = float(self.client.timeout)
        except ValueError:
            raise ConfigurationError(
                f"POSTMARK_TIMEOUT must be a number of seconds, got: {self.client.timeout!r}"
            ) from None
        if not math.isfinite(timeout) or timeout <= 0:
            raise ConfigurationError(f"POSTMARK_TIMEOUT must be positive and finite, got: {timeout:g}")
        return timeout

    def sender_address(self) -> EmailAddress:
        """
        Parsed sender address

        Raises:
            ConfigurationError: If the sender is missing or not a valid address
        """
        if not self.client.sender:
            raise ConfigurationError("POSTMARK_SENDER is required")
        try:
            return EmailAddress.parse(self.client.sender)
        except ParseError as e:
            raise ConfigurationError(f"POSTMARK_SENDER is invalid: {e.reason}") from e

    def validate(self) -> bool:
        """
        Validate configuration

        Returns:
            True if configuration is valid

        Raises:
            ConfigurationError: If configuration is invalid
        """
        is_valid, error = validate_base_url(self.client.base_url)
        if not is_valid:
            raise ConfigurationError(f"POSTMARK_BASE_URL is invalid: {error}")

        self.sender_address()

        if self.client.server_token.is_empty():
            raise ConfigurationError("POSTMARK_SERVER_TOKEN is required")

        self.timeout_seconds()
        return True

    def create_client(self, session=None) -> DeliveryClient:
        """
        Validate and build a DeliveryClient from this configuration

        Args:
            session: Optional requests.Session to use as transport
        """
        self.validate()

        builder = (
            DeliveryClient.builder()
            .base_url(self.client.base_url)
            .sender(self.sender_address())
            .server_token(self.client.server_token)
            .timeout(self.timeout_seconds())
        )
        if session is not None:
            builder.session(session)
        return builder.build()


# Values shipped in .env.example
PLACEHOLDER_SENDERS = [
    "sender@example.com",
    "you@your-domain.com",
]
PLACEHOLDER_TOKENS = [
    "your-server-token-here",
    "POSTMARK_API_TEST",
]


def check_placeholder_values(config: Config) -> List[str]:
    """
    Check if the configuration still uses example values.

    ``POSTMARK_API_TEST`` is Postmark's sandbox token: accepted by the API,
    but nothing is delivered, which is easy to miss in production.

    Returns a list of warning messages.
    """
    warnings: List[str] = []

    if config.client.sender.lower() in PLACEHOLDER_SENDERS:
        warnings.append(f"POSTMARK_SENDER uses example value: {config.client.sender}")

    token: Optional[str] = config.client.server_token.expose_secret()
    if token in PLACEHOLDER_TOKENS:
        warnings.append("POSTMARK_SERVER_TOKEN uses an example or sandbox token")

    return warnings
