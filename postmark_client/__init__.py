"""
Postmark client: validated email composition and delivery over HTTP.

Typical use:
    client = (
        DeliveryClient.builder()
        .base_url("https://api.postmarkapp.com")
        .sender(EmailAddress.parse("noreply@example.com"))
        .server_token(os.environ["POSTMARK_SERVER_TOKEN"])
        .build()
    )
    message = (
        OutboundMessage.builder(EmailAddress.parse("user@example.com"))
        .subject("Welcome")
        .html_body("<p>Hello</p>")
        .build()
    )
    result = client.send(message)
"""

from postmark_client.modules.attachment import Attachment, AttachmentBuilder
from postmark_client.modules.delivery_client import (
    DEFAULT_TIMEOUT,
    MAX_BATCH_SIZE,
    DeliveryClient,
    DeliveryClientBuilder,
)
from postmark_client.modules.email_address import EmailAddress
from postmark_client.modules.errors import (
    AuthenticationError,
    ConfigurationError,
    DeliveryError,
    DeliveryTimeoutError,
    ParseError,
    PostmarkClientError,
    SerializationError,
    ServerResponseError,
    TransportError,
)
from postmark_client.modules.outbound_message import (
    OutboundMessage,
    OutboundMessageBuilder,
    TrackLinkPolicy,
)
from postmark_client.modules.request_mapper import map_batch, map_message
from postmark_client.modules.send_result import SendResult
from postmark_client.utils.credentials import ServerToken

__all__ = [
    "Attachment",
    "AttachmentBuilder",
    "AuthenticationError",
    "ConfigurationError",
    "DEFAULT_TIMEOUT",
    "DeliveryClient",
    "DeliveryClientBuilder",
    "DeliveryError",
    "DeliveryTimeoutError",
    "EmailAddress",
    "MAX_BATCH_SIZE",
    "OutboundMessage",
    "OutboundMessageBuilder",
    "ParseError",
    "PostmarkClientError",
    "SendResult",
    "SerializationError",
    "ServerResponseError",
    "ServerToken",
    "TrackLinkPolicy",
    "TransportError",
    "map_batch",
    "map_message",
]
