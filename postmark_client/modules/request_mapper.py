"""
Request Mapper Module
Pure transformation from OutboundMessage to the provider's wire request

The output dict is exactly what gets JSON-encoded: absent optional fields
are left out entirely rather than sent as null, and TrackOpens/TrackLinks
are always present. Compatibility tests pin this shape.
"""

from typing import Any, Dict, Iterable, List, Optional, Sequence

from .attachment import Attachment
from .email_address import EmailAddress
from .outbound_message import OutboundMessage

WireRequest = Dict[str, Any]


def map_attachment(attachment: Attachment) -> Dict[str, str]:
    wire = {
        "Name": attachment.name,
        "Content": attachment.content,
        "ContentType": attachment.content_type,
    }
    if attachment.content_id is not None:
        wire["ContentID"] = attachment.content_id
    return wire


def _address_list(addresses: Optional[Sequence[EmailAddress]]) -> Optional[List[str]]:
    if not addresses:
        return None
    return [str(address) for address in addresses]


def map_message(message: OutboundMessage, sender: EmailAddress) -> WireRequest:
    """
    Build the wire request for one message.

    Args:
        message: Message to send
        sender: Sender identity configured on the client

    Returns:
        Dict with PascalCase keys, ready for JSON encoding
    """
    request: WireRequest = {
        "From": str(sender),
        "To": str(message.to),
    }

    optional_fields = (
        ("Cc", _address_list(message.cc)),
        ("Bcc", _address_list(message.bcc)),
        ("Subject", message.subject),
        ("Tag", message.tag),
        ("HtmlBody", message.html_body),
        ("TextBody", message.text_body),
        ("ReplyTo", str(message.reply_to) if message.reply_to is not None else None),
        ("Metadata", message.metadata),
    )
    for key, value in optional_fields:
        if value is not None:
            request[key] = value

    request["TrackOpens"] = message.track_opens
    request["TrackLinks"] = message.track_links.value

    if message.attachments:
        request["Attachments"] = [map_attachment(a) for a in message.attachments]

    return request


def map_batch(messages: Iterable[OutboundMessage], sender: EmailAddress) -> List[WireRequest]:
    """Map messages in order; the provider answers in the same order"""
    return [map_message(message, sender) for message in messages]
