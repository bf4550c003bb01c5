"""
Outbound Message Module
Provider-agnostic representation of one email to send, and its builder
"""

import copy
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional, Tuple

from .attachment import Attachment
from .email_address import EmailAddress


class TrackLinkPolicy(Enum):
    """Which parts of a message get their links rewritten for click tracking"""
    NONE = "None"
    HTML_AND_TEXT = "HtmlAndText"
    HTML_ONLY = "HtmlOnly"
    TEXT_ONLY = "TextOnly"


@dataclass(frozen=True)
class OutboundMessage:
    """
    One email to send.

    Only ``to`` is required; every other field stays ``None`` unless set on
    the builder. Either body alone is accepted by the provider, so neither
    is mandatory here.
    """
    to: EmailAddress
    subject: Optional[str] = None
    cc: Optional[Tuple[EmailAddress, ...]] = None
    bcc: Optional[Tuple[EmailAddress, ...]] = None
    tag: Optional[str] = None
    html_body: Optional[str] = None
    text_body: Optional[str] = None
    reply_to: Optional[EmailAddress] = None
    metadata: Any = None
    track_opens: bool = True
    track_links: TrackLinkPolicy = TrackLinkPolicy.HTML_AND_TEXT
    attachments: Optional[Tuple[Attachment, ...]] = None

    @staticmethod
    def builder(to: EmailAddress) -> "OutboundMessageBuilder":
        return OutboundMessageBuilder(to)


def _require_address(value: Any, field_name: str) -> EmailAddress:
    if not isinstance(value, EmailAddress):
        raise TypeError(
            f"{field_name} expects EmailAddress values, got {type(value).__name__}; "
            f"use EmailAddress.parse() first"
        )
    return value


def _address_tuple(values: Iterable[EmailAddress], field_name: str) -> Tuple[EmailAddress, ...]:
    if isinstance(values, (str, EmailAddress)):
        raise TypeError(f"{field_name} expects a sequence of EmailAddress values")
    return tuple(_require_address(value, field_name) for value in values)


class OutboundMessageBuilder:
    """
    Fluent staging object for OutboundMessage.

    Setters overwrite earlier values. ``build()`` cannot fail: every setter
    only accepts already-validated types.
    """

    def __init__(self, to: EmailAddress):
        self._to = _require_address(to, "to")
        self._subject: Optional[str] = None
        self._cc: Optional[Tuple[EmailAddress, ...]] = None
        self._bcc: Optional[Tuple[EmailAddress, ...]] = None
        self._tag: Optional[str] = None
        self._html_body: Optional[str] = None
        self._text_body: Optional[str] = None
        self._reply_to: Optional[EmailAddress] = None
        self._metadata: Any = None
        self._track_opens = True
        self._track_links = TrackLinkPolicy.HTML_AND_TEXT
        self._attachments: Optional[Tuple[Attachment, ...]] = None

    def subject(self, subject: str) -> "OutboundMessageBuilder":
        self._subject = subject
        return self

    def html_body(self, html_body: str) -> "OutboundMessageBuilder":
        self._html_body = html_body
        return self

    def text_body(self, text_body: str) -> "OutboundMessageBuilder":
        self._text_body = text_body
        return self

    def cc(self, cc: Iterable[EmailAddress]) -> "OutboundMessageBuilder":
        self._cc = _address_tuple(cc, "cc")
        return self

    def bcc(self, bcc: Iterable[EmailAddress]) -> "OutboundMessageBuilder":
        self._bcc = _address_tuple(bcc, "bcc")
        return self

    def tag(self, tag: str) -> "OutboundMessageBuilder":
        self._tag = tag
        return self

    def reply_to(self, reply_to: EmailAddress) -> "OutboundMessageBuilder":
        self._reply_to = _require_address(reply_to, "reply_to")
        return self

    def metadata(self, metadata: Any) -> "OutboundMessageBuilder":
        self._metadata = metadata
        return self

    def track_opens(self, track_opens: bool) -> "OutboundMessageBuilder":
        self._track_opens = bool(track_opens)
        return self

    def track_links(self, track_links: TrackLinkPolicy) -> "OutboundMessageBuilder":
        if not isinstance(track_links, TrackLinkPolicy):
            raise TypeError(f"track_links expects a TrackLinkPolicy, got {type(track_links).__name__}")
        self._track_links = track_links
        return self

    def attachments(self, attachments: Iterable[Attachment]) -> "OutboundMessageBuilder":
        attachments = tuple(attachments)
        for attachment in attachments:
            if not isinstance(attachment, Attachment):
                raise TypeError(f"attachments expects Attachment values, got {type(attachment).__name__}")
        self._attachments = attachments
        return self

    def build(self) -> OutboundMessage:
        return OutboundMessage(
            to=self._to,
            subject=self._subject,
            cc=self._cc,
            bcc=self._bcc,
            tag=self._tag,
            html_body=self._html_body,
            text_body=self._text_body,
            reply_to=self._reply_to,
            # Detach from the caller's object so later mutation cannot leak in
            metadata=copy.deepcopy(self._metadata),
            track_opens=self._track_opens,
            track_links=self._track_links,
            attachments=self._attachments,
        )
