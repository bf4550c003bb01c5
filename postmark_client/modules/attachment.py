"""
Attachment Module
Named, MIME-typed, base64-encoded payloads attached to outbound messages
"""

import base64
import logging
import mimetypes
import os
from dataclasses import dataclass
from typing import Optional

from .errors import ConfigurationError

DEFAULT_CONTENT_TYPE = "application/octet-stream"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Attachment:
    """
    Attachment ready for the wire

    Attributes:
        name: File name shown to the recipient
        content: Base64 text (standard alphabet, padded); raw bytes never persist
        content_type: MIME type (e.g., "image/png", "application/pdf")
        content_id: Optional id for inline references ("cid:...") from the HTML body
    """
    name: str
    content: str
    content_type: str
    content_id: Optional[str] = None

    @staticmethod
    def builder() -> "AttachmentBuilder":
        return AttachmentBuilder()

    @classmethod
    def from_file(cls, name: str, path: str) -> "Attachment":
        """
        Build an attachment from a file on disk.

        The content type is derived from the file extension and falls back to
        ``application/octet-stream`` when the extension is unknown.

        Args:
            name: Name shown to the recipient
            path: Path of the file to read

        Returns:
            Attachment with the file's bytes encoded

        Raises:
            ConfigurationError: If the path carries no file extension
            OSError: If the file cannot be read
        """
        extension = _extension_of(path)
        if extension is None:
            raise ConfigurationError("Invalid file extension")

        content_type = guess_content_type(extension)

        with open(path, "rb") as handle:
            content = handle.read()

        logger.debug(f"Loaded attachment {name!r} ({len(content):,} bytes, {content_type})")

        return (
            cls.builder()
            .name(name)
            .content(content)
            .content_type(content_type)
            .build()
        )


def guess_content_type(extension: str) -> str:
    """Map an extension (with or without the dot) to a MIME type"""
    extension = extension.lstrip(".").lower()
    if not extension:
        return DEFAULT_CONTENT_TYPE
    content_type, _ = mimetypes.guess_type(f"attachment.{extension}", strict=False)
    return content_type or DEFAULT_CONTENT_TYPE


def _extension_of(path: str) -> Optional[str]:
    # Dotfiles such as ".bashrc" have no extension
    _, extension = os.path.splitext(os.path.basename(os.fspath(path)))
    return extension or None


class AttachmentBuilder:
    """Staging object for Attachment; required fields are checked in build()"""

    def __init__(self):
        self._name: Optional[str] = None
        self._content: Optional[bytes] = None
        self._content_type: Optional[str] = None
        self._content_id: Optional[str] = None

    def name(self, name: str) -> "AttachmentBuilder":
        self._name = name
        return self

    def content(self, content: bytes) -> "AttachmentBuilder":
        if not isinstance(content, (bytes, bytearray, memoryview)):
            raise TypeError(f"attachment content must be bytes, got {type(content).__name__}")
        self._content = bytes(content)
        return self

    def content_type(self, content_type: str) -> "AttachmentBuilder":
        self._content_type = content_type
        return self

    def content_id(self, content_id: str) -> "AttachmentBuilder":
        self._content_id = content_id
        return self

    def build(self) -> Attachment:
        if not self._name:
            raise ConfigurationError("attachment name is required")
        if self._content is None:
            raise ConfigurationError("attachment content is required")
        if not self._content_type:
            raise ConfigurationError("attachment content type is required")

        return Attachment(
            name=self._name,
            content=base64.b64encode(self._content).decode("ascii"),
            content_type=self._content_type,
            content_id=self._content_id,
        )
