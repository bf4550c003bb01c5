"""
Email Address Module
Validated, normalized value type for outbound addresses

Validation is layered so that every failure mode yields its own message:
a form can tell "missing domain" apart from "bad first character" without
re-parsing the input. The checks run in a fixed order and stop at the first
failure, so the reported reason is stable for a given input.
"""

import hashlib
import logging

from .errors import ParseError
from ..utils.pattern_compiler import compile_pattern

logger = logging.getLogger(__name__)

START_CHAR_PATTERN = compile_pattern(r"[a-zA-Z0-9]")
DOMAIN_PART_PATTERN = compile_pattern(r".+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}\Z")
ADDRESS_PATTERN = compile_pattern(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")

# Passed by the classmethods; direct construction without it is refused
_CONSTRUCTION_KEY = object()


class EmailAddress:
    """
    A single email address, trimmed and lower-cased.

    Instances are immutable and compare by their stored string. Build them
    with ``EmailAddress.parse``; ``parse_unsafe`` exists only for values that
    were validated before they were stored.
    """

    __slots__ = ("_value",)

    def __init__(self, value: str, _key: object = None):
        if _key is not _CONSTRUCTION_KEY:
            raise TypeError(
                "EmailAddress cannot be constructed directly; "
                "use EmailAddress.parse() or EmailAddress.parse_unsafe()"
            )
        object.__setattr__(self, "_value", value)

    @classmethod
    def parse(cls, raw: str) -> "EmailAddress":
        """
        Validate and normalize an address.

        Args:
            raw: Untrusted address text

        Returns:
            EmailAddress holding the trimmed, lower-cased address

        Raises:
            ParseError: With a reason naming the first check that failed

        Example:
            >>> str(EmailAddress.parse(" User@Example.COM "))
            "user@example.com"
        """
        if not isinstance(raw, str):
            raise ParseError(f"an email must be a string, got {type(raw).__name__}")

        email = raw.strip()
        if not email:
            raise ParseError("an email cannot be empty")

        if not START_CHAR_PATTERN.match(email[0]):
            raise ParseError("an email can only start with a letter or a number")

        if not DOMAIN_PART_PATTERN.search(email):
            raise ParseError("the email does not contain a valid [domain] part")

        if not ADDRESS_PATTERN.fullmatch(email):
            raise ParseError(f"{email} is not a valid email")

        return cls(email.lower(), _CONSTRUCTION_KEY)

    @classmethod
    def parse_unsafe(cls, value: str) -> "EmailAddress":
        """
        Wrap a value without validating or normalizing it.

        Only for addresses already known to be valid, e.g. loaded from a
        store that enforced ``parse`` at write time. Never call this with
        caller-supplied input.
        """
        return cls(value, _CONSTRUCTION_KEY)

    @property
    def value(self) -> str:
        return self._value

    def digest(self) -> str:
        """Stable hex fingerprint of the address, usable as an opaque lookup key"""
        return hashlib.blake2b(self._value.encode("utf-8"), digest_size=32).hexdigest()

    def __setattr__(self, name, value):
        raise AttributeError("EmailAddress is immutable")

    def __delattr__(self, name):
        raise AttributeError("EmailAddress is immutable")

    def __str__(self) -> str:
        return self._value

    def __repr__(self) -> str:
        return f"EmailAddress({self._value!r})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, EmailAddress):
            return NotImplemented
        return self._value == other._value

    def __hash__(self) -> int:
        return hash(self._value)

    def __reduce__(self):
        return (_restore, (self._value,))


def _restore(value: str) -> EmailAddress:
    return EmailAddress.parse_unsafe(value)
