"""
Credentials Module
Wrapper type for the provider server token

SECURITY STORY: Tokens leak through the boring paths: an f-string in a log
line, a repr() in a traceback, a dataclass printed during debugging. The
ServerToken type masks itself everywhere except one explicit accessor, which
the delivery client calls only when it attaches the auth header.
"""

MASK = "**********"


class ServerToken:
    """Opaque holder for an API credential"""

    __slots__ = ("_value",)

    def __init__(self, value: str):
        if not isinstance(value, str):
            raise TypeError("server token must be a string")
        self._value = value

    def expose_secret(self) -> str:
        """Return the raw token. Call only where the value leaves the process."""
        return self._value

    def is_empty(self) -> bool:
        return not self._value.strip()

    def __str__(self) -> str:
        return MASK

    def __repr__(self) -> str:
        return f"ServerToken('{MASK}')"

    def __format__(self, format_spec: str) -> str:
        return format(MASK, format_spec)

    def __eq__(self, other) -> bool:
        if not isinstance(other, ServerToken):
            return NotImplemented
        return self._value == other._value

    def __hash__(self) -> int:
        return hash(self._value)

    def __reduce__(self):
        raise TypeError("ServerToken cannot be pickled")
