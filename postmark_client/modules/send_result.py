"""
Send Result Model
Decoded provider acknowledgement for one submitted message
"""

from dataclasses import dataclass
from typing import Any, Dict, List

from .errors import SerializationError

# Wire key -> (attribute, expected JSON type)
_RESULT_FIELDS = (
    ("ErrorCode", "error_code", int),
    ("Message", "message", str),
    ("MessageID", "message_id", str),
    ("SubmittedAt", "submitted_at", str),
    ("To", "recipient", str),
)


@dataclass(frozen=True)
class SendResult:
    """
    Provider response for one message

    Attributes:
        error_code: Provider error code (0 on success)
        message: Provider status text (e.g., "OK")
        message_id: Provider-assigned message identifier
        submitted_at: ISO 8601 timestamp string, kept verbatim
        recipient: Recipient address as echoed by the provider
    """
    error_code: int
    message: str
    message_id: str
    submitted_at: str
    recipient: str

    @classmethod
    def from_dict(cls, data: Any) -> "SendResult":
        """
        Decode one result object.

        Raises:
            SerializationError: If a key is missing or has the wrong JSON type
        """
        if not isinstance(data, dict):
            raise SerializationError(
                f"expected a result object, got {type(data).__name__}"
            )

        values: Dict[str, Any] = {}
        for key, attribute, expected in _RESULT_FIELDS:
            if key not in data:
                raise SerializationError(f"result object is missing {key!r}")
            value = data[key]
            # bool is an int subclass; JSON true is not an error code
            if not isinstance(value, expected) or isinstance(value, bool):
                raise SerializationError(
                    f"result field {key!r} should be {expected.__name__}, "
                    f"got {type(value).__name__}"
                )
            values[attribute] = value

        return cls(**values)

    @classmethod
    def list_from_json(cls, data: Any) -> List["SendResult"]:
        """Decode a batch response array, keeping submission order"""
        if not isinstance(data, list):
            raise SerializationError(
                f"expected a result array, got {type(data).__name__}"
            )
        return [cls.from_dict(item) for item in data]

    def to_dict(self) -> Dict[str, Any]:
        return {key: getattr(self, attribute) for key, attribute, _ in _RESULT_FIELDS}

    @property
    def succeeded(self) -> bool:
        return self.error_code == 0
