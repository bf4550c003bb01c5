"""
Structured Logging Module
One JSON object per log record, carrying the delivery context fields

DeliveryClient attaches its context through
``extra={"extra_fields": {...}}``: ``endpoint``, ``status_code``,
``elapsed_ms``, ``message_id``, ``error_code``, ``recipient_domain``,
``batch_size``. Those land as top-level keys, so delivery logs can be
filtered by message id or status without parsing the message text.
"""

import json
import logging
from typing import Any, Dict

from postmark_client.utils.credentials import ServerToken

REDACTED = "[REDACTED]"

# Keys produced by the formatter itself; context keys never overwrite them
RESERVED_KEYS = frozenset({
    "timestamp", "level", "logger", "message", "module", "function", "line", "exception",
})

# Substrings of context keys whose values are never written out
SENSITIVE_KEY_PARTS = (
    "token", "password", "secret", "api_key", "credential", "authorization",
)


def is_sensitive_key(key: str) -> bool:
    key_lower = key.lower()
    return any(part in key_lower for part in SENSITIVE_KEY_PARTS)


class JSONFormatter(logging.Formatter):
    """Render records as JSON with the delivery context merged in"""

    def format(self, record: logging.LogRecord) -> str:
        entry = self._base_entry(record)

        context = getattr(record, "extra_fields", None) or {}
        for key, value in context.items():
            target = f"extra_{key}" if key in RESERVED_KEYS else key
            entry[target] = self._redact(key, value)

        return json.dumps(entry, default=str)

    def _base_entry(self, record: logging.LogRecord) -> Dict[str, Any]:
        entry = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return entry

    @staticmethod
    def _redact(key: str, value: Any) -> Any:
        # A ServerToken is hidden whatever key it was logged under
        if isinstance(value, ServerToken) or is_sensitive_key(key):
            return REDACTED
        return value
