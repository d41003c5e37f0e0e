"""
Data sanitizers for logging.

Rule inputs are arbitrary user records, so values reaching the logs are
masked by field name before rendering.
"""

import re
from typing import Any

from structlog.types import EventDict, WrappedLogger

REDACTED = "***REDACTED***"

# Field name fragments whose values are never logged
SENSITIVE_PATTERNS = [
    r"password",
    r"pwd",
    r"secret",
    r"token",
    r"api_?key",
    r"auth",
    r"credential",
    r"private",
    r"ssn",
    r"credit_?card",
    r"card_?number",
    r"cvv",
    r"(?:^|_)pin(?:$|_)",
    r"iban",
]

_SENSITIVE_RE = re.compile("|".join(SENSITIVE_PATTERNS), re.IGNORECASE)

# Fields that are partially masked
PARTIAL_MASK_FIELDS = {
    "email": lambda v: _mask_email(v),
    "phone": lambda v: _mask_phone(v),
}


class SensitiveDataProcessor:
    """
    Structlog processor masking sensitive data in log events.
    """

    def __call__(
        self,
        logger: WrappedLogger,
        name: str,
        event_dict: EventDict,
    ) -> EventDict:
        """Process log event and mask sensitive data."""
        return sanitize_for_log(event_dict)


def sanitize_for_log(data: dict[str, Any]) -> dict[str, Any]:
    """
    Sanitize a dictionary for logging.

    Args:
        data: Dictionary to sanitize

    Returns:
        Sanitized dictionary with masked sensitive data
    """
    sanitized = {}

    for key, value in data.items():
        sanitized[key] = sanitize_value(str(key), value)

    return sanitized


def sanitize_value(field_name: str, value: Any) -> Any:
    """
    Mask ``value`` according to the (possibly dotted) field it came from.

    Only the last path segment is inspected, so ``user.password`` and
    ``password`` are treated alike.
    """
    leaf = field_name.rsplit(".", 1)[-1]
    if value is None:
        return None
    if is_sensitive_field(leaf):
        return REDACTED
    if leaf.lower() in PARTIAL_MASK_FIELDS:
        return PARTIAL_MASK_FIELDS[leaf.lower()](str(value))
    if isinstance(value, dict):
        return sanitize_for_log(value)
    if isinstance(value, list):
        return [sanitize_for_log(item) if isinstance(item, dict) else item for item in value]
    return value


def mask_sensitive_data(data_type: str, value: str) -> str:
    """
    Mask sensitive data according to its type.

    Args:
        data_type: Type of data to mask
        value: Value to mask

    Returns:
        Masked value
    """
    if not value:
        return "***"

    masker = PARTIAL_MASK_FIELDS.get(data_type, lambda v: "***MASKED***")
    return masker(value)


def is_sensitive_field(field_name: str) -> bool:
    """Check if a field name indicates sensitive data."""
    return _SENSITIVE_RE.search(field_name) is not None


def _mask_email(value: str) -> str:
    """Mask email keeping domain."""
    if "@" in value:
        local, domain = value.rsplit("@", 1)
        if len(local) > 2:
            return f"{local[0]}***@{domain}"
        return f"***@{domain}"
    return "***"


def _mask_phone(value: str) -> str:
    """Mask phone number keeping the last 2 digits."""
    digits = re.sub(r"\D", "", value)
    if len(digits) > 4:
        return f"***{digits[-2:]}"
    return "***"
