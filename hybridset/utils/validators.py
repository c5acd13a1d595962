"""
Validation Utilities
====================

Input validation for key material, identifiers and call arguments.
"""

from __future__ import annotations

from typing import Final

UINT32_MAX: Final[int] = 0xFFFFFFFF


class ValidationError(ValueError):
    """Raised when validation fails."""
    pass


def validate_bytes(
    value: object,
    field_name: str = "value",
    allow_none: bool = False,
    min_length: int = 0,
) -> bytes:
    """
    Validate that a value is bytes-like and return it as bytes.

    Args:
        value: The value to validate
        field_name: Name of the field for error messages
        allow_none: If True, None is accepted and returned as b""
        min_length: Minimum allowed length

    Returns:
        The value as immutable bytes

    Raises:
        ValidationError: If validation fails
    """
    if value is None:
        if allow_none:
            return b""
        raise ValidationError(f"{field_name} is required")

    if not isinstance(value, (bytes, bytearray, memoryview)):
        raise ValidationError(
            f"{field_name} must be bytes, not {type(value).__name__}"
        )

    data = bytes(value)

    if len(data) < min_length:
        raise ValidationError(
            f"{field_name} must be at least {min_length} bytes"
        )

    return data


def validate_key_id(key_id: object) -> int:
    """Validate a key identifier is an unsigned 32-bit integer."""
    if isinstance(key_id, bool) or not isinstance(key_id, int):
        raise ValidationError("key_id must be an integer")
    if not 0 <= key_id <= UINT32_MAX:
        raise ValidationError(f"key_id must be between 0 and {UINT32_MAX}")
    return key_id


def validate_type_url(type_url: object) -> str:
    """
    Validate a key type URL.

    Type URLs are plain identifiers and must not be empty or contain
    whitespace or null bytes.
    """
    if not isinstance(type_url, str):
        raise ValidationError("type_url must be a string")

    if not type_url:
        raise ValidationError("type_url cannot be empty")

    if "\x00" in type_url or any(ch.isspace() for ch in type_url):
        raise ValidationError("type_url contains invalid characters")

    return type_url
