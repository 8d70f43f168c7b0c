"""
Custom Validators
Argument checks and value formatting shared by the Daraja operations
"""

import secrets
import string
import time
from typing import Any, Optional, Union

from mpesa_sdk.errors import ValidationError

_REFERENCE_ALPHABET = string.ascii_lowercase + string.digits


def require(value: Any, message: str) -> None:
    """Raise ValidationError with ``message`` when ``value`` is falsy."""
    if not value:
        raise ValidationError(message)


def format_phone_number(phone_number: Union[str, int, None]) -> Optional[str]:
    """
    Format a phone number for Daraja (254XXXXXXXXX)

    9 digits get the 254 prefix, 10 digits lose their leading character
    and get the prefix. Any other length is returned as-is.

    Args:
        phone_number: Phone number as string or integer

    Returns:
        Formatted number, or None for an empty value
    """
    if not phone_number:
        return None

    number = str(phone_number)
    if len(number) == 9:
        return f"254{number}"
    if len(number) == 10:
        return f"254{number[1:]}"
    return number


def generate_reference(prefix: str) -> str:
    """Build a request reference: ``{prefix}_{epoch millis}_{9 random chars}``."""
    random_part = ''.join(secrets.choice(_REFERENCE_ALPHABET) for _ in range(9))
    return f"{prefix}_{int(time.time() * 1000)}_{random_part}"
