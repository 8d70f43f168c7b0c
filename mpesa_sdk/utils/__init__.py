"""
Utils Package
Utility functions and helpers
"""

from mpesa_sdk.utils.encryption import (
    generate_timestamp,
    generate_password,
    generate_security_credential,
    certificate_path,
)
from mpesa_sdk.utils.logger import get_logger, configure_logging
from mpesa_sdk.utils.validators import require, format_phone_number, generate_reference

__all__ = [
    'generate_timestamp',
    'generate_password',
    'generate_security_credential',
    'certificate_path',
    'get_logger',
    'configure_logging',
    'require',
    'format_phone_number',
    'generate_reference',
]
