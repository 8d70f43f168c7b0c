"""
mpesa_sdk
Client for the Safaricom M-Pesa Daraja API
"""

from mpesa_sdk.client import Mpesa
from mpesa_sdk.config import config_from_env
from mpesa_sdk.errors import (
    MpesaError,
    ConfigurationError,
    ValidationError,
    AuthenticationError,
    RequestError,
)
from mpesa_sdk.schemas import MpesaConfig
from mpesa_sdk.services import DarajaResponse, HttpTransport
from mpesa_sdk.utils import configure_logging, format_phone_number

__version__ = '1.0.0'

__all__ = [
    'Mpesa',
    'MpesaConfig',
    'config_from_env',
    'MpesaError',
    'ConfigurationError',
    'ValidationError',
    'AuthenticationError',
    'RequestError',
    'DarajaResponse',
    'HttpTransport',
    'configure_logging',
    'format_phone_number',
]
