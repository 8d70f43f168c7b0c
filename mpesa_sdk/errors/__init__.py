from mpesa_sdk.errors.exceptions import (
    MpesaError,
    ConfigurationError,
    ValidationError,
    AuthenticationError,
    RequestError,
)

__all__ = [
    'MpesaError',
    'ConfigurationError',
    'ValidationError',
    'AuthenticationError',
    'RequestError',
]
