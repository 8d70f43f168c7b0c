"""
Schemas Package
Marshmallow schemas for client configuration
"""

from mpesa_sdk.schemas.config_schema import (
    MpesaConfig,
    MpesaConfigSchema,
    CredentialsSchema,
    AppInfoSchema,
    load_config
)

__all__ = [
    'MpesaConfig',
    'MpesaConfigSchema',
    'CredentialsSchema',
    'AppInfoSchema',
    'load_config'
]
