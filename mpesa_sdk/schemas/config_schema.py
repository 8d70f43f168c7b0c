"""
Client configuration schema
Validates the mapping passed to Mpesa() and turns it into an immutable MpesaConfig.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from marshmallow import EXCLUDE, Schema, fields, post_load, validate
from marshmallow import ValidationError as SchemaValidationError

from mpesa_sdk.constants import DEFAULT_TIMEOUT
from mpesa_sdk.errors import ConfigurationError

# Reporting order for missing fields: (section label, nested key or None, field names)
_REQUIRED_FIELDS = (
    ('configuration', None, ('env', 'credentials', 'app_info', 'business_short_code',
                             'short_code_type', 'requester')),
    ('credentials', 'credentials', ('pass_key', 'initiator_pass', 'initiator_name')),
    ('app_info', 'app_info', ('consumer_key', 'consumer_secret')),
)


def _not_blank(value):
    if not value:
        raise SchemaValidationError('Field may not be blank.')


@dataclass(frozen=True)
class MpesaConfig:
    """Validated client configuration. Secrets are kept out of repr()."""
    env: str
    requester: str
    short_code_type: str
    business_short_code: str
    pass_key: str = field(repr=False)
    initiator_name: str
    initiator_pass: str = field(repr=False)
    consumer_key: str
    consumer_secret: str = field(repr=False)
    certificates_dir: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT


class CredentialsSchema(Schema):
    """Initiator and STK credentials"""
    class Meta:
        unknown = EXCLUDE

    pass_key = fields.Str(required=True, validate=_not_blank)
    initiator_name = fields.Str(required=True, validate=_not_blank)
    initiator_pass = fields.Str(required=True, validate=_not_blank)


class AppInfoSchema(Schema):
    """Daraja app consumer credentials"""
    class Meta:
        unknown = EXCLUDE

    consumer_key = fields.Str(required=True, validate=_not_blank)
    consumer_secret = fields.Str(required=True, validate=_not_blank)


class MpesaConfigSchema(Schema):
    """Client configuration schema"""
    class Meta:
        unknown = EXCLUDE

    env = fields.Str(required=True, validate=_not_blank)
    requester = fields.Raw(required=True, validate=_not_blank)
    short_code_type = fields.Str(required=True, validate=_not_blank)
    business_short_code = fields.Raw(required=True, validate=_not_blank)
    credentials = fields.Nested(CredentialsSchema, required=True)
    app_info = fields.Nested(AppInfoSchema, required=True)
    certificates_dir = fields.Str(load_default=None, allow_none=True)
    timeout = fields.Float(
        load_default=DEFAULT_TIMEOUT,
        validate=validate.Range(min=0, min_inclusive=False)
    )

    @post_load
    def make_config(self, data, **kwargs):
        return MpesaConfig(
            env=data['env'],
            requester=str(data['requester']),
            short_code_type=data['short_code_type'],
            business_short_code=str(data['business_short_code']),
            pass_key=data['credentials']['pass_key'],
            initiator_name=data['credentials']['initiator_name'],
            initiator_pass=data['credentials']['initiator_pass'],
            consumer_key=data['app_info']['consumer_key'],
            consumer_secret=data['app_info']['consumer_secret'],
            certificates_dir=data['certificates_dir'],
            timeout=data['timeout'],
        )


def _error_message(errors: Dict[str, Any]) -> str:
    """Pick the first offending field, in reporting order, and describe it."""
    for label, nested_key, names in _REQUIRED_FIELDS:
        section = errors.get(nested_key, {}) if nested_key else errors
        if not isinstance(section, dict):
            continue
        for name in names:
            # A dict here means the nested section exists but has its own errors
            if name in section and not isinstance(section[name], dict):
                return f"Missing required {label} parameter: {name}"

    return f"Invalid configuration parameter: {next(iter(errors))}"


def load_config(config: Mapping[str, Any]) -> MpesaConfig:
    """
    Validate a client configuration mapping

    Args:
        config: Mapping with env, requester, short_code_type, business_short_code,
            credentials{pass_key, initiator_name, initiator_pass} and
            app_info{consumer_key, consumer_secret}

    Returns:
        Immutable MpesaConfig

    Raises:
        ConfigurationError: naming the first missing or invalid field
    """
    if isinstance(config, MpesaConfig):
        return config
    if not isinstance(config, Mapping):
        raise ConfigurationError("Configuration must be a mapping")

    try:
        return MpesaConfigSchema().load(dict(config))
    except SchemaValidationError as exc:
        raise ConfigurationError(_error_message(exc.messages)) from exc
