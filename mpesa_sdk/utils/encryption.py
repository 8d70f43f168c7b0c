import base64
import os
from datetime import datetime, timezone
from typing import Optional

from cryptography import x509
from cryptography.hazmat.primitives.asymmetric import padding

from mpesa_sdk.constants import CERTIFICATE_FILES, PRODUCTION
from mpesa_sdk.errors import ConfigurationError

DEFAULT_CERTIFICATES_DIR = os.path.join(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__))),
    'certificates'
)


def generate_timestamp(now: Optional[datetime] = None) -> str:
    """Daraja timestamp, ``YYYYMMDDHHmmss`` in UTC."""
    now = now or datetime.now(timezone.utc)
    return now.strftime('%Y%m%d%H%M%S')


def generate_password(business_short_code: str, pass_key: str, timestamp: str) -> str:
    """
    Generate the Lipa na M-Pesa Online password.

    Password = Base64(BusinessShortCode + Passkey + Timestamp)
    """
    raw = f"{business_short_code}{pass_key}{timestamp}"
    return base64.b64encode(raw.encode('utf-8')).decode('utf-8')


def certificate_path(env: str, certificates_dir: Optional[str] = None) -> str:
    """Path of the Daraja public certificate for ``env``."""
    name = CERTIFICATE_FILES[PRODUCTION] if env == PRODUCTION else CERTIFICATE_FILES['sandbox']
    return os.path.join(certificates_dir or DEFAULT_CERTIFICATES_DIR, name)


def load_certificate(data: bytes) -> x509.Certificate:
    """Parse a PEM or DER encoded X.509 certificate."""
    if data.lstrip().startswith(b'-----BEGIN'):
        return x509.load_pem_x509_certificate(data)
    return x509.load_der_x509_certificate(data)


def generate_security_credential(
        initiator_pass: str,
        env: str,
        certificates_dir: Optional[str] = None
) -> str:
    """
    Encrypt the initiator password with the environment's public certificate.

    The certificate file is read once and closed; only the Base64 ciphertext
    (RSA, PKCS#1 v1.5 padding) is returned.

    Raises:
        ConfigurationError: certificate missing, unreadable, or encryption failed
    """
    path = certificate_path(env, certificates_dir)
    if not os.path.isfile(path):
        raise ConfigurationError(
            f"Failed to generate security credential: certificate not found at {path}. "
            "Download it from the Daraja portal, or set certificates_dir / MPESA_CERTIFICATES_DIR"
        )
    try:
        with open(path, 'rb') as f:
            certificate = load_certificate(f.read())
        encrypted = certificate.public_key().encrypt(
            initiator_pass.encode('utf-8'),
            padding.PKCS1v15()
        )
    except (OSError, ValueError, TypeError, AttributeError) as exc:
        raise ConfigurationError(f"Failed to generate security credential: {exc}") from exc

    return base64.b64encode(encrypted).decode('utf-8')
