"""
Pytest Configuration and Fixtures
"""
import datetime
import json
from unittest.mock import Mock

import pytest
import requests
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID

from mpesa_sdk import Mpesa

INITIATOR_PASS = "Safaricom999!*!"


def _self_signed_certificate(key, common_name):
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    now = datetime.datetime.now(datetime.timezone.utc)
    return (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(days=1))
        .not_valid_after(now + datetime.timedelta(days=30))
        .sign(key, hashes.SHA256())
    )


@pytest.fixture(scope='session')
def rsa_keys():
    """One throwaway key pair per environment."""
    return {
        'sandbox': rsa.generate_private_key(public_exponent=65537, key_size=2048),
        'production': rsa.generate_private_key(public_exponent=65537, key_size=2048),
    }


@pytest.fixture(scope='session')
def certificates_dir(tmp_path_factory, rsa_keys):
    """Sandbox certificate in PEM, production certificate in DER."""
    directory = tmp_path_factory.mktemp('certificates')

    sandbox = _self_signed_certificate(rsa_keys['sandbox'], 'sandbox.test')
    (directory / 'SandboxCertificate.cer').write_bytes(
        sandbox.public_bytes(serialization.Encoding.PEM)
    )

    production = _self_signed_certificate(rsa_keys['production'], 'production.test')
    (directory / 'ProductionCertificate.cer').write_bytes(
        production.public_bytes(serialization.Encoding.DER)
    )

    return str(directory)


@pytest.fixture
def initiator_pass():
    return INITIATOR_PASS


@pytest.fixture
def base_config(certificates_dir):
    return {
        'env': 'sandbox',
        'requester': '254708374149',
        'short_code_type': 'paybill',
        'business_short_code': '174379',
        'credentials': {
            'pass_key': 'bfb279f9aa9bdbcf158e97dd71a467cd2e0c893059b10f78e6b72ada1ed2c919',
            'initiator_name': 'testapi',
            'initiator_pass': INITIATOR_PASS,
        },
        'app_info': {
            'consumer_key': 'test_consumer_key',
            'consumer_secret': 'test_consumer_secret',
        },
        'certificates_dir': certificates_dir,
    }


def mock_http_response(json_data, status_code=200):
    """Return a mock requests.Response whose .json() returns json_data."""
    resp = Mock()
    resp.ok = 200 <= status_code < 400
    resp.status_code = status_code
    if json_data is None:
        resp.json.side_effect = ValueError("Expecting value")
        resp.text = ""
    else:
        resp.json.return_value = json_data
        resp.text = json.dumps(json_data)
    if status_code >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(
            f"{status_code} Client Error", response=resp
        )
    return resp


@pytest.fixture
def make_response():
    return mock_http_response


@pytest.fixture
def token_response():
    """Valid Daraja OAuth token response."""
    return mock_http_response({"access_token": "daraja_tok_abc", "expires_in": "3599"})


@pytest.fixture
def transport(token_response):
    """Stub transport: token endpoint succeeds, business POST returns a bare 200."""
    stub = Mock()
    stub.get.return_value = token_response
    stub.post.return_value = mock_http_response({"ResponseCode": "0"})
    return stub


@pytest.fixture
def client(base_config, transport):
    return Mpesa(base_config, transport=transport)


@pytest.fixture
def till_client(base_config, transport):
    return Mpesa({**base_config, 'short_code_type': 'till'}, transport=transport)
