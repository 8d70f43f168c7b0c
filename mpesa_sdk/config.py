import os
from typing import Any, Dict, Optional

from dotenv import find_dotenv, load_dotenv

from mpesa_sdk.constants import DEFAULT_TIMEOUT


def config_from_env(dotenv_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Build a client configuration from MPESA_* environment variables

    A .env file is loaded first (``dotenv_path``, or the nearest one found
    from the working directory); variables already set in the environment
    take precedence. Missing values stay None so validation names them.

    Args:
        dotenv_path: Optional path to a .env file

    Returns:
        Configuration mapping accepted by Mpesa()
    """
    load_dotenv(dotenv_path or find_dotenv(usecwd=True))

    return {
        'env':                 os.getenv('MPESA_ENV', 'sandbox'),
        'requester':           os.getenv('MPESA_REQUESTER'),
        'short_code_type':     os.getenv('MPESA_SHORTCODE_TYPE'),
        'business_short_code': os.getenv('MPESA_SHORTCODE'),
        'credentials': {
            'pass_key':        os.getenv('MPESA_PASSKEY'),
            'initiator_name':  os.getenv('MPESA_INITIATOR_NAME'),
            'initiator_pass':  os.getenv('MPESA_INITIATOR_PASSWORD'),
        },
        'app_info': {
            'consumer_key':    os.getenv('MPESA_CONSUMER_KEY'),
            'consumer_secret': os.getenv('MPESA_CONSUMER_SECRET'),
        },
        'certificates_dir':    os.getenv('MPESA_CERTIFICATES_DIR'),
        'timeout':             os.getenv('MPESA_TIMEOUT', DEFAULT_TIMEOUT),
    }
