from mpesa_sdk.services.dispatcher import DarajaResponse, RequestDispatcher
from mpesa_sdk.services.token_provider import TokenProvider
from mpesa_sdk.services.transport import HttpTransport, create_transport

__all__ = [
    'DarajaResponse',
    'RequestDispatcher',
    'TokenProvider',
    'HttpTransport',
    'create_transport',
]
