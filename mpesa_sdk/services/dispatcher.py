from typing import Any, Dict, NamedTuple, Optional

import requests

from mpesa_sdk.errors import RequestError
from mpesa_sdk.services.token_provider import TokenProvider
from mpesa_sdk.services.transport import HttpTransport
from mpesa_sdk.utils.logger import get_logger

logger = get_logger(__name__)


class DarajaResponse(NamedTuple):
    body: Any
    status_code: int


def _parse_body(resp) -> Any:
    try:
        return resp.json()
    except ValueError:
        return None


def _transport_error_message(exc: requests.RequestException) -> str:
    """errorMessage, then ResponseDescription from an attached response, then the exception text."""
    resp = getattr(exc, 'response', None)
    body = _parse_body(resp) if resp is not None else None
    if isinstance(body, dict):
        message = body.get('errorMessage') or body.get('ResponseDescription')
        if message:
            return message
    return str(exc)


class RequestDispatcher:
    """Sends authenticated JSON requests to Daraja business endpoints."""

    def __init__(
            self,
            transport: HttpTransport,
            base_url: str,
            token_provider: TokenProvider,
            timeout: float
    ):
        self._transport = transport
        self._base_url = base_url
        self._token_provider = token_provider
        self._timeout = timeout

    def send(self, endpoint: str, payload: Dict[str, Any]) -> DarajaResponse:
        """
        POST ``payload`` to ``endpoint`` with a freshly fetched bearer token.

        Any HTTP response is returned whatever its status; the caller decides
        what counts as success. A body that is not JSON comes back as None.

        Raises:
            AuthenticationError: token could not be obtained
            RequestError: the request never produced a response
        """
        token = self._token_provider.fetch()
        headers = {
            'Content-Type': 'application/json',
            'Authorization': f'Bearer {token}',
        }
        url = f"{self._base_url}/{endpoint}"

        logger.debug("POST %s", endpoint)
        try:
            resp = self._transport.post(url, json=payload, headers=headers, timeout=self._timeout)
        except requests.RequestException as exc:
            message = _transport_error_message(exc)
            logger.warning("Request to %s failed: %s", endpoint, message)
            status_code: Optional[int] = getattr(exc.response, 'status_code', None)
            raise RequestError(message, status_code=status_code) from exc

        body = _parse_body(resp)
        logger.debug("%s responded with HTTP %s", endpoint, resp.status_code)
        return DarajaResponse(body=body, status_code=resp.status_code)
