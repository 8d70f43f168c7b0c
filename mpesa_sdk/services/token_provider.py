import requests

from mpesa_sdk.constants import EP_AUTH
from mpesa_sdk.errors import AuthenticationError
from mpesa_sdk.services.transport import HttpTransport
from mpesa_sdk.utils.logger import get_logger

logger = get_logger(__name__)


class TokenProvider:
    """Fetches a Daraja OAuth access token. Every call hits the token endpoint."""

    def __init__(
            self,
            transport: HttpTransport,
            base_url: str,
            consumer_key: str,
            consumer_secret: str,
            timeout: float
    ):
        self._transport = transport
        self._url = f"{base_url}/{EP_AUTH}"
        self._timeout = timeout
        self._auth = (consumer_key, consumer_secret)

    def fetch(self) -> str:
        """
        Request a new access token

        Returns:
            Bearer token string

        Raises:
            AuthenticationError: network failure, non-2xx status or no token in the body
        """
        try:
            resp = self._transport.get(self._url, auth=self._auth, timeout=self._timeout)
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError) as exc:
            logger.warning("Access token request failed: %s", exc)
            raise AuthenticationError(f"Failed to generate access token: {exc}") from exc

        token = data.get('access_token') if isinstance(data, dict) else None
        if not token:
            logger.warning("Access token missing from token endpoint response")
            raise AuthenticationError("Failed to generate access token")

        logger.debug("Access token obtained")
        return token
