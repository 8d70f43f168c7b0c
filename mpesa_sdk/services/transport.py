from typing import Any, Dict, Optional, Protocol, Tuple

import requests


class HttpTransport(Protocol):
    """
    The HTTP capability the client depends on.

    ``requests.Session`` satisfies it; tests substitute a stub with the
    same ``get``/``post`` signatures returning response-like objects
    (``status_code``, ``ok``, ``json()``, ``raise_for_status()``).
    """

    def get(self, url: str, auth: Optional[Tuple[str, str]] = None,
            headers: Optional[Dict[str, str]] = None, timeout: Optional[float] = None,
            **kwargs: Any) -> requests.Response:
        ...

    def post(self, url: str, json: Any = None, headers: Optional[Dict[str, str]] = None,
             timeout: Optional[float] = None, **kwargs: Any) -> requests.Response:
        ...


def create_transport() -> requests.Session:
    """Default transport: a fresh session, one per client."""
    return requests.Session()
