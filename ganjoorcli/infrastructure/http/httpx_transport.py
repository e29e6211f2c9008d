"""HttpTransport implementation on top of httpx.

Standardizes base URL, timeout and JSON headers for every request. Performs
one network call per `send` and hands back whatever status came back.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from ganjoorcli.domain.errors import TransportError
from ganjoorcli.domain.interfaces.http_transport import HttpTransport, TransportResponse
from ganjoorcli.domain.models.common import ApiPath, QueryParams

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


def build_async_client(
    base_url: str,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    *,
    extra_headers: Optional[Dict[str, str]] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """Creates an `httpx.AsyncClient` with the archive's defaults.

    Args:
        base_url: Origin plus API prefix, e.g. 'http://localhost:8000/api'.
        timeout_seconds: Per-request timeout.
        extra_headers: Headers added to the defaults.
        transport: Optional low-level transport (httpx.MockTransport in tests).
    """
    headers = dict(DEFAULT_HEADERS)
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        base_url=base_url,
        timeout=httpx.Timeout(timeout_seconds),
        headers=headers,
        follow_redirects=True,
        transport=transport,
    )


def decode_body(response: httpx.Response) -> Any:
    """JSON if possible, raw text otherwise, None when there is no content."""
    if response.status_code == 204 or not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class HttpxTransport(HttpTransport):
    """Sends requests through a single shared httpx.AsyncClient."""

    def __init__(self, client: httpx.AsyncClient):
        self._client = client

    @classmethod
    def create(cls, base_url: str, timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS) -> "HttpxTransport":
        return cls(build_async_client(base_url, timeout_seconds))

    async def send(
        self,
        method: str,
        path: ApiPath,
        *,
        params: Optional[QueryParams] = None,
        json: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> TransportResponse:
        logger.debug(f"{method} {path} params={params}")
        try:
            response = await self._client.request(method, path, params=params, json=json, headers=headers)
        except httpx.TransportError as e:
            raise TransportError(
                f"Network failure on {method} {path}: {e}", original_exception=e, method=method, path=path,
            ) from e
        return TransportResponse(
            status_code=response.status_code,
            body=decode_body(response),
            headers=dict(response.headers),
        )

    async def aclose(self) -> None:
        await self._client.aclose()
