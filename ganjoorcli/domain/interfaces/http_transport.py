"""Interface for the raw HTTP transport.

The transport performs exactly one network call per `send`. It owns no retry
logic and does not interpret status codes; that is the resilient client's job.
"""

import abc
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ganjoorcli.domain.models.common import ApiPath, QueryParams


@dataclass
class TransportResponse:
    """Status and decoded body of one HTTP exchange."""
    status_code: int
    body: Any = None  # Decoded JSON, raw text if not JSON, None if empty
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300


class HttpTransport(abc.ABC):
    """Abstract Base Class for sending a single HTTP request."""

    @abc.abstractmethod
    async def send(
        self,
        method: str,
        path: ApiPath,
        *,
        params: Optional[QueryParams] = None,
        json: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> TransportResponse:
        """Sends one request and returns whatever status came back.

        Args:
            method: HTTP method.
            path: Path relative to the configured base endpoint.
            params: Optional query parameters.
            json: Optional JSON body.
            headers: Extra headers for this request only.

        Returns:
            The TransportResponse, for any status code.

        Raises:
            TransportError: If no response was received at all.
        """
        pass

    async def aclose(self) -> None:
        """Releases network resources. Optional for implementations."""
        pass
