"""Resilient client: the single chokepoint for every remote read and write.

Adds bearer-token injection, structured error classification and bounded
exponential backoff for rate limiting (429) on top of a bare HttpTransport.
Every other failure propagates after one attempt.
"""

import asyncio
import logging
import time
from typing import Any, Callable, Dict, Optional

from ganjoorcli.domain.errors import RetriesExhausted, TransportError, Unauthorized, classify_status
from ganjoorcli.domain.events.api_events import (
    CredentialCleared, DomainEvent, RequestFailed, RequestInitiated,
    RequestSucceeded, RetryScheduled, log_event,
)
from ganjoorcli.domain.interfaces.http_transport import HttpTransport
from ganjoorcli.domain.interfaces.session_store import SessionStore
from ganjoorcli.domain.models.common import ApiPath, QueryParams
from ganjoorcli.infrastructure.resilience.retry_policy import (
    READ_RETRY_POLICY, WRITE_RETRY_POLICY, RetryPolicy, Sleeper, policy_for_method,
)

logger = logging.getLogger(__name__)

RATE_LIMITED = 429
UNAUTHORIZED = 401


class ResilientClient:
    """Executes one logical request and returns its decoded payload."""

    def __init__(
        self,
        transport: HttpTransport,
        session_store: Optional[SessionStore] = None,
        read_policy: RetryPolicy = READ_RETRY_POLICY,
        write_policy: RetryPolicy = WRITE_RETRY_POLICY,
        sleep: Sleeper = asyncio.sleep,
        event_listener: Callable[[DomainEvent], None] = log_event,
    ):
        """Initializes the ResilientClient.

        Args:
            transport: Performs the actual network call.
            session_store: Source of the optional bearer token. None means
                every request is anonymous.
            read_policy: Backoff schedule for GET requests.
            write_policy: Backoff schedule for POST/PUT/PATCH/DELETE.
            sleep: Awaitable sleep used between retries (inject a fake in tests).
            event_listener: Receives domain events for each request.
        """
        self.transport = transport
        self.session_store = session_store
        self.read_policy = read_policy
        self.write_policy = write_policy
        self._sleep = sleep
        self._dispatch = event_listener

        logger.info(
            f"ResilientClient initialized: read={read_policy.max_attempts} attempts "
            f"from {read_policy.initial_delay_s}s, write={write_policy.max_attempts} attempts "
            f"from {write_policy.initial_delay_s}s"
        )

    def _auth_headers(self) -> Dict[str, str]:
        if self.session_store is None:
            return {}
        token = self.session_store.get_token()
        if not token:
            return {}
        return {"Authorization": f"Bearer {token}"}

    def _clear_credential(self, method: str, path: str) -> None:
        if self.session_store is None:
            return
        self.session_store.clear_token()
        logger.warning(f"Received 401 for {method} {path}; stored credential cleared.")
        self._dispatch(CredentialCleared(method=method, path=path))

    async def request(
        self,
        method: str,
        path: ApiPath,
        *,
        params: Optional[QueryParams] = None,
        json: Any = None,
    ) -> Any:
        """Executes a request, retrying only on rate limiting.

        Args:
            method: HTTP method; GET uses the read policy, anything else the write policy.
            path: Caller-supplied path, not validated here.
            params: Optional query parameters.
            json: Optional JSON body for writes.

        Returns:
            The decoded response body (None for empty responses).

        Raises:
            Unauthorized: On 401, after the stored token has been cleared.
            NotFound: On 404.
            ServerError: On 5xx.
            UnknownStatus: On any other non-success status.
            TransportError: When no response was received.
            RetriesExhausted: When every attempt was answered with 429.
        """
        method = method.upper()
        policy = policy_for_method(method, self.read_policy, self.write_policy)

        for attempt in range(policy.max_attempts):
            # Token is re-read on every attempt; a concurrent 401 may have cleared it.
            headers = self._auth_headers()
            self._dispatch(RequestInitiated(
                method=method, path=path, attempt_number=attempt + 1, authenticated=bool(headers),
            ))
            start_time = time.perf_counter()
            try:
                response = await self.transport.send(method, path, params=params, json=json, headers=headers)
            except TransportError as e:
                logger.error(f"Transport failure on {method} {path}: {e}")
                self._dispatch(RequestFailed(
                    method=method, path=path, error_type=type(e).__name__, error_message=str(e),
                ))
                raise

            if response.is_success:
                latency_ms = (time.perf_counter() - start_time) * 1000
                self._dispatch(RequestSucceeded(
                    method=method, path=path, status_code=response.status_code, latency_ms=latency_ms,
                ))
                return response.body

            if response.status_code == RATE_LIMITED:
                if attempt < policy.max_retries:
                    delay = policy.delay_for(attempt)
                    logger.warning(
                        f"Rate limited on {method} {path} (attempt {attempt + 1}/{policy.max_attempts}), "
                        f"retrying in {delay:.2f}s..."
                    )
                    self._dispatch(RetryScheduled(
                        method=method, path=path, attempt_number=attempt + 1, delay_seconds=delay,
                    ))
                    await self._sleep(delay)
                    continue
                break

            if response.status_code == UNAUTHORIZED:
                self._clear_credential(method, path)

            error = classify_status(response.status_code, method, path)
            if isinstance(error, Unauthorized):
                logger.info(f"{method} {path} requires authentication.")
            else:
                logger.error(f"{method} {path} failed with status {response.status_code}")
            self._dispatch(RequestFailed(
                method=method, path=path, error_type=type(error).__name__,
                error_message=str(error), status_code=response.status_code,
            ))
            raise error

        logger.error(f"Max attempts ({policy.max_attempts}) reached for {method} {path} while rate limited.")
        exhausted = RetriesExhausted(attempts=policy.max_attempts, method=method, path=path)
        self._dispatch(RequestFailed(
            method=method, path=path, error_type=type(exhausted).__name__,
            error_message=str(exhausted), status_code=RATE_LIMITED,
        ))
        raise exhausted

    # --- Convenience verbs ---

    async def get(self, path: ApiPath, params: Optional[QueryParams] = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: ApiPath, data: Any = None) -> Any:
        return await self.request("POST", path, json=data)

    async def delete(self, path: ApiPath) -> Any:
        return await self.request("DELETE", path)

    async def aclose(self) -> None:
        await self.transport.aclose()
