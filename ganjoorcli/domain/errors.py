"""Failure taxonomy surfaced by the data-access layer.

Every failed request reaches callers as one of these exceptions. Only the
rate-limit case is recovered locally (by retrying); everything else
propagates.
"""

from typing import Optional


class ApiError(Exception):
    """Base class for all data-access failures."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        method: Optional[str] = None,
        path: Optional[str] = None,
    ):
        self.status_code = status_code
        self.method = method
        self.path = path
        super().__init__(message)


class Unauthorized(ApiError):
    """HTTP 401. The stored credential has already been cleared when this is raised."""


class NotFound(ApiError):
    """HTTP 404."""


class RetriesExhausted(ApiError):
    """Upstream kept answering 429 until the retry budget ran out."""

    def __init__(self, attempts: int, method: Optional[str] = None, path: Optional[str] = None):
        self.attempts = attempts
        super().__init__(
            f"Rate limited on {method} {path}: gave up after {attempts} attempts",
            status_code=429,
            method=method,
            path=path,
        )


class TransportError(ApiError):
    """Network-level failure; no HTTP response was received."""

    def __init__(
        self,
        message: str,
        original_exception: Optional[BaseException] = None,
        method: Optional[str] = None,
        path: Optional[str] = None,
    ):
        self.original_exception = original_exception
        super().__init__(message, status_code=None, method=method, path=path)


class ServerError(ApiError):
    """HTTP 5xx."""


class UnknownStatus(ApiError):
    """Any other non-success status."""


def classify_status(status_code: int, method: Optional[str] = None, path: Optional[str] = None) -> ApiError:
    """Maps a non-success HTTP status to its exception instance.

    429 is not classified here; it is handled by the retry loop and turns into
    RetriesExhausted only when the budget is spent.
    """
    target = f"{method} {path}"
    if status_code == 401:
        return Unauthorized(f"Unauthorized: {target}", status_code, method, path)
    if status_code == 404:
        return NotFound(f"Not found: {target}", status_code, method, path)
    if 500 <= status_code < 600:
        return ServerError(f"Server error {status_code}: {target}", status_code, method, path)
    return UnknownStatus(f"Unexpected status {status_code}: {target}", status_code, method, path)
