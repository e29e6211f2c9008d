"""Defines common Value Objects used across different domain contexts.

These objects represent simple values like resource identifiers, request
paths and credentials, ensuring consistency and type safety.
"""

from typing import NewType, Dict, Any, Optional, TypedDict

# === Core Value Objects ===

# Using NewType for semantic clarity, although they are plain values at runtime.
ResourceId = NewType("ResourceId", int)        # Positive integer id of an archive resource
ApiPath = NewType("ApiPath", str)              # Path relative to the API base, e.g. '/poets/'
HttpMethod = NewType("HttpMethod", str)        # 'GET', 'POST', ...
AuthToken = NewType("AuthToken", str)          # Bearer token value
Cursor = NewType("Cursor", str)                # Opaque 'next'/'previous' pointer of a listing
QueryParams = NewType("QueryParams", Dict[str, Any])

# === Search Context ===
SearchQuery = NewType("SearchQuery", str)      # Free text typed by the user

# --- Structured Data ---
class BackoffPolicy(TypedDict):
    """Value Object representing retry backoff configuration as read from config."""
    max_attempts: int
    initial_delay: float
    factor: float


def clean_params(params: Optional[Dict[str, Any]]) -> Optional[QueryParams]:
    """Drops None-valued entries so optional filters are not sent upstream."""
    if not params:
        return None
    cleaned = {k: v for k, v in params.items() if v is not None}
    return QueryParams(cleaned) if cleaned else None
