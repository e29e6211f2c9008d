"""Domain Events related to API calls, resilience and crawling.

Examples include events for when calls are initiated, retried, fail, or succeed.
"""

from dataclasses import dataclass, field
import logging
import time
from typing import Optional

logger = logging.getLogger(__name__)

# Base Event Class
@dataclass
class DomainEvent:
    """Base class for domain events."""
    pass

# --- Request Events ---

@dataclass
class RequestInitiated(DomainEvent):
    """Event triggered when a request is about to be dispatched."""
    method: str
    path: str
    attempt_number: int
    authenticated: bool
    timestamp: float = field(default_factory=time.time)

@dataclass
class RequestSucceeded(DomainEvent):
    """Event triggered when a request returns a 2xx response."""
    method: str
    path: str
    status_code: int
    latency_ms: float
    timestamp: float = field(default_factory=time.time)

@dataclass
class RequestFailed(DomainEvent):
    """Event triggered when a request fails definitively."""
    method: str
    path: str
    error_type: str
    error_message: str
    status_code: Optional[int] = None
    timestamp: float = field(default_factory=time.time)

@dataclass
class RetryScheduled(DomainEvent):
    """Event triggered when a rate-limited request is scheduled for retry."""
    method: str
    path: str
    attempt_number: int
    delay_seconds: float
    timestamp: float = field(default_factory=time.time)

@dataclass
class CredentialCleared(DomainEvent):
    """Event triggered when a 401 causes the stored token to be dropped."""
    method: str
    path: str
    timestamp: float = field(default_factory=time.time)

# --- Crawl Events ---

@dataclass
class PageFetched(DomainEvent):
    """Event triggered after each page of a crawl has been accumulated."""
    page_number: int
    items_on_page: int
    accumulated: int
    total_count: int
    has_next: bool
    timestamp: float = field(default_factory=time.time)


def log_event(event: DomainEvent) -> None:
    """Default event listener: writes the event to the debug log."""
    logger.debug(f"EVENT: {event}")
