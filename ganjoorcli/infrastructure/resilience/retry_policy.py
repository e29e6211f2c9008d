"""Retry policies for rate-limited requests.

A policy is plain configuration: how many attempts a request gets and how
long to wait before each retry. The waiting itself is done by whoever holds
the sleep function, so tests can inject a fake clock.
"""

from dataclasses import dataclass
from typing import Awaitable, Callable, List

from ganjoorcli.domain.models.common import BackoffPolicy

Sleeper = Callable[[float], Awaitable[None]]

READ_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})


@dataclass(frozen=True)
class RetryPolicy:
    """Exponential backoff schedule.

    Attributes:
        max_attempts: Total attempts, the first one included.
        initial_delay_s: Wait before the first retry.
        backoff_factor: Multiplier applied for every further retry.
    """
    max_attempts: int
    initial_delay_s: float
    backoff_factor: float = 2.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.initial_delay_s < 0 or self.backoff_factor < 1:
            raise ValueError("delays must be non-negative and non-decreasing")

    @property
    def max_retries(self) -> int:
        return self.max_attempts - 1

    def delay_for(self, retry_index: int) -> float:
        """Seconds to wait before retry number `retry_index` (0-based)."""
        return self.initial_delay_s * (self.backoff_factor ** retry_index)

    def schedule(self) -> List[float]:
        """Every delay this policy can produce, in order."""
        return [self.delay_for(n) for n in range(self.max_retries)]

    @classmethod
    def from_config(cls, config: BackoffPolicy) -> "RetryPolicy":
        return cls(
            max_attempts=int(config["max_attempts"]),
            initial_delay_s=float(config["initial_delay"]),
            backoff_factor=float(config["factor"]),
        )


# Reads are idempotent: 5 attempts, 2s, 4s, 8s, 16s.
READ_RETRY_POLICY = RetryPolicy(max_attempts=5, initial_delay_s=2.0)
# Writes carry no dedup token upstream: 3 attempts, 1s, 2s.
WRITE_RETRY_POLICY = RetryPolicy(max_attempts=3, initial_delay_s=1.0)


def is_read_method(method: str) -> bool:
    return method.upper() in READ_METHODS


def policy_for_method(
    method: str,
    read_policy: RetryPolicy = READ_RETRY_POLICY,
    write_policy: RetryPolicy = WRITE_RETRY_POLICY,
) -> RetryPolicy:
    """Picks the read or write policy for an HTTP method."""
    return read_policy if is_read_method(method) else write_policy
