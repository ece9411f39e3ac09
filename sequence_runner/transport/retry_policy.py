"""Retry policy for HTTP transport.

Provides bounded linear backoff for network errors and 5xx responses.
"""

from dataclasses import dataclass


@dataclass
class LinearRetryPolicy:
    """Retry policy with a linearly growing delay."""
    max_retries: int = 0
    delay: float = 1.0
    max_delay: float = 30.0

    def get_delay(self, attempt: int) -> float:
        """Calculate delay for a given retry attempt (0-indexed).

        Args:
            attempt: Current attempt number (0 = first retry).

        Returns:
            Delay in seconds before next retry.
        """
        return min(self.delay * (attempt + 1), self.max_delay)

    def should_retry(self, attempt: int) -> bool:
        """Whether another attempt is allowed after ``attempt`` failed."""
        return attempt < self.max_retries


def default_retry_policy() -> LinearRetryPolicy:
    """Create default retry policy (no retries)."""
    return LinearRetryPolicy()


def linear_retry_policy(retries: int, delay: float = 1.0) -> LinearRetryPolicy:
    """Create a policy retrying ``retries`` times, ``delay`` seconds apart and growing."""
    return LinearRetryPolicy(max_retries=max(0, retries), delay=delay)
