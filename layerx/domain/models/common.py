"""Defines common Value Objects used across the client layer.

These objects represent simple values or concepts like request keys,
HTTP methods and retry limits, ensuring consistency and type safety.
"""

from dataclasses import dataclass
from enum import Enum
from typing import NewType, Union

# === Core Value Objects ===

# Using NewType for semantic clarity, although they are strings at runtime.
RequestKey = NewType("RequestKey", str)     # Single-flight key, by convention the endpoint path

# Values that may travel as multipart form fields
Scalar = Union[str, int, float, bool]


class HttpMethod(str, Enum):
    """HTTP methods supported by the client."""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"

    @classmethod
    def parse(cls, value: Union[str, "HttpMethod"]) -> "HttpMethod":
        """Normalizes a method name ('get', 'POST', HttpMethod.PUT) to an HttpMethod.

        Raises:
            ValueError: If the method is not supported.
        """
        if isinstance(value, HttpMethod):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            raise ValueError(f"Unsupported HTTP method: {value}") from None


@dataclass(frozen=True)
class RetryPolicy:
    """Value Object representing retry and timeout configuration.

    Attributes:
        max_retries: Retries after the first attempt (total attempts = max_retries + 1).
        timeout_per_attempt: Seconds each attempt may take before it is cancelled.
        backoff_step: Seconds of delay per attempt index (linear backoff).
    """
    max_retries: int = 2
    timeout_per_attempt: float = 20.0
    backoff_step: float = 2.0

    @property
    def total_attempts(self) -> int:
        return self.max_retries + 1

    def backoff(self, attempt_index: int) -> float:
        """Delay to wait after the failed attempt with the given zero-based index."""
        return self.backoff_step * attempt_index
