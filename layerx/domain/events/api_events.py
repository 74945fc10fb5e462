"""Domain Events related to API calls and resilience.

Emitted by the request dispatcher when calls start, are coalesced onto an
in-flight call, are retried, succeed or fail definitively.
"""

from dataclasses import dataclass, field
import time
from typing import Optional

# Base Event Class
@dataclass
class DomainEvent:
    """Base class for domain events."""
    pass

# --- Specific API Events ---

@dataclass
class RequestInitiated(DomainEvent):
    """Event triggered when an attempt is about to be made."""
    key: str
    attempt_number: int
    timestamp: float = field(default_factory=time.time)

@dataclass
class RequestCoalesced(DomainEvent):
    """Event triggered when a caller joins an in-flight request for the same key."""
    key: str
    timestamp: float = field(default_factory=time.time)

@dataclass
class RequestSucceeded(DomainEvent):
    """Event triggered when an attempt returns a response."""
    key: str
    attempt_number: int
    latency_ms: float
    status_code: Optional[int] = None
    timestamp: float = field(default_factory=time.time)

@dataclass
class RequestAbandoned(DomainEvent):
    """Event triggered when a request is given up (retries exhausted or terminal error)."""
    key: str
    error_type: str
    error_message: str
    attempts: int
    timestamp: float = field(default_factory=time.time)

@dataclass
class RetryScheduled(DomainEvent):
    """Event triggered when a retry is scheduled for a failed attempt."""
    key: str
    attempt_number: int
    delay_seconds: float
    timestamp: float = field(default_factory=time.time)

@dataclass
class UnauthorizedDetected(DomainEvent):
    """Event triggered when the server answers 401 and the hook is invoked."""
    endpoint: str
    timestamp: float = field(default_factory=time.time)
