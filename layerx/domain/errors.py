"""Error taxonomy of the client layer.

Transient errors (timeouts, transport failures) are retried by the request
dispatcher up to the retry policy limit. Every other classified error is
terminal and surfaces to the caller immediately.
"""

from typing import List, Optional


class ClientError(Exception):
    """Base class for all classified client errors."""

    retryable = False

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        messages: Optional[List[str]] = None,
    ):
        self.message = message
        self.status_code = status_code
        # Human-readable messages extracted from the response body, if any
        self.messages: List[str] = list(messages or [])
        super().__init__(message)


# --- Transient errors ---

class TransientError(ClientError):
    """A failure worth retrying. Carries the number of attempts once terminal."""

    retryable = True

    def __init__(self, message: str, attempts: int = 1, **kwargs):
        self.attempts = attempts
        super().__init__(message, **kwargs)


class RequestTimeout(TransientError):
    """An attempt exceeded its time budget."""


class TransportFailure(TransientError):
    """Connection, protocol or other transport-level failure."""


# --- Terminal errors ---

class Unauthorized(ClientError):
    """The server answered 401. The unauthorized hook has already run."""


class ValidationError(ClientError):
    """The server answered 422."""


class ServerError(ClientError):
    """The server answered 500."""


class UnexpectedStatus(ClientError):
    """Any status code without a dedicated classification."""

    def __init__(self, status_code: int, reason_phrase: str, **kwargs):
        self.reason_phrase = reason_phrase
        super().__init__(f"API Error: {status_code} - {reason_phrase}", status_code=status_code, **kwargs)


class DecodeError(ClientError):
    """The response body could not be decoded into the expected envelope."""


class RequestFailed(ClientError):
    """Raised when the retry loop ends without an outcome."""

    def __init__(self, message: str = "Failed to perform request", **kwargs):
        super().__init__(message, **kwargs)
