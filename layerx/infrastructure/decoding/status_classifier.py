"""Maps HTTP status codes to outcomes.

Runs inside each dispatcher attempt, so the errors it raises are terminal:
the dispatcher only retries timeouts and transport failures.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

import httpx

from layerx.domain.errors import (
    ClientError,
    ServerError,
    Unauthorized,
    UnexpectedStatus,
    ValidationError,
)
from layerx.domain.events.api_events import DomainEvent, UnauthorizedDetected
from layerx.domain.interfaces.unauthorized_hook import UnauthorizedHook
from layerx.infrastructure.decoding.error_messages import extract_messages_from, parse_json_object

logger = logging.getLogger(__name__)

SUCCESS_STATUSES = frozenset({200, 201})

UNAUTHORIZED_MESSAGE = "Unauthorized access. Please log in."
VALIDATION_FALLBACK = "Validation Error"
SERVER_ERROR_FALLBACK = "Internal Server Error"

# Marks a call where the caller did not parse the body beforehand
_NOT_PARSED = object()


@dataclass
class ClassifiedResponse:
    """A successful response together with its parsed body and extracted messages."""
    response: httpx.Response
    document: Any = None
    messages: List[str] = field(default_factory=list)

    @property
    def status_code(self) -> int:
        return self.response.status_code


def body_message(document: Any, fallback: str) -> str:
    """The body's ``message`` field when the body is a JSON object, else the fallback."""
    if isinstance(document, dict) and document.get("message") is not None:
        return str(document["message"])
    return fallback


class StatusClassifier:
    """Classifies one raw response per attempt."""

    def __init__(
        self,
        unauthorized_hook: Optional[UnauthorizedHook] = None,
        event_listener: Optional[Callable[[DomainEvent], None]] = None,
    ):
        self.unauthorized_hook = unauthorized_hook
        self.event_listener = event_listener

    def classify(self, response: httpx.Response, endpoint: str = "", document: Any = _NOT_PARSED) -> ClassifiedResponse:
        """Checks the status code of a response.

        Args:
            response: The raw response of one attempt.
            endpoint: Endpoint of the request, for logging and events.
            document: The body already parsed by the caller (None when it is not
                valid JSON). Parsed here from ``response.text`` when omitted.

        Returns:
            The response with its parsed body and error messages when the status is 200/201.

        Raises:
            Unauthorized: On 401, after the unauthorized hook ran.
            ValidationError: On 422.
            ServerError: On 500.
            UnexpectedStatus: On any other status code.
        """
        if document is _NOT_PARSED:
            document = parse_json_object(response.text)
        messages = extract_messages_from(document, endpoint)
        status = response.status_code

        if status in SUCCESS_STATUSES:
            return ClassifiedResponse(response=response, document=document, messages=messages)

        error: ClientError
        if status == 401:
            logger.warning("Unauthorized access. Redirecting to login.")
            self._notify_unauthorized(endpoint)
            error = Unauthorized(UNAUTHORIZED_MESSAGE, status_code=status, messages=messages)
        elif status == 422:
            error = ValidationError(body_message(document, VALIDATION_FALLBACK), status_code=status, messages=messages)
        elif status == 500:
            error = ServerError(body_message(document, SERVER_ERROR_FALLBACK), status_code=status, messages=messages)
        else:
            error = UnexpectedStatus(status, response.reason_phrase, messages=messages)

        logger.error(f"{endpoint or 'request'} failed with {status}: {error.message}")
        raise error

    def _notify_unauthorized(self, endpoint: str) -> None:
        if self.event_listener is not None:
            self.event_listener(UnauthorizedDetected(endpoint=endpoint))
        if self.unauthorized_hook is not None:
            # A failing hook must not turn the 401 into a retryable error
            try:
                self.unauthorized_hook.on_unauthorized()
            except Exception as e:
                logger.error(f"Unauthorized hook failed: {e}", exc_info=True)
        else:
            logger.debug("No unauthorized hook configured")
