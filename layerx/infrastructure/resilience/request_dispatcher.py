"""Service for executing API calls with single-flight coalescing and retries.

Concurrent callers using the same request key share one in-flight operation
and its outcome. Within an operation, timeouts and transport failures are
retried with linear backoff; classified errors (401, 422, 500, ...) raised
by the attempt are terminal and propagate immediately.
"""

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

import httpx

from layerx.domain.errors import (
    ClientError,
    RequestFailed,
    RequestTimeout,
    TransientError,
    TransportFailure,
)
from layerx.domain.events.api_events import (
    DomainEvent,
    RequestAbandoned,
    RequestCoalesced,
    RequestInitiated,
    RequestSucceeded,
    RetryScheduled,
)
from layerx.domain.models.common import RequestKey, RetryPolicy

logger = logging.getLogger(__name__)

R = TypeVar("R")

Attempt = Callable[[], Awaitable[R]]
EventListener = Callable[[DomainEvent], None]


class RequestDispatcher:
    """Owns the single-flight map and the retry/backoff state machine."""

    def __init__(
        self,
        retry_policy: Optional[RetryPolicy] = None,
        event_listener: Optional[EventListener] = None,
        log: Optional[logging.Logger] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initializes the RequestDispatcher.

        Args:
            retry_policy: Retry limits, per-attempt timeout and backoff step.
            event_listener: Optional callable receiving every emitted domain event.
            log: Logger to use instead of the module logger.
            sleep: Coroutine used for backoff delays.
        """
        self.retry_policy = retry_policy or RetryPolicy()
        self.event_listener = event_listener
        self.logger = log or logger
        self._sleep = sleep
        self._pending: Dict[str, "asyncio.Task[Any]"] = {}
        self._lock = asyncio.Lock()

        self.logger.info(
            f"RequestDispatcher initialized: max_retries={self.retry_policy.max_retries}, "
            f"timeout={self.retry_policy.timeout_per_attempt}s, "
            f"backoff_step={self.retry_policy.backoff_step}s"
        )

    def _dispatch_event(self, event: DomainEvent) -> None:
        self.logger.debug(f"EVENT: {event}")
        if self.event_listener is not None:
            try:
                self.event_listener(event)
            except Exception as e:
                self.logger.error(f"Event listener failed for {type(event).__name__}: {e}", exc_info=True)

    def in_flight(self, key: str) -> bool:
        """Whether an operation is currently registered for the key."""
        return key in self._pending

    async def execute(self, key: RequestKey, attempt: Attempt[R]) -> R:
        """Runs the attempt under single-flight, retry and timeout rules.

        Args:
            key: Single-flight key of the logical operation.
            attempt: Zero-argument coroutine factory performing one transport call.
                It is called once per attempt and must raise ClientError subclasses
                for classified failures.

        Returns:
            The result of the first successful attempt.

        Raises:
            RequestTimeout: If the final attempt timed out.
            TransportFailure: If the final attempt failed at the transport level.
            ClientError: Any non-transient error raised by an attempt.
        """
        async with self._lock:
            operation = self._pending.get(key)
            if operation is None:
                operation = asyncio.ensure_future(self._run_with_retry(key, attempt))
                self._pending[key] = operation
                operation.add_done_callback(lambda done, k=key: self._release(k, done))
            else:
                self.logger.debug(f"Joining in-flight request for key '{key}'")
                self._dispatch_event(RequestCoalesced(key=key))

        # A cancelled caller must not cancel the operation other callers share
        return await asyncio.shield(operation)

    def _release(self, key: str, operation: "asyncio.Task[Any]") -> None:
        if self._pending.get(key) is operation:
            del self._pending[key]
        # Mark the exception as retrieved when every caller went away
        if not operation.cancelled():
            operation.exception()

    async def _run_with_retry(self, key: str, attempt: Attempt[R]) -> R:
        policy = self.retry_policy
        last_exception: Optional[TransientError] = None

        for attempt_index in range(policy.max_retries + 1):
            attempt_number = attempt_index + 1
            try:
                self._dispatch_event(RequestInitiated(key=key, attempt_number=attempt_number))
                start_time = time.perf_counter()
                response = await asyncio.wait_for(attempt(), timeout=policy.timeout_per_attempt)
                latency_ms = (time.perf_counter() - start_time) * 1000

                self._dispatch_event(RequestSucceeded(
                    key=key,
                    attempt_number=attempt_number,
                    latency_ms=latency_ms,
                    status_code=getattr(response, "status_code", None),
                ))
                return response

            except asyncio.TimeoutError as e:
                last_exception = RequestTimeout(
                    f"Request '{key}' timed out after {policy.timeout_per_attempt}s",
                    attempts=attempt_number,
                )
                last_exception.__cause__ = e

            except TransientError as e:
                e.attempts = attempt_number
                last_exception = e

            except ClientError as e:
                self.logger.error(f"Non-retryable error for '{key}' on attempt {attempt_number}: {e}")
                self._fail(key, e, attempt_number)
                raise

            except httpx.TimeoutException as e:
                last_exception = RequestTimeout(
                    f"Request '{key}' timed out: {type(e).__name__}",
                    attempts=attempt_number,
                )
                last_exception.__cause__ = e

            except httpx.TransportError as e:
                last_exception = TransportFailure(
                    f"Request '{key}' failed: {type(e).__name__}: {e}",
                    attempts=attempt_number,
                )
                last_exception.__cause__ = e

            except Exception as e:
                # Unclassified failures are treated like transport failures
                self.logger.error(f"Unexpected error for '{key}' on attempt {attempt_number}: {e}", exc_info=True)
                last_exception = TransportFailure(
                    f"Request '{key}' failed: {type(e).__name__}: {e}",
                    attempts=attempt_number,
                )
                last_exception.__cause__ = e

            if attempt_index == policy.max_retries:
                self.logger.error(
                    f"Max retries ({policy.max_retries}) reached for '{key}'. Last error: {last_exception}"
                )
                self._fail(key, last_exception, attempt_number)
                raise last_exception

            delay = policy.backoff(attempt_index)
            self.logger.warning(
                f"Retryable error for '{key}' on attempt {attempt_number}/{policy.total_attempts}: "
                f"{type(last_exception).__name__}. Waiting {delay:.2f}s..."
            )
            self._dispatch_event(RetryScheduled(key=key, attempt_number=attempt_number, delay_seconds=delay))
            await self._sleep(delay)

        error = RequestFailed()
        self._fail(key, error, policy.total_attempts)
        raise error

    def _fail(self, key: str, error: ClientError, attempts: int) -> None:
        self._dispatch_event(RequestAbandoned(
            key=key,
            error_type=type(error).__name__,
            error_message=str(error),
            attempts=attempts,
        ))
