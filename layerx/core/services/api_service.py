"""Application service exposing the client's single entry point.

Repositories and other consumers call ``execute`` (JSON requests) or
``upload`` (multipart POST). Each call goes through the request dispatcher
under the endpoint's single-flight key, is classified per attempt, and is
decoded into an ApiResponse. The outcome comes back as an ApiResult instead
of an exception, together with the error messages extracted from the body.
"""

import logging
from typing import Any, Awaitable, Callable, List, Optional, TypeVar, Union

import httpx

from layerx.domain.errors import ClientError
from layerx.domain.interfaces.serializable import Serializable
from layerx.domain.interfaces.token_store import TokenStore
from layerx.domain.models.api_response import ApiResponse, ApiResult
from layerx.domain.models.common import HttpMethod, RequestKey
from layerx.infrastructure.decoding.envelope_decoder import EnvelopeDecoder, identity
from layerx.infrastructure.decoding.status_classifier import ClassifiedResponse, StatusClassifier
from layerx.infrastructure.http.multipart import MultipartBuilder
from layerx.infrastructure.http.transport import HttpTransport
from layerx.infrastructure.resilience.request_dispatcher import RequestDispatcher

logger = logging.getLogger(__name__)

T = TypeVar("T")

Body = Union[Serializable, dict, list, None]


class ApiService:
    """Resilient API client: single-flight, retries, multipart, envelope decoding."""

    def __init__(
        self,
        transport: HttpTransport,
        dispatcher: RequestDispatcher,
        classifier: StatusClassifier,
        decoder: Optional[EnvelopeDecoder] = None,
        multipart_builder: Optional[MultipartBuilder] = None,
        token_store: Optional[TokenStore] = None,
        persist_tokens: bool = False,
        log: Optional[logging.Logger] = None,
    ):
        """Initializes the ApiService.

        Args:
            transport: Performs the HTTP exchanges.
            dispatcher: Single-flight and retry state machine.
            classifier: Status code classification, including the unauthorized hook.
            decoder: Envelope decoder (a default one is created if omitted).
            multipart_builder: Builder for upload payloads.
            token_store: Store updated with envelope tokens when persist_tokens is set.
            persist_tokens: Save the ``token`` of successful envelopes (login flows).
            log: Logger to use instead of the module logger.
        """
        self.transport = transport
        self.dispatcher = dispatcher
        self.classifier = classifier
        self.decoder = decoder or EnvelopeDecoder()
        self.multipart_builder = multipart_builder or MultipartBuilder()
        self.token_store = token_store
        self.persist_tokens = persist_tokens
        self.logger = log or logger

    async def execute(
        self,
        endpoint: str,
        method: Union[HttpMethod, str] = HttpMethod.GET,
        body: Body = None,
        from_json: Callable[[Any], T] = identity,
        key: Optional[str] = None,
    ) -> ApiResult[T]:
        """Performs a JSON request and decodes its envelope.

        Args:
            endpoint: Path relative to the API base URL.
            method: GET, POST, PUT, PATCH or DELETE.
            body: JSON body; Serializable models are sent as their to_json().
            from_json: Transform for the envelope payload.
            key: Single-flight key, defaults to the endpoint path.

        Returns:
            ApiResult holding the decoded response or the classified error.

        Raises:
            ValueError: If the HTTP method is not supported.
        """
        http_method = HttpMethod.parse(method)
        json_body = body.to_json() if isinstance(body, Serializable) else body

        async def attempt() -> ClassifiedResponse:
            response = await self.transport.send(http_method, endpoint, json_body)
            return await self._classify(response, endpoint)

        return await self._run(RequestKey(key or endpoint), endpoint, attempt, from_json)

    async def upload(
        self,
        endpoint: str,
        body: Serializable,
        from_json: Callable[[Any], T] = identity,
        key: Optional[str] = None,
    ) -> ApiResult[T]:
        """Performs a multipart POST built from the body model.

        Args:
            endpoint: Path relative to the API base URL.
            body: Model providing scalar fields and file extractors.
            from_json: Transform for the envelope payload.
            key: Single-flight key, defaults to the endpoint path.

        Returns:
            ApiResult holding the decoded response or the classified error.

        Raises:
            TypeError: If a file extractor yields an unsupported value.
            OSError: If a file on disk cannot be read.
        """
        # Built once: malformed bodies fail here instead of being retried
        payload = self.multipart_builder.build(body)

        async def attempt() -> ClassifiedResponse:
            response = await self.transport.send_multipart(endpoint, payload)
            return await self._classify(response, endpoint)

        return await self._run(RequestKey(key or endpoint), endpoint, attempt, from_json)

    async def _classify(self, response: httpx.Response, endpoint: str) -> ClassifiedResponse:
        # Parsed once per attempt, off the event loop when large
        document = await self.decoder.parse_document(response.content)
        return self.classifier.classify(response, endpoint, document)

    async def _run(
        self,
        key: RequestKey,
        endpoint: str,
        attempt: Callable[[], Awaitable[ClassifiedResponse]],
        from_json: Callable[[Any], T],
    ) -> ApiResult[T]:
        messages: List[str] = []
        try:
            outcome = await self.dispatcher.execute(key, attempt)
            messages = list(outcome.messages)
            response: ApiResponse[T] = self.decoder.decode_envelope(outcome.document, from_json)
        except ClientError as e:
            self.logger.error(f"Request to '{endpoint}' failed: {type(e).__name__}: {e}")
            return ApiResult(error=e, messages=list(e.messages) or messages)

        if self.persist_tokens and response.token and self.token_store is not None:
            await self.token_store.save_token(response.token)

        return ApiResult(response=response, messages=messages)

    # --- Convenience wrappers ---

    async def get(self, endpoint: str, from_json: Callable[[Any], T] = identity, **kwargs: Any) -> ApiResult[T]:
        return await self.execute(endpoint, HttpMethod.GET, None, from_json, **kwargs)

    async def post(self, endpoint: str, body: Body = None, from_json: Callable[[Any], T] = identity, **kwargs: Any) -> ApiResult[T]:
        return await self.execute(endpoint, HttpMethod.POST, body, from_json, **kwargs)

    async def put(self, endpoint: str, body: Body = None, from_json: Callable[[Any], T] = identity, **kwargs: Any) -> ApiResult[T]:
        return await self.execute(endpoint, HttpMethod.PUT, body, from_json, **kwargs)

    async def patch(self, endpoint: str, body: Body = None, from_json: Callable[[Any], T] = identity, **kwargs: Any) -> ApiResult[T]:
        return await self.execute(endpoint, HttpMethod.PATCH, body, from_json, **kwargs)

    async def delete(self, endpoint: str, body: Body = None, from_json: Callable[[Any], T] = identity, **kwargs: Any) -> ApiResult[T]:
        return await self.execute(endpoint, HttpMethod.DELETE, body, from_json, **kwargs)

    async def aclose(self) -> None:
        await self.transport.aclose()
