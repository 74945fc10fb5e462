"""Decodes raw JSON bodies into ApiResponse envelopes.

Upstream APIs do not agree on where the payload lives: some use ``data``,
others wrap it under an arbitrary top-level key. When ``data`` is absent the
decoder takes the first key, in document order, that is not envelope
metadata and holds an object or a list. When several such keys exist the
first one wins; nothing else disambiguates them.
"""

import asyncio
import json
import logging
from typing import Any, Callable, Optional, TypeVar, Union

from layerx.domain.errors import DecodeError
from layerx.domain.models.api_response import ApiResponse

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Bodies above this many bytes are parsed off the event loop
LARGE_BODY_THRESHOLD = 100_000

ENVELOPE_KEYS = frozenset({"status", "success", "code", "error", "message", "token"})


def identity(value: Any) -> Any:
    return value


def extract_data(envelope: dict) -> Optional[Any]:
    """Finds the payload of an envelope.

    Returns:
        The ``data`` value when present and non-null, else the first non-envelope
        object/list value in document order, else None.
    """
    if envelope.get("data") is not None:
        return envelope["data"]
    for key, value in envelope.items():
        if key in ENVELOPE_KEYS:
            continue
        if isinstance(value, (dict, list)):
            logger.debug(f"No 'data' key, using payload found under '{key}'")
            return value
    return None


def _optional_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def _optional_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.debug(f"Ignoring non-integer envelope code: {value!r}")
        return None


class EnvelopeDecoder:
    """Turns a raw response body into ApiResponse[T]."""

    def __init__(self, large_body_threshold: int = LARGE_BODY_THRESHOLD):
        self.large_body_threshold = large_body_threshold

    async def parse(self, raw_body: Union[str, bytes]) -> Any:
        """Parses JSON, moving bodies larger than the threshold (in bytes) to a worker thread.

        Raises:
            DecodeError: If the body is not valid JSON.
        """
        size = len(raw_body) if isinstance(raw_body, bytes) else len(raw_body.encode("utf-8"))
        try:
            if size > self.large_body_threshold:
                logger.debug(f"Parsing {size} byte body in a worker thread")
                return await asyncio.to_thread(json.loads, raw_body)
            return json.loads(raw_body)
        except ValueError as e:
            raise DecodeError(f"Response body is not valid JSON: {e}") from e

    async def parse_document(self, raw_body: Union[str, bytes]) -> Optional[Any]:
        """Like parse, but an invalid body yields None instead of raising."""
        try:
            return await self.parse(raw_body)
        except DecodeError as e:
            logger.debug(f"Unparseable response body: {e}")
            return None

    async def decode(self, raw_body: Union[str, bytes], from_json: Callable[[Any], T] = identity) -> ApiResponse[T]:
        """Decodes a response body.

        Args:
            raw_body: The raw response text or bytes.
            from_json: Transform applied to the extracted payload. Never called with None.

        Returns:
            The decoded envelope.

        Raises:
            DecodeError: If the body is not a JSON object or from_json fails.
        """
        return self.decode_envelope(await self.parse(raw_body), from_json)

    def decode_envelope(self, envelope: Any, from_json: Callable[[Any], T] = identity) -> ApiResponse[T]:
        """Builds the ApiResponse from an already parsed body.

        Raises:
            DecodeError: If the body is not a JSON object or from_json fails.
        """
        if not isinstance(envelope, dict):
            raise DecodeError(f"Expected a JSON object envelope, got {type(envelope).__name__}")

        success = envelope.get("success") is True or envelope.get("status") == "success"

        data: Optional[T] = None
        payload = extract_data(envelope)
        if payload is not None:
            try:
                data = from_json(payload)
            except Exception as e:
                raise DecodeError(f"Failed to convert response payload: {type(e).__name__}: {e}") from e

        return ApiResponse(
            success=success,
            message=_optional_str(envelope.get("message")),
            code=_optional_int(envelope.get("code")),
            data=data,
            token=_optional_str(envelope.get("token")),
        )
