"""Extracts human-readable error messages from a parsed response body.

Priority: the body's ``errors`` list, else its ``message`` field, else a
fixed fallback. The result is returned to the caller for every processed
response instead of being kept in shared state.
"""

import json
import logging
from typing import Any, List, Optional

logger = logging.getLogger(__name__)

UNKNOWN_ERROR_MESSAGE = "Unknown error occurred."
EXTRACTION_FAILED_MESSAGE = "Error extracting message."


def parse_json_object(raw_body: str) -> Optional[dict]:
    """Parses the body as a JSON object, returning None when it is not one."""
    try:
        parsed = json.loads(raw_body)
    except (TypeError, ValueError):
        return None
    return parsed if isinstance(parsed, dict) else None


def extract_messages_from(document: Any, endpoint: str = "") -> List[str]:
    """Computes the error messages for one parsed response body.

    Args:
        document: The parsed body; anything but a JSON object counts as unparseable.
        endpoint: Endpoint the body came from, for logging.

    Returns:
        A fresh list of messages. Empty only when the body carries an empty
        ``errors`` list.
    """
    if not isinstance(document, dict):
        messages = [EXTRACTION_FAILED_MESSAGE]
    elif isinstance(document.get("errors"), list):
        messages = [str(error) for error in document["errors"]]
    elif document.get("message") is not None:
        messages = [str(document["message"])]
    else:
        messages = [UNKNOWN_ERROR_MESSAGE]
    logger.debug(f"Api EndPoint: {endpoint} - Extracted messages: {messages}")
    return messages
