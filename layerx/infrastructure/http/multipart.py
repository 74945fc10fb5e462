"""Builds multipart/form-data payloads from Serializable body models.

Scalar fields of the model become form fields; each file extractor becomes
one file part (single file) or one part per list entry, named
``field[0]``, ``field[1]``, ... in list order. Extractors yielding None
produce no part at all.
"""

import logging
import secrets
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

from layerx.domain.interfaces.serializable import Serializable, is_scalar
from layerx.domain.models.files import FileRef

logger = logging.getLogger(__name__)

MULTIPART_CONTENT_TYPE = "multipart/form-data"

FilePart = Tuple[str, Tuple[str, bytes, str]]


@dataclass
class MultipartPayload:
    """Form fields and file parts ready to hand to httpx."""
    fields: Dict[str, str] = field(default_factory=dict)
    files: List[FilePart] = field(default_factory=list)
    boundary: str = field(default_factory=lambda: secrets.token_hex(16))

    @property
    def content_type(self) -> str:
        return f"{MULTIPART_CONTENT_TYPE}; boundary={self.boundary}"

    @property
    def part_names(self) -> List[str]:
        return list(self.fields) + [name for name, _ in self.files]

    @property
    def closing_delimiter(self) -> bytes:
        return f"--{self.boundary}--\r\n".encode("ascii")


def format_scalar(value: Any) -> str:
    """String form of a scalar form value. Booleans use JSON spelling."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class MultipartBuilder:
    """Turns a body model into a MultipartPayload."""

    def build(self, body: Serializable) -> MultipartPayload:
        """Builds the payload for one upload attempt.

        Args:
            body: The request body model.

        Returns:
            The form fields and file parts for the request.

        Raises:
            TypeError: If a file extractor returns something other than a
                FileRef, a list of FileRef or None.
        """
        payload = MultipartPayload()

        for name, value in body.to_fields().items():
            if is_scalar(value):
                payload.fields[name] = format_scalar(value)

        for name, extractor in body.files().items():
            value = extractor()
            if value is None:
                logger.debug(f"File field '{name}' is empty, no part sent")
                continue
            if isinstance(value, FileRef):
                payload.files.append((name, value.as_part()))
            elif isinstance(value, (list, tuple)):
                for index, file_ref in enumerate(value):
                    if not isinstance(file_ref, FileRef):
                        raise TypeError(f"File field '{name}[{index}]' must be a FileRef, got {type(file_ref).__name__}")
                    payload.files.append((f"{name}[{index}]", file_ref.as_part()))
            else:
                raise TypeError(f"File field '{name}' must yield a FileRef, a list of FileRef or None")

        logger.debug(f"Built multipart payload: fields={list(payload.fields)}, files={[n for n, _ in payload.files]}")
        return payload
