"""Interface for request body models.

Body models expose their JSON serialization, the scalar subset sent as
multipart form fields, and the named file extractors used for uploads.
"""

import abc
from typing import Any, Callable, Dict

from layerx.domain.models.common import Scalar
from layerx.domain.models.files import FileValue

FileExtractor = Callable[[], FileValue]


def is_scalar(value: Any) -> bool:
    return isinstance(value, (str, int, float, bool))


class Serializable(abc.ABC):
    """Abstract Base Class for request body models."""

    @abc.abstractmethod
    def to_json(self) -> Dict[str, Any]:
        """Returns the JSON-compatible serialization of the model."""
        pass

    def to_fields(self) -> Dict[str, Scalar]:
        """Returns the scalar (str/int/float/bool) entries of to_json(), in order."""
        return {key: value for key, value in self.to_json().items() if is_scalar(value)}

    def files(self) -> Dict[str, FileExtractor]:
        """Returns field name -> extractor yielding a file, a list of files or None."""
        return {}
