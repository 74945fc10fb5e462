"""Generic body models for callers that do not define their own."""

from typing import Any, Dict, List, Optional

from layerx.domain.interfaces.serializable import FileExtractor, Serializable
from layerx.domain.models.files import FileRef


class FormBody(Serializable):
    """Body built from plain values: a field map plus named files.

    A file name given one FileRef is sent as a single part; given several, as
    an ordered list of parts.
    """

    def __init__(
        self,
        fields: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, List[FileRef]]] = None,
    ):
        self.fields = dict(fields or {})
        self.file_groups = dict(files or {})

    def to_json(self) -> Dict[str, Any]:
        return dict(self.fields)

    def files(self) -> Dict[str, FileExtractor]:
        return {name: self._extractor(refs) for name, refs in self.file_groups.items()}

    @staticmethod
    def _extractor(refs: List[FileRef]) -> FileExtractor:
        if not refs:
            return lambda: None
        if len(refs) == 1:
            return lambda: refs[0]
        return lambda: list(refs)
