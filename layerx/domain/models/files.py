"""File references used by multipart uploads."""

import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple, Union

DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class FileRef:
    """A file to upload, either on disk or already in memory.

    Exactly one of ``path`` or ``content`` must be set.
    """
    path: Optional[Path] = None
    content: Optional[bytes] = None
    filename: Optional[str] = None
    content_type: Optional[str] = None

    def __post_init__(self) -> None:
        if (self.path is None) == (self.content is None):
            raise ValueError("FileRef needs exactly one of 'path' or 'content'")
        if self.content is not None and not self.filename:
            raise ValueError("FileRef built from content needs a filename")

    @classmethod
    def from_path(cls, path: Union[str, Path], content_type: Optional[str] = None) -> "FileRef":
        return cls(path=Path(path), content_type=content_type)

    @property
    def name(self) -> str:
        if self.filename:
            return self.filename
        return self.path.name  # type: ignore[union-attr]

    @property
    def media_type(self) -> str:
        if self.content_type:
            return self.content_type
        guessed, _ = mimetypes.guess_type(self.name)
        return guessed or DEFAULT_CONTENT_TYPE

    def read(self) -> bytes:
        if self.content is not None:
            return self.content
        return self.path.read_bytes()  # type: ignore[union-attr]

    def as_part(self) -> Tuple[str, bytes, str]:
        """Returns the (filename, content, content_type) triple httpx expects."""
        return self.name, self.read(), self.media_type


# What a file extractor may yield for one field
FileValue = Union[FileRef, List[FileRef], None]
