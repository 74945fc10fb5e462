"""Response envelope and per-call result structures.

``ApiResponse`` mirrors the loosely-structured JSON envelope returned by the
upstream APIs; ``ApiResult`` is what the client entry point hands back: either
a decoded response or a classified error, plus the error messages extracted
from the response body for that call.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, List, Optional, TypeVar

if TYPE_CHECKING:
    from layerx.domain.errors import ClientError

T = TypeVar("T")


@dataclass
class ApiResponse(Generic[T]):
    """Decoded response envelope."""
    success: Optional[bool] = None
    message: Optional[str] = None
    code: Optional[int] = None
    data: Optional[T] = None
    token: Optional[str] = None


@dataclass
class ApiResult(Generic[T]):
    """Outcome of one client call: a response or an error, never both."""
    response: Optional[ApiResponse[T]] = None
    error: Optional["ClientError"] = None
    messages: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None and self.response is not None

    @property
    def data(self) -> Optional[T]:
        return self.response.data if self.response is not None else None

    def unwrap(self) -> ApiResponse[T]:
        """Returns the response, raising the stored error if the call failed."""
        if self.error is not None:
            raise self.error
        if self.response is None:
            raise ValueError("ApiResult holds neither a response nor an error")
        return self.response
