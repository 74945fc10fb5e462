"""Interface for bearer token storage.

Defines the contract the client uses to look up the API token attached
to outgoing requests. Persistence is left to the implementation.
"""

import abc
from typing import Optional


class TokenStore(abc.ABC):
    """Abstract Base Class for reading (and optionally updating) the API token."""

    @abc.abstractmethod
    async def read_token(self) -> Optional[str]:
        """Returns the current API token, or None when no session exists."""
        pass

    async def save_token(self, token: str) -> None:
        """Stores a new API token. Read-only stores ignore it."""
        return None

    async def clear_token(self) -> None:
        """Forgets the current API token. Read-only stores ignore it."""
        return None
