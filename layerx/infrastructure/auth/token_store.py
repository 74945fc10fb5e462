"""Token store implementations.

Persistent storage is outside the client's concern; these stores keep the
token in memory or read it from configuration.
"""

import logging
from typing import Callable, Optional

from layerx.domain.interfaces.token_store import TokenStore
from layerx.infrastructure.config.settings import get_api_token

logger = logging.getLogger(__name__)


class InMemoryTokenStore(TokenStore):
    """Keeps the token for the lifetime of the process."""

    def __init__(self, token: Optional[str] = None):
        self._token = token

    async def read_token(self) -> Optional[str]:
        return self._token

    async def save_token(self, token: str) -> None:
        self._token = token
        logger.debug("API token updated.")

    async def clear_token(self) -> None:
        self._token = None
        logger.debug("API token cleared.")


class ConfigTokenStore(TokenStore):
    """Reads the token from configuration (API_TOKEN / api.token) on every request.

    A token saved at runtime takes precedence over the configured one until cleared.
    """

    def __init__(self, token_getter: Callable[[], Optional[str]] = get_api_token):
        self._token_getter = token_getter
        self._override: Optional[str] = None
        self._cleared = False

    async def read_token(self) -> Optional[str]:
        if self._override is not None:
            return self._override
        if self._cleared:
            return None
        return self._token_getter()

    async def save_token(self, token: str) -> None:
        self._override = token
        self._cleared = False

    async def clear_token(self) -> None:
        self._override = None
        self._cleared = True
