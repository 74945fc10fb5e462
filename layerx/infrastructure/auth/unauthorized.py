"""Unauthorized hook implementations."""

import asyncio
import logging
from typing import Callable, Optional

from layerx.domain.interfaces.token_store import TokenStore
from layerx.domain.interfaces.unauthorized_hook import UnauthorizedHook
from layerx.domain.interfaces.user_interface import UserInterface

logger = logging.getLogger(__name__)

SESSION_EXPIRED_MESSAGE = "Your session has expired or the token is invalid. Please log in again."


class CallbackUnauthorizedHook(UnauthorizedHook):
    """Runs an arbitrary callable, e.g. a redirect to the login screen."""

    def __init__(self, callback: Callable[[], None]):
        self.callback = callback

    def on_unauthorized(self) -> None:
        self.callback()


class ConsoleUnauthorizedHook(UnauthorizedHook):
    """Tells the user to log in again and optionally forgets the stored token."""

    def __init__(self, ui: UserInterface, token_store: Optional[TokenStore] = None):
        self.ui = ui
        self.token_store = token_store
        self._clear_task: Optional[asyncio.Task] = None

    def on_unauthorized(self) -> None:
        logger.warning("Unauthorized access. Asking the user to log in again.")
        self.ui.display_error(SESSION_EXPIRED_MESSAGE)
        if self.token_store is not None:
            # Called from inside a running attempt, so schedule rather than await
            self._clear_task = asyncio.get_running_loop().create_task(self.token_store.clear_token())
