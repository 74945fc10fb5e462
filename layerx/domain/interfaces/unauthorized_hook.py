"""Interface for reacting to 401 Unauthorized responses.

The client never depends on a UI layer: whatever should happen when a
session expires (redirect to a login screen, clear a token, ...) is
provided through this hook.
"""

import abc


class UnauthorizedHook(abc.ABC):
    """Abstract Base Class for the side effect run on a 401 response."""

    @abc.abstractmethod
    def on_unauthorized(self) -> None:
        """Called exactly once per 401 response, before Unauthorized is raised."""
        pass
