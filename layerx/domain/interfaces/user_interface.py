"""Interface for presenting client results to the user.

Defines the contract for displaying responses, errors, warnings and
informational messages, allowing different UI implementations (console,
GUI, test doubles).
"""

import abc
from typing import Any

from layerx.domain.errors import ClientError
from layerx.domain.models.api_response import ApiResponse


class UserInterface(abc.ABC):
    """Abstract Base Class for user interaction."""

    @abc.abstractmethod
    def display_response(self, response: ApiResponse[Any], **kwargs: Any) -> None:
        """Displays a decoded response envelope.

        Args:
            response: The decoded response.
            **kwargs: Additional arguments for formatting (e.g., title).
        """
        pass

    @abc.abstractmethod
    def display_client_error(self, error: ClientError, **kwargs: Any) -> None:
        """Displays a classified client error with its extracted messages.

        Args:
            error: The error raised for the call.
            **kwargs: Additional arguments for formatting.
        """
        pass

    @abc.abstractmethod
    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message to the user.

        Args:
            error_message: The error message string.
            **kwargs: Additional arguments for formatting.
        """
        pass

    @abc.abstractmethod
    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        """Displays a warning message to the user.

        Args:
            warning_message: The warning message string.
            **kwargs: Additional arguments for formatting.
        """
        pass
