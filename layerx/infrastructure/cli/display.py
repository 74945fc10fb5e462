import json
import logging
from typing import Any, Optional

from rich.box import HEAVY, ROUNDED, SIMPLE
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text

from layerx.domain.errors import ClientError
from layerx.domain.interfaces.user_interface import UserInterface
from layerx.domain.models.api_response import ApiResponse

logger = logging.getLogger(__name__)


class ConsoleDisplay(UserInterface):
    """Concrete implementation of UserInterface using the rich library for console output."""

    def __init__(self, console: Optional[Console] = None):
        """Initializes the rich Console."""
        self._console = console or Console()

    @property
    def console(self) -> Console:
        """Get the Rich console instance for direct operations."""
        return self._console

    def display_response(self, response: ApiResponse[Any], **kwargs: Any) -> None:
        """Displays the envelope metadata as a table and the payload as JSON.

        Args:
            response: The decoded response.
            **kwargs: Additional arguments including:
                - title: Panel title (default: "Response")
        """
        title = kwargs.get("title", "Response")
        status_style = "green" if response.success else "yellow"

        table = Table(show_header=False, box=ROUNDED, border_style=status_style, padding=(0, 1))
        table.add_column("Field", style="bold")
        table.add_column("Value")
        table.add_row("success", f"[{status_style}]{response.success}[/{status_style}]")
        if response.message is not None:
            table.add_row("message", response.message)
        if response.code is not None:
            table.add_row("code", str(response.code))
        if response.token is not None:
            table.add_row("token", "[dim]<received>[/dim]")

        self.console.print(Panel(table, title=f"[bold]{title}[/bold]", title_align="left", box=SIMPLE))

        if response.data is not None:
            try:
                payload = json.dumps(response.data, indent=2, ensure_ascii=False, default=str)
                self.console.print(Syntax(payload, "json", word_wrap=True))
            except (TypeError, ValueError) as e:
                # Fallback if the payload is not JSON-like
                logger.debug(f"Falling back to plain payload output: {e}")
                self.console.print(repr(response.data))

    def display_client_error(self, error: ClientError, **kwargs: Any) -> None:
        """Displays a classified error with the messages extracted from the body.

        Args:
            error: The error raised for the call.
        """
        lines = [error.message]
        status = f" ({error.status_code})" if error.status_code is not None else ""
        extra = [m for m in error.messages if m != error.message]
        lines.extend(f"  - {message}" for message in extra)
        self.display_error("\n".join(lines), title=f"{type(error).__name__}{status}")

    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message in a distinct style.

        Args:
            error_message: The error message to display.
        """
        title = kwargs.get("title", "Error")
        panel = Panel(
            Text(error_message, style="white"),
            title=f"[bold red]{title}[/bold red]",
            border_style="red",
            box=HEAVY,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        """Displays a warning message.

        Args:
            warning_message: The warning message to display.
        """
        logger.warning(f"Display warning: {warning_message}")
        panel = Panel(
            Text(warning_message, style="white"),
            title="[bold yellow]Warning[/bold yellow]",
            border_style="yellow",
            box=HEAVY,
            padding=(0, 1)
        )
        self.console.print(panel)
