import pytest
from unittest.mock import MagicMock
from rich.console import Console
from rich.syntax import Syntax

from layerx.domain.errors import ValidationError
from layerx.domain.models.api_response import ApiResponse
from layerx.infrastructure.cli.display import ConsoleDisplay

@pytest.fixture
def mock_console():
    """Fixture to create a mock rich Console object."""
    return MagicMock()

@pytest.fixture
def console_display(mock_console: MagicMock):
    """Fixture to create a ConsoleDisplay instance with a mocked console."""
    return ConsoleDisplay(console=mock_console)

def test_display_response_prints_payload_as_json(console_display: ConsoleDisplay, mock_console: MagicMock):
    """Envelope table first, then the payload as JSON syntax."""
    console_display.display_response(ApiResponse(success=True, message="ok", data={"theme": "dark"}))

    assert mock_console.print.call_count == 2
    payload = mock_console.print.call_args_list[1][0][0]
    assert isinstance(payload, Syntax)

def test_display_response_without_payload(console_display: ConsoleDisplay, mock_console: MagicMock):
    console_display.display_response(ApiResponse(success=False, message="nothing"))

    mock_console.print.assert_called_once()

def test_display_client_error_lists_body_messages():
    """Rendered through a recording console to check the visible text."""
    console = Console(record=True, width=100)
    display = ConsoleDisplay(console=console)
    error = ValidationError("Invalid", status_code=422, messages=["Invalid", "email: missing"])

    display.display_client_error(error)

    text = console.export_text()
    assert "ValidationError (422)" in text
    assert "email: missing" in text
    assert text.count("Invalid") == 1

def test_display_warning_logs_and_prints(console_display: ConsoleDisplay, mock_console: MagicMock, caplog):
    console_display.display_warning("careful")

    mock_console.print.assert_called_once()
    assert "careful" in caplog.text
