"""Main entry point for the layerx application.

Sets up the Typer CLI application, performs dependency injection (Composition Root),
defines CLI commands, and delegates execution to the CommandHandler.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx
import typer
from typing_extensions import Annotated

# --- Core Layer ---
from layerx.core.command_handler import CommandHandler
from layerx.core.services.api_service import ApiService

# --- Infrastructure Layer ---
from layerx.infrastructure.auth.token_store import ConfigTokenStore
from layerx.infrastructure.auth.unauthorized import ConsoleUnauthorizedHook
from layerx.infrastructure.cli.display import ConsoleDisplay
from layerx.infrastructure.config.settings import (
    get_base_url,
    get_config,
    get_retry_policy,
    load_configuration,
)
from layerx.infrastructure.decoding.envelope_decoder import EnvelopeDecoder
from layerx.infrastructure.decoding.status_classifier import StatusClassifier
from layerx.infrastructure.http.multipart import MultipartBuilder
from layerx.infrastructure.http.transport import USER_AGENT, HttpTransport
from layerx.infrastructure.monitoring.logger_setup import setup_logging
from layerx.infrastructure.resilience.request_dispatcher import RequestDispatcher

logger = logging.getLogger(__name__)


def build_http_client(base_url: str) -> httpx.AsyncClient:
    """Creates the shared httpx client. Timeouts are enforced per attempt by the dispatcher."""
    return httpx.AsyncClient(base_url=base_url, headers={"User-Agent": USER_AGENT}, timeout=None)


# --- Dependency Injection Container (Manual) ---

def create_dependencies(base_url: Optional[str] = None, verbose: bool = False) -> Dict[str, Any]:
    """Creates and wires up all dependencies for one CLI invocation.

    This acts as the Composition Root.
    """
    # 1. Load Configuration First
    load_configuration()
    log_level = "DEBUG" if verbose else get_config("logging.level", "WARNING")
    setup_logging(
        log_level=log_level,
        log_file=get_config("logging.file"),
        log_format=get_config("logging.format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"),
    )
    logger.info("Configuration and logging initialized.")

    dependencies: Dict[str, Any] = {}
    effective_base_url = base_url or get_base_url()

    # 2. Instantiate Infrastructure Adapters & Services
    dependencies['ui'] = ConsoleDisplay()
    dependencies['token_store'] = ConfigTokenStore()
    dependencies['unauthorized_hook'] = ConsoleUnauthorizedHook(
        ui=dependencies['ui'],
        token_store=dependencies['token_store'],
    )
    dependencies['transport'] = HttpTransport(
        base_url=effective_base_url,
        token_store=dependencies['token_store'],
        client=build_http_client(effective_base_url),
    )
    dependencies['dispatcher'] = RequestDispatcher(retry_policy=get_retry_policy())
    dependencies['classifier'] = StatusClassifier(unauthorized_hook=dependencies['unauthorized_hook'])

    # 3. Instantiate Core Services (injecting dependencies)
    dependencies['api_service'] = ApiService(
        transport=dependencies['transport'],
        dispatcher=dependencies['dispatcher'],
        classifier=dependencies['classifier'],
        decoder=EnvelopeDecoder(),
        multipart_builder=MultipartBuilder(),
        token_store=dependencies['token_store'],
        persist_tokens=True,
    )

    # 4. Instantiate Command Handler
    dependencies['command_handler'] = CommandHandler(
        api_service=dependencies['api_service'],
        ui=dependencies['ui'],
        token_store=dependencies['token_store'],
    )
    logger.info(f"All dependencies initialized (base URL: {effective_base_url}).")
    return dependencies


# --- Typer App Definition ---
app = typer.Typer(
    name="layerx",
    help="layerx: resilient API client with single-flight requests, retries and multipart uploads.",
    add_completion=False,
)


# --- Helper for Running Async Commands ---
def run_command(ctx: typer.Context, action: Callable[[CommandHandler], Awaitable[bool]]) -> None:
    """Builds the dependencies, runs one async command and maps failure to exit code 1."""
    options = ctx.obj or {}
    dependencies = create_dependencies(base_url=options.get("base_url"), verbose=options.get("verbose", False))

    async def runner() -> bool:
        try:
            return await action(dependencies['command_handler'])
        finally:
            await dependencies['api_service'].aclose()

    try:
        succeeded = asyncio.run(runner())
    except Exception as e:
        logger.error(f"Error executing command: {e}", exc_info=True)
        dependencies['ui'].display_error(f"Command execution failed: {e}")
        raise typer.Exit(code=1)

    if not succeeded:
        raise typer.Exit(code=1)


# --- CLI Commands ---

TokenOption = Annotated[
    Optional[str],
    typer.Option("--token", "-t", help="Bearer token for this call (overrides API_TOKEN).")
]


@app.command()
def request(
    ctx: typer.Context,
    method: Annotated[str, typer.Argument(help="HTTP method: GET, POST, PUT, PATCH or DELETE.")],
    endpoint: Annotated[str, typer.Argument(help="Endpoint path relative to the base URL.")],
    data: Annotated[Optional[str], typer.Option("--data", "-d", help="JSON request body.")] = None,
    token: TokenOption = None,
):
    """Send a JSON request and show the decoded response envelope."""
    run_command(ctx, lambda handler: handler.handle_request(method, endpoint, data=data, token=token))


@app.command()
def upload(
    ctx: typer.Context,
    endpoint: Annotated[str, typer.Argument(help="Endpoint path relative to the base URL.")],
    field: Annotated[Optional[List[str]], typer.Option("--field", "-f", help="Form field as name=value. Repeatable.")] = None,
    file: Annotated[Optional[List[str]], typer.Option("--file", "-F", help="File as name=path. Repeat a name to send a list.")] = None,
    token: TokenOption = None,
):
    """Send a multipart/form-data POST with form fields and files."""
    run_command(ctx, lambda handler: handler.handle_upload(endpoint, fields=field or [], files=file or [], token=token))


@app.callback()
def main_callback(
    ctx: typer.Context,
    base_url: Annotated[Optional[str], typer.Option("--base-url", help="API base URL (overrides API_BASE_URL).")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
):
    """Resilient API client."""
    ctx.obj = {"base_url": base_url, "verbose": verbose}


# --- Main Execution Guard ---

def cli_entry_point():
    """Function to be called by the script entry point in pyproject.toml."""
    app()


if __name__ == "__main__":
    cli_entry_point()
