"""Command Handler: Orchestrates CLI command execution.

Receives commands from the main entry point (main.py), turns their raw
string arguments into request bodies, delegates the call to the ApiService
and renders the outcome through the UserInterface.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from layerx.core.services.api_service import ApiService
from layerx.domain.interfaces.token_store import TokenStore
from layerx.domain.interfaces.user_interface import UserInterface
from layerx.domain.models.api_response import ApiResult
from layerx.domain.models.bodies import FormBody
from layerx.domain.models.common import HttpMethod
from layerx.domain.models.files import FileRef

logger = logging.getLogger(__name__)


def split_assignment(raw: str, option: str) -> Tuple[str, str]:
    """Splits 'name=value' as given to --field/--file options."""
    name, sep, value = raw.partition("=")
    if not sep or not name:
        raise ValueError(f"Invalid {option} value '{raw}', expected name=value")
    return name, value


class CommandHandler:
    """Handles incoming commands and delegates to the ApiService."""

    def __init__(
        self,
        api_service: ApiService,
        ui: UserInterface,
        token_store: Optional[TokenStore] = None,
    ):
        """Initializes the CommandHandler with required services."""
        self.api_service = api_service
        self.ui = ui
        self.token_store = token_store

    async def _apply_token(self, token: Optional[str]) -> None:
        if token and self.token_store is not None:
            await self.token_store.save_token(token)

    def _render(self, result: ApiResult[Any]) -> bool:
        if result.ok:
            self.ui.display_response(result.response)
            if not result.response.success:
                self.ui.display_warning("The server did not report success for this request.")
            return True
        self.ui.display_client_error(result.error)
        return False

    async def handle_request(
        self,
        method: str,
        endpoint: str,
        data: Optional[str] = None,
        token: Optional[str] = None,
    ) -> bool:
        """Handles the 'request' command.

        Returns:
            True when the call produced a response, False otherwise.
        """
        logger.info(f"Handling 'request' command: {method} {endpoint}")
        try:
            http_method = HttpMethod.parse(method)
            body = json.loads(data) if data else None
        except ValueError as e:
            self.ui.display_error(f"Invalid request: {e}")
            return False

        await self._apply_token(token)
        result = await self.api_service.execute(endpoint, http_method, body)
        return self._render(result)

    async def handle_upload(
        self,
        endpoint: str,
        fields: Sequence[str] = (),
        files: Sequence[str] = (),
        token: Optional[str] = None,
    ) -> bool:
        """Handles the 'upload' command.

        Args:
            endpoint: Target endpoint.
            fields: 'name=value' form fields.
            files: 'name=path' files; repeating a name sends a file list.
            token: Optional bearer token for this invocation.

        Returns:
            True when the call produced a response, False otherwise.
        """
        logger.info(f"Handling 'upload' command: {endpoint} ({len(files)} file(s))")
        try:
            form_fields: Dict[str, Any] = dict(split_assignment(raw, "--field") for raw in fields)
            file_groups: Dict[str, List[FileRef]] = {}
            for raw in files:
                name, path = split_assignment(raw, "--file")
                if not Path(path).is_file():
                    raise ValueError(f"File not found: {path}")
                file_groups.setdefault(name, []).append(FileRef.from_path(path))
        except ValueError as e:
            self.ui.display_error(f"Invalid upload: {e}")
            return False

        await self._apply_token(token)
        try:
            result = await self.api_service.upload(endpoint, FormBody(form_fields, file_groups))
        except OSError as e:
            logger.error(f"Upload failed reading files: {e}", exc_info=True)
            self.ui.display_error(f"Could not read upload files: {e}")
            return False
        return self._render(result)
