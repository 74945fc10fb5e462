"""HTTP transport built on httpx.AsyncClient.

Adds the default headers (content type, Accept, bearer token from the
injected TokenStore) and performs exactly one HTTP exchange per call.
Retrying and coalescing are the dispatcher's job.
"""

import json
import logging
from typing import Any, Dict, Optional

import httpx

from layerx.domain.interfaces.token_store import TokenStore
from layerx.domain.models.common import HttpMethod
from layerx.infrastructure.http.multipart import MultipartPayload

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"
USER_AGENT = "layerx-client"


class HttpTransport:
    """Async HTTP client for communication with the API server."""

    def __init__(
        self,
        base_url: str,
        token_store: Optional[TokenStore] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """
        Initialize a new transport.

        Args:
            base_url: Base URL every endpoint path is appended to.
            token_store: Source of the bearer token, if any.
            client: Preconfigured httpx client (e.g. with a MockTransport in tests).
        """
        self.base_url = base_url.rstrip("/")
        self.token_store = token_store
        # Timeouts are enforced per attempt by the dispatcher
        self.client = client or httpx.AsyncClient(
            base_url=self.base_url,
            headers={"User-Agent": USER_AGENT},
            timeout=None,
        )

    async def __aenter__(self) -> "HttpTransport":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    async def _default_headers(self, content_type: str = JSON_CONTENT_TYPE) -> Dict[str, str]:
        headers = {
            "Content-Type": content_type,
            "Accept": JSON_CONTENT_TYPE,
        }
        token = await self.token_store.read_token() if self.token_store else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _url(self, endpoint: str) -> str:
        if endpoint.startswith(("http://", "https://")):
            return endpoint
        return f"{self.base_url}/{endpoint.lstrip('/')}"

    async def send(self, method: HttpMethod, endpoint: str, body: Any = None) -> httpx.Response:
        """
        Perform one JSON request.

        Args:
            method: HTTP method.
            endpoint: Path relative to the base URL.
            body: JSON-serializable body, sent for every method except GET.

        Returns:
            The raw response, whatever its status code.
        """
        headers = await self._default_headers()
        content = None
        if body is not None and method is not HttpMethod.GET:
            content = json.dumps(body).encode("utf-8")

        logger.debug(f"{method.value} {endpoint}")
        return await self.client.request(method.value, self._url(endpoint), headers=headers, content=content)

    async def send_multipart(self, endpoint: str, payload: MultipartPayload) -> httpx.Response:
        """
        Perform one multipart POST.

        Args:
            endpoint: Path relative to the base URL.
            payload: Form fields and file parts.

        Returns:
            The raw response, whatever its status code.
        """
        # httpx reuses the boundary announced in the Content-Type header
        headers = await self._default_headers(payload.content_type)

        logger.debug(f"POST {endpoint} (multipart, {len(payload.files)} file part(s))")
        url = self._url(endpoint)

        if not payload.part_names:
            # A multipart body with no parts still needs its closing delimiter
            return await self.client.post(url, headers=headers, content=payload.closing_delimiter)

        data: Optional[Dict[str, str]] = payload.fields
        files: list = list(payload.files)
        if not files:
            # httpx only switches to multipart encoding when file parts exist
            files = [(name, (None, value.encode("utf-8"))) for name, value in payload.fields.items()]
            data = None

        return await self.client.post(url, headers=headers, data=data, files=files)
