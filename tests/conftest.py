from typing import Callable, List

import httpx
import pytest
from typer.testing import CliRunner
from unittest.mock import MagicMock

from layerx.core.services.api_service import ApiService
from layerx.domain.interfaces.unauthorized_hook import UnauthorizedHook
from layerx.domain.models.common import RetryPolicy
from layerx.infrastructure.auth.token_store import InMemoryTokenStore
from layerx.infrastructure.config.settings import clear_test_config
from layerx.infrastructure.decoding.status_classifier import StatusClassifier
from layerx.infrastructure.http.transport import HttpTransport
from layerx.infrastructure.resilience.request_dispatcher import RequestDispatcher

BASE_URL = "https://api.test"


class SleepRecorder:
    """Stands in for asyncio.sleep and records requested delays."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture(scope="session")
def runner():
    """Provides a Typer CliRunner instance."""
    return CliRunner()


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def token_store() -> InMemoryTokenStore:
    return InMemoryTokenStore("test-token")


@pytest.fixture
def unauthorized_hook():
    return MagicMock(spec=UnauthorizedHook)


@pytest.fixture
def make_service(token_store, unauthorized_hook, sleep_recorder):
    """Factory building an ApiService whose HTTP traffic goes to a handler function.

    The handler receives each httpx.Request and returns an httpx.Response (or raises
    an httpx exception). Every request seen is appended to ``service.requests``.
    """
    def factory(handler: Callable[[httpx.Request], httpx.Response], **service_kwargs) -> ApiService:
        requests: List[httpx.Request] = []

        def recording_handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return handler(request)

        client = httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(recording_handler))
        service = ApiService(
            transport=HttpTransport(BASE_URL, token_store=token_store, client=client),
            dispatcher=RequestDispatcher(
                retry_policy=RetryPolicy(timeout_per_attempt=1.0),
                sleep=sleep_recorder,
            ),
            classifier=StatusClassifier(unauthorized_hook=unauthorized_hook),
            token_store=token_store,
            **service_kwargs,
        )
        service.requests = requests
        return service

    return factory


@pytest.fixture(autouse=True)
def isolate_config(monkeypatch):
    """Keep real environment settings out of the tests."""
    for name in ("API_BASE_URL", "API_TOKEN", "LAYERX_MAX_RETRIES", "LAYERX_TIMEOUT_SECONDS",
                 "LAYERX_BACKOFF_STEP_SECONDS", "LAYERX_LOG_LEVEL", "LAYERX_LOG_FILE"):
        monkeypatch.delenv(name, raising=False)
    yield
    clear_test_config()
