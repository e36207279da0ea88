"""
Shared fixtures for the short-link service tests.

Environment overrides are applied before any `zye` module is imported so
that settings pick them up.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test_zye.db")
os.environ.setdefault("AUTO_CREATE_TABLES", "false")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

from types import SimpleNamespace
from typing import Optional

import httpx
import pytest

from zye.api.schemas import LinkRecord
from zye.core.exceptions import StoreError
from zye.services.link_store import LinkStore
from zye.services.preview import PreviewGenerator
from zye.services.redirect_service import RedirectService
from zye.services.templates import TemplateRenderer

BROWSER_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
)
FACEBOOK_UA = "facebookexternalhit/1.1 (+http://www.facebook.com/externalhit_uatext.php)"


class InMemoryLinkStore(LinkStore):
    """Dict-backed link store that records calls."""

    def __init__(self):
        self.records: dict[str, LinkRecord] = {}
        self.get_calls: list[str] = []
        self.delete_calls: list[str] = []
        self.fail_with: Optional[Exception] = None

    async def get(self, code: str) -> Optional[LinkRecord]:
        self.get_calls.append(code)
        if self.fail_with is not None:
            raise self.fail_with
        record = self.records.get(code)
        if record is None:
            return None
        return record.model_copy(update={"code": code})

    async def delete(self, code: str) -> None:
        self.delete_calls.append(code)
        self.records.pop(code, None)

    async def put(self, code: str, record: LinkRecord) -> None:
        self.records[code] = record


class FetchRecorder:
    """httpx.MockTransport handler that records outbound requests."""

    def __init__(self, status_code: int = 200, body: str = "", error: Optional[Exception] = None):
        self.status_code = status_code
        self.body = body
        self.error = error
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(
            self.status_code,
            text=self.body,
            headers={"Content-Type": "text/html; charset=utf-8"},
        )


def make_request(user_agent: str = BROWSER_UA, **query: str) -> SimpleNamespace:
    """Minimal stand-in for a Starlette request."""
    return SimpleNamespace(headers={"user-agent": user_agent}, query_params=dict(query))


@pytest.fixture
def store() -> InMemoryLinkStore:
    return InMemoryLinkStore()


@pytest.fixture
def renderer() -> TemplateRenderer:
    return TemplateRenderer()


@pytest.fixture
def fetcher() -> FetchRecorder:
    """Destination fetches fail with 503 unless a test configures otherwise."""
    return FetchRecorder(status_code=503)


@pytest.fixture
def preview(renderer, fetcher) -> PreviewGenerator:
    return PreviewGenerator(
        renderer,
        base_url="https://zye.me",
        timeout=2.0,
        transport=httpx.MockTransport(fetcher),
    )


@pytest.fixture
def service(store, renderer, preview) -> RedirectService:
    return RedirectService(store, renderer, preview)


@pytest.fixture
def failing_store_error() -> StoreError:
    return StoreError("connection refused", original_error=ConnectionError("refused"))
