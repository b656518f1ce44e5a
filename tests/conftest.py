"""
tests.conftest

Shared fixtures: a fake record store behind httpx.ASGITransport, a transport
wrapper that counts round trips, and a ready-to-use client.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

import httpx
import pytest
import pytest_asyncio
from fake_lrs import create_fake_lrs
from fastapi import FastAPI

from xapi_client.client import XAPIClient
from xapi_client.settings import ClientContext

ENDPOINT = "http://lrs.test/xapi/"


class CountingTransport(httpx.AsyncBaseTransport):
    """Delegates to another transport and keeps every request it forwarded."""

    def __init__(self, inner: httpx.AsyncBaseTransport) -> None:
        self._inner = inner
        self.requests: list[httpx.Request] = []

    @property
    def calls(self) -> int:
        return len(self.requests)

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return await self._inner.handle_async_request(request)

    async def aclose(self) -> None:
        await self._inner.aclose()


@pytest.fixture
def lrs_app() -> FastAPI:
    return create_fake_lrs(page_size=100)


@pytest.fixture
def transport(lrs_app: FastAPI) -> CountingTransport:
    return CountingTransport(httpx.ASGITransport(app=lrs_app))


@pytest.fixture
def context() -> ClientContext:
    return ClientContext(endpoint=ENDPOINT, user="aaron", password="1234")


@pytest_asyncio.fixture
async def client(transport: CountingTransport, context: ClientContext) -> AsyncIterator[XAPIClient]:
    async with httpx.AsyncClient(transport=transport) as http:
        yield XAPIClient(context=context, http=http)


class CallbackRecorder:
    """Completion handler that remembers each (error, resp, data) it receives."""

    def __init__(self) -> None:
        self.calls: list[tuple[object, object, object]] = []

    def __call__(self, error, resp, data) -> None:
        self.calls.append((error, resp, data))

    @property
    def only(self) -> tuple[object, object, object]:
        assert len(self.calls) == 1, f"expected exactly one delivery, got {len(self.calls)}"
        return self.calls[0]


@pytest.fixture
def recorder() -> CallbackRecorder:
    return CallbackRecorder()
