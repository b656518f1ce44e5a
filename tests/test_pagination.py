"""
tests.test_pagination

Multi-page statement reads through continuation references.
"""

from __future__ import annotations

import httpx
import pytest

from xapi_client.errors import ProtocolError, ValidationError, ValidationKind
from xapi_client.orchestration.dispatcher import RequestDispatcher
from xapi_client.orchestration.pagination import PaginationWalker, continuation_of, statements_of
from xapi_client.settings import ClientContext


@pytest.mark.asyncio
async def test_zero_hops_returns_one_page(client, lrs_app, transport) -> None:
    lrs_app.state.store.seed_statements(5)

    res = await client.get_more_statements(0, {"limit": 1})

    assert isinstance(res.data, list)
    assert len(res.data) == 1
    assert transport.calls == 1


@pytest.mark.asyncio
async def test_one_hop_appends_second_page_in_server_order(client, lrs_app, transport) -> None:
    store = lrs_app.state.store
    store.seed_statements(5)

    res = await client.get_more_statements(1, {"limit": 1})

    assert [s["id"] for s in res.data] == [s["id"] for s in store.statements[:2]]
    assert transport.calls == 2
    assert transport.requests[1].url.path.startswith("/xapi/statements/more/")


@pytest.mark.asyncio
async def test_default_page_size_applies_without_limit(client, lrs_app) -> None:
    lrs_app.state.store.seed_statements(250)

    res = await client.get_more_statements(1)

    assert len(res.data) == 200


@pytest.mark.asyncio
async def test_more_hops_than_pages_stops_at_true_count(client, lrs_app, transport) -> None:
    lrs_app.state.store.seed_statements(3)

    res = await client.get_more_statements(10, {"limit": 2})

    assert len(res.data) == 3
    assert transport.calls == 2


@pytest.mark.asyncio
async def test_each_call_starts_with_empty_accumulator(client, lrs_app) -> None:
    lrs_app.state.store.seed_statements(4)

    first = await client.get_more_statements(1, {"limit": 2})
    second = await client.get_more_statements(0, {"limit": 2})

    assert len(first.data) == 4
    assert len(second.data) == 2


@pytest.mark.asyncio
async def test_empty_store_returns_empty_list(client) -> None:
    res = await client.get_more_statements(3, {"limit": 1})
    assert res.data == []
    assert res.resp.status == 200


@pytest.mark.asyncio
async def test_negative_hops_rejected_before_any_request(client, transport) -> None:
    with pytest.raises(ValidationError) as exc:
        await client.get_more_statements(-1)
    assert exc.value.kind is ValidationKind.INVALID_PARAMETERS
    assert transport.calls == 0


@pytest.mark.asyncio
async def test_callback_receives_accumulated_list(client, lrs_app, recorder) -> None:
    lrs_app.state.store.seed_statements(3)

    assert await client.get_more_statements(1, {"limit": 1}, callback=recorder) is None

    error, resp, data = recorder.only
    assert error is None
    assert resp.status == 200
    assert len(data) == 2


@pytest.mark.asyncio
async def test_failed_hop_surfaces_protocol_error() -> None:
    pages = {
        "/xapi/statements": {"statements": [{"id": "1"}], "more": "/xapi/statements/more/gone"},
    }

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path in pages:
            return httpx.Response(200, json=pages[request.url.path])
        return httpx.Response(400, json={"detail": "continuation expired"})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        walker = PaginationWalker(dispatcher=RequestDispatcher(http=http))
        with pytest.raises(ProtocolError) as exc:
            await walker.fetch_with_continuation(
                query=None,
                additional_hops=2,
                context=ClientContext(endpoint="http://lrs.test/xapi/", auth="Basic x"),
            )

    assert exc.value.status == 400


@pytest.mark.asyncio
async def test_empty_object_page_yields_no_records() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        walker = PaginationWalker(dispatcher=RequestDispatcher(http=http))
        res = await walker.fetch_with_continuation(
            query=None,
            additional_hops=1,
            context=ClientContext(endpoint="http://lrs.test/xapi/", auth="Basic x"),
        )

    assert res.data == []


def test_page_helpers() -> None:
    assert statements_of({"statements": [{"id": "a"}], "more": ""}) == [{"id": "a"}]
    assert statements_of({"id": "single"}) == [{"id": "single"}]
    assert statements_of(None) == []
    assert statements_of({}) == []
    assert statements_of({"more": ""}) == []
    assert continuation_of({"more": "/xapi/statements/more/1"}) == "/xapi/statements/more/1"
    assert continuation_of({"more": ""}) is None
    assert continuation_of({"statements": []}) is None
    assert continuation_of("not json") is None
