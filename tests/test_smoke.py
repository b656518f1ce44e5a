"""
tests.test_smoke

Minimal smoke tests to validate the client can reach a record store end to end.

Responsibilities:
- Ensure a client built from options talks to the in-process record store
  through httpx.ASGITransport.
"""

from __future__ import annotations

import httpx
import pytest
from fake_lrs import create_fake_lrs, make_statement

from xapi_client import XAPIClient


@pytest.mark.asyncio
async def test_about_and_statement_round_trip() -> None:
    app = create_fake_lrs()
    transport = httpx.ASGITransport(app=app)

    async with httpx.AsyncClient(transport=transport) as http:
        client = XAPIClient.from_options(
            {"endpoint": "http://test/xapi", "user": "aaron", "password": "1234"},
            http=http,
        )
        about = await client.get_about()
        assert about.resp.status == 200
        assert "1.0.3" in about.data["version"]

        posted = await client.post_statement(make_statement())
        fetched = await client.get_statements({"statementId": posted.data[0]})
        assert fetched.data["id"] == posted.data[0]


@pytest.mark.asyncio
async def test_client_owns_and_closes_its_http_client() -> None:
    async with XAPIClient.from_options({"endpoint": "http://test/xapi"}) as client:
        http = client._http
        assert not http.is_closed
    assert http.is_closed


# --- Module Notes -----------------------------------------------------------
# Per-operation behavior is covered in the test_client_* modules.
