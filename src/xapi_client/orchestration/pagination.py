"""
xapi_client.orchestration.pagination

Multi-page statement retrieval.

Responsibilities:
- Issue the initial statement query verbatim, then follow the server's `more`
  continuation reference for up to N additional hops.
- Accumulate statements in server order; stop early when no reference is left.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from xapi_client.models import RequestDescriptor, XAPIResponse
from xapi_client.observability.logging import get_logger
from xapi_client.orchestration.dispatcher import RequestDispatcher
from xapi_client.orchestration.routing import statement_query
from xapi_client.settings import ClientContext

log = get_logger(__name__)


class PaginationWalker:
    def __init__(self, *, dispatcher: RequestDispatcher) -> None:
        self._dispatcher = dispatcher

    async def fetch_with_continuation(
        self,
        *,
        query: Mapping[str, Any] | None,
        additional_hops: int,
        context: ClientContext,
    ) -> XAPIResponse:
        """
        Returns the last page's envelope with `data` set to every statement
        collected. Hops run strictly one after another: each target is only
        known once the previous page has arrived.
        """

        page = await self._dispatcher.send(statement_query(query), context)
        statements = list(statements_of(page.data))

        for hop in range(1, additional_hops + 1):
            more = continuation_of(page.data)
            if more is None:
                log.debug("xapi.pagination.exhausted", hop=hop, requested=additional_hops, count=len(statements))
                break
            page = await self._dispatcher.send(RequestDescriptor(method="GET", path=more), context)
            statements.extend(statements_of(page.data))

        return XAPIResponse(resp=page.resp, data=statements)


def statements_of(data: Any) -> list[Any]:
    if isinstance(data, Mapping):
        if isinstance(data.get("statements"), list):
            return list(data["statements"])
        # Single-statement lookups (statementId=...) come back as the bare record.
        if "id" in data:
            return [dict(data)]
    return []


def continuation_of(data: Any) -> str | None:
    # The record store sends "" (or omits `more`) once results are exhausted.
    if not isinstance(data, Mapping):
        return None
    more = data.get("more")
    if isinstance(more, str) and more.strip():
        return more
    return None


# --- Module Notes -----------------------------------------------------------
# Continuation references are opaque: they are only resolved against the endpoint
# and sent back, never parsed, cached or reused across calls.
