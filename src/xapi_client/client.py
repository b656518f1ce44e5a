"""
xapi_client.client

Public client facade for an xAPI record store.

Responsibilities:
- Expose one coroutine per protocol operation (statements, state, profiles,
  activities, agents, about).
- Snapshot the client context at call start and run the call through
  validation -> preconditions -> dispatch.
- Honor the dual completion contract: await the result, or pass `callback`.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

import httpx

from xapi_client.errors import ValidationError
from xapi_client.models import Attachment, XAPIResponse
from xapi_client.observability.logging import call_context, get_logger
from xapi_client.orchestration.concurrency import content_hash
from xapi_client.orchestration.dispatcher import Callback, RequestDispatcher, deliver, reject
from xapi_client.orchestration.pagination import PaginationWalker
from xapi_client.orchestration.routing import prepare
from xapi_client.orchestration import validation as ops
from xapi_client.settings import ClientContext, get_context

log = get_logger(__name__)

Agent = Mapping[str, Any]
Attachments = Sequence[Attachment | Mapping[str, Any]]


class XAPIClient:
    """
    Every operation performs at most one round trip (`get_more_statements`
    chains several, sequentially). Nothing is cached between calls.

    Without `callback` an operation returns `XAPIResponse` or raises an
    `XAPIError`. With `callback` it calls `callback(error, resp, data)` exactly
    once and returns None.
    """

    def __init__(
        self,
        *,
        context: ClientContext | None = None,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self._context = context or get_context()
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient()
        self._dispatcher = RequestDispatcher(http=self._http)
        self._walker = PaginationWalker(dispatcher=self._dispatcher)

    @classmethod
    def from_options(cls, options: Mapping[str, Any], *, http: httpx.AsyncClient | None = None) -> XAPIClient:
        return cls(context=ClientContext.from_options(options), http=http)

    @property
    def context(self) -> ClientContext:
        return self._context

    def change_config(self, options: Mapping[str, Any] | None = None, **kwargs: Any) -> ClientContext:
        # Calls already running keep the context they captured.
        self._context = self._context.with_options({**(options or {}), **kwargs})
        return self._context

    @staticmethod
    def hash(value: Any) -> str:
        return content_hash(value)

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> XAPIClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()

    async def _run(self, operation: str, op: ops.Operation, callback: Callback | None) -> XAPIResponse | None:
        context = self._context
        with call_context(operation):
            prepared = prepare(op)
            if isinstance(prepared, ValidationError):
                log.debug("xapi.rejected", kind=prepared.kind.name, detail=prepared.detail)
                await reject(prepared, callback, strict=context.strict_callbacks)
                return None
            return await deliver(self._dispatcher.send(prepared, context), callback)

    # --- statements ---------------------------------------------------------

    async def put_statement(
        self,
        statement: Mapping[str, Any],
        statement_id: str,
        attachments: Attachments | None = None,
        *,
        callback: Callback | None = None,
    ) -> XAPIResponse | None:
        return await self._run("put_statement", ops.PutStatement(statement, statement_id, attachments), callback)

    async def post_statement(
        self,
        statement: Mapping[str, Any],
        attachments: Attachments | None = None,
        *,
        callback: Callback | None = None,
    ) -> XAPIResponse | None:
        return await self._run("post_statement", ops.PostStatement(statement, attachments), callback)

    async def post_statements(
        self,
        statements: Sequence[Mapping[str, Any]],
        *,
        callback: Callback | None = None,
    ) -> XAPIResponse | None:
        return await self._run("post_statements", ops.PostStatements(statements), callback)

    async def get_statements(
        self,
        query: Mapping[str, Any] | None = None,
        *,
        callback: Callback | None = None,
    ) -> XAPIResponse | None:
        return await self._run("get_statements", ops.GetStatements(query), callback)

    async def get_more_statements(
        self,
        additional_hops: int,
        query: Mapping[str, Any] | None = None,
        *,
        callback: Callback | None = None,
    ) -> XAPIResponse | None:
        """
        Statement query plus up to `additional_hops` continuation hops.
        `data` is the flat list of statements gathered across pages.
        """

        context = self._context
        with call_context("get_more_statements"):
            err = ops.validate(ops.GetMoreStatements(additional_hops, query))
            if err is not None:
                await reject(err, callback, strict=context.strict_callbacks)
                return None
            walk = self._walker.fetch_with_continuation(
                query=query,
                additional_hops=additional_hops,
                context=context,
            )
            return await deliver(walk, callback)

    # --- state --------------------------------------------------------------

    async def put_state(
        self,
        activity_id: str,
        agent: Agent,
        state_id: str,
        registration: str | None,
        value: Any,
        etag_header: str | None = None,
        etag: str | None = None,
        *,
        callback: Callback | None = None,
    ) -> XAPIResponse | None:
        op = ops.WriteState(activity_id, agent, state_id, registration, value, etag_header=etag_header, etag=etag)
        return await self._run("put_state", op, callback)

    async def post_state(
        self,
        activity_id: str,
        agent: Agent,
        state_id: str,
        registration: str | None,
        value: Mapping[str, Any],
        *,
        callback: Callback | None = None,
    ) -> XAPIResponse | None:
        op = ops.WriteState(activity_id, agent, state_id, registration, value, merge=True)
        return await self._run("post_state", op, callback)

    async def get_state(
        self,
        activity_id: str,
        agent: Agent,
        state_id: str | None = None,
        registration: str | None = None,
        since: Any = None,
        *,
        callback: Callback | None = None,
    ) -> XAPIResponse | None:
        op = ops.ReadState(activity_id, agent, state_id, registration, since)
        return await self._run("get_state", op, callback)

    async def delete_state(
        self,
        activity_id: str,
        agent: Agent,
        state_id: str | None = None,
        registration: str | None = None,
        *,
        callback: Callback | None = None,
    ) -> XAPIResponse | None:
        op = ops.DeleteState(activity_id, agent, state_id, registration)
        return await self._run("delete_state", op, callback)

    # --- activities / agents ------------------------------------------------

    async def get_activities(self, activity_id: str, *, callback: Callback | None = None) -> XAPIResponse | None:
        return await self._run("get_activities", ops.GetActivities(activity_id), callback)

    async def get_agents(self, agent: Agent, *, callback: Callback | None = None) -> XAPIResponse | None:
        return await self._run("get_agents", ops.GetAgents(agent), callback)

    async def get_about(self, *, callback: Callback | None = None) -> XAPIResponse | None:
        return await self._run("get_about", ops.GetAbout(), callback)

    # --- activity profile ---------------------------------------------------

    async def put_activity_profile(
        self,
        activity_id: str,
        profile_id: str,
        value: Any,
        etag_header: str | None = None,
        etag: str | None = None,
        *,
        callback: Callback | None = None,
    ) -> XAPIResponse | None:
        op = ops.WriteActivityProfile(activity_id, profile_id, value, etag_header=etag_header, etag=etag)
        return await self._run("put_activity_profile", op, callback)

    async def post_activity_profile(
        self,
        activity_id: str,
        profile_id: str,
        value: Mapping[str, Any],
        *,
        callback: Callback | None = None,
    ) -> XAPIResponse | None:
        op = ops.WriteActivityProfile(activity_id, profile_id, value, merge=True)
        return await self._run("post_activity_profile", op, callback)

    async def get_activity_profile(
        self,
        activity_id: str,
        profile_id: str | None = None,
        since: Any = None,
        *,
        callback: Callback | None = None,
    ) -> XAPIResponse | None:
        op = ops.ReadActivityProfile(activity_id, profile_id, since)
        return await self._run("get_activity_profile", op, callback)

    async def delete_activity_profile(
        self,
        activity_id: str,
        profile_id: str,
        *,
        callback: Callback | None = None,
    ) -> XAPIResponse | None:
        op = ops.DeleteActivityProfile(activity_id, profile_id)
        return await self._run("delete_activity_profile", op, callback)

    # --- agent profile ------------------------------------------------------

    async def put_agent_profile(
        self,
        agent: Agent,
        profile_id: str,
        value: Any,
        etag_header: str | None = None,
        etag: str | None = None,
        *,
        callback: Callback | None = None,
    ) -> XAPIResponse | None:
        op = ops.WriteAgentProfile(agent, profile_id, value, etag_header=etag_header, etag=etag)
        return await self._run("put_agent_profile", op, callback)

    async def post_agent_profile(
        self,
        agent: Agent,
        profile_id: str,
        value: Mapping[str, Any],
        *,
        callback: Callback | None = None,
    ) -> XAPIResponse | None:
        op = ops.WriteAgentProfile(agent, profile_id, value, merge=True)
        return await self._run("post_agent_profile", op, callback)

    async def get_agent_profile(
        self,
        agent: Agent,
        profile_id: str | None = None,
        since: Any = None,
        *,
        callback: Callback | None = None,
    ) -> XAPIResponse | None:
        op = ops.ReadAgentProfile(agent, profile_id, since)
        return await self._run("get_agent_profile", op, callback)

    async def delete_agent_profile(
        self,
        agent: Agent,
        profile_id: str,
        *,
        callback: Callback | None = None,
    ) -> XAPIResponse | None:
        op = ops.DeleteAgentProfile(agent, profile_id)
        return await self._run("delete_agent_profile", op, callback)


# --- Module Notes -----------------------------------------------------------
# The injected httpx client is the transport collaborator: base URL, TLS, proxies and
# timeouts are configured there. A client built without one owns (and closes) its own.
