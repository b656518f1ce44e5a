"""
xapi_client.orchestration.dispatcher

HTTP boundary: one descriptor in, one classified outcome out.

Responsibilities:
- Attach auth and protocol-version headers from the client context snapshot.
- Encode the body and issue exactly one request through the injected
  `httpx.AsyncClient` (the transport collaborator).
- Classify the outcome: success, `ProtocolError` (412 -> `PreconditionFailedError`)
  or `TransportError`.
- Forward an outcome to an optional completion callback (`deliver`).
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from typing import Any
from urllib.parse import urljoin

import httpx

from xapi_client.errors import (
    ProtocolError,
    TransportError,
    ValidationError,
    XAPIError,
    protocol_error_for,
)
from xapi_client.models import RequestDescriptor, ResponseEnvelope, XAPIResponse
from xapi_client.observability.logging import get_logger
from xapi_client.orchestration.encoding import encode_body
from xapi_client.settings import ClientContext

log = get_logger(__name__)

# (error, response, data); exactly one call per operation.
Callback = Callable[[XAPIError | None, ResponseEnvelope | None, Any], Any]

VERSION_HEADER = "X-Experience-API-Version"


class RequestDispatcher:
    """
    No retries, timeouts or pooling policy live here: whatever the injected
    httpx client is configured with applies.
    """

    def __init__(self, *, http: httpx.AsyncClient) -> None:
        self._http = http

    def _headers(self, descriptor: RequestDescriptor, context: ClientContext, content_type: str | None) -> dict[str, str]:
        headers = {VERSION_HEADER: context.version}
        authz = context.authorization()
        if authz:
            headers["Authorization"] = authz
        if content_type:
            headers["Content-Type"] = content_type
        headers.update(dict(descriptor.headers))
        return headers

    async def send(self, descriptor: RequestDescriptor, context: ClientContext) -> XAPIResponse:
        url = resolve_url(context.endpoint, descriptor.path)
        content, content_type = encode_body(descriptor)
        headers = self._headers(descriptor, context, content_type)

        log.debug("xapi.request", method=descriptor.method, url=url, params=dict(descriptor.params))
        try:
            r = await self._http.request(
                descriptor.method,
                url,
                params=list(descriptor.params) or None,
                headers=headers,
                content=content,
            )
        except (httpx.RequestError, httpx.InvalidURL) as e:
            # RequestError covers connect/read failures, body decoding and redirect loops.
            log.debug("xapi.transport_error", method=descriptor.method, url=url, error=repr(e))
            raise TransportError(str(e) or type(e).__name__) from e

        envelope = ResponseEnvelope.build(status=r.status_code, headers=r.headers, content=r.content)
        log.debug("xapi.response", method=descriptor.method, url=url, status=envelope.status)
        if not envelope.ok:
            raise protocol_error_for(envelope)
        return XAPIResponse(resp=envelope, data=envelope.data)


def resolve_url(endpoint: str, path: str) -> str:
    # Relative resource paths hang off the endpoint; continuation references are
    # usually absolute paths ("/xapi/statements?more=...") and resolve against its origin.
    return urljoin(endpoint, path)


async def deliver(outcome: Awaitable[XAPIResponse], callback: Callback | None) -> XAPIResponse | None:
    """
    Without a callback: return the result or raise.
    With a callback: invoke it exactly once with (error, resp, data) and return None.
    """

    if callback is None:
        return await outcome

    try:
        result = await outcome
    except XAPIError as e:
        resp = e.response if isinstance(e, ProtocolError) else None
        await _invoke(callback, e, resp, None if resp is None else resp.data)
        return None
    await _invoke(callback, None, result.resp, result.data)
    return None


async def reject(error: ValidationError, callback: Callback | None, *, strict: bool) -> None:
    """
    Deliver a pre-dispatch validation failure.
    Strict contexts always raise, even when the caller supplied a callback.
    """

    if callback is None or strict:
        raise error
    await _invoke(callback, error, None, None)


async def _invoke(callback: Callback, error: XAPIError | None, resp: ResponseEnvelope | None, data: Any) -> None:
    ret = callback(error, resp, data)
    if inspect.isawaitable(ret):
        await ret


# --- Module Notes -----------------------------------------------------------
# Exceptions raised inside a callback propagate to the awaiting caller; they are not
# re-delivered to the callback, which keeps delivery exactly-once.
