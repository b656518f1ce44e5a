"""
xapi_client.errors

Error taxonomy surfaced by every client operation.

Responsibilities:
- Distinguish client-side validation failures (raised before any I/O) from
  server rejections and transport failures.
- Give callers a named precondition-failure case (HTTP 412) to branch on.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from xapi_client.models import ResponseEnvelope


class ValidationKind(StrEnum):
    # Values double as the historic wrapper messages.
    INVALID_PARAMETERS = "Error: invalid parameters"
    INVALID_ID = "Error: invalid id"
    INVALID_TIMESTAMP = "Error: invalid timestamp"
    INVALID_ETAG_HEADER = "Error: invalid ETag header"
    INVALID_ETAG_HASH = "Error: invalid ETag hash"


class XAPIError(Exception):
    """Base class for every error delivered by the client."""


class ValidationError(XAPIError):
    """
    Raised before any request is issued.
    `kind` tells callers which argument check failed.
    """

    def __init__(self, kind: ValidationKind, detail: str | None = None) -> None:
        super().__init__(kind.value)
        self.kind = kind
        self.detail = detail


class ProtocolError(XAPIError):
    """A round trip completed but the server answered with a non-2xx status."""

    def __init__(self, response: ResponseEnvelope) -> None:
        super().__init__(f"server responded {response.status}: {_excerpt(response.text)}")
        self.response = response

    @property
    def status(self) -> int:
        return self.response.status

    @property
    def headers(self) -> dict[str, str]:
        return self.response.headers

    @property
    def body(self) -> Any:
        return self.response.data

    @property
    def is_precondition_failed(self) -> bool:
        return self.status == 412


class PreconditionFailedError(ProtocolError):
    """
    The server refused a conditional write: the document existed against
    If-None-Match, or its entity tag differed from If-Match.
    """


class TransportError(XAPIError):
    """The exchange could not complete (DNS, connect, TLS, protocol framing)."""

    status: int | None = None


def protocol_error_for(response: ResponseEnvelope) -> ProtocolError:
    if response.status == 412:
        return PreconditionFailedError(response)
    return ProtocolError(response)


def _excerpt(text: str, limit: int = 200) -> str:
    text = text.strip()
    return text if len(text) <= limit else text[:limit] + "..."


# --- Module Notes -----------------------------------------------------------
# ValidationError never carries a response; ProtocolError always does; TransportError
# keeps the underlying httpx exception as __cause__.
