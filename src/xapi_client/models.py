"""
xapi_client.models

Value types exchanged between the client facade and the orchestration layer.

Responsibilities:
- Describe one outgoing request (`RequestDescriptor`) and one received
  response (`ResponseEnvelope`).
- Describe statement attachments and the result handed back to callers.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any


@dataclass(frozen=True, slots=True)
class Attachment:
    """
    Raw attachment content plus the metadata that ends up in the statement's
    `attachments` array.
    """

    value: bytes | str
    usage_type: str
    display: Mapping[str, str]
    content_type: str = "application/octet-stream"
    description: Mapping[str, str] | None = None

    @property
    def content(self) -> bytes:
        if isinstance(self.value, bytes):
            return self.value
        return self.value.encode("utf-8")

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> Attachment:
        # Historic shape: {"value": ..., "type": {"usageType", "display", ...}}.
        meta = raw["type"]
        return cls(
            value=raw["value"],
            usage_type=meta["usageType"],
            display=meta["display"],
            content_type=meta.get("contentType", "application/octet-stream"),
            description=meta.get("description"),
        )


@dataclass(frozen=True, slots=True)
class RequestDescriptor:
    method: str
    # Path relative to the endpoint, or an absolute URL for continuation hops.
    path: str
    params: tuple[tuple[str, str], ...] = ()
    headers: tuple[tuple[str, str], ...] = ()
    json_body: Any = None
    attachments: tuple[Attachment, ...] = ()

    def with_headers(self, *extra: tuple[str, str]) -> RequestDescriptor:
        return replace(self, headers=self.headers + tuple(extra))


@dataclass(frozen=True, slots=True)
class ResponseEnvelope:
    status: int
    headers: dict[str, str]
    content: bytes = b""
    data: Any = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")

    @property
    def etag(self) -> str | None:
        raw = self.headers.get("etag")
        if raw is None:
            return None
        return raw.strip().strip('"')

    @classmethod
    def build(cls, *, status: int, headers: Mapping[str, str], content: bytes) -> ResponseEnvelope:
        lowered = {k.lower(): v for k, v in headers.items()}
        return cls(
            status=status,
            headers=lowered,
            content=content,
            data=_parse_body(lowered.get("content-type", ""), content),
        )


@dataclass(frozen=True, slots=True)
class XAPIResponse:
    """What a successful call yields: the envelope plus the (accumulated) data."""

    resp: ResponseEnvelope
    data: Any = field(default=None)


def _parse_body(content_type: str, content: bytes) -> Any:
    if not content:
        return None
    text = content.decode("utf-8", errors="replace")
    if "json" in content_type:
        try:
            return json.loads(text)
        except ValueError:
            return text
    return text


# --- Module Notes -----------------------------------------------------------
# Descriptors are built per call and never shared; header names in envelopes are
# lower-cased so lookups do not depend on server casing.
