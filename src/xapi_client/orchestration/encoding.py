"""
xapi_client.orchestration.encoding

Request body encoding.

Responsibilities:
- Serialize JSON bodies with the canonical serializer (so entity tags line up).
- Build `multipart/mixed` bodies for statements carrying attachments.
"""

from __future__ import annotations

import hashlib
import uuid
from collections.abc import Mapping, Sequence
from typing import Any

from xapi_client.models import Attachment, RequestDescriptor
from xapi_client.orchestration.concurrency import canonical_json

JSON_CONTENT_TYPE = "application/json"


def encode_body(descriptor: RequestDescriptor) -> tuple[bytes | None, str | None]:
    if descriptor.json_body is None:
        return None, None
    if descriptor.attachments:
        return encode_multipart(descriptor.json_body, descriptor.attachments)
    return canonical_json(descriptor.json_body).encode("utf-8"), JSON_CONTENT_TYPE


def attachment_metadata(att: Attachment) -> dict[str, Any]:
    content = att.content
    meta: dict[str, Any] = {
        "usageType": att.usage_type,
        "display": dict(att.display),
        "contentType": att.content_type,
        "length": len(content),
        "sha2": hashlib.sha256(content).hexdigest(),
    }
    if att.description is not None:
        meta["description"] = dict(att.description)
    return meta


def with_attachment_metadata(statement: Mapping[str, Any], attachments: Sequence[Attachment]) -> dict[str, Any]:
    # Copy: the caller's record must come back untouched.
    stmt = dict(statement)
    stmt["attachments"] = list(statement.get("attachments", [])) + [
        attachment_metadata(a) for a in attachments
    ]
    return stmt


def encode_multipart(
    statement: Mapping[str, Any],
    attachments: Sequence[Attachment],
    *,
    boundary: str | None = None,
) -> tuple[bytes, str]:
    boundary = boundary or uuid.uuid4().hex
    parts = [
        _part(
            {"Content-Type": JSON_CONTENT_TYPE},
            canonical_json(with_attachment_metadata(statement, attachments)).encode("utf-8"),
        )
    ]
    for att in attachments:
        content = att.content
        parts.append(
            _part(
                {
                    "Content-Type": att.content_type,
                    "Content-Transfer-Encoding": "binary",
                    "X-Experience-API-Hash": hashlib.sha256(content).hexdigest(),
                },
                content,
            )
        )

    delimiter = f"--{boundary}\r\n".encode("ascii")
    body = b"".join(delimiter + p + b"\r\n" for p in parts) + f"--{boundary}--\r\n".encode("ascii")
    return body, f"multipart/mixed; boundary={boundary}"


def _part(headers: Mapping[str, str], content: bytes) -> bytes:
    head = "".join(f"{k}: {v}\r\n" for k, v in headers.items()).encode("utf-8")
    return head + b"\r\n" + content


# --- Module Notes -----------------------------------------------------------
# The statement part always comes first; attachment parts follow in caller order so
# the record store can match them to `attachments[*].sha2`.
