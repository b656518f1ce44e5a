"""
xapi_client.orchestration.routing

Turns a validated operation into a `RequestDescriptor`.

Responsibilities:
- Map each operation shape to its resource path, method and query parameters.
- Run document writes through the concurrency guard to attach conditional headers.
- Keep validation and request building in one pre-dispatch step (`prepare`).
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

from xapi_client.errors import ValidationError
from xapi_client.models import Attachment, RequestDescriptor
from xapi_client.orchestration.concurrency import ConditionalHeader, canonical_json, prepare_conditional_headers
from xapi_client.orchestration.validation import (
    DeleteActivityProfile,
    DeleteAgentProfile,
    DeleteState,
    GetAbout,
    GetActivities,
    GetAgents,
    GetMoreStatements,
    GetStatements,
    Operation,
    PostStatement,
    PostStatements,
    PutStatement,
    ReadActivityProfile,
    ReadAgentProfile,
    ReadState,
    WriteActivityProfile,
    WriteAgentProfile,
    WriteState,
    validate,
)

STATEMENTS = "statements"
ACTIVITY_STATE = "activities/state"
ACTIVITY_PROFILE = "activities/profile"
AGENT_PROFILE = "agents/profile"
ACTIVITIES = "activities"
AGENTS = "agents"
ABOUT = "about"


def prepare(op: Operation) -> RequestDescriptor | ValidationError:
    err = validate(op)
    if err is not None:
        return err
    return build_request(op)


def build_request(op: Operation) -> RequestDescriptor | ValidationError:
    if isinstance(op, PutStatement):
        return RequestDescriptor(
            method="PUT",
            path=STATEMENTS,
            params=query_params([("statementId", op.statement_id)]),
            json_body=dict(op.statement),
            attachments=coerce_attachments(op.attachments),
        )
    if isinstance(op, PostStatement):
        return RequestDescriptor(
            method="POST",
            path=STATEMENTS,
            json_body=dict(op.statement),
            attachments=coerce_attachments(op.attachments),
        )
    if isinstance(op, PostStatements):
        return RequestDescriptor(method="POST", path=STATEMENTS, json_body=[dict(s) for s in op.statements])
    if isinstance(op, (GetStatements, GetMoreStatements)):
        return statement_query(op.query)

    if isinstance(op, WriteState):
        params = [
            ("activityId", op.activity_id),
            ("agent", op.agent),
            ("stateId", op.state_id),
            ("registration", op.registration),
        ]
        return _document_write(ACTIVITY_STATE, params, op.value, op.merge, op.etag_header, op.etag)
    if isinstance(op, ReadState):
        return RequestDescriptor(
            method="GET",
            path=ACTIVITY_STATE,
            params=query_params(
                [
                    ("activityId", op.activity_id),
                    ("agent", op.agent),
                    ("stateId", op.state_id),
                    ("registration", op.registration),
                    ("since", op.since),
                ]
            ),
        )
    if isinstance(op, DeleteState):
        return RequestDescriptor(
            method="DELETE",
            path=ACTIVITY_STATE,
            params=query_params(
                [
                    ("activityId", op.activity_id),
                    ("agent", op.agent),
                    ("stateId", op.state_id),
                    ("registration", op.registration),
                ]
            ),
        )

    if isinstance(op, GetActivities):
        return RequestDescriptor(method="GET", path=ACTIVITIES, params=query_params([("activityId", op.activity_id)]))
    if isinstance(op, GetAgents):
        return RequestDescriptor(method="GET", path=AGENTS, params=query_params([("agent", op.agent)]))
    if isinstance(op, GetAbout):
        return RequestDescriptor(method="GET", path=ABOUT)

    if isinstance(op, WriteActivityProfile):
        params = [("activityId", op.activity_id), ("profileId", op.profile_id)]
        return _document_write(ACTIVITY_PROFILE, params, op.value, op.merge, op.etag_header, op.etag)
    if isinstance(op, ReadActivityProfile):
        return RequestDescriptor(
            method="GET",
            path=ACTIVITY_PROFILE,
            params=query_params([("activityId", op.activity_id), ("profileId", op.profile_id), ("since", op.since)]),
        )
    if isinstance(op, DeleteActivityProfile):
        return RequestDescriptor(
            method="DELETE",
            path=ACTIVITY_PROFILE,
            params=query_params([("activityId", op.activity_id), ("profileId", op.profile_id)]),
        )

    if isinstance(op, WriteAgentProfile):
        params = [("agent", op.agent), ("profileId", op.profile_id)]
        return _document_write(AGENT_PROFILE, params, op.value, op.merge, op.etag_header, op.etag)
    if isinstance(op, ReadAgentProfile):
        return RequestDescriptor(
            method="GET",
            path=AGENT_PROFILE,
            params=query_params([("agent", op.agent), ("profileId", op.profile_id), ("since", op.since)]),
        )
    if isinstance(op, DeleteAgentProfile):
        return RequestDescriptor(
            method="DELETE",
            path=AGENT_PROFILE,
            params=query_params([("agent", op.agent), ("profileId", op.profile_id)]),
        )

    raise TypeError(f"no route for {type(op).__name__}")


def statement_query(query: Mapping[str, Any] | None) -> RequestDescriptor:
    return RequestDescriptor(method="GET", path=STATEMENTS, params=query_params((query or {}).items()))


def _document_write(
    path: str,
    params: list[tuple[str, Any]],
    value: Any,
    merge: bool,
    etag_header: str | None,
    etag: str | None,
) -> RequestDescriptor | ValidationError:
    descriptor = RequestDescriptor(
        method="POST" if merge else "PUT",
        path=path,
        params=query_params(params),
        json_body=dict(value) if isinstance(value, Mapping) else value,
    )
    if merge:
        # Merge writes are never conditional.
        return descriptor

    condition = prepare_conditional_headers(etag_header, etag, value)
    if isinstance(condition, ValidationError):
        return condition
    if isinstance(condition, ConditionalHeader):
        return descriptor.with_headers(condition.as_pair())
    return descriptor


def query_params(items: Iterable[tuple[str, Any]]) -> tuple[tuple[str, str], ...]:
    # None-valued parameters are omitted; order is preserved.
    return tuple((k, encode_param(v)) for k, v in items if v is not None)


def encode_param(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (Mapping, list, tuple)):
        return canonical_json(dict(value) if isinstance(value, Mapping) else list(value))
    return str(value)


def coerce_attachments(raw: Any) -> tuple[Attachment, ...]:
    if not raw:
        return ()
    return tuple(a if isinstance(a, Attachment) else Attachment.from_mapping(a) for a in raw)


# --- Module Notes -----------------------------------------------------------
# Paths are relative to the context endpoint and resolved by the dispatcher.
