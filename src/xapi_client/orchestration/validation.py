"""
xapi_client.orchestration.validation

Pre-flight argument checks for every public operation.

Responsibilities:
- Model each operation's input as an explicit, frozen shape.
- Return a typed `ValidationError` (never raise) so the caller decides how to
  deliver it; a failure here means no request is ever built.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any, TypeVar

from xapi_client.errors import ValidationError, ValidationKind
from xapi_client.models import Attachment

# Statement query filters that must be ISO 8601 timestamps.
TIMESTAMP_FILTERS = ("since", "until")


@dataclass(frozen=True, slots=True)
class PutStatement:
    statement: Any
    statement_id: Any
    attachments: Any = None


@dataclass(frozen=True, slots=True)
class PostStatement:
    statement: Any
    attachments: Any = None


@dataclass(frozen=True, slots=True)
class PostStatements:
    statements: Any


@dataclass(frozen=True, slots=True)
class GetStatements:
    query: Any = None


@dataclass(frozen=True, slots=True)
class GetMoreStatements:
    additional_hops: Any
    query: Any = None


@dataclass(frozen=True, slots=True)
class WriteState:
    activity_id: Any
    agent: Any
    state_id: Any
    registration: Any
    value: Any
    merge: bool = False
    etag_header: str | None = None
    etag: str | None = None


@dataclass(frozen=True, slots=True)
class ReadState:
    activity_id: Any
    agent: Any
    state_id: Any = None
    registration: Any = None
    since: Any = None


@dataclass(frozen=True, slots=True)
class DeleteState:
    activity_id: Any
    agent: Any
    state_id: Any = None
    registration: Any = None


@dataclass(frozen=True, slots=True)
class GetActivities:
    activity_id: Any


@dataclass(frozen=True, slots=True)
class GetAgents:
    agent: Any


@dataclass(frozen=True, slots=True)
class WriteActivityProfile:
    activity_id: Any
    profile_id: Any
    value: Any
    merge: bool = False
    etag_header: str | None = None
    etag: str | None = None


@dataclass(frozen=True, slots=True)
class ReadActivityProfile:
    activity_id: Any
    profile_id: Any = None
    since: Any = None


@dataclass(frozen=True, slots=True)
class DeleteActivityProfile:
    activity_id: Any
    profile_id: Any


@dataclass(frozen=True, slots=True)
class WriteAgentProfile:
    agent: Any
    profile_id: Any
    value: Any
    merge: bool = False
    etag_header: str | None = None
    etag: str | None = None


@dataclass(frozen=True, slots=True)
class ReadAgentProfile:
    agent: Any
    profile_id: Any = None
    since: Any = None


@dataclass(frozen=True, slots=True)
class DeleteAgentProfile:
    agent: Any
    profile_id: Any


@dataclass(frozen=True, slots=True)
class GetAbout:
    pass


Operation = (
    PutStatement
    | PostStatement
    | PostStatements
    | GetStatements
    | GetMoreStatements
    | WriteState
    | ReadState
    | DeleteState
    | GetActivities
    | GetAgents
    | WriteActivityProfile
    | ReadActivityProfile
    | DeleteActivityProfile
    | WriteAgentProfile
    | ReadAgentProfile
    | DeleteAgentProfile
    | GetAbout
)

_Op = TypeVar("_Op")
_CHECKS: dict[type, Callable[[Any], ValidationError | None]] = {}


def _checks(op_type: type[_Op]):
    def register(fn: Callable[[_Op], ValidationError | None]):
        _CHECKS[op_type] = fn
        return fn

    return register


def validate(op: Operation) -> ValidationError | None:
    check = _CHECKS.get(type(op))
    if check is None:
        raise TypeError(f"no validator registered for {type(op).__name__}")
    return check(op)


# --- predicates -------------------------------------------------------------


def is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def is_record(value: Any) -> bool:
    return isinstance(value, Mapping)


def is_identifier(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ""


def is_agent(value: Any) -> bool:
    return isinstance(value, Mapping) and len(value) > 0


def is_timestamp(value: Any) -> bool:
    if isinstance(value, datetime):
        return True
    if not isinstance(value, str) or not value.strip():
        return False
    try:
        datetime.fromisoformat(value.strip())
    except ValueError:
        return False
    return True


def _invalid(detail: str) -> ValidationError:
    return ValidationError(ValidationKind.INVALID_PARAMETERS, detail)


def _attachments_error(raw: Any) -> ValidationError | None:
    if raw is None:
        return None
    if not is_sequence(raw):
        return _invalid("attachments must be a sequence")
    for item in raw:
        if isinstance(item, Attachment):
            continue
        try:
            Attachment.from_mapping(item)
        except (KeyError, TypeError, AttributeError):
            return _invalid("attachment must carry 'value' and 'type' with usageType/display")
    return None


def _optional_identifier_error(value: Any, name: str) -> ValidationError | None:
    if value is None or is_identifier(value):
        return None
    return _invalid(f"{name} must be a non-empty string")


def _since_error(since: Any) -> ValidationError | None:
    if since is None or is_timestamp(since):
        return None
    return ValidationError(ValidationKind.INVALID_TIMESTAMP, "since must be an ISO 8601 timestamp")


def _state_key_error(activity_id: Any, agent: Any, registration: Any) -> ValidationError | None:
    if not is_identifier(activity_id):
        return _invalid("activity id is required")
    if not is_agent(agent):
        return _invalid("agent is required")
    return _optional_identifier_error(registration, "registration")


def _document_value_error(value: Any, *, merge: bool) -> ValidationError | None:
    if value is None:
        return _invalid("document value is required")
    if merge and not isinstance(value, Mapping):
        # The server merges top-level members, so a merge needs a JSON object.
        return _invalid("merge writes require a JSON object")
    return None


# --- statements -------------------------------------------------------------


@_checks(PutStatement)
def _put_statement(op: PutStatement) -> ValidationError | None:
    if not is_record(op.statement):
        return _invalid("statement must be a single record")
    if not is_identifier(op.statement_id):
        return ValidationError(ValidationKind.INVALID_ID, "statement id is required")
    if op.statement.get("id") != op.statement_id:
        return ValidationError(ValidationKind.INVALID_ID, "statement id does not match record id")
    return _attachments_error(op.attachments)


@_checks(PostStatement)
def _post_statement(op: PostStatement) -> ValidationError | None:
    if not is_record(op.statement):
        return _invalid("statement must be a single record")
    return _attachments_error(op.attachments)


@_checks(PostStatements)
def _post_statements(op: PostStatements) -> ValidationError | None:
    if not is_sequence(op.statements):
        return _invalid("statements must be a sequence")
    if not op.statements:
        return _invalid("statements must not be empty")
    if not all(is_record(s) for s in op.statements):
        return _invalid("every statement must be a record")
    return None


def _query_error(query: Any) -> ValidationError | None:
    if query is None:
        return None
    if not isinstance(query, Mapping):
        return _invalid("query must be a mapping")
    for key in TIMESTAMP_FILTERS:
        if key in query and not is_timestamp(query[key]):
            return ValidationError(ValidationKind.INVALID_TIMESTAMP, f"{key} must be an ISO 8601 timestamp")
    return None


@_checks(GetStatements)
def _get_statements(op: GetStatements) -> ValidationError | None:
    return _query_error(op.query)


@_checks(GetMoreStatements)
def _get_more_statements(op: GetMoreStatements) -> ValidationError | None:
    hops = op.additional_hops
    if isinstance(hops, bool) or not isinstance(hops, int) or hops < 0:
        return _invalid("additional hops must be a non-negative integer")
    return _query_error(op.query)


# --- state ------------------------------------------------------------------


@_checks(WriteState)
def _write_state(op: WriteState) -> ValidationError | None:
    err = _state_key_error(op.activity_id, op.agent, op.registration)
    if err is not None:
        return err
    if not is_identifier(op.state_id):
        return _invalid("state id is required")
    return _document_value_error(op.value, merge=op.merge)


@_checks(ReadState)
def _read_state(op: ReadState) -> ValidationError | None:
    return (
        _state_key_error(op.activity_id, op.agent, op.registration)
        or _optional_identifier_error(op.state_id, "state id")
        or _since_error(op.since)
    )


@_checks(DeleteState)
def _delete_state(op: DeleteState) -> ValidationError | None:
    return _state_key_error(op.activity_id, op.agent, op.registration) or _optional_identifier_error(
        op.state_id, "state id"
    )


# --- activities / agents ----------------------------------------------------


@_checks(GetActivities)
def _get_activities(op: GetActivities) -> ValidationError | None:
    if not is_identifier(op.activity_id):
        return _invalid("activity id is required")
    return None


@_checks(GetAgents)
def _get_agents(op: GetAgents) -> ValidationError | None:
    if not is_agent(op.agent):
        return _invalid("agent is required")
    return None


@_checks(GetAbout)
def _get_about(op: GetAbout) -> ValidationError | None:
    return None


# --- profiles ---------------------------------------------------------------


@_checks(WriteActivityProfile)
def _write_activity_profile(op: WriteActivityProfile) -> ValidationError | None:
    if not is_identifier(op.activity_id):
        return _invalid("activity id is required")
    if not is_identifier(op.profile_id):
        return _invalid("profile id is required")
    return _document_value_error(op.value, merge=op.merge)


@_checks(ReadActivityProfile)
def _read_activity_profile(op: ReadActivityProfile) -> ValidationError | None:
    if not is_identifier(op.activity_id):
        return _invalid("activity id is required")
    return _optional_identifier_error(op.profile_id, "profile id") or _since_error(op.since)


@_checks(DeleteActivityProfile)
def _delete_activity_profile(op: DeleteActivityProfile) -> ValidationError | None:
    if not is_identifier(op.activity_id):
        return _invalid("activity id is required")
    if not is_identifier(op.profile_id):
        return _invalid("profile id is required")
    return None


@_checks(WriteAgentProfile)
def _write_agent_profile(op: WriteAgentProfile) -> ValidationError | None:
    if not is_agent(op.agent):
        return _invalid("agent is required")
    if not is_identifier(op.profile_id):
        return _invalid("profile id is required")
    return _document_value_error(op.value, merge=op.merge)


@_checks(ReadAgentProfile)
def _read_agent_profile(op: ReadAgentProfile) -> ValidationError | None:
    if not is_agent(op.agent):
        return _invalid("agent is required")
    return _optional_identifier_error(op.profile_id, "profile id") or _since_error(op.since)


@_checks(DeleteAgentProfile)
def _delete_agent_profile(op: DeleteAgentProfile) -> ValidationError | None:
    if not is_agent(op.agent):
        return _invalid("agent is required")
    if not is_identifier(op.profile_id):
        return _invalid("profile id is required")
    return None


# --- Module Notes -----------------------------------------------------------
# Only the checks needed to route a call and build its preconditions live here;
# statement/actor/verb shape validation is left to the record store.
