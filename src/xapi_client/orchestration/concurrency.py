"""
xapi_client.orchestration.concurrency

Optimistic-concurrency preconditions for document writes.

Responsibilities:
- Validate the conditional header name / match value pair a caller supplies.
- Compute the content hash the record store uses as a document's entity tag.
- Express the server-side comparison rule so callers can predict conflicts.

Note:
- A rejected condition is a server outcome (HTTP 412), surfaced by the
  dispatcher as `PreconditionFailedError`; nothing here ever touches the network.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass
from typing import Any

from xapi_client.errors import ValidationError, ValidationKind
from xapi_client.observability.logging import get_logger

log = get_logger(__name__)

IF_NONE_MATCH = "If-None-Match"
IF_MATCH = "If-Match"
CONDITIONAL_HEADERS = (IF_NONE_MATCH, IF_MATCH)
WILDCARD = "*"


@dataclass(frozen=True, slots=True)
class ConditionalHeader:
    header: str
    value: str

    def as_pair(self) -> tuple[str, str]:
        return (self.header, self.value)


def canonical_json(value: Any) -> str:
    # Compact and insertion-ordered: the request body is serialized the same way,
    # so the server's hash of the stored body equals content_hash(value).
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def content_hash(value: Any) -> str:
    """
    SHA-1 (lowercase hex) of a document value, computed over the same canonical
    JSON the request body carries, so a string document is hashed in its quoted form.
    """

    return hash_text(canonical_json(value))


def hash_text(text: str) -> str:
    # For text that is already serialized, e.g. a stored body read back verbatim.
    return hashlib.sha1(text.encode("utf-8")).hexdigest()


def etag_matches(match_value: str, stored_hash: str | None) -> bool:
    """
    Comparison the record store applies to If-Match: the wildcard matches any
    existing document, anything else must equal the stored hash byte-for-byte.
    """

    if stored_hash is None:
        return False
    if match_value == WILDCARD:
        return True
    return _unquote(match_value) == stored_hash


def prepare_conditional_headers(
    header_name: str | None,
    match_value: str | None,
    document_value: Any = None,
) -> ConditionalHeader | ValidationError | None:
    """
    Returns the header to attach, a ValidationError, or None for an
    unconditional write.

    `document_value` is the value being written. Its hash is only logged;
    the precondition itself is evaluated by the server.
    """

    if header_name is None and match_value is None:
        return None

    if header_name not in CONDITIONAL_HEADERS:
        # Covers "", unknown names, and both names concatenated.
        return ValidationError(
            ValidationKind.INVALID_ETAG_HEADER,
            f"header must be one of {', '.join(CONDITIONAL_HEADERS)}",
        )

    if not isinstance(match_value, str) or match_value.strip() == "":
        return ValidationError(ValidationKind.INVALID_ETAG_HASH, "match value must be '*' or a content hash")

    if match_value == WILDCARD:
        condition = ConditionalHeader(header=header_name, value=WILDCARD)
    else:
        condition = ConditionalHeader(header=header_name, value=f'"{_unquote(match_value)}"')

    if document_value is not None:
        document_hash = content_hash(document_value)
        log.debug(
            "xapi.precondition",
            header=condition.header,
            value=condition.value,
            document_hash=document_hash,
            # The write would store exactly the content the tag already names.
            unchanged=condition.header == IF_MATCH and _unquote(condition.value) == document_hash,
        )
    return condition


def predicts_conflict(header: ConditionalHeader, stored_value: Any | None) -> bool:
    # Local forecast of a 412 given what the caller believes is stored.
    stored_hash = None if stored_value is None else content_hash(stored_value)
    if header.header == IF_NONE_MATCH:
        if stored_hash is None:
            return False
        return header.value == WILDCARD or _unquote(header.value) == stored_hash
    return not etag_matches(header.value, stored_hash)


def _unquote(value: str) -> str:
    value = value.strip()
    if value.startswith("W/"):
        value = value[2:]
    return value.strip('"')


# --- Module Notes -----------------------------------------------------------
# The same hash appears three ways: as the ETag on profile reads, as the value a
# caller passes to If-Match, and as what content_hash() returns for that document.
