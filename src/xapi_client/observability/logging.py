"""
xapi_client.observability.logging

Structured logging configuration for applications using the client.

Responsibilities:
- Configure `structlog` for JSON logs (opt-in; the library never calls this itself).
- Route library events through stdlib `logging` so unconfigured applications stay quiet.
- Provide a small wrapper for obtaining bound loggers.
- Bind per-call metadata (operation, call id) into structlog contextvars.
"""

from __future__ import annotations

import logging
import sys
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, TextIO

import structlog


def configure_logging(*, service_name: str, level: str, stream: TextIO | None = None) -> None:
    """
    Structured JSON logs, one event per line, written to `stream` (stderr by default
    so a program's own stdout output stays clean).
    """

    logging.basicConfig(
        format="%(message)s",
        stream=stream or sys.stderr,
        level=getattr(logging, level.upper(), logging.INFO),
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            _add_service_name(service_name),
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def _add_service_name(service_name: str):
    def processor(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        event_dict.setdefault("service", service_name)
        return event_dict

    return processor


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    # Always backed by a stdlib logger: until the application configures logging,
    # debug events fall below the root level and nothing is written anywhere.
    return structlog.wrap_logger(logging.getLogger(name), wrapper_class=structlog.stdlib.BoundLogger)


@contextmanager
def call_context(operation: str) -> Iterator[str]:
    # Every event logged while the call runs carries `operation` and `call_id`.
    call_id = uuid.uuid4().hex
    with structlog.contextvars.bound_contextvars(operation=operation, call_id=call_id):
        yield call_id


# --- Module Notes -----------------------------------------------------------
# contextvars are task-local under asyncio, so concurrent calls never see each
# other's operation/call_id.
