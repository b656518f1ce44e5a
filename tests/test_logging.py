"""
tests.test_logging

structlog wiring: per-call context binding and dispatcher events.
"""

from __future__ import annotations

import logging

import pytest
import structlog
from structlog.testing import capture_logs

from xapi_client.errors import ValidationError
from xapi_client.observability.logging import call_context, configure_logging, get_logger


def test_call_context_binds_and_unbinds_operation() -> None:
    with call_context("get_about") as call_id:
        bound = structlog.contextvars.get_contextvars()
        assert bound["operation"] == "get_about"
        assert bound["call_id"] == call_id

    assert "operation" not in structlog.contextvars.get_contextvars()


def test_configure_logging_installs_json_pipeline() -> None:
    root = logging.getLogger()
    saved_level, saved_handlers = root.level, list(root.handlers)
    try:
        configure_logging(service_name="xapi-test", level="debug")
        processors = structlog.get_config()["processors"]
        assert structlog.contextvars.merge_contextvars in processors
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)
    finally:
        structlog.reset_defaults()
        root.setLevel(saved_level)
        root.handlers[:] = saved_handlers


@pytest.mark.asyncio
async def test_dispatcher_logs_request_and_response(client) -> None:
    with capture_logs() as events:
        await client.get_about()

    names = [e["event"] for e in events]
    assert names == ["xapi.request", "xapi.response"]
    assert events[0]["method"] == "GET"
    assert events[1]["status"] == 200


@pytest.mark.asyncio
async def test_rejected_call_logs_validation_kind(client) -> None:
    with capture_logs() as events:
        with pytest.raises(ValidationError):
            await client.get_agents(None)

    (event,) = events
    assert event["event"] == "xapi.rejected"
    assert event["kind"] == "INVALID_PARAMETERS"


@pytest.mark.asyncio
async def test_pagination_logs_early_stop(client, lrs_app) -> None:
    lrs_app.state.store.seed_statements(1)

    with capture_logs() as events:
        await client.get_more_statements(5, {"limit": 1})

    exhausted = [e for e in events if e["event"] == "xapi.pagination.exhausted"]
    assert exhausted == [
        {"event": "xapi.pagination.exhausted", "log_level": "debug", "hop": 1, "requested": 5, "count": 1}
    ]


@pytest.mark.asyncio
async def test_unconfigured_library_writes_nothing(client, capsys: pytest.CaptureFixture[str]) -> None:
    structlog.reset_defaults()

    await client.get_about()
    await client.get_more_statements(2, {"limit": 1})

    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err == ""


def test_library_loggers_are_backed_by_stdlib_logging() -> None:
    log = get_logger("xapi_client.orchestration.dispatcher")
    assert isinstance(log.bind()._logger, logging.Logger)
