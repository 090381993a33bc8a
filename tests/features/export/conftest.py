"""BDD step definitions for the export scenarios."""

import json

import pytest
from pytest_bdd import given, parsers, then, when
from tests.features.export.steps_helpers import SKIPPED_SPAN_ID, ExportScenarioContext
from tests.span_builders import exception_event

from spanindex.adapters.channels.in_memory import InMemoryChannel
from spanindex.adapters.storage.in_memory import InMemoryLogStorage
from spanindex.core.events import error_group_id
from spanindex.core.exporter import SpanBatchExporter
from spanindex.core.models import SpanKind, StatusCode


@pytest.fixture
def ctx(
    exporter: SpanBatchExporter,
    channels: dict[str, InMemoryChannel],
    log_storage: InMemoryLogStorage,
) -> ExportScenarioContext:
    """Fresh scenario context for each test."""
    return ExportScenarioContext(
        exporter=exporter, channels=channels, log_storage=log_storage
    )


@given("an exporter writing to in-memory channels")
def given_exporter(ctx: ExportScenarioContext) -> None:
    assert all(channel.messages == [] for channel in ctx.channels.values())


@given(
    parsers.parse(
        'a server span "{name}" from service "{service}" with status code {code:d}'
    )
)
def given_server_span(
    ctx: ExportScenarioContext, name: str, service: str, code: int
) -> None:
    ctx.service_name = service
    ctx.pending.append(
        {
            "name": name,
            "kind": SpanKind.SERVER,
            "attributes": {"http.method": name.split()[0], "http.status_code": code},
            "events": [],
        }
    )


@given(parsers.parse('a span "{name}" from service "{service}" with status ok'))
def given_ok_span(ctx: ExportScenarioContext, name: str, service: str) -> None:
    ctx.service_name = service
    ctx.pending.append(
        {
            "name": name,
            "kind": SpanKind.SERVER,
            "status_code": StatusCode.OK,
            "events": [],
        }
    )


@given(parsers.parse('the span recorded a "{exc_type}" exception "{message}"'))
def given_exception(ctx: ExportScenarioContext, exc_type: str, message: str) -> None:
    ctx.pending[-1]["events"].append(exception_event(exc_type, message))


@given("a second span that ends before it starts")
def given_invalid_span(ctx: ExportScenarioContext) -> None:
    ctx.pending.append(
        {"name": "broken", "span_id": SKIPPED_SPAN_ID, "duration_ns": -1_000}
    )


@when("the batch is exported")
def when_exported(ctx: ExportScenarioContext) -> None:
    ctx.export()


@when("the batch is exported twice")
def when_exported_twice(ctx: ExportScenarioContext) -> None:
    ctx.export()
    ctx.export()


@then(
    parsers.re(r"the (?P<channel>\w+) channel receives (?P<count>\d+) messages?"),
    converters={"count": int},
)
def then_channel_count(ctx: ExportScenarioContext, channel: str, count: int) -> None:
    assert len(ctx.channels[channel].messages) == count


@then(parsers.parse('the trace model for "{name}" is an error with {count:d} event'))
def then_model_error(ctx: ExportScenarioContext, name: str, count: int) -> None:
    models = [json.loads(m["model"]) for m in ctx.channels["model"].decoded()]
    [model] = [m for m in models if m["name"] == name]
    assert model["hasError"] is True
    assert len(model["events"]) == count


@then(parsers.parse('the index row for "{name}" is an error'))
def then_index_error(ctx: ExportScenarioContext, name: str) -> None:
    [row] = [r for r in ctx.channels["index"].decoded() if r["name"] == name]
    assert row["hasError"] is True
    assert row["serviceName"] == ctx.service_name
    assert row["httpCode"] == ""


@then(parsers.parse('the index row for "{name}" has httpCode "{code}" and is an error'))
def then_index_row(ctx: ExportScenarioContext, name: str, code: str) -> None:
    [row] = [r for r in ctx.channels["index"].decoded() if r["name"] == name]
    assert row["httpCode"] == code
    assert row["hasError"] is True
    assert row["serviceName"] == ctx.service_name


@then(
    parsers.parse('the error channel receives a row with exceptionType "{exc_type}"')
)
def then_error_row(ctx: ExportScenarioContext, exc_type: str) -> None:
    [row] = ctx.channels["error"].decoded()
    assert row["exceptionType"] == exc_type
    assert row["serviceName"] == ctx.service_name


@then(
    parsers.parse(
        'the error row carries "{exc_type}" "{message}" grouped under "{service}"'
    )
)
def then_error_row_group(
    ctx: ExportScenarioContext, exc_type: str, message: str, service: str
) -> None:
    [row] = ctx.channels["error"].decoded()
    assert row["exceptionType"] == exc_type
    assert row["exceptionMessage"] == message
    assert row["serviceName"] == service
    assert row["groupID"] == error_group_id(service, exc_type, message)


@then("the error rows share a groupID but have different errorIDs")
def then_same_group(ctx: ExportScenarioContext) -> None:
    first, second = ctx.channels["error"].decoded()
    assert first["groupID"] == second["groupID"]
    assert first["errorID"] != second["errorID"]


@then(parsers.parse("the summary reports {spans:d} spans with {failed:d} failed"))
def then_summary(ctx: ExportScenarioContext, spans: int, failed: int) -> None:
    [summary] = ctx.summaries
    assert summary.spans == spans
    assert summary.failed == failed


@then("an error log names the skipped span")
def then_error_log(ctx: ExportScenarioContext) -> None:
    errors = [e for e in ctx.log_storage.read() if e.level == "ERROR"]
    assert any(e.attributes.get("span_id") == SKIPPED_SPAN_ID.hex() for e in errors)
