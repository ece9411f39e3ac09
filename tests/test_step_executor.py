from __future__ import annotations

import pytest

from sequence_runner import validators
from sequence_runner.errors import (
    NetworkError,
    ServerErrorResponse,
    StepDispatchFailure,
    StepHandlerFailure,
    StepValidationFailure,
)
from sequence_runner.runner.context import Context
from sequence_runner.runner.step_executor import StepExecutor, StepState
from sequence_runner.scenario.schema import Step
from sequence_runner.substitution import Generator
from tests.utils import StubTransport, make_response


def _step(**kwargs) -> Step:
    fields = {"name": "step", "method": "GET", "url": "/items"}
    fields.update(kwargs)
    return Step(**fields)


def test_substitutes_url_body_and_headers() -> None:
    transport = StubTransport([make_response(status=200, data={})])
    executor = StepExecutor(transport)
    step = _step(
        method="POST",
        url="/users/{user_id}/items",
        body={"owner": "{user_id}", "note": "{unknown}"},
        headers={"Authorization": "Bearer {token}"},
    )
    executor.execute(step, Context({"user_id": 7, "token": "t"}))

    call = transport.calls[0]
    assert call["method"] == "POST"
    assert call["url"] == "/users/7/items"
    assert call["body"] == {"owner": "7", "note": "{unknown}"}
    assert call["headers"]["Authorization"] == "Bearer t"
    assert executor.state == StepState.DONE


def test_step_headers_override_defaults() -> None:
    transport = StubTransport()
    executor = StepExecutor(transport)
    executor.execute(_step(headers={"content-type": "text/plain"}), Context())

    headers = transport.calls[0]["headers"]
    assert headers["content-type"] == "text/plain"
    assert "Content-Type" not in headers
    assert headers["Accept"] == "application/json"


def test_transform_runs_after_substitution() -> None:
    transport = StubTransport()
    seen = {}

    def transform(body, context):
        seen["body"] = body
        return {**body, "count": context["count"] + 1}

    step = _step(method="PUT", body={"name": "{name}"}, transform=transform)
    StepExecutor(transport).execute(step, Context({"name": "x", "count": 1}))

    assert seen["body"] == {"name": "x"}
    assert transport.calls[0]["body"] == {"name": "x", "count": 2}


def test_validation_failure_names_the_step() -> None:
    transport = StubTransport([make_response(status=404)])
    executor = StepExecutor(transport)
    step = _step(name="read item", validate={"ok": validators.status(200)})

    with pytest.raises(StepValidationFailure) as exc_info:
        executor.execute(step, Context())

    assert str(exc_info.value) == "Validation failed for step: read item"
    assert exc_info.value.failed_key == "ok"
    assert executor.state == StepState.FAILED


def test_extracted_values_merge_into_context() -> None:
    transport = StubTransport([make_response(status=201, data={"id": "abc", "name": "n"})])
    context = Context({"id": "old", "keep": True})
    outcome = StepExecutor(transport).execute(
        _step(extract={"id": "data.id", "bad": 1.5}), context
    )

    assert context.to_dict() == {"id": "abc", "keep": True}
    assert outcome.extracted == {"id": "abc"}
    assert [d.key for d in outcome.diagnostics] == ["bad"]


def test_server_error_becomes_dispatch_failure() -> None:
    error = ServerErrorResponse("HTTP 500: boom", status=500, data={"error": "boom"})
    executor = StepExecutor(StubTransport([error]))

    with pytest.raises(StepDispatchFailure) as exc_info:
        executor.execute(_step(name="create"), Context())

    assert exc_info.value.status == 500
    assert exc_info.value.data == {"error": "boom"}
    assert exc_info.value.step_name == "create"


def test_network_error_becomes_dispatch_failure() -> None:
    executor = StepExecutor(StubTransport([NetworkError("connection refused")]))
    with pytest.raises(StepDispatchFailure, match="connection refused"):
        executor.execute(_step(), Context())


def test_mapping_responses_are_normalised() -> None:
    transport = StubTransport([{"status": 200, "statusText": "OK", "data": {"id": 1}}])
    outcome = StepExecutor(transport).execute(_step(extract={"id": "id"}), Context())
    assert outcome.response.status_text == "OK"
    assert outcome.extracted == {"id": 1}


def test_failing_generator_is_a_setup_failure() -> None:
    def broken():
        raise ValueError("generator broke")

    transport = StubTransport()
    executor = StepExecutor(transport)

    with pytest.raises(StepDispatchFailure, match="Request setup failed: generator broke"):
        executor.execute(_step(name="create", body={"x": Generator(broken)}), Context())

    assert executor.state == StepState.FAILED
    assert transport.calls == []


@pytest.mark.parametrize("returned", [None, "OK", 200])
def test_transport_returning_no_response_fails_the_step(returned) -> None:
    executor = StepExecutor(StubTransport([returned]))
    with pytest.raises(StepDispatchFailure, match="expected a response"):
        executor.execute(_step(), Context())


def test_dry_run_never_calls_transport() -> None:
    transport = StubTransport()
    executor = StepExecutor(transport, dry_run=True)
    outcome = executor.execute(_step(validate="status_200", extract={"id": "data.id"}), Context())

    assert transport.calls == []
    assert outcome.response.status == 200
    assert outcome.extracted["id"].startswith("mock-id-")
    assert outcome.response.data["message"] == "dry run"


def test_dry_run_still_fails_validation_on_absent_fields() -> None:
    executor = StepExecutor(StubTransport(), dry_run=True)
    step = _step(validate=validators.has_field("data.email"))
    with pytest.raises(StepValidationFailure):
        executor.execute(step, Context())


def test_custom_step_type_replaces_http() -> None:
    transport = StubTransport()
    received = {}

    def wait_handler(step, context):
        received["seconds"] = step.options["seconds"]
        context["waited"] = True
        return {"status": 200}

    executor = StepExecutor(transport, step_types={"wait": wait_handler})
    context = Context()
    step = Step(name="pause", type="wait", options={"seconds": 0}, validate=validators.never())
    outcome = executor.execute(step, context)

    assert outcome.response == {"status": 200}
    assert received == {"seconds": 0}
    assert context["waited"] is True
    assert transport.calls == []


def test_async_step_handler() -> None:
    async def handler(step, context):
        return "done"

    executor = StepExecutor(StubTransport(), step_types={"job": handler})
    assert executor.execute(Step(name="j", type="job"), Context()).response == "done"


def test_failing_step_handler() -> None:
    def handler(step, context):
        raise RuntimeError("kaput")

    executor = StepExecutor(StubTransport(), step_types={"job": handler})
    with pytest.raises(StepHandlerFailure, match="kaput"):
        executor.execute(Step(name="j", type="job"), Context())


def test_unknown_step_type() -> None:
    with pytest.raises(StepHandlerFailure, match="Unknown step type"):
        StepExecutor(StubTransport()).execute(Step(name="j", type="ftp"), Context())


def test_context_keys_cannot_be_removed() -> None:
    context = Context({"a": 1})
    with pytest.raises(TypeError):
        del context["a"]
