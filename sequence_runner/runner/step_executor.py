"""Step executor - runs one step through substitute, dispatch, validate, extract.

States per step::

    PENDING -> SUBSTITUTING -> (SIMULATING | DISPATCHING) -> VALIDATING
            -> EXTRACTING -> DONE

Any failing transition moves to FAILED and raises a StepFailure.
"""

import logging
import time
from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional

from .. import awaitables
from ..errors import (
    ServerErrorResponse,
    StepDispatchFailure,
    StepHandlerFailure,
    StepValidationFailure,
    TransportError,
)
from ..extractors.engine import Diagnostic, Extractor
from ..scenario.schema import DEFAULT_STEP_TYPE, Step
from ..substitution import placeholders, substitute
from ..transport.response import Response
from ..validators.engine import Validator

logger = logging.getLogger(__name__)


class StepState(str, Enum):
    PENDING = "pending"
    SUBSTITUTING = "substituting"
    SIMULATING = "simulating"
    DISPATCHING = "dispatching"
    VALIDATING = "validating"
    EXTRACTING = "extracting"
    DONE = "done"
    FAILED = "failed"


@dataclass
class StepOutcome:
    """What a successful step produced."""
    response: Any = None
    extracted: dict[str, Any] = field(default_factory=dict)
    diagnostics: list[Diagnostic] = field(default_factory=list)


@dataclass
class PreparedRequest:
    method: str
    url: str
    body: Any = None
    headers: dict[str, Any] = field(default_factory=dict)


def dry_run_response() -> Response:
    """Canned success response used instead of the transport in dry-run mode."""
    return Response(
        status=200,
        status_text="OK",
        headers={},
        data={"id": f"mock-id-{int(time.time() * 1000)}", "message": "dry run"},
    )


class StepExecutor:
    """Executes single steps against a transport.

    The executor does not own the context; the runner passes the live
    context of the current run and extracted values are merged into it.
    """

    def __init__(
        self,
        transport: Any,
        validator: Optional[Validator] = None,
        extractor: Optional[Extractor] = None,
        step_types: Optional[Mapping[str, Callable]] = None,
        dry_run: bool = False,
        verbose: bool = False,
    ):
        """Initialize step executor.

        Args:
            transport: Object with ``send(method, url, body, headers)``.
            validator: Validator engine (a fresh one if omitted).
            extractor: Extractor engine (a fresh one if omitted).
            step_types: Handlers for custom step types, by type name.
            dry_run: Simulate responses instead of calling the transport.
            verbose: Log request and response details at INFO.
        """
        self.transport = transport
        self.validator = validator or Validator()
        self.extractor = extractor or Extractor()
        self.step_types = step_types if step_types is not None else {}
        self.dry_run = dry_run
        self.verbose = verbose
        self.state = StepState.PENDING

    def execute(self, step: Step, context: MutableMapping[str, Any]) -> StepOutcome:
        """Execute ``step`` and merge its extracted values into ``context``.

        Raises:
            StepValidationFailure: The validate spec evaluated to False.
            StepDispatchFailure: The request could not be built, the transport
                                 signalled a failure or returned no response.
            StepHandlerFailure: A custom step-type handler raised, or the
                                step type is unknown.
        """
        self.state = StepState.PENDING
        try:
            if step.type != DEFAULT_STEP_TYPE:
                return self._execute_custom(step, context)
            return self._execute_http(step, context)
        except Exception:
            self.state = StepState.FAILED
            raise

    def _execute_custom(self, step: Step, context: MutableMapping[str, Any]) -> StepOutcome:
        handler = self.step_types.get(step.type)
        if handler is None:
            raise StepHandlerFailure(f"Unknown step type: '{step.type}'", step.name)

        self.state = StepState.DISPATCHING
        try:
            result = awaitables.call(handler, step, context)
        except Exception as e:
            raise StepHandlerFailure(
                f"Step handler '{step.type}' failed: {e}", step.name
            ) from e

        self.state = StepState.DONE
        return StepOutcome(response=result)

    def _execute_http(self, step: Step, context: MutableMapping[str, Any]) -> StepOutcome:
        self.state = StepState.SUBSTITUTING
        request = self.prepare(step, context)

        if self.dry_run:
            self.state = StepState.SIMULATING
            response = dry_run_response()
            logger.info("Mock response (dry run) for %s %s", request.method, request.url)
        else:
            self.state = StepState.DISPATCHING
            response = self._dispatch(step, request)

        self._log_response(response)

        if step.validate is not None:
            self.state = StepState.VALIDATING
            outcome = self.validator.check(step.validate, response)
            if not outcome.passed:
                raise StepValidationFailure(step.name, failed_key=outcome.failed_key)

        outcome = StepOutcome(response=response)
        if step.extract:
            self.state = StepState.EXTRACTING
            report = self.extractor.extract_with_diagnostics(step.extract, response)
            context.update(report.values)
            outcome.extracted = report.values
            outcome.diagnostics = report.diagnostics
            if report.values:
                self._log("Extracted variables: %s", report.values)

        self.state = StepState.DONE
        return outcome

    def prepare(self, step: Step, context: Mapping[str, Any]) -> PreparedRequest:
        """Substitute url, body and headers and merge them with the defaults.

        Raises:
            StepDispatchFailure: If substitution (a generator) or the
                                 step's transform raised.
        """
        try:
            url = substitute(step.url, context)
            body = substitute(step.body, context) if step.body is not None else None
            step_headers = substitute(step.headers, context) if step.headers else {}
        except Exception as e:
            raise StepDispatchFailure(f"Request setup failed: {e}", step.name) from e

        if step.transform is not None:
            try:
                body = step.transform(body, context)
            except Exception as e:
                raise StepDispatchFailure(
                    f"Request transform failed: {e}", step.name
                ) from e

        unresolved = placeholders(url) | placeholders(body) | placeholders(step_headers)
        if unresolved:
            logger.warning(
                "Unresolved placeholders in step '%s': %s",
                step.name, ", ".join(sorted(unresolved)),
            )

        # Step headers win over defaults regardless of header name casing.
        overridden = {str(name).lower() for name in step_headers}
        defaults = getattr(self.transport, "default_headers", None) or {}
        headers = {k: v for k, v in defaults.items() if str(k).lower() not in overridden}
        headers.update(step_headers)

        request = PreparedRequest(method=step.method, url=url, body=body, headers=headers)
        self._log("%s %s", request.method, request.url)
        if body is not None:
            self._log("Request body: %s", body)
        if step_headers:
            self._log("Step headers: %s", step_headers)
        return request

    def _dispatch(self, step: Step, request: PreparedRequest) -> Response:
        try:
            response = self.transport.send(
                request.method, request.url, request.body, request.headers
            )
        except ServerErrorResponse as e:
            raise StepDispatchFailure(str(e), step.name, status=e.status, data=e.data) from e
        except TransportError as e:
            raise StepDispatchFailure(str(e), step.name) from e
        except Exception as e:
            raise StepDispatchFailure(
                f"Request failed: {type(e).__name__}: {e}", step.name
            ) from e

        if isinstance(response, Mapping):
            response = Response.from_mapping(response)
        if not isinstance(response, Response):
            raise StepDispatchFailure(
                f"Transport returned {type(response).__name__}, expected a response",
                step.name,
            )
        return response

    def _log_response(self, response: Response) -> None:
        self._log("Response status: %s", response.status)
        self._log("Response headers: %s", response.headers)
        self._log("Response body: %s", response.data)

    def _log(self, message: str, *args: Any) -> None:
        logger.log(logging.INFO if self.verbose else logging.DEBUG, message, *args)
