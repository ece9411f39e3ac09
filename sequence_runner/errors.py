"""Exception hierarchy for sequence-runner.

Only the three step failure kinds abort a scenario. Everything else is
either raised at load time (structure/config errors) or isolated where it
occurs (extraction entries, conditions, reporters).
"""

from typing import Any, Optional


class SequenceRunnerError(Exception):
    """Base class for all sequence-runner errors."""


class ScenarioStructureError(SequenceRunnerError, ValueError):
    """Malformed scenario or step, raised before any step executes."""


class ConfigError(SequenceRunnerError, ValueError):
    """Malformed configuration file or environment override."""


class UnknownHookError(SequenceRunnerError, ValueError):
    """Middleware registered under a hook name the runner does not know."""


class UnsupportedRuleError(SequenceRunnerError):
    """Extraction rule with a shape the extractor cannot evaluate."""


# Transport

class TransportError(SequenceRunnerError):
    """Base class for failures signalled by the transport."""


class ServerErrorResponse(TransportError):
    """The server answered with a non-success status."""

    def __init__(
        self,
        message: str,
        status: int,
        status_text: str = "",
        data: Any = None,
    ):
        super().__init__(message)
        self.status = status
        self.status_text = status_text
        self.data = data


class NetworkError(TransportError):
    """The request was sent but no response was received."""


class RequestSetupError(TransportError):
    """The request could not be built or sent."""


# Steps

class StepFailure(SequenceRunnerError):
    """A scenario-fatal failure of one step."""

    def __init__(self, message: str, step_name: str):
        super().__init__(message)
        self.step_name = step_name


class StepValidationFailure(StepFailure):
    """The step's validation rule evaluated to False."""

    def __init__(self, step_name: str, failed_key: Optional[str] = None):
        super().__init__(f"Validation failed for step: {step_name}", step_name)
        self.failed_key = failed_key


class StepDispatchFailure(StepFailure):
    """The transport signalled a server, network or setup failure."""

    def __init__(
        self,
        message: str,
        step_name: str,
        status: Optional[int] = None,
        data: Any = None,
    ):
        super().__init__(message, step_name)
        self.status = status
        self.data = data


class StepHandlerFailure(StepFailure):
    """A step handler or step hook raised an unexpected exception."""


class ScenarioFailure(SequenceRunnerError):
    """Fail-fast abort of a scenario run."""

    def __init__(
        self,
        step_number: int,
        step_name: str,
        cause: Exception,
        results: Optional[list] = None,
    ):
        super().__init__(f"Scenario failed at step {step_number}: {step_name}")
        self.step_number = step_number
        self.step_name = step_name
        self.cause = cause
        self.results = list(results or [])
