"""Validation engine for step responses.

A validation spec is one of:
- a callable predicate of the response (may be ``async``)
- the name of a registered custom or built-in predicate
- a mapping of name -> spec, all of which must pass
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .. import awaitables
from ..extractors.path_resolver import get_header, response_field

logger = logging.getLogger(__name__)


@dataclass
class ValidationOutcome:
    """Result of evaluating a validation spec."""
    passed: bool
    failed_key: Optional[str] = None
    message: str = ""


def _status_is(code: int) -> Callable[[Any], bool]:
    return lambda response: response_field(response, "status") == code


def _status_between(low: int, high: int) -> Callable[[Any], bool]:
    def predicate(response):
        status = response_field(response, "status")
        return isinstance(status, int) and low <= status < high
    return predicate


def content_type(response: Any) -> str:
    value = get_header(response_field(response, "headers"), "content-type")
    return value if isinstance(value, str) else ""


BUILTIN_VALIDATORS: dict[str, Callable[[Any], bool]] = {
    "status_200": _status_is(200),
    "status_201": _status_is(201),
    "status_204": _status_is(204),
    "status_400": _status_is(400),
    "status_401": _status_is(401),
    "status_403": _status_is(403),
    "status_404": _status_is(404),
    "status_500": _status_is(500),
    "status_success": _status_between(200, 300),
    "status_redirect": _status_between(300, 400),
    "status_client_error": _status_between(400, 500),
    "status_server_error": _status_between(500, 600),
    "has_content_type": lambda response: bool(content_type(response)),
    "is_json": lambda response: "application/json" in content_type(response),
    "is_xml": lambda response: (
        "application/xml" in content_type(response) or "text/xml" in content_type(response)
    ),
    "is_html": lambda response: "text/html" in content_type(response),
}


class Combinator:
    """Predicate composed of other validation rules.

    A Validator evaluating a combinator passes itself in, so names
    registered on it resolve inside the combination. Called directly, the
    combinator falls back to a fresh Validator with built-ins only.
    """

    def __init__(self, evaluate: Callable[["Validator", Any], bool]):
        self._evaluate = evaluate

    def evaluate(self, validator: "Validator", response: Any) -> bool:
        return self._evaluate(validator, response)

    def __call__(self, response: Any) -> bool:
        return self._evaluate(Validator(), response)


class Validator:
    """Evaluates validation specs against responses.

    Errors raised by predicates never escape: they count as a failed
    validation.
    """

    def __init__(self, custom_validators: Optional[Mapping[str, Callable]] = None):
        """Initialize validator.

        Args:
            custom_validators: Named predicates that take precedence over
                               built-ins with the same name.
        """
        self.builtins: dict[str, Callable[[Any], Any]] = dict(BUILTIN_VALIDATORS)
        self.custom: dict[str, Callable[[Any], Any]] = dict(custom_validators or {})

    def register(self, name: str, predicate: Callable[[Any], Any]) -> None:
        """Register a named custom validator (last registration wins)."""
        self.custom[name] = predicate

    def validate(self, spec: Any, response: Any) -> bool:
        """Evaluate ``spec`` against ``response``."""
        return self.check(spec, response).passed

    def check(self, spec: Any, response: Any) -> ValidationOutcome:
        """Evaluate ``spec`` and report which entry failed, if any."""
        try:
            if isinstance(spec, Mapping):
                return self._check_mapping(spec, response)

            if isinstance(spec, str):
                predicate = self.custom.get(spec) or self.builtins.get(spec)
                if predicate is None:
                    message = f"Unknown validator: '{spec}'"
                    logger.warning(message)
                    return ValidationOutcome(passed=False, failed_key=spec, message=message)
                result = self._call(predicate, response)
            elif callable(spec):
                result = self._call(spec, response)
            else:
                message = (
                    f"Invalid validator type: {type(spec).__name__}. "
                    "Expected callable, string, or mapping."
                )
                logger.warning(message)
                return ValidationOutcome(passed=False, message=message)

            if not isinstance(result, bool):
                logger.warning("Validator returned non-boolean value %r, coercing to bool", result)
                result = bool(result)

            return ValidationOutcome(passed=result)

        except Exception as e:
            message = f"Validation error: {e}"
            logger.error(message)
            return ValidationOutcome(passed=False, message=message)

    def _call(self, predicate: Callable[[Any], Any], response: Any) -> Any:
        if isinstance(predicate, Combinator):
            return predicate.evaluate(self, response)
        return awaitables.call(predicate, response)

    def _check_mapping(self, spec: Mapping, response: Any) -> ValidationOutcome:
        for key, sub_spec in spec.items():
            outcome = self.check(sub_spec, response)
            if not outcome.passed:
                logger.error("Validation failed for: %s", key)
                return ValidationOutcome(
                    passed=False,
                    failed_key=str(key),
                    message=outcome.message or f"Validation failed for: {key}",
                )
        return ValidationOutcome(passed=True)
