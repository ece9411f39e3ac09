"""Extractor engine.

Evaluates an extraction spec (variable name -> rule) against a response
and returns the extracted variables. Each entry is isolated: a failing
rule is recorded as a diagnostic and its key left out, the remaining
keys are still extracted.
"""

import json
import logging
import re
import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from .. import awaitables
from ..errors import UnsupportedRuleError
from ..transport.response import Response
from .path_resolver import get_header, resolve_path, response_field
from .rules import RuleKind, parse_rule

logger = logging.getLogger(__name__)


@dataclass
class Diagnostic:
    """Why one extraction entry or condition did not produce a value."""
    key: str
    message: str


@dataclass
class ExtractionReport:
    """Extracted values plus diagnostics for the entries that failed."""
    values: dict[str, Any] = field(default_factory=dict)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.diagnostics


def _data(response: Any) -> Any:
    return response_field(response, "data")


def _data_field(name: str) -> Callable[[Any], Any]:
    def extractor(response):
        data = _data(response)
        return data.get(name) if isinstance(data, Mapping) else None
    return extractor


def _list_item(index: int) -> Callable[[Any], Any]:
    def extractor(response):
        data = _data(response)
        if isinstance(data, list) and -len(data) <= index < len(data):
            return data[index]
        return None
    return extractor


def _header(name: str) -> Callable[[Any], Any]:
    return lambda response: get_header(response_field(response, "headers"), name)


def _count(response: Any) -> Optional[int]:
    data = _data(response)
    return len(data) if isinstance(data, list) else None


def _first_cookie(response: Any) -> Any:
    cookies = get_header(response_field(response, "headers"), "set-cookie")
    if isinstance(cookies, list):
        return cookies[0] if cookies else None
    return cookies


def _response_size(response: Any) -> int:
    data = _data(response)
    if data:
        return len(json.dumps(data, default=str))
    return 0


def _full_response(response: Any) -> Any:
    return response


BUILTIN_EXTRACTORS: dict[str, Callable[[Any], Any]] = {
    # common response fields
    "id": _data_field("id"),
    "status": lambda response: response_field(response, "status"),
    "status_text": lambda response: response_field(response, "status_text"),
    "message": _data_field("message"),
    "error": _data_field("error"),
    "success": _data_field("success"),
    # headers
    "location": _header("location"),
    "content_type": _header("content-type"),
    "content_length": _header("content-length"),
    "set_cookie": _header("set-cookie"),
    "etag": _header("etag"),
    "last_modified": _header("last-modified"),
    "first_cookie": _first_cookie,
    # whole pieces
    "data": _data,
    "full_response": _full_response,
    "headers": lambda response: response_field(response, "headers"),
    # arrays
    "first_item": _list_item(0),
    "second_item": _list_item(1),
    "last_item": _list_item(-1),
    "count": _count,
    # clock
    "timestamp": lambda response: datetime.now(timezone.utc).isoformat(),
    "unix_timestamp": lambda response: int(time.time()),
    "date_now": lambda response: datetime.now(timezone.utc),
    # constants
    "none": lambda response: None,
    "empty": lambda response: "",
    "empty_list": lambda response: [],
    "empty_dict": lambda response: {},
    # metadata
    "response_size": _response_size,
}


class Extractor:
    """Evaluates extraction specs against responses."""

    def __init__(
        self,
        custom_extractors: Optional[Mapping[str, Callable[[Any], Any]]] = None,
    ):
        """Initialize extractor.

        Args:
            custom_extractors: Named extractors that take precedence over
                               built-ins with the same name.
        """
        self.builtins: dict[str, Callable[[Any], Any]] = dict(BUILTIN_EXTRACTORS)
        self.custom: dict[str, Callable[[Any], Any]] = dict(custom_extractors or {})

    def register(self, name: str, func: Callable[[Any], Any]) -> None:
        """Register a named custom extractor (last registration wins)."""
        self.custom[name] = func

    def extract(self, spec: Mapping[str, Any], response: Any) -> dict[str, Any]:
        """Extract variables, returning only the ones that succeeded."""
        return self.extract_with_diagnostics(spec, response).values

    def extract_with_diagnostics(
        self,
        spec: Mapping[str, Any],
        response: Any,
    ) -> ExtractionReport:
        """Extract variables and report the entries that failed.

        Args:
            spec: Mapping of variable name to extraction rule.
            response: Response (or response-shaped mapping) to read from.

        Returns:
            ExtractionReport with values and diagnostics.
        """
        report = ExtractionReport()
        if not isinstance(spec, Mapping):
            report.diagnostics.append(Diagnostic(
                key="",
                message=f"Extraction spec must be a mapping, got {type(spec).__name__}",
            ))
            logger.warning(report.diagnostics[-1].message)
            return report

        for name, raw_rule in spec.items():
            try:
                rule = parse_rule(raw_rule, self.builtins, self.custom)
            except UnsupportedRuleError as e:
                self._record(report, name, f"Unknown extractor for variable '{name}': {e}")
                continue

            try:
                report.values[name] = self._evaluate(rule, response, report, name)
            except Exception as e:
                self._record(report, name, f"Extraction failed for variable '{name}': {e}")

        return report

    def extract_value(self, rule: Any, response: Any) -> Any:
        """Extract a single rule, returning None when it fails."""
        return self.extract({"value": rule}, response).get("value")

    def evaluate_condition(
        self,
        condition: Any,
        response: Any,
        diagnostics: Optional[list[Diagnostic]] = None,
    ) -> bool:
        """Evaluate a condition used by conditional rules.

        Supported forms: a callable of the response, ``{path, equals}``,
        ``{path, not_equals}``, ``{path, matches}``, ``{path, exists}``,
        ``{status}`` and ``{status_range: [min, max]}``. Anything else, or
        any error while evaluating, is False.
        """
        try:
            if callable(condition):
                return bool(awaitables.call(condition, response))

            if not isinstance(condition, Mapping):
                return False

            path = condition.get("path")
            if path and "equals" in condition:
                return resolve_path(path, response) == condition["equals"]

            if path and "not_equals" in condition:
                return resolve_path(path, response) != condition["not_equals"]

            if path and condition.get("matches"):
                value = resolve_path(path, response)
                return isinstance(value, str) and re.search(condition["matches"], value) is not None

            if path and "exists" in condition:
                value = resolve_path(path, response)
                return (value is not None) if condition["exists"] else (value is None)

            if condition.get("status"):
                return response_field(response, "status") == condition["status"]

            if condition.get("status_range"):
                low, high = condition["status_range"]
                status = response_field(response, "status")
                return status is not None and low <= status <= high

            return False

        except Exception as e:
            message = f"Condition evaluation failed: {e}"
            logger.warning(message)
            if diagnostics is not None:
                diagnostics.append(Diagnostic(key="condition", message=message))
            return False

    def _evaluate(self, rule: Any, response: Any, report: ExtractionReport, key: str) -> Any:
        kind = rule.kind

        if kind == RuleKind.PATH:
            return resolve_path(rule.path, response)

        if kind == RuleKind.BUILTIN:
            return self.builtins[rule.name](response)

        if kind in (RuleKind.CUSTOM, RuleKind.COMPUTED):
            return awaitables.call(rule.func, response)

        if kind == RuleKind.FIELD:
            value = resolve_path(rule.path, response)
            if rule.transform is not None:
                value = rule.transform(value, response)
            if rule.filter is not None and not rule.filter(value, response):
                value = None
            if value is None and rule.default is not None:
                value = rule.default
            return value

        if kind == RuleKind.MULTIPLE:
            nested = self.extract_with_diagnostics(rule.rules, response)
            for diagnostic in nested.diagnostics:
                report.diagnostics.append(Diagnostic(
                    key=f"{key}.{diagnostic.key}",
                    message=diagnostic.message,
                ))
            return nested.values

        if kind == RuleKind.CONDITIONAL:
            for branch in rule.branches:
                if self.evaluate_condition(branch.condition, response, report.diagnostics):
                    return self._evaluate(
                        parse_rule(branch.rule, self.builtins, self.custom),
                        response, report, key,
                    )
            return rule.default

        if kind == RuleKind.ARRAY:
            return self._evaluate_array(rule, response, report, key)

        if kind == RuleKind.REGEX:
            source = (
                resolve_path(rule.source, response)
                if rule.source
                else _serialize_response(response)
            )
            if isinstance(source, str):
                match = re.search(rule.pattern, source)
                if match:
                    return match.group(rule.group if rule.group is not None else 0)
            return rule.default

        raise UnsupportedRuleError(f"Unsupported rule kind: {kind}")

    def _evaluate_array(self, rule: Any, response: Any, report: ExtractionReport, key: str) -> Any:
        items = resolve_path(rule.path, response)
        if not isinstance(items, Sequence) or isinstance(items, (str, bytes)):
            return rule.default if rule.default is not None else []

        if rule.map is not None:
            # Each element is extracted on its own; a failing element maps to None.
            mapped = []
            for index, item in enumerate(items):
                nested = self.extract_with_diagnostics({"item": rule.map}, Response(data=item))
                for diagnostic in nested.diagnostics:
                    report.diagnostics.append(Diagnostic(
                        key=f"{key}[{index}]",
                        message=diagnostic.message,
                    ))
                mapped.append(nested.values.get("item"))
            return mapped

        if rule.filter is not None:
            return [item for item in items if rule.filter(item)]

        if rule.find is not None:
            return next((item for item in items if rule.find(item)), None)

        if rule.pluck:
            return [resolve_path(rule.pluck, Response(data=item)) for item in items]

        return list(items)

    @staticmethod
    def _record(report: ExtractionReport, key: str, message: str) -> None:
        logger.warning(message)
        report.diagnostics.append(Diagnostic(key=key, message=message))


def _serialize_response(response: Any) -> str:
    if isinstance(response, Response):
        return response.to_json()
    return json.dumps(response, default=str, ensure_ascii=False)
