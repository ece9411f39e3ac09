"""Extractors module - deriving variables from responses."""

from . import helpers
from .engine import BUILTIN_EXTRACTORS, Diagnostic, ExtractionReport, Extractor
from .path_resolver import get_header, resolve_path
from .rules import (
    ArrayRule,
    BuiltinRef,
    ComputedRule,
    ConditionalRule,
    CustomFn,
    FieldRule,
    MultipleRule,
    PathRule,
    RegexRule,
    RuleKind,
    parse_rule,
)

__all__ = [
    "helpers",
    "BUILTIN_EXTRACTORS",
    "Diagnostic",
    "ExtractionReport",
    "Extractor",
    "get_header",
    "resolve_path",
    "ArrayRule",
    "BuiltinRef",
    "ComputedRule",
    "ConditionalRule",
    "CustomFn",
    "FieldRule",
    "MultipleRule",
    "PathRule",
    "RegexRule",
    "RuleKind",
    "parse_rule",
]
