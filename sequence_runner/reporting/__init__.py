"""Reporting module - JSON reports and CLI output."""

from .json_reporter import JsonReporter

__all__ = ["JsonReporter"]
