"""Transport module - HTTP communication."""

from .http_client import HttpClient, format_error_message
from .response import Response
from .retry_policy import (
    LinearRetryPolicy,
    default_retry_policy,
    linear_retry_policy,
)

__all__ = [
    "HttpClient",
    "Response",
    "format_error_message",
    "LinearRetryPolicy",
    "default_retry_policy",
    "linear_retry_policy",
]
