"""HTTP client used as the transport collaborator of the runner.

Implements ``send(method, url, body, headers) -> Response`` on top of a
``requests.Session`` and maps every failure onto one of three signals:

- ServerErrorResponse - the server answered with a non-2xx status
- NetworkError        - no response was received
- RequestSetupError   - the request could not be built
"""

import base64
import logging
import time
from typing import Any, Optional

import requests

from ..errors import NetworkError, RequestSetupError, ServerErrorResponse
from .response import Response
from .retry_policy import LinearRetryPolicy, default_retry_policy

logger = logging.getLogger(__name__)

JSON_BODY_METHODS = {"POST", "PUT", "PATCH", "DELETE"}
QUERY_BODY_METHODS = {"GET"}

_SETUP_ERRORS = (
    requests.exceptions.MissingSchema,
    requests.exceptions.InvalidSchema,
    requests.exceptions.InvalidURL,
    requests.exceptions.InvalidHeader,
    requests.exceptions.URLRequired,
)


class HttpClient:
    """requests-based transport with default headers and linear retries."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        headers: Optional[dict[str, str]] = None,
        retry_policy: Optional[LinearRetryPolicy] = None,
        request_delay: float = 0.0,
        raise_for_status: bool = True,
        verify: bool = True,
    ):
        """Initialize HTTP client.

        Args:
            base_url: Base URL prepended to relative step URLs.
            timeout: Per-request timeout in seconds.
            headers: Default headers sent with every request.
            retry_policy: Retry policy for network errors and 5xx responses.
            request_delay: Seconds to wait before every request.
            raise_for_status: If True, non-2xx responses raise ServerErrorResponse.
            verify: Verify TLS certificates. False accepts self-signed ones.
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retry_policy = retry_policy or default_retry_policy()
        self.request_delay = request_delay
        self.raise_for_status = raise_for_status
        self._session = requests.Session()
        self._session.verify = verify
        self._session.headers.update({
            "Content-Type": "application/json",
            "Accept": "application/json",
        })
        if headers:
            self._session.headers.update(headers)

    @property
    def default_headers(self) -> dict[str, str]:
        """Headers sent with every request unless a step overrides them."""
        return dict(self._session.headers)

    def send(
        self,
        method: str,
        url: str,
        body: Any = None,
        headers: Optional[dict[str, str]] = None,
    ) -> Response:
        """Send one request and return its Response.

        Args:
            method: HTTP method.
            url: Absolute URL or path relative to ``base_url``.
            body: JSON body (POST/PUT/PATCH/DELETE) or query params (GET).
                  Other methods send no body.
            headers: Headers overriding the defaults for this request.

        Returns:
            Response with decoded JSON data when possible.

        Raises:
            ServerErrorResponse: Non-2xx status (when raise_for_status is set).
            NetworkError: Connection failure or timeout after all retries.
            RequestSetupError: Malformed request.
        """
        method = method.upper()
        full_url = self.build_url(url)
        kwargs: dict[str, Any] = {"timeout": self.timeout}
        if headers:
            kwargs["headers"] = {str(k): str(v) for k, v in headers.items()}
        if body is not None:
            if method in QUERY_BODY_METHODS:
                kwargs["params"] = body
            elif method in JSON_BODY_METHODS:
                if isinstance(body, (str, bytes)):
                    kwargs["data"] = body
                else:
                    kwargs["json"] = body
            else:
                logger.warning("Ignoring request body for %s %s", method, full_url)

        raw = self._request_with_retry(method, full_url, **kwargs)
        response = Response(
            status=raw.status_code,
            status_text=raw.reason or "",
            headers=dict(raw.headers),
            data=_decode_body(raw),
        )
        logger.debug("%s %s -> %s %s", method, full_url, response.status, response.status_text)

        if self.raise_for_status and not 200 <= response.status < 300:
            raise ServerErrorResponse(
                format_error_message(response),
                status=response.status,
                status_text=response.status_text,
                data=response.data,
            )
        return response

    def request(self, method: str, url: str, body: Any = None, **kwargs) -> Response:
        return self.send(method, url, body, headers=kwargs.get("headers"))

    def get(self, url: str, params: Any = None, headers: Optional[dict] = None) -> Response:
        return self.send("GET", url, params, headers)

    def post(self, url: str, body: Any = None, headers: Optional[dict] = None) -> Response:
        return self.send("POST", url, body, headers)

    def put(self, url: str, body: Any = None, headers: Optional[dict] = None) -> Response:
        return self.send("PUT", url, body, headers)

    def patch(self, url: str, body: Any = None, headers: Optional[dict] = None) -> Response:
        return self.send("PATCH", url, body, headers)

    def delete(self, url: str, body: Any = None, headers: Optional[dict] = None) -> Response:
        return self.send("DELETE", url, body, headers)

    def head(self, url: str, headers: Optional[dict] = None) -> Response:
        return self.send("HEAD", url, None, headers)

    def options(self, url: str, headers: Optional[dict] = None) -> Response:
        return self.send("OPTIONS", url, None, headers)

    def build_url(self, url: str) -> str:
        """Join a step URL onto the base URL unless it is already absolute."""
        if url.startswith(("http://", "https://")):
            return url
        if not url.startswith("/"):
            url = f"/{url}"
        return f"{self.base_url}{url}"

    # Authentication and default headers

    def set_auth_token(self, token: Optional[str]) -> None:
        """Set (or clear with None) a bearer token."""
        if token:
            self._session.headers["Authorization"] = f"Bearer {token}"
        else:
            self._session.headers.pop("Authorization", None)

    def set_api_key(self, key: Optional[str], header_name: str = "X-API-Key") -> None:
        if key:
            self._session.headers[header_name] = key
        else:
            self._session.headers.pop(header_name, None)

    def set_basic_auth(self, username: Optional[str], password: Optional[str]) -> None:
        if username and password:
            credentials = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
            self._session.headers["Authorization"] = f"Basic {credentials}"
        else:
            self._session.headers.pop("Authorization", None)

    # Connection settings

    def set_timeout(self, timeout: float) -> None:
        self.timeout = timeout

    def set_ssl_verify(self, verify: bool) -> None:
        """Enable or disable TLS certificate verification."""
        self._session.verify = verify

    @property
    def verify(self) -> bool:
        return bool(self._session.verify)

    def set_headers(self, headers: dict[str, str]) -> None:
        self._session.headers.update(headers)

    def remove_header(self, name: str) -> None:
        self._session.headers.pop(name, None)

    def _request_with_retry(
        self,
        method: str,
        url: str,
        **kwargs,
    ) -> requests.Response:
        """Execute HTTP request with retry logic.

        Retries connection errors, timeouts and 5xx responses; never 4xx.

        Returns:
            The last requests.Response received.
        """
        attempt = 0
        while True:
            if self.request_delay > 0:
                time.sleep(self.request_delay)

            try:
                response = self._session.request(method, url, **kwargs)
            except _SETUP_ERRORS as e:
                raise RequestSetupError(f"Request error: {e}") from e
            except (requests.ConnectionError, requests.Timeout) as e:
                if self.retry_policy.should_retry(attempt):
                    self._wait_before_retry(attempt, method, url)
                    attempt += 1
                    continue
                raise NetworkError(f"Network error: {e}") from e
            except (TypeError, ValueError) as e:
                raise RequestSetupError(f"Request error: {e}") from e
            except requests.RequestException as e:
                raise NetworkError(f"Network error: {e}") from e

            if response.status_code >= 500 and self.retry_policy.should_retry(attempt):
                self._wait_before_retry(attempt, method, url)
                attempt += 1
                continue

            return response

    def _wait_before_retry(self, attempt: int, method: str, url: str) -> None:
        delay = self.retry_policy.get_delay(attempt)
        logger.info(
            "Retrying %s %s (attempt %d/%d) in %.2fs",
            method, url, attempt + 1, self.retry_policy.max_retries, delay,
        )
        time.sleep(delay)

    def close(self) -> None:
        """Close the HTTP session."""
        self._session.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


def format_error_message(response: Response) -> str:
    """Describe a failed response including the most useful part of its body."""
    message = f"API request failed: {response.status} {response.status_text}".rstrip()
    data = response.data
    if data:
        if isinstance(data, str):
            message += f". {data}"
        elif isinstance(data, dict) and data.get("message"):
            message += f". {data['message']}"
        elif isinstance(data, dict) and data.get("error"):
            message += f". {data['error']}"
        else:
            message += f". Details: {data}"
    return message


def _decode_body(raw: requests.Response) -> Any:
    if not raw.content:
        return None
    try:
        return raw.json()
    except ValueError:
        return raw.text
