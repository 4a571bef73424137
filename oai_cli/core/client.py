"""
Core HTTP client for the OpenAI API.

Handles authentication, request dispatch, response decoding, binary
streaming and error handling. Every resource operation in the SDK layer
goes through ``APIClient``.
"""

import json
import shutil
import urllib.error
import urllib.request
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, BinaryIO, Protocol

from oai_cli.core.multipart import encode_multipart
from oai_cli.core.types import ErrorEnvelope, as_params

# Configuration
DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_TIMEOUT = 30

CONTENT_TYPE_JSON = "application/json"
HEADER_CONTENT_TYPE = "Content-Type"
HEADER_AUTHORIZATION = "Authorization"
HEADER_ORGANIZATION = "OpenAI-Organization"


class CLIError(Exception):
    """Base error class for CLI errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result: dict[str, Any] = {"error": self.message}
        if self.details:
            result["details"] = self.details
        return result


class APIError(CLIError):
    """Error reported by the API in a response with status >= 400."""

    def __init__(self, envelope: ErrorEnvelope, status: int = 0):
        super().__init__(envelope.render(), details=envelope.to_dict())
        self.envelope = envelope
        self.status = status

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result = super().to_dict()
        if self.status:
            result["status"] = self.status
        return result


class RequestTimeoutError(CLIError):
    """The transport gave up waiting for the API."""

    def __init__(self, timeout: float | None = None):
        super().__init__("request timeout", details={"timeout": timeout} if timeout else None)
        self.timeout = timeout


class BadStatusError(CLIError):
    """A streaming request answered with anything other than 200 OK."""

    def __init__(self, status: int, reason: str = ""):
        super().__init__(f"bad status: {status} {reason}".rstrip())
        self.status = status
        self.reason = reason

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["status"] = self.status
        return result


class ValidationError(CLIError):
    """Validation error for local input/data issues (not API errors)."""


# =============================================================================
# Configuration
# =============================================================================


@dataclass(frozen=True)
class Config:
    """Client configuration, immutable once built."""

    api_key: str = field(repr=False)
    organization_id: str = ""
    request_timeout: float | None = DEFAULT_TIMEOUT
    base_url: str = DEFAULT_BASE_URL

    def __post_init__(self) -> None:
        if not self.api_key:
            raise ValidationError("API key required. Set OPENAI_API_KEY or pass api_key")
        if not self.request_timeout:
            object.__setattr__(self, "request_timeout", DEFAULT_TIMEOUT)
        object.__setattr__(self, "organization_id", self.organization_id or "")
        object.__setattr__(self, "base_url", (self.base_url or DEFAULT_BASE_URL).rstrip("/"))


# =============================================================================
# Transport
# =============================================================================


class Response(Protocol):
    """What the client needs from an HTTP response."""

    status: int
    reason: str

    def read(self, amt: int | None = None) -> bytes: ...

    def close(self) -> None: ...


Opener = Callable[[urllib.request.Request, float], Response]


def urlopen_any_status(request: urllib.request.Request, timeout: float) -> Response:
    """Open ``request`` and hand back the response whatever its status."""
    try:
        return urllib.request.urlopen(request, timeout=timeout)
    except urllib.error.HTTPError as e:
        # HTTPError doubles as the response object for >= 400 statuses
        return e


def _is_timeout(exc: BaseException) -> bool:
    if isinstance(exc, TimeoutError):
        return True
    return isinstance(exc, urllib.error.URLError) and isinstance(exc.reason, TimeoutError)


@contextmanager
def _translate_timeouts(timeout: float | None) -> Iterator[None]:
    try:
        yield
    except (TimeoutError, urllib.error.URLError) as e:
        if _is_timeout(e):
            raise RequestTimeoutError(timeout) from e
        raise


def _status_of(response: Response) -> int:
    status = getattr(response, "status", None)
    if status is None:
        status = getattr(response, "code", 0)
    return int(status)


# =============================================================================
# Response decoding
# =============================================================================


def decode_response(response: Response) -> bytes:
    """
    Turn a completed response into raw success bytes or an exception.

    Args:
        response: Response whose body has not been read yet

    Returns:
        The full response body for statuses below 400

    Raises:
        APIError: For statuses >= 400 with a well-formed error body
        json.JSONDecodeError: If an error body is not valid JSON
        ValueError: If an error body is valid JSON but not a well-formed envelope

    """
    try:
        status = _status_of(response)
        body = response.read()
    finally:
        response.close()

    if status < 400:
        return body

    payload = json.loads(body)
    if not isinstance(payload, dict):
        raise ValueError(f"Unexpected error body of type {type(payload).__name__} (status {status})")
    raise APIError(ErrorEnvelope.from_dict(payload), status=status)


class APIClient:
    """
    Low-level HTTP client for the OpenAI API.

    Handles:
    - Bearer authentication and the optional organization header
    - JSON and multipart request bodies
    - Error envelope decoding
    - Streaming binary downloads into a sink
    """

    def __init__(self, config: Config, opener: Opener | None = None):
        """
        Initialize the API client.

        Args:
            config: Immutable client configuration
            opener: Callable dispatching a prepared request (defaults to urllib)

        """
        self.config = config
        self._opener = opener or urlopen_any_status

    def _build_url(self, path: str) -> str:
        """Build full URL from path."""
        if path.startswith("http"):
            return path
        return f"{self.config.base_url}{path}"

    def send(
        self,
        url: str,
        method: str,
        body: bytes | None = None,
        content_type: str = "",
    ) -> Response:
        """
        Build and dispatch one authenticated request.

        Args:
            url: Absolute request URL
            method: HTTP method
            body: Optional request body
            content_type: Content-Type header value, omitted when empty

        Note:
            The default opener is urllib, which itself adds
            ``Content-Type: application/x-www-form-urlencoded`` to a request
            that carries a body but no Content-Type. Pass ``content_type``
            whenever ``body`` is given.

        Returns:
            The response, for any HTTP status

        Raises:
            RequestTimeoutError: If the transport timed out
            urllib.error.URLError: On any other transport failure

        """
        req = urllib.request.Request(url, data=body, method=method)
        if content_type:
            req.add_header(HEADER_CONTENT_TYPE, content_type)
        req.add_header(HEADER_AUTHORIZATION, f"Bearer {self.config.api_key}")
        if self.config.organization_id:
            req.add_header(HEADER_ORGANIZATION, self.config.organization_id)

        with _translate_timeouts(self.config.request_timeout):
            return self._opener(req, self.config.request_timeout)

    def request(
        self,
        url: str,
        method: str,
        body: bytes | None = None,
        content_type: str = "",
    ) -> bytes:
        """Send a request and return the decoded success body."""
        response = self.send(url, method, body, content_type)
        with _translate_timeouts(self.config.request_timeout):
            return decode_response(response)

    def stream(
        self,
        url: str,
        method: str,
        body: bytes | None,
        content_type: str,
        sink: BinaryIO,
    ) -> None:
        """
        Send a request and copy a 200 OK body into ``sink`` chunk by chunk.

        Raises:
            BadStatusError: For any status other than 200

        """
        response = self.send(url, method, body, content_type)
        try:
            status = _status_of(response)
            if status != 200:
                raise BadStatusError(status, getattr(response, "reason", "") or "")
            with _translate_timeouts(self.config.request_timeout):
                shutil.copyfileobj(response, sink)
        finally:
            response.close()

    # =========================================================================
    # JSON helpers
    # =========================================================================

    def request_json(self, method: str, path: str, data: Any = None) -> bytes:
        """Send ``data`` (params dataclass or dict) as a JSON body."""
        body = json.dumps(as_params(data)).encode("utf-8") if data is not None else None
        return self.request(self._build_url(path), method, body, CONTENT_TYPE_JSON)

    def get(self, path: str) -> Any:
        """Make a GET request."""
        return json.loads(self.request_json("GET", path))

    def post(self, path: str, data: Any = None) -> Any:
        """Make a POST request with a JSON body."""
        return json.loads(self.request_json("POST", path, data))

    def delete(self, path: str) -> Any:
        """Make a DELETE request."""
        return json.loads(self.request_json("DELETE", path))

    def post_multipart(self, path: str, params: Any) -> Any:
        """Make a POST request with a multipart/form-data body."""
        body, content_type = encode_multipart(params)
        return json.loads(self.request(self._build_url(path), "POST", body, content_type))

    def download(self, path: str, sink: BinaryIO) -> None:
        """Stream the body of a GET request into ``sink``."""
        self.stream(self._build_url(path), "GET", None, "", sink)
