"""
Pipedrive API client used by the workflow tasks.

Based on Pipedrive REST API v2: https://developers.pipedrive.com/docs/api/v1

Authentication:
- API token passed as the ``api_token`` query parameter on every request (never a header)

Responses:
- Every endpoint wraps its payload as {"success", "data", "error", "error_info", "additional_data"}

Rate limits:
- HTTP 429 and 5xx are retried with exponential backoff (1s, then 2s), 3 attempts in total
"""

import threading
from collections.abc import Mapping
from typing import Any, TypeVar

import httpx
import simplejson
from pydantic import BaseModel, ValidationError

from pipedrive_tasks.clients.pipedrive.exceptions import (
    ConfigurationError,
    RemoteRequestError,
    ResponseDecodeError,
)
from pipedrive_tasks.clients.pipedrive.pipedrive_models import PipedriveResponse
from pipedrive_tasks.clients.pipedrive.retry import (
    DEFAULT_RETRY_POLICY,
    RetryPolicy,
    send_with_retries,
)
from pipedrive_tasks.utils.config import (
    DEFAULT_PIPEDRIVE_API_URL,
    DEFAULT_PIPEDRIVE_TIMEOUT_SECONDS,
    get_pipedrive_api_token,
    get_pipedrive_api_url,
    get_pipedrive_timeout_seconds,
)
from pipedrive_tasks.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

JSON_CONTENT_TYPE = "application/json; charset=utf-8"

# One task invocation makes one logical call, so a small pool is plenty
_pipedrive_connection_limits = httpx.Limits(
    max_connections=4,
    max_keepalive_connections=2,
)


def build_url(base_url: str, path: str, api_token: str) -> str:
    """Append the api_token query parameter to base_url + path.

    The token is appended verbatim, it is not URL-encoded.
    """
    separator = "&" if "?" in path else "?"
    return f"{base_url}{path}{separator}api_token={api_token}"


def _encode_fallback(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(exclude_none=True)
    return str(value)


def serialize_body(body: BaseModel | Mapping[str, Any]) -> bytes:
    """Encode a request body as JSON, leaving out null fields.

    Pydantic models are dumped with their (snake_case) field names. For plain mappings only
    top-level None values are dropped, nested values go out as given. Decimals are written as
    exact JSON numbers on both paths.
    """
    if isinstance(body, BaseModel):
        payload = body.model_dump(exclude_none=True)
    else:
        payload = {key: value for key, value in body.items() if value is not None}

    return simplejson.dumps(payload, use_decimal=True, default=_encode_fallback).encode("utf-8")


def decode_envelope(text: str, data_type: type[T] | Any = Any) -> PipedriveResponse[T]:
    """Decode a Pipedrive response body into an envelope whose data has the requested shape.

    JSON floats are read as Decimal so money keeps every digit, float fields convert back.

    Args:
        text: Raw response body
        data_type: Shape of ``data`` (Person, Deal, Note, dict[str, Any], int, ...)

    Raises:
        ResponseDecodeError: Body is not JSON or does not fit the envelope/data_type
    """
    try:
        payload = simplejson.loads(text, use_decimal=True)
    except simplejson.JSONDecodeError as e:
        logger.error(f"Pipedrive response is not valid JSON: {e}")
        raise ResponseDecodeError(f"Pipedrive response is not valid JSON: {e}", body=text) from e

    try:
        return PipedriveResponse[data_type].model_validate(payload)  # type: ignore[valid-type]
    except ValidationError as e:
        logger.error(f"Failed to decode Pipedrive response: {e}")
        raise ResponseDecodeError(f"Failed to decode Pipedrive response: {e}", body=text) from e


class PipedriveClient:
    """A client for the Pipedrive REST API, scoped to a single task invocation.

    Owns its own httpx connection pool; use it as a context manager (or call close()) so the
    pool is released on every exit path.

    All four verbs go through one exchange primitive wrapped by the retry policy.
    """

    def __init__(
        self,
        api_token: str,
        base_url: str | None = DEFAULT_PIPEDRIVE_API_URL,
        timeout: float = DEFAULT_PIPEDRIVE_TIMEOUT_SECONDS,
        connect_timeout: float | None = None,
        read_timeout: float | None = None,
        write_timeout: float | None = None,
        retry_policy: RetryPolicy = DEFAULT_RETRY_POLICY,
        cancel_event: threading.Event | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize the Pipedrive client.

        Args:
            api_token: Pipedrive API token
            base_url: API root, trailing slash stripped (defaults to the production v2 endpoint)
            timeout: Default for connect/read/write timeouts, in seconds
            connect_timeout: Overrides timeout for establishing connections
            read_timeout: Overrides timeout for reading responses
            write_timeout: Overrides timeout for sending request bodies
            retry_policy: Attempt budget and backoff schedule
            cancel_event: Set it from another thread to abandon a call during its backoff wait
            transport: Custom httpx transport (tests use httpx.MockTransport)
        """
        if not api_token:
            raise ConfigurationError("Pipedrive API token is required and cannot be empty")

        self._api_token = api_token
        self.base_url = (base_url or DEFAULT_PIPEDRIVE_API_URL).rstrip("/")
        self.retry_policy = retry_policy
        self._cancel_event = cancel_event
        self._client = httpx.Client(
            timeout=httpx.Timeout(
                timeout,
                connect=connect_timeout if connect_timeout is not None else timeout,
                read=read_timeout if read_timeout is not None else timeout,
                write=write_timeout if write_timeout is not None else timeout,
            ),
            limits=_pipedrive_connection_limits,
            headers={"Accept": "application/json"},
            transport=transport,
        )

    def __enter__(self) -> "PipedriveClient":
        return self

    def __exit__(self, _exc_type: Any, _exc: Any, _tb: Any) -> None:
        self.close()

    def close(self) -> None:
        """Release the connection pool. Safe to call more than once."""
        self._client.close()

    @property
    def is_closed(self) -> bool:
        return self._client.is_closed

    def build_url(self, path: str) -> str:
        return build_url(self.base_url, path, self._api_token)

    def _send(self, request: httpx.Request) -> httpx.Response:
        """Perform exactly one HTTP exchange, reading the full body."""
        return self._client.send(request)

    def _execute(
        self,
        method: str,
        path: str,
        data_type: type[T] | Any,
        body: BaseModel | Mapping[str, Any] | None = None,
    ) -> PipedriveResponse[T]:
        """Execute a request against the Pipedrive API and decode its envelope.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE)
            path: Endpoint path starting with "/" (e.g., "/persons/12")
            data_type: Shape to decode ``data`` into
            body: Optional JSON body for POST/PUT

        Returns:
            Decoded envelope; ``success`` is not checked here

        Raises:
            TransportError: Network failure on the last allowed attempt
            RemoteRequestError: HTTP status outside [200, 300)
            ResponseDecodeError: Body did not decode into the envelope
            RequestCancelledError: Cancelled while waiting to retry
        """
        headers: dict[str, str] = {}
        content: bytes | None = None
        if body is not None:
            content = serialize_body(body)
            headers["Content-Type"] = JSON_CONTENT_TYPE

        request = self._client.build_request(
            method, self.build_url(path), content=content, headers=headers
        )

        # Never log the URL, it carries the token
        logger.debug("Executing Pipedrive API request", method=method, path=path)

        response = send_with_retries(
            lambda: self._send(request), self.retry_policy, self._cancel_event
        )
        try:
            response_text = response.text
        finally:
            response.close()

        if not response.is_success:
            logger.error(
                f"Pipedrive API request failed: {response.status_code} - {response_text}",
                method=method,
                path=path,
            )
            raise RemoteRequestError(response.status_code, response_text)

        logger.debug("Pipedrive API response received", method=method, path=path)
        return decode_envelope(response_text, data_type)

    def get(self, path: str, data_type: type[T] | Any = Any) -> PipedriveResponse[T]:
        """Execute a GET request to the Pipedrive API."""
        return self._execute("GET", path, data_type)

    def post(
        self, path: str, body: BaseModel | Mapping[str, Any], data_type: type[T] | Any = Any
    ) -> PipedriveResponse[T]:
        """Execute a POST request to the Pipedrive API."""
        return self._execute("POST", path, data_type, body=body)

    def put(
        self, path: str, body: BaseModel | Mapping[str, Any], data_type: type[T] | Any = Any
    ) -> PipedriveResponse[T]:
        """Execute a PUT request to the Pipedrive API."""
        return self._execute("PUT", path, data_type, body=body)

    def delete(self, path: str, data_type: type[T] | Any = Any) -> PipedriveResponse[T]:
        """Execute a DELETE request to the Pipedrive API."""
        return self._execute("DELETE", path, data_type)


def get_pipedrive_client(
    api_token: str | None = None,
    base_url: str | None = None,
    timeout: float | None = None,
    **kwargs: Any,
) -> PipedriveClient:
    """Create a new, caller-owned Pipedrive client.

    Arguments left as None are read from the environment (PIPEDRIVE_API_TOKEN,
    PIPEDRIVE_API_URL, PIPEDRIVE_TIMEOUT_SECONDS). The caller must close the client,
    typically via ``with get_pipedrive_client(...) as client:``.

    Raises:
        ConfigurationError: No API token given or configured
    """
    token = api_token or get_pipedrive_api_token()
    if not token:
        raise ConfigurationError(
            "Pipedrive API token is required: pass api_token or set PIPEDRIVE_API_TOKEN"
        )

    try:
        resolved_timeout = timeout if timeout is not None else get_pipedrive_timeout_seconds()
    except ValueError as e:
        raise ConfigurationError(str(e)) from e

    return PipedriveClient(
        api_token=token,
        base_url=base_url or get_pipedrive_api_url(),
        timeout=resolved_timeout,
        **kwargs,
    )
