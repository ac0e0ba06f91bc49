"""Exceptions raised by the Pipedrive client and tasks."""


class PipedriveError(Exception):
    """Base class for every failure surfaced by pipedrive-tasks."""


class ConfigurationError(PipedriveError, ValueError):
    """A required input (API token, task parameter) is missing or invalid.

    Raised before any network call is made, never retried.
    """


class TransportError(PipedriveError):
    """The HTTP exchange failed below the HTTP layer (DNS, connection reset, timeout).

    Only raised once the attempt budget is exhausted. The underlying httpx error is chained
    as ``__cause__``.
    """

    def __init__(self, message: str, attempts: int):
        self.attempts = attempts
        super().__init__(message)


class RemoteRequestError(PipedriveError):
    """Pipedrive answered with a status outside [200, 300)."""

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"Pipedrive API request failed: {status_code} - {body}")


class ResponseDecodeError(PipedriveError):
    """The response body is not valid JSON or does not match the expected envelope."""

    def __init__(self, message: str, body: str):
        self.body = body
        super().__init__(message)


class ApplicationError(PipedriveError):
    """Pipedrive returned an envelope with ``success: false``."""

    def __init__(self, message: str, error: str | None = None, error_info: str | None = None):
        self.error = error
        self.error_info = error_info
        super().__init__(message)


class RequestCancelledError(PipedriveError):
    """The wait between two attempts was interrupted."""
