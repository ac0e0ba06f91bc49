"""Pipedrive API client package."""

from pipedrive_tasks.clients.pipedrive.exceptions import (
    ApplicationError,
    ConfigurationError,
    PipedriveError,
    RemoteRequestError,
    RequestCancelledError,
    ResponseDecodeError,
    TransportError,
)
from pipedrive_tasks.clients.pipedrive.pipedrive_client import (
    PipedriveClient,
    build_url,
    decode_envelope,
    get_pipedrive_client,
)
from pipedrive_tasks.clients.pipedrive.pipedrive_models import (
    Deal,
    EmailInfo,
    Note,
    Person,
    PhoneInfo,
    PipedriveResponse,
)
from pipedrive_tasks.clients.pipedrive.retry import RetryPolicy, send_with_retries

__all__ = [
    "ApplicationError",
    "ConfigurationError",
    "Deal",
    "EmailInfo",
    "Note",
    "Person",
    "PhoneInfo",
    "PipedriveClient",
    "PipedriveError",
    "PipedriveResponse",
    "RemoteRequestError",
    "RequestCancelledError",
    "ResponseDecodeError",
    "RetryPolicy",
    "TransportError",
    "build_url",
    "decode_envelope",
    "get_pipedrive_client",
    "send_with_retries",
]
