"""Retry and backoff for transient Pipedrive API failures."""

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

import httpx

from pipedrive_tasks.clients.pipedrive.exceptions import RequestCancelledError, TransportError
from pipedrive_tasks.utils.logging import get_logger

logger = get_logger(__name__)

HTTP_TOO_MANY_REQUESTS = 429
HTTP_SERVER_ERROR = 500


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded exponential backoff for transient HTTP failures.

    Attempt budget includes the initial try: max_attempts=3 means one call plus two retries.
    The wait before retry n (0-indexed) is base_delay * 2**n seconds, without jitter.
    """

    max_attempts: int = 3
    base_delay: float = 1.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay < 0:
            raise ValueError("base_delay cannot be negative")

    def backoff_delay(self, retry_index: int) -> float:
        return self.base_delay * (2**retry_index)

    def is_retryable_status(self, status_code: int) -> bool:
        return status_code == HTTP_TOO_MANY_REQUESTS or status_code >= HTTP_SERVER_ERROR


DEFAULT_RETRY_POLICY = RetryPolicy()


def _wait_before_retry(delay: float, cancel_event: threading.Event | None) -> None:
    """Block for delay seconds, aborting if cancel_event gets set meanwhile."""
    if cancel_event is None:
        time.sleep(delay)
        return

    if cancel_event.wait(delay):
        logger.warning("Pipedrive request cancelled during retry backoff", delay=delay)
        raise RequestCancelledError("Pipedrive request cancelled during retry backoff")


def _handle_retryable_failure(
    policy: RetryPolicy,
    attempt: int,
    reason: str,
    cancel_event: threading.Event | None,
) -> None:
    """Log the failed attempt and wait out its backoff."""
    delay = policy.backoff_delay(attempt)
    logger.warning(
        f"Pipedrive request failed with {reason}, retrying in {delay:g}s "
        f"(attempt {attempt + 1}/{policy.max_attempts})"
    )
    _wait_before_retry(delay, cancel_event)


def send_with_retries(
    send: Callable[[], httpx.Response],
    policy: RetryPolicy = DEFAULT_RETRY_POLICY,
    cancel_event: threading.Event | None = None,
) -> httpx.Response:
    """Perform one logical HTTP exchange, retrying transient failures.

    HTTP 429, HTTP >= 500 and httpx transport errors are retried until the attempt budget runs
    out. Whatever the final attempt yields is handed back as-is: a response (even a retryable
    one) is returned, a transport error is raised as TransportError.

    Args:
        send: Performs a single HTTP exchange
        policy: Attempt budget and backoff schedule
        cancel_event: When set during a backoff wait, the call is abandoned

    Raises:
        TransportError: The last attempt failed below the HTTP layer
        RequestCancelledError: cancel_event was set while waiting to retry
    """
    for attempt in range(policy.max_attempts):
        is_last_attempt = attempt >= policy.max_attempts - 1

        try:
            response = send()
        except httpx.TransportError as e:
            if is_last_attempt:
                logger.error(f"Pipedrive request failed after {attempt + 1} attempts: {e}")
                raise TransportError(
                    f"Pipedrive request failed after {attempt + 1} attempts: {e}",
                    attempts=attempt + 1,
                ) from e
            _handle_retryable_failure(policy, attempt, type(e).__name__, cancel_event)
            continue

        if is_last_attempt or not policy.is_retryable_status(response.status_code):
            return response

        # Release the connection before sleeping on it
        response.close()
        _handle_retryable_failure(
            policy, attempt, f"status {response.status_code}", cancel_event
        )

    raise RuntimeError("Unexpected exit from Pipedrive retry loop")
