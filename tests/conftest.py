"""Shared fixtures: a scripted Pipedrive endpoint backed by httpx.MockTransport."""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from pipedrive_tasks.clients.pipedrive import PipedriveClient

TEST_BASE_URL = "https://pipedrive.test/api/v2"
TEST_API_TOKEN = "test_token"


class ScriptedEndpoint:
    """Replays queued responses (or exceptions) in order and records every request."""

    def __init__(self) -> None:
        self._queue: list[httpx.Response | Exception] = []
        self.requests: list[httpx.Request] = []
        self.clients: list[PipedriveClient] = []

    def respond(self, status_code: int = 200, **kwargs: Any) -> ScriptedEndpoint:
        self._queue.append(httpx.Response(status_code, **kwargs))
        return self

    def respond_json(self, payload: Any, status_code: int = 200) -> ScriptedEndpoint:
        return self.respond(status_code, json=payload)

    def fail(self, error: Exception) -> ScriptedEndpoint:
        self._queue.append(error)
        return self

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._queue:
            raise RuntimeError("No mock responses left")
        outcome = self._queue.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    @property
    def last_json_body(self) -> Any:
        return json.loads(self.requests[-1].content)

    def client(self, **kwargs: Any) -> PipedriveClient:
        kwargs.setdefault("api_token", TEST_API_TOKEN)
        kwargs.setdefault("base_url", TEST_BASE_URL)
        client = PipedriveClient(transport=httpx.MockTransport(self), **kwargs)
        self.clients.append(client)
        return client


@pytest.fixture
def endpoint() -> ScriptedEndpoint:
    return ScriptedEndpoint()


@pytest.fixture
def no_sleep(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    """Skip real backoff waits, recording the requested delays."""
    delays: list[float] = []
    monkeypatch.setattr("time.sleep", delays.append)
    return delays


@pytest.fixture
def task_endpoint(
    endpoint: ScriptedEndpoint, monkeypatch: pytest.MonkeyPatch, no_sleep: list[float]
) -> ScriptedEndpoint:
    """Route every client a task opens to the scripted endpoint."""

    def fake_get_pipedrive_client(
        api_token: str | None = None, base_url: str | None = None, **kwargs: Any
    ) -> PipedriveClient:
        return endpoint.client(
            api_token=api_token or TEST_API_TOKEN, base_url=base_url or TEST_BASE_URL, **kwargs
        )

    monkeypatch.setattr(
        "pipedrive_tasks.tasks.base.get_pipedrive_client", fake_get_pipedrive_client
    )
    return endpoint
