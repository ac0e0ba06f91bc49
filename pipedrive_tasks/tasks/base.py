"""Shared configuration for Pipedrive workflow tasks."""

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict

from pipedrive_tasks.clients.pipedrive import PipedriveClient, get_pipedrive_client


class TaskOutput(BaseModel):
    """Base for the typed results handed back to the orchestrator."""


class PipedriveTask(BaseModel):
    """A workflow step backed by one Pipedrive API call.

    Field values arrive already resolved by the orchestrator (templates rendered, secrets
    fetched). Each run opens its own client and closes it before returning.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    task_type: ClassVar[str]

    api_token: str | None = None  # falls back to PIPEDRIVE_API_TOKEN
    api_url: str | None = None  # falls back to PIPEDRIVE_API_URL, then the production v2 root

    def open_client(self, **kwargs: Any) -> PipedriveClient:
        return get_pipedrive_client(api_token=self.api_token, base_url=self.api_url, **kwargs)

    def run(self) -> TaskOutput:
        raise NotImplementedError
