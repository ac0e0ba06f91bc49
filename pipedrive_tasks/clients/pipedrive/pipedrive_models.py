"""Pydantic models for Pipedrive API payloads.

Based on: https://developers.pipedrive.com/docs/api/v1 (v2 endpoints)
"""

from decimal import Decimal
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict

from pipedrive_tasks.clients.pipedrive.exceptions import ApplicationError

DataT = TypeVar("DataT")


class PipedriveModel(BaseModel):
    """Base for entity payloads. Unknown fields are dropped, numbers coerce into str fields."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)


class EmailInfo(PipedriveModel):
    value: str | None = None
    primary: bool | None = None
    label: str | None = None


class PhoneInfo(PipedriveModel):
    value: str | None = None
    primary: bool | None = None
    label: str | None = None


class Person(PipedriveModel):
    """Pipedrive person (contact)."""

    id: int | None = None
    name: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    emails: list[EmailInfo] | None = None
    phones: list[PhoneInfo] | None = None
    org_id: int | None = None
    owner_id: int | None = None
    visible_to: str | None = None  # "1" owner only, "3" entire company, "5" owner and followers
    add_time: str | None = None
    update_time: str | None = None
    custom_fields: dict[str, Any] | None = None


class Deal(PipedriveModel):
    """Pipedrive deal."""

    id: int | None = None
    title: str | None = None
    value: Decimal | None = None  # money goes on the wire as an exact JSON number
    currency: str | None = None
    user_id: int | None = None
    person_id: int | None = None
    org_id: int | None = None
    stage_id: int | None = None
    pipeline_id: int | None = None
    status: str | None = None  # open, won, lost, deleted
    probability: float | None = None
    expected_close_date: str | None = None
    local_won_date: str | None = None
    local_lost_date: str | None = None
    local_close_date: str | None = None
    origin: str | None = None
    origin_id: str | None = None
    channel: int | None = None
    channel_id: str | None = None
    acv: Decimal | None = None
    arr: Decimal | None = None
    mrr: Decimal | None = None
    close_time: str | None = None
    won_time: str | None = None
    lost_time: str | None = None
    lost_reason: str | None = None
    visible_to: str | None = None
    add_time: str | None = None
    update_time: str | None = None
    custom_fields: dict[str, Any] | None = None


class Note(PipedriveModel):
    """Pipedrive note attached to a deal, person, organization or lead."""

    id: int | None = None
    content: str | None = None
    deal_id: int | None = None
    person_id: int | None = None
    org_id: int | None = None
    lead_id: str | None = None
    user_id: int | None = None
    add_time: str | None = None
    update_time: str | None = None
    active_flag: bool | None = None
    pinned_to_deal_flag: bool | None = None
    pinned_to_person_flag: bool | None = None
    pinned_to_organization_flag: bool | None = None


class PipedriveResponse(BaseModel, Generic[DataT]):
    """Envelope wrapping every Pipedrive API response.

    Parametrize with the expected shape of ``data``, e.g. ``PipedriveResponse[Person]``.
    A ``success: false`` envelope decodes fine; callers decide whether to treat it as a failure,
    usually through unwrap().
    """

    model_config = ConfigDict(extra="ignore")

    success: bool = False
    data: DataT | None = None
    error: str | None = None
    error_info: str | None = None
    additional_data: Any | None = None

    def failure_message(self, action: str) -> str:
        message = f"Failed to {action}: {self.error or 'unknown error'}"
        if self.error_info:
            message += f" ({self.error_info})"
        return message

    def unwrap(self, action: str) -> DataT:
        """Return ``data``, raising ApplicationError if the call did not succeed.

        Args:
            action: What was attempted, used in the error message (e.g. "create person")
        """
        if not self.success:
            raise ApplicationError(
                self.failure_message(action), error=self.error, error_info=self.error_info
            )
        if self.data is None:
            raise ApplicationError(f"Failed to {action}: response contained no data")
        return self.data
