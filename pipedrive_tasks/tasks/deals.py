"""Deal tasks: create a deal, update an existing one."""

from decimal import Decimal
from typing import Any

from pipedrive_tasks.clients.pipedrive import ConfigurationError, Deal
from pipedrive_tasks.tasks.base import PipedriveTask, TaskOutput
from pipedrive_tasks.utils.logging import LogContext, get_logger

logger = get_logger(__name__)


class CreateDealOutput(TaskOutput):
    deal_id: int | None
    add_time: str | None = None
    update_time: str | None = None


class CreateDeal(PipedriveTask):
    """Create a new deal in Pipedrive."""

    task_type = "pipedrive.deals.Create"

    title: str
    value: Decimal | None = None
    currency: str | None = None  # e.g. USD, EUR, GBP
    person_id: int | None = None
    org_id: int | None = None
    user_id: int | None = None
    stage_id: int | None = None
    status: str | None = None  # open, won, lost, deleted
    expected_close_date: str | None = None  # YYYY-MM-DD
    probability: float | None = None
    visible_to: str | None = None
    custom_fields: dict[str, Any] | None = None

    def build_deal(self) -> Deal:
        return Deal(
            title=self.title,
            value=self.value,
            currency=self.currency,
            person_id=self.person_id,
            org_id=self.org_id,
            user_id=self.user_id,
            stage_id=self.stage_id,
            status=self.status,
            expected_close_date=self.expected_close_date,
            probability=self.probability,
            visible_to=self.visible_to,
            custom_fields=self.custom_fields,
        )

    def run(self) -> CreateDealOutput:
        deal = self.build_deal()

        with LogContext(task_type=self.task_type), self.open_client() as client:
            logger.info(f"Creating Pipedrive deal '{self.title}'")

            response = client.post("/deals", deal, Deal)
            created = response.unwrap("create deal")

            logger.info(f"Successfully created deal with ID: {created.id}")

        return CreateDealOutput(
            deal_id=created.id,
            add_time=created.add_time,
            update_time=created.update_time,
        )


class UpdateDealOutput(TaskOutput):
    deal_id: int | None
    update_time: str | None = None


class UpdateDeal(PipedriveTask):
    """Update fields of an existing deal. At least one field must be given."""

    task_type = "pipedrive.deals.Update"

    deal_id: int
    title: str | None = None
    value: Decimal | None = None
    stage_id: int | None = None
    status: str | None = None  # open, won, lost
    expected_close_date: str | None = None
    probability: float | None = None
    lost_reason: str | None = None  # only meaningful with status "lost"
    custom_fields: dict[str, Any] | None = None

    def build_deal(self) -> Deal:
        return Deal(
            title=self.title,
            value=self.value,
            stage_id=self.stage_id,
            status=self.status,
            expected_close_date=self.expected_close_date,
            probability=self.probability,
            lost_reason=self.lost_reason,
            custom_fields=self.custom_fields,
        )

    def run(self) -> UpdateDealOutput:
        deal = self.build_deal()
        if not deal.model_dump(exclude_none=True):
            raise ConfigurationError("At least one field must be provided to update the deal")

        with LogContext(task_type=self.task_type), self.open_client() as client:
            logger.info(f"Updating Pipedrive deal with ID: {self.deal_id}")

            response = client.put(f"/deals/{self.deal_id}", deal, Deal)
            updated = response.unwrap("update deal")

            logger.info(f"Successfully updated deal: {updated.id}")

        return UpdateDealOutput(deal_id=updated.id, update_time=updated.update_time)
