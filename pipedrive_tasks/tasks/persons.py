"""Person tasks: create a contact, fetch one by id."""

from enum import Enum
from typing import Any, TypeVar

from pipedrive_tasks.clients.pipedrive import EmailInfo, Person, PhoneInfo
from pipedrive_tasks.tasks.base import PipedriveTask, TaskOutput
from pipedrive_tasks.utils.logging import LogContext, get_logger

logger = get_logger(__name__)

DEFAULT_CONTACT_LABEL = "work"

InfoT = TypeVar("InfoT", EmailInfo, PhoneInfo)


def _contact_entries(
    entries: list[dict[str, Any]] | None, info_type: type[InfoT]
) -> list[InfoT] | None:
    """Map orchestrator-supplied email/phone maps, defaulting primary=False and label="work"."""
    if entries is None:
        return None

    return [
        info_type(
            value=entry.get("value"),
            primary=entry.get("primary", False),
            label=entry.get("label", DEFAULT_CONTACT_LABEL),
        )
        for entry in entries
    ]


class CreatePersonOutput(TaskOutput):
    person_id: int | None
    add_time: str | None = None
    update_time: str | None = None


class CreatePerson(PipedriveTask):
    """Create a new person (contact) in Pipedrive."""

    task_type = "pipedrive.persons.Create"

    name: str
    org_id: int | None = None
    owner_id: int | None = None
    emails: list[dict[str, Any]] | None = None
    phones: list[dict[str, Any]] | None = None
    visible_to: str | None = None  # "1" owner only, "3" entire company, "5" owner and followers
    custom_fields: dict[str, Any] | None = None

    def build_person(self) -> Person:
        return Person(
            name=self.name,
            org_id=self.org_id,
            owner_id=self.owner_id,
            visible_to=self.visible_to,
            emails=_contact_entries(self.emails, EmailInfo),
            phones=_contact_entries(self.phones, PhoneInfo),
            custom_fields=self.custom_fields,
        )

    def run(self) -> CreatePersonOutput:
        person = self.build_person()

        with LogContext(task_type=self.task_type), self.open_client() as client:
            logger.info(f"Creating person in Pipedrive: {self.name}")

            response = client.post("/persons", person, Person)
            created = response.unwrap("create person")

            logger.info(f"Successfully created person with ID: {created.id}")

        return CreatePersonOutput(
            person_id=created.id,
            add_time=created.add_time,
            update_time=created.update_time,
        )


class FetchType(str, Enum):
    """How a fetched record is handed back."""

    FETCH_ONE = "FETCH_ONE"
    FETCH = "FETCH"


class GetPersonOutput(TaskOutput):
    person: Person | None = None
    persons: list[Person] | None = None
    count: int


class GetPerson(PipedriveTask):
    """Fetch a single person by id."""

    task_type = "pipedrive.persons.Get"

    person_id: int
    fetch_type: FetchType = FetchType.FETCH_ONE

    def run(self) -> GetPersonOutput:
        with LogContext(task_type=self.task_type), self.open_client() as client:
            logger.info(f"Fetching person with ID: {self.person_id}")

            response = client.get(f"/persons/{self.person_id}", Person)
            person = response.unwrap("get person")

            logger.info(f"Successfully retrieved person: {person.name}")

        if self.fetch_type == FetchType.FETCH:
            return GetPersonOutput(persons=[person], count=1)
        return GetPersonOutput(person=person, count=1)
