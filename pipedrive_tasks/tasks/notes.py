from pipedrive_tasks.clients.pipedrive import Note
from pipedrive_tasks.tasks.base import PipedriveTask, TaskOutput
from pipedrive_tasks.utils.logging import LogContext, get_logger

logger = get_logger(__name__)


class AddNoteOutput(TaskOutput):
    note_id: int | None
    content: str | None = None
    deal_id: int | None = None
    person_id: int | None = None
    org_id: int | None = None


class AddNote(PipedriveTask):
    """Add a note to a deal, person or organization."""

    task_type = "pipedrive.notes.Add"

    content: str
    deal_id: int | None = None
    person_id: int | None = None
    org_id: int | None = None
    pinned_to_deal_flag: bool | None = None
    pinned_to_person_flag: bool | None = None
    pinned_to_organization_flag: bool | None = None

    def build_note(self) -> Note:
        return Note(
            content=self.content,
            deal_id=self.deal_id,
            person_id=self.person_id,
            org_id=self.org_id,
            pinned_to_deal_flag=self.pinned_to_deal_flag,
            pinned_to_person_flag=self.pinned_to_person_flag,
            pinned_to_organization_flag=self.pinned_to_organization_flag,
        )

    def run(self) -> AddNoteOutput:
        note = self.build_note()

        with LogContext(task_type=self.task_type), self.open_client() as client:
            logger.info("Adding note to Pipedrive")

            response = client.post("/notes", note, Note)
            created = response.unwrap("add note")

            logger.info(f"Successfully created note with ID: {created.id}")

        return AddNoteOutput(
            note_id=created.id,
            content=created.content,
            deal_id=created.deal_id,
            person_id=created.person_id,
            org_id=created.org_id,
        )
