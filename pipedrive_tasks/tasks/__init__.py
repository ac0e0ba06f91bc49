"""Pipedrive workflow tasks."""

from pipedrive_tasks.tasks.base import PipedriveTask, TaskOutput
from pipedrive_tasks.tasks.deals import CreateDeal, CreateDealOutput, UpdateDeal, UpdateDealOutput
from pipedrive_tasks.tasks.notes import AddNote, AddNoteOutput
from pipedrive_tasks.tasks.persons import (
    CreatePerson,
    CreatePersonOutput,
    FetchType,
    GetPerson,
    GetPersonOutput,
)

__all__ = [
    "AddNote",
    "AddNoteOutput",
    "CreateDeal",
    "CreateDealOutput",
    "CreatePerson",
    "CreatePersonOutput",
    "FetchType",
    "GetPerson",
    "GetPersonOutput",
    "PipedriveTask",
    "TaskOutput",
    "UpdateDeal",
    "UpdateDealOutput",
]
