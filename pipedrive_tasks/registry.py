"""Lookup from declarative step `type` strings to task classes."""

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from pipedrive_tasks.clients.pipedrive import ConfigurationError
from pipedrive_tasks.tasks import (
    AddNote,
    CreateDeal,
    CreatePerson,
    GetPerson,
    PipedriveTask,
    TaskOutput,
    UpdateDeal,
)
from pipedrive_tasks.utils.logging import LogContext, get_logger

logger = get_logger(__name__)

TASK_TYPES: dict[str, type[PipedriveTask]] = {
    task.task_type: task for task in (CreatePerson, GetPerson, CreateDeal, UpdateDeal, AddNote)
}

# Step keys owned by the orchestrator rather than the task
STEP_METADATA_KEYS = frozenset({"id", "type"})


def build_task(step: Mapping[str, Any]) -> PipedriveTask:
    """Validate a step mapping into its task.

    Raises:
        ConfigurationError: Unknown type or invalid/missing parameters
    """
    task_type = step.get("type")
    if not task_type:
        raise ConfigurationError("Step is missing its 'type'")
    if not isinstance(task_type, str):
        raise ConfigurationError(f"Step 'type' must be a string, got {type(task_type).__name__}")

    task_cls = TASK_TYPES.get(task_type)
    if task_cls is None:
        raise ConfigurationError(
            f"Unknown task type '{task_type}', expected one of: {', '.join(sorted(TASK_TYPES))}"
        )

    params = {key: value for key, value in step.items() if key not in STEP_METADATA_KEYS}
    try:
        return task_cls.model_validate(params)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid parameters for {task_type}: {e}") from e


def run_step(step: Mapping[str, Any]) -> TaskOutput:
    """Build and run the task described by one workflow step."""
    task = build_task(step)

    with LogContext(step_id=step.get("id")):
        logger.info(f"Running step {task.task_type}")
        return task.run()
