#!/usr/bin/env python3
"""
Pipedrive Tasks CLI

Runs a single workflow step against the Pipedrive API and prints the task output as JSON.
"""

import json
from pathlib import Path
from typing import Any

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from pipedrive_tasks.clients.pipedrive import PipedriveError
from pipedrive_tasks.registry import TASK_TYPES, run_step
from pipedrive_tasks.utils.logging import add_log_context, clear_log_context

# Load environment variables
load_dotenv()

app = typer.Typer(
    name="pipedrive-tasks",
    help="Run Pipedrive CRM workflow steps",
    add_completion=False,
)
console = Console()
error_console = Console(stderr=True)


def log_error(message: str) -> None:
    """Log error message to stderr."""
    error_console.print(f"❌ {message}", style="red", markup=False)


def load_step(step_file: Path) -> dict[str, Any]:
    """Read a step definition from a JSON file."""
    try:
        step = json.loads(step_file.read_text())
    except json.JSONDecodeError as e:
        raise typer.BadParameter(f"{step_file} is not valid JSON: {e}") from e

    if not isinstance(step, dict):
        raise typer.BadParameter(f"{step_file} must contain a JSON object")
    return step


@app.command()
def run(
    step_file: Path = typer.Argument(
        ..., exists=True, dir_okay=False, readable=True, help="JSON file describing the step"
    ),
    api_token: str | None = typer.Option(
        None,
        "--api-token",
        envvar="PIPEDRIVE_API_TOKEN",
        help="Used when the step has no api_token",
    ),
) -> None:
    """
    Run one Pipedrive step.

    The file holds the step's `type` (see `types`) plus its parameters, for example:
    {"type": "pipedrive.persons.Create", "name": "Jane Doe"}
    """
    clear_log_context()
    add_log_context(step_file=step_file.name)

    step = load_step(step_file)
    if api_token and not step.get("api_token"):
        step["api_token"] = api_token

    try:
        output = run_step(step)
    except PipedriveError as e:
        log_error(str(e))
        raise typer.Exit(1)

    console.print_json(output.model_dump_json(exclude_none=True))


@app.command()
def types() -> None:
    """List the registered task types."""
    table = Table(title="Pipedrive task types")
    table.add_column("Type", style="cyan")
    table.add_column("Description")

    for task_type, task_cls in sorted(TASK_TYPES.items()):
        table.add_row(task_type, (task_cls.__doc__ or "").strip().splitlines()[0])

    console.print(table)


if __name__ == "__main__":
    app()
