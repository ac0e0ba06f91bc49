"""Structured logging for pipedrive-tasks.

Importing this module configures structlog once for the process. Task code just asks for a
logger and binds whatever identifies the current step:

```
from pipedrive_tasks.utils.logging import LogContext, get_logger

logger = get_logger(__name__)

with LogContext(step_id="create_person"):
    logger.info("Creating person", name="Jane Doe")
```

Records from plain `logging` loggers go through the same processors, so library output
carries the bound step context too.

Environment:
- PIPEDRIVE_TASKS_ENVIRONMENT: "local" (default) renders for humans, anything else emits JSON
- LOG_RENDERER: "console" or "json", overrides the environment choice
- LOG_LEVEL: root level name, INFO by default
"""

from __future__ import annotations

import logging
import os
from typing import Any

import structlog
import structlog.contextvars

from pipedrive_tasks.utils.config import get_pipedrive_environment

# These log full request URLs, and every Pipedrive URL carries the api_token
URL_LOGGING_LIBRARIES = ("httpx", "httpcore")


def _is_local_environment() -> bool:
    return get_pipedrive_environment() == "local"


def _get_log_renderer() -> structlog.types.Processor:
    """Pick the final renderer: LOG_RENDERER if set, otherwise by environment."""
    requested = os.getenv("LOG_RENDERER", "").lower()
    if requested not in ("console", "json"):
        requested = "console" if _is_local_environment() else "json"

    if requested == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(
        sort_keys=True,
        event_key="message",
        exception_formatter=structlog.dev.plain_traceback,
    )


def _shared_processors() -> list[structlog.types.Processor]:
    """Processors applied to both structlog and stdlib records, ahead of rendering."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.EventRenamer("message"),
    ]


def configure_logging() -> None:
    """(Re)install the root handler and structlog configuration from the environment."""
    shared = _shared_processors()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=_get_log_renderer(),
            foreign_pre_chain=shared,
        )
    )

    level = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name in URL_LOGGING_LIBRARIES:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


configure_logging()


def add_log_context(**kwargs: Any) -> None:
    """Bind values to every following log line in the current context."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_log_context() -> None:
    """Drop everything bound so far, e.g. before starting a new step."""
    structlog.contextvars.clear_contextvars()


# Binds for the duration of a with-block, restoring the previous values on exit
LogContext = structlog.contextvars.bound_contextvars


def get_logger(name: str, **kwargs: Any) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name, **kwargs)
