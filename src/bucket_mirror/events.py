"""Structured log events emitted by the mirror."""

import logging
from typing import Any, Optional

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "bucket_mirror"

logger = logging.getLogger(LOGGER_NAME)

# Event names
WORKER_STARTED = "worker-started"
WORKER_STOPPED = "worker-stopped"
PASS_STARTED = "pass-started"
PASS_FINISHED = "pass-finished"
DIRECTORY_CREATED = "directory-created"
FILE_SKIPPED = "file-skipped"
FILE_DOWNLOADING = "file-downloading"
FILE_DOWNLOADED = "file-downloaded"
ERROR = "error"


def format_event(event: str, fields: dict) -> str:
    """Render an event as ``name key=value ...``."""
    parts = [event]
    parts.extend(f"{name}={value}" for name, value in fields.items())
    return " ".join(parts)


def emit(event: str, level: int = logging.INFO, **fields: Any) -> None:
    """
    Emit a structured event.
    
    The rendered message is for humans; structured consumers read the
    ``event`` and ``event_fields`` attributes of the log record.
    """
    logger.log(
        level,
        format_event(event, fields),
        extra={"event": event, "event_fields": fields},
    )


def configure_logging(verbose: bool = False, console: Optional[Console] = None) -> logging.Handler:
    """Install a rich handler on the package logger."""
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    
    # Replace any handler from a previous call
    for existing in list(logger.handlers):
        if isinstance(existing, RichHandler):
            logger.removeHandler(existing)
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    
    # botocore is chatty at debug level
    noisy_level = logging.DEBUG if verbose else logging.WARNING
    for name in ("boto3", "botocore", "s3transfer", "urllib3"):
        logging.getLogger(name).setLevel(noisy_level)
    
    return handler
