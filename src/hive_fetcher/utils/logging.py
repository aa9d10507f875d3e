"""Structured logging setup shared by the middleware and the CLI."""

import logging
import sys
import uuid
from contextlib import AbstractContextManager
from typing import TextIO

import structlog

QUIET_LOGGERS = ("asyncpg", "httpx", "httpcore", "uvicorn.access")


def setup_logging(
    log_level: str = "INFO",
    json_output: bool = False,
    stream: TextIO | None = None,
) -> None:
    """Configure structlog on top of stdlib logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        json_output: Render one JSON object per line instead of console output
        stream: Where log lines go; stdout for the server, stderr for the CLI
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=stream is None)
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=stream or sys.stdout,
        level=level,
        force=True,
    )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def request_context(**values: object) -> AbstractContextManager[None]:
    """Bind a request id plus `values` to every log line inside the block.

    Example:
        with request_context(method="POST", path="/search"):
            logger.info("executing_search")
    """
    return structlog.contextvars.bound_contextvars(
        request_id=uuid.uuid4().hex[:12],
        **values,
    )
