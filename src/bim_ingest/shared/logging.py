"""Structured logging.

structlog events rendered through the stdlib logging tree, so records
from SQLAlchemy, IfcOpenShell and the MCP SDK share one format. Output
goes to stderr: the MCP stdio transport owns stdout.
"""
from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from typing import Any, Iterator

import structlog

# Libraries kept at WARNING regardless of the configured level
QUIET_LOGGERS = ("sqlalchemy", "sqlalchemy.engine", "asyncio", "mcp", "ifcopenshell")

_configured = False


def _pre_chain() -> list[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.processors.add_log_level,
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]


def configure_logging(
    level: str = "INFO",
    log_format: str = "json",
    log_file: str | None = None,
) -> None:
    """Install the structlog pipeline; later calls are no-ops.

    Args:
        level: Root log level name
        log_format: "json" or "console"
        log_file: Also write records to this file
    """
    global _configured
    if _configured:
        return

    pre_chain = _pre_chain()
    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    renderer: Any = (
        structlog.processors.JSONRenderer()
        if log_format == "json"
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        foreign_pre_chain=pre_chain,
    )

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    root = logging.getLogger()
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.setLevel(level.upper())

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    _configured = True


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Logger for a module, configuring logging from settings on first use."""
    if not _configured:
        from bim_ingest.shared.config import get_settings

        settings = get_settings()
        configure_logging(settings.log_level, settings.log_format, settings.log_file)

    return structlog.get_logger(name)


@contextmanager
def log_context(**values: Any) -> Iterator[None]:
    """Attach key/values to every event logged inside the block.

    Used to tag all parse and persistence events of one ingestion with
    its version id and source format.
    """
    with structlog.contextvars.bound_contextvars(**values):
        yield
