"""structlog setup for emailbot.

Console output is human-readable; the same events are appended as JSON lines
to LOG_FILE so a run can be replayed per draft_id / external_id. Configuration
happens lazily on the first get_logger() call.
"""

from __future__ import annotations

import logging
from contextlib import AbstractContextManager
from pathlib import Path
from typing import Any, Optional

import structlog

from emailbot.config import LOG_FILE, LOG_LEVEL, VERBOSE_LOGGING

BoundLogger = structlog.stdlib.BoundLogger

QUIET_LOGGERS = ("httpx", "httpcore", "urllib3", "sqlalchemy.engine")

_configured = False


def _level(value: str | int | None) -> int:
    if VERBOSE_LOGGING:
        return logging.DEBUG
    if value is None:
        value = LOG_LEVEL
    if isinstance(value, int):
        return value
    if value.isdigit():
        return int(value)
    return logging.getLevelNamesMapping().get(value.upper(), logging.INFO)


def _base_processors() -> list:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]


def _handler(handler: logging.Handler, renderer: Any, level: int) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=_base_processors()))
    return handler


def _jsonl_handler(path: Path, level: int) -> Optional[logging.Handler]:
    # Read-only checkouts still get console logging
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        return _handler(logging.FileHandler(path, encoding="utf-8"), structlog.processors.JSONRenderer(), level)
    except OSError:
        return None


def configure_logging(level: str | int | None = None, log_file: Optional[Path] = LOG_FILE, force: bool = False) -> None:
    """Install console + JSONL handlers on the root logger and configure structlog.

    Safe to call more than once; later calls are ignored unless force=True.
    """
    global _configured
    if _configured and not force:
        return

    effective = _level(level)
    handlers = [_handler(logging.StreamHandler(), structlog.dev.ConsoleRenderer(colors=True), effective)]
    if log_file is not None:
        jsonl = _jsonl_handler(Path(log_file), effective)
        if jsonl is not None:
            handlers.append(jsonl)

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(effective)
    for handler in handlers:
        root.addHandler(handler)
    logging.captureWarnings(True)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.configure(
        processors=_base_processors()
        + [
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(effective),
        cache_logger_on_first_use=True,
    )
    _configured = True


def get_logger(name: str = "emailbot", **bindings: Any) -> BoundLogger:
    configure_logging()
    logger = structlog.get_logger(name)
    return logger.bind(**bindings) if bindings else logger


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


def log_context(**context: Any) -> AbstractContextManager:
    """Bind keys (external_id, draft_id) for the duration of a with-block only."""
    return structlog.contextvars.bound_contextvars(**context)


def log_step(component: str, step: str, data: Any = None) -> None:
    """Record one workflow step (draft_created, draft_approved, followup_created...).

    The payload is logged at DEBUG under VERBOSE_LOGGING so bulky snapshots stay
    out of normal runs.
    """
    logger = get_logger().bind(component=component, event_kind="workflow_step")
    if data is None:
        logger.info(step)
    elif VERBOSE_LOGGING:
        logger.debug(step, data=data)
    else:
        logger.info(step, data=data)
