"""structlog on top of stdlib logging, emitted from a background thread."""

from __future__ import annotations

import atexit
import copy
import logging
import queue
import sys
from datetime import datetime, timezone
from logging.handlers import QueueHandler, QueueListener
from typing import Any, Optional

import structlog

from streamtrail.infrastructure.config.schema import AppConfig

from .redaction import redact_secrets

log = structlog.get_logger(__name__)

# Transport libraries log each request and frame at INFO/DEBUG.
NOISY_LOGGERS: tuple[str, ...] = ("httpx", "httpcore", "hpack")

_QUEUE_LISTENER: Optional[QueueListener] = None


def _record_timestamp_utc(
    _: Any, __: Any, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Use the LogRecord creation time for foreign (stdlib) records.

    The listener thread formats records later than they were created.
    """
    record = event_dict.get("_record")
    if isinstance(record, logging.LogRecord):
        dt = datetime.fromtimestamp(record.created, tz=timezone.utc)
        event_dict["timestamp"] = dt.isoformat().replace("+00:00", "Z")
    return event_dict


def _shared_processors() -> list[structlog.typing.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        redact_secrets,
    ]


def build_formatter(config: AppConfig) -> structlog.stdlib.ProcessorFormatter:
    renderer: structlog.typing.Processor
    if config.log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[_record_timestamp_utc, *_shared_processors()],
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )


class _BelowErrorFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < logging.ERROR


class _DictPreservingQueueHandler(QueueHandler):
    """QueueHandler that hands structlog's dict ``record.msg`` over untouched."""

    def prepare(self, record: logging.LogRecord) -> logging.LogRecord:
        # The stock prepare() stringifies msg, which ProcessorFormatter
        # cannot render afterwards.
        return copy.copy(record)


def _stop_async_listener() -> None:
    global _QUEUE_LISTENER
    if _QUEUE_LISTENER is not None:
        try:
            _QUEUE_LISTENER.stop()
        finally:
            _QUEUE_LISTENER = None


def _install_handlers(config: AppConfig) -> None:
    """Root logger -> queue -> listener thread -> stdout/stderr."""
    global _QUEUE_LISTENER

    _stop_async_listener()
    formatter = build_formatter(config)

    stdout_handler = logging.StreamHandler(stream=sys.stdout)
    stdout_handler.setFormatter(formatter)
    stdout_handler.addFilter(_BelowErrorFilter())

    stderr_handler = logging.StreamHandler(stream=sys.stderr)
    stderr_handler.setFormatter(formatter)
    stderr_handler.setLevel(logging.ERROR)

    records: queue.Queue[logging.LogRecord] = queue.Queue()

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(_DictPreservingQueueHandler(records))
    root.setLevel(config.log_level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    _QUEUE_LISTENER = QueueListener(
        records, stdout_handler, stderr_handler, respect_handler_level=True
    )
    _QUEUE_LISTENER.start()
    atexit.register(_stop_async_listener)


def configure_logging(config: AppConfig) -> None:
    """Configure structlog + stdlib logging from *config*.

    Tokens and derived keys are masked on every event above DEBUG.
    """
    structlog.configure(
        processors=[
            *_shared_processors(),
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    _install_handlers(config)

    log.info(
        "logging_configured",
        log_format=config.log_format,
        log_level=config.log_level,
        environment=config.environment,
    )
