"""Structured logging configuration using structlog."""

import logging
import sys
from pathlib import Path

import structlog
from structlog.types import Processor

# Third-party loggers that are chatty at INFO (one line per HTTP request)
NOISY_LOGGERS = ("httpx", "httpcore", "hpack", "openai", "groq")


def setup_logging(
    level: str = "INFO",
    log_format: str = "console",
    log_file: str | None = None,
) -> None:
    """Configure structured logging for the application.

    structlog events are routed through the standard library so the console
    and the optional log file share one pipeline (the file always gets JSON).

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        log_format: Output format ("console" for pretty, "json" for structured)
        log_file: Optional file path for log output
    """
    log_level = getattr(logging, level.upper())

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if log_format == "json":
        console_renderer: Processor = structlog.processors.JSONRenderer()
        console_processors: list[Processor] = [structlog.processors.format_exc_info]
    else:
        console_renderer = structlog.dev.ConsoleRenderer(
            colors=sys.stdout.isatty(),
            exception_formatter=structlog.dev.plain_traceback,
        )
        console_processors = []

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                *console_processors,
                console_renderer,
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console_handler)
    root.setLevel(log_level)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                foreign_pre_chain=shared_processors,
                processors=[
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    structlog.processors.format_exc_info,
                    structlog.processors.JSONRenderer(),
                ],
            )
        )
        root.addHandler(file_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a logger instance.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


class LogContext:
    """Context manager for adding temporary context to logs."""

    def __init__(self, **kwargs: str | int | float | bool) -> None:
        self.context = kwargs

    def __enter__(self) -> "LogContext":
        structlog.contextvars.bind_contextvars(**self.context)
        return self

    def __exit__(self, *args: object) -> None:
        structlog.contextvars.unbind_contextvars(*self.context.keys())


def log_source_run(
    source_name: str,
    source_url: str,
    country: str,
) -> LogContext:
    """Context manager binding the source being scraped to every log line."""
    return LogContext(
        source_name=source_name,
        source_url=source_url,
        country=country,
    )
