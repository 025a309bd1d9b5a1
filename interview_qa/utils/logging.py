"""
Structured logging utilities for the interview Q&A corpus builder.

This module provides:
- JSON or console rendering through structlog
- A per-build run ID bound into every log entry
- LoggerMixin for class-scoped loggers

Logs are written to stderr so that CLI output on stdout stays machine readable.
"""

import functools
import logging
import sys
from contextvars import ContextVar
from typing import Any, Callable
from uuid import uuid4

import structlog
from structlog.types import EventDict, Processor

APP_NAME = "interview-qa"

# Application name tagged onto every entry, set by setup_logging
_app_name = APP_NAME

# Context variable for the current build run
run_id_var: ContextVar[str | None] = ContextVar("run_id", default=None)


def get_run_id() -> str | None:
    """
    Get the current run ID from context.

    Returns:
        The run ID if set, None otherwise.
    """
    return run_id_var.get()


def set_run_id(run_id: str | None = None) -> str:
    """
    Set or generate a run ID in the current context.

    Args:
        run_id: Optional run ID to set. If None, generates a new UUID.

    Returns:
        The run ID that was set.
    """
    rid = run_id or str(uuid4())
    run_id_var.set(rid)
    return rid


def clear_run_id() -> None:
    """Clear the run ID from the current context."""
    run_id_var.set(None)


def add_run_id(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """
    Structlog processor to add the run ID to log entries.

    Args:
        logger: The logger instance.
        method_name: The logging method name.
        event_dict: The event dictionary.

    Returns:
        Updated event dictionary with run ID.
    """
    run_id = get_run_id()
    if run_id:
        event_dict["run_id"] = run_id
    return event_dict


def add_app_context(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Structlog processor to tag entries with the application name."""
    event_dict["app"] = _app_name
    return event_dict


def setup_logging(
    log_level: str = "INFO",
    log_format: str = "console",
    app_name: str = APP_NAME,
) -> None:
    """
    Configure structured logging for the application.

    Args:
        log_level: The logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: 'json' for machine-readable logs, 'console' for humans.
        app_name: Name recorded in the "app" field of every entry.
    """
    global _app_name
    _app_name = app_name

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        add_run_id,
        add_app_context,
    ]

    if log_format == "json":
        processors: list[Processor] = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
        logging.basicConfig(
            format="%(message)s",
            stream=sys.stderr,
            level=getattr(logging, log_level),
        )
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(
                colors=sys.stderr.isatty(),
                exception_formatter=structlog.dev.plain_traceback,
            ),
        ]
        logging.basicConfig(
            format="%(message)s",
            stream=sys.stderr,
            level=getattr(logging, log_level),
        )

    # basicConfig is a no-op once handlers exist, so set the level explicitly
    logging.getLogger().setLevel(getattr(logging, log_level))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.getLogger("MARKDOWN").setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """
    Get a configured logger instance.

    Args:
        name: Optional logger name. If None, uses the calling module's name.

    Returns:
        A bound structlog logger instance.
    """
    return structlog.get_logger(name)


class LoggerMixin:
    """
    Mixin class to add logging capabilities to any class.

    Usage:
        class CorpusIndex(LoggerMixin):
            def insert(self, record):
                self.logger.debug("Record inserted", question=record.question)
    """

    @property
    def logger(self) -> structlog.stdlib.BoundLogger:
        """Get a logger bound to this class."""
        if not hasattr(self, "_logger"):
            self._logger = get_logger(self.__class__.__name__)
        return self._logger


def log_function_call(
    logger: structlog.stdlib.BoundLogger | None = None,
    level: str = "debug",
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """
    Decorator to log entry, completion and failure of a function.

    Args:
        logger: Optional logger instance. If None, creates one from the module name.
        level: Log level for the entry/exit messages.

    Usage:
        @log_function_call()
        def dump_corpus(corpus, path):
            ...
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            func_logger = logger or get_logger(func.__module__)
            log_method = getattr(func_logger, level)

            log_method("function_called", function=func.__name__, kwargs_keys=list(kwargs))

            try:
                result = func(*args, **kwargs)
            except Exception as e:
                func_logger.error(
                    "function_failed",
                    function=func.__name__,
                    error_type=type(e).__name__,
                    error_message=str(e),
                )
                raise

            log_method("function_completed", function=func.__name__)
            return result

        return wrapper

    return decorator
