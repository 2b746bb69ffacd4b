"""
Centralized logging configuration with run_id context support using loguru.

This module configures loguru to intercept all standard logging calls so every
module can keep using logging.getLogger(__name__), and tags each record with
the destination environment of the current run.
"""

import json
import logging
import sys
import traceback
from contextvars import ContextVar
from types import FrameType
from typing import Optional

from loguru import logger

from preview_env.core.config import Settings

# Destination environment name of the running workflow
run_id_var: ContextVar[str] = ContextVar("run_id", default="-")

_frame_depth = 6


class InterceptHandler(logging.Handler):
    """
    Handler that intercepts standard logging calls and redirects them to loguru.
    """

    def emit(self, record: logging.LogRecord):
        """Intercept standard logging record and pass to loguru."""
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where the logging call originated
        frame: Optional[FrameType] = sys._getframe(_frame_depth)
        depth: int = _frame_depth

        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def context_filter(record):
    """Add run_id from contextvars to log records."""
    run_id = run_id_var.get()
    if run_id and run_id != "-":
        record["extra"]["run_id"] = run_id
    return record


def build_simplified_json_record(record):
    """
    Build a simplified JSON log record from a loguru record.

    Only includes timestamp, level, logger name, message, run_id (if present)
    and exception (if present).
    """
    log_record = {
        "timestamp": record["time"].strftime("%Y-%m-%d %H:%M:%S"),
        "level": record["level"].name,
        "logger": record["name"],
        "message": record["message"],
    }

    if "run_id" in record["extra"]:
        log_record["run_id"] = record["extra"]["run_id"]

    if record["exception"]:
        traceback_text = None
        if record["exception"].traceback:
            try:
                traceback_text = "".join(
                    traceback.format_exception(
                        record["exception"].type,
                        record["exception"].value,
                        record["exception"].traceback,
                    )
                ).strip()
            except Exception:
                traceback_text = str(record["exception"].traceback)

        log_record["exception"] = {
            "type": (
                record["exception"].type.__name__ if record["exception"].type else None
            ),
            "value": (
                str(record["exception"].value) if record["exception"].value else None
            ),
            "traceback": traceback_text,
        }
    else:
        log_record["exception"] = None

    return log_record


def custom_json_sink(message):
    """Custom sink that writes simplified JSON lines to sys.stderr."""
    log_record = build_simplified_json_record(message.record)
    sys.stderr.write(json.dumps(log_record) + "\n")


def configure_logging(settings: Settings):
    """
    Configure logging for the workflow using loguru.

    This function:
    1. Removes the default loguru handler
    2. Adds a JSON sink (LOG_FORMAT=json) or a human readable stderr sink (text)
    3. Injects run_id from contextvars through a filter
    4. Intercepts all standard logging calls to redirect to loguru
    """
    global _frame_depth
    _frame_depth = settings.LOGGING_FRAME_DEPTH

    logger.remove()

    if settings.LOG_FORMAT.lower() == "text":
        logger.add(
            sys.stderr,
            level=settings.LOG_LEVEL,
            filter=context_filter,
            format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}",
        )
    else:
        logger.add(
            custom_json_sink,
            level=settings.LOG_LEVEL,
            backtrace=True,
            diagnose=False,
            filter=context_filter,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    # Request logs would otherwise print every poll
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    logger.debug("Logging configured successfully with loguru")


def set_run_id(run_id: str):
    """Set the run_id for the current context."""
    run_id_var.set(run_id)


def clear_run_id():
    """Clear the run_id from the current context."""
    run_id_var.set("-")


def get_run_id() -> str:
    """Get the current run_id from context."""
    return run_id_var.get()
