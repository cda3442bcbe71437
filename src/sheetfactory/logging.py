"""Logging configuration.

The server logs one JSON object per line in production and colored text in
development. The CLI passes ``stream=sys.stderr`` so that log lines never mix
with the paths and messages it prints on stdout.

Context bound with ``logger.bind(...)`` (workbook filename, sheet count, ...)
is flattened into the JSON entry, or appended after the message in
development. Standard library logging from uvicorn and FastAPI, and Python
warnings raised by openpyxl, are routed into loguru so every record shares the
same sink.
"""

import json
import logging
import sys
from typing import Any, TextIO

from loguru import logger

_LEVEL_NAMES = {
    "TRACE": "DEBUG",
    "SUCCESS": "INFO",
}

_INTERCEPTED_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "fastapi", "py.warnings")

_DEV_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)


def _serialize(record: dict[str, Any]) -> str:
    """Serialize a loguru record to a flat JSON log line.

    Fields from ``extra`` (``logger.bind(...)``) are copied to the top level.
    """
    level = record["level"].name
    entry: dict[str, Any] = {
        "level": _LEVEL_NAMES.get(level, level),
        "message": record["message"],
        "time": record["time"].isoformat(),
        "logger": record["name"],
    }

    if record["level"].no >= logging.ERROR:
        entry["location"] = f"{record['file'].path}:{record['line']}:{record['function']}"

    exception = record["exception"]
    if exception is not None:
        entry["exception"] = {
            "type": exception.type.__name__ if exception.type else None,
            "value": str(exception.value) if exception.value else None,
        }

    for key, value in record.get("extra", {}).items():
        if not key.startswith("_"):
            entry[key] = value

    return json.dumps(entry, default=str)


class JsonSink:
    """Write serialized records to a stream, one JSON object per line.

    With no stream given, ``sys.stdout`` is looked up on every write so that
    a replaced stdout (test capture, reopened pipes) is honored.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream

    def __call__(self, message: Any) -> None:
        stream = self.stream or sys.stdout
        stream.write(_serialize(message.record) + "\n")
        stream.flush()


def _dev_format(record: dict[str, Any]) -> str:
    context = {k: v for k, v in record["extra"].items() if not k.startswith("_")}
    suffix = " | <magenta>{extra}</magenta>" if context else ""
    return _DEV_FORMAT + suffix + "\n{exception}"


def configure_logging(
    *, is_production: bool, log_level: str = "INFO", stream: TextIO | None = None
) -> None:
    """Configure loguru for the application.

    Args:
        is_production: If True, output JSON lines. If False, use
            human-readable colored output.
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        stream: Where to write. Defaults to stdout for JSON and stderr for
            colored output.
    """
    logger.remove()

    if is_production:
        logger.add(
            JsonSink(stream),
            level=log_level,
            format="{message}",
            backtrace=False,
            diagnose=False,  # Never dump request values into production logs
        )
    else:
        logger.add(
            stream or sys.stderr,
            level=log_level,
            format=_dev_format,
            colorize=True,
            backtrace=True,
            diagnose=True,
        )

    _intercept_standard_logging(log_level)


class InterceptHandler(logging.Handler):
    """Forward standard library log records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where the logged message originated
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def _intercept_standard_logging(log_level: str) -> None:
    logging.basicConfig(handlers=[InterceptHandler()], level=log_level, force=True)
    # openpyxl reports odd input (unknown styles, data validation) through warnings
    logging.captureWarnings(True)

    for name in _INTERCEPTED_LOGGERS:
        logging.getLogger(name).setLevel(log_level)
        logging.getLogger(name).handlers = [InterceptHandler()]
