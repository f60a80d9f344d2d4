import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any

import pytz
import requests
from loguru import logger
from loguru._logger import Logger

from app.core.config import settings

# (file name, minimum level, retention, only when DEBUG is set)
FILE_SINKS = [
    ("trace.log", "TRACE", "3 days", True),
    ("debug.log", "DEBUG", "7 days", True),
    ("info.log", "INFO", "14 days", False),
    ("error.log", "ERROR", "30 days", False),
]

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | {message}"
CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<blue>{line}</blue> | {message}"
)


class InterceptHandler(logging.Handler):
    """Forwards records from stdlib loggers (services, uvicorn) to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def _with_context(template: str):
    """Build a formatter that appends bound context (edge id, account ids)."""

    def formatter(record: Any) -> str:
        line = template
        if record["extra"]:
            context = " ".join(f"{key}={{extra[{key}]}}" for key in record["extra"])
            line += f" [{context}]"
        line += "\n"
        if record["exception"]:
            line += "{exception}"
        return line

    return formatter


def send_to_telegram(message: Any) -> None:
    record = message.record
    text = (
        f"{settings.PROJECT_NAME} {record['level'].name}\n"
        f"{record['name']}:{record['line']}\n\n"
        f"{record['message']}"
    )
    requests.post(
        f"https://api.telegram.org/bot{settings.TELEGRAM_BOT_TOKEN}/sendMessage",
        data={"chat_id": settings.TELEGRAM_USER_ID, "text": text},
        timeout=10,
    )


def log_path_for(name: str, log_dir: str | None = None) -> Path:
    today = datetime.now(pytz.timezone(settings.LOG_TIMEZONE)).date().isoformat()
    return Path(log_dir or settings.LOG_DIR) / today / name


def setup_logger(name: str, log_dir: str | None = None) -> Logger:
    """
    Route all logging for the process named `name` through loguru.

    Files go to `<log_dir>/<date>/<name>/`, rotated at midnight. The date is
    taken in `LOG_TIMEZONE`.
    """
    path = log_path_for(name, log_dir)
    path.mkdir(parents=True, exist_ok=True)

    logger.remove()

    file_format = _with_context(FILE_FORMAT)
    for filename, level, retention, debug_only in FILE_SINKS:
        if debug_only and not settings.DEBUG:
            continue
        logger.add(
            path / filename,
            format=file_format,
            level=level,
            rotation="00:00",
            retention=retention,
            compression="zip",
            enqueue=True,
            backtrace=True,
            # Local variables only in debug-only files.
            diagnose=debug_only,
        )

    logger.add(
        sys.stderr,
        format=_with_context(CONSOLE_FORMAT),
        level="DEBUG" if settings.DEBUG else "INFO",
        enqueue=True,
        diagnose=settings.DEBUG,
        colorize=True,
    )

    if settings.ENABLE_TELEGRAM:
        logger.add(send_to_telegram, level="ERROR")

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    return logger  # type: ignore
