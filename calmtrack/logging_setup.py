"""Logging configuration for calmtrack."""

import logging
import os
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

ROOT_LOGGER_NAME = "calmtrack"

# Global logging state
_logging_initialized = False
_logging_lock = threading.Lock()
_session_id = None
_logged_messages = set()  # Track messages logged once per process


class ContextFormatter(logging.Formatter):
    """Formatter that includes session_id, component, and thread context."""

    def __init__(self):
        super().__init__(
            fmt=(
                "%(asctime)s.%(msecs)03d [%(session_id)s] [%(component)s] "
                "[%(threadName)s] %(levelname)s - %(message)s"
            ),
            datefmt="%Y-%m-%dT%H:%M:%S",
        )

    def formatTime(self, record, datefmt=None):
        """Format time in UTC."""
        dt = datetime.fromtimestamp(record.created, tz=timezone.utc)
        if datefmt:
            return dt.strftime(datefmt)
        return dt.isoformat()

    def format(self, record):
        """Add context fields to log record."""
        if not hasattr(record, "session_id"):
            record.session_id = _session_id or "unknown"

        if not hasattr(record, "component"):
            parts = record.name.split(".")
            if len(parts) >= 2 and parts[0] == ROOT_LOGGER_NAME:
                record.component = parts[1]
            else:
                record.component = "system"

        return super().format(record)


def setup_logging(
    console_level: str = "INFO",
    file_level: str = "DEBUG",
    session_id: Optional[str] = None,
    log_dir: Optional[Union[str, Path]] = None,
    console: bool = True,
    force: bool = False,
) -> logging.Logger:
    """Set up centralized logging configuration.

    Args:
        console_level: Console log level (INFO by default)
        file_level: File log level (DEBUG by default)
        session_id: Session identifier for context
        log_dir: Directory for a per-run log file; no file logging if None
        console: Whether to enable console logging
        force: Replace handlers installed by an earlier call

    Returns:
        Configured logger instance
    """
    global _logging_initialized, _session_id

    with _logging_lock:
        logger = logging.getLogger(ROOT_LOGGER_NAME)
        if _logging_initialized and not force:
            return logger

        _session_id = session_id or "unknown"

        logger.setLevel(logging.DEBUG)
        for handler in logger.handlers[:]:
            handler.close()
            logger.removeHandler(handler)
        logger.propagate = False

        formatter = ContextFormatter()

        if console:
            console_handler = logging.StreamHandler()
            console_handler.setLevel(getattr(logging, console_level.upper()))
            console_handler.setFormatter(formatter)
            logger.addHandler(console_handler)

        log_file = None
        if log_dir is not None:
            log_dir = Path(log_dir)
            log_dir.mkdir(parents=True, exist_ok=True)

            # Per-run log filename: YYYYMMDD_HHMMSS-PID.log
            now = datetime.now(timezone.utc)
            log_file = log_dir / f"{now.strftime('%Y%m%d_%H%M%S')}-{os.getpid()}.log"

            file_handler = logging.FileHandler(log_file, encoding="utf-8")
            file_handler.setLevel(getattr(logging, file_level.upper()))
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

        if not logger.handlers:
            logger.addHandler(logging.NullHandler())

        _logging_initialized = True

        logger.debug(f"Logging initialized - session: {_session_id}, file: {log_file}")

        return logger


def reset_logging() -> None:
    """Tear down handlers so setup_logging can run again."""
    global _logging_initialized

    with _logging_lock:
        logger = logging.getLogger(ROOT_LOGGER_NAME)
        for handler in logger.handlers[:]:
            handler.close()
            logger.removeHandler(handler)
        _logging_initialized = False
        _logged_messages.clear()


def get_logger(name: str) -> logging.Logger:
    """Get a `calmtrack.<name>` logger, initializing defaults on first use."""
    if not _logging_initialized:
        setup_logging()

    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def set_session_id(session_id: Optional[str]) -> None:
    """Set the global session ID for logging context."""
    global _session_id
    _session_id = session_id


def get_session_id() -> Optional[str]:
    """Get the current session ID."""
    return _session_id


def log_once(
    logger: logging.Logger,
    level: int,
    message: str,
    *args,
    key: Optional[str] = None,
    **kwargs,
) -> bool:
    """Log a message only once per process run.

    Args:
        logger: Logger instance to use
        level: Logging level (e.g., logging.INFO)
        message: Message to log (with format placeholders)
        *args: Message format arguments
        key: Optional custom key for deduplication
        **kwargs: Additional logging kwargs

    Returns:
        True if the message was emitted, False if it was a repeat
    """
    if key:
        message_key = f"{logger.name}:{level}:{key}"
    else:
        formatted_msg = message % args if args else message
        message_key = f"{logger.name}:{level}:{formatted_msg}"

    with _logging_lock:
        if message_key in _logged_messages:
            return False
        _logged_messages.add(message_key)

    logger.log(level, message, *args, **kwargs)
    return True
