"""
Structured Logging Setup

Consistent logging configuration for the manager and the runner.
Uses JSON format for structured logs in production.

The manager itself never writes to a global logger. It receives a
four-channel logger (debug / info / warn / error) and every line it
emits is prefixed with the manager name.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Callable, Protocol, runtime_checkable


class JsonFormatter(logging.Formatter):
    """JSON log formatter for structured logging"""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "service": getattr(record, "service", "unknown"),
            "message": record.getMessage(),
            "logger": record.name,
        }

        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Add extra fields
        for key, value in record.__dict__.items():
            if key not in (
                "name", "msg", "args", "levelname", "levelno", "pathname",
                "filename", "module", "exc_info", "exc_text", "stack_info",
                "lineno", "funcName", "created", "msecs", "relativeCreated",
                "thread", "threadName", "processName", "process", "service",
                "message", "taskName",
            ):
                log_data[key] = value

        return json.dumps(log_data, default=str)


class ServiceLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that adds service name to all logs"""

    def process(self, msg: str, kwargs: dict) -> tuple[str, dict]:
        kwargs.setdefault("extra", {})
        kwargs["extra"]["service"] = self.extra.get("service", "unknown")
        return msg, kwargs


def setup_logging(
    service_name: str,
    log_level: str = "INFO",
    json_format: bool = True,
) -> logging.Logger:
    """
    Set up structured logging for a service.

    Args:
        service_name: Name of the service (e.g., "runner", "manager")
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSON format (True for production, False for dev)

    Returns:
        Configured logger instance
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    logger = logging.getLogger(f"configmanager.{service_name}")
    logger.setLevel(numeric_level)

    # Clear existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric_level)

    if json_format:
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    handler.setFormatter(formatter)
    logger.addHandler(handler)

    # Don't propagate to root logger
    logger.propagate = False

    return logger


def get_service_logger(
    service_name: str,
    log_level: str | None = None,
    json_format: bool | None = None,
) -> ServiceLoggerAdapter:
    """
    Get a logger adapter with service context.

    Environment variables CONFIGMANAGER_LOG_LEVEL and
    CONFIGMANAGER_LOG_FORMAT are used when the arguments are omitted.
    """
    if log_level is None:
        log_level = os.environ.get("CONFIGMANAGER_LOG_LEVEL", "INFO")
    if json_format is None:
        json_format = os.environ.get("CONFIGMANAGER_LOG_FORMAT", "json").lower() == "json"

    logger = setup_logging(service_name, log_level, json_format)
    return ServiceLoggerAdapter(logger, {"service": service_name})


# ---------------------------------------------------------------------------
# Manager logger channels
# ---------------------------------------------------------------------------

CHANNELS = ("debug", "info", "warn", "error")


@runtime_checkable
class ManagerLogger(Protocol):
    """Four independent channels, each taking a single message string."""

    def debug(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...

    def warn(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class NullLogger:
    """Discards every message."""

    def debug(self, message: str) -> None:
        pass

    def info(self, message: str) -> None:
        pass

    def warn(self, message: str) -> None:
        pass

    def error(self, message: str) -> None:
        pass


class StdlibLogger:
    """Bridges the four channels onto a logging.Logger or LoggerAdapter."""

    def __init__(self, logger: logging.Logger | logging.LoggerAdapter):
        self.logger = logger

    def debug(self, message: str) -> None:
        self.logger.debug(message)

    def info(self, message: str) -> None:
        self.logger.info(message)

    def warn(self, message: str) -> None:
        self.logger.warning(message)

    def error(self, message: str) -> None:
        self.logger.error(message)


def _noop(message: str) -> None:
    pass


class ChannelLogger:
    """
    Wraps an arbitrary object exposing some of the four channels.

    Each channel is resolved independently; a missing one becomes a no-op.
    """

    def __init__(self, target: Any):
        self.target = target
        self._channels: dict[str, Callable[[str], Any]] = {
            name: getattr(target, name, None) or _noop for name in CHANNELS
        }

    def debug(self, message: str) -> None:
        self._channels["debug"](message)

    def info(self, message: str) -> None:
        self._channels["info"](message)

    def warn(self, message: str) -> None:
        self._channels["warn"](message)

    def error(self, message: str) -> None:
        self._channels["error"](message)


class PrefixedLogger:
    """Prefixes every message with '<name>: '."""

    def __init__(self, name: str, logger: ManagerLogger):
        self.name = name
        self.logger = logger

    def debug(self, message: str) -> None:
        self.logger.debug(f"{self.name}: {message}")

    def info(self, message: str) -> None:
        self.logger.info(f"{self.name}: {message}")

    def warn(self, message: str) -> None:
        self.logger.warn(f"{self.name}: {message}")

    def error(self, message: str) -> None:
        self.logger.error(f"{self.name}: {message}")


def resolve_manager_logger(logger: Any = None) -> ManagerLogger:
    """
    Turn whatever the caller supplied into a four-channel logger.

    None gives a NullLogger, stdlib loggers are bridged (warn -> warning),
    anything else is wrapped channel by channel.
    """
    if logger is None:
        return NullLogger()
    if isinstance(logger, (NullLogger, StdlibLogger, ChannelLogger, PrefixedLogger)):
        return logger
    if isinstance(logger, (logging.Logger, logging.LoggerAdapter)):
        return StdlibLogger(logger)
    return ChannelLogger(logger)
