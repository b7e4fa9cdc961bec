"""
Structured Logging Setup

Consistent logging configuration across all services.
Uses JSON format for structured logs in production.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone


class JsonFormatter(logging.Formatter):
    """JSON log formatter for structured logging"""

    _RESERVED = (
        "name", "msg", "args", "levelname", "levelno", "pathname",
        "filename", "module", "exc_info", "exc_text", "stack_info",
        "lineno", "funcName", "created", "msecs", "relativeCreated",
        "thread", "threadName", "processName", "process", "service",
        "message", "taskName",
    )

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "service": getattr(record, "service", "unknown"),
            "message": record.getMessage(),
            "logger": record.name,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Add extra fields
        for key, value in record.__dict__.items():
            if key not in self._RESERVED:
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
        service_name: Name of the service (e.g., "monitoring", "vnnox")
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSON format (True for production, False for dev)

    Returns:
        Configured logger instance
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    logger = logging.getLogger(f"led_manager.{service_name}")
    logger.setLevel(numeric_level)
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


def get_service_logger(service_name: str) -> ServiceLoggerAdapter:
    """
    Get a logger adapter with service context.

    Level and format come from LED_MANAGER_LOG_LEVEL and
    LED_MANAGER_LOG_FORMAT ("json" or "text").
    """
    log_level = os.environ.get("LED_MANAGER_LOG_LEVEL", "INFO")
    json_format = os.environ.get("LED_MANAGER_LOG_FORMAT", "json").lower() == "json"

    logger = setup_logging(service_name, log_level, json_format)
    return ServiceLoggerAdapter(logger, {"service": service_name})


def log_status_change(
    logger: logging.LoggerAdapter,
    display_id: str,
    previous: str | None,
    status: str,
) -> None:
    """Log a persisted display status"""
    if previous == status:
        logger.debug(
            f"Display {display_id} still {status}",
            extra={"display_id": display_id, "status": status},
        )
    else:
        logger.info(
            f"Display {display_id}: {previous} -> {status}",
            extra={"display_id": display_id, "previous": previous, "status": status},
        )


def log_publish(
    logger: logging.LoggerAdapter,
    display_id: str,
    content_id: str,
    playing: str | None,
    success: bool = True,
) -> None:
    """Log a corrective content publish"""
    extra = {"display_id": display_id, "content_id": content_id, "playing": playing}
    if success:
        logger.info(
            f"Updated content on display {display_id} to scheduled content {content_id}",
            extra=extra,
        )
    else:
        logger.error(
            f"Failed to publish scheduled content {content_id} to display {display_id}",
            extra=extra,
        )
