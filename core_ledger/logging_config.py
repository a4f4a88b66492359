"""
Structured Logging Configuration Module

JSON (or plain text) log lines for ledger events. Every core logger lives under
the "core_ledger" namespace, so configuring that one logger covers the bank,
accounts and API.
"""

import logging
import json
from datetime import datetime, timezone
from typing import Optional


LEDGER_LOGGER = "core_ledger"

_STRUCTURED_FIELDS = ("correlation_id", "action", "resource", "extra")


class JSONFormatter(logging.Formatter):
    """One JSON object per record, structured fields included when set"""

    def format(self, record):
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
        }
        for name in _STRUCTURED_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                log_entry[name] = value

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


_TEXT_FORMAT = "%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s"


def _build_formatter(log_format: str) -> logging.Formatter:
    if log_format == "json":
        return JSONFormatter()
    if log_format == "text":
        return logging.Formatter(_TEXT_FORMAT)
    raise ValueError(f"Unknown log format: {log_format!r} (expected 'json' or 'text')")


def setup_logging(level: str = "INFO", logger_name: str = LEDGER_LOGGER,
                  log_format: str = "json") -> logging.Logger:
    """
    Attach a single stream handler to the ledger logger.

    Calling it again replaces the previous handler, so reconfiguring at
    runtime never duplicates output.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        logger_name: Logger to configure
        log_format: "json" or "text"

    Returns:
        The configured logger
    """
    logger = logging.getLogger(logger_name)
    formatter = _build_formatter(log_format)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper()))
    logger.propagate = False

    return logger


def setup_logging_from_config(config) -> logging.Logger:
    """Configure the ledger logger from a LedgerConfig"""
    return setup_logging(config.log_level, LEDGER_LOGGER, config.log_format)


def get_logger(name: str = LEDGER_LOGGER) -> logging.Logger:
    return logging.getLogger(name)


def log_action(logger: logging.Logger, level: str, message: str,
               action: Optional[str] = None, resource: Optional[str] = None,
               correlation_id: Optional[str] = None, extra: Optional[dict] = None,
               exc_info: bool = False):
    """
    Log a ledger event with structured fields.

    Args:
        logger: Logger instance
        level: Level name (info, warning, error, ...)
        message: Human readable message
        action: Operation name, e.g. "transfer"
        resource: What was acted on, e.g. "account:ES00001000"
        correlation_id: Request correlation id, when the caller has one
        extra: Additional structured data
        exc_info: Attach the exception currently being handled
    """
    log_level = getattr(logging, level.upper())
    if not logger.isEnabledFor(log_level):
        return

    fields = {
        name: value
        for name, value in (("action", action), ("resource", resource),
                            ("correlation_id", correlation_id), ("extra", extra))
        if value
    }
    logger.log(log_level, message, extra=fields, exc_info=exc_info)
