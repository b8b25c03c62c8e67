"""
Logging configuration.

Log records carry the id of the request that produced them, taken from a
context variable the request id middleware sets. Session tokens and
password fields are scrubbed from messages before any handler sees them.

Handlers:
- stdout (always), console or JSON format
- rotating file plus a separate error file when LOG_FILE_ENABLED is set
"""

import logging
import logging.config
import re
import sys
from contextvars import ContextVar
from pathlib import Path
from typing import Any

from workforce_auth.core.config import settings

# Set per request by RequestIDMiddleware
request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)

_REDACTIONS = (
    # Session tokens issued by this service
    (re.compile(r"wfs_[A-Za-z0-9_-]+"), "wfs_[REDACTED]"),
    (re.compile(r"(?i)(bearer\s+)[A-Za-z0-9._~+/=-]+"), r"\1[REDACTED]"),
    (
        re.compile(r"(?i)((?:password|secret|new_password|current_password)['\"]?\s*[:=]\s*)['\"]?[^\s,'\"}]+"),
        r"\1[REDACTED]",
    ),
)


class RequestContextFilter(logging.Filter):
    """Attach the current request id to every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "request_id", None):
            record.request_id = request_id_var.get() or "-"
        return True


class CredentialRedactionFilter(logging.Filter):
    """
    Scrub credential material from formatted log messages.

    Only the message is rewritten; structured ``extra`` fields are expected
    to be credential-free already.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = redact(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def redact(text: str) -> str:
    for pattern, replacement in _REDACTIONS:
        text = pattern.sub(replacement, text)
    return text


def _file_handler(filename: str, level: str, formatter: str) -> dict[str, Any]:
    return {
        "class": "logging.handlers.RotatingFileHandler",
        "level": level,
        "formatter": formatter,
        "filename": filename,
        "maxBytes": settings.log_file_max_bytes,
        "backupCount": settings.log_file_backup_count,
        "encoding": "utf-8",
        "filters": ["request_context", "redact"],
    }


def get_logging_config() -> dict[str, Any]:
    """Build the dictConfig mapping for the current settings."""
    formatter = "json" if settings.log_format == "json" else "console"
    handlers = ["stdout"]

    config: dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "console": {
                "format": "%(asctime)s %(levelname)-8s [%(request_id)s] %(name)s: %(message)s",
                "datefmt": "%Y-%m-%dT%H:%M:%S%z",
            },
            "json": {
                "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
                "format": "%(asctime)s %(levelname)s %(name)s %(request_id)s %(message)s",
                "rename_fields": {"levelname": "level", "asctime": "timestamp"},
            },
        },
        "filters": {
            "request_context": {"()": RequestContextFilter},
            "redact": {"()": CredentialRedactionFilter},
        },
        "handlers": {
            "stdout": {
                "class": "logging.StreamHandler",
                "level": settings.log_level,
                "formatter": formatter,
                "stream": sys.stdout,
                "filters": ["request_context", "redact"],
            },
        },
        "loggers": {
            "workforce_auth": {"level": settings.log_level, "propagate": True},
            "uvicorn.access": {"level": "WARNING"},
            "sqlalchemy.engine": {"level": "WARNING"},
        },
    }

    if settings.log_file_enabled:
        log_path = Path(settings.log_file_path)
        config["handlers"]["file"] = _file_handler(
            str(log_path), settings.log_level, formatter
        )
        config["handlers"]["error_file"] = _file_handler(
            str(log_path.with_name("error.log")), "ERROR", formatter
        )
        handlers += ["file", "error_file"]

    config["root"] = {"level": settings.log_level, "handlers": handlers}
    return config


def setup_logging() -> None:
    """Configure logging. Call once at startup, before anything logs."""
    if settings.log_file_enabled:
        Path(settings.log_file_path).parent.mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(get_logging_config())
    logging.getLogger(__name__).info(
        "Logging configured: level=%s format=%s file=%s",
        settings.log_level,
        settings.log_format,
        settings.log_file_enabled,
    )
