"""Structured logging configuration with redaction of credentials."""

import logging
import re
import sys
from typing import Any, Dict

import structlog

REDACTED = "REDACTED"

# Any event key containing one of these substrings is redacted
SENSITIVE_KEY_PARTS = (
    "password",
    "secret",
    "authorization",
    "token",
    "api_key",
)

# Bearer headers and JWTs are redacted whatever key they are logged under
_BEARER_VALUE = re.compile(r"^\s*bearer\s+\S+", re.IGNORECASE)
_JWT_VALUE = re.compile(r"^[A-Za-z0-9_-]{10,}\.[A-Za-z0-9_-]{10,}\.[A-Za-z0-9_-]+$")

_NOISY_LOGGERS = ("asyncio", "asyncpg", "httpx", "httpcore")


def _looks_like_credential(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    return bool(_BEARER_VALUE.match(value) or _JWT_VALUE.match(value))


def redact_sensitive(
    logger: Any, method_name: str, event_dict: Dict[str, Any]
) -> Dict[str, Any]:
    """Redact credentials from log entries.

    A value is replaced when its key names a credential (case-insensitive
    substring match) or when the value itself is a bearer header or a JWT.
    The event name is left alone.
    """
    for key, value in list(event_dict.items()):
        if key == "event":
            continue
        key_lower = key.lower()
        if any(part in key_lower for part in SENSITIVE_KEY_PARTS) or _looks_like_credential(value):
            event_dict[key] = REDACTED

    return event_dict


def _renderer(log_format: str):
    if log_format == "console":
        return structlog.dev.ConsoleRenderer(colors=False)
    return structlog.processors.JSONRenderer()


def configure_logging(log_level: str = "INFO", log_format: str = "json") -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_format: ``json`` for one JSON object per line, ``console`` for
            human-readable development output
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            redact_sensitive,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _renderer(log_format),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a logger, bound to ``logger_name`` when a name is given."""
    logger = structlog.get_logger()
    if name:
        logger = logger.bind(logger_name=name)
    return logger
