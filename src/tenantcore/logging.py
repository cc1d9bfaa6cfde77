"""Logging utilities for tenantcore and the services embedding it.

This module provides:
- Logging configuration from SharedConfig
- Safe preview utilities for record payloads
- PII redaction (e-mail addresses, credentials)
- Structured logging with the caller's tenant/user identity attached
"""

from __future__ import annotations

import json
import logging
import re
from typing import TYPE_CHECKING, Any, Optional

from .config import LogLevel, SharedConfig

if TYPE_CHECKING:
    from .permissions.access import Principal


# Student, school and user records carry e-mail addresses; credentials
# must never reach the logs even when a caller passes a raw request body
PII_PATTERNS = [
    r'(?i)(?:password|passwd|pwd|secret|token)\s*[:=]\s*["\']?([^"\'\s,}]+)',
    r'(?i)(?:bearer|basic)\s+([a-zA-Z0-9+/=._-]+)',
    r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}",
]

_IDENTITY_FIELDS = ("tenant_id", "user_id", "role")

_RESERVED_ATTRS = frozenset(
    {
        "name", "msg", "args", "created", "filename", "funcName",
        "levelname", "levelno", "lineno", "module", "msecs",
        "message", "pathname", "process", "processName", "relativeCreated",
        "thread", "threadName", "taskName", "exc_info", "exc_text", "stack_info", "asctime",
        *_IDENTITY_FIELDS,
    }
)


def safe_preview(value: Any, limit: int = 240) -> str:
    """Create a single-line, length-bounded preview of a value for logging.

    Args:
        value: The value to preview (any type)
        limit: Maximum length of the preview (default: 240)

    Returns:
        A truncated string representation
    """
    if value is None:
        return ""

    if isinstance(value, str):
        s = value
    elif isinstance(value, (dict, list)):
        try:
            s = json.dumps(value, default=str, ensure_ascii=False)
        except (TypeError, ValueError):
            s = str(value)
    else:
        s = str(value)

    s = " ".join(s.split())

    if len(s) > limit:
        return s[: limit - 1] + "…"

    return s


def redact_pii(text: str, replacement: str = "[REDACTED]") -> str:
    """Replace e-mail addresses and credential fragments in ``text``."""
    if not isinstance(text, str):
        return text

    result = text
    for pattern in PII_PATTERNS:
        result = re.sub(pattern, replacement, result)
    return result


def safe_log_value(value: Any, limit: int = 240, redact: bool = True) -> str:
    """Preview plus optional PII redaction; use for any record-derived value."""
    preview = safe_preview(value, limit=limit)
    if redact:
        preview = redact_pii(preview)
    return preview


class TenantFormatter(logging.Formatter):
    """Formatter that includes the caller identity and supports JSON output.

    This formatter:
    - Adds tenant_id, user_id and role from the record when present
    - Formats logs as JSON or plain text
    - Redacts PII from the message and extra fields
    """

    def __init__(
        self,
        json_format: bool = True,
        redact: bool = True,
        service_name: Optional[str] = None,
        *args: Any,
        **kwargs: Any,
    ):
        super().__init__(*args, **kwargs)
        self.json_format = json_format
        self.redact = redact
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if self.service_name:
            log_data["service"] = self.service_name

        for key in _IDENTITY_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                log_data[key] = getattr(value, "value", value)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                log_data[key] = safe_log_value(value, redact=self.redact)

        if self.redact:
            log_data["message"] = redact_pii(log_data["message"])

        if self.json_format:
            return json.dumps(log_data, default=str, ensure_ascii=False)

        parts = [
            f"[{log_data['timestamp']}]",
            log_data["level"],
            log_data["logger"],
        ]
        if "tenant_id" in log_data:
            parts.append(f"tenant_id={log_data['tenant_id']}")
        if "user_id" in log_data:
            parts.append(f"user_id={log_data['user_id']}")
        parts.append(f": {log_data['message']}")
        return " ".join(parts)


class PrincipalLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that adds the caller's identity to every record.

    Usage:
        logger = get_principal_logger(__name__, principal=principal)
        logger.info("Student created")
        logger.info("Listing schools", principal=other_principal)
    """

    def __init__(self, logger: logging.Logger, principal: Optional[Principal] = None):
        super().__init__(logger, {})
        self.principal = principal

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        principal = kwargs.pop("principal", None) or self.principal

        extra = kwargs.get("extra") or {}
        if principal is not None:
            extra.setdefault("user_id", principal.user_id)
            extra.setdefault("role", principal.role)
            if principal.tenant_id is not None:
                extra.setdefault("tenant_id", principal.tenant_id)
        kwargs["extra"] = extra

        return msg, kwargs


def setup_logging(
    config: Optional[SharedConfig] = None,
    json_format: Optional[bool] = None,
    redact: bool = True,
) -> None:
    """Configure root logging for a process embedding tenantcore.

    Args:
        config: SharedConfig instance (if None, loads from environment)
        json_format: Override ``config.log_json``
        redact: Whether to redact PII (default: True)
    """
    if config is None:
        from .config import load_shared_config_from_env

        config = load_shared_config_from_env()

    level_map = {
        LogLevel.DEBUG: logging.DEBUG,
        LogLevel.INFO: logging.INFO,
        LogLevel.WARNING: logging.WARNING,
        LogLevel.ERROR: logging.ERROR,
        LogLevel.CRITICAL: logging.CRITICAL,
    }
    log_level = level_map.get(config.log_level, logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(
        TenantFormatter(
            json_format=config.log_json if json_format is None else json_format,
            redact=redact,
            service_name=config.service_name,
        )
    )
    root_logger.addHandler(console_handler)

    logging.getLogger("tenantcore").setLevel(log_level)


def get_principal_logger(name: str, principal: Optional[Principal] = None) -> PrincipalLoggerAdapter:
    """Get a logger adapter bound to a principal.

    Args:
        name: Logger name (typically __name__)
        principal: Caller whose identity is attached to each record

    Returns:
        PrincipalLoggerAdapter instance
    """
    return PrincipalLoggerAdapter(logging.getLogger(name), principal=principal)


__all__ = [
    "PrincipalLoggerAdapter",
    "TenantFormatter",
    "get_principal_logger",
    "redact_pii",
    "safe_log_value",
    "safe_preview",
    "setup_logging",
]
