"""Shared configuration contract for tenantcore.

This module provides Pydantic-validated configuration models for the
settings the engine and its host process share (LOG_LEVEL, the resource
hierarchy declaration, service identification).

Host services MUST build these models through
``load_shared_config_from_env()`` or construct them explicitly; direct
os.environ/os.getenv usage elsewhere in the package is not allowed.

The resource hierarchy is static: it is loaded once at process start and
never reconfigured at runtime.
"""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from .exceptions import ConfigurationError
from .permissions.hierarchy import HierarchyConfig, KindDeclaration


class LogLevel(str, Enum):
    """Standard log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class SharedConfig(BaseModel):
    """Configuration contract for processes embedding tenantcore.

    Host services may extend this model with their own settings.
    """

    # Logging
    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level for the service",
    )
    log_json: bool = Field(
        default=False,
        description="Use JSON log format (default: plain text)",
    )

    # Service identification
    service_name: Optional[str] = Field(
        default=None,
        description="Service name used in log records (e.g., 'school-api')",
    )
    service_version: Optional[str] = Field(
        default=None,
        description="Service version",
    )

    # Authorization
    hierarchy: HierarchyConfig = Field(
        default_factory=HierarchyConfig,
        description="Resource kinds, their parents and default policies",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str | LogLevel) -> LogLevel:
        """Convert string to LogLevel enum."""
        if isinstance(v, LogLevel):
            return v
        if isinstance(v, str):
            try:
                return LogLevel[v.upper()]
            except KeyError:
                raise ValueError(f"Invalid log level: {v}. Must be one of {[e.value for e in LogLevel]}")
        raise ValueError(f"Log level must be string or LogLevel enum, got {type(v)}")

    model_config = {
        "extra": "forbid",  # Prevent accidental extra fields
    }


def load_hierarchy_file(path: str | Path) -> HierarchyConfig:
    """Load a hierarchy declaration from a JSON file.

    Expected layout::

        {"kinds": [
            {"kind": "school", "anyone_can": "none", "owner_can": "audit"},
            {"kind": "classroom", "parent": "school", "inherit": true}
        ]}
    """
    path = Path(path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"Cannot read hierarchy file {path}: {e}", path=str(path)) from e
    try:
        return HierarchyConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid hierarchy file {path}: {e}", path=str(path)) from e


def load_shared_config_from_env() -> SharedConfig:
    """Load shared configuration from environment variables.

    This is the ONLY place where os.getenv is allowed for shared settings.
    All other code MUST use the config object.

    Environment variables:
    - LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - LOG_JSON: Use JSON log format (true/false, default: false)
    - SERVICE_NAME: Service name for log records
    - SERVICE_VERSION: Service version
    - TENANTCORE_HIERARCHY_FILE: JSON hierarchy declaration replacing the
      built-in school → classroom → student tree

    Returns:
        SharedConfig instance with values from environment or defaults.
    """
    import os

    hierarchy_file = os.getenv("TENANTCORE_HIERARCHY_FILE")
    hierarchy = load_hierarchy_file(hierarchy_file) if hierarchy_file else HierarchyConfig()

    return SharedConfig(
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_json=os.getenv("LOG_JSON", "false").lower() in ("true", "1", "yes"),
        service_name=os.getenv("SERVICE_NAME"),
        service_version=os.getenv("SERVICE_VERSION"),
        hierarchy=hierarchy,
    )


__all__ = [
    "HierarchyConfig",
    "KindDeclaration",
    "LogLevel",
    "SharedConfig",
    "load_hierarchy_file",
    "load_shared_config_from_env",
]
