"""Unified exception hierarchy for tenantcore.

All errors raised by the engine and the resource services inherit from
TenantCoreError. This module provides:
- Base exception hierarchy with stable error codes
- ErrorRegistry for protocol mapping
- HTTP and gRPC status mapping for request-handler collaborators

Usage in request handlers:
    from tenantcore.exceptions import TenantCoreError, http_status_for

    try:
        service.get_student(principal, student_id)
    except TenantCoreError as e:
        return {"error": e.message, "code": http_status_for(e)}

None of these errors are retry candidates: they describe the caller's
request (wrong role, wrong tenant, wrong parent) and will fail again on
replay.
"""

from __future__ import annotations

from typing import Any, Callable, TypeVar, cast

__all__ = [
    # Base hierarchy
    "TenantCoreError",
    "ConfigurationError",
    "ForbiddenError",
    "NotFoundError",
    "ParentNotFoundError",
    "TenantMismatchError",
    "ConflictError",
    "ValidationError",
    "UnknownRoleError",
    # Registry
    "ErrorRegistry",
    "error_registry",
    "register_error",
    # Protocol helpers
    "http_status_for",
    "get_grpc_status_code",
]

# ---- Exception Hierarchy ----------------------------------------------------


class TenantCoreError(Exception):
    """Base exception for all tenantcore errors.

    Attributes:
        code: Stable error code string for protocol mapping (e.g. "FORBIDDEN").
        message: Human-readable error description.
        details: Additional context as keyword arguments.
        retryable: Whether replaying the same request may succeed.
    """

    code: str = "INTERNAL_ERROR"
    message: str = "An internal error occurred"
    retryable: bool = False

    def __init__(self, message: str | None = None, code: str | None = None, **kwargs: Any) -> None:
        self.message = message or self.message
        self.code = code or self.code
        self.details = kwargs
        super().__init__(self.message)


class ConfigurationError(TenantCoreError):
    """Malformed resource hierarchy or invalid static configuration.

    Raised at startup, never per request.
    """

    code: str = "CONFIGURATION_ERROR"
    message: str = "Invalid configuration"


class ForbiddenError(TenantCoreError):
    """Authorization denied (cross-tenant or insufficient privilege)."""

    code: str = "FORBIDDEN"
    message: str = "forbidden: access denied"


class NotFoundError(TenantCoreError):
    """Requested resource is missing or soft-deleted."""

    code: str = "NOT_FOUND"
    message: str = "resource not found"


class ParentNotFoundError(NotFoundError):
    """Referenced parent is missing or inactive."""

    code: str = "PARENT_NOT_FOUND"
    message: str = "referenced parent not found"


class TenantMismatchError(NotFoundError):
    """Referenced parent belongs to another tenant.

    Shares its public message with ParentNotFoundError so callers cannot
    probe for resources in other tenants.
    """

    code: str = "TENANT_MISMATCH"
    message: str = "referenced parent not found"


class ConflictError(TenantCoreError):
    """Uniqueness violation reported by the storage layer."""

    code: str = "CONFLICT"
    message: str = "resource already exists"


class ValidationError(TenantCoreError):
    """Request is missing a field the operation requires."""

    code: str = "VALIDATION_ERROR"
    message: str = "invalid request"


class UnknownRoleError(ValidationError):
    """Role string outside the closed role enumeration."""

    code: str = "UNKNOWN_ROLE"
    message: str = "unknown role"


# ---- Error Registry for Protocol Mapping ------------------------------------

_E = TypeVar("_E", bound=type[TenantCoreError])


class ErrorRegistry:
    """Registry for mapping internal errors to external protocol codes.

    tenantcore itself never looks errors up here; ``http_status_for`` and
    ``get_grpc_status_code`` map by ``error.code``. The registry exists for
    host services that add their own error types with ``register_error``
    and need to rebuild an error class from a code received over the wire.
    """

    def __init__(self) -> None:
        self._errors: dict[str, type[TenantCoreError]] = {}

    def register(self, code: str, error_cls: type[TenantCoreError]) -> None:
        self._errors[code] = error_cls

    def get(self, code: str) -> type[TenantCoreError] | None:
        return self._errors.get(code)

    def all(self) -> dict[str, type[TenantCoreError]]:
        return dict(self._errors)


error_registry = ErrorRegistry()


def register_error(code: str) -> Callable[[_E], _E]:
    """Decorator to register a custom error type.

    Usage:
        @register_error("QUOTA_EXCEEDED")
        class QuotaExceededError(TenantCoreError):
            code = "QUOTA_EXCEEDED"
    """

    def decorator(cls: _E) -> _E:
        error_registry.register(code, cls)
        return cls

    return cast(Callable[[_E], _E], decorator)


# Register base errors
error_registry.register("INTERNAL_ERROR", TenantCoreError)
error_registry.register("CONFIGURATION_ERROR", ConfigurationError)
error_registry.register("FORBIDDEN", ForbiddenError)
error_registry.register("NOT_FOUND", NotFoundError)
error_registry.register("PARENT_NOT_FOUND", ParentNotFoundError)
error_registry.register("TENANT_MISMATCH", TenantMismatchError)
error_registry.register("CONFLICT", ConflictError)
error_registry.register("VALIDATION_ERROR", ValidationError)
error_registry.register("UNKNOWN_ROLE", UnknownRoleError)


# ---- Protocol Mapping -------------------------------------------------------

_HTTP_STATUS: dict[str, int] = {
    "CONFIGURATION_ERROR": 500,
    "FORBIDDEN": 403,
    "NOT_FOUND": 404,
    "PARENT_NOT_FOUND": 404,
    "TENANT_MISMATCH": 404,
    "CONFLICT": 409,
    "VALIDATION_ERROR": 400,
    "UNKNOWN_ROLE": 400,
}


def http_status_for(error: TenantCoreError) -> int:
    """Map a TenantCoreError to the HTTP status a request handler should send.

    ParentNotFound and TenantMismatch both map to 404.
    """
    return _HTTP_STATUS.get(error.code, 500)


def get_grpc_status_code(error: TenantCoreError) -> Any:
    """Map TenantCoreError to gRPC status code.

    Returns grpc.StatusCode value for the given error type.
    Import grpc locally to avoid hard dependency at module level.
    """
    import grpc

    error_to_status = {
        "CONFIGURATION_ERROR": grpc.StatusCode.FAILED_PRECONDITION,
        "FORBIDDEN": grpc.StatusCode.PERMISSION_DENIED,
        "NOT_FOUND": grpc.StatusCode.NOT_FOUND,
        "PARENT_NOT_FOUND": grpc.StatusCode.NOT_FOUND,
        "TENANT_MISMATCH": grpc.StatusCode.NOT_FOUND,
        "CONFLICT": grpc.StatusCode.ALREADY_EXISTS,
        "VALIDATION_ERROR": grpc.StatusCode.INVALID_ARGUMENT,
        "UNKNOWN_ROLE": grpc.StatusCode.INVALID_ARGUMENT,
    }
    return error_to_status.get(error.code, grpc.StatusCode.INTERNAL)
