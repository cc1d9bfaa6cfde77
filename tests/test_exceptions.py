"""Tests for the exception hierarchy and protocol mapping."""

from __future__ import annotations

import pytest

from tenantcore.exceptions import (
    ConfigurationError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ParentNotFoundError,
    TenantCoreError,
    TenantMismatchError,
    UnknownRoleError,
    ValidationError,
    error_registry,
    get_grpc_status_code,
    http_status_for,
    register_error,
)


class TestHierarchy:
    """Tests for error classes."""

    def test_defaults(self) -> None:
        """Errors carry their class code and default message."""
        error = ForbiddenError()
        assert error.code == "FORBIDDEN"
        assert error.message == "forbidden: access denied"
        assert str(error) == error.message
        assert error.retryable is False

    def test_details(self) -> None:
        """Keyword arguments land in details."""
        error = ConflictError("student with this email already exists", field="email")
        assert error.details == {"field": "email"}

    def test_parent_errors_share_message(self) -> None:
        """Missing and foreign parents are indistinguishable by message."""
        assert ParentNotFoundError().message == TenantMismatchError().message
        assert isinstance(TenantMismatchError(), NotFoundError)
        assert ParentNotFoundError().code != TenantMismatchError().code

    def test_unknown_role_is_validation(self) -> None:
        """Unknown roles are a kind of validation error."""
        assert issubclass(UnknownRoleError, ValidationError)

    def test_registry(self) -> None:
        """Base errors are registered by code."""
        assert error_registry.get("TENANT_MISMATCH") is TenantMismatchError
        assert error_registry.get("NOPE") is None

    def test_rebuild_from_code(self) -> None:
        """A code received over the wire maps back to its error class."""
        original = TenantMismatchError(parent_id="c2")
        rebuilt = error_registry.get(original.code)(original.message)
        assert isinstance(rebuilt, TenantMismatchError)
        assert http_status_for(rebuilt) == http_status_for(original) == 404

    def test_register_error(self) -> None:
        """Custom errors can be registered by decorator."""

        @register_error("QUOTA_EXCEEDED")
        class QuotaExceededError(TenantCoreError):
            code = "QUOTA_EXCEEDED"

        assert error_registry.get("QUOTA_EXCEEDED") is QuotaExceededError


class TestHttpStatus:
    """Tests for http_status_for()."""

    @pytest.mark.parametrize(
        ("error", "status"),
        [
            (ForbiddenError(), 403),
            (NotFoundError(), 404),
            (ParentNotFoundError(), 404),
            (TenantMismatchError(), 404),
            (ConflictError(), 409),
            (ValidationError(), 400),
            (UnknownRoleError(), 400),
            (ConfigurationError(), 500),
            (TenantCoreError(), 500),
        ],
    )
    def test_mapping(self, error: TenantCoreError, status: int) -> None:
        """Each error maps to its HTTP status."""
        assert http_status_for(error) == status


class TestGrpcStatus:
    """Tests for get_grpc_status_code()."""

    def test_mapping(self) -> None:
        """Errors map onto gRPC status codes."""
        grpc = pytest.importorskip("grpc")
        assert get_grpc_status_code(ForbiddenError()) == grpc.StatusCode.PERMISSION_DENIED
        assert get_grpc_status_code(TenantMismatchError()) == grpc.StatusCode.NOT_FOUND
        assert get_grpc_status_code(ConflictError()) == grpc.StatusCode.ALREADY_EXISTS
        assert get_grpc_status_code(UnknownRoleError()) == grpc.StatusCode.INVALID_ARGUMENT
        assert get_grpc_status_code(TenantCoreError()) == grpc.StatusCode.INTERNAL
