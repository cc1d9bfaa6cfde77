from .config import SharedConfig, LogLevel, load_shared_config_from_env
from .engine import AuthorizationEngine
from .exceptions import (
    TenantCoreError,
    ConfigurationError,
    ForbiddenError,
    NotFoundError,
    ParentNotFoundError,
    TenantMismatchError,
    ConflictError,
    ValidationError,
    UnknownRoleError,
    http_status_for,
)
from .logging import (
    safe_preview,
    redact_pii,
    safe_log_value,
    TenantFormatter,
    PrincipalLoggerAdapter,
    setup_logging,
    get_principal_logger,
)
from .permissions import (
    ACTION_SEVERITY,
    CROSS_TENANT,
    DEFAULT_HIERARCHY,
    EXCEEDS_OWNER,
    Action,
    Decision,
    HierarchyConfig,
    KindDeclaration,
    Policy,
    PolicyResolver,
    Principal,
    ResourceHierarchy,
    ResourceInstance,
    ResourceKinds,
    Role,
    ScopePredicate,
    at_least,
    authorize,
    check_parentage,
    resolve_creation_tenant,
    scope_filter,
)

__all__ = [
    'AuthorizationEngine',
    'SharedConfig',
    'LogLevel',
    'load_shared_config_from_env',
    'TenantCoreError',
    'ConfigurationError',
    'ForbiddenError',
    'NotFoundError',
    'ParentNotFoundError',
    'TenantMismatchError',
    'ConflictError',
    'ValidationError',
    'UnknownRoleError',
    'http_status_for',
    'safe_preview',
    'redact_pii',
    'safe_log_value',
    'TenantFormatter',
    'PrincipalLoggerAdapter',
    'setup_logging',
    'get_principal_logger',
    'ACTION_SEVERITY',
    'CROSS_TENANT',
    'DEFAULT_HIERARCHY',
    'EXCEEDS_OWNER',
    'Action',
    'Decision',
    'HierarchyConfig',
    'KindDeclaration',
    'Policy',
    'PolicyResolver',
    'Principal',
    'ResourceHierarchy',
    'ResourceInstance',
    'ResourceKinds',
    'Role',
    'ScopePredicate',
    'at_least',
    'authorize',
    'check_parentage',
    'resolve_creation_tenant',
    'scope_filter',
]
