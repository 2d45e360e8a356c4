"""Exception hierarchy for contextacl.

All errors inherit from AccessControlError. This module provides:
- Base exception hierarchy with stable error codes
- ErrorRegistry for protocol mapping
- gRPC status mapping and a unary handler decorator for services that
  expose an AccessControlProvider

Usage:
    from contextacl.exceptions import (
        AccessControlInitializationError,
        CyclicInheritanceError,
        grpc_error_handler,
    )

Initialization errors are fatal: the provider that raised them stays
unusable and must be rebuilt from a corrected schema.
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Callable, TypeVar, cast

__all__ = [
    # Base hierarchy
    "AccessControlError",
    "ConfigurationError",
    "AccessControlInitializationError",
    "EmptySchemaError",
    "CyclicInheritanceError",
    "DuplicateGroupIdError",
    "DuplicatePermissionIdError",
    "SchemaLoadError",
    "ProviderStateError",
    # Registry
    "ErrorRegistry",
    "error_registry",
    "register_error",
    # gRPC helpers
    "get_grpc_status_code",
    "grpc_error_handler",
]

logger = logging.getLogger(__name__)


# ---- Exception Hierarchy ----------------------------------------------------


class AccessControlError(Exception):
    """Base exception for contextacl.

    Attributes:
        code: Stable error code string for protocol mapping (e.g. "EMPTY_SCHEMA").
        message: Human-readable error description.
        details: Additional context as keyword arguments.
    """

    code: str = "INTERNAL_ERROR"
    message: str = "An internal error occurred"

    def __init__(self, message: str | None = None, code: str | None = None, **kwargs: Any) -> None:
        self.message = message or self.message
        self.code = code or self.code
        self.details = kwargs
        super().__init__(self.message)


class ConfigurationError(AccessControlError):
    """Invalid or missing configuration."""

    code: str = "CONFIGURATION_ERROR"


class AccessControlInitializationError(ConfigurationError):
    """The access control schema was rejected during initialization."""

    code: str = "INITIALIZATION_ERROR"
    message: str = "Access control initialization failed"


class EmptySchemaError(AccessControlInitializationError):
    """The schema declares no top-level group."""

    code: str = "EMPTY_SCHEMA"
    message: str = "AccessControlSchema is empty - please configure at least one group!"


class CyclicInheritanceError(AccessControlInitializationError):
    """A group inherits itself, directly or transitively."""

    code: str = "CYCLIC_INHERITANCE"

    def __init__(self, group_id: str, **kwargs: Any) -> None:
        self.group_id = group_id
        super().__init__(
            f"Cyclic inheritance of access control groups detected for {group_id}",
            group_id=group_id,
            **kwargs,
        )


class DuplicateGroupIdError(AccessControlInitializationError):
    """Two distinct nodes are registered under the same group id."""

    code: str = "DUPLICATE_GROUP_ID"

    def __init__(self, group_id: str, **kwargs: Any) -> None:
        self.group_id = group_id
        super().__init__(
            f"Invalid security configuration: duplicate groups with id {group_id}!",
            group_id=group_id,
            **kwargs,
        )


class DuplicatePermissionIdError(AccessControlInitializationError):
    """Two distinct nodes share a permission id (raised in strict mode only)."""

    code: str = "DUPLICATE_PERMISSION_ID"

    def __init__(self, permission_id: str, **kwargs: Any) -> None:
        self.permission_id = permission_id
        super().__init__(
            f"Invalid security configuration: duplicate permission with id {permission_id}!",
            permission_id=permission_id,
            **kwargs,
        )


class SchemaLoadError(AccessControlInitializationError):
    """The external schema source failed to produce a schema."""

    code: str = "SCHEMA_LOAD_ERROR"
    message: str = "Access control schema could not be loaded"


class ProviderStateError(AccessControlError):
    """Operation not allowed in the provider's current lifecycle state."""

    code: str = "PROVIDER_STATE_ERROR"


# ---- Error Registry for Protocol Mapping ------------------------------------

_E = TypeVar("_E", bound=type[AccessControlError])


class ErrorRegistry:
    """Registry for mapping internal errors to external protocol codes."""

    def __init__(self) -> None:
        self._errors: dict[str, type[AccessControlError]] = {}

    def register(self, code: str, error_cls: type[AccessControlError]) -> None:
        self._errors[code] = error_cls

    def get(self, code: str) -> type[AccessControlError] | None:
        return self._errors.get(code)

    def all(self) -> dict[str, type[AccessControlError]]:
        return dict(self._errors)


error_registry = ErrorRegistry()


def register_error(code: str) -> Callable[[_E], _E]:
    """Decorator to register a custom error type.

    Usage:
        @register_error("MY_CUSTOM_ERROR")
        class MyCustomError(AccessControlError):
            code = "MY_CUSTOM_ERROR"
    """

    def decorator(cls: _E) -> _E:
        error_registry.register(code, cls)
        return cls

    return cast(Callable[[_E], _E], decorator)


# Register base errors
error_registry.register("INTERNAL_ERROR", AccessControlError)
error_registry.register("CONFIGURATION_ERROR", ConfigurationError)
error_registry.register("INITIALIZATION_ERROR", AccessControlInitializationError)
error_registry.register("EMPTY_SCHEMA", EmptySchemaError)
error_registry.register("CYCLIC_INHERITANCE", CyclicInheritanceError)
error_registry.register("DUPLICATE_GROUP_ID", DuplicateGroupIdError)
error_registry.register("DUPLICATE_PERMISSION_ID", DuplicatePermissionIdError)
error_registry.register("SCHEMA_LOAD_ERROR", SchemaLoadError)
error_registry.register("PROVIDER_STATE_ERROR", ProviderStateError)


# ---- gRPC Error Handling Utilities ------------------------------------------


def get_grpc_status_code(error: AccessControlError) -> Any:
    """Map AccessControlError to gRPC status code.

    Returns grpc.StatusCode value for the given error type.
    Import grpc locally to avoid hard dependency at module level.
    """
    import grpc

    error_to_status = {
        "CONFIGURATION_ERROR": grpc.StatusCode.FAILED_PRECONDITION,
        "INITIALIZATION_ERROR": grpc.StatusCode.FAILED_PRECONDITION,
        "EMPTY_SCHEMA": grpc.StatusCode.FAILED_PRECONDITION,
        "CYCLIC_INHERITANCE": grpc.StatusCode.FAILED_PRECONDITION,
        "DUPLICATE_GROUP_ID": grpc.StatusCode.FAILED_PRECONDITION,
        "DUPLICATE_PERMISSION_ID": grpc.StatusCode.FAILED_PRECONDITION,
        "SCHEMA_LOAD_ERROR": grpc.StatusCode.UNAVAILABLE,
        "PROVIDER_STATE_ERROR": grpc.StatusCode.UNAVAILABLE,
    }
    return error_to_status.get(error.code, grpc.StatusCode.INTERNAL)


def grpc_error_handler(method):
    """Decorator for unary gRPC service methods with proper error handling.

    Catches AccessControlError and sets appropriate gRPC status codes.
    Logs errors and ensures consistent error response format.

    Usage:
        @grpc_error_handler
        async def ResolvePermissions(self, request, context):
            ...
    """

    @functools.wraps(method)
    async def wrapper(self, request, context):
        try:
            return await method(self, request, context)
        except AccessControlError as e:
            status_code = get_grpc_status_code(e)
            error_message = f"[{e.code}] {e.message}"

            logger.error(
                "%s failed: %s",
                method.__name__,
                error_message,
                extra={
                    "error_code": e.code,
                    "error_details": e.details,
                },
            )

            context.set_trailing_metadata([("error-code", e.code)])
            await context.abort(status_code, error_message)
            return

        except Exception as e:
            import grpc

            logger.exception("%s unexpected error: %s", method.__name__, e)
            await context.abort(
                grpc.StatusCode.INTERNAL,
                f"Unexpected {type(e)}: {e}",
            )
            return

    return wrapper
