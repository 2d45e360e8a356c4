"""Access control schema resolution.

Groups own permissions and inherit other groups. ``AccessControlProvider``
validates a schema once, indexes every node by id and then resolves, for
any group or permission id, the full set of ids it grants.
"""

from .config import AccessControlConfig, LogLevel, load_config_from_env
from .exceptions import (
    AccessControlError,
    AccessControlInitializationError,
    ConfigurationError,
    CyclicInheritanceError,
    DuplicateGroupIdError,
    DuplicatePermissionIdError,
    EmptySchemaError,
    ProviderStateError,
    SchemaLoadError,
)
from .index import AccessIndex
from .logging import AccessControlFormatter, safe_preview, setup_logging
from .provider import AccessControlProvider, ProviderState, SchemaSource
from .resolver import PermissionResolver
from .schema import AccessControl, AccessControlSchema, Group, Permission
from .validator import validate

__all__ = [
    'AccessControl',
    'AccessControlConfig',
    'AccessControlError',
    'AccessControlFormatter',
    'AccessControlInitializationError',
    'AccessControlProvider',
    'AccessControlSchema',
    'AccessIndex',
    'ConfigurationError',
    'CyclicInheritanceError',
    'DuplicateGroupIdError',
    'DuplicatePermissionIdError',
    'EmptySchemaError',
    'Group',
    'LogLevel',
    'Permission',
    'PermissionResolver',
    'ProviderState',
    'ProviderStateError',
    'SchemaLoadError',
    'SchemaSource',
    'load_config_from_env',
    'safe_preview',
    'setup_logging',
    'validate',
]
