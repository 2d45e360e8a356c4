"""Access control provider: one-shot initialization plus read-only queries.

Typical use::

    provider = AccessControlProvider.from_schema(schema)
    granted: set[str] = set()
    provider.collect_access_control_ids("Admin", granted)

A provider is either UNINITIALIZED, READY or FAILED. A failed
initialization is final: fix the schema and build a new provider.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Iterable, MutableSet, Optional, Protocol, cast, runtime_checkable

from .config import AccessControlConfig
from .exceptions import AccessControlError, ProviderStateError, SchemaLoadError
from .index import AccessIndex
from .resolver import PermissionResolver
from .schema import AccessControl, AccessControlSchema
from .validator import validate

logger = logging.getLogger(__name__)


class ProviderState(str, Enum):
    """Lifecycle of an AccessControlProvider."""

    UNINITIALIZED = "uninitialized"
    READY = "ready"
    FAILED = "failed"


@runtime_checkable
class SchemaSource(Protocol):
    """Anything able to produce an AccessControlSchema (file loader, fixture, ...)."""

    def load_schema(self) -> AccessControlSchema: ...


class AccessControlProvider:
    """Resolves groups and permissions of an access control schema.

    Args:
        config: Provider settings; defaults to ``AccessControlConfig()``.
    """

    def __init__(self, config: Optional[AccessControlConfig] = None) -> None:
        self._config = config or AccessControlConfig()
        self._state = ProviderState.UNINITIALIZED
        self._index: Optional[AccessIndex] = None
        self._resolver: Optional[PermissionResolver] = None

    @classmethod
    def from_schema(
        cls,
        schema: AccessControlSchema,
        config: Optional[AccessControlConfig] = None,
    ) -> "AccessControlProvider":
        """Create a provider and initialize it with ``schema``."""
        provider = cls(config)
        provider.initialize(schema)
        return provider

    # ── Lifecycle ───────────────────────────────────────

    @property
    def state(self) -> ProviderState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is ProviderState.READY

    @property
    def config(self) -> AccessControlConfig:
        return self._config

    def initialize(self, schema: AccessControlSchema) -> None:
        """Validate ``schema`` and build the index.

        Raises:
            EmptySchemaError: No top-level group.
            CyclicInheritanceError: Cyclic group inheritance.
            DuplicateGroupIdError: Group id bound to distinct nodes.
            DuplicatePermissionIdError: Duplicate permission id (strict mode only).
            ProviderStateError: The provider was already initialized or failed.
        """
        self._require_state(ProviderState.UNINITIALIZED, "initialize")
        logger.debug("Initializing.")
        try:
            validate(schema)
            index = AccessIndex.build(schema, strict_permissions=self._config.strict_permissions)
        except AccessControlError as e:
            self._state = ProviderState.FAILED
            logger.error(
                "Access control initialization failed: %s",
                e.message,
                extra={"error_code": e.code, "error_details": e.details},
            )
            raise
        except Exception:
            self._state = ProviderState.FAILED
            logger.exception("Unexpected error during access control initialization")
            raise

        self._index = index
        self._resolver = PermissionResolver(index)
        self._state = ProviderState.READY
        logger.info(
            "Access control initialized: %d top-level groups, %d groups, %d permissions",
            len(schema.groups),
            len(index.groups()),
            len(index.permissions()),
        )

    def initialize_from(self, source: SchemaSource) -> None:
        """Load the schema from ``source`` and initialize with it.

        Raises:
            SchemaLoadError: ``source`` failed; the original error is the cause.
        """
        self._require_state(ProviderState.UNINITIALIZED, "initialize")
        try:
            schema = source.load_schema()
        except Exception as e:
            self._state = ProviderState.FAILED
            logger.error("Loading access control schema from %r failed: %s", source, e)
            raise SchemaLoadError(
                f"Access control schema could not be loaded from {source!r}",
                source=repr(source),
            ) from e
        self.initialize(schema)

    # ── Queries ─────────────────────────────────────────

    @property
    def index(self) -> AccessIndex:
        self._require_state(ProviderState.READY, "query")
        return cast(AccessIndex, self._index)

    @property
    def resolver(self) -> PermissionResolver:
        self._require_state(ProviderState.READY, "query")
        return cast(PermissionResolver, self._resolver)

    def get_access_control(self, node_id: str) -> Optional[AccessControl]:
        """Return the group or permission registered under ``node_id``."""
        return self.index.lookup(node_id)

    def collect_access_control_ids(self, node_id: str, permissions: MutableSet[str]) -> bool:
        """See :meth:`PermissionResolver.collect_access_control_ids`."""
        return self.resolver.collect_access_control_ids(node_id, permissions)

    def collect_access_controls(self, node_id: str, permissions: MutableSet[AccessControl]) -> bool:
        """See :meth:`PermissionResolver.collect_access_controls`."""
        return self.resolver.collect_access_controls(node_id, permissions)

    def resolve_ids(self, node_id: str) -> tuple[bool, frozenset[str]]:
        return self.resolver.resolve_ids(node_id)

    def effective_permissions(self, node_id: str) -> frozenset[str]:
        return self.resolver.effective_permissions(node_id)

    def expand(self, node_ids: Iterable[str]) -> tuple[str, ...]:
        return self.resolver.expand(node_ids)

    def has_permission(self, node_ids: Iterable[str], permission_id: str) -> bool:
        return self.resolver.has_permission(node_ids, permission_id)

    def _require_state(self, expected: ProviderState, operation: str) -> None:
        if self._state is not expected:
            raise ProviderStateError(
                f"Cannot {operation} access control provider in state '{self._state.value}'",
                state=self._state.value,
            )

    def __repr__(self) -> str:
        return f"AccessControlProvider(state={self._state.value})"


__all__ = [
    "AccessControlProvider",
    "ProviderState",
    "SchemaSource",
]
