"""Transitive permission resolution over an ``AccessIndex``.

A group grants its own id, its permissions and, recursively, everything its
inherited groups grant (plain set union, nothing is shadowed). Each query
owns its accumulator and only reads the index, so one resolver can serve
any number of concurrent callers.
"""

from __future__ import annotations

import logging
from typing import Iterable, MutableSet

from .index import AccessIndex
from .schema import AccessControl, Group, Permission

logger = logging.getLogger(__name__)


class PermissionResolver:
    """Answers "what does this id grant?" against a built index."""

    def __init__(self, index: AccessIndex) -> None:
        self._index = index

    @property
    def index(self) -> AccessIndex:
        return self._index

    def collect_access_control_ids(self, node_id: str, permissions: MutableSet[str]) -> bool:
        """Add every id granted by ``node_id`` to ``permissions``.

        An unknown id is added as-is: it is treated as a flat permission the
        caller already holds.

        Returns:
            True if ``node_id`` is known to the index.
        """
        node = self._index.lookup(node_id)
        if isinstance(node, Group):
            collect_permission_ids(node, permissions)
        else:
            # node does not exist or is a flat Permission
            permissions.add(node_id)
        return node is not None

    def collect_access_controls(self, node_id: str, permissions: MutableSet[AccessControl]) -> bool:
        """Add every node granted by ``node_id`` to ``permissions``.

        Unlike :meth:`collect_access_control_ids`, nothing is added for an
        unknown id.

        Returns:
            True if ``node_id`` is known to the index.
        """
        node = self._index.lookup(node_id)
        if node is None:
            return False
        if isinstance(node, Group):
            collect_permission_nodes(node, permissions)
        else:
            permissions.add(node)
        return True

    def resolve_ids(self, node_id: str) -> tuple[bool, frozenset[str]]:
        """Return ``(found, ids)`` for ``node_id`` using a fresh accumulator."""
        permissions: set[str] = set()
        found = self.collect_access_control_ids(node_id, permissions)
        return found, frozenset(permissions)

    def resolve(self, node_id: str) -> tuple[bool, frozenset[AccessControl]]:
        """Return ``(found, nodes)`` for ``node_id`` using a fresh accumulator."""
        permissions: set[AccessControl] = set()
        found = self.collect_access_controls(node_id, permissions)
        return found, frozenset(permissions)

    def effective_permissions(self, node_id: str) -> frozenset[str]:
        """Permission ids granted by ``node_id``, group ids left out.

        Empty for unknown ids.
        """
        _, nodes = self.resolve(node_id)
        return frozenset(node.id for node in nodes if isinstance(node, Permission))

    def expand(self, node_ids: Iterable[str]) -> tuple[str, ...]:
        """Expand several ids (e.g. the roles of a user) into one id set.

        Returns:
            Deduplicated, sorted tuple with all granted ids.

        Example::

            resolver.expand(("ReadOnly", "Reporting_Export"))
            # ('Contract_ReadContract', 'Contract_ReadContractAsset', ...,
            #  'ReadOnly', 'Reporting_Export')
        """
        expanded: set[str] = set()
        for node_id in node_ids:
            if not self.collect_access_control_ids(node_id, expanded):
                logger.debug("Unknown access control id %s kept as flat permission", node_id)
        return tuple(sorted(expanded))

    def has_permission(self, node_ids: Iterable[str], permission_id: str) -> bool:
        """Check whether any of ``node_ids`` grants ``permission_id``."""
        granted: set[str] = set()
        for node_id in node_ids:
            self.collect_access_control_ids(node_id, granted)
        return permission_id in granted


def collect_permission_ids(group: Group, permissions: MutableSet[str]) -> None:
    """Collect ids granted by ``group`` into ``permissions``.

    A group id already present in the accumulator ends that branch, which
    keeps shared sub-groups from being walked twice.
    """
    stack = [group]
    while stack:
        current = stack.pop()
        if current.id in permissions:
            continue
        permissions.add(current.id)
        for permission in current.permissions:
            permissions.add(permission.id)
        stack.extend(reversed(current.inherits))


def collect_permission_nodes(group: Group, permissions: MutableSet[AccessControl]) -> None:
    """Node variant of :func:`collect_permission_ids`."""
    stack = [group]
    while stack:
        current = stack.pop()
        if current in permissions:
            continue
        permissions.add(current)
        for permission in current.permissions:
            permissions.add(permission)
        stack.extend(reversed(current.inherits))


__all__ = [
    "PermissionResolver",
    "collect_permission_ids",
    "collect_permission_nodes",
]
