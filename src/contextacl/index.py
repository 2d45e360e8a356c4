"""Flattened identifier index over an access control schema.

``AccessIndex.build()`` walks every group reachable from the schema once and
maps each group and permission id to its node. The resulting index is
read-only and safe to share between threads.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Iterator, Mapping, Optional

from .exceptions import DuplicateGroupIdError, DuplicatePermissionIdError
from .schema import AccessControl, AccessControlSchema, Group, Permission

logger = logging.getLogger(__name__)


class AccessIndex:
    """Immutable ``id → AccessControl`` mapping.

    Build with :meth:`build`; the constructor only wraps an already
    collected mapping.
    """

    __slots__ = ("_nodes", "_duplicate_permission_ids")

    def __init__(
        self,
        nodes: Mapping[str, AccessControl],
        duplicate_permission_ids: frozenset[str] = frozenset(),
    ) -> None:
        self._nodes: Mapping[str, AccessControl] = MappingProxyType(dict(nodes))
        self._duplicate_permission_ids = frozenset(duplicate_permission_ids)

    @classmethod
    def build(cls, schema: AccessControlSchema, *, strict_permissions: bool = False) -> "AccessIndex":
        """Collect every group and permission reachable from ``schema``.

        A group reached again through another parent is skipped; binding a
        group id to a second, distinct node is fatal, whether that node is
        a group or a permission. A permission id bound
        twice keeps its first node and is logged as a warning, or raises
        when ``strict_permissions`` is set.

        Raises:
            DuplicateGroupIdError: Two distinct nodes claim the same group id.
            DuplicatePermissionIdError: Duplicate permission id in strict mode.
        """
        nodes: dict[str, AccessControl] = {}
        duplicates: set[str] = set()
        for group in schema.groups:
            _collect_access_controls(group, nodes, duplicates, strict_permissions)
        return cls(nodes, frozenset(duplicates))

    def lookup(self, node_id: str) -> Optional[AccessControl]:
        """Return the node registered under ``node_id``, or None."""
        return self._nodes.get(node_id)

    @property
    def nodes(self) -> Mapping[str, AccessControl]:
        return self._nodes

    @property
    def duplicate_permission_ids(self) -> frozenset[str]:
        """Permission ids that were declared by more than one node."""
        return self._duplicate_permission_ids

    def ids(self) -> frozenset[str]:
        return frozenset(self._nodes)

    def groups(self) -> list[Group]:
        return [node for node in self._nodes.values() if isinstance(node, Group)]

    def permissions(self) -> list[Permission]:
        return [node for node in self._nodes.values() if isinstance(node, Permission)]

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __iter__(self) -> Iterator[str]:
        return iter(self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def __repr__(self) -> str:
        return f"AccessIndex(groups={len(self.groups())}, permissions={len(self.permissions())})"


def _collect_access_controls(
    root: Group,
    nodes: dict[str, AccessControl],
    duplicates: set[str],
    strict_permissions: bool,
) -> None:
    stack = [root]
    while stack:
        group = stack.pop()
        old = nodes.get(group.id)
        if old is not None:
            if old is not group:
                raise DuplicateGroupIdError(group.id)
            logger.debug("Already visited access control group %s", group, extra={"group_id": group.id})
            continue

        nodes[group.id] = group
        logger.debug("Registered access control group %s", group, extra={"group_id": group.id})

        for permission in group.permissions:
            _register_permission(permission, group, nodes, duplicates, strict_permissions)

        # reversed so inherited groups are visited in declaration order
        stack.extend(reversed(group.inherits))


def _register_permission(
    permission: Permission,
    owner: Group,
    nodes: dict[str, AccessControl],
    duplicates: set[str],
    strict_permissions: bool,
) -> None:
    old = nodes.get(permission.id)
    if old is None:
        nodes[permission.id] = permission
        logger.debug(
            "Registered access control permission %s",
            permission,
            extra={"permission_id": permission.id},
        )
        return
    if old is permission:
        return
    if isinstance(old, Group):
        raise DuplicateGroupIdError(permission.id, declared_by=owner.id)
    if strict_permissions:
        raise DuplicatePermissionIdError(permission.id, group_id=owner.id)
    duplicates.add(permission.id)
    logger.warning(
        "Security configuration contains duplicate permission with id %s.",
        permission.id,
        extra={"permission_id": permission.id, "group_id": owner.id},
    )


__all__ = ["AccessIndex"]
