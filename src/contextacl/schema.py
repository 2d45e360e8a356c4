"""Access control schema model.

Provides:
- ``Permission`` — leaf node, grants only itself.
- ``Group`` — named set of permissions plus inherited groups.
- ``AccessControl`` — either of the two, identified by ``id``.
- ``AccessControlSchema`` — ordered list of top-level groups.

Instances are built by an external loader and are not mutated once handed
to ``AccessControlProvider.initialize()``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional, Union


@dataclass(frozen=True)
class Permission:
    """A single named permission (e.g. ``Customer_ReadCustomer``)."""

    id: str

    def __str__(self) -> str:
        return self.id


@dataclass(eq=False)
class Group:
    """A named group of permissions that may inherit other groups.

    Groups compare by identity: two ``Group`` objects with the same ``id``
    are distinct nodes, which is how conflicting declarations are detected.

    Attributes:
        id: Identifier, unique among all groups and permissions of a schema.
        type: Optional informational tag such as ``"role"`` or ``"group"``.
        permissions: Directly owned permissions, in declaration order.
        inherits: Inherited groups, in declaration order.
    """

    id: str
    type: Optional[str] = None
    permissions: list[Permission] = field(default_factory=list)
    inherits: list["Group"] = field(default_factory=list)

    def add_permission(self, *permissions: Union[str, Permission]) -> "Group":
        """Append permissions given as ids or ``Permission`` objects."""
        for permission in permissions:
            if isinstance(permission, str):
                permission = Permission(permission)
            self.permissions.append(permission)
        return self

    def inherit(self, *groups: "Group") -> "Group":
        """Append inherited groups."""
        self.inherits.extend(groups)
        return self

    def __repr__(self) -> str:
        # inherits may be cyclic in an invalid schema, so never recurse here
        if self.type:
            return f"Group(id={self.id!r}, type={self.type!r})"
        return f"Group(id={self.id!r})"

    def __str__(self) -> str:
        return self.id


AccessControl = Union[Permission, Group]


@dataclass(eq=False)
class AccessControlSchema:
    """Root of an access control configuration: the top-level groups."""

    groups: list[Group] = field(default_factory=list)

    def add_group(self, *groups: Group) -> "AccessControlSchema":
        self.groups.extend(groups)
        return self

    def get_group(self, group_id: str) -> Optional[Group]:
        """Return the first top-level group with ``group_id``."""
        for group in self.groups:
            if group.id == group_id:
                return group
        return None

    def groups_of_type(self, group_type: str) -> list[Group]:
        """Return top-level groups tagged with ``group_type``, in schema order."""
        return [group for group in self.groups if group.type == group_type]

    def __iter__(self) -> Iterator[Group]:
        return iter(self.groups)

    def __len__(self) -> int:
        return len(self.groups)


__all__ = [
    "AccessControl",
    "AccessControlSchema",
    "Group",
    "Permission",
]
