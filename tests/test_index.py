"""Tests for AccessIndex construction and lookup."""

from __future__ import annotations

import logging

import pytest

from conftest import ADMIN_PERMISSIONS, READ_ONLY_PERMISSIONS, READ_WRITE_PERMISSIONS
from contextacl import (
    AccessControlSchema,
    AccessIndex,
    DuplicateGroupIdError,
    DuplicatePermissionIdError,
    Group,
    Permission,
)


class TestBuild:
    """Tests for AccessIndex.build()."""

    def test_every_id_is_indexed(self, schema: AccessControlSchema) -> None:
        """All groups and permissions of the schema can be looked up."""
        index = AccessIndex.build(schema)
        all_permissions = READ_ONLY_PERMISSIONS + READ_WRITE_PERMISSIONS + ADMIN_PERMISSIONS
        for permission_id in all_permissions:
            assert index.lookup(permission_id) == Permission(permission_id)
        for group in schema:
            assert index.lookup(group.id) is group
        assert len(index) == 3 + len(all_permissions)
        assert len(index.groups()) == 3
        assert len(index.permissions()) == 24

    def test_unknown_id(self, schema: AccessControlSchema) -> None:
        index = AccessIndex.build(schema)
        assert index.lookup("nonexistent") is None
        assert "nonexistent" not in index

    def test_groups_reachable_only_by_inheritance(self) -> None:
        """Inherited groups are indexed even when not listed top-level."""
        hidden = Group("Hidden").add_permission("Secret_Read")
        top = Group("Top").inherit(hidden)
        index = AccessIndex.build(AccessControlSchema([top]))
        assert index.lookup("Hidden") is hidden
        assert "Secret_Read" in index

    def test_shared_group_is_registered_once(self, caplog: pytest.LogCaptureFixture) -> None:
        """Reaching the same group twice is not an error."""
        shared = Group("Shared").add_permission("p")
        first = Group("First").inherit(shared)
        second = Group("Second").inherit(shared)
        with caplog.at_level(logging.DEBUG, logger="contextacl.index"):
            index = AccessIndex.build(AccessControlSchema([first, second, shared]))
        assert index.lookup("Shared") is shared
        assert any("Already visited access control group" in r.getMessage() for r in caplog.records)
        assert not index.duplicate_permission_ids

    def test_duplicate_group_id(self) -> None:
        """Two distinct groups with one id are rejected."""
        schema = AccessControlSchema([Group("Admin"), Group("Admin")])
        with pytest.raises(DuplicateGroupIdError) as exc_info:
            AccessIndex.build(schema)
        assert exc_info.value.group_id == "Admin"
        assert exc_info.value.code == "DUPLICATE_GROUP_ID"

    def test_group_id_clashing_with_permission(self) -> None:
        """A group may not reuse an id already taken by a permission."""
        clash = Group("Customer_ReadCustomer")
        schema = AccessControlSchema([Group("ReadOnly").add_permission("Customer_ReadCustomer"), clash])
        with pytest.raises(DuplicateGroupIdError):
            AccessIndex.build(schema)

    @pytest.mark.parametrize("base_first", [True, False])
    def test_permission_reusing_group_id(self, base_first: bool) -> None:
        """A permission named like a group is fatal in either traversal order."""
        base = Group("Base").add_permission("b1")
        top = Group("Top").add_permission("Base").inherit(base)
        groups = [base, top] if base_first else [top, base]
        with pytest.raises(DuplicateGroupIdError) as exc_info:
            AccessIndex.build(AccessControlSchema(groups))
        assert exc_info.value.group_id == "Base"

    def test_permission_reusing_group_id_not_lenient(self) -> None:
        """The group/permission clash stays fatal outside strict mode."""
        base = Group("Base")
        top = Group("Top").add_permission("Base").inherit(base)
        with pytest.raises(DuplicateGroupIdError) as exc_info:
            AccessIndex.build(AccessControlSchema([base, top]), strict_permissions=False)
        assert exc_info.value.details["declared_by"] == "Top"

    def test_duplicate_permission_warns(self, caplog: pytest.LogCaptureFixture) -> None:
        """Duplicate permission ids are logged and the first binding is kept."""
        first = Permission("Customer_ReadCustomer")
        second = Permission("Customer_ReadCustomer")
        schema = AccessControlSchema(
            [
                Group("A").add_permission(first),
                Group("B").add_permission(second),
            ]
        )
        with caplog.at_level(logging.WARNING, logger="contextacl.index"):
            index = AccessIndex.build(schema)
        assert index.lookup("Customer_ReadCustomer") is first
        assert index.duplicate_permission_ids == frozenset({"Customer_ReadCustomer"})
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1
        assert warnings[0].permission_id == "Customer_ReadCustomer"
        assert warnings[0].group_id == "B"

    def test_same_permission_object_in_two_groups(self, caplog: pytest.LogCaptureFixture) -> None:
        """Sharing one Permission object between groups is not a duplicate."""
        shared = Permission("p")
        schema = AccessControlSchema([Group("A").add_permission(shared), Group("B").add_permission(shared)])
        with caplog.at_level(logging.WARNING, logger="contextacl.index"):
            index = AccessIndex.build(schema)
        assert not index.duplicate_permission_ids
        assert not caplog.records

    def test_duplicate_permission_strict(self) -> None:
        schema = AccessControlSchema([Group("A").add_permission("p"), Group("B").add_permission("p")])
        with pytest.raises(DuplicatePermissionIdError) as exc_info:
            AccessIndex.build(schema, strict_permissions=True)
        assert exc_info.value.permission_id == "p"
        assert exc_info.value.details["group_id"] == "B"


class TestImmutability:
    """The built index cannot be modified."""

    def test_nodes_mapping_is_read_only(self, schema: AccessControlSchema) -> None:
        index = AccessIndex.build(schema)
        with pytest.raises(TypeError):
            index.nodes["Intruder"] = Group("Intruder")  # type: ignore[index]

    def test_ids_snapshot(self, schema: AccessControlSchema) -> None:
        index = AccessIndex.build(schema)
        assert {"Admin", "ReadWrite", "ReadOnly"} <= index.ids()
        assert set(index) == index.ids()
