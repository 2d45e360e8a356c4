"""Shared fixtures: the ReadOnly / ReadWrite / Admin reference schema."""

from __future__ import annotations

import pytest

from contextacl import AccessControlProvider, AccessControlSchema, Group

READ_ONLY_PERMISSIONS = (
    "Customer_ReadCustomer",
    "Customer_ReadProfile",
    "Customer_ReadAddress",
    "Contract_ReadContract",
    "Contract_ReadContractAsset",
)

READ_WRITE_PERMISSIONS = (
    "Customer_CreateCustomer",
    "Customer_CreateProfile",
    "Customer_CreateAddress",
    "Contract_CreateContract",
    "Contract_CreateContractAsset",
    "Customer_UpdateCustomer",
    "Customer_UpdateProfile",
    "Customer_UpdateAddress",
    "Contract_UpdateContract",
    "Contract_UpdateContractAsset",
)

ADMIN_PERMISSIONS = (
    "Customer_DeleteCustomer",
    "Customer_DeleteProfile",
    "Customer_DeleteAddress",
    "Contract_DeleteContract",
    "Contract_DeleteContractAsset",
    "System_ReadUser",
    "System_CreateUser",
    "System_UpdateUser",
    "System_DeleteUser",
)


def build_reference_schema() -> AccessControlSchema:
    read_only = Group("ReadOnly", type="group").add_permission(*READ_ONLY_PERMISSIONS)
    read_write = Group("ReadWrite", type="group").inherit(read_only).add_permission(*READ_WRITE_PERMISSIONS)
    admin = Group("Admin", type="role").inherit(read_write).add_permission(*ADMIN_PERMISSIONS)
    return AccessControlSchema().add_group(read_only, read_write, admin)


@pytest.fixture
def schema() -> AccessControlSchema:
    return build_reference_schema()


@pytest.fixture
def provider(schema: AccessControlSchema) -> AccessControlProvider:
    return AccessControlProvider.from_schema(schema)
