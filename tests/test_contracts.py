"""Tests for the contract binding table."""

from __future__ import annotations

from types import MappingProxyType

import pytest

from quorum_tx.contracts import (
    CONTRACT_FAMILIES,
    ContractFamily,
    ContractOperation,
    validate_families,
)
from quorum_tx.exceptions import ConfigurationError, PayloadEncodingError
from quorum_tx.types import OperationKind


def test_known_selectors() -> None:
    operations = CONTRACT_FAMILIES["simplestorage"].operations

    assert operations["get"].selector.hex() == "6d4ce63c"
    assert operations["set"].selector.hex() == "60fe47b1"
    assert operations["set"].encode_call([9]) == "0x60fe47b1" + f"{9:064x}"


def test_two_tier_families_take_dependency_address() -> None:
    assert CONTRACT_FAMILIES["storea"].depends_on_contract
    assert CONTRACT_FAMILIES["storeb"].depends_on_contract
    assert not CONTRACT_FAMILIES["storec"].depends_on_contract


def test_encode_deploy_appends_constructor_args() -> None:
    family = CONTRACT_FAMILIES["storec"]

    assert family.encode_deploy("0xcc03", [3]) == "0xcc03" + f"{3:064x}"


def test_encode_deploy_rejects_wrong_arity() -> None:
    with pytest.raises(PayloadEncodingError):
        CONTRACT_FAMILIES["storea"].encode_deploy("0xaa01", [3])


def test_encode_call_rejects_unencodable_argument() -> None:
    with pytest.raises(PayloadEncodingError):
        CONTRACT_FAMILIES["storec"].operations["setc"].encode_call(["not a number"])


def test_table_validation_rejects_getter_with_arguments() -> None:
    broken = ContractFamily(
        "broken",
        "broken",
        (),
        MappingProxyType(
            {
                "deploy": ContractOperation("broken", "deploy", OperationKind.DEPLOY),
                "get": ContractOperation(
                    "broken", "get", OperationKind.GET, ("uint256",), ("uint256",)
                ),
            }
        ),
    )

    with pytest.raises(ConfigurationError):
        validate_families({"broken": broken})


def test_table_validation_requires_deploy() -> None:
    broken = ContractFamily("broken", "broken", (), MappingProxyType({}))

    with pytest.raises(ConfigurationError):
        validate_families({"broken": broken})
