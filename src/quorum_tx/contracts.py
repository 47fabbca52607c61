"""Closed table of contract families and their method surface."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from eth_abi import decode as abi_decode
from eth_abi import encode as abi_encode
from web3 import Web3

from .exceptions import ConfigurationError, PayloadEncodingError
from .types import OperationKind


@dataclass(frozen=True)
class ContractOperation:
    """A single deploy, read or write entry point of a contract family."""

    family: str
    method: str
    kind: OperationKind
    arg_types: tuple[str, ...] = ()
    return_types: tuple[str, ...] = ()
    payable: bool = False

    @property
    def signature(self) -> str:
        return f"{self.method}({','.join(self.arg_types)})"

    @property
    def selector(self) -> bytes:
        return bytes(Web3.keccak(text=self.signature)[:4])

    def encode_call(self, args: Sequence[Any]) -> str:
        return Web3.to_hex(self.selector + _encode_args(self.arg_types, args, self.signature))

    def decode_result(self, data: bytes) -> tuple[Any, ...]:
        return tuple(abi_decode(list(self.return_types), data))


@dataclass(frozen=True)
class ContractFamily:
    """A deployable contract and the operations it exposes."""

    name: str
    artifact: str
    constructor_types: tuple[str, ...]
    operations: Mapping[str, ContractOperation] = field(default_factory=dict)

    @property
    def depends_on_contract(self) -> bool:
        return "address" in self.constructor_types

    def encode_deploy(self, bytecode: str, args: Sequence[Any]) -> str:
        encoded = _encode_args(self.constructor_types, args, f"{self.name} constructor")
        return bytecode + encoded.hex()


def _encode_args(types: Sequence[str], args: Sequence[Any], what: str) -> bytes:
    if len(types) != len(args):
        raise PayloadEncodingError(
            f"{what} takes {len(types)} argument(s), got {len(args)}",
            details={"args": list(args)},
        )
    if not types:
        return b""
    try:
        return abi_encode(list(types), list(args))
    except Exception as exc:
        raise PayloadEncodingError(
            f"Unable to ABI encode arguments for {what}",
            details={"args": list(args), "error": str(exc)},
        ) from exc


def _family(
    name: str,
    artifact: str,
    constructor_types: tuple[str, ...],
    getters: Sequence[str] = (),
    setters: Sequence[str] = (),
    extra: Sequence[ContractOperation] = (),
) -> ContractFamily:
    operations: dict[str, ContractOperation] = {
        "deploy": ContractOperation(name, "deploy", OperationKind.DEPLOY, constructor_types)
    }
    for method in getters:
        operations[method] = ContractOperation(
            name, method, OperationKind.GET, return_types=("uint256",)
        )
    for method in setters:
        operations[method] = ContractOperation(name, method, OperationKind.SET, ("uint256",))
    for operation in extra:
        operations[operation.method.casefold()] = operation
    return ContractFamily(name, artifact, constructor_types, MappingProxyType(operations))


CONTRACT_FAMILIES: Mapping[str, ContractFamily] = MappingProxyType(
    {
        "storea": _family(
            "storea",
            "storea",
            ("uint256", "address"),
            getters=("geta", "getb", "getc"),
            setters=("seta", "setb", "setc"),
        ),
        "storeb": _family(
            "storeb",
            "storeb",
            ("uint256", "address"),
            getters=("getb", "getc"),
            setters=("setb", "setc"),
        ),
        "storec": _family("storec", "storec", ("uint256",), getters=("getc",), setters=("setc",)),
        "simplestorage": _family(
            "simplestorage", "SimpleStorage", ("uint256",), getters=("get",), setters=("set",)
        ),
        "clientreceipt": _family(
            "clientreceipt",
            "ClientReceipt",
            (),
            extra=(
                ContractOperation(
                    "clientreceipt", "deposit", OperationKind.SET, ("bytes32",), payable=True
                ),
            ),
        ),
    }
)


def validate_families(families: Mapping[str, ContractFamily]) -> None:
    """Check the table is internally consistent; raises ``ConfigurationError``."""

    for key, family in families.items():
        if key != family.name or key != key.strip().casefold():
            raise ConfigurationError(f"Family key {key!r} does not match {family.name!r}")
        deploys = [op for op in family.operations.values() if op.kind is OperationKind.DEPLOY]
        if len(deploys) != 1 or deploys[0].arg_types != family.constructor_types:
            raise ConfigurationError(f"Family {key} must define exactly one deploy operation")
        for method, operation in family.operations.items():
            if operation.family != key or method != operation.method.casefold():
                raise ConfigurationError(f"Operation {method} is registered under the wrong key")
            if operation.kind is OperationKind.GET and (
                operation.arg_types or operation.return_types != ("uint256",)
            ):
                raise ConfigurationError(f"Getter {key}.{method} must be uint256 with no arguments")
            if operation.kind is OperationKind.SET and len(operation.arg_types) != 1:
                raise ConfigurationError(f"Setter {key}.{method} must take one argument")


validate_families(CONTRACT_FAMILIES)
