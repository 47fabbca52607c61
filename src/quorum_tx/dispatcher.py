"""Name based routing of contract calls onto the binding table."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any, TypeVar

from hexbytes import HexBytes

from .artifacts import ArtifactStore
from .constants import DEFAULT_GAS_LIMIT, EMPTY_CALL_RESULTS, ZERO_ADDRESS
from .contracts import CONTRACT_FAMILIES, ContractFamily, ContractOperation
from .deferred import Deferred
from .exceptions import (
    ExecutionError,
    QuorumTxError,
    ReadOnlyManagerError,
    UnknownContractError,
    UnknownMethodError,
    ValidationError,
)
from .managers import ReadOnlyTransactionManager, TransactionManager
from .types import (
    Address,
    DeployedContract,
    Empty,
    Failure,
    ManagerMode,
    Node,
    OperationKind,
    ReadResult,
    TransactionReceipt,
    Value,
)
from .utils import normalise_name

logger = logging.getLogger(__name__)

T = TypeVar("T")


def guarded(operation: str, thunk: Callable[[], T]) -> Callable[[], T]:
    """Wrap ``thunk`` so foreign exceptions surface as ``ExecutionError``."""

    def run() -> T:
        try:
            return thunk()
        except QuorumTxError:
            raise
        except Exception as exc:
            logger.error("%s failed: %s", operation, exc)
            raise ExecutionError(
                f"{operation} failed: {exc}", operation=operation, details={"error": str(exc)}
            ) from exc

    return run


class ContractDispatcher:
    """Resolve ``(family, method)`` pairs and execute them against a manager."""

    def __init__(
        self,
        artifacts: ArtifactStore,
        families: Mapping[str, ContractFamily] = CONTRACT_FAMILIES,
        *,
        gas_limit: int = DEFAULT_GAS_LIMIT,
    ) -> None:
        self._artifacts = artifacts
        self._families = families
        self._gas_limit = gas_limit

    def operations(self) -> list[tuple[str, str]]:
        return [
            (family, method)
            for family, definition in self._families.items()
            for method in definition.operations
        ]

    def lookup(self, family: str, method: str) -> tuple[ContractFamily, ContractOperation]:
        definition = self._families.get(normalise_name(family))
        if definition is None:
            raise UnknownContractError(family)
        operation = definition.operations.get(normalise_name(method))
        if operation is None:
            raise UnknownMethodError(family, method)
        return definition, operation

    def dispatch(
        self,
        family: str,
        method: str,
        address: Address | None,
        manager: TransactionManager,
        args: Sequence[Any] = (),
        *,
        node: Node | None = None,
        gas: int | None = None,
        value: int = 0,
    ) -> Deferred[DeployedContract] | Deferred[TransactionReceipt] | int:
        definition, operation = self.lookup(family, method)
        if operation.kind is OperationKind.DEPLOY:
            return self._deploy(definition, manager, args, node=node, gas=gas)
        if operation.kind is OperationKind.GET:
            return self._read(operation, address, manager).unwrap()
        return self._write(operation, address, manager, args, gas=gas, value=value)

    def deploy(
        self,
        family: str,
        manager: TransactionManager,
        args: Sequence[Any],
        *,
        node: Node | None = None,
        gas: int | None = None,
    ) -> Deferred[DeployedContract]:
        definition, _ = self.lookup(family, "deploy")
        return self._deploy(definition, manager, args, node=node, gas=gas)

    def require(
        self, family: str, method: str, kind: OperationKind
    ) -> tuple[ContractFamily, ContractOperation]:
        """Like ``lookup`` but also insist on the kind of operation."""
        definition, operation = self.lookup(family, method)
        if operation.kind is not kind:
            raise ValidationError(
                f"{family}.{method} is not a {kind.value} operation",
                field="method",
                value=method,
            )
        return definition, operation

    def read(
        self, family: str, method: str, address: Address | None, manager: TransactionManager
    ) -> ReadResult:
        _, operation = self.require(family, method, OperationKind.GET)
        return self._read(operation, address, manager)

    def write(
        self,
        family: str,
        method: str,
        address: Address | None,
        manager: TransactionManager,
        args: Sequence[Any],
        *,
        gas: int | None = None,
        value: int = 0,
    ) -> Deferred[TransactionReceipt]:
        _, operation = self.require(family, method, OperationKind.SET)
        return self._write(operation, address, manager, args, gas=gas, value=value)

    # ------------------------------------------------------------------
    # Operation kinds
    # ------------------------------------------------------------------
    def _deploy(
        self,
        definition: ContractFamily,
        manager: TransactionManager,
        args: Sequence[Any],
        *,
        node: Node | None,
        gas: int | None,
    ) -> Deferred[DeployedContract]:
        _require_writer(manager, f"{definition.name}.deploy")
        deploy_args = list(args)
        if definition.depends_on_contract:
            if len(deploy_args) == 1:
                deploy_args.append(None)
            if len(deploy_args) == 2 and deploy_args[1] is None:
                deploy_args[1] = ZERO_ADDRESS
        if len(deploy_args) != len(definition.constructor_types):
            raise ValidationError(
                f"{definition.name} constructor takes "
                f"{len(definition.constructor_types)} argument(s)",
                field="args",
                value=list(args),
            )

        bytecode = self._artifacts.bytecode(definition.artifact)
        data = definition.encode_deploy(bytecode, deploy_args)
        gas_limit = gas or self._gas_limit
        operation = f"{definition.name}.deploy"
        logger.debug("Prepared %s from %s", operation, manager.from_address)

        return Deferred(
            guarded(operation, lambda: manager.deploy(data, gas_limit, node=node)),
            description=operation,
        )

    def _read(
        self, operation: ContractOperation, address: Address | None, manager: TransactionManager
    ) -> ReadResult:
        name = f"{operation.family}.{operation.method}"
        target = _require_address(address, name)
        if manager.mode is not ManagerMode.READ_ONLY:
            manager = ReadOnlyTransactionManager(manager.client, manager.from_address)

        data = operation.encode_call(())
        try:
            raw = manager.call(target, data)
        except Exception as exc:
            logger.debug("%s on %s failed", name, target, exc_info=True)
            return Failure(exc, operation=name)

        if raw in EMPTY_CALL_RESULTS:
            logger.debug("%s on %s returned an empty value", name, target)
            return Empty()

        try:
            (result,) = operation.decode_result(HexBytes(raw))
        except Exception as exc:
            return Failure(exc, operation=name)
        return Value(int(result))

    def _write(
        self,
        operation: ContractOperation,
        address: Address | None,
        manager: TransactionManager,
        args: Sequence[Any],
        *,
        gas: int | None,
        value: int,
    ) -> Deferred[TransactionReceipt]:
        name = f"{operation.family}.{operation.method}"
        target = _require_address(address, name)
        _require_writer(manager, name)
        if len(args) != len(operation.arg_types):
            raise ValidationError(
                f"{name} takes {len(operation.arg_types)} argument(s)",
                field="args",
                value=list(args),
            )
        if value and not operation.payable:
            raise ValidationError(f"{name} is not payable", field="value", value=value)

        data = operation.encode_call(args)
        gas_limit = gas or self._gas_limit
        return Deferred(
            guarded(
                name,
                lambda: manager.send_transaction(to=target, data=data, gas=gas_limit, value=value),
            ),
            description=name,
        )


def _require_address(address: Address | None, operation: str) -> Address:
    if not address:
        raise ValidationError(
            f"{operation} needs a contract address", field="address", value=address
        )
    return address


def _require_writer(manager: TransactionManager, operation: str) -> None:
    if manager.mode is ManagerMode.READ_ONLY:
        raise ReadOnlyManagerError(f"{operation} needs a public or private manager")
