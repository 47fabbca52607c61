"""Contract operations exposed to scenario step definitions."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from typing import TypeVar

from web3 import Web3

from .artifacts import ArtifactStore
from .async_submit import AsyncSubmitter
from .config import NetworkConfig
from .connections import AccountResolver, ConnectionFactory, rpc_send
from .constants import RPCMethod
from .contracts import CONTRACT_FAMILIES
from .deferred import Deferred
from .dispatcher import ContractDispatcher, guarded
from .exceptions import ConfigurationError
from .managers import TransactionManager, build_manager, manager_for
from .privacy import PrivacyDirectory, PrivacyResolver
from .types import (
    Address,
    AsyncSubmission,
    DeployedContract,
    ManagerMode,
    Node,
    OperationKind,
    PrivacyFlag,
    PrivacyKey,
    TransactionReceipt,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

Targets = Node | Sequence[Node | None] | None

_EMPTY_DEPOSIT_ID = bytes(32)


class ContractService:
    """Deploy, read and update test contracts on a Quorum network."""

    def __init__(
        self,
        config: NetworkConfig,
        *,
        connections: ConnectionFactory | None = None,
        accounts: AccountResolver | None = None,
        privacy: PrivacyResolver | None = None,
        artifacts: ArtifactStore | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._config = config
        self._connections = connections or ConnectionFactory(config)
        self._accounts = accounts or AccountResolver(self._connections)
        self._privacy = privacy or PrivacyResolver(PrivacyDirectory(config))
        if artifacts is None:
            if config.artifacts_dir is None:
                raise ConfigurationError(
                    "artifacts_dir must point at the compiled contract byte code",
                    details={"expected": "<Name>.bin files from solc --bin"},
                )
            artifacts = ArtifactStore(config.artifacts_dir)
        self._artifacts = artifacts
        self._dispatcher = ContractDispatcher(self._artifacts, gas_limit=config.gas_limit)
        self._async = AsyncSubmitter(self._connections)
        self._sleep = sleep

    @property
    def dispatcher(self) -> ContractDispatcher:
        return self._dispatcher

    # ------------------------------------------------------------------
    # SimpleStorage
    # ------------------------------------------------------------------
    def create_simple_contract(
        self,
        initial_value: int,
        source: Node,
        targets: Targets,
        gas: int | None = None,
        flags: Sequence[PrivacyFlag] | None = None,
    ) -> Deferred[DeployedContract]:
        client = self._connections.get_connection(source)
        private_for = self._privacy.resolve(_as_targets(targets))
        privacy_flags = list(flags) if flags is not None else [PrivacyFlag.LEGACY]
        self._prefetch_bytecode("simplestorage")

        def deploy(address: Address) -> Deferred[DeployedContract]:
            manager = self._writer(client, address, private_for, privacy_flags)
            return self._dispatcher.deploy(
                "simplestorage", manager, [initial_value], node=source, gas=gas
            )

        return self._with_sender(source, "create_simple_contract", deploy)

    def read_simple_contract_value(self, node: Node, contract_address: Address) -> int:
        return self.read_generic_store_value(node, contract_address, "simplestorage", "get")

    def update_simple_contract(
        self,
        source: Node,
        targets: Targets,
        contract_address: Address,
        new_value: int,
        flags: Sequence[PrivacyFlag] | None = None,
        gas: int | None = None,
    ) -> Deferred[TransactionReceipt]:
        client = self._connections.get_connection(source)
        private_for = self._privacy.resolve_strict(_as_targets(targets))
        privacy_flags = list(flags) if flags is not None else [PrivacyFlag.LEGACY]

        def update(address: Address) -> Deferred[TransactionReceipt]:
            manager = self._writer(client, address, private_for, privacy_flags)
            return self._dispatcher.write(
                "simplestorage", "set", contract_address, manager, [new_value], gas=gas
            )

        return self._with_sender(source, "update_simple_contract", update)

    def get_storage_root(self, node: Node, contract_address: Address) -> Deferred[str]:
        client = self._connections.get_connection(node)
        return Deferred(
            guarded(
                "get_storage_root",
                lambda: rpc_send(client, RPCMethod.STORAGE_ROOT, [contract_address]),
            ),
            description=f"storage root of {contract_address}",
        )

    # ------------------------------------------------------------------
    # ClientReceipt
    # ------------------------------------------------------------------
    def create_client_receipt_contract(self, node: Node) -> Deferred[DeployedContract]:
        client = self._connections.get_connection(node)
        self._prefetch_bytecode("clientreceipt")

        def deploy(address: Address) -> Deferred[DeployedContract]:
            manager = self._writer(client, address, None)
            return self._dispatcher.deploy("clientreceipt", manager, [], node=node)

        return self._with_sender(node, "create_client_receipt_contract", deploy)

    def create_client_receipt_private_contract(
        self, source: Node, target: Node | None
    ) -> Deferred[DeployedContract]:
        client = self._connections.get_connection(source)
        private_for = self._privacy.resolve_strict([target])
        self._prefetch_bytecode("clientreceipt")

        def deploy(address: Address) -> Deferred[DeployedContract]:
            manager = self._writer(client, address, private_for)
            return self._dispatcher.deploy("clientreceipt", manager, [], node=source)

        return self._with_sender(source, "create_client_receipt_private_contract", deploy)

    def update_client_receipt(
        self, node: Node, contract_address: Address, value: int
    ) -> Deferred[TransactionReceipt]:
        return self._deposit(node, None, contract_address, value, "update_client_receipt")

    def update_client_receipt_private(
        self, source: Node, target: Node | None, contract_address: Address, value: int
    ) -> Deferred[TransactionReceipt]:
        private_for = self._privacy.resolve_strict([target])
        return self._deposit(
            source, private_for, contract_address, value, "update_client_receipt_private"
        )

    def create_client_receipt_contract_async(
        self,
        source: Node,
        target: Node | None,
        callback_url: str,
        source_account: Address | None = None,
    ) -> AsyncSubmission:
        bytecode = self._prefetch_bytecode("clientreceipt")
        private_for = self._privacy.resolve_strict([target])
        from_address = (
            Web3.to_checksum_address(source_account)
            if source_account
            else guarded("resolve sender", self._accounts.get_default_address(source).result)()
        )
        payload = self._async.build_payload(
            from_address,
            bytecode,
            private_for,
            callback_url,
            gas=self._config.gas_limit,
        )
        return self._async.submit_async(source, payload)

    # ------------------------------------------------------------------
    # Generic store contracts
    # ------------------------------------------------------------------
    def create_generic_store_contract(
        self,
        node: Node,
        contract_name: str,
        initial_value: int,
        dependency_address: Address | None,
        is_private: bool,
        target: Node | None = None,
    ) -> Deferred[DeployedContract]:
        definition, _ = self._dispatcher.lookup(contract_name, "deploy")
        client = self._connections.get_connection(node)
        private_for = self._privacy.resolve_strict([target]) if is_private else None
        self._prefetch_bytecode(definition.name)

        args: list = [initial_value]
        if definition.depends_on_contract:
            args.append(dependency_address)

        def deploy(address: Address) -> Deferred[DeployedContract]:
            manager = self._writer(client, address, private_for)
            return self._dispatcher.deploy(definition.name, manager, args, node=node)

        return self._with_sender(node, f"create {definition.name}", deploy)

    def read_generic_store_value(
        self, node: Node, contract_address: Address, contract_name: str, method_name: str
    ) -> int:
        self._dispatcher.require(contract_name, method_name, OperationKind.GET)
        client = self._connections.get_connection(node)

        def read() -> int:
            address = self._accounts.get_default_address(node).result()
            manager = build_manager(client, address, mode=ManagerMode.READ_ONLY)
            result = self._dispatcher.read(contract_name, method_name, contract_address, manager)
            value = result.unwrap()
            logger.debug("%s.%s on %s = %s", contract_name, method_name, contract_address, value)
            return value

        return guarded(f"read {contract_name}.{method_name}", read)()

    def set_generic_store_value(
        self,
        node: Node,
        contract_address: Address,
        contract_name: str,
        method_name: str,
        value: int,
        is_private: bool,
        target: Node | None = None,
    ) -> Deferred[TransactionReceipt]:
        _, operation = self._dispatcher.require(contract_name, method_name, OperationKind.SET)
        operation.encode_call([value])
        client = self._connections.get_connection(node)
        private_for = self._privacy.resolve_strict([target]) if is_private else None

        def update(address: Address) -> Deferred[TransactionReceipt]:
            manager = self._writer(client, address, private_for)
            return self._dispatcher.write(
                contract_name, method_name, contract_address, manager, [value]
            )

        return self._with_sender(node, f"set {contract_name}.{method_name}", update)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _writer(
        self,
        client: Web3,
        address: Address,
        private_for: list[PrivacyKey] | None,
        flags: Sequence[PrivacyFlag] | None = None,
    ) -> TransactionManager:
        return manager_for(
            client,
            address,
            private_for,
            flags,
            self._config.retry_policy,
            sleep=self._sleep,
        )

    def _with_sender(
        self, node: Node, operation: str, build: Callable[[Address], Deferred[T]]
    ) -> Deferred[T]:
        sender = self._accounts.get_default_address(node)
        return Deferred(
            guarded(operation, lambda: build(sender.result()).result()),
            description=operation,
        )

    def _deposit(
        self,
        node: Node,
        private_for: list[PrivacyKey] | None,
        contract_address: Address,
        value: int,
        operation: str,
    ) -> Deferred[TransactionReceipt]:
        client = self._connections.get_connection(node)

        def deposit(address: Address) -> Deferred[TransactionReceipt]:
            manager = self._writer(client, address, private_for)
            return self._dispatcher.write(
                "clientreceipt",
                "deposit",
                contract_address,
                manager,
                [_EMPTY_DEPOSIT_ID],
                value=value,
            )

        return self._with_sender(node, operation, deposit)

    def _prefetch_bytecode(self, family: str) -> str:
        return self._artifacts.bytecode(CONTRACT_FAMILIES[family].artifact)


def _as_targets(targets: Targets) -> list[Node | None] | None:
    if targets is None:
        return None
    if isinstance(targets, str):
        return [targets]
    return list(targets)
