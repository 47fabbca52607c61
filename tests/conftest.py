"""Shared fakes for exercising the transaction layer without a live node."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from types import SimpleNamespace
from typing import Any, cast

import pytest
from eth_abi import decode as abi_decode
from eth_abi import encode as abi_encode
from web3 import Web3

from quorum_tx.artifacts import ArtifactStore
from quorum_tx.config import NetworkConfig
from quorum_tx.connections import AccountResolver, ConnectionFactory
from quorum_tx.contracts import CONTRACT_FAMILIES
from quorum_tx.exceptions import UnknownNodeError
from quorum_tx.service import ContractService
from quorum_tx.types import OperationKind

BYTECODES = {
    "storea": "0xaa01",
    "storeb": "0xbb02",
    "storec": "0xcc03",
    "SimpleStorage": "0x5504",
    "ClientReceipt": "0xce05",
}

NODES = {
    "Node1": {
        "url": "http://node1:22000",
        "privacy_key": "BULeR8JyUWhiuuCMU/HLA0Q5pzkYT+cHII3ZKBey3Bo=",
    },
    "Node2": {
        "url": "http://node2:22000",
        "privacy_key": "QfeDAys9MPDs2XHExtc84jKGHxZg/aj52DTh0vtA3Xc=",
    },
    "Node3": {
        "url": "http://node3:22000",
        "privacy_key": "1iTZde/ndBHvzhcl7V68x44Vx7pl8nwx9LqnM/AfJUg=",
    },
    "Node4": {"url": "http://node4:22000"},
}

_SELECTORS = {
    operation.selector.hex(): operation.method
    for family in CONTRACT_FAMILIES.values()
    for operation in family.operations.values()
    if operation.kind is not OperationKind.DEPLOY
}


def _own_slot(family: str, method: str) -> str | None:
    """Return the storage slot a method touches locally, or None to delegate."""
    if family == "simplestorage":
        return "value"
    letter = method[-1]
    return letter if family == f"store{letter}" else None


class FakeChain:
    """In-memory stand-in for a Quorum network speaking the raw JSON-RPC methods."""

    def __init__(self) -> None:
        self.contracts: dict[str, dict[str, Any]] = {}
        self.receipts: dict[str, dict[str, Any]] = {}
        self.requests: list[tuple[str, str, list[Any]]] = []
        self.sent: list[dict[str, Any]] = []
        self.pending_polls = 0
        self.never_confirm = False
        self.receipt_errors: list[BaseException] = []
        self.revert = False
        self._counter = 0

    # ------------------------------------------------------------------
    # Introspection helpers
    # ------------------------------------------------------------------
    def calls(self, method: str) -> list[tuple[str, list[Any]]]:
        return [(node, params) for node, name, params in self.requests if name == method]

    @staticmethod
    def coinbase(node: str) -> str:
        return "0x" + f"{sorted(NODES).index(node) + 1:040x}"

    # ------------------------------------------------------------------
    # JSON-RPC handling
    # ------------------------------------------------------------------
    def handle(self, node: str, method: str, params: list[Any]) -> Any:
        self.requests.append((node, method, params))
        handler = getattr(self, "_" + method)
        return handler(node, params)

    def _eth_coinbase(self, node: str, params: list[Any]) -> str:
        return self.coinbase(node)

    def _eth_sendTransaction(self, node: str, params: list[Any]) -> str:
        payload = params[0]
        self.sent.append(payload)
        self._counter += 1
        tx_hash = "0x" + f"{self._counter:064x}"
        contract_address = None
        if self.revert:
            status = "0x0"
        elif "to" not in payload:
            contract_address = self._deploy(payload["data"])
            status = "0x1"
        else:
            self._transact(payload["to"], payload["data"])
            status = "0x1"
        self.receipts[tx_hash] = {
            "transactionHash": tx_hash,
            "blockNumber": hex(self._counter),
            "status": status,
            "contractAddress": contract_address,
            "logs": [],
        }
        return tx_hash

    def _eth_getTransactionReceipt(self, node: str, params: list[Any]) -> Any:
        if self.receipt_errors:
            raise self.receipt_errors.pop(0)
        if self.never_confirm:
            return None
        if self.pending_polls:
            self.pending_polls -= 1
            return None
        return self.receipts.get(params[0])

    def _eth_call(self, node: str, params: list[Any]) -> str:
        request = params[0]
        value = self._get(request["to"], _SELECTORS[request["data"][2:10]])
        if value is None:
            return "0x"
        return Web3.to_hex(abi_encode(["uint256"], [value]))

    def _eth_storageRoot(self, node: str, params: list[Any]) -> str:
        return "0x" + "ab" * 32

    def _eth_sendTransactionAsync(self, node: str, params: list[Any]) -> str:
        self.sent.append(params[0])
        return ""

    # ------------------------------------------------------------------
    # Contract simulation
    # ------------------------------------------------------------------
    def _deploy(self, data: str) -> str:
        artifact = next(name for name, code in BYTECODES.items() if data.startswith(code))
        family = next(f for f in CONTRACT_FAMILIES.values() if f.artifact == artifact)
        encoded = bytes.fromhex(data[len(BYTECODES[artifact]) :])
        args = abi_decode(list(family.constructor_types), encoded) if encoded else ()
        self._counter += 1
        address = Web3.to_checksum_address("0x" + f"{0xC0DE0000 + self._counter:040x}")
        state: dict[str, Any] = {"family": family.name, "values": {}, "dependency": None}
        if family.constructor_types:
            slot = "value" if family.name == "simplestorage" else family.name[-1]
            state["values"][slot] = args[0]
        if family.depends_on_contract:
            state["dependency"] = Web3.to_checksum_address(args[1])
        self.contracts[address] = state
        return address

    def _get(self, address: str, method: str) -> int | None:
        state = self.contracts.get(Web3.to_checksum_address(address))
        if state is None:
            return None
        slot = _own_slot(state["family"], method)
        if slot is None:
            return self._get(state["dependency"], method)
        return state["values"].get(slot, 0)

    def _transact(self, address: str, data: str) -> None:
        state = self.contracts.get(Web3.to_checksum_address(address))
        if state is None:
            return
        method = _SELECTORS[data[2:10]]
        if method == "deposit":
            return
        (value,) = abi_decode(["uint256"], bytes.fromhex(data[10:]))
        slot = _own_slot(state["family"], method)
        if slot is None:
            self._transact(state["dependency"], data)
        else:
            state["values"][slot] = value


class FakeRequestManager:
    def __init__(self, chain: FakeChain, node: str) -> None:
        self._chain = chain
        self._node = node

    def request_blocking(self, method: str, params: Sequence[Any]) -> Any:
        return self._chain.handle(self._node, str(method), list(params))


def fake_client(chain: FakeChain, node: str) -> Web3:
    client = SimpleNamespace(
        manager=FakeRequestManager(chain, node),
        provider=SimpleNamespace(endpoint_uri=NODES[node]["url"]),
    )
    return cast(Web3, client)


class FakeConnections:
    def __init__(self, config: NetworkConfig, chain: FakeChain) -> None:
        self.config = config
        self._clients = {name: fake_client(chain, name) for name in config.nodes}

    def nodes(self) -> list[str]:
        return list(self._clients)

    def get_connection(self, node: str) -> Web3:
        if node not in self._clients:
            raise UnknownNodeError(node)
        return self._clients[node]

    def get_service_endpoint(self, node: str) -> str:
        return self.config.node(node).url


def write_artifacts(directory: Path) -> Path:
    for name, code in BYTECODES.items():
        (directory / f"{name}.bin").write_text(code + "\n")
    return directory


@pytest.fixture
def artifacts_dir(tmp_path: Path) -> Path:
    return write_artifacts(tmp_path)


@pytest.fixture
def network_config(artifacts_dir: Path) -> NetworkConfig:
    return NetworkConfig.from_mapping(
        {
            "nodes": NODES,
            "retry": {"max_attempts": 3, "sleep_duration_ms": 5},
            "artifacts_dir": str(artifacts_dir),
        }
    )


@pytest.fixture
def chain() -> FakeChain:
    return FakeChain()


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def service(
    network_config: NetworkConfig, chain: FakeChain, sleeps: list[float]
) -> ContractService:
    connections = cast(ConnectionFactory, FakeConnections(network_config, chain))
    return ContractService(
        network_config,
        connections=connections,
        accounts=AccountResolver(connections),
        artifacts=ArtifactStore(network_config.artifacts_dir),
        sleep=sleeps.append,
    )
