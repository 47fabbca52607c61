"""Connection registry and account resolution for Quorum nodes."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from types import MappingProxyType
from typing import Any

import requests
from web3 import HTTPProvider, Web3
from web3.types import RPCEndpoint

from .config import NetworkConfig
from .constants import RPCMethod
from .deferred import Deferred
from .exceptions import NetworkError, UnknownNodeError, ValidationError
from .types import Address, Node

logger = logging.getLogger(__name__)

TRANSIENT_ERRORS: tuple[type[BaseException], ...] = (
    requests.exceptions.ConnectionError,
    requests.exceptions.Timeout,
    ConnectionError,
    TimeoutError,
)


def rpc_send(client: Web3, method: str | RPCMethod, params: Sequence[Any]) -> Any:
    """Issue a raw JSON-RPC request and return its ``result``.

    Transport failures are raised as ``NetworkError``; error responses from
    the node propagate as raised by web3.
    """

    name = method.value if isinstance(method, RPCMethod) else method
    try:
        return client.manager.request_blocking(RPCEndpoint(name), list(params))
    except TRANSIENT_ERRORS as exc:
        endpoint = getattr(client.provider, "endpoint_uri", None)
        raise NetworkError(
            f"RPC transport failure during {name}",
            endpoint=str(endpoint) if endpoint else None,
            details={"error": str(exc)},
        ) from exc


class ConnectionFactory:
    """Hold one Web3 client per configured node."""

    def __init__(self, config: NetworkConfig) -> None:
        self.config = config
        clients: dict[str, Web3] = {}
        for name, node in config.nodes.items():
            provider = HTTPProvider(node.url, request_kwargs={"timeout": config.request_timeout})
            clients[name] = Web3(provider)
        self._clients = MappingProxyType(clients)

    def nodes(self) -> list[Node]:
        return list(self._clients)

    def get_connection(self, node: Node | None) -> Web3:
        if node is None or node not in self._clients:
            raise UnknownNodeError(node)
        return self._clients[node]

    def get_service_endpoint(self, node: Node | None) -> str:
        return self.config.node(node).url


class AccountResolver:
    """Resolve the default signing address of a node."""

    def __init__(self, connections: ConnectionFactory) -> None:
        self._connections = connections

    def get_default_address(self, node: Node) -> Deferred[Address]:
        configured = self._connections.config.node(node).default_address
        if configured:
            return Deferred.of(_checksum(configured, node))

        client = self._connections.get_connection(node)

        def fetch() -> Address:
            coinbase = rpc_send(client, RPCMethod.COINBASE, [])
            logger.debug("Resolved coinbase %s for %s", coinbase, node)
            return _checksum(coinbase, node)

        return Deferred(fetch, description=f"default address of {node}")


def _checksum(address: Any, node: Node) -> Address:
    try:
        return Web3.to_checksum_address(address)
    except (TypeError, ValueError) as exc:
        raise ValidationError(
            f"Node {node} reported an invalid account address",
            field="address",
            value=address,
            details={"error": str(exc)},
        ) from exc
