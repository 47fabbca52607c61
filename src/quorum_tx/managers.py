"""Transaction manager variants and the factory that builds them."""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from typing import Any

from web3 import Web3

from .connections import rpc_send
from .constants import EMPTY_CALL_RESULTS, RPCMethod
from .exceptions import (
    ExecutionError,
    ReadOnlyManagerError,
    UnresolvedTargetError,
    ValidationError,
)
from .retry import poll
from .types import (
    DEFAULT_RETRY_POLICY,
    Address,
    DeployedContract,
    ManagerMode,
    Node,
    PrivacyFlag,
    PrivacyKey,
    RetryPolicy,
    TransactionReceipt,
)
from .utils import serialise_receipt, to_data_hex, to_quantity

logger = logging.getLogger(__name__)


class TransactionManager(ABC):
    """Per-call strategy binding a client to a sending address.

    Managers are cheap to build and must not be shared between calls.
    Construction performs no network I/O.
    """

    mode: ManagerMode

    def __init__(self, client: Web3, from_address: Address) -> None:
        self.client = client
        self.from_address = from_address

    def call(self, to: Address, data: str, block: str = "latest") -> str:
        """Execute ``eth_call`` and return the raw hex result."""
        request = {"from": self.from_address, "to": to, "data": data}
        return to_data_hex(rpc_send(self.client, RPCMethod.CALL, [request, block]))

    @abstractmethod
    def build_transaction(
        self, *, to: Address | None, data: str, gas: int, value: int = 0
    ) -> dict[str, Any]:
        """Return the ``eth_sendTransaction`` payload without sending it."""

    @abstractmethod
    def send_transaction(
        self, *, to: Address | None, data: str, gas: int, value: int = 0
    ) -> TransactionReceipt:
        """Submit a transaction and wait for its receipt."""

    def deploy(self, data: str, gas: int, *, node: Node | None = None) -> DeployedContract:
        receipt = self.send_transaction(to=None, data=data, gas=gas)
        address = receipt.get("contractAddress")
        if not address:
            raise ExecutionError(
                "Deploy receipt carries no contract address",
                operation="deploy",
                details={"receipt": receipt},
            )
        return DeployedContract(
            address=Web3.to_checksum_address(address),
            node=node,
            transaction_hash=receipt.get("transactionHash"),
        )


class ClientTransactionManager(TransactionManager):
    """Manager that lets the node sign and submit via ``eth_sendTransaction``."""

    mode = ManagerMode.PUBLIC

    def __init__(
        self,
        client: Web3,
        from_address: Address,
        retry_policy: RetryPolicy = DEFAULT_RETRY_POLICY,
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        super().__init__(client, from_address)
        self.retry_policy = retry_policy
        self._sleep = sleep

    def build_transaction(
        self, *, to: Address | None, data: str, gas: int, value: int = 0
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "from": self.from_address,
            "gas": Web3.to_hex(gas),
            "value": Web3.to_hex(value),
            "data": data,
        }
        if to is not None:
            payload["to"] = to
        return payload

    def send_transaction(
        self, *, to: Address | None, data: str, gas: int, value: int = 0
    ) -> TransactionReceipt:
        payload = self.build_transaction(to=to, data=data, gas=gas, value=value)
        tx_hash = to_data_hex(rpc_send(self.client, RPCMethod.SEND_TRANSACTION, [payload]))
        if tx_hash in EMPTY_CALL_RESULTS:
            raise ExecutionError(
                "Node returned no transaction hash",
                operation="send_transaction",
                details={"from": self.from_address},
            )
        logger.info(
            "Transaction sent mode=%s from=%s hash=%s", self.mode.value, self.from_address, tx_hash
        )

        raw_receipt = poll(
            lambda: rpc_send(self.client, RPCMethod.GET_TRANSACTION_RECEIPT, [tx_hash]),
            self.retry_policy,
            description=f"receipt for {tx_hash}",
            transaction_hash=tx_hash,
            sleep=self._sleep,
        )
        receipt: TransactionReceipt = serialise_receipt(raw_receipt)
        status = receipt.get("status")
        if status is not None and to_quantity(status) == 0:
            raise ExecutionError(
                f"Transaction {tx_hash} reverted",
                operation="send_transaction",
                details={"receipt": receipt},
            )
        logger.info("Transaction confirmed hash=%s block=%s", tx_hash, receipt.get("blockNumber"))
        return receipt


class PublicTransactionManager(ClientTransactionManager):
    """Submits unrestricted transactions."""

    mode = ManagerMode.PUBLIC


class PrivateTransactionManager(ClientTransactionManager):
    """Attaches ``privateFor`` (and ``privacyFlag`` in enhanced mode) to every payload."""

    def __init__(
        self,
        client: Web3,
        from_address: Address,
        private_for: Sequence[PrivacyKey],
        flags: Sequence[PrivacyFlag] | None = None,
        retry_policy: RetryPolicy = DEFAULT_RETRY_POLICY,
        *,
        mode: ManagerMode | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        super().__init__(client, from_address, retry_policy, sleep=sleep)
        for index, key in enumerate(private_for):
            if key is None:
                raise UnresolvedTargetError(index)
        self.private_for = list(private_for)
        self.flags = list(flags or [])
        self.mode = mode or ManagerMode.for_flags(self.flags)
        if not self.mode.is_private:
            raise ValidationError(
                "Private manager needs a private mode", field="mode", value=self.mode
            )

    def build_transaction(
        self, *, to: Address | None, data: str, gas: int, value: int = 0
    ) -> dict[str, Any]:
        payload = super().build_transaction(to=to, data=data, gas=gas, value=value)
        payload["privateFor"] = list(self.private_for)
        if self.mode is ManagerMode.PRIVATE_ENHANCED:
            payload["privacyFlag"] = PrivacyFlag.combine(self.flags)
        return payload


class ReadOnlyTransactionManager(TransactionManager):
    """Executes calls only; any state-changing submission is rejected."""

    mode = ManagerMode.READ_ONLY

    def build_transaction(
        self, *, to: Address | None, data: str, gas: int, value: int = 0
    ) -> dict[str, Any]:
        raise ReadOnlyManagerError("Read-only manager cannot build transactions")

    def send_transaction(
        self, *, to: Address | None, data: str, gas: int, value: int = 0
    ) -> TransactionReceipt:
        raise ReadOnlyManagerError("Read-only manager cannot submit transactions")


def build_manager(
    client: Web3,
    from_address: Address,
    private_for: Sequence[PrivacyKey | None] | None = None,
    flags: Sequence[PrivacyFlag] | None = None,
    retry_policy: RetryPolicy | None = None,
    mode: ManagerMode = ManagerMode.PUBLIC,
    *,
    sleep: Callable[[float], None] = time.sleep,
) -> TransactionManager:
    """Build the manager variant for ``mode``."""

    if mode is ManagerMode.READ_ONLY:
        return ReadOnlyTransactionManager(client, from_address)

    policy = retry_policy or DEFAULT_RETRY_POLICY
    if mode is ManagerMode.PUBLIC:
        if private_for or flags:
            raise ValidationError(
                "Public manager cannot carry privacy targets or flags",
                field="private_for",
                value={"private_for": private_for, "flags": flags},
            )
        return PublicTransactionManager(client, from_address, policy, sleep=sleep)

    if private_for is None:
        private_for = []
    for index, key in enumerate(private_for):
        if key is None:
            raise UnresolvedTargetError(index)
    return PrivateTransactionManager(
        client,
        from_address,
        [key for key in private_for if key is not None],
        flags,
        policy,
        mode=mode,
        sleep=sleep,
    )


def manager_for(
    client: Web3,
    from_address: Address,
    private_for: Sequence[PrivacyKey | None] | None,
    flags: Sequence[PrivacyFlag] | None = None,
    retry_policy: RetryPolicy | None = None,
    *,
    sleep: Callable[[float], None] = time.sleep,
) -> TransactionManager:
    """Choose public or private based on whether targets were supplied."""

    if private_for is None:
        return build_manager(client, from_address, retry_policy=retry_policy, sleep=sleep)
    return build_manager(
        client,
        from_address,
        private_for,
        flags,
        retry_policy,
        ManagerMode.for_flags(flags),
        sleep=sleep,
    )
