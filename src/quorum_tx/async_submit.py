"""Fire-and-forget submission via ``eth_sendTransactionAsync``."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from web3 import Web3

from .connections import ConnectionFactory, rpc_send
from .constants import DEFAULT_GAS_LIMIT, RPCMethod
from .exceptions import PayloadEncodingError, UnresolvedTargetError, ValidationError
from .types import Address, AsyncSubmission, Node, PrivacyKey

logger = logging.getLogger(__name__)


class AsyncSubmitter:
    """Submit transactions whose completion the node reports to a callback URL.

    Submission returns as soon as the node accepts the request; nothing is
    polled here.
    """

    def __init__(self, connections: ConnectionFactory) -> None:
        self._connections = connections

    def build_payload(
        self,
        from_address: Address,
        data: str,
        private_for: Sequence[PrivacyKey | None] | None,
        callback_url: str,
        *,
        to: Address | None = None,
        gas: int = DEFAULT_GAS_LIMIT,
        value: int = 0,
    ) -> dict[str, Any]:
        if not callback_url:
            raise ValidationError("Async submission needs a callback URL", field="callback_url")
        if not isinstance(data, str) or not data.startswith("0x") or len(data) <= 2:
            raise PayloadEncodingError("Async submission needs hex encoded call data")

        payload: dict[str, Any] = {
            "from": from_address,
            "gas": Web3.to_hex(gas),
            "value": Web3.to_hex(value),
            "data": data,
            "callbackUrl": callback_url,
        }
        if to is not None:
            payload["to"] = to
        if private_for is not None:
            for index, key in enumerate(private_for):
                if key is None:
                    raise UnresolvedTargetError(index)
            payload["privateFor"] = list(private_for)
        return payload

    def submit_async(self, node: Node, payload: dict[str, Any]) -> AsyncSubmission:
        client = self._connections.get_connection(node)
        result = rpc_send(client, RPCMethod.SEND_TRANSACTION_ASYNC, [payload])
        logger.info("Async transaction submitted via %s callback=%s", node, payload["callbackUrl"])
        return AsyncSubmission(
            node=node,
            from_address=payload["from"],
            payload=dict(payload),
            result=result,
        )
