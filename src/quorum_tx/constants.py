"""Process-wide defaults and RPC method names."""

from enum import Enum

DEFAULT_GAS_LIMIT = 4_700_000
DEFAULT_MAX_RETRY = 30
DEFAULT_SLEEP_DURATION_MS = 2000
DEFAULT_REQUEST_TIMEOUT = 10.0

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# Results an eth_call returns when the target holds no code or no value
EMPTY_CALL_RESULTS = frozenset({"", "0x"})


class RPCMethod(str, Enum):
    """JSON-RPC methods issued by the transaction layer."""

    COINBASE = "eth_coinbase"
    CALL = "eth_call"
    SEND_TRANSACTION = "eth_sendTransaction"
    SEND_TRANSACTION_ASYNC = "eth_sendTransactionAsync"
    GET_TRANSACTION_RECEIPT = "eth_getTransactionReceipt"
    STORAGE_ROOT = "eth_storageRoot"
