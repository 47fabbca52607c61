"""Utility functions for the Quorum transaction layer."""

from collections.abc import Mapping, Sequence
from typing import Any

from hexbytes import HexBytes
from web3 import Web3

from .exceptions import ValidationError


def normalise_name(name: str) -> str:
    """Case-fold and trim a contract or method name."""
    if not isinstance(name, str):
        raise ValidationError("Name must be a string", field="name", value=name)
    return name.strip().casefold()


def to_quantity(value: Any) -> int:
    """Convert a JSON-RPC quantity (hex string or int) to ``int``."""
    if isinstance(value, bool):
        raise ValidationError("Boolean is not a quantity", field="quantity", value=value)
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return Web3.to_int(hexstr=value) if value.startswith("0x") else int(value)
        except ValueError as exc:
            raise ValidationError(
                "Invalid quantity", field="quantity", value=value, details={"error": str(exc)}
            ) from exc
    raise ValidationError("Invalid quantity", field="quantity", value=value)


def to_data_hex(value: Any) -> str:
    """Normalise call data or a call result to a ``0x`` prefixed hex string."""
    if value is None:
        return "0x"
    if isinstance(value, bytes | bytearray | HexBytes):
        return HexBytes(value).to_0x_hex()
    if isinstance(value, str):
        return value if value.startswith("0x") else f"0x{value}"
    raise ValidationError("Invalid hex data", field="data", value=value)


def serialise_receipt(receipt: Any) -> Any:
    """Serialise web3 receipt objects into JSON-friendly structures."""
    if receipt is None:
        return None
    if isinstance(receipt, Mapping):
        return {key: serialise_receipt(value) for key, value in receipt.items()}
    if isinstance(receipt, Sequence) and not isinstance(
        receipt, str | bytes | bytearray | HexBytes
    ):
        return [serialise_receipt(item) for item in receipt]
    if isinstance(receipt, bytes | bytearray | HexBytes):
        return HexBytes(receipt).to_0x_hex()
    return receipt
