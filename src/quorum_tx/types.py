"""Type definitions and data models for the Quorum transaction layer."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Union

from .constants import DEFAULT_MAX_RETRY, DEFAULT_SLEEP_DURATION_MS
from .exceptions import ExecutionError, ValidationError

Node = str  # Logical node name, e.g. "Node1"
Address = str  # Ethereum address
PrivacyKey = str  # Base64 privacy manager public key
TransactionReceipt = dict[str, Any]


class PrivacyFlag(IntEnum):
    """Privacy flags understood by Quorum's private transaction manager."""

    LEGACY = 0  # Standard private
    PARTY_PROTECTION = 1
    MANDATORY_RECIPIENTS = 2
    STATE_VALIDATION = 3

    @staticmethod
    def combine(flags: Iterable[PrivacyFlag] | None) -> int:
        """OR the flags into the ``privacyFlag`` bitmask sent on the wire."""
        value = 0
        for flag in flags or ():
            value |= int(flag)
        return value


class ManagerMode(Enum):
    """Transaction manager variants."""

    PUBLIC = "public"
    PRIVATE_LEGACY = "private_legacy"
    PRIVATE_ENHANCED = "private_enhanced"
    READ_ONLY = "read_only"

    @property
    def is_private(self) -> bool:
        return self in (ManagerMode.PRIVATE_LEGACY, ManagerMode.PRIVATE_ENHANCED)

    @classmethod
    def for_flags(cls, flags: Iterable[PrivacyFlag] | None) -> ManagerMode:
        """Legacy encoding unless a flag beyond ``LEGACY`` is requested."""
        if PrivacyFlag.combine(flags) == PrivacyFlag.LEGACY:
            return cls.PRIVATE_LEGACY
        return cls.PRIVATE_ENHANCED


class OperationKind(Enum):
    """Kinds of operation a (family, method) pair resolves to."""

    DEPLOY = "deploy"
    GET = "get"
    SET = "set"


@dataclass(frozen=True)
class RetryPolicy:
    """Polling budget for receipts and method calls."""

    max_attempts: int = DEFAULT_MAX_RETRY
    sleep_duration_ms: int = DEFAULT_SLEEP_DURATION_MS

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValidationError(
                "Retry policy needs at least one attempt",
                field="max_attempts",
                value=self.max_attempts,
            )
        if self.sleep_duration_ms < 0:
            raise ValidationError(
                "Sleep duration cannot be negative",
                field="sleep_duration_ms",
                value=self.sleep_duration_ms,
            )

    @property
    def sleep_seconds(self) -> float:
        return self.sleep_duration_ms / 1000.0


DEFAULT_RETRY_POLICY = RetryPolicy()


@dataclass(frozen=True)
class DeployedContract:
    """Handle to a contract created by a deploy transaction."""

    address: Address
    node: Node | None = None
    transaction_hash: str | None = None


@dataclass(frozen=True)
class Empty:
    """A contract read that returned no data."""

    def unwrap(self) -> int:
        return 0


@dataclass(frozen=True)
class Value:
    """A contract read that returned a value."""

    value: int

    def unwrap(self) -> int:
        return self.value


@dataclass(frozen=True)
class Failure:
    """A contract read that failed."""

    cause: BaseException
    operation: str | None = None

    def unwrap(self) -> int:
        raise ExecutionError(
            f"Contract read failed: {self.cause}",
            operation=self.operation,
            details={"error": str(self.cause)},
        ) from self.cause


ReadResult = Union[Empty, Value, Failure]


@dataclass(frozen=True)
class AsyncSubmission:
    """Tracking handle returned by ``eth_sendTransactionAsync``."""

    node: Node
    from_address: Address
    payload: dict[str, Any] = field(default_factory=dict)
    result: Any = None
