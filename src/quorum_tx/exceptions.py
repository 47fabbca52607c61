"""Exception hierarchy for the Quorum transaction layer."""

from typing import Any


class QuorumTxError(Exception):
    """Base exception for all transaction layer errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(QuorumTxError):
    """Raised for caller or configuration mistakes. Never retried."""

    pass


class UnknownContractError(ConfigurationError):
    """Raised when a contract family name is not in the binding table."""

    def __init__(self, family: str, details: dict | None = None):
        super().__init__(f"Invalid contract name {family}", details)
        self.family = family


class UnknownMethodError(ConfigurationError):
    """Raised when a method name is not defined for a known contract family."""

    def __init__(self, family: str, method: str, details: dict | None = None):
        super().__init__(f"Invalid method name {method} for contract {family}", details)
        self.family = family
        self.method = method


class PayloadEncodingError(ConfigurationError):
    """Raised when a transaction payload cannot be assembled."""

    def __init__(
        self,
        message: str,
        resource: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.resource = resource


class ReadOnlyManagerError(ConfigurationError):
    """Raised when a read-only manager is asked to submit a transaction."""

    pass


class ResolutionError(QuorumTxError):
    """Raised when a node or privacy target cannot be resolved."""

    pass


class UnknownNodeError(ResolutionError):
    """Raised when a node has no registered endpoint or privacy key."""

    def __init__(self, node: str | None, details: dict | None = None):
        super().__init__(f"Unknown node: {node}", details)
        self.node = node


class UnresolvedTargetError(ResolutionError):
    """Raised when a private transaction target list contains an unresolved entry."""

    def __init__(self, index: int, details: dict | None = None):
        super().__init__(f"Privacy target at position {index} is unresolved", details)
        self.index = index


class ValidationError(QuorumTxError):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.field = field
        self.value = value


class NetworkError(QuorumTxError):
    """Raised when network/connection issues occur."""

    def __init__(
        self,
        message: str,
        endpoint: str | None = None,
        status_code: int | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.endpoint = endpoint
        self.status_code = status_code


class TransactionTimeoutError(QuorumTxError):
    """Raised when a poll loop exhausts its attempts without a result."""

    def __init__(
        self,
        message: str,
        attempts: int,
        transaction_hash: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.attempts = attempts
        self.transaction_hash = transaction_hash


class ExecutionError(QuorumTxError):
    """Generic failure of an operation; the original exception is the ``__cause__``."""

    def __init__(self, message: str, operation: str | None = None, details: dict | None = None):
        super().__init__(message, details)
        self.operation = operation
