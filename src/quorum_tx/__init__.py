"""Quorum transaction layer - deploy, call and update test contracts.

This library builds public and private transaction managers for the nodes of
a Quorum network, routes contract/method names onto a fixed binding table,
and polls for receipts with a bounded retry policy.
"""

from .artifacts import ArtifactStore
from .async_submit import AsyncSubmitter
from .config import NetworkConfig, NodeConfig
from .connections import AccountResolver, ConnectionFactory
from .deferred import Deferred
from .dispatcher import ContractDispatcher
from .exceptions import (
    ConfigurationError,
    ExecutionError,
    NetworkError,
    PayloadEncodingError,
    QuorumTxError,
    ReadOnlyManagerError,
    ResolutionError,
    TransactionTimeoutError,
    UnknownContractError,
    UnknownMethodError,
    UnknownNodeError,
    UnresolvedTargetError,
    ValidationError,
)
from .managers import (
    PrivateTransactionManager,
    PublicTransactionManager,
    ReadOnlyTransactionManager,
    TransactionManager,
    build_manager,
)
from .privacy import PrivacyDirectory, PrivacyResolver
from .service import ContractService
from .types import (
    DEFAULT_RETRY_POLICY,
    AsyncSubmission,
    DeployedContract,
    Empty,
    Failure,
    ManagerMode,
    PrivacyFlag,
    ReadResult,
    RetryPolicy,
    Value,
)

__version__ = "0.1.0"

__all__ = [
    # Services
    "ContractService",
    "ContractDispatcher",
    "AsyncSubmitter",
    "ArtifactStore",
    # Configuration and collaborators
    "NetworkConfig",
    "NodeConfig",
    "ConnectionFactory",
    "AccountResolver",
    "PrivacyDirectory",
    "PrivacyResolver",
    # Managers
    "TransactionManager",
    "PublicTransactionManager",
    "PrivateTransactionManager",
    "ReadOnlyTransactionManager",
    "build_manager",
    # Types and enums
    "ManagerMode",
    "PrivacyFlag",
    "RetryPolicy",
    "DEFAULT_RETRY_POLICY",
    "DeployedContract",
    "AsyncSubmission",
    "Deferred",
    "ReadResult",
    "Empty",
    "Value",
    "Failure",
    # Exceptions
    "QuorumTxError",
    "ConfigurationError",
    "UnknownContractError",
    "UnknownMethodError",
    "PayloadEncodingError",
    "ReadOnlyManagerError",
    "ResolutionError",
    "UnknownNodeError",
    "UnresolvedTargetError",
    "ValidationError",
    "NetworkError",
    "TransactionTimeoutError",
    "ExecutionError",
]
