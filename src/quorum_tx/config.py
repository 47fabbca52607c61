"""Configuration containers for the Quorum network under test."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

from .constants import DEFAULT_GAS_LIMIT, DEFAULT_REQUEST_TIMEOUT
from .exceptions import UnknownNodeError, ValidationError
from .types import DEFAULT_RETRY_POLICY, RetryPolicy


@dataclass(frozen=True)
class NodeConfig:
    """Endpoint and identity of a single network participant."""

    name: str
    url: str
    privacy_key: str | None = None
    default_address: str | None = None


@dataclass(frozen=True)
class NetworkConfig:
    """Read-only description of the network, built once before first use."""

    nodes: Mapping[str, NodeConfig] = field(default_factory=dict)
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    gas_limit: int = DEFAULT_GAS_LIMIT
    retry_policy: RetryPolicy = DEFAULT_RETRY_POLICY
    artifacts_dir: Path | None = None

    def node(self, name: str | None) -> NodeConfig:
        if name is None or name not in self.nodes:
            raise UnknownNodeError(name)
        return self.nodes[name]

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> NetworkConfig:
        """Build a config from a parsed settings document.

        ``nodes`` may be a list of node dicts carrying a ``name`` key or a
        mapping of node name to node dict.
        """

        raw_nodes = data.get("nodes") or {}
        if isinstance(raw_nodes, Mapping):
            entries = [{"name": name, **dict(entry)} for name, entry in raw_nodes.items()]
        else:
            entries = [dict(entry) for entry in raw_nodes]

        nodes: dict[str, NodeConfig] = {}
        for entry in entries:
            name = entry.get("name")
            url = entry.get("url")
            if not name:
                raise ValidationError("Node entry is missing a name", field="name", value=entry)
            if not url:
                raise ValidationError(f"Node {name} has no url", field="url", value=entry)
            if name in nodes:
                raise ValidationError(f"Duplicate node {name}", field="name", value=name)
            nodes[name] = NodeConfig(
                name=name,
                url=str(url).rstrip("/"),
                privacy_key=entry.get("privacy_key"),
                default_address=entry.get("default_address"),
            )

        retry = data.get("retry") or {}
        retry_policy = RetryPolicy(
            max_attempts=int(retry.get("max_attempts", DEFAULT_RETRY_POLICY.max_attempts)),
            sleep_duration_ms=int(
                retry.get("sleep_duration_ms", DEFAULT_RETRY_POLICY.sleep_duration_ms)
            ),
        )

        artifacts_dir = data.get("artifacts_dir")
        return cls(
            nodes=MappingProxyType(nodes),
            request_timeout=float(data.get("request_timeout", DEFAULT_REQUEST_TIMEOUT)),
            gas_limit=int(data.get("gas_limit", DEFAULT_GAS_LIMIT)),
            retry_policy=retry_policy,
            artifacts_dir=Path(artifacts_dir) if artifacts_dir else None,
        )
