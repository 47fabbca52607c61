"""Privacy key lookup for private transaction targets."""

from __future__ import annotations

from collections.abc import Sequence
from types import MappingProxyType

from .config import NetworkConfig
from .exceptions import UnknownNodeError, UnresolvedTargetError
from .types import Node, PrivacyKey


class PrivacyDirectory:
    """Read-only mapping of node name to privacy manager public key."""

    def __init__(self, config: NetworkConfig) -> None:
        self._keys = MappingProxyType(
            {name: node.privacy_key for name, node in config.nodes.items() if node.privacy_key}
        )

    def id_for(self, node: Node) -> PrivacyKey:
        key = self._keys.get(node)
        if key is None:
            raise UnknownNodeError(node, details={"reason": "no privacy key registered"})
        return key


class PrivacyResolver:
    """Turn target nodes into the ``privateFor`` key list.

    Deploys historically drop missing targets while updates reject them, so
    both entry points exist.
    """

    def __init__(self, directory: PrivacyDirectory) -> None:
        self._directory = directory

    def resolve(self, nodes: Sequence[Node | None] | None) -> list[PrivacyKey] | None:
        if nodes is None:
            return None
        return [self._directory.id_for(node) for node in nodes if node is not None]

    def resolve_strict(self, nodes: Sequence[Node | None] | None) -> list[PrivacyKey] | None:
        if nodes is None:
            return None
        keys = []
        for index, node in enumerate(nodes):
            if node is None:
                raise UnresolvedTargetError(index)
            keys.append(self._directory.id_for(node))
        return keys
