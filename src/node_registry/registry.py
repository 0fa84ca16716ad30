"""
Node Registry - Node pack discovery and node instantiation.

Packs are registered explicitly with register_pack() or found through the
``slack_nodes.nodepacks`` entry point group. A pack entry point returns
``(manifest, node_classes)`` or a bare ``{node_type: class}`` dict.

Config nodes (no inputs, no outputs) are created first and handed to the
constructors of the nodes that use them:

    registry = get_global_registry()
    registry.discover_entry_points()

    config = registry.create_node("slack-webclient-config", token="xoxb-...")
    lookup = registry.create_node("slack-channel-lookup", config)
"""

from __future__ import annotations

import logging
from importlib.metadata import EntryPoint, entry_points
from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Optional, Tuple, Type

from src.node_sdk.errors import NodeOperationError

from .models import CredentialDefinition, NodeDefinition, NodePackManifest


if TYPE_CHECKING:
    from src.node_sdk.basenode import BaseNode

    NodeClasses = Dict[str, Type["BaseNode"]]


logger = logging.getLogger(__name__)

NODE_PACK_ENTRY_POINT = "slack_nodes.nodepacks"


class NodeRegistry:
    """Node definitions, node classes and credential types by name."""

    def __init__(self) -> None:
        self._definitions: Dict[str, NodeDefinition] = {}
        self._classes: Dict[str, Type["BaseNode"]] = {}
        self._packs: Dict[str, NodePackManifest] = {}
        self._credentials: Dict[str, CredentialDefinition] = {}
        self._discovered = False

    # ==== Registration ====

    def register_node(
        self,
        node_class: Type["BaseNode"],
        node_type: Optional[str] = None,
        pack: Optional[str] = None,
    ) -> NodeDefinition:
        """Register one node class under its type (or an explicit override)."""
        definition = NodeDefinition.from_node_class(node_class)
        if node_type is not None:
            definition.node_type = node_type
        definition.node_pack = pack

        if definition.node_type in self._classes and self._classes[definition.node_type] is not node_class:
            logger.warning(f"Node type '{definition.node_type}' re-registered by {definition.node_class}")

        self._definitions[definition.node_type] = definition
        self._classes[definition.node_type] = node_class
        return definition

    def register_credential(self, definition: CredentialDefinition) -> None:
        self._credentials[definition.name] = definition

    def register_pack(self, manifest: NodePackManifest, node_classes: "NodeClasses") -> None:
        """Register a pack's credential types and nodes."""
        missing = set(manifest.nodes) - set(node_classes)
        if missing:
            raise NodeOperationError(
                f"Pack '{manifest.name}' lists node types without classes: {sorted(missing)}"
            )

        self._packs[manifest.name] = manifest
        for credential in manifest.credentials:
            self.register_credential(credential)
        for node_type, node_class in node_classes.items():
            self.register_node(node_class, node_type, pack=manifest.name)

        logger.info(
            f"Registered pack '{manifest.name}' {manifest.version}: "
            f"{len(node_classes)} nodes, {len(manifest.credentials)} credential types"
        )

    def discover_entry_points(self, force: bool = False) -> int:
        """
        Load every pack published under NODE_PACK_ENTRY_POINT.

        Packs that fail to import are logged and skipped.

        Returns:
            Number of packs loaded by this call
        """
        if self._discovered and not force:
            return 0

        loaded = 0
        for ep in entry_points(group=NODE_PACK_ENTRY_POINT):
            pack = self._load_pack(ep)
            if pack is None:
                continue
            self.register_pack(*pack)
            loaded += 1

        self._discovered = True
        return loaded

    def _load_pack(self, ep: EntryPoint) -> Optional[Tuple[NodePackManifest, "NodeClasses"]]:
        try:
            result = ep.load()()
        except (ImportError, AttributeError) as e:
            logger.error(f"Failed to load node pack '{ep.name}': {e}")
            return None

        if isinstance(result, tuple):
            return result
        if isinstance(result, dict):
            return NodePackManifest(name=ep.name, nodes=list(result)), result

        logger.error(f"Node pack '{ep.name}' returned {type(result).__name__}")
        return None

    # ==== Lookup ====

    def get_node(self, node_type: str) -> Optional[NodeDefinition]:
        return self._definitions.get(node_type)

    def get_node_class(self, node_type: str) -> Optional[Type["BaseNode"]]:
        return self._classes.get(node_type)

    def get_credential(self, name: str) -> Optional[CredentialDefinition]:
        return self._credentials.get(name)

    def create_node(self, node_type: str, *args: Any, **kwargs: Any) -> "BaseNode":
        """
        Instantiate a registered node.

        Positional and keyword arguments go to the node constructor, which is
        how config nodes are injected.

        Raises:
            NodeOperationError: If the node type is not registered
        """
        node_class = self._classes.get(node_type)
        if node_class is None:
            raise NodeOperationError(f"Unknown node type: {node_type}")
        return node_class(*args, **kwargs)

    def config_node_types(self) -> List[str]:
        """Types of registered config nodes."""
        return [node_type for node_type, definition in self._definitions.items() if definition.is_config_node]

    def list_nodes(self, pack: Optional[str] = None) -> List[NodeDefinition]:
        """Node definitions, optionally limited to one pack."""
        return [
            definition for definition in self._definitions.values()
            if pack is None or definition.node_pack == pack
        ]

    def list_node_types(self) -> List[str]:
        return list(self._definitions)

    def list_packs(self) -> List[NodePackManifest]:
        return list(self._packs.values())

    def list_credentials(self) -> List[CredentialDefinition]:
        return list(self._credentials.values())

    def has_node(self, node_type: str) -> bool:
        return node_type in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)

    def __iter__(self) -> Iterator[NodeDefinition]:
        return iter(self._definitions.values())

    def __contains__(self, node_type: str) -> bool:
        return self.has_node(node_type)


_global_registry: Optional[NodeRegistry] = None


def get_global_registry() -> NodeRegistry:
    """Process-wide registry (created on first use)."""
    global _global_registry
    if _global_registry is None:
        _global_registry = NodeRegistry()
    return _global_registry


def reset_global_registry() -> None:
    """Drop the process-wide registry (useful for testing)."""
    global _global_registry
    _global_registry = None


__all__ = [
    "NODE_PACK_ENTRY_POINT",
    "NodeRegistry",
    "get_global_registry",
    "reset_global_registry",
]
