"""
Node Registry Models - What the registry knows about nodes, packs and credentials.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field

from src.node_sdk.basenode import NodeCredential, NodeParameter


class NodeDefinition(BaseModel):
    """
    Registered node type, derived from the class attributes of a BaseNode.

    ``outputs`` lists one entry per output branch; ``output_names`` labels
    them (``["ok", "error"]`` for the Web API node).
    """
    model_config = ConfigDict(extra="allow")

    node_type: str = Field(..., description="Unique node type identifier")
    version: int = Field(1, description="Node version")
    display_name: str = Field(..., description="Human-readable name")
    description: str = Field("", description="Node description")
    icon: Optional[str] = Field(None, description="Node icon")
    group: List[str] = Field(default_factory=list, description="Palette categories")

    node_class: str = Field(..., description="Fully qualified class name")
    node_pack: Optional[str] = Field(None, description="Pack the node was registered from")

    inputs: List[str] = Field(default_factory=lambda: ["main"])
    outputs: List[str] = Field(default_factory=lambda: ["main"])
    output_names: List[str] = Field(default_factory=list)
    credentials: List[NodeCredential] = Field(default_factory=list)
    parameters: List[NodeParameter] = Field(default_factory=list)

    @property
    def is_config_node(self) -> bool:
        """Config nodes hold shared resources and have no wires."""
        return not self.inputs and not self.outputs

    def parameter(self, name: str) -> Optional[NodeParameter]:
        return next((p for p in self.parameters if p.name == name), None)

    @classmethod
    def from_node_class(cls, node_class: Type) -> "NodeDefinition":
        """Build a definition from a node class's ``description`` and ``properties``."""
        meta: Dict[str, Any] = node_class.description
        properties: Dict[str, Any] = node_class.properties

        return cls(
            node_type=node_class.type,
            version=node_class.version,
            display_name=meta.get("displayName", node_class.type),
            description=meta.get("description", ""),
            icon=meta.get("icon"),
            group=meta.get("group", []),
            node_class=f"{node_class.__module__}.{node_class.__qualname__}",
            inputs=meta.get("inputs", ["main"]),
            outputs=meta.get("outputs", ["main"]),
            output_names=meta.get("outputNames", []),
            credentials=properties.get("credentials", []),
            parameters=properties.get("parameters", []),
        )


class CredentialDefinition(BaseModel):
    """Credential type a pack contributes (e.g. a Slack token)."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str = Field(..., description="Credential type name")
    display_name: str = Field(..., alias="displayName", description="Human-readable name")
    description: str = Field("", description="Credential description")
    properties: List[Dict[str, Any]] = Field(default_factory=list, description="Credential fields")

    @property
    def secret_fields(self) -> List[str]:
        """Names of fields that must never be logged or displayed."""
        return [
            prop["name"]
            for prop in self.properties
            if prop.get("type") == "password" or prop.get("typeOptions", {}).get("password")
        ]


class NodePackManifest(BaseModel):
    """Pack metadata returned by a pack's ``register_nodes()`` entry point."""
    model_config = ConfigDict(extra="allow")

    name: str = Field(..., description="Pack name (e.g., 'slack')")
    version: str = Field("1.0.0", description="Pack version")
    description: str = Field("", description="Pack description")
    author: str = Field("", description="Author name")
    license: str = Field("MIT", description="License type")

    nodes: List[str] = Field(default_factory=list, description="Node types in this pack")
    credentials: List[CredentialDefinition] = Field(
        default_factory=list,
        description="Credential types in this pack",
    )
    entry_point: str = Field("", description="Module the pack's nodes live in")


__all__ = [
    "CredentialDefinition",
    "NodeDefinition",
    "NodePackManifest",
]
