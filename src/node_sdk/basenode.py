"""
BaseNode - Abstract base class for Python node implementations.

All nodes inherit from BaseNode and implement the execute() method.
A node instance lives as long as the workflow that deploys it; each call to
execute() handles the input items of one activation, where every item is one
message (unit of work).

execute() is synchronous; Slack calls block the calling worker.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Literal, Optional, TypedDict

from pydantic import BaseModel, ConfigDict, Field

from .context import ContextStore
from .errors import NodeApiError, NodeOperationError


logger = logging.getLogger(__name__)


# ==============================================================================
# NodeParameterType
# ==============================================================================

NodeParameterType = Literal[
    "string", "number", "boolean", "options", "multiOptions",
    "json", "collection", "node", "notice", "typedInput",
]


# ==============================================================================
# NodeParameter - Pydantic model for defining parameters
# ==============================================================================

class NodeParameter(BaseModel):
    """
    A single parameter in the node's properties.

    Can be used both as Pydantic model and as dict in properties.
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str = Field(..., description="Parameter key (internal name)")
    display_name: str = Field(..., alias="displayName", description="Human-readable label")
    type: NodeParameterType = Field(..., description="Parameter type")
    default: Any = Field(None, description="Default value")
    required: bool = Field(False, description="Is parameter required?")
    description: Optional[str] = Field(None, description="Help text")
    options: Optional[List[Dict[str, Any]]] = Field(
        None,
        description="Options for options/multiOptions type"
    )
    type_field: Optional[str] = Field(
        None,
        alias="typeField",
        description="Companion parameter holding the selector type (typedInput)",
    )
    display_options: Optional[Dict[str, Any]] = Field(
        None,
        alias="displayOptions",
        description="Conditional visibility"
    )


class NodeCredential(BaseModel):
    """Credential requirement definition."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str = Field(..., description="Credential type name")
    required: bool = Field(True, description="Is credential required?")
    display_name: Optional[str] = Field(None, alias="displayName")


class NodeStatus(BaseModel):
    """
    Status indicator shown next to a node.

    Observability only: downstream nodes never see it.
    """
    model_config = ConfigDict(extra="forbid")

    fill: Literal["red", "green", "yellow", "blue", "grey"] = Field(..., description="Indicator colour")
    shape: Literal["dot", "ring"] = Field("dot", description="Indicator shape")
    text: str = Field("", description="Short status text")


# ==============================================================================
# NodeExecutionData - Output data format
# ==============================================================================

class NodeExecutionData(TypedDict, total=False):
    """
    Single item of execution output data.

    Format: {"json": {...}, "pairedItem": {"item": 0}}
    """
    json: Dict[str, Any]
    pairedItem: Optional[Dict[str, int]]


# ==============================================================================
# BaseNode - Abstract base class
# ==============================================================================

class BaseNode(ABC):
    """
    Abstract base class for all Python node implementations.

    Nodes define:
    - type: Unique identifier (e.g., "slack-webclient")
    - version: Node version number
    - description: Node metadata dict
    - properties: Parameters and credentials

    And implement execute() which processes input items.

    Shared resources (such as a configured API client) are passed to the
    node constructor rather than looked up at runtime.

    All execution is synchronous.
    """

    # Required class attributes (override in subclasses)
    type: str = "base"
    version: int = 1

    # Node metadata
    description: Dict[str, Any] = {
        "displayName": "Base Node",
        "name": "base",
        "description": "",
        "group": [],
        "version": 1,
        "inputs": ["main"],
        "outputs": ["main"],
    }

    # Node configuration - parameters and credentials
    properties: Dict[str, Any] = {
        "parameters": [],
        "credentials": [],
    }

    # Continue processing other items if one fails
    continue_on_fail: bool = False

    def __init__(self, name: Optional[str] = None) -> None:
        """Initialize node instance."""
        self.name = name or self.type
        logger_name = f"node.{self.type}" if name is None else f"node.{self.type}.{name}"
        self.logger = logging.getLogger(logger_name)
        self.node_context = ContextStore("node")
        self.current_status: Optional[NodeStatus] = None
        self._context: Optional[NodeExecutionContext] = None

    @abstractmethod
    def execute(self) -> List[List[NodeExecutionData]]:
        """
        Process the input items of one activation.

        Returns:
            One list of output items per output branch, in the order of
            ``description["outputs"]``. Each item carries ``pairedItem``
            pointing at the input it came from.

        Raises:
            NodeOperationError: On operation failure
            NodeApiError: On API call failure
        """
        raise NotImplementedError

    # ==== Activation ====

    def set_context(self, context: "NodeExecutionContext") -> None:
        """Set the execution context."""
        self._context = context

    def run(self, context: "NodeExecutionContext") -> List[List[NodeExecutionData]]:
        """Set the context and execute in one step."""
        self.set_context(context)
        return self.execute()

    # ==== Parameters, credentials and input ====

    def get_node_parameter(
        self,
        name: str,
        item_index: int = 0,
        default: Any = None,
    ) -> Any:
        """Configured parameter value; ``default`` when unset or when no context is attached."""
        if self._context is None:
            return default
        return self._context.get_node_parameter(name, item_index, default)

    def get_input_data(self) -> List[Dict[str, Any]]:
        """Input items of the current activation (``[]`` without a context)."""
        if self._context is None:
            return []
        return self._context.get_input_data()

    def context_store(self, scope: str) -> ContextStore:
        """
        Get the context store for a scope.

        Args:
            scope: "node", "flow" or "global"
        """
        if scope == "node":
            return self.node_context
        if self._context is None:
            raise NodeOperationError(f"No context set for '{scope}' store", self)
        if scope == "flow":
            return self._context.flow_context
        if scope == "global":
            return self._context.global_context
        raise NodeOperationError(f"Unknown context scope: {scope}", self)

    def set_status(self, fill: str, text: str = "", shape: str = "dot") -> NodeStatus:
        """Update the node status indicator."""
        status = NodeStatus(fill=fill, shape=shape, text=text)
        self.current_status = status
        if self._context is not None:
            self._context.report_status(self.name, status)
        self.logger.debug(f"Status {status.fill}: {status.text}")
        return status

    @classmethod
    def get_definition(cls) -> Dict[str, Any]:
        """Get full node definition for registration."""
        return {
            "type": cls.type,
            "version": cls.version,
            "description": cls.description,
            "properties": cls.properties,
        }


# ==============================================================================
# NodeExecutionContext - Runtime context for node execution
# ==============================================================================

class NodeExecutionContext:
    """
    Runtime context provided to nodes during execution.

    Provides access to:
    - Parameters
    - Credentials
    - Input data
    - Flow and global context stores
    - Status reports
    """

    def __init__(
        self,
        parameters: Dict[str, Any],
        credentials: Dict[str, Dict[str, Any]],
        input_data: List[Dict[str, Any]],
        workflow_id: Optional[str] = None,
        node_name: Optional[str] = None,
        flow_context: Optional[ContextStore] = None,
        global_context: Optional[ContextStore] = None,
    ) -> None:
        self._parameters = parameters
        self._credentials = credentials
        self._input_data = input_data
        self.workflow_id = workflow_id
        self.node_name = node_name
        self.flow_context = flow_context if flow_context is not None else ContextStore("flow")
        self.global_context = global_context if global_context is not None else ContextStore("global")
        self.statuses: List[Dict[str, Any]] = []

    def get_node_parameter(
        self,
        name: str,
        item_index: int = 0,
        default: Any = None,
    ) -> Any:
        """Get parameter value."""
        value = self._parameters.get(name)
        return default if value is None else value

    def get_credentials(self, name: str) -> Dict[str, Any]:
        """Get credentials by type name."""
        if name not in self._credentials:
            raise NodeOperationError(f"Credentials '{name}' not found")
        return self._credentials[name]

    def has_credentials(self, name: str) -> bool:
        return name in self._credentials

    def get_input_data(self) -> List[Dict[str, Any]]:
        """Get input items."""
        return self._input_data

    def report_status(self, node_name: str, status: NodeStatus) -> None:
        """Record a node status update."""
        self.statuses.append({"node": node_name, **status.model_dump()})


# ==============================================================================
# Exports
# ==============================================================================

__all__ = [
    "BaseNode",
    "NodeExecutionContext",
    "NodeExecutionData",
    "NodeParameter",
    "NodeCredential",
    "NodeStatus",
    "NodeParameterType",
    "NodeOperationError",
    "NodeApiError",
]
