"""
Node SDK - Minimal Python node execution semantics.

This package provides the runtime contract nodes are written against:
- BaseNode: Abstract base class for node implementations
- NodeExecutionContext: Runtime context for a node
- ContextStore: Node, flow and global key/value state
- Property selectors: typed reads and writes (msg, flow, global, ...)
- Page predicates: sandboxed stop conditions
- Items: message wrapping and multi-part group descriptors

All nodes execute synchronously.
"""

from .basenode import (
    BaseNode,
    NodeExecutionContext,
    NodeExecutionData,
    NodeParameter,
    NodeCredential,
    NodeStatus,
    NodeParameterType,
)
from .context import ContextStore
from .errors import NodeApiError, NodeOperationError
from .expressions import ExpressionError, PagePredicate, compile_predicate, never_stop
from .items import Parts, generate_id, make_item, message_of, stamp_parts
from .properties import (
    SOURCE_TYPE_OPTIONS,
    SOURCE_TYPES,
    TARGET_TYPE_OPTIONS,
    TARGET_TYPES,
    evaluate_node_property,
    get_property,
    set_property,
    write_node_property,
)

__all__ = [
    # Items
    "Parts",
    "NodeExecutionData",
    "generate_id",
    "make_item",
    "message_of",
    "stamp_parts",
    # Context
    "NodeExecutionContext",
    "ContextStore",
    # Base class
    "BaseNode",
    "NodeParameter",
    "NodeCredential",
    "NodeStatus",
    "NodeParameterType",
    # Properties
    "SOURCE_TYPES",
    "TARGET_TYPES",
    "SOURCE_TYPE_OPTIONS",
    "TARGET_TYPE_OPTIONS",
    "evaluate_node_property",
    "write_node_property",
    "get_property",
    "set_property",
    # Expressions
    "ExpressionError",
    "PagePredicate",
    "compile_predicate",
    "never_stop",
    # Errors
    "NodeOperationError",
    "NodeApiError",
]
