"""
Node Errors - Exceptions raised by node implementations.

NodeOperationError covers configuration and data problems.
NodeApiError covers failures of an external API call; ``code`` carries the
short error code shown in the node status.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .basenode import BaseNode


class NodeOperationError(Exception):
    """Error during node operation."""

    def __init__(
        self,
        message: str,
        node: Optional["BaseNode"] = None,
        item_index: Optional[int] = None,
    ) -> None:
        self.message = message
        self.node = node
        self.item_index = item_index
        super().__init__(message)


class NodeApiError(NodeOperationError):
    """Error from external API call."""

    def __init__(
        self,
        message: str,
        node: Optional["BaseNode"] = None,
        code: Optional[str] = None,
        item_index: Optional[int] = None,
    ) -> None:
        super().__init__(message, node, item_index)
        self.code = code


__all__ = ["NodeOperationError", "NodeApiError"]
