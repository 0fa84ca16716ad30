"""
Node Properties - Typed property selectors for reading and writing values.

A node parameter such as ``channel`` is paired with a type selector
(``channelType``) that says where the value comes from:

- msg:         path into the current message (``payload.channel``, ``data[0].id``)
- flow:        key in the flow-scoped context store
- global:      key in the process-wide context store
- nodeContext: key in the node's own context store
- str/num/bool/json: literal values
- env:         environment variable

Outputs are written the same way to msg, nodeContext, flow or global.
"""

from __future__ import annotations

import json
import os
import re
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Union

from .errors import NodeOperationError

if TYPE_CHECKING:
    from .basenode import BaseNode


PathSegment = Union[str, int]

_PATH_TOKEN = re.compile(r"""\[(?:(\d+)|'([^']*)'|"([^"]*)")\]|([^.\[\]]+)""")

SOURCE_TYPES = ("msg", "flow", "global", "nodeContext", "str", "num", "bool", "json", "env")
TARGET_TYPES = ("msg", "nodeContext", "flow", "global")

_TYPE_LABELS = {
    "msg": "Message Property",
    "flow": "Flow Context",
    "global": "Global Context",
    "nodeContext": "Node Context",
    "str": "String",
    "num": "Number",
    "bool": "Boolean",
    "json": "JSON",
    "env": "Environment Variable",
}

# Choices for typedInput selectors, in the order the editor lists them
SOURCE_TYPE_OPTIONS = [{"name": _TYPE_LABELS[t], "value": t} for t in SOURCE_TYPES]
TARGET_TYPE_OPTIONS = [{"name": _TYPE_LABELS[t], "value": t} for t in TARGET_TYPES]


_STORE_SCOPES = {"nodeContext": "node", "flow": "flow", "global": "global"}


def parse_property_path(path: str) -> List[PathSegment]:
    """
    Split a property path into key and index segments.

    ``"payload.items[0]['display name']"`` -> ``["payload", "items", 0, "display name"]``
    """
    if not isinstance(path, str) or not path.strip():
        raise NodeOperationError(f"Invalid property path: {path!r}")

    segments: List[PathSegment] = []
    for match in _PATH_TOKEN.finditer(path.strip()):
        index, single_quoted, double_quoted, bare = match.groups()
        if index is not None:
            segments.append(int(index))
        elif single_quoted is not None:
            segments.append(single_quoted)
        elif double_quoted is not None:
            segments.append(double_quoted)
        else:
            segments.append(bare)

    leftover = _PATH_TOKEN.sub("", path.strip()).replace(".", "")
    if leftover or not segments:
        raise NodeOperationError(f"Invalid property path: {path!r}")
    return segments


def get_property(obj: Any, path: str) -> Any:
    """Read a path from nested dicts/lists. Missing segments yield None."""
    current = obj
    for segment in parse_property_path(path):
        if isinstance(current, dict):
            current = current.get(segment)
        elif isinstance(current, (list, tuple)) and isinstance(segment, int):
            current = current[segment] if segment < len(current) else None
        else:
            return None
        if current is None:
            return None
    return current


def set_property(
    obj: Dict[str, Any],
    path: str,
    value: Any,
    create_missing: bool = True,
) -> None:
    """
    Write a value at a path, creating intermediate containers when allowed.

    Raises:
        NodeOperationError: If an intermediate segment is missing and
            create_missing is False, or the path crosses a scalar value.
    """
    segments = parse_property_path(path)
    current: Any = obj

    for position, segment in enumerate(segments[:-1]):
        next_segment = segments[position + 1]
        child = _get_child(current, segment)
        if child is None:
            if not create_missing:
                raise NodeOperationError(f"Cannot set '{path}': '{segment}' does not exist")
            child = [] if isinstance(next_segment, int) else {}
            _set_child(current, segment, child, path)
        elif not isinstance(child, (dict, list)):
            raise NodeOperationError(f"Cannot set '{path}': '{segment}' is not a container")
        current = child

    _set_child(current, segments[-1], value, path)


def _get_child(container: Any, segment: PathSegment) -> Any:
    if isinstance(container, dict):
        return container.get(segment)
    if isinstance(container, list) and isinstance(segment, int):
        return container[segment] if segment < len(container) else None
    return None


def _set_child(container: Any, segment: PathSegment, value: Any, path: str) -> None:
    if isinstance(container, dict):
        container[segment] = value
    elif isinstance(container, list) and isinstance(segment, int):
        if segment >= len(container):
            container.extend([None] * (segment - len(container) + 1))
        container[segment] = value
    else:
        raise NodeOperationError(f"Cannot set '{path}': invalid segment {segment!r}")


def evaluate_node_property(
    value: Any,
    value_type: str,
    node: "BaseNode",
    msg: Dict[str, Any],
) -> Any:
    """
    Resolve a typed node property against the node and current message.

    Args:
        value: Configured property value (a path, key or literal)
        value_type: One of SOURCE_TYPES
        node: Node whose context stores are consulted
        msg: Current message

    Returns:
        The resolved value (None when a path or key is missing)
    """
    if value_type not in SOURCE_TYPES:
        raise NodeOperationError(f"Unsupported property type: {value_type}", node)

    if value_type == "msg":
        return get_property(msg, value)
    if value_type in _STORE_SCOPES:
        return node.context_store(_STORE_SCOPES[value_type]).get(value)
    if value_type == "str":
        return "" if value is None else str(value)
    if value_type == "num":
        return _parse_number(value)
    if value_type == "bool":
        return value if isinstance(value, bool) else str(value).strip().lower() == "true"
    if value_type == "json":
        if not isinstance(value, str):
            return value
        try:
            return json.loads(value)
        except json.JSONDecodeError as e:
            raise NodeOperationError(f"Invalid JSON property: {e}", node) from e
    return os.environ.get(str(value))


def write_node_property(
    target: str,
    target_type: Optional[str],
    node: "BaseNode",
    msg: Dict[str, Any],
    value: Any,
) -> None:
    """
    Write a value to the configured destination.

    Unknown destination types fall back to ``msg.payload``.
    """
    if target_type == "msg":
        set_property(msg, target, value, create_missing=True)
    elif target_type in _STORE_SCOPES:
        node.context_store(_STORE_SCOPES[target_type]).set(target, value)
    else:
        msg["payload"] = value


def _parse_number(value: Any) -> Union[int, float]:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    text = str(value).strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError as e:
        raise NodeOperationError(f"Invalid number property: {value!r}") from e


__all__ = [
    "SOURCE_TYPES",
    "TARGET_TYPES",
    "SOURCE_TYPE_OPTIONS",
    "TARGET_TYPE_OPTIONS",
    "parse_property_path",
    "get_property",
    "set_property",
    "evaluate_node_property",
    "write_node_property",
]
