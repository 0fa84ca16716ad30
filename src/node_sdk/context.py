"""
Context Stores - Key/value state scoped to a node, a flow or the process.

Node stores live as long as the node instance. Flow and global stores are
owned by the host and handed to nodes through NodeExecutionContext.
Keys may be property paths (``"lookups.general"``).
"""

from __future__ import annotations

from typing import Any, Dict, Iterator, List, Optional

from .properties import get_property, set_property


class ContextStore:
    """In-memory context store."""

    def __init__(self, scope: str, data: Optional[Dict[str, Any]] = None) -> None:
        self.scope = scope
        self._data: Dict[str, Any] = dict(data or {})

    def get(self, key: str, default: Any = None) -> Any:
        value = get_property(self._data, key)
        return default if value is None else value

    def set(self, key: str, value: Any) -> None:
        set_property(self._data, key, value, create_missing=True)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> List[str]:
        return list(self._data.keys())

    def clear(self) -> None:
        self._data.clear()

    def to_dict(self) -> Dict[str, Any]:
        return dict(self._data)

    def __contains__(self, key: str) -> bool:
        return get_property(self._data, key) is not None

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"ContextStore(scope={self.scope!r}, keys={self.keys()!r})"


__all__ = ["ContextStore"]
