"""
Node Items - Messages flowing through workflows.

Each input/output item wraps one message under the ``json`` key.
A message is a plain dict carrying ``payload`` plus any envelope fields.

Messages that belong to one logical multi-part result carry a ``parts``
descriptor; the final message of the group is marked ``complete``.
"""

from __future__ import annotations

import copy
import uuid
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Parts(BaseModel):
    """
    Group descriptor correlating messages of one multi-part result.

    Downstream nodes can reassemble the group by ``id`` in ``index`` order.
    """
    model_config = ConfigDict(extra="forbid")

    id: str = Field(..., description="Group identifier shared by all parts")
    index: int = Field(..., description="Position of this part", ge=0)
    count: int = Field(..., description="Total number of parts", ge=1)
    type: str = Field("array", description="How the parts were produced")


def generate_id() -> str:
    """Fresh identifier for a message group."""
    return uuid.uuid4().hex


def message_of(item: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of the message carried by an input item."""
    message = item.get("json")
    return copy.deepcopy(message) if isinstance(message, dict) else {}


def make_item(message: Dict[str, Any], item_index: Optional[int] = None) -> Dict[str, Any]:
    """Wrap a message as an output item."""
    item: Dict[str, Any] = {"json": message}
    if item_index is not None:
        item["pairedItem"] = {"item": item_index}
    return item


def stamp_parts(messages: List[Dict[str, Any]], group_id: Optional[str] = None) -> List[Dict[str, Any]]:
    """
    Tag messages as one group.

    Every message gets ``parts`` with the final count; only the last one gets
    ``complete: True``.
    """
    group_id = group_id or generate_id()
    count = len(messages)
    for index, message in enumerate(messages):
        message["parts"] = Parts(id=group_id, index=index, count=count).model_dump()
        if index == count - 1:
            message["complete"] = True
        else:
            message.pop("complete", None)
    return messages


__all__ = [
    "Parts",
    "generate_id",
    "message_of",
    "make_item",
    "stamp_parts",
]
