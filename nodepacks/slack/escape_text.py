"""
Slack text escaping node.

Slack mrkdwn treats ``&``, ``<`` and ``>`` as control characters; they must
be sent as HTML entities.
https://api.slack.com/reference/surfaces/formatting#escaping
"""

from __future__ import annotations

import re
from typing import List

from src.node_sdk.basenode import BaseNode, NodeExecutionData
from src.node_sdk.items import make_item, message_of
from src.node_sdk.properties import (
    SOURCE_TYPE_OPTIONS,
    TARGET_TYPE_OPTIONS,
    evaluate_node_property,
    write_node_property,
)


_ENTITIES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
}

_CONTROL_CHARACTERS = re.compile(r"[&<>]")


def escape_text(text: str) -> str:
    """Replace Slack control characters with their HTML entities."""
    return _CONTROL_CHARACTERS.sub(lambda match: _ENTITIES[match.group(0)], text)


class SlackEscapeTextNode(BaseNode):
    """Escape a text property for use in Slack messages."""

    type = "slack-escape-text"
    version = 1

    description = {
        "displayName": "Slack Escape Text",
        "name": "slackEscapeText",
        "icon": "file:slack.svg",
        "group": ["transform"],
        "description": "Escape &, < and > for Slack message text",
        "version": 1,
        "inputs": ["main"],
        "outputs": ["main"],
    }

    properties = {
        "parameters": [
            {
                "displayName": "Text",
                "name": "text",
                "type": "typedInput",
                "typeField": "textType",
                "default": "payload",
            },
            {
                "displayName": "Text Type",
                "name": "textType",
                "type": "options",
                "default": "msg",
                "options": SOURCE_TYPE_OPTIONS,
            },
            {
                "displayName": "Output",
                "name": "output",
                "type": "typedInput",
                "typeField": "outputType",
                "default": "payload",
            },
            {
                "displayName": "Output Type",
                "name": "outputType",
                "type": "options",
                "default": "msg",
                "options": TARGET_TYPE_OPTIONS,
            },
        ],
        "credentials": [],
    }

    def execute(self) -> List[List[NodeExecutionData]]:
        items = self.get_input_data()
        text = self.get_node_parameter("text", 0, "payload")
        text_type = self.get_node_parameter("textType", 0, "msg")
        output = self.get_node_parameter("output", 0, "payload")
        output_type = self.get_node_parameter("outputType", 0, "msg")

        results: List[NodeExecutionData] = []
        for i, item in enumerate(items):
            msg = message_of(item)
            value = evaluate_node_property(text, text_type, self, msg)
            if value:
                write_node_property(output, output_type, self, msg, escape_text(str(value)))
            results.append(make_item(msg, i))

        return [results]


__all__ = [
    "SlackEscapeTextNode",
    "escape_text",
]
