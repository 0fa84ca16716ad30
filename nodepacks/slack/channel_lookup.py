"""
Slack channel lookup node.

Turns ``#channel`` and ``@user`` references into the channel-like IDs the
Web API expects. Passing user names as channels is deprecated by Slack:
https://api.slack.com/changelog/2017-09-the-one-about-usernames
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from slack_sdk.errors import SlackApiError, SlackClientError

from src.config import get_settings
from src.node_sdk.basenode import BaseNode, NodeExecutionData
from src.node_sdk.errors import NodeApiError, NodeOperationError
from src.node_sdk.items import make_item, message_of
from src.node_sdk.properties import (
    SOURCE_TYPE_OPTIONS,
    TARGET_TYPE_OPTIONS,
    evaluate_node_property,
    write_node_property,
)

from .client_config import SlackWebClientConfig
from .pagination import Page, error_code, paginate, response_body


CONVERSATION_TYPES = "public_channel,private_channel"


@dataclass
class Directory:
    """Name -> ID tables for the workspace's channels and users."""
    channels: Dict[str, str] = field(default_factory=dict)
    users: Dict[str, str] = field(default_factory=dict)

    def resolve(self, reference: str) -> Optional[str]:
        """Map one reference to an ID; None when the name is unknown."""
        if reference.startswith("#"):
            return self.channels.get(reference[1:])
        if reference.startswith("@"):
            return self.users.get(reference[1:])
        # C..., G..., D... and anything else pass through
        return reference


def split_references(names_or_ids: Union[str, Sequence[Any]]) -> List[str]:
    """Normalize a comma separated string or a list into references."""
    if isinstance(names_or_ids, (list, tuple)):
        return [str(name) for name in names_or_ids if name]
    return [name.strip() for name in str(names_or_ids).split(",") if name.strip()]


def is_group_of_user_ids(ids: Sequence[str]) -> bool:
    return len(ids) > 1 and all(id_.startswith("U") for id_ in ids)


def _index_by_name(key: str):
    def reduce(table: Dict[str, str], page: Page) -> Dict[str, str]:
        for entry in page.get(key) or []:
            table[entry["name"]] = entry["id"]
        return table
    return reduce


class SlackChannelLookupNode(BaseNode):
    """
    Resolve channel references to channel-like IDs.

    Emits exactly one message per input message.
    """

    type = "slack-channel-lookup"
    version = 1

    description = {
        "displayName": "Slack Channel Lookup",
        "name": "slackChannelLookup",
        "icon": "file:slack.svg",
        "group": ["transform"],
        "description": "Resolve #channel and @user names to Slack IDs",
        "version": 1,
        "inputs": ["main"],
        "outputs": ["main"],
    }

    properties = {
        "parameters": [
            {
                "displayName": "Channel",
                "name": "channel",
                "type": "typedInput",
                "typeField": "channelType",
                "default": "payload",
                "description": "Comma separated #channel, @user or ID references",
            },
            {
                "displayName": "Channel Type",
                "name": "channelType",
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
            {
                "displayName": "Group Conversations",
                "name": "groupConversations",
                "type": "boolean",
                "default": False,
                "description": "Open a group DM when every reference resolves to a user",
            },
            {
                "displayName": "Directory Cache (s)",
                "name": "cacheTtl",
                "type": "number",
                "default": None,
                "description": "Seconds to reuse the channel and user directories; 0 rebuilds them on every message",
            },
        ],
        "credentials": [],
    }

    def __init__(
        self,
        client_config: SlackWebClientConfig,
        name: Optional[str] = None,
        cache_ttl: Optional[float] = None,
    ) -> None:
        super().__init__(name)
        self.client_config = client_config
        self.web_client = client_config.web_client
        self.cache_ttl = cache_ttl
        self._directory: Optional[Directory] = None
        self._directory_loaded_at = 0.0

    def execute(self) -> List[List[NodeExecutionData]]:
        """Resolve the configured channel property of every input message."""
        items = self.get_input_data()
        channel = self.get_node_parameter("channel", 0, "payload")
        channel_type = self.get_node_parameter("channelType", 0, "msg")
        output = self.get_node_parameter("output", 0, "payload")
        output_type = self.get_node_parameter("outputType", 0, "msg")
        group_conversations = bool(self.get_node_parameter("groupConversations", 0, False))

        results: List[NodeExecutionData] = []
        for i, item in enumerate(items):
            msg = message_of(item)
            value = evaluate_node_property(channel, channel_type, self, msg)

            if value:
                try:
                    resolved = self.channel_like_ids(value, group_conversations=group_conversations)
                except NodeApiError as e:
                    if not self.continue_on_fail:
                        e.item_index = i
                        raise
                    results.append(make_item({**msg, "error": e.message, "code": e.code}, i))
                    continue
                write_node_property(output, output_type, self, msg, resolved)

            results.append(make_item(msg, i))

        return [results]

    def channel_like_ids(
        self,
        names_or_ids: Union[str, Sequence[Any]],
        group_conversations: bool = False,
    ) -> str:
        """
        Resolve references to a comma separated ID string.

        Unknown names are dropped. When grouping is enabled and more than one
        user ID remains, a group DM is opened and its channel ID returned.
        """
        references = split_references(names_or_ids)
        if not references:
            return ""

        directory = self.directory()
        ids = [resolved for resolved in (directory.resolve(ref) for ref in references) if resolved]

        if group_conversations and is_group_of_user_ids(ids):
            channel_id = self._open_conversation(ids)
            if channel_id:
                return channel_id

        return ",".join(ids)

    def directory(self) -> Directory:
        """Channel and user tables, reused while the cache TTL allows."""
        ttl = self._cache_ttl()
        now = time.monotonic()
        if self._directory is not None and ttl > 0 and now - self._directory_loaded_at < ttl:
            return self._directory

        directory = self._load_directory()
        if ttl > 0:
            self._directory = directory
            self._directory_loaded_at = now
        return directory

    def invalidate_cache(self) -> None:
        self._directory = None
        self._directory_loaded_at = 0.0

    def _load_directory(self) -> Directory:
        try:
            channels = paginate(
                self.web_client,
                "conversations.list",
                {"types": CONVERSATION_TYPES},
                reduce=_index_by_name("channels"),
                initial={},
            )
            users = paginate(
                self.web_client,
                "users.list",
                {},
                reduce=_index_by_name("members"),
                initial={},
            )
        except (SlackClientError, OSError) as e:
            code = error_code(e)
            self.logger.error(f"Directory lookup failed: {e}")
            raise NodeApiError(f"Directory lookup failed: {e}", self, code=code) from e

        self.logger.debug(f"Loaded {len(channels)} channels and {len(users)} users")
        return Directory(channels=channels, users=users)

    def _open_conversation(self, user_ids: Iterable[str]) -> Optional[str]:
        users = ",".join(user_ids)
        try:
            body = response_body(self.web_client.conversations_open(users=users))
        except SlackApiError as e:
            self.logger.warning(f"conversations.open failed for {users}: {error_code(e)}")
            return None
        except (SlackClientError, OSError) as e:
            raise NodeApiError(f"conversations.open failed: {e}", self, code=error_code(e)) from e

        if not body.get("ok"):
            return None
        return (body.get("channel") or {}).get("id")

    def _cache_ttl(self) -> float:
        value = self.get_node_parameter("cacheTtl", 0, None)
        if value in (None, ""):
            value = self.cache_ttl
        if value is None:
            value = get_settings().directory_cache_ttl_s
        try:
            ttl = float(value)
        except (TypeError, ValueError) as e:
            raise NodeOperationError(f"Invalid cache TTL: {value!r}", self) from e
        if ttl < 0:
            raise NodeOperationError(f"Invalid cache TTL: {value!r}", self)
        return ttl


__all__ = [
    "Directory",
    "SlackChannelLookupNode",
    "is_group_of_user_ids",
    "split_references",
]
