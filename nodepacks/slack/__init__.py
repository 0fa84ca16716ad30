"""
Slack Node Pack - Slack Web API nodes.

This pack provides:
- SlackWebClientConfig: Shared, authenticated Web API client (config node)
- SlackWebClientNode: Call any Web API method, optionally paginated
- SlackChannelLookupNode: Resolve #channel / @user references to IDs
- SlackEscapeTextNode: Escape &, < and > for message text

All nodes share one WebClient per config node and run synchronously.
"""

from .channel_lookup import SlackChannelLookupNode
from .client_config import SlackWebClientConfig
from .escape_text import SlackEscapeTextNode, escape_text
from .manifest import MANIFEST, register_nodes
from .web_client import InvocationResult, SlackWebClientNode

__all__ = [
    "SlackWebClientConfig",
    "SlackWebClientNode",
    "SlackChannelLookupNode",
    "SlackEscapeTextNode",
    "InvocationResult",
    "escape_text",
    "MANIFEST",
    "register_nodes",
]
