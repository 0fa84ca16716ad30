"""
Slack Node Pack Manifest - Registration function for entry-points.
"""

from src.node_registry.models import NodePackManifest
from .channel_lookup import SlackChannelLookupNode
from .client_config import SLACK_WEBCLIENT_CREDENTIAL, SlackWebClientConfig
from .escape_text import SlackEscapeTextNode
from .web_client import SlackWebClientNode


MANIFEST = NodePackManifest(
    name="slack",
    version="1.0.0",
    description="Slack Web API nodes: method calls, channel lookup and text escaping",
    author="slack-webclient-nodes",
    license="MIT",
    nodes=[
        "slack-webclient-config",
        "slack-webclient",
        "slack-channel-lookup",
        "slack-escape-text",
    ],
    credentials=[SLACK_WEBCLIENT_CREDENTIAL],
    entry_point="nodepacks.slack",
)


# Node classes by type
NODE_CLASSES = {
    "slack-webclient-config": SlackWebClientConfig,
    "slack-webclient": SlackWebClientNode,
    "slack-channel-lookup": SlackChannelLookupNode,
    "slack-escape-text": SlackEscapeTextNode,
}


def register_nodes():
    """
    Entry point function for node pack discovery.

    Returns tuple of (manifest, node_classes).
    """
    return MANIFEST, NODE_CLASSES


__all__ = [
    "MANIFEST",
    "NODE_CLASSES",
    "register_nodes",
]
