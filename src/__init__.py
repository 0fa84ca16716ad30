"""
Slack Web API Nodes

Workflow nodes exposing the Slack Web API, built on a small node SDK:
- node_sdk/: Node execution semantics (BaseNode, context stores, items)
- node_registry/: Plugin discovery for node packs
- config/: Settings (pydantic-settings)
- observability/: Structured logging

The nodes themselves live in nodepacks/slack.
"""

__version__ = "1.0.0"
