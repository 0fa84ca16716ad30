"""
Slack Web API client configuration node.

Holds the single authenticated WebClient shared by the other Slack nodes.
The client logs through this node's logger, so library diagnostics end up
in the host's per-node log output at whatever level the host configured.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError, SlackClientError

from src.config import Settings, get_settings
from src.node_registry.models import CredentialDefinition
from src.node_sdk.basenode import BaseNode, NodeExecutionContext, NodeExecutionData
from src.node_sdk.errors import NodeOperationError

from .pagination import error_code, response_body


CREDENTIAL_NAME = "slackWebClientApi"

SLACK_WEBCLIENT_CREDENTIAL = CredentialDefinition(
    name=CREDENTIAL_NAME,
    displayName="Slack Web API",
    description="Bot or user token used by the Slack Web API nodes.",
    properties=[
        {
            "name": "token",
            "displayName": "Token",
            "type": "password",
            "required": True,
            "default": "",
            "description": "Bot User OAuth Token (xoxb-) or user token (xoxp-)",
        },
    ],
)


class SlackWebClientConfig(BaseNode):
    """
    Config node owning one slack_sdk WebClient.

    Retry policy, rate limiting and request concurrency are left at the
    client library defaults.
    """

    type = "slack-webclient-config"
    version = 1

    description = {
        "displayName": "Slack Web API Config",
        "name": "slackWebClientConfig",
        "icon": "file:slack.svg",
        "group": ["config"],
        "description": "Shared Slack Web API client",
        "version": 1,
        "inputs": [],
        "outputs": [],
    }

    properties = {
        "parameters": [],
        "credentials": [
            {"name": CREDENTIAL_NAME, "required": True},
        ],
    }

    def __init__(
        self,
        token: Optional[str] = None,
        name: Optional[str] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        super().__init__(name)
        settings = settings or get_settings()

        if not token and settings.token is not None:
            token = settings.token.get_secret_value()
        if not token:
            raise NodeOperationError(
                f"Slack token not found. Configure the '{CREDENTIAL_NAME}' credential "
                "or set SLACK_NODES_TOKEN.",
                self,
            )

        self.web_client = WebClient(
            token=token,
            base_url=settings.slack_base_url,
            timeout=settings.slack_timeout_s,
            logger=self.logger,
        )

    @classmethod
    def from_context(
        cls,
        context: NodeExecutionContext,
        name: Optional[str] = None,
        settings: Optional[Settings] = None,
    ) -> "SlackWebClientConfig":
        """Build the config node from the credential held by an execution context."""
        token = None
        if context.has_credentials(CREDENTIAL_NAME):
            token = context.get_credentials(CREDENTIAL_NAME).get("token")
        config = cls(token=token, name=name, settings=settings)
        config.set_context(context)
        return config

    def execute(self) -> List[List[NodeExecutionData]]:
        """Config nodes take no part in the data flow."""
        return [list(self.get_input_data())]

    def test(self) -> Dict[str, Any]:
        """
        Check the token with auth.test.

        Returns:
            Dictionary with test results (success, message)
        """
        try:
            body = response_body(self.web_client.auth_test())
        except SlackApiError as e:
            return {
                "success": False,
                "message": f"Slack API error: {error_code(e)}",
            }
        except (SlackClientError, OSError) as e:
            return {
                "success": False,
                "message": f"Network error testing Slack token: {error_code(e)}",
            }

        team = body.get("team") or "unknown team"
        user = body.get("user") or "unknown user"
        return {
            "success": True,
            "message": f"Connected to Slack as {user} ({team})",
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


__all__ = [
    "CREDENTIAL_NAME",
    "SLACK_WEBCLIENT_CREDENTIAL",
    "SlackWebClientConfig",
]
