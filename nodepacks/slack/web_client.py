"""
Slack Web API method node.

Calls any Web API method with the message payload as arguments, either once
or across every page of a cursor-paginated method. Responses with
``ok: false`` are routed to the second output instead of being raised.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from slack_sdk.errors import SlackApiError, SlackClientError

from src.config import get_settings
from src.node_sdk.basenode import BaseNode, NodeExecutionData
from src.node_sdk.errors import NodeApiError, NodeOperationError
from src.node_sdk.expressions import ExpressionError, Predicate, compile_predicate, never_stop
from src.node_sdk.items import make_item, message_of, stamp_parts
from src.observability import with_node_context

from .client_config import SlackWebClientConfig
from .pagination import Page, encode_params, error_code, iter_pages, response_body


@dataclass
class InvocationResult:
    """Outcome of one method invocation: every message goes to one output."""
    ok: bool
    messages: List[Dict[str, Any]] = field(default_factory=list)
    pages: List[Page] = field(default_factory=list)

    @property
    def error(self) -> Optional[str]:
        """Error text of the first failing page."""
        for page in self.pages:
            if not page.get("ok"):
                return page.get("error")
        return None

    def route(self) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
        """(success messages, failure messages)"""
        if self.ok:
            return self.messages, []
        return [], self.messages


class SlackWebClientNode(BaseNode):
    """
    Slack Web API node.

    Output 0 receives successful responses, output 1 responses whose ``ok``
    is false. With pagination, each page is one message and the pages of an
    invocation form one ``parts`` group.
    """

    type = "slack-webclient"
    version = 1

    description = {
        "displayName": "Slack Web API",
        "name": "slackWebClient",
        "icon": "file:slack.svg",
        "group": ["output"],
        "description": "Call a Slack Web API method",
        "version": 1,
        "inputs": ["main"],
        "outputs": ["main", "main"],
        "outputNames": ["ok", "error"],
    }

    properties = {
        "parameters": [
            {
                "displayName": "Method",
                "name": "methodName",
                "type": "string",
                "default": "",
                "required": True,
                "placeholder": "chat.postMessage",
                "description": "Web API method; msg.payload supplies its arguments",
            },
            {
                "displayName": "Paginate",
                "name": "paginate",
                "type": "boolean",
                "default": False,
                "description": "Follow response_metadata.next_cursor and emit one message per page",
            },
            {
                "displayName": "Page Limit",
                "name": "pageLimit",
                "type": "number",
                "default": None,
                "description": "Page size sent as 'limit' when the payload does not set one",
                "displayOptions": {"show": {"paginate": [True]}},
            },
            {
                "displayName": "Stop When",
                "name": "shouldStopExpression",
                "type": "string",
                "default": "",
                "placeholder": "len(messages) < 100",
                "description": "Expression evaluated against each page; pagination stops when it is true",
                "displayOptions": {"show": {"paginate": [True]}},
            },
        ],
        "credentials": [],
    }

    def __init__(self, client_config: SlackWebClientConfig, name: Optional[str] = None) -> None:
        super().__init__(name)
        self.client_config = client_config
        self.web_client = client_config.web_client

    def execute(self) -> List[List[NodeExecutionData]]:
        """Invoke the configured method once per input message."""
        items = self.get_input_data()
        method_name = self.get_node_parameter("methodName", 0, "")
        if not method_name:
            raise NodeOperationError("Method name is required", self)

        paginate = bool(self.get_node_parameter("paginate", 0, False))
        page_limit = self._page_limit()
        try:
            should_stop = compile_predicate(self.get_node_parameter("shouldStopExpression", 0, ""))
        except ExpressionError as e:
            raise NodeOperationError(f"Invalid stop expression: {e}", self) from e

        success: List[NodeExecutionData] = []
        failure: List[NodeExecutionData] = []

        for i, item in enumerate(items):
            try:
                result = self.invoke(
                    method_name,
                    message_of(item),
                    paginate=paginate,
                    page_limit=page_limit,
                    should_stop=should_stop,
                )
            except NodeApiError as e:
                if not self.continue_on_fail:
                    e.item_index = i
                    raise
                failure.append(make_item({"error": e.message, "code": e.code}, i))
                continue

            ok_messages, failed_messages = result.route()
            success.extend(make_item(message, i) for message in ok_messages)
            failure.extend(make_item(message, i) for message in failed_messages)

        return [success, failure]

    def invoke(
        self,
        method_name: str,
        msg: Dict[str, Any],
        paginate: bool = False,
        page_limit: Optional[int] = None,
        should_stop: Predicate = never_stop,
    ) -> InvocationResult:
        """
        Call a method for one message.

        Raises:
            NodeApiError: The call failed below the API level (transport,
                client or stop-expression failure). Pages fetched so far are
                discarded.
        """
        payload = msg.get("payload")
        options = dict(payload) if isinstance(payload, Mapping) else {}

        try:
            if paginate:
                if page_limit is not None and not options.get("limit"):
                    options["limit"] = page_limit
                pages = self._fetch_pages(method_name, options, should_stop)
                messages = stamp_parts([{"payload": page} for page in pages])
            else:
                page = self._call(method_name, options)
                pages = [page]
                msg["payload"] = page
                messages = [msg]
        except (SlackClientError, OSError, ExpressionError) as e:
            code = error_code(e)
            self.set_status("red", code)
            self.logger.error(
                f"{method_name} failed: {e}",
                extra=with_node_context(node_type=self.type, node_name=self.name),
            )
            raise NodeApiError(f"{method_name} failed: {e}", self, code=code) from e

        result = InvocationResult(
            ok=all(page.get("ok") for page in pages),
            messages=messages,
            pages=pages,
        )

        if result.ok:
            self.set_status("green", "ok")
        else:
            self.set_status("yellow", result.error or "(see logs)")
            self.logger.warning(f"{method_name} returned ok=false: {result.error}")

        return result

    def _call(self, method_name: str, options: Dict[str, Any]) -> Page:
        try:
            return response_body(self.web_client.api_call(method_name, params=encode_params(options)))
        except SlackApiError as e:
            return response_body(e)

    def _fetch_pages(self, method_name: str, options: Dict[str, Any], should_stop: Predicate) -> List[Page]:
        pages: List[Page] = []
        try:
            for page in iter_pages(self.web_client, method_name, options):
                pages.append(page)
                if should_stop(page):
                    break
        except SlackApiError as e:
            # A failed page ends the sequence but is still delivered
            pages.append(response_body(e))
        return pages

    def _page_limit(self) -> Optional[int]:
        value = self.get_node_parameter("pageLimit", 0, None)
        if not value:
            return get_settings().default_page_limit
        try:
            return int(value)
        except (TypeError, ValueError) as e:
            raise NodeOperationError(f"Invalid page limit: {value!r}", self) from e


__all__ = [
    "InvocationResult",
    "SlackWebClientNode",
]
