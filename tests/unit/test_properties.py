"""Tests for typed property selectors and context stores."""
import pytest

from src.node_sdk.basenode import BaseNode, NodeExecutionContext
from src.node_sdk.context import ContextStore
from src.node_sdk.errors import NodeOperationError
from src.node_sdk.properties import (
    SOURCE_TYPE_OPTIONS,
    SOURCE_TYPES,
    TARGET_TYPE_OPTIONS,
    TARGET_TYPES,
    evaluate_node_property,
    get_property,
    parse_property_path,
    set_property,
    write_node_property,
)


class EchoNode(BaseNode):
    type = "echo"

    def execute(self):
        return [self.get_input_data()]


@pytest.fixture
def node():
    echo = EchoNode()
    echo.set_context(
        NodeExecutionContext(
            parameters={},
            credentials={},
            input_data=[],
            flow_context=ContextStore("flow", {"channel": "#flow-channel"}),
            global_context=ContextStore("global", {"defaults": {"channel": "#global-channel"}}),
        )
    )
    return echo


class TestPropertyPaths:
    """Test path parsing, reading and writing."""

    def test_parse_mixed_path(self):
        assert parse_property_path("payload.items[0]['display name']") == [
            "payload", "items", 0, "display name",
        ]

    @pytest.mark.parametrize("path", ["", "   ", None])
    def test_parse_rejects_empty_path(self, path):
        with pytest.raises(NodeOperationError):
            parse_property_path(path)

    def test_get_nested_value(self):
        msg = {"payload": {"channels": [{"id": "C1"}, {"id": "C2"}]}}

        assert get_property(msg, "payload.channels[1].id") == "C2"

    def test_get_missing_value_is_none(self):
        msg = {"payload": {"channels": []}}

        assert get_property(msg, "payload.channels[3].id") is None
        assert get_property(msg, "topic.value") is None

    def test_get_keeps_falsy_values(self):
        assert get_property({"payload": 0}, "payload") == 0

    def test_set_creates_containers(self):
        msg = {}

        set_property(msg, "slack.targets[1]", "C2")

        assert msg == {"slack": {"targets": [None, "C2"]}}

    def test_set_without_create_missing(self):
        with pytest.raises(NodeOperationError, match="does not exist"):
            set_property({}, "slack.channel", "C1", create_missing=False)

    def test_set_through_scalar_fails(self):
        with pytest.raises(NodeOperationError, match="not a container"):
            set_property({"payload": "text"}, "payload.channel", "C1")


class TestEvaluateNodeProperty:
    """Test reading typed properties."""

    def test_msg_path(self, node):
        assert evaluate_node_property("payload.channel", "msg", node, {"payload": {"channel": "#general"}}) == "#general"

    def test_flow_and_global_stores(self, node):
        assert evaluate_node_property("channel", "flow", node, {}) == "#flow-channel"
        assert evaluate_node_property("defaults.channel", "global", node, {}) == "#global-channel"

    def test_node_context_store(self, node):
        node.node_context.set("last", "C9")

        assert evaluate_node_property("last", "nodeContext", node, {}) == "C9"

    def test_literals(self, node):
        assert evaluate_node_property("#general", "str", node, {}) == "#general"
        assert evaluate_node_property("42", "num", node, {}) == 42
        assert evaluate_node_property("2.5", "num", node, {}) == 2.5
        assert evaluate_node_property("true", "bool", node, {}) is True
        assert evaluate_node_property("no", "bool", node, {}) is False
        assert evaluate_node_property('["#a", "@b"]', "json", node, {}) == ["#a", "@b"]

    def test_env(self, node, monkeypatch):
        monkeypatch.setenv("SLACK_ALERT_CHANNEL", "#alerts")

        assert evaluate_node_property("SLACK_ALERT_CHANNEL", "env", node, {}) == "#alerts"

    def test_invalid_json(self, node):
        with pytest.raises(NodeOperationError, match="Invalid JSON"):
            evaluate_node_property("{oops", "json", node, {})

    def test_invalid_number(self, node):
        with pytest.raises(NodeOperationError, match="Invalid number"):
            evaluate_node_property("many", "num", node, {})

    def test_unknown_type(self, node):
        with pytest.raises(NodeOperationError, match="Unsupported property type"):
            evaluate_node_property("x", "jsonata", node, {})

    def test_selector_options_cover_source_types(self):
        assert [option["value"] for option in SOURCE_TYPE_OPTIONS] == list(SOURCE_TYPES)
        assert [option["value"] for option in TARGET_TYPE_OPTIONS] == list(TARGET_TYPES)
        assert all(option["name"] for option in SOURCE_TYPE_OPTIONS)


class TestWriteNodeProperty:
    """Test writing typed properties."""

    def test_write_msg_path(self, node):
        msg = {"payload": "#general"}

        write_node_property("slack.channel", "msg", node, msg, "C123")

        assert msg == {"payload": "#general", "slack": {"channel": "C123"}}

    def test_write_context_stores(self, node):
        write_node_property("resolved", "flow", node, {}, "C1")
        write_node_property("resolved", "global", node, {}, "C2")
        write_node_property("resolved", "nodeContext", node, {}, "C3")

        assert node.context_store("flow").get("resolved") == "C1"
        assert node.context_store("global").get("resolved") == "C2"
        assert node.context_store("node").get("resolved") == "C3"

    def test_unknown_target_writes_payload(self, node):
        msg = {"payload": "#general"}

        write_node_property("ignored", "str", node, msg, "C123")

        assert msg == {"payload": "C123"}


class TestContextStore:
    """Test the in-memory context store."""

    def test_get_with_default(self):
        store = ContextStore("flow", {"a": {"b": 1}})

        assert store.get("a.b") == 1
        assert store.get("a.c", "fallback") == "fallback"

    def test_set_delete_and_membership(self):
        store = ContextStore("global")
        store.set("lookups.general", "C1")

        assert "lookups.general" in store
        assert store.keys() == ["lookups"]
        assert len(store) == 1

        store.delete("lookups")

        assert "lookups.general" not in store
        assert store.to_dict() == {}

    def test_context_store_unknown_scope(self, node):
        with pytest.raises(NodeOperationError, match="Unknown context scope"):
            node.context_store("session")

    def test_shared_store_without_context(self):
        with pytest.raises(NodeOperationError, match="No context set"):
            EchoNode().context_store("flow")
