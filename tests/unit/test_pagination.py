"""Tests for Web API cursor pagination helpers."""
import json

import pytest
from slack_sdk.errors import SlackApiError, SlackClientError
from slack_sdk.web import SlackResponse

from nodepacks.slack.pagination import (
    encode_params,
    error_code,
    iter_pages,
    next_cursor,
    paginate,
    response_body,
)


class TestResponseBody:
    """Test extracting response bodies."""

    def test_plain_dict(self):
        assert response_body({"ok": True}) == {"ok": True}

    def test_slack_response(self):
        response = SlackResponse(
            client=None,
            http_verb="POST",
            api_url="https://slack.com/api/auth.test",
            req_args={},
            data={"ok": True, "user": "bot"},
            headers={},
            status_code=200,
        )

        assert response_body(response) == {"ok": True, "user": "bot"}

    def test_slack_api_error(self):
        error = SlackApiError("failed", {"ok": False, "error": "channel_not_found"})

        assert response_body(error) == {"ok": False, "error": "channel_not_found"}

    def test_unexpected_body(self):
        assert response_body("<html>") == {"ok": False, "error": "invalid_response"}


class TestErrorCode:
    """Test error codes for failed calls."""

    def test_api_error_code(self):
        assert error_code(SlackApiError("failed", {"ok": False, "error": "ratelimited"})) == "ratelimited"

    def test_client_error_code(self):
        assert error_code(SlackClientError("boom")) == "SlackClientError"
        assert error_code(TimeoutError("timed out")) == "TimeoutError"


class TestEncodeParams:
    """Test form encoding of call options."""

    def test_encoding(self):
        params = encode_params({
            "channel": "C1",
            "limit": 100,
            "unfurl_links": False,
            "blocks": [{"type": "divider"}],
            "thread_ts": None,
        })

        assert params == {
            "channel": "C1",
            "limit": 100,
            "unfurl_links": False,
            "blocks": json.dumps([{"type": "divider"}]),
            "thread_ts": None,
        }


class TestIterPages:
    """Test following cursors."""

    def test_next_cursor(self, make_page):
        assert next_cursor(make_page(next_cursor="abc")) == "abc"
        assert next_cursor(make_page()) is None
        assert next_cursor({"ok": True}) is None

    def test_follows_cursor_until_empty(self, fake_client, make_page):
        fake_client.queue(
            "conversations.list",
            make_page(channels=[{"name": "general", "id": "C1"}], next_cursor="c2"),
            make_page(channels=[{"name": "random", "id": "C2"}], next_cursor="c3"),
            make_page(channels=[]),
        )

        pages = list(iter_pages(fake_client, "conversations.list", {"types": "public_channel"}))

        assert len(pages) == 3
        sent = fake_client.calls_to("conversations.list")
        assert [params.get("cursor") for params in sent] == [None, "c2", "c3"]
        assert all(params["types"] == "public_channel" for params in sent)

    def test_failed_page_raises(self, fake_client, make_page):
        fake_client.queue(
            "users.list",
            make_page(members=[], next_cursor="c2"),
            make_page(ok=False, error="ratelimited"),
        )

        pages = iter_pages(fake_client, "users.list")
        next(pages)

        with pytest.raises(SlackApiError):
            next(pages)


class TestPaginate:
    """Test folding pages."""

    def test_reduces_every_page(self, fake_client, make_page):
        fake_client.queue(
            "users.list",
            make_page(members=[{"id": "U1"}], next_cursor="c2"),
            make_page(members=[{"id": "U2"}, {"id": "U3"}]),
        )

        count = paginate(
            fake_client,
            "users.list",
            {},
            reduce=lambda total, p: total + len(p["members"]),
            initial=0,
        )

        assert count == 3

    def test_should_stop_checked_after_reduce(self, fake_client, make_page):
        fake_client.queue(
            "users.list",
            make_page(members=[{"id": "U1"}], next_cursor="c2"),
            make_page(members=[{"id": "U2"}], next_cursor="c3"),
        )

        ids = paginate(
            fake_client,
            "users.list",
            {},
            reduce=lambda acc, p: acc + [m["id"] for m in p["members"]],
            initial=[],
            should_stop=lambda p: True,
        )

        assert ids == ["U1"]
        assert len(fake_client.calls) == 1
