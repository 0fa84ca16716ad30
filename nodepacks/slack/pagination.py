"""
Cursor pagination over the Slack Web API.

Slack returns ``response_metadata.next_cursor`` while more results exist;
the next request sends it back as ``cursor``. An empty cursor ends the
sequence.

See https://api.slack.com/docs/pagination
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, Iterator, Mapping, Optional, TypeVar

from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError


logger = logging.getLogger(__name__)

T = TypeVar("T")

Page = Dict[str, Any]


def response_body(response: Any) -> Page:
    """Body of a SlackResponse (or of the response carried by a SlackApiError)."""
    if isinstance(response, SlackApiError):
        response = response.response
    data = getattr(response, "data", response)
    if isinstance(data, Mapping):
        return dict(data)
    return {"ok": False, "error": "invalid_response"}


def error_code(exc: BaseException) -> str:
    """Short code for an exception raised during a Slack call."""
    if isinstance(exc, SlackApiError):
        return str(response_body(exc).get("error") or "slack_api_error")
    return type(exc).__name__


def encode_params(options: Mapping[str, Any]) -> Dict[str, Any]:
    """
    JSON-encode nested call options (blocks, attachments, ...).

    Everything else is passed through; the client drops None values and
    sends booleans as 1/0.
    """
    return {
        key: json.dumps(value) if isinstance(value, (dict, list, tuple)) else value
        for key, value in options.items()
    }


def next_cursor(page: Page) -> Optional[str]:
    metadata = page.get("response_metadata") or {}
    return metadata.get("next_cursor") or None


def iter_pages(
    client: WebClient,
    method: str,
    options: Optional[Mapping[str, Any]] = None,
) -> Iterator[Page]:
    """
    Yield successive pages of a cursor-paginated method.

    Raises:
        SlackApiError: A page reported ``ok: false``
        SlackClientError, OSError: Transport failures
    """
    params = dict(options or {})
    while True:
        page = response_body(client.api_call(method, params=encode_params(params)))
        yield page

        cursor = next_cursor(page)
        if not cursor:
            return
        logger.debug(f"{method}: following cursor {cursor}")
        params["cursor"] = cursor


def paginate(
    client: WebClient,
    method: str,
    options: Optional[Mapping[str, Any]],
    reduce: Callable[[T, Page], T],
    initial: T,
    should_stop: Optional[Callable[[Page], bool]] = None,
) -> T:
    """
    Fold every page of a method into an accumulator.

    ``should_stop`` is checked after each page has been reduced.
    """
    accumulator = initial
    for page in iter_pages(client, method, options):
        accumulator = reduce(accumulator, page)
        if should_stop is not None and should_stop(page):
            break
    return accumulator


__all__ = [
    "Page",
    "encode_params",
    "error_code",
    "iter_pages",
    "next_cursor",
    "paginate",
    "response_body",
]
