"""Response decoding -- maps :class:`httpx.Response` bodies to typed results.

This module sits between the HTTP clients and the caller. After a request
succeeds with HTTP 200, the clients hand the raw response to the helpers here,
which decode the JSON envelope and build :class:`~storyblok_cdn.models.Story`
entities. Any deviation from the expected envelope is reported as
:class:`~storyblok_cdn.exceptions.MalformedResponseError`.

Envelopes::

    spaces/me         -> {"space": {"version": 1700000000, ...}}
    stories/<id>      -> {"story": {...}}
    stories           -> {"stories": [{...}, ...]}
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from storyblok_cdn.exceptions import MalformedResponseError
from storyblok_cdn.models import Story


@dataclass
class StoryblokResponse:
    """Result of a story fetch: the raw response plus the decoded stories.

    ``stories`` always holds a single element for
    :meth:`~storyblok_cdn.client.StoryblokClient.fetch_one`.
    """

    response: httpx.Response
    stories: list[Story] = field(default_factory=list)

    @property
    def story(self) -> Optional[Story]:
        """The first story, or ``None`` for an empty page."""
        return self.stories[0] if self.stories else None

    @property
    def status_code(self) -> int:
        return self.response.status_code

    @property
    def headers(self) -> httpx.Headers:
        return self.response.headers

    @property
    def total(self) -> Optional[int]:
        """Total number of matching stories from the ``Total`` header.

        The delivery API only sets it on multi-story responses. Returns
        ``None`` when the header is absent or not an integer.
        """
        value = self.response.headers.get("total")
        if value is None:
            return None
        try:
            return int(value)
        except ValueError:
            return None


def decode_json(response: httpx.Response) -> Any:
    """Decode the response body as JSON.

    Raises:
        MalformedResponseError: If the body is empty or not valid JSON.
    """
    if not response.content:
        raise MalformedResponseError("Empty response body from Storyblok")
    try:
        return response.json()
    except ValueError as exc:
        raise MalformedResponseError(f"Response from Storyblok is not valid JSON: {exc}") from exc


def parse_stories(response: httpx.Response, multiple: bool) -> list[Story]:
    """Decode a story envelope into :class:`~storyblok_cdn.models.Story` objects.

    Args:
        response: A successful delivery API response.
        multiple: ``True`` for a ``stories`` list envelope, ``False`` for a
            single ``story`` object envelope.

    Returns:
        The stories in response order; one element when *multiple* is false.

    Raises:
        MalformedResponseError: If the envelope key is missing, has the wrong
            shape, or a story fails validation.
    """
    body = decode_json(response)
    key = "stories" if multiple else "story"
    if not isinstance(body, dict) or key not in body:
        raise MalformedResponseError(f"Response from Storyblok has no '{key}' key")

    payload = body[key]
    if multiple:
        if not isinstance(payload, list):
            raise MalformedResponseError("Expected 'stories' to be a list")
        items = payload
    else:
        if not isinstance(payload, dict):
            raise MalformedResponseError("Expected 'story' to be an object")
        items = [payload]

    stories: list[Story] = []
    for item in items:
        if not isinstance(item, dict):
            raise MalformedResponseError(f"Expected a story object, got {type(item).__name__}")
        try:
            stories.append(Story.model_validate(item))
        except ValidationError as exc:
            raise MalformedResponseError(f"Invalid story in response: {exc}") from exc
    return stories


def parse_cache_version(response: httpx.Response) -> str:
    """Extract ``space.version`` from a ``spaces/me`` response as a string.

    Raises:
        MalformedResponseError: If the version is missing or not a number or
            string.
    """
    body = decode_json(response)
    space = body.get("space") if isinstance(body, dict) else None
    if not isinstance(space, dict) or "version" not in space:
        raise MalformedResponseError("Response from Storyblok has no 'space.version' key")

    version = space["version"]
    if isinstance(version, bool) or not isinstance(version, (int, float, str)):
        raise MalformedResponseError(f"Unexpected cache version value: {version!r}")
    return str(version)
