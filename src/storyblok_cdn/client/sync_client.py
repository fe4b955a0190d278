"""Synchronous delivery API client with cache-version handling.

This module provides :class:`StoryblokClient`, the blocking client for the
Storyblok content delivery API. It wraps :class:`httpx.Client` and layers on:

- **Token injection** -- the access token is added to every request.
- **Cache versioning** -- the ``cv`` parameter is taken from the last
  ``spaces/me`` lookup, refreshed before every content request when
  automatic cache invalidation is enabled.
- **Error mapping** -- transport failures, non-200 statuses and malformed
  bodies surface as distinct :mod:`storyblok_cdn.exceptions` types.

There is no retry: the caller owns retry policy.

See Also:
    :class:`~storyblok_cdn.client.async_client.AsyncStoryblokClient` for the
    equivalent non-blocking implementation.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from storyblok_cdn.builder import build_one_request, build_stories_request
from storyblok_cdn.client.base import SPACE_PATH, ClientBase
from storyblok_cdn.client.response import StoryblokResponse, parse_cache_version, parse_stories
from storyblok_cdn.exceptions import TransportError
from storyblok_cdn.models import ClientConfig, OneStoryQuery, StoriesQuery

logger = logging.getLogger(__name__)


class StoryblokClient(ClientBase):
    """Synchronous client for the Storyblok content delivery API.

    Must be used as a context manager so that the underlying transport is
    properly opened and closed.

    Args:
        config: Token, cache invalidation mode and connection settings.
        transport: Optional custom httpx transport, e.g.
            :class:`httpx.MockTransport` in tests.

    Example::

        with StoryblokClient(ClientConfig(token="abc")) as client:
            client.invalidate_cache_version()
            home = client.fetch_one(full_slug="home").story
    """

    def __init__(
        self,
        config: ClientConfig,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        super().__init__(config)
        self._transport = transport
        self._client: Optional[httpx.Client] = None

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> StoryblokClient:
        self._client = httpx.Client(
            base_url=self._config.base_url,
            timeout=self._config.timeout,
            verify=self._config.verify_ssl,
            follow_redirects=False,
            transport=self._transport,
        )
        return self

    def __exit__(self, *args: object) -> None:
        if self._client:
            self._client.close()
            self._client = None

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def request(
        self,
        path: str,
        params: Optional[dict[str, str]] = None,
        ignore_cache_version: bool = False,
    ) -> httpx.Response:
        """GET a delivery API resource with token and cache-version handling.

        Args:
            path: Resource path below the API prefix, e.g. ``stories/home``.
            params: Query parameters produced by the request builder.
            ignore_cache_version: Skip the automatic refresh and the ``cv``
                parameter. Used for the ``spaces/me`` lookup itself.

        Returns:
            The HTTP 200 :class:`httpx.Response`.

        Raises:
            TransportError: On network, timeout or body decoding errors.
            UnexpectedStatusError: On any status other than 200.
            MalformedResponseError: If a required cache refresh returns a
                malformed body.
        """
        if not ignore_cache_version and self._config.auto_cache_invalidation:
            self.invalidate_cache_version()

        merged_params = self._prepare_params(params, ignore_cache_version)
        response = self._send(self._url(path), merged_params)
        self._check_status(response)
        return response

    def invalidate_cache_version(self) -> str:
        """Fetch the latest cache version and use it for subsequent requests.

        Returns:
            The new cache version.
        """
        response = self.request(SPACE_PATH, ignore_cache_version=True)
        version = parse_cache_version(response)
        self._store_cache_version(version)
        return version

    def fetch_one(
        self,
        query: Optional[OneStoryQuery] = None,
        **options: Any,
    ) -> StoryblokResponse:
        """Fetch a single story.

        Args:
            query: A prepared :class:`~storyblok_cdn.models.OneStoryQuery`.
            **options: Alternatively, the query fields as keyword arguments
                (``full_slug="home"``, ``version="draft"``, ...).

        Returns:
            A :class:`StoryblokResponse` holding exactly one story.

        Raises:
            InvalidQueryError: If the options are contradictory or invalid.
        """
        one = self._coerce_query(OneStoryQuery, query, options)
        path, params = build_one_request(one)
        response = self.request(path, params)
        return StoryblokResponse(response, parse_stories(response, multiple=False))

    def fetch_multiple(
        self,
        query: Optional[StoriesQuery] = None,
        **options: Any,
    ) -> StoryblokResponse:
        """Fetch a page of stories.

        Args:
            query: A prepared :class:`~storyblok_cdn.models.StoriesQuery`.
            **options: Alternatively, the query fields as keyword arguments
                (``starts_with="blog/"``, ``per_page=25``, ...).

        Returns:
            A :class:`StoryblokResponse` with the stories in API order.

        Raises:
            InvalidQueryError: If the options are contradictory or invalid.
        """
        many = self._coerce_query(StoriesQuery, query, options)
        path, params = build_stories_request(many)
        response = self.request(path, params)
        return StoryblokResponse(response, parse_stories(response, multiple=True))

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _send(self, url: str, params: dict[str, str]) -> httpx.Response:
        assert self._client is not None, "Client not initialised -- use as context manager"

        logger.debug("GET %s", url)
        try:
            return self._client.get(url, params=params)
        except httpx.RequestError as exc:
            raise TransportError(f"Cannot perform request to Storyblok: {exc}") from exc
