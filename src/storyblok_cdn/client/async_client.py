"""Asynchronous delivery API client -- mirrors :class:`~storyblok_cdn.client.sync_client.StoryblokClient`.

This module provides :class:`AsyncStoryblokClient`, the non-blocking
counterpart to :class:`~storyblok_cdn.client.sync_client.StoryblokClient`.
It wraps :class:`httpx.AsyncClient` and offers the same feature set -- token
injection, cache versioning and error mapping -- using ``await`` so it can be
used inside an event loop.

With automatic cache invalidation each fetch performs two sequential round
trips: ``spaces/me`` first, then the content request carrying the fresh
``cv``.

See Also:
    :class:`~storyblok_cdn.client.sync_client.StoryblokClient` for the
    blocking equivalent.
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


class AsyncStoryblokClient(ClientBase):
    """Asynchronous client for the Storyblok content delivery API.

    Must be used as an async context manager.

    Args:
        config: Token, cache invalidation mode and connection settings.
        transport: Optional custom async httpx transport.

    Example::

        async with AsyncStoryblokClient(ClientConfig(token="abc")) as client:
            page = await client.fetch_multiple(starts_with="blog/", per_page=10)
    """

    def __init__(
        self,
        config: ClientConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__(config)
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> AsyncStoryblokClient:
        self._client = httpx.AsyncClient(
            base_url=self._config.base_url,
            timeout=self._config.timeout,
            verify=self._config.verify_ssl,
            follow_redirects=False,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args: object) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    async def request(
        self,
        path: str,
        params: Optional[dict[str, str]] = None,
        ignore_cache_version: bool = False,
    ) -> httpx.Response:
        """GET a delivery API resource with token and cache-version handling.

        Behaves identically to
        :meth:`~storyblok_cdn.client.sync_client.StoryblokClient.request` but
        is non-blocking.
        """
        if not ignore_cache_version and self._config.auto_cache_invalidation:
            await self.invalidate_cache_version()

        merged_params = self._prepare_params(params, ignore_cache_version)
        response = await self._send(self._url(path), merged_params)
        self._check_status(response)
        return response

    async def invalidate_cache_version(self) -> str:
        """Fetch the latest cache version and use it for subsequent requests."""
        response = await self.request(SPACE_PATH, ignore_cache_version=True)
        version = parse_cache_version(response)
        self._store_cache_version(version)
        return version

    async def fetch_one(
        self,
        query: Optional[OneStoryQuery] = None,
        **options: Any,
    ) -> StoryblokResponse:
        """Fetch a single story. See :meth:`StoryblokClient.fetch_one`."""
        one = self._coerce_query(OneStoryQuery, query, options)
        path, params = build_one_request(one)
        response = await self.request(path, params)
        return StoryblokResponse(response, parse_stories(response, multiple=False))

    async def fetch_multiple(
        self,
        query: Optional[StoriesQuery] = None,
        **options: Any,
    ) -> StoryblokResponse:
        """Fetch a page of stories. See :meth:`StoryblokClient.fetch_multiple`."""
        many = self._coerce_query(StoriesQuery, query, options)
        path, params = build_stories_request(many)
        response = await self.request(path, params)
        return StoryblokResponse(response, parse_stories(response, multiple=True))

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    async def _send(self, url: str, params: dict[str, str]) -> httpx.Response:
        assert self._client is not None, "Client not initialised -- use as async context manager"

        logger.debug("GET %s", url)
        try:
            return await self._client.get(url, params=params)
        except httpx.RequestError as exc:
            raise TransportError(f"Cannot perform request to Storyblok: {exc}") from exc
