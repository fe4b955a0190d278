"""HTTP client module for storyblok-cdn.

Provides synchronous and asynchronous clients that wrap :mod:`httpx` with
token injection, cache-version handling and typed story decoding.

Classes:
    :class:`StoryblokClient` -- blocking client backed by :class:`httpx.Client`.
    :class:`AsyncStoryblokClient` -- non-blocking client backed by :class:`httpx.AsyncClient`.
    :class:`StoryblokResponse` -- raw response plus decoded stories.

Both clients are context managers and take a
:class:`~storyblok_cdn.models.ClientConfig`.

Example::

    from storyblok_cdn.client import StoryblokClient
    from storyblok_cdn.models import ClientConfig

    with StoryblokClient(ClientConfig(token="abc")) as client:
        page = client.fetch_multiple(starts_with="blog/")
"""

from storyblok_cdn.client.async_client import AsyncStoryblokClient
from storyblok_cdn.client.response import StoryblokResponse
from storyblok_cdn.client.sync_client import StoryblokClient

__all__ = ["StoryblokClient", "AsyncStoryblokClient", "StoryblokResponse"]
