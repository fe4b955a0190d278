"""storyblok-cdn -- Typed client for the Storyblok content delivery API.

This package fetches stories from the Storyblok delivery API (``/v1/cdn/``).
Queries are described with Pydantic models, translated into the API's query
parameters by a pure request builder, and sent by a blocking or async httpx
client that also manages the edge cache-busting version (``cv``).

Typical usage::

    from storyblok_cdn import ClientConfig, StoryblokClient

    with StoryblokClient(ClientConfig(token="abc", auto_cache_invalidation=True)) as client:
        story = client.fetch_one(full_slug="home").story

A ``storyblok-cdn`` command line built on the same client is installed with
the package.

Modules:
    models: Pydantic models for queries, stories and configuration.
    builder: Query model to ``(path, params)`` translation.
    client: Sync and async HTTP clients plus the response wrapper.
    config: XDG-aware settings file and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    app: Typer application and CLI entry point.
"""

__version__ = "0.1.0"

from storyblok_cdn.client import AsyncStoryblokClient, StoryblokClient, StoryblokResponse
from storyblok_cdn.exceptions import (
    ConfigError,
    InvalidQueryError,
    MalformedResponseError,
    StoryblokError,
    TransportError,
    UnexpectedStatusError,
)
from storyblok_cdn.models import (
    ClientConfig,
    FilterOperation,
    FilterQuery,
    OneStoryQuery,
    ResolveRelations,
    SortBy,
    SortOrder,
    SortType,
    StoriesQuery,
    Story,
    StoryVersion,
)

__all__ = [
    "__version__",
    # Clients
    "StoryblokClient",
    "AsyncStoryblokClient",
    "StoryblokResponse",
    # Models
    "ClientConfig",
    "OneStoryQuery",
    "StoriesQuery",
    "Story",
    "StoryVersion",
    "SortBy",
    "SortOrder",
    "SortType",
    "FilterQuery",
    "FilterOperation",
    "ResolveRelations",
    # Exceptions
    "StoryblokError",
    "InvalidQueryError",
    "TransportError",
    "UnexpectedStatusError",
    "MalformedResponseError",
    "ConfigError",
]
