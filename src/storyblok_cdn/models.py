"""Canonical Pydantic models shared across all storyblok-cdn modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into three groups:

**Query models** -- typed request options consumed by
:mod:`storyblok_cdn.builder`:
    :class:`StoryVersion`, :class:`SortOrder`, :class:`SortType`,
    :class:`FilterOperation`, :class:`SortBy`, :class:`FilterQuery`,
    :class:`ResolveRelations`, :class:`OneStoryQuery` and
    :class:`StoriesQuery`.

**Entity models** -- deserialised delivery API payloads:
    :class:`Story`.

**Configuration models** -- client settings and the persisted settings file:
    :class:`ClientConfig`, :class:`OutputConfig` and :class:`Settings`.

All models use Pydantic v2. Query models forbid unknown fields so that a
misspelt option is reported instead of silently dropped; entity models ignore
unknown keys because the delivery API adds fields over time.
"""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from storyblok_cdn.exceptions import InvalidQueryError

DEFAULT_BASE_URL = "https://api.storyblok.com"
"""Scheme and host of the Storyblok content delivery API."""

DEFAULT_API_PATH = "/v1/cdn/"
"""Versioned path prefix every delivery API resource lives under."""


# --- Query option types ---


class StoryVersion(str, enum.Enum):
    """Which revision of a story to fetch."""

    PUBLISHED = "published"
    DRAFT = "draft"


class SortOrder(str, enum.Enum):
    """Sort direction token appended to a ``sort_by`` value."""

    ASC = "asc"
    DESC = "desc"


class SortType(str, enum.Enum):
    """Value type token appended to a ``sort_by`` value.

    Tells the API how to compare content fields; without it every field is
    compared as a string.
    """

    STRING = "string"
    INT = "int"
    FLOAT = "float"


class FilterOperation(str, enum.Enum):
    """Filter operations documented for ``filter_query`` parameters.

    :attr:`FilterQuery.operation` also accepts a plain string so that
    operations added to the API later can be used without a release.
    """

    IS = "is"
    IN = "in"
    NOT_IN = "not_in"
    LIKE = "like"
    NOT_LIKE = "not_like"
    ANY_IN_ARRAY = "any_in_array"
    ALL_IN_ARRAY = "all_in_array"
    GT_DATE = "gt_date"
    LT_DATE = "lt_date"
    GT_INT = "gt_int"
    LT_INT = "lt_int"
    GT_FLOAT = "gt_float"
    LT_FLOAT = "lt_float"


class SortBy(BaseModel):
    """Sort specification rendered into the ``sort_by`` parameter.

    Exactly one of ``attribute_field`` (a story attribute such as
    ``created_at``) or ``content_field`` (a field inside the story content,
    rendered with a ``content.`` prefix) must be set. The builder enforces
    this when rendering.

    Example::

        SortBy(content_field="title", order=SortOrder.ASC, type=SortType.STRING)
        # -> "content.title:asc:string"
    """

    model_config = ConfigDict(extra="forbid")

    attribute_field: Optional[str] = None
    content_field: Optional[str] = None
    order: Optional[SortOrder] = None
    type: Optional[SortType] = None

    @classmethod
    def parse(cls, value: str) -> SortBy:
        """Parse the ``field[:order[:type]]`` form used on the command line.

        A field starting with ``content.`` becomes a :attr:`content_field`;
        anything else is an :attr:`attribute_field`.

        Raises:
            InvalidQueryError: If the field is empty or a token is unknown.
        """
        parts = value.split(":")
        if len(parts) > 3 or not parts[0]:
            raise InvalidQueryError(f"Invalid sort specification: {value!r}")

        field = parts[0]
        try:
            order = SortOrder(parts[1]) if len(parts) > 1 and parts[1] else None
            sort_type = SortType(parts[2]) if len(parts) > 2 and parts[2] else None
        except ValueError as exc:
            raise InvalidQueryError(f"Invalid sort specification {value!r}: {exc}") from exc

        if field.startswith("content."):
            return cls(content_field=field[len("content."):], order=order, type=sort_type)
        return cls(attribute_field=field, order=order, type=sort_type)


class FilterQuery(BaseModel):
    """One ``filter_query[attribute][operation]=value`` parameter."""

    model_config = ConfigDict(extra="forbid")

    attribute: str
    operation: FilterOperation | str
    value: Any

    @classmethod
    def parse(cls, value: str) -> FilterQuery:
        """Parse the ``attribute:operation:value`` form used on the command line.

        The value part may itself contain colons.

        Raises:
            InvalidQueryError: If any of the three parts is missing.
        """
        parts = value.split(":", 2)
        if len(parts) != 3 or not parts[0] or not parts[1]:
            raise InvalidQueryError(
                f"Invalid filter {value!r}, expected attribute:operation:value"
            )
        return cls(attribute=parts[0], operation=parts[1], value=parts[2])


class ResolveRelations(BaseModel):
    """A ``component.field`` relation to resolve inline."""

    model_config = ConfigDict(extra="forbid")

    component_name: str
    field_name: str

    @classmethod
    def parse(cls, value: str) -> ResolveRelations:
        """Parse the ``component.field`` form used on the command line.

        Raises:
            InvalidQueryError: If either side of the dot is missing.
        """
        component, sep, field = value.partition(".")
        if not sep or not component or not field:
            raise InvalidQueryError(
                f"Invalid relation {value!r}, expected component.field"
            )
        return cls(component_name=component, field_name=field)


# --- Query variants ---


class SharedQueryOptions(BaseModel):
    """Options shared by single-story and multi-story lookups."""

    model_config = ConfigDict(extra="forbid")

    version: Optional[StoryVersion] = None
    resolve_links: Optional[bool] = None
    resolve_relations: Optional[list[ResolveRelations]] = None
    from_release: Optional[str] = None
    language: Optional[str] = None
    fallback_lang: Optional[str] = None


class OneStoryQuery(SharedQueryOptions):
    """Options for fetching a single story.

    Exactly one of :attr:`full_slug`, :attr:`id` or :attr:`uuid` identifies
    the story; :func:`~storyblok_cdn.builder.build_one_request` rejects any
    other combination.
    """

    full_slug: Optional[str] = None
    id: Optional[str | int] = None
    uuid: Optional[str] = None


class StoriesQuery(SharedQueryOptions):
    """Options for fetching a page of stories. Every field is optional."""

    starts_with: Optional[str] = None
    by_uuids: Optional[list[str]] = None
    by_uuids_ordered: Optional[list[str]] = None
    excluding_ids: Optional[list[str | int]] = None
    excluding_fields: Optional[list[str]] = None
    with_tag: Optional[list[str]] = None
    search_term: Optional[str] = None
    filter_queries: Optional[list[FilterQuery]] = None
    sort_by: Optional[SortBy] = None
    is_startpage: Optional[bool] = None
    page: Optional[int] = None
    per_page: Optional[int] = None


# --- Entities ---


class Story(BaseModel):
    """A story as returned by the delivery API.

    Every field is optional; missing and ``null`` keys both map to ``None``.
    """

    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    created_at: Optional[datetime] = None
    published_at: Optional[datetime] = None
    alternates: Optional[list[Any]] = None
    id: Optional[int] = None
    uuid: Optional[str] = None
    content: Optional[dict[str, Any]] = None
    slug: Optional[str] = None
    full_slug: Optional[str] = None
    position: Optional[int] = None
    tag_list: Optional[list[str]] = None
    is_startpage: Optional[bool] = None
    parent_id: Optional[int] = None
    group_id: Optional[str] = None
    first_published_at: Optional[datetime] = None
    release_id: Optional[int | str] = None
    lang: Optional[str] = None
    path: Optional[str] = None
    translated_slugs: Optional[list[Any]] = None

    @field_validator("created_at", "published_at", "first_published_at", mode="before")
    @classmethod
    def _empty_timestamp_is_none(cls, value: Any) -> Any:
        # Unpublished stories carry "" rather than null in some API versions.
        if value == "":
            return None
        return value


# --- Configuration ---


class ClientConfig(BaseModel):
    """Settings for a single :class:`~storyblok_cdn.client.StoryblokClient`.

    Only ``token`` is required. ``base_url`` and ``api_path`` default to the
    public delivery API and exist so tests and proxies can point elsewhere.

    Example::

        ClientConfig(token="abc123", auto_cache_invalidation=True)
    """

    token: str = Field(min_length=1, repr=False, description="Delivery API access token")
    auto_cache_invalidation: bool = Field(
        default=False,
        description="Refresh the cache version before every content request",
    )
    base_url: str = Field(default=DEFAULT_BASE_URL, description="Scheme and host")
    api_path: str = Field(default=DEFAULT_API_PATH, description="Versioned path prefix")
    timeout: float = Field(default=30.0, gt=0, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`Settings`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class Settings(BaseModel):
    """User-wide settings persisted at ``~/.config/storyblok-cdn/config.json``.

    Loaded and saved by :func:`~storyblok_cdn.config.load_settings` and
    :func:`~storyblok_cdn.config.save_settings`. Fields here have the lowest
    precedence and can be overridden by the project file, environment
    variables, or CLI flags. See
    :func:`~storyblok_cdn.config.resolve_client_config` for the full chain.
    """

    token_source: Optional[str] = Field(
        default=None,
        description="Token or token source: literal value, env:VAR, file:/path",
    )
    auto_cache_invalidation: bool = False
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 30.0
    verify_ssl: bool = True
    output: OutputConfig = Field(default_factory=OutputConfig)
