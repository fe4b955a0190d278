"""Translate typed story queries into delivery API paths and query parameters.

This module is the bridge between the query models in
:mod:`storyblok_cdn.models` and the wire format the delivery API expects.
Both entry points are pure: they take a complete query and return a fresh
``(path, params)`` tuple, never touching the network or any shared state.

**Mapping rules:**

* **Identifiers** -- a single-story query names exactly one of ``full_slug``,
  ``id`` or ``uuid``; it becomes the last path segment, percent-encoded except for
  ``/``. A ``uuid`` lookup also sends ``find_by=uuid``.
* **Enums** (``version``, sort order / type) render as their lowercase tag.
* **Booleans** -- ``resolve_links`` renders as ``true`` / ``false`` while
  ``is_startpage`` renders as ``1`` / ``0``; the API expects both forms.
* **Lists** -- comma-joined. An empty list is rejected because the API has
  no representation for it.
* **Filters** -- one ``filter_query[attribute][operation]`` parameter per
  :class:`~storyblok_cdn.models.FilterQuery`.
* **Relations** -- ``component.field`` entries, comma-joined with a single
  trailing comma.
"""

from __future__ import annotations

import enum
from typing import Any, Optional, Sequence
from urllib.parse import quote

from storyblok_cdn.exceptions import InvalidQueryError
from storyblok_cdn.models import (
    FilterQuery,
    OneStoryQuery,
    ResolveRelations,
    SharedQueryOptions,
    SortBy,
    StoriesQuery,
)

STORIES_PATH = "stories"
"""Resource path for story lookups, relative to the API path prefix."""

_LIST_PARAMS: tuple[tuple[str, str], ...] = (
    ("by_uuids", "by_uuids"),
    ("by_uuids_ordered", "by_uuids_ordered"),
    ("excluding_ids", "excluding_ids"),
    ("excluding_fields", "excluding_fields"),
    ("with_tag", "with_tag"),
)
"""``(query attribute, parameter name)`` pairs for comma-joined list options."""


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------


def build_one_request(query: OneStoryQuery) -> tuple[str, dict[str, str]]:
    """Build the path and parameters for a single-story lookup.

    Args:
        query: The single-story options.

    Returns:
        A ``(path, params)`` tuple, e.g. ``("stories/home", {"version": "draft"})``.

    Raises:
        InvalidQueryError: If not exactly one non-empty identifier is set, or
            a shared option is invalid.
    """
    identifiers = {
        name: value
        for name, value in (
            ("full_slug", query.full_slug),
            ("id", query.id),
            ("uuid", query.uuid),
        )
        if value is not None
    }
    if not identifiers:
        raise InvalidQueryError("No story identifier given; set one of full_slug, id or uuid")
    if len(identifiers) > 1:
        raise InvalidQueryError(
            f"Only one story identifier may be set, got: {', '.join(identifiers)}"
        )

    ((kind, identifier),) = identifiers.items()
    identifier = str(identifier)
    if not identifier:
        raise InvalidQueryError(f"Story identifier '{kind}' must not be empty")

    params: dict[str, str] = {}
    if kind == "uuid":
        params["find_by"] = "uuid"
    params.update(_shared_params(query))

    # "?" and "#" in a slug would otherwise start the query string or fragment.
    return f"{STORIES_PATH}/{quote(identifier, safe='/')}", params


def build_stories_request(query: StoriesQuery) -> tuple[str, dict[str, str]]:
    """Build the path and parameters for a multi-story lookup.

    Args:
        query: The multi-story options.

    Returns:
        A ``(path, params)`` tuple whose path is always ``"stories"``.

    Raises:
        InvalidQueryError: On empty list options, pages below 1, or an
            invalid sort / relation specification.
    """
    params: dict[str, str] = {}

    if query.starts_with is not None:
        params["starts_with"] = query.starts_with

    for attr, name in _LIST_PARAMS:
        values = getattr(query, attr)
        if values is not None:
            params[name] = join_values(values, name)

    params.update(_shared_params(query))

    if query.sort_by is not None:
        params["sort_by"] = render_sort_by(query.sort_by)
    if query.search_term is not None:
        params["search_term"] = query.search_term
    if query.filter_queries is not None:
        params.update(render_filter_queries(query.filter_queries))
    if query.is_startpage is not None:
        params["is_startpage"] = "1" if query.is_startpage else "0"

    for name, value in (("page", query.page), ("per_page", query.per_page)):
        if value is not None:
            if value < 1:
                raise InvalidQueryError(f"'{name}' must be 1 or greater, got {value}")
            params[name] = str(value)

    return STORIES_PATH, params


# ---------------------------------------------------------------------------
# Renderers
# ---------------------------------------------------------------------------


def join_values(values: Sequence[Any], name: str) -> str:
    """Comma-join a list option.

    Raises:
        InvalidQueryError: If *values* is empty.
    """
    if not values:
        raise InvalidQueryError(f"'{name}' must contain at least one value")
    return ",".join(str(v) for v in values)


def render_resolve_relations(relations: Sequence[ResolveRelations]) -> str:
    """Render relations as ``component.field`` entries.

    Every entry is followed by a comma, so the result keeps one trailing
    comma. The delivery API accepts it and existing cache keys depend on it.

    Raises:
        InvalidQueryError: If *relations* is empty.
    """
    if not relations:
        raise InvalidQueryError("'resolve_relations' must contain at least one relation")
    return "".join(f"{r.component_name}.{r.field_name}," for r in relations)


def render_sort_by(sort_by: SortBy) -> str:
    """Render a :class:`~storyblok_cdn.models.SortBy` as ``field[:order[:type]]``.

    Raises:
        InvalidQueryError: Unless exactly one of ``attribute_field`` and
            ``content_field`` is set.
    """
    if (sort_by.attribute_field is None) == (sort_by.content_field is None):
        raise InvalidQueryError(
            "Sort needs exactly one of attribute_field or content_field"
        )

    if sort_by.attribute_field is not None:
        sort = sort_by.attribute_field
    else:
        sort = f"content.{sort_by.content_field}"
    if sort_by.order is not None:
        sort += f":{sort_by.order.value}"
    if sort_by.type is not None:
        sort += f":{sort_by.type.value}"
    return sort


def render_filter_queries(filters: Sequence[FilterQuery]) -> dict[str, str]:
    """Expand filters into one ``filter_query[attribute][operation]`` entry each.

    Filters sharing an attribute and operation overwrite each other; the last
    one wins.

    Raises:
        InvalidQueryError: If a filter value is ``None``.
    """
    params: dict[str, str] = {}
    for f in filters:
        if f.value is None:
            raise InvalidQueryError(f"Filter on '{f.attribute}' has no value")
        operation = f.operation.value if isinstance(f.operation, enum.Enum) else f.operation
        params[f"filter_query[{f.attribute}][{operation}]"] = stringify(f.value)
    return params


def stringify(value: Any) -> str:
    """Render a filter value the way the delivery API reads it.

    Booleans become ``true`` / ``false``, lists and tuples are comma-joined,
    enums use their value, and anything else goes through :func:`str`.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, enum.Enum):
        return str(value.value)
    if isinstance(value, (list, tuple)):
        return ",".join(stringify(v) for v in value)
    return str(value)


# ---------------------------------------------------------------------------
# Internals
# ---------------------------------------------------------------------------


def _shared_params(query: SharedQueryOptions) -> dict[str, str]:
    """Render the options both query variants accept."""
    params: dict[str, str] = {}
    if query.version is not None:
        params["version"] = query.version.value
    if query.resolve_links is not None:
        params["resolve_links"] = "true" if query.resolve_links else "false"
    if query.resolve_relations is not None:
        params["resolve_relations"] = render_resolve_relations(query.resolve_relations)
    _set_optional(params, "from_release", query.from_release)
    _set_optional(params, "language", query.language)
    _set_optional(params, "fallback_lang", query.fallback_lang)
    return params


def _set_optional(params: dict[str, str], name: str, value: Optional[str]) -> None:
    if value is not None:
        params[name] = value
