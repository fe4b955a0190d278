"""Fetch commands -- read stories and the cache version from the delivery API.

Provides the ``story``, ``stories`` and ``cache-version`` commands. Each one
resolves a :class:`~storyblok_cdn.models.ClientConfig` from the global CLI
options (see :func:`~storyblok_cdn.config.resolve_client_config`), opens a
:class:`~storyblok_cdn.client.StoryblokClient`, and renders the result
through the global :class:`~storyblok_cdn.output.OutputManager`.

Errors raised by the client are printed to stderr and turned into the exit
code carried by the exception.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, NoReturn, Optional

import typer

from storyblok_cdn.client import StoryblokClient
from storyblok_cdn.config import resolve_client_config
from storyblok_cdn.exceptions import ConfigError, StoryblokError
from storyblok_cdn.models import (
    ClientConfig,
    FilterQuery,
    OneStoryQuery,
    ResolveRelations,
    SortBy,
    StoriesQuery,
    Story,
    StoryVersion,
)
from storyblok_cdn.output import (
    OutputFormat,
    error,
    format_response,
    get_output,
    info,
    print_data,
    print_table,
    suggest,
)


class LookupKind(str, Enum):
    """How the ``story`` command interprets its identifier argument."""

    SLUG = "slug"
    ID = "id"
    UUID = "uuid"


_LOOKUP_FIELDS = {
    LookupKind.SLUG: "full_slug",
    LookupKind.ID: "id",
    LookupKind.UUID: "uuid",
}


# ------------------------------------------------------------------ #
# Commands
# ------------------------------------------------------------------ #


def story_command(
    ctx: typer.Context,
    identifier: str = typer.Argument(help="Full slug, numeric id or uuid of the story."),
    by: LookupKind = typer.Option(
        LookupKind.SLUG, "--by", help="How to interpret IDENTIFIER."
    ),
    draft: Optional[bool] = typer.Option(
        None, "--draft/--published", help="Fetch the draft or the published version."
    ),
    resolve_links: Optional[bool] = typer.Option(
        None, "--resolve-links/--no-resolve-links", help="Resolve links inline."
    ),
    resolve_relations: Optional[list[str]] = typer.Option(
        None, "--resolve-relations", "-r", help="Relation to resolve as component.field (repeatable)."
    ),
    from_release: Optional[str] = typer.Option(
        None, "--from-release", help="Release id to fetch from."
    ),
    language: Optional[str] = typer.Option(None, "--language", help="Language code."),
    fallback_lang: Optional[str] = typer.Option(
        None, "--fallback-lang", help="Fallback language code."
    ),
) -> None:
    """Fetch a single story and print it.

    Example::

        storyblok-cdn story blog/hello-world --draft
        storyblok-cdn story 0b1c2d3e-... --by uuid --json
    """
    try:
        query = OneStoryQuery(
            **{_LOOKUP_FIELDS[by]: identifier},
            version=_version(draft),
            resolve_links=resolve_links,
            resolve_relations=_relations(resolve_relations),
            from_release=from_release,
            language=language,
            fallback_lang=fallback_lang,
        )
        with StoryblokClient(_client_config(ctx)) as client:
            result = client.fetch_one(query)
    except StoryblokError as exc:
        _fail(exc)

    story = result.story
    assert story is not None
    format_response(_dump(story))


def stories_command(
    ctx: typer.Context,
    starts_with: Optional[str] = typer.Option(
        None, "--starts-with", help="Only stories whose full slug starts with this prefix."
    ),
    by_uuids: Optional[list[str]] = typer.Option(
        None, "--by-uuids", help="Story uuid to include (repeatable)."
    ),
    by_uuids_ordered: Optional[list[str]] = typer.Option(
        None, "--by-uuids-ordered", help="Story uuid to include, keeping order (repeatable)."
    ),
    excluding_ids: Optional[list[str]] = typer.Option(
        None, "--excluding-ids", help="Story id to exclude (repeatable)."
    ),
    excluding_fields: Optional[list[str]] = typer.Option(
        None, "--excluding-fields", help="Content field to leave out (repeatable)."
    ),
    with_tag: Optional[list[str]] = typer.Option(
        None, "--with-tag", help="Tag the stories must carry (repeatable)."
    ),
    search_term: Optional[str] = typer.Option(
        None, "--search", help="Full-text search term."
    ),
    filters: Optional[list[str]] = typer.Option(
        None, "--filter", help="Filter as attribute:operation:value (repeatable)."
    ),
    sort_by: Optional[str] = typer.Option(
        None, "--sort-by", help="Sort as field[:asc|desc[:string|int|float]]."
    ),
    is_startpage: Optional[bool] = typer.Option(
        None, "--startpage/--no-startpage", help="Only folder start pages, or none."
    ),
    page: Optional[int] = typer.Option(None, "--page", help="Page number (1-based)."),
    per_page: Optional[int] = typer.Option(None, "--per-page", help="Stories per page."),
    draft: Optional[bool] = typer.Option(
        None, "--draft/--published", help="Fetch draft or published versions."
    ),
    resolve_links: Optional[bool] = typer.Option(
        None, "--resolve-links/--no-resolve-links", help="Resolve links inline."
    ),
    resolve_relations: Optional[list[str]] = typer.Option(
        None, "--resolve-relations", "-r", help="Relation to resolve as component.field (repeatable)."
    ),
    from_release: Optional[str] = typer.Option(
        None, "--from-release", help="Release id to fetch from."
    ),
    language: Optional[str] = typer.Option(None, "--language", help="Language code."),
    fallback_lang: Optional[str] = typer.Option(
        None, "--fallback-lang", help="Fallback language code."
    ),
) -> None:
    """List stories matching the given filters.

    Rich and plain output show an ``id / full_slug / name`` table; ``--json``
    prints the full stories.

    Example::

        storyblok-cdn stories --starts-with blog/ --sort-by content.title:asc --per-page 10
        storyblok-cdn stories --filter component:in:article --json
    """
    try:
        query = StoriesQuery(
            starts_with=starts_with,
            by_uuids=_list(by_uuids),
            by_uuids_ordered=_list(by_uuids_ordered),
            excluding_ids=_list(excluding_ids),
            excluding_fields=_list(excluding_fields),
            with_tag=_list(with_tag),
            search_term=search_term,
            filter_queries=[FilterQuery.parse(f) for f in filters] if filters else None,
            sort_by=SortBy.parse(sort_by) if sort_by else None,
            is_startpage=is_startpage,
            page=page,
            per_page=per_page,
            version=_version(draft),
            resolve_links=resolve_links,
            resolve_relations=_relations(resolve_relations),
            from_release=from_release,
            language=language,
            fallback_lang=fallback_lang,
        )
        with StoryblokClient(_client_config(ctx)) as client:
            result = client.fetch_multiple(query)
    except StoryblokError as exc:
        _fail(exc)

    output = get_output()
    if output.format == OutputFormat.JSON or ctx.obj.get("output_file"):
        format_response([_dump(s) for s in result.stories])
    else:
        rows = [
            [str(s.id or ""), s.full_slug or "", s.name or ""]
            for s in result.stories
        ]
        print_table(["id", "full_slug", "name"], rows, title="Stories")

    total = result.total
    if total is not None:
        info(f"{len(result.stories)} of {total} stories")
    else:
        info(f"{len(result.stories)} stories")


def cache_version_command(ctx: typer.Context) -> None:
    """Fetch and print the current cache version of the space.

    Example::

        storyblok-cdn cache-version
    """
    try:
        with StoryblokClient(_client_config(ctx)) as client:
            version = client.invalidate_cache_version()
    except StoryblokError as exc:
        _fail(exc)

    print_data(version)


# ------------------------------------------------------------------ #
# Helpers
# ------------------------------------------------------------------ #


def _client_config(ctx: typer.Context) -> ClientConfig:
    """Resolve the client config from the global options stored on *ctx*."""
    obj: dict[str, Any] = ctx.obj or {}
    return resolve_client_config(
        cli_token=obj.get("token"),
        cli_auto_cache_invalidation=obj.get("auto_cache_invalidation"),
        cli_base_url=obj.get("base_url"),
        cli_timeout=obj.get("timeout"),
    )


def _fail(exc: StoryblokError) -> NoReturn:
    error(str(exc))
    if isinstance(exc, ConfigError):
        suggest("Set STORYBLOK_TOKEN or pass --token")
    raise typer.Exit(code=exc.exit_code)


def _version(draft: Optional[bool]) -> Optional[StoryVersion]:
    if draft is None:
        return None
    return StoryVersion.DRAFT if draft else StoryVersion.PUBLISHED


def _relations(values: Optional[list[str]]) -> Optional[list[ResolveRelations]]:
    if not values:
        return None
    return [ResolveRelations.parse(v) for v in values]


def _list(values: Optional[list[str]]) -> Optional[list[str]]:
    # Typer hands over an empty list for absent repeatable options.
    return list(values) if values else None


def _dump(story: Story) -> dict[str, Any]:
    return story.model_dump(mode="json", exclude_none=True)
