"""Request builder -- typed story queries to delivery API parameters.

Exposes the two pure entry points used by both clients:

- :func:`build_one_request` -- ``stories/<identifier>`` plus parameters.
- :func:`build_stories_request` -- ``stories`` plus parameters.

Example::

    from storyblok_cdn.builder import build_one_request
    from storyblok_cdn.models import OneStoryQuery

    path, params = build_one_request(OneStoryQuery(uuid="abc"))
    # ("stories/abc", {"find_by": "uuid"})
"""

from storyblok_cdn.builder.request_builder import (
    STORIES_PATH,
    build_one_request,
    build_stories_request,
)

__all__ = ["STORIES_PATH", "build_one_request", "build_stories_request"]
