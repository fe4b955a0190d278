"""State and request assembly shared by the blocking and async clients.

:class:`ClientBase` owns the access token, the cache-version state, and the
steps of a request that involve no I/O: query coercion, parameter merging,
URL construction and status checking. The I/O itself lives in
:class:`~storyblok_cdn.client.sync_client.StoryblokClient` and
:class:`~storyblok_cdn.client.async_client.AsyncStoryblokClient`.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from storyblok_cdn.client.cache_version import CacheVersion
from storyblok_cdn.exceptions import InvalidQueryError, UnexpectedStatusError
from storyblok_cdn.models import ClientConfig

logger = logging.getLogger(__name__)

SPACE_PATH = "spaces/me"
"""Administrative resource holding the current cache version."""

QueryT = TypeVar("QueryT", bound=BaseModel)


class ClientBase:
    """Common state for delivery API clients.

    Args:
        config: Token, cache invalidation mode and connection settings.
    """

    def __init__(self, config: ClientConfig) -> None:
        self._config = config
        self._cache_version = CacheVersion()

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def auto_cache_invalidation(self) -> bool:
        return self._config.auto_cache_invalidation

    @property
    def cache_version(self) -> Optional[str]:
        """The cache version sent as ``cv``, or ``None`` before the first refresh."""
        return self._cache_version.value

    # ------------------------------------------------------------------ #
    # Request assembly
    # ------------------------------------------------------------------ #

    def _url(self, path: str) -> str:
        """Join the API path prefix and a resource path."""
        return f"{self._config.api_path.rstrip('/')}/{path.lstrip('/')}"

    def _prepare_params(
        self,
        params: Optional[dict[str, str]],
        ignore_cache_version: bool,
    ) -> dict[str, str]:
        """Merge the token and, unless ignored, the cache version into *params*.

        Must run after any automatic cache refresh so the fresh version is
        picked up.
        """
        merged: dict[str, str] = dict(params or {})
        merged["token"] = self._config.token

        if ignore_cache_version:
            return merged

        version = self._cache_version.value
        if version is None:
            logger.warning(
                "No cache version fetched, the request may be served from a stale "
                "edge cache. Call invalidate_cache_version() or enable automatic "
                "cache invalidation."
            )
        else:
            merged["cv"] = version
        return merged

    def _store_cache_version(self, version: str) -> None:
        previous = self._cache_version.value
        self._cache_version.set(version)
        logger.debug("Cache version updated: %s -> %s", previous, version)

    @staticmethod
    def _check_status(response: httpx.Response) -> None:
        """Raise :class:`UnexpectedStatusError` for anything but HTTP 200."""
        status = response.status_code
        if status == 200:
            return

        try:
            detail = response.json()
            if isinstance(detail, dict):
                msg = detail.get("error") or detail.get("message") or ""
            else:
                msg = str(detail)
        except ValueError:
            msg = response.text[:200] if response.text else ""

        prefix = f"Invalid response from Storyblok: HTTP {status}"
        full_msg = f"{prefix}: {msg}" if msg else prefix
        raise UnexpectedStatusError(full_msg, status_code=status, response=response)

    @staticmethod
    def _coerce_query(
        model: type[QueryT],
        query: Optional[QueryT],
        options: dict[str, Any],
    ) -> QueryT:
        """Return *query* as is, or build a *model* from keyword *options*.

        Raises:
            InvalidQueryError: If both are given or the options fail validation.
        """
        if query is not None:
            if options:
                raise InvalidQueryError(
                    "Pass either a query object or keyword options, not both"
                )
            return query
        try:
            return model.model_validate(options)
        except ValidationError as exc:
            raise InvalidQueryError(f"Invalid query options: {exc}") from exc
