"""Shared test fixtures for storyblok-cdn.

Provides a fake delivery API backed by :class:`httpx.MockTransport`, isolated
config environments, and output state management. These fixtures are
automatically discovered by pytest and available to all test modules without
explicit imports.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

import httpx
import pytest

from storyblok_cdn.models import ClientConfig
from storyblok_cdn.output import OutputFormat, OutputManager, reset_output, set_output


# ---------------------------------------------------------------------------
# Fake delivery API
# ---------------------------------------------------------------------------


class FakeStoryblokAPI:
    """In-memory stand-in for the delivery API.

    ``spaces/me`` answers with the versions in :attr:`space_versions`, one per
    call, repeating the last one once the list is exhausted. Other paths are
    answered from :attr:`routes` or with a 404.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.space_versions: list[Any] = [7]
        self.routes: dict[str, tuple[int, Any, dict[str, str]]] = {}
        self._space_calls = 0

    def add_route(
        self,
        path: str,
        body: Any,
        status: int = 200,
        headers: Optional[dict[str, str]] = None,
    ) -> None:
        """Answer ``/v1/cdn/<path>`` with *body* (JSON-encoded unless bytes)."""
        self.routes[f"/v1/cdn/{path}"] = (status, body, headers or {})

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path == "/v1/cdn/spaces/me" and path not in self.routes:
            index = min(self._space_calls, len(self.space_versions) - 1)
            self._space_calls += 1
            return httpx.Response(
                200, json={"space": {"id": 1, "version": self.space_versions[index]}}
            )

        if path not in self.routes:
            return httpx.Response(404, json={"error": "This record could not be found"})

        status, body, headers = self.routes[path]
        if isinstance(body, bytes):
            return httpx.Response(status, content=body, headers=headers)
        return httpx.Response(status, json=body, headers=headers)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]

    def params(self, index: int = -1) -> dict[str, str]:
        """Query parameters of the request at *index* (default: the last one)."""
        return dict(self.requests[index].url.params)


@pytest.fixture
def api() -> FakeStoryblokAPI:
    """A fresh fake delivery API with no story routes."""
    return FakeStoryblokAPI()


@pytest.fixture
def client_config() -> ClientConfig:
    """Client config with a test token and automatic invalidation off."""
    return ClientConfig(token="test-token")


@pytest.fixture
def story_payload() -> dict[str, Any]:
    """A representative story object as the delivery API returns it."""
    return {
        "name": "Hello World",
        "created_at": "2021-03-04T09:13:06.398Z",
        "published_at": "2021-03-05T10:00:00.000Z",
        "alternates": [],
        "id": 42,
        "uuid": "0b1c2d3e-aaaa-bbbb-cccc-111122223333",
        "content": {"component": "page", "title": "Hello", "body": []},
        "slug": "hello-world",
        "full_slug": "blog/hello-world",
        "position": -10,
        "tag_list": ["news"],
        "is_startpage": False,
        "parent_id": 7,
        "group_id": "f1e2d3c4-0000-1111-2222-333344445555",
        "first_published_at": "2021-03-05T10:00:00.000Z",
        "release_id": None,
        "lang": "default",
        "path": None,
        "translated_slugs": None,
    }


# ---------------------------------------------------------------------------
# Global state
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager and library logger after every test.

    The CLI callback installs a log handler on the ``storyblok_cdn`` logger
    and stops propagation; undo that so ``caplog`` sees records again.
    """
    yield
    reset_output()
    logger = logging.getLogger("storyblok_cdn")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to subdirectories of tmp_path,
    clears all STORYBLOK_* environment variables and changes the working
    directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setattr("storyblok_cdn.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    for var in [
        "STORYBLOK_TOKEN",
        "STORYBLOK_AUTO_CACHE_INVALIDATION",
        "STORYBLOK_BASE_URL",
        "STORYBLOK_TIMEOUT",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
